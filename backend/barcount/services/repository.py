"""Persistence boundary between the database and the calculation services.

Rows are validated into schemas on the way out, so the services only ever see
typed, coerced values. Writes go through here too, and invalidate the product
cache.
"""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple
import logging

from pydantic import ValidationError
from sqlalchemy.orm import Session, selectinload

from barcount import models
from barcount.core.cache import TTLCache
from barcount.core.config import settings
from barcount.schemas.product import Product, ProductCreate, SupplierBase, SupplierResponse
from barcount.schemas.purchase_order import ReorderPlan
from barcount.schemas.session import (
    CalculatedInventoryLine,
    InventoryLine,
    InventoryLineUpdate,
    InventorySessionResponse,
    SessionReport,
    SessionStatus,
)
from barcount.services.calculation_service import calculate_session_lines, summarize_session
from barcount.services.premix_service import recalculate_ingredient_ratios, with_effective_costs

logger = logging.getLogger(__name__)

PRODUCTS_PREFIX = "products:"

# Shared by every repository instance in the process
product_cache = TTLCache(default_ttl_seconds=settings.product_cache_ttl_seconds)


class RepositoryError(Exception):
    """Base class for persistence failures."""


class RecordNotFoundError(RepositoryError):
    """Raised when a referenced row does not exist."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found")


class SessionLockedError(RepositoryError):
    """Raised when a completed session is modified."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} is completed and can no longer be changed")


class InventoryRepository:
    """Reads and writes products, sessions and purchase orders."""

    def __init__(self, db: Session, cache: Optional[TTLCache] = None):
        self.db = db
        self.cache = cache if cache is not None else product_cache

    # ==================== Products ====================

    def _load_products(self) -> List[Product]:
        rows = (
            self.db.query(models.Product)
            .options(selectinload(models.Product.premix_ingredients))
            .order_by(models.Product.name)
            .all()
        )
        products = []
        for row in rows:
            try:
                products.append(Product.model_validate(row))
            except ValidationError as e:
                logger.warning(f"Skipping invalid product {row.id}: {e.error_count()} errors")
        return products

    def get_products(
        self,
        ids: Optional[Iterable[str]] = None,
        resolve_premix_costs: bool = True,
    ) -> List[Product]:
        """
        Validated products, optionally restricted to ``ids``.

        With ``resolve_premix_costs`` auto-costed premixes carry the cost derived
        from their ingredients. Resolution runs over the whole catalog so that
        ingredients outside ``ids`` are still found.
        """
        key = f"{PRODUCTS_PREFIX}all"
        products = self.cache.get(key)
        if products is None:
            products = self._load_products()
            self.cache.set(key, products)

        if resolve_premix_costs:
            products = with_effective_costs(products)

        if ids is None:
            return list(products)
        wanted = set(ids)
        return [p for p in products if p.id in wanted]

    def get_products_by_id(self, ids: Optional[Iterable[str]] = None) -> Dict[str, Product]:
        return {p.id: p for p in self.get_products(ids)}

    def get_product(self, product_id: str) -> Optional[Product]:
        products = self.get_products([product_id])
        return products[0] if products else None

    def create_product(self, data: ProductCreate) -> Product:
        """Insert a product; premix ingredient ratios are recomputed from volumes."""
        fields = data.model_dump(exclude={"premix_ingredients", "id"})
        row = models.Product(**fields)
        if data.id:
            row.id = data.id

        if data.premix_ingredients:
            # Ratios depend on the premix bottle volume, so compute them from the draft
            draft = Product(id=data.id or "new", **data.model_dump(exclude={"id"}))
            for position, ingredient in enumerate(recalculate_ingredient_ratios(draft)):
                row.premix_ingredients.append(
                    models.PremixIngredient(
                        product_id=ingredient.product_id,
                        position=position,
                        volume_ml=ingredient.volume_ml,
                        ratio=ingredient.ratio,
                    )
                )

        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        self.cache.invalidate(PRODUCTS_PREFIX)

        logger.info(f"Created product {row.id} '{row.name}'")
        return Product.model_validate(row)

    def create_supplier(self, data: SupplierBase) -> SupplierResponse:
        row = models.Supplier(**data.model_dump())
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return SupplierResponse.model_validate(row)

    # ==================== Sessions ====================

    def _get_session_row(self, session_id: str) -> models.InventorySession:
        row = self.db.get(models.InventorySession, session_id)
        if row is None:
            raise RecordNotFoundError("Session", session_id)
        return row

    def create_session(
        self,
        name: str,
        lines: Iterable[InventoryLine] = (),
        created_by: Optional[str] = None,
    ) -> InventorySessionResponse:
        row = models.InventorySession(name=name, created_by=created_by, status=SessionStatus.IN_PROGRESS)
        for position, line in enumerate(lines):
            row.lines.append(
                models.InventoryLine(
                    product_id=line.product_id,
                    position=position,
                    start_stock=line.start_stock,
                    purchases=line.purchases,
                    sales=line.sales,
                    end_stock=line.end_stock,
                )
            )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return InventorySessionResponse.model_validate(row)

    def get_session(self, session_id: str) -> InventorySessionResponse:
        return InventorySessionResponse.model_validate(self._get_session_row(session_id))

    def get_session_lines(self, session_id: str) -> List[InventoryLine]:
        self._get_session_row(session_id)
        rows = (
            self.db.query(models.InventoryLine)
            .filter(models.InventoryLine.session_id == session_id)
            .order_by(models.InventoryLine.position)
            .all()
        )
        return [InventoryLine.model_validate(row) for row in rows]

    def update_line(self, line_id: str, update: InventoryLineUpdate) -> InventoryLine:
        """Apply staff input to one line. Stored calculated figures are cleared."""
        row = self.db.get(models.InventoryLine, line_id)
        if row is None:
            raise RecordNotFoundError("Inventory line", line_id)
        if row.session.status == SessionStatus.COMPLETED:
            raise SessionLockedError(row.session_id)

        for field, value in update.model_dump(exclude_unset=True).items():
            setattr(row, field, value if value is not None else 0.0)

        row.theoretical_end_stock = None
        row.difference_volume = None
        row.difference_money = None
        row.difference_percent = None
        row.severity = None

        self.db.commit()
        self.db.refresh(row)
        return InventoryLine.model_validate(row)

    def calculate_session(
        self, session_id: str
    ) -> Tuple[List[CalculatedInventoryLine], Dict[str, Product]]:
        """Calculated lines of a session plus the products they were computed with."""
        lines = self.get_session_lines(session_id)
        products_by_id = self.get_products_by_id({line.product_id for line in lines})
        return calculate_session_lines(lines, products_by_id), products_by_id

    def save_calculated_lines(
        self,
        session_id: str,
        calculated: Iterable[CalculatedInventoryLine],
    ) -> int:
        """Write derived figures back to stored lines; returns how many were updated."""
        session = self._get_session_row(session_id)
        if session.status == SessionStatus.COMPLETED:
            raise SessionLockedError(session_id)

        rows = {row.id: row for row in session.lines}
        updated = 0
        for line in calculated:
            row = rows.get(line.id)
            if row is None:
                logger.warning(f"Calculated line {line.id} does not belong to session {session_id}")
                continue
            row.theoretical_end_stock = line.theoretical_end_stock
            row.difference_volume = line.difference_volume
            row.difference_money = line.difference_money
            row.difference_percent = line.difference_percent
            row.severity = line.severity
            updated += 1

        self.db.commit()
        return updated

    def get_session_report(self, session_id: str, top_n: Optional[int] = None) -> SessionReport:
        calculated, products_by_id = self.calculate_session(session_id)
        return summarize_session(calculated, products_by_id, top_n=top_n, session_id=session_id)

    def complete_session(self, session_id: str) -> SessionReport:
        """
        Recalculate and store every line, then close the session.

        Raises:
            RecordNotFoundError: unknown session.
            SessionLockedError: the session is already completed.
        """
        session = self._get_session_row(session_id)
        if session.status == SessionStatus.COMPLETED:
            raise SessionLockedError(session_id)

        calculated, products_by_id = self.calculate_session(session_id)
        self.save_calculated_lines(session_id, calculated)

        session.status = SessionStatus.COMPLETED
        session.closed_at = datetime.now(timezone.utc)
        self.db.commit()

        logger.info(f"Completed session {session_id} with {len(calculated)} lines")
        return summarize_session(calculated, products_by_id, session_id=session_id)

    # ==================== Purchase orders ====================

    def save_reorder_plan(
        self,
        plan: ReorderPlan,
        session_id: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> List[str]:
        """Store one purchase order per draft in a single transaction; returns the new ids."""
        rows = []
        try:
            for draft in plan.orders:
                order = models.PurchaseOrder(
                    supplier_id=draft.supplier_id,
                    session_id=session_id,
                    status=draft.status,
                    created_by=created_by,
                )
                for line in draft.lines:
                    order.lines.append(
                        models.PurchaseOrderLine(
                            product_id=line.product_id,
                            quantity=line.quantity,
                            cost_per_item=line.cost_per_item,
                            received_quantity=0,
                        )
                    )
                self.db.add(order)
                rows.append(order)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        order_ids = [row.id for row in rows]
        logger.info(f"Saved {len(order_ids)} purchase orders for session {session_id or '-'}")
        return order_ids

    def get_purchase_orders(self, session_id: str) -> List[models.PurchaseOrder]:
        return (
            self.db.query(models.PurchaseOrder)
            .options(selectinload(models.PurchaseOrder.lines))
            .filter(models.PurchaseOrder.session_id == session_id)
            .all()
        )
