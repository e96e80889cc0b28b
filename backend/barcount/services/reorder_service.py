"""Reorder service: turn a counted session into draft purchase orders.

A product is reordered when its counted end stock falls below its reorder
point. The recommended quantity is the product's reorder quantity, boosted by
the holiday multiplier when a holiday is close, and rounded up to a whole unit.
Recommendations are grouped into one draft per supplier.
"""

import math
from datetime import date, datetime
from typing import Dict, Iterable, List, Mapping, Optional, Union
import logging

from barcount.core.config import settings
from barcount.core.numbers import to_number_or_default
from barcount.schemas.product import Product
from barcount.schemas.purchase_order import (
    Holiday,
    PurchaseOrderDraft,
    PurchaseOrderDraftLine,
    ReorderPlan,
    SkippedReorder,
)
from barcount.schemas.session import InventoryLine
from barcount.services.holiday_service import DEFAULT_HOLIDAYS, get_upcoming_holiday

logger = logging.getLogger(__name__)


class ReorderPlanningError(Exception):
    """Base class for planning outcomes that are not a normal set of orders."""


class NoReorderNeeded(ReorderPlanningError):
    """Raised when every product is at or above its reorder point."""

    def __init__(self, lines_checked: int):
        self.lines_checked = lines_checked
        super().__init__(
            f"No reorder needed: all {lines_checked} products are above their reorder point"
        )


class ReorderConfig:
    """Configuration for reorder planning."""

    def __init__(
        self,
        pre_holiday_days: Optional[int] = None,
        holiday_multiplier: Optional[float] = None,
    ):
        self.pre_holiday_days = settings.pre_holiday_days if pre_holiday_days is None else pre_holiday_days
        self.holiday_multiplier = (
            settings.holiday_multiplier if holiday_multiplier is None else holiday_multiplier
        )


def calculate_reorder_quantity(
    line: InventoryLine,
    product: Product,
    multiplier: float = 1.0,
) -> Optional[int]:
    """
    Recommended order quantity for one line, or None when no reorder is due.

    Products without both a reorder point and a reorder quantity have no
    automation configured and never trigger.
    """
    if not product.reorder_point_ml or not product.reorder_quantity:
        return None

    end_stock = to_number_or_default(line.end_stock)
    if end_stock >= product.reorder_point_ml:
        return None

    return math.ceil(product.reorder_quantity * multiplier)


def create_purchase_orders_from_session(
    lines: Iterable[InventoryLine],
    products: Iterable[Product],
    supplier_assignment: Optional[Mapping[str, str]] = None,
    holidays: Optional[Iterable[Holiday]] = None,
    today: Optional[Union[date, datetime]] = None,
    config: Optional[ReorderConfig] = None,
) -> ReorderPlan:
    """
    Build draft purchase orders for every product below its reorder point.

    Args:
        lines: Counted inventory lines of the session.
        products: Product profiles (premix costs already resolved).
        supplier_assignment: Optional product_id -> supplier_id override; falls
            back to each product's default_supplier_id.
        holidays: Holiday calendar; defaults to DEFAULT_HOLIDAYS.
        today: Planning date; defaults to the current date.
        config: Holiday window and multiplier; defaults come from settings.

    Returns:
        ReorderPlan with one draft per supplier. Products that need ordering
        but have no supplier are listed in ``skipped_without_supplier``.

    Raises:
        NoReorderNeeded: no product triggered a reorder.
    """
    config = config or ReorderConfig()
    supplier_assignment = supplier_assignment or {}
    holidays = DEFAULT_HOLIDAYS if holidays is None else list(holidays)
    today = today or date.today()

    holiday_name = get_upcoming_holiday(today, holidays, config.pre_holiday_days)
    multiplier = config.holiday_multiplier if holiday_name else 1.0
    if holiday_name:
        logger.info(f"Holiday '{holiday_name}' ahead, reorder quantities x{multiplier}")

    products_by_id: Dict[str, Product] = {p.id: p for p in products}

    orders: Dict[str, PurchaseOrderDraft] = {}
    skipped: List[SkippedReorder] = []
    lines_checked = 0
    triggered = 0

    for line in lines:
        lines_checked += 1
        product = products_by_id.get(line.product_id)
        if product is None:
            logger.debug(f"Skipping line for unknown product {line.product_id}")
            continue

        quantity = calculate_reorder_quantity(line, product, multiplier)
        if quantity is None:
            continue
        triggered += 1

        supplier_id = supplier_assignment.get(product.id) or product.default_supplier_id
        if not supplier_id:
            skipped.append(SkippedReorder(product_id=product.id, quantity=quantity))
            continue

        if supplier_id not in orders:
            orders[supplier_id] = PurchaseOrderDraft(supplier_id=supplier_id)
        orders[supplier_id].lines.append(
            PurchaseOrderDraftLine(
                product_id=product.id,
                quantity=quantity,
                cost_per_item=product.cost_per_bottle,
            )
        )

    if triggered == 0:
        raise NoReorderNeeded(lines_checked)

    if skipped:
        logger.warning(
            f"Skipping {len(skipped)} products with no assigned supplier: "
            f"{', '.join(s.product_id for s in skipped)}"
        )

    plan = ReorderPlan(
        orders=list(orders.values()),
        skipped_without_supplier=skipped,
        holiday_bonus=holiday_name is not None,
        holiday_name=holiday_name,
        multiplier=multiplier,
    )

    logger.info(
        f"Reorder plan: {triggered} products, {plan.created_count} supplier orders, "
        f"{plan.skipped_count} skipped"
    )
    return plan
