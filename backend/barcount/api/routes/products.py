"""Product catalog routes."""

from typing import List

from fastapi import APIRouter, HTTPException, Query, status

from barcount.core.labels import with_display_labels
from barcount.db.session import DbSession
from barcount.schemas.product import (
    DedupeRequest,
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    Product,
    ProductCreate,
    ProductListItem,
)
from barcount.services.dedup_service import dedupe_products_by_name, find_similar_product
from barcount.services.repository import InventoryRepository

router = APIRouter()


@router.get("/", response_model=List[ProductListItem])
def list_products(db: DbSession, unique: bool = Query(False)):
    """Catalog with premix costs resolved and display labels; ``unique`` collapses duplicates."""
    products = InventoryRepository(db).get_products()
    if unique:
        products = dedupe_products_by_name(products)
    return [with_display_labels(p) for p in products]


@router.post("/", response_model=Product, status_code=status.HTTP_201_CREATED)
def create_product(
    body: ProductCreate,
    db: DbSession,
    allow_duplicate: bool = Query(False),
):
    """Create a product, refusing names that look like an existing product."""
    repo = InventoryRepository(db)
    if not allow_duplicate:
        existing = find_similar_product(
            body.name,
            repo.get_products(resolve_premix_costs=False),
            bottle_volume_ml=body.bottle_volume_ml,
        )
        if existing is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Product looks like a duplicate of '{existing.name}' ({existing.id})",
            )
    return repo.create_product(body)


@router.post("/dedupe", response_model=List[Product])
def dedupe_products(body: DedupeRequest):
    """One product per normalized name and bottle volume."""
    return dedupe_products_by_name(body.products)


@router.post("/check-duplicate", response_model=DuplicateCheckResponse)
def check_duplicate(body: DuplicateCheckRequest):
    """Existing product that ``name`` most likely duplicates, if any."""
    duplicate = find_similar_product(
        body.name,
        body.existing,
        threshold=body.threshold,
        bottle_volume_ml=body.bottle_volume_ml,
    )
    return DuplicateCheckResponse(duplicate=duplicate)
