"""Counting session routes: lines, completion, reports and reorders."""

from typing import List, Optional
import logging

from fastapi import APIRouter, HTTPException, status

from barcount.core.labels import with_status_label
from barcount.db.session import DbSession
from barcount.schemas.purchase_order import (
    CreatePurchaseOrdersRequest,
    CreatePurchaseOrdersResponse,
    PurchaseOrderResponse,
)
from barcount.schemas.session import (
    InventoryLine,
    InventoryLineUpdate,
    InventorySessionCreate,
    InventorySessionResponse,
    SessionReport,
)
from barcount.services.reorder_service import (
    NoReorderNeeded,
    ReorderConfig,
    create_purchase_orders_from_session,
)
from barcount.services.repository import (
    InventoryRepository,
    RecordNotFoundError,
    SessionLockedError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_found(e: RecordNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _locked(e: SessionLockedError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


# ==================== Sessions ====================

@router.post("/", response_model=InventorySessionResponse, status_code=status.HTTP_201_CREATED)
def create_session(body: InventorySessionCreate, db: DbSession):
    return with_status_label(InventoryRepository(db).create_session(body.name, body.lines))


@router.get("/{session_id}", response_model=InventorySessionResponse)
def get_session(session_id: str, db: DbSession):
    try:
        return with_status_label(InventoryRepository(db).get_session(session_id))
    except RecordNotFoundError as e:
        raise _not_found(e)


@router.get("/{session_id}/lines", response_model=List[InventoryLine])
def get_session_lines(session_id: str, db: DbSession):
    try:
        return InventoryRepository(db).get_session_lines(session_id)
    except RecordNotFoundError as e:
        raise _not_found(e)


@router.patch("/lines/{line_id}", response_model=InventoryLine)
def update_line(line_id: str, body: InventoryLineUpdate, db: DbSession):
    """Update the figures of one line. Completed sessions refuse changes."""
    try:
        return InventoryRepository(db).update_line(line_id, body)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except SessionLockedError as e:
        raise _locked(e)


# ==================== Reports ====================

@router.post("/{session_id}/complete", response_model=SessionReport)
def complete_session(session_id: str, db: DbSession):
    """Store calculated figures for every line and close the session."""
    try:
        return InventoryRepository(db).complete_session(session_id)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except SessionLockedError as e:
        raise _locked(e)


@router.get("/{session_id}/report", response_model=SessionReport)
def get_session_report(session_id: str, db: DbSession, top_n: Optional[int] = None):
    try:
        return InventoryRepository(db).get_session_report(session_id, top_n=top_n)
    except RecordNotFoundError as e:
        raise _not_found(e)


# ==================== Purchase orders ====================

@router.post("/{session_id}/purchase-orders", response_model=CreatePurchaseOrdersResponse)
def create_purchase_orders(
    session_id: str,
    db: DbSession,
    body: Optional[CreatePurchaseOrdersRequest] = None,
):
    """
    Draft purchase orders for every product of the session below its reorder point.

    Returns ``status="no_reorder_needed"`` when nothing has to be ordered and
    ``status="skipped_no_supplier"`` when every product to reorder lacks a supplier.
    """
    body = body or CreatePurchaseOrdersRequest()
    repo = InventoryRepository(db)

    try:
        lines = repo.get_session_lines(session_id)
    except RecordNotFoundError as e:
        raise _not_found(e)

    products = repo.get_products({line.product_id for line in lines})

    try:
        plan = create_purchase_orders_from_session(
            lines,
            products,
            supplier_assignment=body.supplier_assignment,
            today=body.today,
            config=ReorderConfig(),
        )
    except NoReorderNeeded as e:
        return CreatePurchaseOrdersResponse(status="no_reorder_needed", message=str(e))

    order_ids = repo.save_reorder_plan(plan, session_id=session_id)

    message = None
    if plan.skipped_count:
        message = f"{plan.skipped_count} products need reordering but have no supplier assigned"

    return CreatePurchaseOrdersResponse(
        status="created" if plan.created_count else "skipped_no_supplier",
        order_ids=order_ids,
        created_count=plan.created_count,
        skipped_without_supplier=plan.skipped_count,
        holiday_bonus=plan.holiday_bonus,
        holiday_name=plan.holiday_name,
        message=message,
    )


@router.get("/{session_id}/purchase-orders", response_model=List[PurchaseOrderResponse])
def list_purchase_orders(session_id: str, db: DbSession):
    repo = InventoryRepository(db)
    try:
        repo.get_session(session_id)
    except RecordNotFoundError as e:
        raise _not_found(e)
    return repo.get_purchase_orders(session_id)
