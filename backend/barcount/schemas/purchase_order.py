"""Schemas for holidays, reorder planning and purchase orders."""

import datetime as dt
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class PurchaseOrderStatus(str, Enum):
    """Status of a purchase order."""
    DRAFT = "draft"
    ORDERED = "ordered"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class Holiday(BaseModel):
    """A calendar date with a name; static reference data for the planner."""
    date: dt.date
    name: str = Field(..., min_length=1)


# ============== Draft purchase orders ==============

class PurchaseOrderDraftLine(BaseModel):
    """Recommended order line for one product."""
    product_id: str
    quantity: int = Field(..., gt=0)
    cost_per_item: float = Field(default=0.0, ge=0)


class PurchaseOrderDraft(BaseModel):
    """One draft order for one supplier."""
    supplier_id: str
    status: PurchaseOrderStatus = PurchaseOrderStatus.DRAFT
    lines: List[PurchaseOrderDraftLine] = []

    @computed_field
    @property
    def total_cost(self) -> float:
        return sum(line.quantity * line.cost_per_item for line in self.lines)


class SkippedReorder(BaseModel):
    """A product that needs reordering but has no supplier to order from."""
    product_id: str
    quantity: int
    reason: str = "no_supplier"


class ReorderPlan(BaseModel):
    """Outcome of a reorder planning run."""
    orders: List[PurchaseOrderDraft] = []
    skipped_without_supplier: List[SkippedReorder] = []
    holiday_bonus: bool = False
    holiday_name: Optional[str] = None
    multiplier: float = 1.0

    @computed_field
    @property
    def created_count(self) -> int:
        return len(self.orders)

    @computed_field
    @property
    def skipped_count(self) -> int:
        return len(self.skipped_without_supplier)


class CreatePurchaseOrdersRequest(BaseModel):
    """Optional overrides for planning purchase orders from a stored session."""
    supplier_assignment: Optional[Dict[str, str]] = None
    today: Optional[dt.date] = None


class CreatePurchaseOrdersResponse(BaseModel):
    status: str  # "created" | "skipped_no_supplier" | "no_reorder_needed"
    order_ids: List[str] = []
    created_count: int = 0
    skipped_without_supplier: int = 0
    holiday_bonus: bool = False
    holiday_name: Optional[str] = None
    message: Optional[str] = None


# ============== Stored purchase orders ==============

class PurchaseOrderLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_id: str
    quantity: int
    cost_per_item: float
    received_quantity: int = 0


class PurchaseOrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    supplier_id: str
    status: PurchaseOrderStatus
    session_id: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    lines: List[PurchaseOrderLineResponse] = []
