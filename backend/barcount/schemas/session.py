"""Schemas for counting sessions, inventory lines and variance reporting."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from barcount.core.numbers import to_number_or_default
from barcount.schemas.product import Product


class SessionStatus(str, Enum):
    """Status of a counting session."""
    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class VarianceSeverity(str, Enum):
    """Severity level of a stock discrepancy."""
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"


# ============== Inventory Line ==============

class InventoryLine(BaseModel):
    """One product's count within a session. Volumes in ml, sales in portions."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    product_id: str
    start_stock: float = 0.0
    purchases: float = 0.0
    sales: float = 0.0
    end_stock: float = 0.0

    @field_validator("start_stock", "purchases", "sales", "end_stock", mode="before")
    @classmethod
    def coerce_number(cls, v):
        return to_number_or_default(v)


class InventoryLineUpdate(BaseModel):
    """Partial update of the figures staff type in during a count."""
    start_stock: Optional[float] = None
    purchases: Optional[float] = None
    sales: Optional[float] = None
    end_stock: Optional[float] = None


class LineCalculation(BaseModel):
    """Derived figures for one inventory line."""
    theoretical_end_stock: float = 0.0
    difference_volume: float = 0.0
    difference_money: float = 0.0
    difference_percent: float = 0.0


class CalculatedInventoryLine(InventoryLine):
    """Inventory line together with its derived figures."""
    theoretical_end_stock: float = 0.0
    difference_volume: float = 0.0
    difference_money: float = 0.0
    difference_percent: float = 0.0
    severity: VarianceSeverity = VarianceSeverity.OK


# ============== Session ==============

class InventorySessionCreate(BaseModel):
    """A new counting session with its initial lines."""
    name: str = Field(..., min_length=1, max_length=255)
    lines: List[InventoryLine] = []


class InventorySessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    status: SessionStatus
    status_label: str = ""
    created_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None


class SessionReportRequest(BaseModel):
    """Lines plus the product profiles they refer to."""
    lines: List[InventoryLine]
    products: List[Product]
    top_n: Optional[int] = Field(default=None, ge=0)


class LineCalculationRequest(BaseModel):
    line: InventoryLine
    product: Optional[Product] = None


class SessionReport(BaseModel):
    """Totals and top losses for a set of calculated lines."""
    session_id: Optional[str] = None
    total_lines: int = 0
    total_variance: float = 0.0
    total_loss: float = 0.0
    total_surplus: float = 0.0
    total_revenue: float = 0.0
    total_cost: float = 0.0
    cost_percent: float = 0.0
    lines_ok: int = 0
    lines_warning: int = 0
    lines_critical: int = 0
    top_losses: List[CalculatedInventoryLine] = []
    lines: List[CalculatedInventoryLine] = []


# ============== Narrative analysis contract ==============

class VarianceAnalysisInput(BaseModel):
    """Structured numeric summary handed to a narrative-analysis collaborator."""
    product_name: str
    start_stock: float
    purchases: float
    sales: float
    end_stock: float
    theoretical_end_stock: float
    difference_volume: float
    difference_money: float
    difference_percent: float


class VarianceAnalysisResult(BaseModel):
    analysis: str
    severity: VarianceSeverity