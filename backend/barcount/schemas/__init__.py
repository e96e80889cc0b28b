"""Pydantic schemas shared by the calculation services, repository and API."""

from barcount.schemas.product import (
    CostCalculationMode,
    IngredientDraw,
    PremixIngredient,
    Product,
    ProductCategory,
    ProductCreate,
    ProductListItem,
)
from barcount.schemas.purchase_order import (
    Holiday,
    PurchaseOrderDraft,
    PurchaseOrderDraftLine,
    PurchaseOrderStatus,
    ReorderPlan,
    SkippedReorder,
)
from barcount.schemas.session import (
    CalculatedInventoryLine,
    InventoryLine,
    LineCalculation,
    SessionReport,
    SessionStatus,
    VarianceAnalysisInput,
    VarianceAnalysisResult,
    VarianceSeverity,
)
