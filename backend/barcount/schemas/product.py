"""Product, premix ingredient and supplier schemas."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from barcount.core.numbers import to_number_or_default


class ProductCategory(str, Enum):
    """Beverage type of a product."""
    WHISKEY = "Whiskey"
    RUM = "Rum"
    VODKA = "Vodka"
    GIN = "Gin"
    TEQUILA = "Tequila"
    LIQUEUR = "Liqueur"
    WINE = "Wine"
    BEER = "Beer"
    SYRUP = "Syrup"
    BRANDY = "Brandy"
    VERMOUTH = "Vermouth"
    ABSINTHE = "Absinthe"
    BITTERS = "Bitters"
    PREMIX = "Premix"
    OTHER = "Other"


class CostCalculationMode(str, Enum):
    """Whether a premix's cost per bottle is derived from its ingredients."""
    AUTO = "auto"
    MANUAL = "manual"


# ============== Premix ==============

class PremixIngredient(BaseModel):
    """One ingredient of a premix: which product and how much of it per bottle."""
    model_config = ConfigDict(from_attributes=True)

    product_id: str
    volume_ml: float = Field(default=0.0, ge=0)
    ratio: float = Field(default=0.0, ge=0)  # volume_ml / premix bottle volume at last recompute

    @field_validator("volume_ml", "ratio", mode="before")
    @classmethod
    def coerce_number(cls, v):
        return to_number_or_default(v)


# ============== Product ==============

class ProductBase(BaseModel):
    """Fields shared by product create/read schemas."""
    name: str = Field(..., min_length=1)
    category: ProductCategory = ProductCategory.OTHER
    sub_category: Optional[str] = None

    # Economics
    bottle_volume_ml: float = Field(default=0.0, ge=0)
    cost_per_bottle: float = Field(default=0.0, ge=0)
    selling_price_per_portion: float = Field(default=0.0, ge=0)
    portion_volume_ml: float = Field(default=0.0, ge=0)  # 0 = no portion-based variance

    # Purchasing
    reorder_point_ml: Optional[float] = Field(default=None, ge=0)
    reorder_quantity: Optional[float] = Field(default=None, ge=0)
    default_supplier_id: Optional[str] = None

    is_active: bool = True

    # Premix
    is_premix: bool = False
    premix_ingredients: Optional[List[PremixIngredient]] = None
    cost_calculation_mode: CostCalculationMode = CostCalculationMode.AUTO

    @field_validator(
        "bottle_volume_ml",
        "cost_per_bottle",
        "selling_price_per_portion",
        "portion_volume_ml",
        mode="before",
    )
    @classmethod
    def coerce_required_number(cls, v):
        return to_number_or_default(v)

    @field_validator("reorder_point_ml", "reorder_quantity", mode="before")
    @classmethod
    def coerce_optional_number(cls, v):
        if v is None or v == "":
            return None
        number = to_number_or_default(v, fallback=float("nan"))
        return None if number != number else number


class ProductCreate(ProductBase):
    """Schema for creating a product."""
    id: Optional[str] = None


class Product(ProductBase):
    """A fully validated product as the calculation services receive it."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    updated_at: Optional[datetime] = None


class ProductListItem(Product):
    """Catalog entry with its display labels."""
    display_name: str = ""
    category_label: str = ""
    sub_category_label: str = ""


# ============== Supplier ==============

class SupplierBase(BaseModel):
    name: str = Field(..., min_length=1)
    contact_person: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class SupplierResponse(SupplierBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: Optional[datetime] = None


# ============== Requests ==============

class DedupeRequest(BaseModel):
    products: List[Product]


class DuplicateCheckRequest(BaseModel):
    name: str
    bottle_volume_ml: Optional[float] = None
    threshold: float = Field(default=0.85, gt=0, le=1)
    existing: List[Product]


class DuplicateCheckResponse(BaseModel):
    duplicate: Optional[Product] = None


class PremixCostRequest(BaseModel):
    premix: Product
    ingredients: List[Product] = []


class PremixCostResponse(BaseModel):
    product_id: str
    cost: float


class PremixExpandRequest(BaseModel):
    premix: Product
    draw_volume_ml: float = Field(..., ge=0)


class IngredientDraw(BaseModel):
    """Volume of one ingredient drawn when pouring a given volume of premix."""
    product_id: str
    volume_ml: int
