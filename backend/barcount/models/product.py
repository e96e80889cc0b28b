"""Product and premix ingredient models."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, Enum as SQLEnum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from barcount.db.base import Base, TimestampMixin, new_id
from barcount.schemas.product import CostCalculationMode, ProductCategory


class Product(Base, TimestampMixin):
    """Product in the catalog. Volumes in ml, money in the bar's currency."""

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    category: Mapped[ProductCategory] = mapped_column(
        SQLEnum(ProductCategory), default=ProductCategory.OTHER, nullable=False
    )
    sub_category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    bottle_volume_ml: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    cost_per_bottle: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    selling_price_per_portion: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    portion_volume_ml: Mapped[float] = mapped_column(Float, default=0, nullable=False)

    reorder_point_ml: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    reorder_quantity: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    default_supplier_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True, index=True
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_premix: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    cost_calculation_mode: Mapped[CostCalculationMode] = mapped_column(
        SQLEnum(CostCalculationMode), default=CostCalculationMode.AUTO, nullable=False
    )

    # Relationships
    default_supplier: Mapped[Optional["Supplier"]] = relationship("Supplier", back_populates="products")
    premix_ingredients: Mapped[list["PremixIngredient"]] = relationship(
        "PremixIngredient",
        foreign_keys="PremixIngredient.premix_id",
        back_populates="premix",
        cascade="all, delete-orphan",
        order_by="PremixIngredient.position",
    )
    inventory_lines: Mapped[list["InventoryLine"]] = relationship(
        "InventoryLine", back_populates="product"
    )


class PremixIngredient(Base):
    """One ingredient row of a premix recipe."""

    __tablename__ = "premix_ingredients"

    id: Mapped[int] = mapped_column(primary_key=True)
    premix_id: Mapped[str] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[str] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    volume_ml: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    ratio: Mapped[float] = mapped_column(Float, default=0, nullable=False)

    # Relationships
    premix: Mapped["Product"] = relationship(
        "Product", foreign_keys=[premix_id], back_populates="premix_ingredients"
    )
    product: Mapped["Product"] = relationship("Product", foreign_keys=[product_id])


# Forward references
from barcount.models.supplier import Supplier
from barcount.models.inventory import InventoryLine
