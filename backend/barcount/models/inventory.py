"""Inventory session and line models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum as SQLEnum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from barcount.db.base import Base, TimestampMixin, new_id
from barcount.schemas.session import SessionStatus, VarianceSeverity


class InventorySession(Base, TimestampMixin):
    """An inventory counting session."""

    __tablename__ = "inventory_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[SessionStatus] = mapped_column(
        SQLEnum(SessionStatus), default=SessionStatus.IN_PROGRESS, nullable=False
    )
    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    # Relationships
    lines: Mapped[list["InventoryLine"]] = relationship(
        "InventoryLine",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="InventoryLine.position",
    )
    purchase_orders: Mapped[list["PurchaseOrder"]] = relationship(
        "PurchaseOrder", back_populates="session"
    )


class InventoryLine(Base, TimestampMixin):
    """One product's figures in a session, with the last calculated variance."""

    __tablename__ = "inventory_lines"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    session_id: Mapped[str] = mapped_column(
        ForeignKey("inventory_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[str] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Entered by staff
    start_stock: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    purchases: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    sales: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    end_stock: Mapped[float] = mapped_column(Float, default=0, nullable=False)

    # Calculated
    theoretical_end_stock: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    difference_volume: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    difference_money: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    difference_percent: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    severity: Mapped[Optional[VarianceSeverity]] = mapped_column(SQLEnum(VarianceSeverity), nullable=True)

    # Relationships
    session: Mapped["InventorySession"] = relationship("InventorySession", back_populates="lines")
    product: Mapped["Product"] = relationship("Product", back_populates="inventory_lines")


# Forward references
from barcount.models.product import Product
from barcount.models.order import PurchaseOrder
