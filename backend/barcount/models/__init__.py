"""SQLAlchemy models."""

from barcount.models.supplier import Supplier
from barcount.models.product import Product, PremixIngredient
from barcount.models.inventory import InventorySession, InventoryLine
from barcount.models.order import PurchaseOrder, PurchaseOrderLine
