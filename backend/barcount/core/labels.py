"""Display labels for categories, sub-categories and session statuses.

Sub-category labels are keyed by parent category first: the same sub-category
key (e.g. "White") means different things for rum and for wine.
"""

from typing import Dict, Optional

from barcount.schemas.product import Product, ProductCategory, ProductListItem
from barcount.schemas.session import InventorySessionResponse, SessionStatus


CATEGORY_LABELS: Dict[ProductCategory, str] = {
    ProductCategory.WHISKEY: "Виски",
    ProductCategory.RUM: "Ром",
    ProductCategory.VODKA: "Водка",
    ProductCategory.GIN: "Джин",
    ProductCategory.TEQUILA: "Текила",
    ProductCategory.LIQUEUR: "Ликер",
    ProductCategory.WINE: "Вино",
    ProductCategory.BEER: "Пиво",
    ProductCategory.SYRUP: "Сироп",
    ProductCategory.BRANDY: "Бренди",
    ProductCategory.VERMOUTH: "Вермут",
    ProductCategory.ABSINTHE: "Абсент",
    ProductCategory.BITTERS: "Биттер",
    ProductCategory.PREMIX: "Премикс",
    ProductCategory.OTHER: "Другое",
}

SUBCATEGORY_LABELS: Dict[ProductCategory, Dict[str, str]] = {
    ProductCategory.WHISKEY: {
        "Scotch": "Шотландский",
        "Irish": "Ирландский",
        "Bourbon": "Бурбон",
        "Rye": "Ржаной",
        "Japanese": "Японский",
    },
    ProductCategory.RUM: {
        "White": "Белый",
        "Gold": "Золотой",
        "Dark": "Темный",
        "Spiced": "Пряный",
    },
    ProductCategory.WINE: {
        "Red": "Красное",
        "White": "Белое",
        "Rose": "Розовое",
        "Sparkling": "Игристое",
    },
    ProductCategory.BEER: {
        "Lager": "Лагер",
        "Ale": "Эль",
        "Stout": "Стаут",
        "Wheat": "Пшеничное",
    },
    ProductCategory.TEQUILA: {
        "Blanco": "Бланко",
        "Reposado": "Репосадо",
        "Anejo": "Аньехо",
    },
}

STATUS_LABELS: Dict[SessionStatus, str] = {
    SessionStatus.DRAFT: "Черновик",
    SessionStatus.IN_PROGRESS: "В процессе",
    SessionStatus.COMPLETED: "Завершено",
}


def translate_category(category: ProductCategory) -> str:
    return CATEGORY_LABELS.get(category, str(category.value if hasattr(category, "value") else category))


def translate_subcategory(category: ProductCategory, sub_category: Optional[str]) -> str:
    """Label for ``sub_category`` within ``category``; unknown keys pass through."""
    if not sub_category:
        return ""
    return SUBCATEGORY_LABELS.get(category, {}).get(sub_category, sub_category)


def translate_status(status: SessionStatus) -> str:
    return STATUS_LABELS.get(status, str(status.value if hasattr(status, "value") else status))


def build_product_display_name(name: str, bottle_volume_ml: Optional[float]) -> str:
    """``"Jameson"`` + 700 -> ``"Jameson 700 мл"``; volume omitted when unknown."""
    base = " ".join((name or "").split())
    if not bottle_volume_ml or bottle_volume_ml <= 0:
        return base
    volume = int(bottle_volume_ml) if float(bottle_volume_ml).is_integer() else bottle_volume_ml
    return f"{base} {volume} мл"


def with_display_labels(product: Product) -> ProductListItem:
    """Catalog entry for ``product`` with its name and category labels filled in."""
    return ProductListItem(
        **product.model_dump(),
        display_name=build_product_display_name(product.name, product.bottle_volume_ml),
        category_label=translate_category(product.category),
        sub_category_label=translate_subcategory(product.category, product.sub_category),
    )


def with_status_label(session: InventorySessionResponse) -> InventorySessionResponse:
    return session.model_copy(update={"status_label": translate_status(session.status)})
