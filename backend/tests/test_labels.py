"""Tests for display labels."""

import pytest

from barcount.core.labels import (
    build_product_display_name,
    translate_category,
    translate_status,
    translate_subcategory,
    with_display_labels,
)
from barcount.schemas.product import ProductCategory
from barcount.schemas.session import SessionStatus


class TestLabels:
    def test_category(self):
        assert translate_category(ProductCategory.WHISKEY) == "Виски"
        assert translate_category(ProductCategory.PREMIX) == "Премикс"

    def test_same_subcategory_key_differs_by_category(self):
        assert translate_subcategory(ProductCategory.RUM, "White") == "Белый"
        assert translate_subcategory(ProductCategory.WINE, "White") == "Белое"

    def test_unknown_subcategory_passes_through(self):
        assert translate_subcategory(ProductCategory.GIN, "London Dry") == "London Dry"
        assert translate_subcategory(ProductCategory.RUM, None) == ""

    def test_status(self):
        assert translate_status(SessionStatus.COMPLETED) == "Завершено"

    @pytest.mark.parametrize("name,volume,expected", [
        ("Jameson", 700, "Jameson 700 мл"),
        ("  Jameson  ", 700.0, "Jameson 700 мл"),
        ("Syrup", 250.5, "Syrup 250.5 мл"),
        ("Jameson", 0, "Jameson"),
        ("Jameson", None, "Jameson"),
    ])
    def test_display_name(self, name, volume, expected):
        assert build_product_display_name(name, volume) == expected


class TestLabelledResponses:
    def test_with_display_labels(self, make_product):
        product = make_product(
            "rum", name="Bacardi Carta Blanca", category=ProductCategory.RUM,
            sub_category="White", bottle_volume_ml=1000,
        )

        item = with_display_labels(product)

        assert item.id == "rum"
        assert item.cost_per_bottle == product.cost_per_bottle
        assert item.display_name == "Bacardi Carta Blanca 1000 мл"
        assert item.category_label == "Ром"
        assert item.sub_category_label == "Белый"
