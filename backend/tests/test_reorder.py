"""Tests for the holiday-aware reorder planner."""

import logging
from datetime import date

import pytest

from barcount.schemas.purchase_order import Holiday
from barcount.schemas.session import InventoryLine
from barcount.services.reorder_service import (
    NoReorderNeeded,
    ReorderConfig,
    ReorderPlanningError,
    calculate_reorder_quantity,
    create_purchase_orders_from_session,
)

QUIET_DAY = date(2024, 7, 15)
HOLIDAY_EVE = date(2024, 3, 5)


@pytest.fixture
def holidays():
    return [Holiday(date=date(2024, 3, 8), name="Международный женский день")]


@pytest.fixture
def config():
    return ReorderConfig(pre_holiday_days=5, holiday_multiplier=2)


@pytest.fixture
def products(make_product):
    return [
        make_product("whiskey", name="Jameson", reorder_point_ml=700, reorder_quantity=6,
                     default_supplier_id="sup-a", cost_per_bottle=1400),
        make_product("gin", name="Beefeater", reorder_point_ml=1000, reorder_quantity=3,
                     default_supplier_id="sup-b", cost_per_bottle=1100),
        make_product("rum", name="Bacardi", reorder_point_ml=500, reorder_quantity=2.5,
                     default_supplier_id="sup-a", cost_per_bottle=900),
        make_product("syrup", name="Monin", reorder_point_ml=300, reorder_quantity=4),
        make_product("beer", name="Tap beer"),
    ]


def plan_for(lines, products, holidays, config, today, **kwargs):
    return create_purchase_orders_from_session(
        lines, products, holidays=holidays, today=today, config=config, **kwargs
    )


class TestCalculateReorderQuantity:
    def test_below_reorder_point(self, make_product):
        product = make_product(reorder_point_ml=700, reorder_quantity=6)
        assert calculate_reorder_quantity(InventoryLine(product_id="p1", end_stock=300), product) == 6

    def test_at_reorder_point_does_not_trigger(self, make_product):
        product = make_product(reorder_point_ml=700, reorder_quantity=6)
        assert calculate_reorder_quantity(InventoryLine(product_id="p1", end_stock=700), product) is None

    def test_multiplier_rounds_up(self, make_product):
        product = make_product(reorder_point_ml=700, reorder_quantity=2.5)
        assert calculate_reorder_quantity(InventoryLine(product_id="p1"), product, 1.0) == 3
        assert calculate_reorder_quantity(InventoryLine(product_id="p1"), product, 2.0) == 5

    def test_without_reorder_settings(self, make_product):
        line = InventoryLine(product_id="p1", end_stock=0)
        assert calculate_reorder_quantity(line, make_product()) is None
        assert calculate_reorder_quantity(line, make_product(reorder_point_ml=500)) is None


class TestCreatePurchaseOrdersFromSession:
    def test_quantity_without_holiday(self, make_product, holidays, config):
        product = make_product("whiskey", reorder_point_ml=700, reorder_quantity=6, default_supplier_id="sup-a")
        lines = [InventoryLine(product_id="whiskey", end_stock=200)]

        plan = plan_for(lines, [product], holidays, config, QUIET_DAY)

        assert plan.holiday_bonus is False
        assert plan.multiplier == 1
        assert plan.orders[0].lines[0].quantity == 6

    def test_quantity_before_holiday(self, make_product, holidays, config):
        product = make_product("whiskey", reorder_point_ml=700, reorder_quantity=6, default_supplier_id="sup-a")
        lines = [InventoryLine(product_id="whiskey", end_stock=200)]

        plan = plan_for(lines, [product], holidays, config, HOLIDAY_EVE)

        assert plan.holiday_bonus is True
        assert plan.holiday_name == "Международный женский день"
        assert plan.orders[0].lines[0].quantity == 12

    def test_grouped_by_supplier(self, products, holidays, config):
        lines = [
            InventoryLine(product_id="whiskey", end_stock=100),
            InventoryLine(product_id="gin", end_stock=200),
            InventoryLine(product_id="rum", end_stock=0),
        ]

        plan = plan_for(lines, products, holidays, config, QUIET_DAY)

        assert [o.supplier_id for o in plan.orders] == ["sup-a", "sup-b"]
        sup_a = plan.orders[0]
        assert [(l.product_id, l.quantity, l.cost_per_item) for l in sup_a.lines] == [
            ("whiskey", 6, 1400),
            ("rum", 3, 900),
        ]
        assert sup_a.total_cost == 6 * 1400 + 3 * 900
        assert plan.created_count == 2

    def test_supplier_assignment_overrides_default(self, products, holidays, config):
        lines = [InventoryLine(product_id="whiskey", end_stock=100)]

        plan = plan_for(lines, products, holidays, config, QUIET_DAY, supplier_assignment={"whiskey": "sup-z"})

        assert [o.supplier_id for o in plan.orders] == ["sup-z"]

    def test_products_without_supplier_are_reported(self, products, holidays, config, caplog):
        lines = [
            InventoryLine(product_id="whiskey", end_stock=100),
            InventoryLine(product_id="syrup", end_stock=0),
        ]

        with caplog.at_level(logging.WARNING):
            plan = plan_for(lines, products, holidays, config, QUIET_DAY)

        assert plan.skipped_count == 1
        assert plan.skipped_without_supplier[0].product_id == "syrup"
        assert plan.skipped_without_supplier[0].quantity == 4
        assert all(l.product_id != "syrup" for o in plan.orders for l in o.lines)
        assert "no assigned supplier" in caplog.text

    def test_only_unassigned_products_still_produce_a_plan(self, products, holidays, config):
        lines = [InventoryLine(product_id="syrup", end_stock=0)]

        plan = plan_for(lines, products, holidays, config, QUIET_DAY)

        assert plan.orders == []
        assert plan.skipped_count == 1

    def test_nothing_to_order(self, products, holidays, config):
        lines = [
            InventoryLine(product_id="whiskey", end_stock=5000),
            InventoryLine(product_id="beer", end_stock=0),
            InventoryLine(product_id="unknown", end_stock=0),
        ]

        with pytest.raises(NoReorderNeeded) as exc_info:
            plan_for(lines, products, holidays, config, QUIET_DAY)

        assert exc_info.value.lines_checked == 3
        assert isinstance(exc_info.value, ReorderPlanningError)

    def test_empty_session(self, products, holidays, config):
        with pytest.raises(NoReorderNeeded):
            plan_for([], products, holidays, config, QUIET_DAY)

    def test_custom_multiplier(self, products, holidays):
        lines = [InventoryLine(product_id="gin", end_stock=0)]
        config = ReorderConfig(pre_holiday_days=5, holiday_multiplier=1.5)

        plan = plan_for(lines, products, holidays, config, HOLIDAY_EVE)

        assert plan.orders[0].lines[0].quantity == 5

    def test_defaults_from_settings(self):
        config = ReorderConfig()
        assert config.pre_holiday_days == 5
        assert config.holiday_multiplier == 2.0
