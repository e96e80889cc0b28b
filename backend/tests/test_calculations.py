"""Tests for line reconciliation and session reports."""

import pytest

from barcount.schemas.session import (
    CalculatedInventoryLine,
    InventoryLine,
    VarianceSeverity,
)
from barcount.services.calculation_service import (
    VarianceThresholds,
    build_variance_analysis_input,
    calculate_difference_money,
    calculate_difference_percent,
    calculate_line_fields,
    calculate_session_lines,
    calculate_theoretical_end_stock,
    classify_variance,
    summarize_session,
)


@pytest.fixture
def whiskey(make_product):
    return make_product("whiskey", name="Jameson", bottle_volume_ml=700, cost_per_bottle=2000, portion_volume_ml=40)


class TestCalculateLineFields:
    """Theoretical stock and variance for a single line."""

    def test_balanced_line(self, whiskey):
        line = InventoryLine(product_id="whiskey", start_stock=1000, purchases=500, sales=10, end_stock=1100)

        result = calculate_line_fields(line, whiskey)

        assert result.theoretical_end_stock == 1100
        assert result.difference_volume == 0
        assert result.difference_money == 0
        assert result.difference_percent == 0

    def test_loss(self, whiskey):
        line = InventoryLine(product_id="whiskey", start_stock=1000, purchases=500, sales=10, end_stock=1000)

        result = calculate_line_fields(line, whiskey)

        assert result.theoretical_end_stock == 1100
        assert result.difference_volume == -100
        assert result.difference_money == pytest.approx(-285.714, abs=0.01)
        assert result.difference_percent == pytest.approx(-25)

    def test_surplus_is_positive(self, whiskey):
        line = InventoryLine(product_id="whiskey", start_stock=700, sales=5, end_stock=560)

        result = calculate_line_fields(line, whiskey)

        assert result.theoretical_end_stock == 500
        assert result.difference_volume == 60
        assert result.difference_money > 0

    def test_missing_product_gives_zeros(self):
        line = InventoryLine(product_id="gone", start_stock=1000, purchases=500, sales=10, end_stock=900)

        result = calculate_line_fields(line, None)

        assert result.model_dump() == {
            "theoretical_end_stock": 0.0,
            "difference_volume": 0.0,
            "difference_money": 0.0,
            "difference_percent": 0.0,
        }

    def test_negative_start_stock_is_not_clamped(self, whiskey):
        line = InventoryLine(product_id="whiskey", start_stock=-200, purchases=700, sales=5, end_stock=250)

        result = calculate_line_fields(line, whiskey)

        assert result.theoretical_end_stock == 300
        assert result.difference_volume == -50

    def test_zero_bottle_volume_gives_zero_money(self, make_product):
        product = make_product(bottle_volume_ml=0, cost_per_bottle=2000, portion_volume_ml=40)
        line = InventoryLine(product_id="p1", start_stock=1000, sales=10, end_stock=100)

        result = calculate_line_fields(line, product)

        assert result.difference_volume == -500
        assert result.difference_money == 0

    def test_zero_portion_volume_gives_zero_percent(self, make_product):
        product = make_product(portion_volume_ml=0)
        line = InventoryLine(product_id="p1", start_stock=1000, sales=10, end_stock=800)

        result = calculate_line_fields(line, product)

        assert result.difference_volume == -200
        assert result.difference_percent == 0

    def test_no_sales_gives_zero_percent(self, whiskey):
        line = InventoryLine(product_id="whiskey", start_stock=1000, end_stock=900)

        assert calculate_line_fields(line, whiskey).difference_percent == 0

    def test_partial_line_counts_missing_figures_as_zero(self, whiskey):
        line = InventoryLine(product_id="whiskey", start_stock="1000", purchases=None, sales="", end_stock="abc")

        result = calculate_line_fields(line, whiskey)

        assert result.theoretical_end_stock == 1000
        assert result.difference_volume == -1000

    def test_accepts_plain_dicts(self):
        line = {"start_stock": "500", "sales": 2, "end_stock": 400}
        product = {"portion_volume_ml": 50, "bottle_volume_ml": 1000, "cost_per_bottle": 1000}

        result = calculate_line_fields(line, product)

        assert result.theoretical_end_stock == 400
        assert result.difference_volume == 0

    def test_outputs_are_always_finite(self, make_product):
        product = make_product(bottle_volume_ml=1e-300, cost_per_bottle=1e300, portion_volume_ml=1)
        line = InventoryLine(product_id="p1", start_stock=1e308, purchases=1e308, sales=1, end_stock=0)

        result = calculate_line_fields(line, product)

        for value in result.model_dump().values():
            assert value == value  # not NaN
            assert abs(value) != float("inf")


class TestLineSteps:
    def test_theoretical_end_stock_is_exact(self, whiskey):
        line = InventoryLine(product_id="whiskey", start_stock=333.3, purchases=0.1, sales=3)
        assert calculate_theoretical_end_stock(line, whiskey) == 333.3 + 0.1 - 3 * 40

    def test_money_without_product(self):
        assert calculate_difference_money(-100, None) == 0

    def test_percent_without_product(self):
        assert calculate_difference_percent(-100, InventoryLine(product_id="x", sales=3), None) == 0


class TestClassifyVariance:
    @pytest.fixture
    def thresholds(self):
        return VarianceThresholds(
            warning_percent=10, critical_percent=20, warning_volume_ml=50, critical_volume_ml=200
        )

    @pytest.mark.parametrize("volume,percent,expected", [
        (0, 0, VarianceSeverity.OK),
        (-20, -5, VarianceSeverity.OK),
        (-60, -5, VarianceSeverity.WARNING),
        (30, 12, VarianceSeverity.WARNING),
        (-250, -5, VarianceSeverity.CRITICAL),
        (-10, -25, VarianceSeverity.CRITICAL),
    ])
    def test_thresholds(self, thresholds, volume, percent, expected):
        assert classify_variance(volume, percent, thresholds) == expected


class TestSessionReport:
    """Session-wide calculation and summary."""

    @pytest.fixture
    def products_by_id(self, make_product):
        return {
            "whiskey": make_product("whiskey", name="Jameson", bottle_volume_ml=700, cost_per_bottle=2000,
                                    portion_volume_ml=40, selling_price_per_portion=400),
            "gin": make_product("gin", name="Beefeater", bottle_volume_ml=1000, cost_per_bottle=1000,
                                portion_volume_ml=50, selling_price_per_portion=300),
            "rum": make_product("rum", name="Bacardi", bottle_volume_ml=1000, cost_per_bottle=1200,
                                portion_volume_ml=50, selling_price_per_portion=300),
        }

    @pytest.fixture
    def lines(self):
        return [
            InventoryLine(id="l1", product_id="whiskey", start_stock=1000, purchases=500, sales=10, end_stock=1000),
            InventoryLine(id="l2", product_id="gin", start_stock=1000, sales=4, end_stock=600),
            InventoryLine(id="l3", product_id="rum", start_stock=1000, sales=2, end_stock=700),
            InventoryLine(id="l4", product_id="missing", start_stock=10, end_stock=5),
        ]

    def test_calculate_session_lines(self, lines, products_by_id):
        calculated = calculate_session_lines(lines, products_by_id)

        assert [c.id for c in calculated] == ["l1", "l2", "l3", "l4"]
        assert all(isinstance(c, CalculatedInventoryLine) for c in calculated)
        assert calculated[0].difference_volume == -100
        assert calculated[0].severity == VarianceSeverity.CRITICAL
        assert calculated[1].difference_volume == -200
        assert calculated[3].theoretical_end_stock == 0

    def test_inputs_are_not_mutated(self, lines, products_by_id):
        before = [line.model_dump() for line in lines]
        calculate_session_lines(lines, products_by_id)
        assert [line.model_dump() for line in lines] == before

    def test_recalculating_calculated_lines(self, lines, products_by_id):
        first = calculate_session_lines(lines, products_by_id)
        second = calculate_session_lines(first, products_by_id)
        assert [c.model_dump() for c in second] == [c.model_dump() for c in first]

    def test_missing_product_is_logged(self, lines, products_by_id, caplog):
        calculate_session_lines(lines, products_by_id)
        assert "Product missing not found" in caplog.text

    def test_summary_totals(self, lines, products_by_id):
        calculated = calculate_session_lines(lines, products_by_id)

        report = summarize_session(calculated, products_by_id, top_n=2, session_id="s1")

        # whiskey -100 ml (-285.71), gin -200 ml (-200), rum -200 ml (-240)
        assert report.session_id == "s1"
        assert report.total_lines == 4
        assert report.total_loss == pytest.approx(-725.714, abs=0.01)
        assert report.total_surplus == 0
        assert report.total_variance == pytest.approx(report.total_loss)
        assert report.total_revenue == pytest.approx(10 * 400 + 4 * 300 + 2 * 300)
        assert report.total_cost == pytest.approx(400 * 2000 / 700 + 200 + 100 * 1.2)
        assert report.cost_percent == pytest.approx(report.total_cost / report.total_revenue * 100)
        assert [line.product_id for line in report.top_losses] == ["whiskey", "rum"]

    def test_summary_of_nothing(self):
        report = summarize_session([], {})

        assert report.total_lines == 0
        assert report.cost_percent == 0
        assert report.top_losses == []

    def test_severity_counts(self, lines, products_by_id):
        calculated = calculate_session_lines(lines, products_by_id)
        report = summarize_session(calculated, products_by_id)

        assert report.lines_ok + report.lines_warning + report.lines_critical == report.total_lines
        assert report.lines_ok == 1

    def test_variance_analysis_input(self, lines, products_by_id):
        calculated = calculate_session_lines(lines, products_by_id)

        data = build_variance_analysis_input(calculated[0], products_by_id["whiskey"])

        assert data.product_name == "Jameson"
        assert data.theoretical_end_stock == 1100
        assert data.difference_percent == pytest.approx(-25)
