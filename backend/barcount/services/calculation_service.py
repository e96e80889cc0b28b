"""Line reconciliation: theoretical stock and variance for inventory lines.

Every figure is computed in milliliters (stock) or portions (sales) and coerced
through ``to_number_or_default``, so partially filled lines never raise.

    theoretical_end_stock = start_stock + purchases - sales * portion_volume_ml
    difference_volume     = end_stock - theoretical_end_stock
    difference_money      = difference_volume * cost_per_bottle / bottle_volume_ml
    difference_percent    = difference_volume / (sales * portion_volume_ml) * 100
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional, Protocol
import logging

from barcount.core.config import settings
from barcount.core.numbers import finite_or_zero, is_zero, to_number_or_default
from barcount.schemas.product import Product
from barcount.schemas.session import (
    CalculatedInventoryLine,
    InventoryLine,
    LineCalculation,
    SessionReport,
    VarianceAnalysisInput,
    VarianceAnalysisResult,
    VarianceSeverity,
)

logger = logging.getLogger(__name__)


def _value(obj: Any, name: str) -> float:
    """Read a numeric field from a schema, ORM row or plain dict."""
    if obj is None:
        return 0.0
    if isinstance(obj, Mapping):
        raw = obj.get(name)
    else:
        raw = getattr(obj, name, None)
    return to_number_or_default(raw)


def calculate_theoretical_end_stock(line: Any, product: Any) -> float:
    """Expected ending stock in ml; 0 when the product is unknown."""
    if product is None:
        return 0.0
    sales_volume = _value(line, "sales") * _value(product, "portion_volume_ml")
    return finite_or_zero(_value(line, "start_stock") + _value(line, "purchases") - sales_volume)


def calculate_difference_volume(end_stock: float, theoretical_end_stock: float) -> float:
    """Actual minus theoretical. Negative = loss, positive = surplus."""
    return finite_or_zero(to_number_or_default(end_stock) - to_number_or_default(theoretical_end_stock))


def cost_of_volume(volume_ml: float, product: Any) -> float:
    """Cost of ``volume_ml`` of a product at its bottle price; 0 without a usable bottle volume."""
    if product is None:
        return 0.0
    bottle_volume_ml = _value(product, "bottle_volume_ml")
    if is_zero(bottle_volume_ml) or bottle_volume_ml < 0:
        return 0.0
    cost_per_ml = _value(product, "cost_per_bottle") / bottle_volume_ml
    return finite_or_zero(to_number_or_default(volume_ml) * cost_per_ml)


def calculate_difference_money(difference_volume: float, product: Any) -> float:
    """Monetary value of a volume difference."""
    return cost_of_volume(difference_volume, product)


def calculate_difference_percent(difference_volume: float, line: Any, product: Any) -> float:
    """Variance as a percentage of the volume sold.

    Percentages are only meaningful against throughput: with nothing sold
    (no sales, or a zero portion volume) the result is 0 whatever the difference.
    """
    if product is None:
        return 0.0
    volume_sold = _value(line, "sales") * _value(product, "portion_volume_ml")
    if is_zero(volume_sold):
        return 0.0
    return finite_or_zero(to_number_or_default(difference_volume) / volume_sold * 100)


def calculate_line_fields(line: Any, product: Any) -> LineCalculation:
    """Compute all derived fields of an inventory line.

    Args:
        line: Inventory line (schema, ORM row or dict) with start_stock,
            purchases, sales and end_stock; absent figures count as 0.
        product: Product profile, or None when it could not be resolved.

    Returns:
        LineCalculation with the four derived figures, all finite.
    """
    if product is None:
        return LineCalculation()

    theoretical = calculate_theoretical_end_stock(line, product)
    difference_volume = calculate_difference_volume(_value(line, "end_stock"), theoretical)

    return LineCalculation(
        theoretical_end_stock=theoretical,
        difference_volume=difference_volume,
        difference_money=calculate_difference_money(difference_volume, product),
        difference_percent=calculate_difference_percent(difference_volume, line, product),
    )


class VarianceThresholds:
    """Thresholds for flagging a line's variance."""

    def __init__(
        self,
        warning_percent: Optional[float] = None,
        critical_percent: Optional[float] = None,
        warning_volume_ml: Optional[float] = None,
        critical_volume_ml: Optional[float] = None,
    ):
        self.warning_percent = settings.variance_warning_percent if warning_percent is None else warning_percent
        self.critical_percent = settings.variance_critical_percent if critical_percent is None else critical_percent
        self.warning_volume_ml = settings.variance_warning_volume_ml if warning_volume_ml is None else warning_volume_ml
        self.critical_volume_ml = settings.variance_critical_volume_ml if critical_volume_ml is None else critical_volume_ml


def classify_variance(
    difference_volume: float,
    difference_percent: float,
    thresholds: Optional[VarianceThresholds] = None,
) -> VarianceSeverity:
    """Flag a variance by comparing its absolute volume and percent to thresholds."""
    thresholds = thresholds or VarianceThresholds()
    abs_volume = abs(to_number_or_default(difference_volume))
    abs_percent = abs(to_number_or_default(difference_percent))

    if abs_volume >= thresholds.critical_volume_ml or abs_percent >= thresholds.critical_percent:
        return VarianceSeverity.CRITICAL
    if abs_volume >= thresholds.warning_volume_ml or abs_percent >= thresholds.warning_percent:
        return VarianceSeverity.WARNING
    return VarianceSeverity.OK


def calculate_session_lines(
    lines: Iterable[InventoryLine],
    products_by_id: Dict[str, Product],
    thresholds: Optional[VarianceThresholds] = None,
) -> List[CalculatedInventoryLine]:
    """Calculate every line of a session. Returns new objects; inputs untouched."""
    thresholds = thresholds or VarianceThresholds()
    calculated = []

    for line in lines:
        product = products_by_id.get(line.product_id)
        if product is None:
            logger.warning(f"Product {line.product_id} not found for inventory line {line.id}")

        fields = calculate_line_fields(line, product)
        severity = classify_variance(fields.difference_volume, fields.difference_percent, thresholds)
        data = line.model_dump(include=set(InventoryLine.model_fields))
        data.update(fields.model_dump(), severity=severity)
        calculated.append(CalculatedInventoryLine(**data))

    return calculated


def summarize_session(
    calculated_lines: List[CalculatedInventoryLine],
    products_by_id: Dict[str, Product],
    top_n: Optional[int] = None,
    session_id: Optional[str] = None,
) -> SessionReport:
    """Totals, cost percentage and biggest losses for calculated lines."""
    if top_n is None:
        top_n = settings.top_losses_count

    total_variance = 0.0
    total_loss = 0.0
    total_surplus = 0.0
    total_revenue = 0.0
    total_cost = 0.0

    for line in calculated_lines:
        product = products_by_id.get(line.product_id)
        money = line.difference_money
        total_variance += money
        if money < 0:
            total_loss += money
        else:
            total_surplus += money

        if product is None:
            continue
        total_revenue += line.sales * product.selling_price_per_portion
        total_cost += cost_of_volume(line.sales * product.portion_volume_ml, product)

    cost_percent = 0.0 if is_zero(total_revenue) else finite_or_zero(total_cost / total_revenue * 100)

    losses = sorted(
        (line for line in calculated_lines if line.difference_money < 0),
        key=lambda line: line.difference_money,
    )

    report = SessionReport(
        session_id=session_id,
        total_lines=len(calculated_lines),
        total_variance=total_variance,
        total_loss=total_loss,
        total_surplus=total_surplus,
        total_revenue=total_revenue,
        total_cost=total_cost,
        cost_percent=cost_percent,
        lines_ok=sum(1 for line in calculated_lines if line.severity == VarianceSeverity.OK),
        lines_warning=sum(1 for line in calculated_lines if line.severity == VarianceSeverity.WARNING),
        lines_critical=sum(1 for line in calculated_lines if line.severity == VarianceSeverity.CRITICAL),
        top_losses=losses[:top_n],
        lines=list(calculated_lines),
    )

    logger.info(
        f"Session report {session_id or '-'}: {report.total_lines} lines, "
        f"variance {report.total_variance:.2f}, {report.lines_critical} critical"
    )
    return report


def build_variance_analysis_input(
    line: CalculatedInventoryLine,
    product: Product,
) -> VarianceAnalysisInput:
    """Numeric summary of one line for a narrative-analysis collaborator."""
    return VarianceAnalysisInput(
        product_name=product.name,
        start_stock=line.start_stock,
        purchases=line.purchases,
        sales=line.sales,
        end_stock=line.end_stock,
        theoretical_end_stock=line.theoretical_end_stock,
        difference_volume=line.difference_volume,
        difference_money=line.difference_money,
        difference_percent=line.difference_percent,
    )


class VarianceAnalyzer(Protocol):
    """Black-box narrative analysis: numbers in, text and a severity label out."""

    def analyze(self, data: VarianceAnalysisInput) -> VarianceAnalysisResult:
        ...
