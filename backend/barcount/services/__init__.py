# Services module

from barcount.services.calculation_service import (
    VarianceThresholds,
    calculate_line_fields,
    calculate_session_lines,
    classify_variance,
    summarize_session,
)
from barcount.services.premix_service import (
    PremixError,
    NotAPremixError,
    InvalidPremixVolumeError,
    calculate_premix_cost,
    expand_premix_to_ingredients,
    with_effective_costs,
)
from barcount.services.dedup_service import dedupe_products_by_name, find_similar_product
from barcount.services.holiday_service import DEFAULT_HOLIDAYS, get_upcoming_holiday, load_holidays
from barcount.services.reorder_service import (
    ReorderConfig,
    ReorderPlanningError,
    NoReorderNeeded,
    create_purchase_orders_from_session,
)
