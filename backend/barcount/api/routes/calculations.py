"""Stateless reconciliation endpoints: calculate lines and reports from posted data."""

from fastapi import APIRouter

from barcount.schemas.session import (
    LineCalculation,
    LineCalculationRequest,
    SessionReport,
    SessionReportRequest,
)
from barcount.services.calculation_service import (
    calculate_line_fields,
    calculate_session_lines,
    summarize_session,
)
from barcount.services.premix_service import with_effective_costs

router = APIRouter()


@router.post("/line", response_model=LineCalculation)
def calculate_line(body: LineCalculationRequest):
    """Derived figures for a single line. A missing product gives all zeros."""
    return calculate_line_fields(body.line, body.product)


@router.post("/session-report", response_model=SessionReport)
def calculate_session_report(body: SessionReportRequest):
    """Calculate every posted line and summarize them."""
    products_by_id = {p.id: p for p in with_effective_costs(body.products)}
    calculated = calculate_session_lines(body.lines, products_by_id)
    return summarize_session(calculated, products_by_id, top_n=body.top_n)
