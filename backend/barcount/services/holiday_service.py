"""Holiday calendar lookups for the reorder planner."""

import logging
from datetime import date, datetime
from typing import Iterable, List, Mapping, Optional, Union

from barcount.schemas.purchase_order import Holiday

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    # datetime is a subclass of date; drop the time part explicitly
    if isinstance(value, datetime):
        return value.date()
    return value


def _holidays(rows: Iterable[tuple]) -> List[Holiday]:
    return [Holiday(date=date.fromisoformat(d), name=n) for d, n in rows]


# Source: Russian production calendar 2024 (consultant.ru)
DEFAULT_HOLIDAYS: List[Holiday] = _holidays([
    # New Year holidays
    ("2024-01-01", "Новый год"),
    ("2024-01-02", "Новогодние каникулы"),
    ("2024-01-03", "Новогодние каникулы"),
    ("2024-01-04", "Новогодние каникулы"),
    ("2024-01-05", "Новогодние каникулы"),
    ("2024-01-06", "Новогодние каникулы"),
    ("2024-01-07", "Рождество Христово"),
    ("2024-01-08", "Новогодние каникулы"),
    ("2024-02-23", "День защитника Отечества"),
    ("2024-03-08", "Международный женский день"),
    # Spring and Labour Day
    ("2024-04-29", "Перенесенный выходной"),
    ("2024-04-30", "Перенесенный выходной"),
    ("2024-05-01", "Праздник Весны и Труда"),
    # Victory Day
    ("2024-05-09", "День Победы"),
    ("2024-05-10", "Перенесенный выходной"),
    ("2024-06-12", "День России"),
    ("2024-11-03", "Выходной (предпраздничный)"),
    ("2024-11-04", "День народного единства"),
    ("2024-12-29", "Перенесенный выходной"),
    ("2024-12-30", "Перенесенный выходной"),
    ("2024-12-31", "Новый год"),
])


def load_holidays(rows: Iterable[Mapping]) -> List[Holiday]:
    """Validate ``{"date": ..., "name": ...}`` rows and return them in date order."""
    holidays = [Holiday.model_validate(row) for row in rows]
    return sorted(holidays, key=lambda h: h.date)


def get_upcoming_holiday(
    check_date: DateLike,
    holidays: Iterable[Holiday],
    days_before: int = 3,
) -> Optional[str]:
    """
    Name of the earliest holiday falling on ``check_date`` or within
    ``days_before`` days after it, or None.

    Comparison is by calendar day only; past holidays are ignored. The calendar
    does not have to be sorted.
    """
    today = _as_date(check_date)
    for holiday in sorted(holidays, key=lambda h: _as_date(h.date)):
        diff_days = (_as_date(holiday.date) - today).days
        if 0 <= diff_days <= days_before:
            return holiday.name
    return None
