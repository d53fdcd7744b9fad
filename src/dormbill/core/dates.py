"""Date helpers for billing months."""

from __future__ import annotations

from calendar import monthrange
from datetime import date

from dateutil.relativedelta import relativedelta

MONTHS_THAI = {
    1: "มกราคม",
    2: "กุมภาพันธ์",
    3: "มีนาคม",
    4: "เมษายน",
    5: "พฤษภาคม",
    6: "มิถุนายน",
    7: "กรกฎาคม",
    8: "สิงหาคม",
    9: "กันยายน",
    10: "ตุลาคม",
    11: "พฤศจิกายน",
    12: "ธันวาคม",
}

# Buddhist Era year offset used on printed Thai invoices
BUDDHIST_ERA_OFFSET = 543


def month_start(day: date) -> date:
    """Normalizes any date to the first day of its month."""
    return day.replace(day=1)


def month_end(day: date) -> date:
    return day.replace(day=monthrange(day.year, day.month)[1])


def previous_month(day: date) -> date:
    return month_start(day) - relativedelta(months=1)


def parse_month(value: str) -> date:
    """Parses a ``YYYY-MM`` string into the first day of that month."""
    year, month = value.split("-")
    return date(int(year), int(month), 1)


def format_period_for_display(period_date: date) -> str:
    """Formats a date period into 'Month YYYY' with a Thai month and B.E. year."""
    return f"{MONTHS_THAI[period_date.month]} {period_date.year + BUDDHIST_ERA_OFFSET}"
