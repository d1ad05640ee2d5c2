import calendar
from datetime import date, timedelta
from typing import List


MONTH_NAMES_SHORT = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_start(day: date) -> date:
    return day.replace(day=1)


def add_months(day: date, months: int) -> date:
    """First day of the month `months` away from `day`'s month."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def months_between(older: date, newer: date) -> int:
    """Whole calendar months from older's month to newer's month."""
    return (newer.year - older.year) * 12 + (newer.month - older.month)


def period_starts(end: date, count: int, granularity: str) -> List[date]:
    """Start dates of `count` consecutive periods ending with the one containing `end`.

    Returns:
        Dates ordered oldest-first
    """
    if granularity == 'month':
        last = month_start(end)
        return [add_months(last, -(count - 1 - i)) for i in range(count)]
    if granularity == 'day':
        return [end - timedelta(days=count - 1 - i) for i in range(count)]
    raise ValueError(f"Unknown granularity: {granularity!r}")


def period_count_from_anchor(anchor: date, end: date, granularity: str) -> int:
    """Number of periods from the anchor period through the end period, inclusive."""
    if granularity == 'month':
        count = months_between(anchor, end) + 1
    elif granularity == 'day':
        count = (end - anchor).days + 1
    else:
        raise ValueError(f"Unknown granularity: {granularity!r}")
    if count < 1:
        raise ValueError(f"Oldest anchor {anchor.isoformat()} is after {end.isoformat()}")
    return count


def elapsed_fraction(end: date, granularity: str) -> float:
    """How much of the period containing `end` has elapsed (1.0 for days)."""
    if granularity == 'month':
        return end.day / float(days_in_month(end.year, end.month))
    return 1.0


def short_day_label(day: date) -> str:
    """'05 Mar 26' style label used on month charts."""
    return f"{day.day:02d} {MONTH_NAMES_SHORT[day.month - 1]} {day.year % 100:02d}"


def long_day_label(day: date) -> str:
    """'Mar 5, 2026' style label used on daily charts and tooltips."""
    return f"{MONTH_NAMES_SHORT[day.month - 1]} {day.day}, {day.year}"


def month_label(day: date) -> str:
    """'Mar 2026' style label used on the all-time chart."""
    return f"{MONTH_NAMES_SHORT[day.month - 1]} {day.year}"
