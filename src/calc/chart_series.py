"""Chart series derived from a monthly Dataset.

The Dataset only stores months. Daily values are spread from each month's
category amounts with a generator seeded from the Dataset seed and the
month, so the same Dataset always produces the same daily curve.
"""

import random
from datetime import date, timedelta
from typing import Dict, List, Optional

from calc.calendar_utils import days_in_month, long_day_label, month_label, short_day_label
from calc.series_generator import allocate_cents
from details.GenerationDetails import GenerationDetails
from model.ChartState import ChartSeries, StatisticsSeries
from model.EarningsData import CATEGORY_ORDER, Category, Dataset, PeriodRecord, from_cents, to_cents


WINDOW_ALL_TIME = 'allTime'
WINDOW_MONTH = 'month'
WINDOW_DAILY = 'daily'
WINDOW_STATISTICS = 'statistics'

DAILY_WINDOW_DAYS = 30


def month_seed(dataset_seed: int, year: int, month: int) -> int:
    return dataset_seed * 1000003 + year * 12 + month


def spread_cents(total_cents: int, days: int, rng: random.Random,
                 share_range=(0.2, 1.8), max_share: float = 0.4) -> List[int]:
    """Spread an amount across days with uneven but bounded daily shares.

    Each day takes the average of what is left times a random factor,
    capped at `max_share` of the remaining amount. The last day takes
    whatever remains, so the parts always sum to the total.
    """
    if days <= 0:
        return []
    parts = []
    remaining = total_cents
    for day in range(days):
        if day == days - 1:
            parts.append(remaining)
            break
        average = remaining / float(days - day)
        share = average * rng.uniform(*share_range)
        amount = int(round(min(share, remaining * max_share)))
        amount = max(0, min(amount, remaining))
        parts.append(amount)
        remaining -= amount
    return parts


def split_month_daily(record: PeriodRecord, days: int, seed: int,
                      details: GenerationDetails) -> Dict[Category, List[float]]:
    """Per-day category amounts for one monthly record.

    Args:
        record: Monthly PeriodRecord to spread
        days: Number of days to spread over (elapsed days for the current month)
        seed: Dataset seed
        details: GenerationDetails with the daily share range

    Returns:
        Dictionary mapping every category to a list of `days` daily amounts
    """
    rng = random.Random(month_seed(seed, record.year, record.month))
    daily = {}
    for category in CATEGORY_ORDER:
        cents = spread_cents(to_cents(record.amount(category)), days, rng,
                             details.daily_share, details.daily_max_share)
        daily[category] = [from_cents(c) for c in cents]
    return daily


def cumulative(values: List[float]) -> List[float]:
    """Running totals, summed in cents."""
    running = 0
    result = []
    for value in values:
        running += to_cents(value)
        result.append(from_cents(running))
    return result


def elapsed_days(record: PeriodRecord, today: date) -> int:
    """Days of the record's month that have data as of today."""
    total = days_in_month(record.year, record.month)
    if (record.year, record.month) == (today.year, today.month):
        return min(today.day, total)
    return total


class ChartSeriesBuilder:
    """Builds the series each chart window shows from one Dataset.

    Daily splits are memoized per month; a builder is tied to a single
    Dataset and is thrown away when the Dataset is replaced.
    """

    def __init__(self, dataset: Dataset, details: GenerationDetails, today: date):
        """Initialize the builder.

        Args:
            dataset: Monthly Dataset to derive from
            details: GenerationDetails (daily split ranges)
            today: Calendar day the charts are drawn for
        """
        self.dataset = dataset
        self.details = details
        self.today = today
        self._daily: Dict[tuple, Dict[Category, List[float]]] = {}

    def daily_for_month(self, year: int, month: int) -> Optional[Dict[Category, List[float]]]:
        """Per-day category amounts for a month, or None when it is not in the Dataset."""
        if (year, month) in self._daily:
            return self._daily[(year, month)]
        record = self.dataset.find_period(year, month)
        if record is None:
            return None
        daily = split_month_daily(record, elapsed_days(record, self.today), self.dataset.seed, self.details)
        self._daily[(year, month)] = daily
        return daily

    def day_amounts(self, day: date) -> Dict[Category, float]:
        """Category amounts for a single calendar day (zeros outside the Dataset)."""
        daily = self.daily_for_month(day.year, day.month)
        amounts = {}
        for category in CATEGORY_ORDER:
            values = daily.get(category, []) if daily else []
            amounts[category] = values[day.day - 1] if day.day - 1 < len(values) else 0.0
        return amounts

    def all_time(self) -> ChartSeries:
        """Cumulative per-month series over the whole timeline."""
        records = self.dataset.records
        values = {category: cumulative([r.amount(category) for r in records]) for category in CATEGORY_ORDER}
        return ChartSeries(
            window=WINDOW_ALL_TIME,
            labels=[month_label(r.start) for r in records],
            dates=[r.start for r in records],
            values=values,
        )

    def month(self, year: Optional[int] = None, month: Optional[int] = None) -> ChartSeries:
        """Cumulative per-day series for one month.

        The x axis always spans the whole month; the current month's values
        stop at today.
        """
        year = year or self.today.year
        month = month or self.today.month
        total_days = days_in_month(year, month)
        dates = [date(year, month, d) for d in range(1, total_days + 1)]
        labels = [short_day_label(d) for d in dates]

        daily = self.daily_for_month(year, month)
        if daily is None:
            return ChartSeries(window=WINDOW_MONTH, labels=labels, dates=dates,
                               values={c: [] for c in CATEGORY_ORDER}, label_count=total_days)
        return ChartSeries(
            window=WINDOW_MONTH,
            labels=labels,
            dates=dates,
            values={category: cumulative(daily[category]) for category in CATEGORY_ORDER},
            label_count=total_days,
        )

    def last_days(self, days: int = DAILY_WINDOW_DAYS) -> ChartSeries:
        """Cumulative per-day series over the last `days` days ending today."""
        dates = [self.today - timedelta(days=days - 1 - i) for i in range(days)]
        per_day = [self.day_amounts(d) for d in dates]
        values = {category: cumulative([amounts[category] for amounts in per_day]) for category in CATEGORY_ORDER}
        return ChartSeries(
            window=WINDOW_DAILY,
            labels=[long_day_label(d) for d in dates],
            dates=dates,
            values=values,
        )

    def statistics(self, days: int = DAILY_WINDOW_DAYS) -> StatisticsSeries:
        """Per-day net earnings and transaction counts over the last `days` days.

        A month's transaction count is spread over its days in proportion to
        each day's net.
        """
        dates = [self.today - timedelta(days=days - 1 - i) for i in range(days)]
        counts_by_month: Dict[tuple, List[int]] = {}
        earnings = []
        counts = []
        for day in dates:
            amounts = self.day_amounts(day)
            earnings.append(from_cents(sum(to_cents(v) for v in amounts.values())))

            key = (day.year, day.month)
            if key not in counts_by_month:
                counts_by_month[key] = self._month_counts(day.year, day.month)
            month_counts = counts_by_month[key]
            counts.append(month_counts[day.day - 1] if day.day - 1 < len(month_counts) else 0)

        return StatisticsSeries(
            labels=[long_day_label(d) for d in dates],
            dates=dates,
            earnings=earnings,
            counts=counts,
        )

    def _month_counts(self, year: int, month: int) -> List[int]:
        record = self.dataset.find_period(year, month)
        daily = self.daily_for_month(year, month)
        if record is None or daily is None:
            return []
        day_count = len(daily[CATEGORY_ORDER[0]])
        nets = [sum(daily[c][i] for c in CATEGORY_ORDER) for i in range(day_count)]
        return allocate_cents(record.transaction_count, nets)

    def build(self, window: str) -> ChartSeries:
        """Series for a line-chart window by name."""
        if window == WINDOW_ALL_TIME:
            return self.all_time()
        if window == WINDOW_MONTH:
            return self.month()
        if window == WINDOW_DAILY:
            return self.last_days()
        raise ValueError(f"Unknown chart window: {window!r}")
