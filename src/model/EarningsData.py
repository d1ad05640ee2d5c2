"""Data model for generated earnings.

This module contains the data classes that hold a generated earnings
timeline. A Dataset is produced by the series generator, stored by the
generation cache, and read (never mutated) by every chart that renders it.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Tuple


class Category(Enum):
    """Closed set of earnings categories."""
    SUBSCRIPTIONS = 'subscriptions'
    TIPS = 'tips'
    POSTS = 'posts'
    MESSAGES = 'messages'
    REFERRALS = 'referrals'
    STREAMS = 'streams'

    @classmethod
    def parse(cls, name: str) -> 'Category':
        """Look up a category by its lowercase name."""
        try:
            return cls(name.lower())
        except (ValueError, AttributeError):
            raise ValueError(f"Unknown category: {name!r}")


# Display/draw order when no category is active
CATEGORY_ORDER: List[Category] = [
    Category.SUBSCRIPTIONS,
    Category.TIPS,
    Category.POSTS,
    Category.MESSAGES,
    Category.REFERRALS,
    Category.STREAMS,
]

GRANULARITIES = ('month', 'day')


def to_cents(amount: float) -> int:
    return int(round(amount * 100))


def from_cents(cents: int) -> float:
    return cents / 100.0


@dataclass(frozen=True)
class PeriodRecord:
    """Earnings for one period (a day or a month) of the timeline.

    The category amounts always sum to the net amount to the cent.
    """
    index: int
    granularity: str
    start: date
    net: float
    gross: float
    categories: Dict[Category, float] = field(default_factory=dict)
    transaction_count: int = 0

    @property
    def month(self) -> int:
        return self.start.month

    @property
    def year(self) -> int:
        return self.start.year

    def amount(self, category: Category) -> float:
        """Get the amount for a category (0 for categories not present)."""
        return self.categories.get(category, 0.0)

    def category_total(self) -> float:
        """Sum of the category amounts, computed in cents."""
        return from_cents(sum(to_cents(v) for v in self.categories.values()))


@dataclass(frozen=True)
class GenerationKey:
    """Deterministic fingerprint of everything a generation depends on.

    Two keys that render to the same string may share cached output; any
    difference forces regeneration.
    """
    version: str
    granularity: str
    period_count: int
    calendar_day: date
    min_balance: float = 0.0
    min_pending: float = 0.0
    total_net: Optional[float] = None
    oldest_anchor: Optional[date] = None
    override_gross: Optional[float] = None

    @property
    def minimum(self) -> float:
        """Minimum net required for the most recent period."""
        return self.min_balance + self.min_pending

    def as_string(self) -> str:
        parts = [
            self.version,
            self.granularity,
            str(self.period_count),
            self.calendar_day.isoformat(),
            f"{self.min_balance:.2f}",
            f"{self.min_pending:.2f}",
            '-' if self.total_net is None else f"{self.total_net:.2f}",
            '-' if self.oldest_anchor is None else self.oldest_anchor.isoformat(),
            '-' if self.override_gross is None else f"{self.override_gross:.2f}",
        ]
        return '_'.join(parts)

    def __str__(self) -> str:
        return self.as_string()


@dataclass(frozen=True)
class Dataset:
    """A complete generated timeline.

    Records are ordered oldest-first. The Dataset is immutable; regeneration
    always produces a new instance.
    """
    records: Tuple[PeriodRecord, ...]
    key: Optional[GenerationKey] = None
    pattern: str = 'consistent'
    seed: int = 0
    profile: str = 'messages-dominant'
    from_preset: bool = False

    @property
    def net(self) -> float:
        return from_cents(sum(to_cents(r.net) for r in self.records))

    @property
    def gross(self) -> float:
        return from_cents(sum(to_cents(r.gross) for r in self.records))

    @property
    def granularity(self) -> str:
        return self.records[0].granularity if self.records else 'month'

    @property
    def most_recent(self) -> Optional[PeriodRecord]:
        return self.records[-1] if self.records else None

    @property
    def oldest(self) -> Optional[PeriodRecord]:
        return self.records[0] if self.records else None

    def newest_first(self) -> List[PeriodRecord]:
        return list(reversed(self.records))

    def is_empty(self) -> bool:
        return not self.records

    def category_totals(self) -> Dict[Category, float]:
        """All-time total per category."""
        totals = {}
        for category in CATEGORY_ORDER:
            cents = sum(to_cents(r.amount(category)) for r in self.records)
            totals[category] = from_cents(cents)
        return totals

    def find_period(self, year: int, month: int) -> Optional[PeriodRecord]:
        """Get the monthly record for a given year and month."""
        for record in self.records:
            if record.start.year == year and record.start.month == month:
                return record
        return None

    def with_key(self, key: GenerationKey, from_preset: Optional[bool] = None) -> 'Dataset':
        """Copy of this Dataset bound to a different generation key."""
        if from_preset is None:
            from_preset = self.from_preset
        return replace(self, key=key, from_preset=from_preset)
