"""Host-supplied configuration for earnings generation.

The host hands the core a plain dict (the persisted settings, camelCase
keys). `EarningsConfig.from_dict` reads it with defaults, the same way the
rest of the code reads JSON parameter files.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional, Union


DEFAULT_MONTHS = 12


def parse_amount(value: Union[str, float, int, None]) -> float:
    """Parse an amount typed into a settings field.

    Accepts plain numbers, '$1,234.56' style strings and K/M shorthand
    ('4.5K' -> 4500). Empty values parse to 0.
    """
    if value is None or value == '':
        return 0.0
    if isinstance(value, (int, float)):
        if value < 0:
            raise ValueError(f"Amount must not be negative: {value}")
        return float(value)

    text = str(value).strip().upper()
    match = re.match(r'^\$?([\d.,]+)\s*([KM])$', text)
    if match:
        multiplier = 1000 if match.group(2) == 'K' else 1000000
        return round(float(match.group(1).replace(',', '')) * multiplier, 2)

    cleaned = re.sub(r'[^\d.]', '', text)
    if not cleaned:
        return 0.0
    try:
        return float(cleaned)
    except ValueError:
        raise ValueError(f"Could not parse amount: {value!r}")


def parse_count(value: Union[str, int, None]) -> int:
    """Parse a count field ('1.2K' -> 1200). Empty values parse to 0."""
    return int(round(parse_amount(value)))


@dataclass(frozen=True)
class PeriodCounts:
    """How many periods of each kind to generate."""
    months: int = DEFAULT_MONTHS
    pending: int = 0
    complete: int = 0


@dataclass(frozen=True)
class EarningsConfig:
    """Constraints the generator must satisfy."""
    period_counts: PeriodCounts = PeriodCounts()
    min_balance: float = 0.0
    min_pending: float = 0.0
    enabled: bool = True
    gross_total: Optional[float] = None
    calendar_day: Optional[date] = None
    oldest_anchor: Optional[date] = None

    @property
    def minimum(self) -> float:
        """Net the most recent month must exceed (current + pending balance)."""
        return self.min_balance + self.min_pending

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'EarningsConfig':
        """Build a config from the persisted settings dict.

        Args:
            data: Settings with keys periodCounts{months,pending,complete},
                  minBalance, minPending, enabled, grossTotal, calendarDay,
                  oldestAnchor. Missing keys fall back to defaults.

        Returns:
            EarningsConfig instance
        """
        data = data or {}
        counts = data.get('periodCounts', {}) or {}
        months = parse_count(counts.get('months', DEFAULT_MONTHS))
        if months < 1:
            raise ValueError(f"periodCounts.months must be at least 1, got {months}")

        gross = data.get('grossTotal')
        calendar_day = data.get('calendarDay')
        oldest_anchor = data.get('oldestAnchor')
        return cls(
            period_counts=PeriodCounts(
                months=months,
                pending=parse_count(counts.get('pending', 0)),
                complete=parse_count(counts.get('complete', 0)),
            ),
            min_balance=parse_amount(data.get('minBalance', 0)),
            min_pending=parse_amount(data.get('minPending', 0)),
            enabled=bool(data.get('enabled', True)),
            gross_total=parse_amount(gross) if gross not in (None, '') else None,
            calendar_day=date.fromisoformat(calendar_day) if calendar_day else None,
            oldest_anchor=date.fromisoformat(oldest_anchor) if oldest_anchor else None,
        )

    def to_dict(self) -> dict:
        """Inverse of from_dict, used when saving presets."""
        return {
            'periodCounts': {
                'months': self.period_counts.months,
                'pending': self.period_counts.pending,
                'complete': self.period_counts.complete,
            },
            'minBalance': self.min_balance,
            'minPending': self.min_pending,
            'enabled': self.enabled,
            'grossTotal': self.gross_total,
            'calendarDay': self.calendar_day.isoformat() if self.calendar_day else None,
            'oldestAnchor': self.oldest_anchor.isoformat() if self.oldest_anchor else None,
        }
