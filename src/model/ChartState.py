"""Derived, short-lived chart state.

Everything here is recomputed from a Dataset (or from pointer input) and is
never persisted.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

from model.EarningsData import Category


Point = Tuple[float, float]


@dataclass(frozen=True)
class Padding:
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> 'Padding':
        return cls(
            top=data.get('top', 0),
            right=data.get('right', 0),
            bottom=data.get('bottom', 0),
            left=data.get('left', 0),
        )


@dataclass(frozen=True)
class DrawingArea:
    """Plot rectangle inside a drawing surface, in pixels."""
    left: float
    top: float
    right: float
    bottom: float

    @classmethod
    def from_surface(cls, width: float, height: float, padding: Padding) -> 'DrawingArea':
        """Build the plot rectangle for a surface of the given size."""
        return cls(
            left=padding.left,
            top=padding.top,
            right=width - padding.right,
            bottom=height - padding.bottom,
        )

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top


@dataclass
class ChartSeries:
    """Per-category values aligned to a label axis.

    `label_count` is the number of slots on the x axis; a category's value
    list may be shorter (an in-progress month only has values up to today).
    """
    window: str
    labels: List[str]
    dates: List[date]
    values: Dict[Category, List[float]] = field(default_factory=dict)
    label_count: int = 0

    def __post_init__(self):
        if not self.label_count:
            self.label_count = len(self.labels)

    def is_empty(self) -> bool:
        return not any(any(v > 0 for v in vals) for vals in self.values.values())

    def visible_categories(self) -> List[Category]:
        """Categories with at least one non-zero value."""
        return [c for c, vals in self.values.items() if any(v > 0 for v in vals)]

    def value_at(self, category: Category, index: int) -> Optional[float]:
        vals = self.values.get(category, [])
        if 0 <= index < len(vals):
            return vals[index]
        return None


@dataclass
class StatisticsSeries:
    """Per-day earnings and transaction counts for the statistics charts."""
    labels: List[str]
    dates: List[date]
    earnings: List[float] = field(default_factory=list)
    counts: List[int] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not any(self.earnings) and not any(self.counts)


@dataclass(frozen=True)
class HitResult:
    """Outcome of a successful pointer hit test.

    `series` is the name of the line that was hit (a category value such as
    'messages', or 'earnings'/'transactions' on the statistics charts).
    """
    index: int
    series: str
    distance: float
    point: Point


@dataclass(frozen=True)
class TooltipState:
    """What the host UI needs to draw a tooltip."""
    visible: bool
    anchor_index: int = -1
    left: float = 0.0
    top: float = 0.0
    title: str = ''
    values: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def hidden(cls) -> 'TooltipState':
        return cls(visible=False)
