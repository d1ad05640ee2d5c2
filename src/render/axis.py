"""Nice y-axis scales for the statistics charts."""

import math
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Axis:
    maximum: float
    step: float

    @property
    def ticks(self) -> List[float]:
        """Tick values from zero to the maximum, inclusive."""
        count = int(round(self.maximum / self.step))
        return [self.step * i for i in range(count + 1)]


# (upper bound of the data maximum, step); the axis maximum is three steps
EARNINGS_STEPS = [
    (150, 50),
    (300, 100),
    (600, 200),
    (900, 300),
]

COUNT_STEP = 10
MIN_COUNT_MAX = 20


def statistics_axis(max_earnings: float) -> Axis:
    """Earnings axis with four grid lines (0 and three steps)."""
    for bound, step in EARNINGS_STEPS:
        if max_earnings <= bound:
            return Axis(maximum=float(step * 3), step=float(step))
    step = math.ceil(max_earnings / 3.0 / 100.0) * 100
    return Axis(maximum=float(step * 3), step=float(step))


def count_axis(max_count: float) -> Axis:
    maximum = max(MIN_COUNT_MAX, int(math.ceil(max_count / float(COUNT_STEP))) * COUNT_STEP)
    return Axis(maximum=float(maximum), step=float(COUNT_STEP))
