"""Growth-pattern strategies for the series generator.

Each pattern is a small frozen dataclass whose `weight(i, n)` is a pure
function of the period index: the same instance always returns the same
weight for the same period. Parameters are drawn once per generation by
`choose_pattern` and the chosen pattern's name is recorded on the Dataset.
"""

import math
import random
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

from details.GenerationDetails import GenerationDetails


def _progress(i: int, n: int) -> float:
    """Position of period i (0 = oldest) on the timeline, in (0, 1]."""
    return (i + 1) / float(n)


@dataclass(frozen=True)
class Consistent:
    """Monotonic power-curve growth."""
    exponent: float
    name: str = 'consistent'

    def weight(self, i: int, n: int) -> float:
        return _progress(i, n) ** self.exponent


@dataclass(frozen=True)
class PeakMiddle:
    """Rise to a peak part-way through the timeline, then decline mildly."""
    peak_at: float
    exponent: float
    decline: float
    name: str = 'peakMiddle'

    def weight(self, i: int, n: int) -> float:
        t = _progress(i, n)
        if t <= self.peak_at:
            return (t / self.peak_at) ** self.exponent
        after = (t - self.peak_at) / (1.0 - self.peak_at)
        return 1.0 - self.decline * after


@dataclass(frozen=True)
class RapidLate:
    """Slow power-curve growth followed by a late acceleration."""
    exponent: float
    accelerate_at: float
    acceleration: float
    name: str = 'rapidLate'

    def weight(self, i: int, n: int) -> float:
        t = _progress(i, n)
        base = t ** self.exponent
        if t <= self.accelerate_at:
            return base
        late = (t - self.accelerate_at) / (1.0 - self.accelerate_at)
        return base * (1.0 + (self.acceleration - 1.0) * late * late)


@dataclass(frozen=True)
class Plateau:
    """Growth up to a plateau, then flat with a little noise."""
    plateau_at: float
    exponent: float
    jitter: float
    noise_seed: int
    name: str = 'plateau'

    def weight(self, i: int, n: int) -> float:
        t = _progress(i, n)
        if t <= self.plateau_at:
            return (t / self.plateau_at) ** self.exponent
        # Seeded per index so the weight stays a pure function of i
        wobble = random.Random(self.noise_seed * 100003 + i).uniform(-self.jitter, self.jitter)
        return 1.0 + wobble


GrowthPattern = Union[Consistent, PeakMiddle, RapidLate, Plateau]


def _consistent(details: GenerationDetails, rng: random.Random) -> Consistent:
    return Consistent(exponent=rng.uniform(*details.pattern_range('consistent', 'exponent', (1.3, 1.9))))


def _peak_middle(details: GenerationDetails, rng: random.Random) -> PeakMiddle:
    return PeakMiddle(
        peak_at=rng.uniform(*details.pattern_range('peakMiddle', 'peakAt', (0.65, 0.75))),
        exponent=rng.uniform(*details.pattern_range('peakMiddle', 'exponent', (1.2, 1.6))),
        decline=rng.uniform(*details.pattern_range('peakMiddle', 'decline', (0.15, 0.30))),
    )


def _rapid_late(details: GenerationDetails, rng: random.Random) -> RapidLate:
    return RapidLate(
        exponent=rng.uniform(*details.pattern_range('rapidLate', 'exponent', (1.1, 1.5))),
        accelerate_at=rng.uniform(*details.pattern_range('rapidLate', 'accelerateAt', (0.70, 0.85))),
        acceleration=rng.uniform(*details.pattern_range('rapidLate', 'acceleration', (1.8, 2.8))),
    )


def _plateau(details: GenerationDetails, rng: random.Random) -> Plateau:
    return Plateau(
        plateau_at=rng.uniform(*details.pattern_range('plateau', 'plateauAt', (0.70, 0.90))),
        exponent=rng.uniform(*details.pattern_range('plateau', 'exponent', (1.2, 1.7))),
        jitter=details.pattern_value('plateau', 'jitter', 0.06),
        noise_seed=rng.randrange(1 << 30),
    )


PATTERN_BUILDERS: Dict[str, Callable[[GenerationDetails, random.Random], GrowthPattern]] = {
    'consistent': _consistent,
    'peakMiddle': _peak_middle,
    'rapidLate': _rapid_late,
    'plateau': _plateau,
}


def choose_pattern(details: GenerationDetails, rng: random.Random, period_count: int,
                   name: Optional[str] = None) -> GrowthPattern:
    """Pick a growth pattern and draw its parameters.

    Args:
        details: GenerationDetails with the parameter ranges
        rng: Random source
        period_count: Number of periods being generated; fewer than 2 always
                      yields the consistent pattern
        name: Force a specific pattern instead of choosing at random

    Returns:
        A growth pattern instance
    """
    if period_count < 2:
        name = 'consistent'
    elif name is None:
        name = rng.choice(sorted(PATTERN_BUILDERS))
    builder = PATTERN_BUILDERS.get(name)
    if builder is None:
        raise ValueError(f"Unknown growth pattern: {name!r}")
    return builder(details, rng)


def is_finite_weight(value: float) -> bool:
    return value >= 0 and not math.isinf(value) and not math.isnan(value)
