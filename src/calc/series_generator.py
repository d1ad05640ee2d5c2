"""Synthetic earnings series generator.

Produces a timeline of period records (months or days) whose net amounts
follow a randomly chosen growth pattern, sum exactly to a requested total,
and keep the most recent period above a caller-supplied minimum.
"""

import logging
import math
import random
from datetime import date
from typing import List, Optional

from calc.calendar_utils import elapsed_fraction, period_count_from_anchor, period_starts
from calc.category_splitter import CategorySplitter
from calc.growth_patterns import GrowthPattern, choose_pattern, is_finite_weight
from details.GenerationDetails import GenerationDetails
from model.EarningsData import GRANULARITIES, Dataset, GenerationKey, PeriodRecord, from_cents, to_cents


logger = logging.getLogger(__name__)


def allocate_cents(total_cents: int, weights: List[float]) -> List[int]:
    """Split an amount in cents proportionally to weights, exactly.

    Uses the largest-remainder method so the parts always sum to the total.
    Zero total weight spreads the amount evenly.
    """
    if not weights:
        return []
    weight_sum = sum(weights)
    if weight_sum <= 0:
        weights = [1.0] * len(weights)
        weight_sum = float(len(weights))

    raw = [total_cents * w / weight_sum for w in weights]
    parts = [int(math.floor(r)) for r in raw]
    leftover = total_cents - sum(parts)
    by_remainder = sorted(range(len(raw)), key=lambda i: raw[i] - parts[i], reverse=True)
    for i in by_remainder[:leftover]:
        parts[i] += 1
    return parts


class SeriesGenerator:
    """Generator for synthetic earnings timelines.

    The generator is pure apart from its random source: given the same seed
    it produces the same Dataset.
    """

    def __init__(self, details: GenerationDetails, rng: Optional[random.Random] = None):
        """Initialize with generation details and a random source.

        Args:
            details: GenerationDetails with margins, noise and pattern ranges
            rng: Random instance used to draw a per-generation seed
        """
        self.details = details
        self.rng = rng or random.Random()

    def _dampening(self, rng: random.Random, period_count: int) -> List[float]:
        """Multipliers that keep the oldest periods small."""
        low, high = self.details.dampening_periods
        # Never dampen the most recent period
        damped = min(rng.randint(low, high), period_count - 1)
        floor = self.details.dampening_floor
        factors = []
        for i in range(period_count):
            if i < damped:
                ramp = (i + 1) / float(damped + 1)
                factors.append(floor + (1.0 - floor) * ramp * ramp)
            else:
                factors.append(1.0)
        return factors

    def _noise(self, rng: random.Random, i: int) -> float:
        if i < self.details.early_noise_periods:
            return rng.uniform(*self.details.early_noise)
        return rng.uniform(*self.details.late_noise)

    def weights(self, pattern: GrowthPattern, rng: random.Random, period_count: int,
                current_progress: float = 1.0) -> List[float]:
        """Unnormalized weight per period (oldest-first).

        Args:
            pattern: Growth pattern supplying the base curve
            rng: Random source for noise and dampening
            period_count: Number of periods
            current_progress: Elapsed fraction of the most recent period

        Returns:
            List of non-negative weights
        """
        dampening = self._dampening(rng, period_count)
        weights = []
        for i in range(period_count):
            w = pattern.weight(i, period_count) * self._noise(rng, i) * dampening[i]
            weights.append(w if is_finite_weight(w) else 0.0)
        if weights:
            weights[-1] *= min(1.0, max(0.0, current_progress))
        return weights

    def enforce_minimum(self, cents: List[int], total_cents: int, minimum: float,
                        rng: random.Random) -> List[int]:
        """Keep the most recent period inside the buffered minimum band.

        The band is `[minimum * buffer_low, minimum * buffer_high)`. A most
        recent period outside it is set to exactly `minimum * r` (r drawn
        from the buffer range) and the older periods are reallocated so the
        total is unchanged. If the buffered minimum alone exceeds the total,
        the minimum wins.
        """
        if not cents or minimum <= 0:
            return cents
        ratio = rng.uniform(self.details.buffer_low, self.details.buffer_high)
        low = int(math.ceil(round(minimum * self.details.buffer_low * 100, 6)))
        high = minimum * self.details.buffer_high * 100
        if low <= cents[-1] < high:
            return cents
        # A lone period has no older periods to absorb a cut, so only raise it
        if len(cents) == 1 and cents[-1] >= low:
            return cents

        target = int(math.ceil(round(minimum * ratio * 100, 6)))
        logger.debug("Moving most recent period from %d to %d cents (buffer %.3f)", cents[-1], target, ratio)
        older = cents[:-1]
        remaining = max(0, total_cents - target)
        return allocate_cents(remaining, [float(c) for c in older]) + [target]

    def generate(self,
                 total_net: float,
                 period_count: Optional[int] = None,
                 minimum: float = 0.0,
                 end: Optional[date] = None,
                 granularity: str = 'month',
                 oldest_anchor: Optional[date] = None,
                 current_progress: Optional[float] = None,
                 pattern: Optional[str] = None,
                 key: Optional[GenerationKey] = None,
                 seed: Optional[int] = None) -> Dataset:
        """Generate a complete Dataset.

        Args:
            total_net: Desired sum of all periods' net amounts
            period_count: Number of periods (ignored when oldest_anchor is given)
            minimum: Net the most recent period must exceed
            end: Calendar day inside the most recent period (defaults to today)
            granularity: 'month' or 'day'
            oldest_anchor: Date inside the oldest period; fixes the period count
            current_progress: Elapsed fraction of the most recent period; derived
                              from the calendar day when omitted
            pattern: Force a growth pattern by name
            key: GenerationKey to bind to the Dataset
            seed: Seed for this generation (drawn from the generator's rng if omitted)

        Returns:
            Dataset with records ordered oldest-first
        """
        if granularity not in GRANULARITIES:
            raise ValueError(f"Unknown granularity: {granularity!r}")
        if total_net < 0:
            raise ValueError(f"Total net must not be negative: {total_net}")
        if minimum < 0:
            raise ValueError(f"Minimum must not be negative: {minimum}")

        end = end or date.today()
        if oldest_anchor is not None:
            period_count = period_count_from_anchor(oldest_anchor, end, granularity)
        if not period_count or period_count < 1:
            raise ValueError(f"Period count must be at least 1, got {period_count}")
        if current_progress is None:
            current_progress = elapsed_fraction(end, granularity)

        if seed is None:
            seed = self.rng.randrange(1 << 31)
        rng = random.Random(seed)

        growth = choose_pattern(self.details, rng, period_count, pattern)
        weights = self.weights(growth, rng, period_count, current_progress)
        total_cents = to_cents(total_net)
        cents = allocate_cents(total_cents, weights)
        cents = self.enforce_minimum(cents, total_cents, minimum, rng)

        splitter = CategorySplitter(self.details.split_profile, rng)
        ticket = self.details.average_ticket_net()
        starts = period_starts(end, period_count, granularity)

        records = []
        for i, (start, net_cents) in enumerate(zip(starts, cents)):
            split = splitter.split_cents(net_cents)
            net = from_cents(net_cents)
            count = 0
            if net_cents > 0 and ticket > 0:
                count = max(1, int(round(net / ticket * rng.uniform(0.85, 1.15))))
            records.append(PeriodRecord(
                index=i,
                granularity=granularity,
                start=start,
                net=net,
                gross=round(net / self.details.net_margin, 2),
                categories={category: from_cents(value) for category, value in split.items()},
                transaction_count=count,
            ))

        logger.info("Generated %d %s periods (%s pattern, seed %d, net %.2f)",
                    period_count, granularity, growth.name, seed, from_cents(sum(cents)))
        return Dataset(
            records=tuple(records),
            key=key,
            pattern=growth.name,
            seed=seed,
            profile=self.details.split_profile.name,
        )
