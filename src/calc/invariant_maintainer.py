"""Reuse-or-regenerate policy for the current earnings Dataset.

The maintainer is the only writer of the DatasetSlot. On every data-ready
signal it checks the cached Dataset against the current configuration and
the balance invariant (most recent month above current + pending balance)
and regenerates when either fails.
"""

import logging
from datetime import date
from typing import Optional

from calc.calendar_utils import period_count_from_anchor
from calc.series_generator import SeriesGenerator
from details.GenerationDetails import GenerationDetails
from model.CoreState import DatasetSlot
from model.EarningsConfig import EarningsConfig
from model.EarningsData import Dataset, GenerationKey, to_cents
from store.generation_cache import GenerationCache


logger = logging.getLogger(__name__)

FAMILY = 'earnings'


class InvariantMaintainer:
    """Keeps the current Dataset valid for the current configuration."""

    def __init__(self, generator: SeriesGenerator, cache: GenerationCache, slot: DatasetSlot,
                 details: Optional[GenerationDetails] = None, family: str = FAMILY):
        """Initialize the maintainer.

        Args:
            generator: SeriesGenerator used for (re)generation
            cache: GenerationCache holding the persisted Dataset
            slot: DatasetSlot this maintainer publishes to
            details: GenerationDetails (defaults to the generator's)
            family: Dataset family name inside the slot
        """
        self.generator = generator
        self.cache = cache
        self.slot = slot
        self.details = details or generator.details
        self.family = family
        # Oldest-period anchor carried across manual overrides
        self.pinned_oldest: Optional[date] = None
        # Manually entered all-time gross; applies until cleared
        self.gross_override: Optional[float] = None

    def default_total_net(self, config: EarningsConfig) -> float:
        """Total net to distribute when the host supplies no gross total.

        Gives an average period equal to the required minimum, so the
        timeline's scale follows the balances the host displays.
        """
        return round(config.minimum * config.period_counts.months, 2)

    def make_key(self, config: EarningsConfig, today: date,
                 override_gross: Optional[float] = None,
                 oldest_anchor: Optional[date] = None) -> GenerationKey:
        """Build the GenerationKey for a configuration on a calendar day."""
        anchor = oldest_anchor or config.oldest_anchor
        if anchor is not None:
            period_count = period_count_from_anchor(anchor, today, 'month')
        else:
            period_count = config.period_counts.months

        if override_gross is not None:
            total_net = round(override_gross * self.details.net_margin, 2)
        elif config.gross_total is not None:
            total_net = round(config.gross_total * self.details.net_margin, 2)
        else:
            total_net = self.default_total_net(config)

        return GenerationKey(
            version=self.details.cache_version,
            granularity='month',
            period_count=period_count,
            calendar_day=today,
            min_balance=config.min_balance,
            min_pending=config.min_pending,
            total_net=total_net,
            oldest_anchor=anchor,
            override_gross=override_gross,
        )

    def satisfies_invariant(self, dataset: Dataset, minimum: float) -> bool:
        """True if the most recent period's net is at least the minimum."""
        recent = dataset.most_recent
        if recent is None:
            return False
        return to_cents(recent.net) >= to_cents(minimum)

    def _generate(self, key: GenerationKey) -> Dataset:
        return self.generator.generate(
            total_net=key.total_net or 0.0,
            period_count=key.period_count,
            minimum=key.minimum,
            end=key.calendar_day,
            granularity=key.granularity,
            oldest_anchor=key.oldest_anchor,
            key=key,
        )

    def _publish(self, key: GenerationKey, dataset: Dataset) -> Dataset:
        self.cache.put(key, dataset)
        self.slot.replace(dataset, self.family)
        return dataset

    def _reuse(self, key: GenerationKey) -> Optional[Dataset]:
        current = self.slot.get(self.family)
        if current is not None and current.key is not None and current.key.as_string() == key.as_string():
            return current
        cached = self.cache.get(key)
        if cached is not None:
            self.slot.replace(cached, self.family)
        return cached

    def ensure(self, config: EarningsConfig, today: Optional[date] = None) -> Optional[Dataset]:
        """Return a Dataset valid for config, regenerating only when needed.

        Reuse happens iff the cached Dataset's key matches and its most
        recent period satisfies the minimum. A disabled configuration clears
        the cache and the slot.

        Args:
            config: Current host configuration
            today: Calendar day (defaults to config.calendar_day or today)

        Returns:
            The current Dataset, or None when generation is disabled
        """
        if not config.enabled:
            self.clear()
            return None

        today = today or config.calendar_day or date.today()
        key = self.make_key(config, today, override_gross=self.gross_override,
                            oldest_anchor=self._anchor_for(config))
        existing = self._reuse(key)
        if existing is not None and self.satisfies_invariant(existing, config.minimum):
            return existing
        if existing is not None:
            logger.info("Most recent period %.2f is below minimum %.2f; regenerating",
                        existing.most_recent.net, config.minimum)
        return self._publish(key, self._generate(key))

    def regenerate(self, config: EarningsConfig, today: Optional[date] = None) -> Optional[Dataset]:
        """Discard the current Dataset and generate a fresh one for config."""
        if not config.enabled:
            self.clear()
            return None
        today = today or config.calendar_day or date.today()
        key = self.make_key(config, today, override_gross=self.gross_override,
                            oldest_anchor=self._anchor_for(config))
        logger.info("Regenerating %s dataset on request", self.family)
        return self._publish(key, self._generate(key))

    def override_gross(self, config: EarningsConfig, gross: float, today: Optional[date] = None,
                       pin_oldest: bool = True) -> Dataset:
        """Regenerate from a directly supplied all-time gross amount.

        Net is gross times the fixed margin. With pin_oldest, the oldest
        period of the current timeline is kept as the anchor so the tenure
        stays the same while the totals change.

        Args:
            config: Current host configuration (minimums still apply)
            gross: New all-time gross amount
            today: Calendar day (defaults to config.calendar_day or today)
            pin_oldest: Preserve the oldest-period anchor across regenerations

        Returns:
            The new Dataset
        """
        if gross < 0:
            raise ValueError(f"Gross amount must not be negative: {gross}")
        today = today or config.calendar_day or date.today()

        anchor = None
        if pin_oldest:
            if self.pinned_oldest is None:
                current = self.slot.get(self.family)
                if current is not None and current.oldest is not None:
                    self.pinned_oldest = current.oldest.start
            anchor = self.pinned_oldest
        else:
            self.pinned_oldest = None

        self.gross_override = gross
        key = self.make_key(config, today, override_gross=gross, oldest_anchor=anchor)
        logger.info("Manual gross override %.2f (anchor %s)", gross, anchor.isoformat() if anchor else 'none')
        return self._publish(key, self._generate(key))

    def _anchor_for(self, config: EarningsConfig) -> Optional[date]:
        return config.oldest_anchor or self.pinned_oldest

    def reset_overrides(self) -> None:
        """Drop the manual gross override and the pinned oldest period."""
        self.pinned_oldest = None
        self.gross_override = None

    def clear(self) -> None:
        """Forget the current Dataset and anything cached for it."""
        self.cache.clear()
        self.reset_overrides()
        if self.slot.get(self.family) is not None:
            self.slot.replace(None, self.family)
