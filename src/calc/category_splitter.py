import random
from typing import Dict, Optional

from details.GenerationDetails import SplitProfile
from model.EarningsData import CATEGORY_ORDER, Category, from_cents, to_cents


class CategorySplitter:
    """Divides a period's net amount between the earnings categories.

    One anchor category carries the bulk of every period, a secondary
    category takes a small slice, and a remainder category gets the rest.
    The percentages are drawn independently for each period, so the mix
    drifts across the timeline. Pinned and unassigned categories are zero.

    All arithmetic is done in cents so the split always sums exactly to the
    period's net.
    """

    def __init__(self, profile: SplitProfile, rng: Optional[random.Random] = None):
        """Initialize with the split profile and a random source.

        Args:
            profile: SplitProfile naming the anchor/secondary/remainder categories
            rng: Random instance (a fresh unseeded one if omitted)
        """
        self.profile = profile
        self.rng = rng or random.Random()

    def _empty(self) -> Dict[Category, int]:
        return {category: 0 for category in CATEGORY_ORDER}

    def split_cents(self, net_cents: int) -> Dict[Category, int]:
        """Split an amount given in cents.

        Args:
            net_cents: The period's net amount in cents

        Returns:
            Dictionary mapping every category to its amount in cents
        """
        if net_cents < 0:
            raise ValueError(f"Cannot split a negative amount: {net_cents}")
        shares = self._empty()
        if net_cents == 0:
            return shares

        anchor_share = self.rng.uniform(*self.profile.anchor_share)
        secondary_share = self.rng.uniform(*self.profile.secondary_share)

        anchor = int(round(net_cents * anchor_share))
        secondary = int(round(net_cents * secondary_share))
        shares[self.profile.anchor] = anchor
        shares[self.profile.secondary] = secondary
        shares[self.profile.remainder] = net_cents - anchor - secondary
        return shares

    def split(self, net: float) -> Dict[Category, float]:
        """Split a dollar amount between the categories."""
        cents = self.split_cents(to_cents(net))
        return {category: from_cents(value) for category, value in cents.items()}

    def rescale(self, split: Dict[Category, float], new_net: float) -> Dict[Category, float]:
        """Rescale an existing split proportionally to a new net amount.

        The proportions of the original split are kept; any rounding drift is
        absorbed by the anchor category. A split with no amount to scale is
        redrawn from scratch.
        """
        new_cents = to_cents(new_net)
        old = {category: to_cents(split.get(category, 0.0)) for category in CATEGORY_ORDER}
        old_total = sum(old.values())
        if old_total <= 0:
            return self.split(new_net)

        scaled = {category: int(round(cents * new_cents / old_total)) for category, cents in old.items()}
        drift = new_cents - sum(scaled.values())
        scaled[self.profile.anchor] += drift
        return {category: from_cents(value) for category, value in scaled.items()}
