import json
import os
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from model.EarningsData import Category


DEFAULT_PATH = os.path.normpath(os.path.join(os.path.dirname(__file__), '..', '..', 'reference', 'generation-details.json'))


def _range(values, name: str) -> Tuple[float, float]:
	if not isinstance(values, (list, tuple)) or len(values) != 2:
		raise ValueError(f"{name} must be a [low, high] pair, got {values!r}")
	low, high = float(values[0]), float(values[1])
	if low > high:
		raise ValueError(f"{name} low bound {low} exceeds high bound {high}")
	return low, high


@dataclass(frozen=True)
class SplitProfile:
	"""How a period's net is divided between categories."""
	name: str
	anchor: Category
	anchor_share: Tuple[float, float]
	secondary: Category
	secondary_share: Tuple[float, float]
	remainder: Category
	pinned_zero: Tuple[Category, ...]

	@classmethod
	def from_dict(cls, data: dict) -> 'SplitProfile':
		profile = cls(
			name=data.get('name', 'custom'),
			anchor=Category.parse(data['anchor']),
			anchor_share=_range(data['anchorShare'], 'anchorShare'),
			secondary=Category.parse(data['secondary']),
			secondary_share=_range(data['secondaryShare'], 'secondaryShare'),
			remainder=Category.parse(data['remainder']),
			pinned_zero=tuple(Category.parse(c) for c in data.get('pinnedZero', [])),
		)
		active = {profile.anchor, profile.secondary, profile.remainder}
		if len(active) != 3:
			raise ValueError("anchor, secondary and remainder categories must be distinct")
		if active & set(profile.pinned_zero):
			raise ValueError("a pinned-zero category cannot also carry a share")
		if profile.anchor_share[1] + profile.secondary_share[1] > 1.0:
			raise ValueError("anchor and secondary shares leave nothing for the remainder")
		return profile


class GenerationDetails:
	def __init__(self, data: Optional[dict] = None, path: Optional[str] = None):
		"""
		data: already-parsed generation details (used by tests)
		path: JSON file to read when data is not given; defaults to reference/generation-details.json
		"""
		if data is None:
			with open(path or DEFAULT_PATH, 'r') as f:
				data = json.load(f)
		self.raw = data
		self._load(data)

	def _load(self, data: dict):
		self.cache_version = data.get('cacheVersion', 'earnings_v8')
		self.net_margin = float(data.get('netMargin', 0.80))
		if not 0 < self.net_margin <= 1:
			raise ValueError(f"netMargin must be in (0, 1], got {self.net_margin}")

		buffer = data.get('minimumBuffer', {})
		self.buffer_low = float(buffer.get('low', 1.1))
		self.buffer_high = float(buffer.get('high', 1.5))
		if self.buffer_low < 1.0 or self.buffer_high < self.buffer_low:
			raise ValueError("minimumBuffer must satisfy 1 <= low <= high")

		self.split_profile = SplitProfile.from_dict(data['splitProfile'])

		noise = data.get('noise', {})
		self.early_noise_periods = int(noise.get('earlyPeriods', 6))
		self.early_noise = _range(noise.get('early', [0.65, 1.35]), 'noise.early')
		self.late_noise = _range(noise.get('late', [0.88, 1.12]), 'noise.late')

		dampening = data.get('dampening', {})
		low, high = _range(dampening.get('periods', [4, 8]), 'dampening.periods')
		self.dampening_periods = (int(low), int(high))
		self.dampening_floor = float(dampening.get('floor', 0.08))

		# Growth pattern parameter ranges, keyed by pattern name
		self.patterns: Dict[str, dict] = data.get('patterns', {})

		daily = data.get('dailySplit', {})
		self.daily_share = _range(daily.get('shareRange', [0.2, 1.8]), 'dailySplit.shareRange')
		self.daily_max_share = float(daily.get('maxShareOfRemaining', 0.4))

		self.transactions: dict = data.get('transactions', {})

	def pattern_range(self, pattern: str, name: str, default: Tuple[float, float]) -> Tuple[float, float]:
		"""Get a [low, high] parameter range for a growth pattern."""
		params = self.patterns.get(pattern, {})
		if name not in params:
			return default
		return _range(params[name], f"patterns.{pattern}.{name}")

	def pattern_value(self, pattern: str, name: str, default: float) -> float:
		return float(self.patterns.get(pattern, {}).get(name, default))

	def average_ticket_net(self) -> float:
		"""Expected net of one transaction under the amount distribution."""
		buckets = self.transactions.get('amountBuckets', [])
		if not buckets:
			return 0.0
		total_weight = sum(b['weight'] for b in buckets)
		gross = sum(b['weight'] * (b['low'] + b['high']) / 2.0 for b in buckets) / total_weight
		return gross * (1.0 - self.transactions.get('feeRate', 0.20))
