"""X-axis label placement.

Labels are anchored to their data points with a small right offset. The last
label is pinned to the right edge and the layout walks backward, pushing
each label left of its right neighbor. The first label never goes past the
left inset. If that leaves some labels overlapping, a forward pass pushes
them right again so every gap is at least the minimum.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple


DEFAULT_OFFSET = 5.0
DEFAULT_MIN_GAP = 6.0
DEFAULT_MIN_LEFT = 4.0


@dataclass(frozen=True)
class LabelPlacement:
    index: int
    text: str
    left: float
    width: float

    @property
    def right(self) -> float:
        return self.left + self.width


def label_indices(count: int) -> List[int]:
    """Indices that get a label: first, quartiles and last."""
    if count <= 0:
        return []
    if count == 1:
        return [0]
    quarters = [0, count // 4, count // 2, (3 * count) // 4, count - 1]
    return sorted(set(quarters))


def layout_labels(anchor_xs: Sequence[float], widths: Sequence[float], right_edge: float,
                  offset: float = DEFAULT_OFFSET, min_gap: float = DEFAULT_MIN_GAP,
                  min_left: float = DEFAULT_MIN_LEFT) -> List[float]:
    """Compute the left edge of each label.

    Args:
        anchor_xs: Data-point x of each label, in increasing order
        widths: Rendered text width of each label
        right_edge: X the last label's right edge is pinned to
        offset: Preferred distance right of the data point
        min_gap: Minimum horizontal gap between neighboring labels
        min_left: Left inset the first label may not cross

    Returns:
        Left x of every label, non-decreasing with gaps >= min_gap
    """
    if len(anchor_xs) != len(widths):
        raise ValueError("anchor_xs and widths must have the same length")
    if any(w < 0 for w in widths):
        raise ValueError("Label widths must not be negative")
    n = len(anchor_xs)
    if n == 0:
        return []

    lefts = [0.0] * n
    lefts[-1] = right_edge - widths[-1]
    for i in range(n - 2, -1, -1):
        desired = anchor_xs[i] + offset
        lefts[i] = min(desired, lefts[i + 1] - min_gap - widths[i])
    lefts[0] = max(lefts[0], min_left)

    for i in range(1, n):
        lefts[i] = max(lefts[i], lefts[i - 1] + widths[i - 1] + min_gap)
    return lefts


def place_labels(indices: Sequence[int], texts: Sequence[str], anchor_xs: Sequence[float],
                 measure: Callable[[str], float], right_edge: float,
                 offset: float = DEFAULT_OFFSET, min_gap: float = DEFAULT_MIN_GAP,
                 min_left: float = DEFAULT_MIN_LEFT) -> List[LabelPlacement]:
    """Measure and lay out a set of labels."""
    widths = [measure(t) for t in texts]
    lefts = layout_labels(anchor_xs, widths, right_edge, offset, min_gap, min_left)
    return [LabelPlacement(index=i, text=t, left=x, width=w)
            for i, t, x, w in zip(indices, texts, lefts, widths)]


class LabelLayoutCache:
    """Memoizes label placements so animation frames reuse them."""

    def __init__(self):
        self._cache: Dict[Tuple, List[LabelPlacement]] = {}

    def get_or_compute(self, key: Tuple, compute: Callable[[], List[LabelPlacement]]) -> List[LabelPlacement]:
        """Get placements for key (dataset version, window, surface size), computing on a miss."""
        if key not in self._cache:
            self._cache[key] = compute()
        return self._cache[key]

    def invalidate(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
