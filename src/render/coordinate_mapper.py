"""Mapping between data space (period index, amount) and pixel space."""

from typing import Iterable, List, Optional

from model.ChartState import ChartSeries, DrawingArea, Point
from model.EarningsData import Category


DEFAULT_HEADROOM = 1.15
FALLBACK_AXIS_MAX = 100.0


def x_for_index(index: float, area: DrawingArea, count: int) -> float:
    """X pixel of a slot on an axis with `count` evenly spaced slots."""
    if count <= 1:
        return area.left
    return area.left + index * area.width / float(count - 1)


def map_point(index: float, value: float, axis_max: float, area: DrawingArea, count: int) -> Point:
    """Map (period index, value) to a pixel position.

    Args:
        index: Slot on the x axis (0 is the left edge of the plot area)
        value: Amount to plot
        axis_max: Value at the top of the plot area
        area: Plot rectangle
        count: Number of slots on the x axis

    Returns:
        (x, y) in surface pixels; y grows downwards
    """
    x = x_for_index(index, area, count)
    if axis_max <= 0:
        return x, area.bottom
    return x, area.bottom - (value / axis_max) * area.height


def index_for_x(x: float, area: DrawingArea, count: int) -> int:
    """Nearest slot index for an x pixel, clamped to the axis."""
    if count <= 1 or area.width <= 0:
        return 0
    raw = (x - area.left) * (count - 1) / area.width
    return int(max(0, min(count - 1, round(raw))))


def axis_max_for(series: ChartSeries, headroom: float = DEFAULT_HEADROOM,
                 categories: Optional[Iterable[Category]] = None) -> float:
    """Top of the y axis: the largest visible value scaled by the headroom.

    Falls back to a fixed maximum when every value is zero, so an empty
    chart still has a usable scale.
    """
    if categories is None:
        categories = series.visible_categories()
    peaks = [max(series.values[c]) for c in categories if series.values.get(c)]
    peak = max(peaks) if peaks else 0.0
    if peak <= 0:
        return FALLBACK_AXIS_MAX
    return peak * headroom


def map_values(values: List[float], axis_max: float, area: DrawingArea, count: int) -> List[Point]:
    return [map_point(i, v, axis_max, area, count) for i, v in enumerate(values)]
