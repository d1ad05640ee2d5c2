"""Tooltip content and placement."""

from typing import Dict, List, Optional, Tuple

from model.ChartState import ChartSeries, Point, StatisticsSeries, TooltipState
from model.EarningsData import CATEGORY_ORDER, Category


DEFAULT_OFFSET = 15.0
DEFAULT_SIZE = (160.0, 80.0)


def place_tooltip(anchor: Point, widget_width: float, size: Tuple[float, float] = DEFAULT_SIZE,
                  offset: float = DEFAULT_OFFSET) -> Tuple[float, float]:
    """Top-left corner for a tooltip beside an anchor point.

    The tooltip sits `offset` px right of the anchor, or flips to the left
    when it would overflow the widget, and is vertically centered on it.
    """
    width, height = size
    x, y = anchor
    left = x + offset
    if x + width + offset > widget_width:
        left = x - width - offset
    return left, y - height / 2.0


def category_tooltip(index: int, series: ChartSeries, lines: Dict[str, List[Point]], widget_width: float,
                     anchor_category: Category, size: Tuple[float, float] = DEFAULT_SIZE,
                     offset: float = DEFAULT_OFFSET) -> TooltipState:
    """Tooltip for a category line chart at a period index.

    One value per category; the tooltip is centered on the anchor
    category's point, or on the first drawn line when the anchor is not
    drawn.
    """
    if not lines or index < 0 or index >= series.label_count:
        return TooltipState.hidden()

    anchor_points = lines.get(anchor_category.value)
    if not anchor_points or index >= len(anchor_points):
        anchor_points = next((pts for pts in lines.values() if index < len(pts)), None)
    if anchor_points is None:
        return TooltipState.hidden()

    values = {}
    for category in CATEGORY_ORDER:
        value = series.value_at(category, index)
        values[category.value] = value if value is not None else 0.0

    left, top = place_tooltip(anchor_points[index], widget_width, size, offset)
    return TooltipState(
        visible=True,
        anchor_index=index,
        left=left,
        top=top,
        title=series.labels[index] if index < len(series.labels) else '',
        values=values,
    )


def statistics_tooltip(index: int, series: StatisticsSeries, anchor: Optional[Point], widget_width: float,
                       size: Tuple[float, float] = DEFAULT_SIZE, offset: float = DEFAULT_OFFSET) -> TooltipState:
    """Tooltip shared by the earnings and transactions charts for a day index."""
    if anchor is None or index < 0 or index >= len(series.dates):
        return TooltipState.hidden()
    left, top = place_tooltip(anchor, widget_width, size, offset)
    return TooltipState(
        visible=True,
        anchor_index=index,
        left=left,
        top=top,
        title=series.labels[index],
        values={
            'earnings': series.earnings[index] if index < len(series.earnings) else 0.0,
            'transactions': float(series.counts[index]) if index < len(series.counts) else 0.0,
        },
    )
