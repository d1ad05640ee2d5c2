"""Renderer classes for the earnings charts.

This module contains the renderers that paint derived chart series onto a
DrawingSurface. Each renderer takes the series it needs plus the eased
animation progress and returns a RenderResult describing what was drawn,
which the interaction layer uses for hit testing.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from details.ChartDetails import ChartDetails
from model.ChartState import ChartSeries, DrawingArea, Point, StatisticsSeries
from model.EarningsData import CATEGORY_ORDER, Category
from render.animation import interpolate_points
from render.axis import Axis, count_axis, statistics_axis
from render.coordinate_mapper import axis_max_for, map_values, x_for_index
from render.label_layout import LabelLayoutCache, LabelPlacement, label_indices, place_labels
from render.spline import SplineRasterizer
from render.surface import DrawingSurface


LABEL_TOP_MARGIN = 8

STATISTICS_EARNINGS = 'earnings'
STATISTICS_TRANSACTIONS = 'transactions'


@dataclass
class RenderResult:
    """What a render pass put on the surface.

    `lines` holds the final (fully revealed) pixel points of every series
    that was drawn, keyed by series name, in paint order.
    """
    area: DrawingArea
    axis_max: float = 0.0
    count: int = 0
    lines: Dict[str, List[Point]] = field(default_factory=dict)
    labels: List[LabelPlacement] = field(default_factory=list)
    progress: float = 1.0

    @property
    def paint_order(self) -> List[str]:
        return list(self.lines.keys())

    def is_empty(self) -> bool:
        return not self.lines


def paint_order(categories: List[Category], active: Optional[Category]) -> List[Category]:
    """Draw order for category lines: the active category is painted last."""
    ordered = [c for c in CATEGORY_ORDER if c in categories and c != active]
    if active is not None and active in categories:
        ordered.append(active)
    return ordered


class BaseRenderer(ABC):
    """Abstract base class for all chart renderers."""

    def __init__(self, details: ChartDetails, label_cache: Optional[LabelLayoutCache] = None):
        """Initialize with chart styling.

        Args:
            details: ChartDetails with padding, colors, widths and label spacing
            label_cache: Shared LabelLayoutCache (a private one if omitted)
        """
        self.details = details
        self.label_cache = label_cache if label_cache is not None else LabelLayoutCache()

    @abstractmethod
    def render(self, surface: DrawingSurface, series, progress: float = 1.0, **kwargs) -> RenderResult:
        """Paint the series onto the surface.

        Args:
            surface: Target DrawingSurface
            series: Derived series to draw (None draws an empty chart)
            progress: Eased reveal progress, 0 (flat on the baseline) to 1

        Returns:
            RenderResult describing what was drawn
        """
        pass

    def _labels(self, surface: DrawingSurface, area: DrawingArea, texts: List[str], count: int,
                cache_key=None) -> List[LabelPlacement]:
        indices = [i for i in label_indices(count) if i < len(texts)]

        def compute():
            return place_labels(
                indices,
                [texts[i] for i in indices],
                [x_for_index(i, area, count) for i in indices],
                surface.text_width,
                right_edge=area.right,
                offset=self.details.label_offset,
                min_gap=self.details.label_min_gap,
                min_left=self.details.label_min_left,
            )

        if cache_key is None:
            return compute()
        return self.label_cache.get_or_compute(cache_key + (surface.width, surface.height), compute)

    def _draw_labels(self, surface: DrawingSurface, area: DrawingArea, placements: List[LabelPlacement]) -> None:
        color = self.details.color('label')
        for placement in placements:
            surface.draw_text(placement.left, area.bottom + LABEL_TOP_MARGIN, placement.text, color)


class CategoryLineChartRenderer(BaseRenderer):
    """Smoothed per-category cumulative lines (all-time, month and daily charts)."""

    def __init__(self, details: ChartDetails, label_cache: Optional[LabelLayoutCache] = None):
        super().__init__(details, label_cache)
        self.rasterizer = SplineRasterizer(details.tension)

    def render(self, surface: DrawingSurface, series: Optional[ChartSeries], progress: float = 1.0,
               active: Optional[Category] = None, label_key=None, **kwargs) -> RenderResult:
        """Draw every visible category line.

        Args:
            surface: Target DrawingSurface
            series: ChartSeries to draw
            progress: Eased reveal progress
            active: Highlighted category, painted last and emphasized
            label_key: Cache key (dataset version, window) for the x labels

        Returns:
            RenderResult with the lines in paint order
        """
        surface.clear(self.details.color('background', '#ffffff'))
        area = DrawingArea.from_surface(surface.width, surface.height, self.details.padding)
        if series is None or series.is_empty():
            return RenderResult(area=area, progress=progress)

        count = series.label_count
        axis_max = axis_max_for(series, self.details.headroom)
        result = RenderResult(area=area, axis_max=axis_max, count=count, progress=progress)
        bounds = (area.top, area.bottom)

        for category in paint_order(series.visible_categories(), active):
            points = map_values(series.values[category], axis_max, area, count)
            if category == active:
                width, alpha = self.details.active_width, self.details.active_alpha
            else:
                width, alpha = self.details.inactive_width, self.details.inactive_alpha
            animated = interpolate_points(points, area.bottom, progress)
            self.rasterizer.draw(surface, animated, self.details.category_color(category), width, alpha, bounds)
            result.lines[category.value] = points

        result.labels = self._labels(surface, area, series.labels, count, label_key)
        self._draw_labels(surface, area, result.labels)
        return result


class StatisticsChartRenderer(BaseRenderer):
    """Area chart of daily earnings or daily transaction counts.

    The earnings chart is the main chart with date labels; the transactions
    chart is the smaller companion beside it.
    """

    def __init__(self, details: ChartDetails, kind: str = STATISTICS_EARNINGS,
                 label_cache: Optional[LabelLayoutCache] = None):
        if kind not in (STATISTICS_EARNINGS, STATISTICS_TRANSACTIONS):
            raise ValueError(f"Unknown statistics chart kind: {kind!r}")
        super().__init__(details, label_cache)
        self.kind = kind
        # Statistics lines are straight segments
        self.rasterizer = SplineRasterizer(tension=0.0)

    def values(self, series: StatisticsSeries) -> List[float]:
        if self.kind == STATISTICS_EARNINGS:
            return list(series.earnings)
        return [float(c) for c in series.counts]

    def axis(self, values: List[float]) -> Axis:
        peak = max(values) if values else 0.0
        if self.kind == STATISTICS_EARNINGS:
            return statistics_axis(peak)
        return count_axis(peak)

    def tick_label(self, value: float) -> str:
        if self.kind == STATISTICS_EARNINGS:
            return f"${value:,.0f}"
        return f"{int(value)}"

    def render(self, surface: DrawingSurface, series: Optional[StatisticsSeries], progress: float = 1.0,
               hover_index: Optional[int] = None, label_key=None, **kwargs) -> RenderResult:
        """Draw the grid, the filled area and the optional hover point.

        Args:
            surface: Target DrawingSurface
            series: StatisticsSeries to draw
            progress: Eased reveal progress
            hover_index: Day index to mark with a hover point
            label_key: Cache key for the x labels (main chart only)

        Returns:
            RenderResult with a single line named after the chart kind
        """
        surface.clear(self.details.color('background', '#ffffff'))
        area = DrawingArea.from_surface(surface.width, surface.height, self.details.statistics_padding)
        if series is None or not series.dates:
            return RenderResult(area=area, progress=progress)

        values = self.values(series)
        axis = self.axis(values)
        count = len(values)
        result = RenderResult(area=area, axis_max=axis.maximum, count=count, progress=progress)

        self._draw_grid(surface, area, axis)

        points = map_values(values, axis.maximum, area, count)
        animated = interpolate_points(points, area.bottom, progress)
        line_color = self.details.color(self.kind)
        self.rasterizer.fill_under(surface, animated, area.bottom, self.details.color(self.kind + 'Fill'), 0.2)
        self.rasterizer.draw(surface, animated, line_color, 2.0)
        result.lines[self.kind] = points

        if hover_index is not None and 0 <= hover_index < count:
            surface.fill_circle(animated[hover_index], self.details.hover_radius, line_color)

        if self.kind == STATISTICS_EARNINGS:
            result.labels = self._labels(surface, area, series.labels, count, label_key)
            self._draw_labels(surface, area, result.labels)
        return result

    def _draw_grid(self, surface: DrawingSurface, area: DrawingArea, axis: Axis) -> None:
        grid = self.details.color('grid')
        text_color = self.details.color('axisLabel')
        for tick in axis.ticks:
            y = area.bottom - (tick / axis.maximum) * area.height
            if tick > 0:
                surface.stroke_polyline([(area.left, y), (area.right, y)], grid, 1, 0.3)
                surface.draw_text(area.right + 8, y - 6, self.tick_label(tick), text_color)
        surface.stroke_polyline([(area.right, area.top), (area.right, area.bottom)], grid, 1, 0.3)
        surface.stroke_polyline([(area.left, area.bottom), (surface.width, area.bottom)],
                                self.details.color('separator'), 1)


def create_renderer(name: str, details: ChartDetails, label_cache: Optional[LabelLayoutCache] = None) -> BaseRenderer:
    """Create a renderer by its registry name."""
    if name not in RENDERER_REGISTRY:
        raise ValueError(f"Unknown renderer: {name!r}")
    return RENDERER_REGISTRY[name](details, label_cache)


RENDERER_REGISTRY = {
    'CategoryLines': CategoryLineChartRenderer,
    'StatisticsEarnings': lambda details, cache=None: StatisticsChartRenderer(details, STATISTICS_EARNINGS, cache),
    'StatisticsTransactions': lambda details, cache=None: StatisticsChartRenderer(details, STATISTICS_TRANSACTIONS, cache),
}
