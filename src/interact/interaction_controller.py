"""Pointer interaction and cross-widget synchronization.

The controller owns the set of mounted chart widgets. It draws them (with
the reveal animation when data changes, instantly when the active category
changes), hit-tests pointer positions against what was last drawn, produces
tooltip state for the host, and keeps hover and category highlighting in
sync between widgets of the same family.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from details.ChartDetails import ChartDetails
from interact.hit_testing import hit_test
from interact.tooltip import category_tooltip, statistics_tooltip
from model.ChartState import TooltipState
from model.CoreState import ActiveCategoryState
from model.EarningsData import Category
from render.animation import AnimationRegistry
from render.label_layout import LabelLayoutCache
from render.renderers import BaseRenderer, RenderResult, create_renderer
from render.surface import SurfaceRegistry


logger = logging.getLogger(__name__)

FAMILY_EARNINGS = 'earnings'
FAMILY_STATISTICS = 'statistics'

# widget kind -> (series window, renderer name, family)
WIDGET_KINDS = {
    'allTime': ('allTime', 'CategoryLines', FAMILY_EARNINGS),
    'month': ('month', 'CategoryLines', FAMILY_EARNINGS),
    'daily': ('daily', 'CategoryLines', FAMILY_EARNINGS),
    'statisticsEarnings': ('statistics', 'StatisticsEarnings', FAMILY_STATISTICS),
    'statisticsTransactions': ('statistics', 'StatisticsTransactions', FAMILY_STATISTICS),
}


@dataclass
class ChartWidget:
    """A chart the host has placed on screen, bound to one drawing surface."""
    widget_id: str
    surface_id: str
    kind: str
    attached: bool = False
    last_result: Optional[RenderResult] = None
    tooltip: TooltipState = field(default_factory=TooltipState.hidden)

    def __post_init__(self):
        if self.kind not in WIDGET_KINDS:
            raise ValueError(f"Unknown widget kind: {self.kind!r}")

    @property
    def window(self) -> str:
        return WIDGET_KINDS[self.kind][0]

    @property
    def renderer_name(self) -> str:
        return WIDGET_KINDS[self.kind][1]

    @property
    def family(self) -> str:
        return WIDGET_KINDS[self.kind][2]

    @property
    def is_statistics(self) -> bool:
        return self.family == FAMILY_STATISTICS


class InteractionController:
    """Draws mounted widgets and turns pointer input into tooltip state."""

    def __init__(self, details: ChartDetails, surfaces: SurfaceRegistry, animations: AnimationRegistry,
                 active: ActiveCategoryState, anchor_category: Category = Category.MESSAGES):
        """Initialize the controller.

        Args:
            details: ChartDetails with styling and interaction thresholds
            surfaces: SurfaceRegistry the host registers drawing surfaces in
            animations: AnimationRegistry holding one scheduler per surface
            active: Shared ActiveCategoryState (this controller is its only writer)
            anchor_category: Category whose point the category tooltip is centered on
        """
        self.details = details
        self.surfaces = surfaces
        self.animations = animations
        self.active = active
        self.anchor_category = anchor_category
        self.label_cache = LabelLayoutCache()
        self.widgets: Dict[str, ChartWidget] = {}
        self._renderers: Dict[str, BaseRenderer] = {}
        self._series: Dict[str, object] = {}
        self._version = 0
        # Last hovered index per family, shared by the widgets of that family
        self.last_hovered: Dict[str, int] = {}
        self.active.subscribe(self._on_active_changed)

    def _renderer(self, name: str) -> BaseRenderer:
        if name not in self._renderers:
            self._renderers[name] = create_renderer(name, self.details, self.label_cache)
        return self._renderers[name]

    def family_widgets(self, family: str) -> List[ChartWidget]:
        return [w for w in self.widgets.values() if w.family == family]

    def mount(self, widget: ChartWidget) -> ChartWidget:
        """Attach a widget and draw it with the reveal animation."""
        if widget.widget_id in self.widgets:
            self.unmount(widget.widget_id)
        widget.attached = True
        self.widgets[widget.widget_id] = widget
        logger.debug("Mounted %s widget %s on surface %s", widget.kind, widget.widget_id, widget.surface_id)
        self.draw(widget.widget_id, animate=True)
        return widget

    def unmount(self, widget_id: str) -> None:
        """Stop the widget's animation and detach its pointer handling."""
        widget = self.widgets.pop(widget_id, None)
        if widget is None:
            return
        self.animations.stop(widget.surface_id)
        widget.attached = False
        widget.tooltip = TooltipState.hidden()
        logger.debug("Unmounted widget %s", widget_id)

    def update_series(self, series: Dict[str, object], version: int) -> None:
        """Swap in freshly derived series and redraw every widget animated.

        Args:
            series: Series per window name ('allTime', 'month', 'daily', 'statistics');
                    an empty dict makes every widget draw nothing
            version: Dataset version the series were derived from
        """
        self._series = dict(series)
        if version != self._version:
            self.label_cache.invalidate()
        self._version = version
        self.last_hovered.clear()
        for widget in list(self.widgets.values()):
            widget.tooltip = TooltipState.hidden()
            self.draw(widget.widget_id, animate=True)

    def draw(self, widget_id: str, animate: bool = True) -> Optional[RenderResult]:
        """Draw one widget.

        An animated draw (re)starts the surface's reveal animation. A
        non-animated draw paints immediately at the current progress of any
        running animation and leaves the animation itself alone.
        """
        widget = self.widgets.get(widget_id)
        if widget is None:
            return None
        if self.surfaces.get(widget.surface_id) is None:
            logger.warning("Skipping draw of %s: surface %s is unavailable", widget_id, widget.surface_id)
            return None

        if animate:
            self.animations.start(widget.surface_id, lambda eased: self._paint(widget, eased))
            return widget.last_result

        scheduler = self.animations.find(widget.surface_id)
        progress = scheduler.current_progress() if scheduler is not None else 1.0
        return self._paint(widget, progress)

    def _paint(self, widget: ChartWidget, progress: float) -> Optional[RenderResult]:
        surface = self.surfaces.get(widget.surface_id)
        if surface is None or not widget.attached:
            return None
        renderer = self._renderer(widget.renderer_name)
        series = self._series.get(widget.window)
        label_key = (self._version, widget.window, widget.renderer_name)
        if widget.is_statistics:
            result = renderer.render(surface, series, progress,
                                     hover_index=self.last_hovered.get(widget.family), label_key=label_key)
        else:
            result = renderer.render(surface, series, progress, active=self.active.value, label_key=label_key)
        widget.last_result = result
        return result

    def pointer_move(self, widget_id: str, x: float, y: float) -> TooltipState:
        """Hit-test a pointer position and return the tooltip to show.

        A hit updates the family's hover index; statistics widgets of the
        same family are redrawn with the hover point.
        """
        widget = self.widgets.get(widget_id)
        if widget is None or not widget.attached or widget.last_result is None:
            return TooltipState.hidden()

        result = widget.last_result
        hit = hit_test((x, y), result.lines, result.area, result.count, self.details.hit_threshold)
        if hit is None:
            widget.tooltip = TooltipState.hidden()
            return widget.tooltip

        size = (self.details.tooltip_width, self.details.tooltip_height)
        surface = self.surfaces.get(widget.surface_id)
        widget_width = surface.width if surface is not None else result.area.right
        series = self._series.get(widget.window)
        if widget.is_statistics:
            tooltip = statistics_tooltip(hit.index, series, hit.point, widget_width, size, self.details.tooltip_offset)
        else:
            tooltip = category_tooltip(hit.index, series, result.lines, widget_width, self.anchor_category,
                                       size, self.details.tooltip_offset)
        widget.tooltip = tooltip
        self._sync_hover(widget, hit.index)
        return tooltip

    def pointer_leave(self, widget_id: str) -> TooltipState:
        widget = self.widgets.get(widget_id)
        if widget is None:
            return TooltipState.hidden()
        widget.tooltip = TooltipState.hidden()
        self._sync_hover(widget, None)
        return widget.tooltip

    def _sync_hover(self, source: ChartWidget, index: Optional[int]) -> None:
        previous = self.last_hovered.get(source.family)
        if index == previous:
            return
        if index is None:
            self.last_hovered.pop(source.family, None)
        else:
            self.last_hovered[source.family] = index
        if source.is_statistics:
            for widget in self.family_widgets(source.family):
                self.draw(widget.widget_id, animate=False)

    def select_category(self, category: Category) -> bool:
        """Make a category the highlighted one across all category charts.

        Returns:
            True if the active category changed
        """
        return self.active.set(category)

    def _on_active_changed(self, previous: Category, current: Category) -> None:
        for widget in self.family_widgets(FAMILY_EARNINGS):
            self.draw(widget.widget_id, animate=False)

    def close(self) -> None:
        """Unmount every widget and stop listening for category changes."""
        for widget_id in list(self.widgets.keys()):
            self.unmount(widget_id)
        self.active.unsubscribe(self._on_active_changed)
