"""Render module for the earnings charts."""

from render.renderers import (
    BaseRenderer,
    CategoryLineChartRenderer,
    StatisticsChartRenderer,
    RenderResult,
    create_renderer,
    paint_order,
    RENDERER_REGISTRY,
)
from render.surface import DrawingSurface, PillowSurface, SurfaceRegistry

__all__ = [
    'BaseRenderer',
    'CategoryLineChartRenderer',
    'StatisticsChartRenderer',
    'RenderResult',
    'create_renderer',
    'paint_order',
    'RENDERER_REGISTRY',
    'DrawingSurface',
    'PillowSurface',
    'SurfaceRegistry',
]
