"""Smooth curves through chart points.

Each pair of consecutive points is joined by a cubic Bezier whose control
points come from the points' neighbors (Catmull-Rom style) scaled by a
tension constant. Control points are kept inside their segment's x range,
so a series with increasing x never folds back on itself.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from model.ChartState import Point
from render.surface import Color, DrawingSurface


DEFAULT_TENSION = 0.35
DEFAULT_STEPS = 12


@dataclass(frozen=True)
class Bezier:
    start: Point
    control1: Point
    control2: Point
    end: Point

    def at(self, t: float) -> Point:
        u = 1.0 - t
        a, b, c, d = u * u * u, 3 * u * u * t, 3 * u * t * t, t * t * t
        return (
            a * self.start[0] + b * self.control1[0] + c * self.control2[0] + d * self.end[0],
            a * self.start[1] + b * self.control1[1] + c * self.control2[1] + d * self.end[1],
        )


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def control_points(points: Sequence[Point], tension: float = DEFAULT_TENSION,
                   y_bounds: Optional[Tuple[float, float]] = None) -> List[Bezier]:
    """One Bezier per segment of the point list.

    Args:
        points: Ordered points (at least two for any output)
        tension: Fraction of the neighbor-to-neighbor vector used for the handles
        y_bounds: Optional (top, bottom) that control points are clamped into

    Returns:
        List of len(points) - 1 Bezier segments
    """
    n = len(points)
    if n < 2:
        return []
    half = tension / 2.0
    segments = []
    for i in range(n - 1):
        p0 = points[max(i - 1, 0)]
        p1 = points[i]
        p2 = points[i + 1]
        p3 = points[min(i + 2, n - 1)]

        c1x = p1[0] + (p2[0] - p0[0]) * half
        c1y = p1[1] + (p2[1] - p0[1]) * half
        c2x = p2[0] - (p3[0] - p1[0]) * half
        c2y = p2[1] - (p3[1] - p1[1]) * half

        low_x, high_x = min(p1[0], p2[0]), max(p1[0], p2[0])
        c1x = _clamp(c1x, low_x, high_x)
        c2x = _clamp(c2x, low_x, high_x)
        if (p2[0] >= p1[0] and c1x > c2x) or (p2[0] < p1[0] and c1x < c2x):
            c1x = c2x = (c1x + c2x) / 2.0

        if y_bounds is not None:
            top, bottom = y_bounds
            c1y = _clamp(c1y, top, bottom)
            c2y = _clamp(c2y, top, bottom)

        segments.append(Bezier(p1, (c1x, c1y), (c2x, c2y), p2))
    return segments


def flatten(segments: Sequence[Bezier], steps: int = DEFAULT_STEPS) -> List[Point]:
    """Approximate Bezier segments with a polyline."""
    if not segments:
        return []
    polyline = [segments[0].start]
    for segment in segments:
        for step in range(1, steps + 1):
            polyline.append(segment.at(step / float(steps)))
    return polyline


class SplineRasterizer:
    """Strokes smooth curves onto a DrawingSurface."""

    def __init__(self, tension: float = DEFAULT_TENSION, steps: int = DEFAULT_STEPS):
        self.tension = tension
        self.steps = steps

    def path(self, points: Sequence[Point], y_bounds: Optional[Tuple[float, float]] = None) -> List[Point]:
        """Polyline for the smoothed curve through points.

        A tension of zero gives straight segments between the points.
        """
        if len(points) < 2:
            return list(points)
        if self.tension <= 0:
            return list(points)
        return flatten(control_points(points, self.tension, y_bounds), self.steps)

    def draw(self, surface: DrawingSurface, points: Sequence[Point], color: Color, width: float,
             alpha: float = 1.0, y_bounds: Optional[Tuple[float, float]] = None) -> List[Point]:
        """Stroke the curve and return the polyline that was drawn."""
        path = self.path(points, y_bounds)
        surface.stroke_polyline(path, color, width, alpha)
        return path

    def fill_under(self, surface: DrawingSurface, points: Sequence[Point], baseline: float,
                   color: Color, alpha: float) -> None:
        """Fill the area between the curve and a horizontal baseline."""
        path = self.path(points)
        if len(path) < 2:
            return
        polygon = list(path) + [(path[-1][0], baseline), (path[0][0], baseline)]
        surface.fill_polygon(polygon, color, alpha)
