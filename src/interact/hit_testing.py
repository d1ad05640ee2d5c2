"""Pointer hit testing against drawn chart lines."""

import math
from typing import Dict, List, Optional

from model.ChartState import DrawingArea, HitResult, Point
from render.coordinate_mapper import index_for_x


DEFAULT_THRESHOLD = 15.0


def segment_distance(p: Point, a: Point, b: Point) -> float:
    """Perpendicular distance from p to segment ab (distance to the nearer end past either end)."""
    ax, ay = a
    bx, by = b
    dx, dy = bx - ax, by - ay
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return math.hypot(p[0] - ax, p[1] - ay)
    t = ((p[0] - ax) * dx + (p[1] - ay) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(p[0] - (ax + t * dx), p[1] - (ay + t * dy))


def line_distance(p: Point, points: List[Point]) -> float:
    if not points:
        return math.inf
    if len(points) == 1:
        return math.hypot(p[0] - points[0][0], p[1] - points[0][1])
    return min(segment_distance(p, points[i], points[i + 1]) for i in range(len(points) - 1))


def hit_test(pointer: Point, lines: Dict[str, List[Point]], area: DrawingArea, count: int,
             threshold: float = DEFAULT_THRESHOLD) -> Optional[HitResult]:
    """Find the line under the pointer.

    Args:
        pointer: Pointer position in surface pixels
        lines: Drawn points per series name
        area: Plot rectangle the lines were mapped into
        count: Number of slots on the x axis
        threshold: Maximum distance in pixels that still counts as a hit

    Returns:
        HitResult for the nearest line, or None when nothing is within the threshold
    """
    best_name = None
    best_distance = math.inf
    for name, points in lines.items():
        distance = line_distance(pointer, points)
        if distance < best_distance:
            best_name, best_distance = name, distance
    if best_name is None or best_distance >= threshold:
        return None

    index = index_for_x(pointer[0], area, count)
    points = lines[best_name]
    # The in-progress month has fewer points than axis slots
    index = min(index, len(points) - 1)
    return HitResult(index=index, series=best_name, distance=best_distance, point=points[index])
