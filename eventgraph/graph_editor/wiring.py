"""Connection curve math.

Every wire is a cubic bezier whose inner control points are pushed
WIRE_TANGENT units horizontally: right of the start anchor, left of the end
anchor.  The offset is fixed rather than distance-scaled, so a wire whose end
lies left of its start still leaves and enters its ports horizontally.
"""

from __future__ import annotations
import math

from .geometry import Point

WIRE_TANGENT = 100.0


def edge_curve(start: Point, end: Point,
               tangent: float = WIRE_TANGENT) -> tuple[Point, Point, Point, Point]:
    """Return (p0, c0, c1, p1) for the wire from start (output side) to end."""
    return (
        start,
        Point(start.x + tangent, start.y),
        Point(end.x - tangent, end.y),
        end,
    )


def curve_point(curve: tuple[Point, Point, Point, Point], t: float) -> Point:
    p0, c0, c1, p1 = curve
    mt = 1.0 - t
    a, b, c, d = mt ** 3, 3 * mt ** 2 * t, 3 * mt * t ** 2, t ** 3
    return Point(
        a * p0.x + b * c0.x + c * c1.x + d * p1.x,
        a * p0.y + b * c0.y + c * c1.y + d * p1.y,
    )


def distance_to_curve(pt: Point, start: Point, end: Point,
                      samples: int = 30) -> float:
    """Approximate minimum distance from pt to the wire start → end."""
    curve = edge_curve(start, end)
    best = math.inf
    for i in range(samples + 1):
        p = curve_point(curve, i / samples)
        best = min(best, math.hypot(pt.x - p.x, pt.y - p.y))
    return best
