"""
Closed curve loops.

Boundary pieces coming from the host are often loosely ordered, duplicated
at their joints or missing the closing edge. ``rebuild_and_close`` turns
them into a clean closed polygon; ``close_if_open`` only adds the missing
closing edge.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from roomkit.geometry.curves import Line, Segment
from roomkit.geometry.primitives import Point3, geometric_center, remove_duplicate_points
from roomkit.geometry.tolerance import EPS_COINCIDENT


class MalformedContourError(ValueError):
    pass


@dataclass(frozen=True)
class CurveLoop:
    segments: Tuple[Segment, ...] = ()

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def is_open(self, tolerance: float = EPS_COINCIDENT) -> bool:
        if not self.segments:
            return True
        return not self.segments[-1].end_point.is_almost_equal_to(self.segments[0].start_point, tolerance)

    def vertices(self) -> List[Point3]:
        """Start point of every segment, in loop order."""
        return [s.start_point for s in self.segments]

    def points(self) -> List[Point3]:
        """Vertex chain including the end of the last segment."""
        if not self.segments:
            return []
        return self.vertices() + [self.segments[-1].end_point]

    def length(self) -> float:
        return sum(s.length for s in self.segments)

    def appended(self, segment: Segment) -> "CurveLoop":
        return CurveLoop(self.segments + (segment,))

    def contains_point(self, point: Point3) -> bool:
        """Even-odd crossing test in plan."""
        poly = self.vertices()
        x, y = point.x, point.y
        inside = False
        n = len(poly)
        for i in range(n):
            a = poly[i]
            b = poly[(i + 1) % n]
            if (a.y > y) != (b.y > y):
                if x < (b.x - a.x) * (y - a.y) / (b.y - a.y) + a.x:
                    inside = not inside
        return inside

    @staticmethod
    def from_points(points: Sequence[Point3], closed: bool = True) -> "CurveLoop":
        segs: List[Segment] = [Line(points[i], points[i + 1]) for i in range(len(points) - 1)]
        if closed and len(points) > 2 and not points[-1].is_almost_equal_to(points[0]):
            segs.append(Line(points[-1], points[0]))
        return CurveLoop(tuple(segs))


def close_if_open(loop: CurveLoop, tolerance: float = EPS_COINCIDENT) -> CurveLoop:
    if not loop.segments or not loop.is_open(tolerance):
        return loop
    return loop.appended(Line(loop.segments[-1].end_point, loop.segments[0].start_point))


def rebuild_and_close(pieces: Iterable[Optional[Segment]], tolerance: float = EPS_COINCIDENT) -> CurveLoop:
    """
    Rebuild a closed polygon from loosely connected pieces.

    Arcs degrade to their chords. An empty input gives an empty loop; fewer
    than three distinct points raise MalformedContourError.
    """
    curves = [c for c in pieces if c is not None]
    if not curves:
        return CurveLoop()

    points: List[Point3] = []
    for c in curves:
        start = c.start_point
        if not points or not points[-1].is_almost_equal_to(start, tolerance):
            points.append(start)
    final = curves[-1].end_point
    if not points[-1].is_almost_equal_to(final, tolerance):
        points.append(final)

    if points[-1].is_almost_equal_to(points[0], tolerance):
        points[-1] = points[0]
    else:
        points.append(points[0])

    if len(points) - 1 < 3:
        raise MalformedContourError(f"contour has {len(points) - 1} usable point(s), need at least 3")

    segs: List[Segment] = []
    for p1, p2 in zip(points, points[1:]):
        if p1.is_almost_equal_to(p2, tolerance):
            continue
        segs.append(Line(p1, p2))
    if len(segs) < 3:
        raise MalformedContourError("contour collapses to fewer than 3 segments")
    return CurveLoop(tuple(segs))


def polygon_from_points(points: Sequence[Point3], normal: Optional[Point3] = None, tolerance: float = EPS_COINCIDENT) -> CurveLoop:
    """Closed polygon through ``points`` ordered counter-clockwise about ``normal``."""
    if len(points) < 3:
        raise MalformedContourError("at least three points are required to form a polygon")
    pts = remove_duplicate_points(points, tolerance)
    if len(pts) < 3:
        raise MalformedContourError("not enough distinct points left to form a polygon")

    n = (normal or Point3.basis_z()).normalize()
    x_axis = n.cross(_least_parallel_axis(n)).normalize()
    y_axis = n.cross(x_axis).normalize()
    center = geometric_center(pts)

    def _angle(p: Point3) -> float:
        v = p - center
        return math.atan2(v.dot(y_axis), v.dot(x_axis))

    ordered = sorted(pts, key=_angle)
    return CurveLoop(tuple(Line(ordered[i], ordered[(i + 1) % len(ordered)]) for i in range(len(ordered))))


def _least_parallel_axis(n: Point3) -> Point3:
    ax, ay, az = abs(n.x), abs(n.y), abs(n.z)
    if ax <= ay and ax <= az:
        return Point3.basis_x()
    if ay <= ax and ay <= az:
        return Point3.basis_y()
    return Point3.basis_z()


def is_valid_profile(curves: Sequence[Segment], tolerance: float = EPS_COINCIDENT) -> bool:
    """Every endpoint is shared by exactly two curves."""
    if len(curves) < 3:
        return False
    inv = 1.0 / tolerance
    counts: Dict[Tuple[int, int, int], int] = {}
    for c in curves:
        for p in (c.start_point, c.end_point):
            key = (int(round(p.x * inv)), int(round(p.y * inv)), int(round(p.z * inv)))
            counts[key] = counts.get(key, 0) + 1
    return all(v == 2 for v in counts.values())
