from __future__ import annotations

import math
from typing import List, Optional, Union

from roomkit.geometry.curves.arc import Arc
from roomkit.geometry.curves.line import Line
from roomkit.geometry.primitives import DegenerateGeometryError, Point3, is_parallel
from roomkit.geometry.tolerance import EPS_ANG, EPS_COINCIDENT, EPS_POS


Segment = Union[Line, Arc]


class CurveKindError(TypeError):
    pass


def chord(curve: Segment) -> Line:
    if isinstance(curve, Line):
        return curve
    return Line(curve.start_point, curve.end_point)


def extend_curve(curve: Segment, value: float = 1.0) -> Segment:
    """Grow a curve by ``value`` at both ends."""
    if isinstance(curve, Line):
        d = curve.direction
        return Line(curve.a - d * value, curve.b + d * value)
    d_ang = float(value) / curve.radius
    if curve.sweep() + 2.0 * d_ang >= 2.0 * math.pi:
        raise DegenerateGeometryError("extended arc would close on itself")
    if curve.ccw:
        return curve.with_angles(curve.start_rad - d_ang, curve.end_rad + d_ang)
    return curve.with_angles(curve.start_rad + d_ang, curve.end_rad - d_ang)


def trim_or_extend_arc(curve: Segment, target: Point3) -> Arc:
    """Move the arc end closer to ``target`` onto the target's polar angle."""
    if not isinstance(curve, Arc):
        raise CurveKindError(f"expected an arc, got {type(curve).__name__}")
    at = curve.angle_of(target)
    if curve.start_point.distance_to(target) < curve.end_point.distance_to(target):
        return curve.with_angles(at, curve.end_rad)
    return curve.with_angles(curve.start_rad, at)


def shared_end_point(first: Segment, second: Segment, tolerance: float = EPS_COINCIDENT) -> Optional[Point3]:
    f0, f1 = first.start_point, first.end_point
    s0, s1 = second.start_point, second.end_point
    for p, q in ((f0, s0), (f1, s0), (f0, s1), (f1, s1)):
        if p.distance_to(q) < tolerance:
            return p
    return None


def is_start_point_closer(curve: Segment, point: Point3) -> bool:
    return point.distance_to(curve.start_point) < point.distance_to(curve.end_point)


def lies_on_same_straight_line(first: Line, second: Line, tolerance: float = EPS_ANG) -> bool:
    if not is_parallel(first.direction, second.direction, tolerance):
        return False
    d = first.direction
    for p in first.tessellate():
        for q in second.tessellate():
            if p.distance_to(q) < tolerance:
                continue
            if not is_parallel(d, (q - p).normalize(), tolerance):
                return False
    return True


def line_line_intersection(first: Line, second: Line) -> Optional[Point3]:
    """Intersection of the supporting lines in plan; None when parallel."""
    d1, d2 = first.direction, second.direction
    den = d1.x * d2.y - d1.y * d2.x
    if abs(den) <= EPS_POS:
        return None
    w = second.a - first.a
    t = (w.x * d2.y - w.y * d2.x) / den
    p = first.evaluate(t)
    return Point3(p.x, p.y, first.a.z)


def tessellate_all(curves: List[Segment]) -> List[Point3]:
    out: List[Point3] = []
    for c in curves:
        for p in c.tessellate():
            if not out or out[-1].distance_to(p) > EPS_POS:
                out.append(p)
    return out
