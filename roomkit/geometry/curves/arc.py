from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List

from roomkit.geometry.primitives import DegenerateGeometryError, Point3
from roomkit.geometry.tolerance import EPS_COINCIDENT, EPS_POS


# Angular step used when sampling arcs (10 degrees).
_SAMPLE_STEP = math.pi / 18.0


def _norm_angle(a: float) -> float:
    twopi = 2.0 * math.pi
    out = float(a) % twopi
    if out < 0.0:
        out += twopi
    return out


def _ccw_delta(a0: float, a1: float) -> float:
    d = _norm_angle(a1) - _norm_angle(a0)
    if d < 0.0:
        d += 2.0 * math.pi
    return d


@dataclass(frozen=True)
class Arc:
    """Planar circular arc at the elevation of its center."""
    center: Point3
    radius: float
    start_rad: float
    end_rad: float
    ccw: bool = True

    def __post_init__(self) -> None:
        if float(self.radius) <= EPS_POS:
            raise DegenerateGeometryError("arc radius must be positive")

    @staticmethod
    def from_bulge(start: Point3, end: Point3, bulge: float) -> "Arc":
        b = float(bulge)
        if abs(b) <= EPS_POS:
            raise ValueError("bulge cannot be zero for arc")
        chord = math.hypot(end.x - start.x, end.y - start.y)
        if chord <= EPS_POS:
            raise DegenerateGeometryError("bulge arc requires distinct endpoints")
        theta = 4.0 * math.atan(b)
        st = math.sin(theta * 0.5)
        if abs(st) <= EPS_POS:
            raise ValueError("invalid bulge angle")
        radius = abs(chord / (2.0 * st))

        mx, my = (start.x + end.x) * 0.5, (start.y + end.y) * 0.5
        dx, dy = end.x - start.x, end.y - start.y
        nx, ny = -dy / chord, dx / chord
        d = math.sqrt(max(radius * radius - (chord * 0.5) * (chord * 0.5), 0.0))
        # Arcs sweeping more than a half turn keep their center on the far side.
        sign = 1.0 if b > 0.0 else -1.0
        if abs(b) > 1.0:
            sign = -sign
        cx, cy = mx + sign * d * nx, my + sign * d * ny

        a0 = math.atan2(start.y - cy, start.x - cx)
        a1 = math.atan2(end.y - cy, end.x - cx)
        return Arc(center=Point3(cx, cy, start.z), radius=radius, start_rad=a0, end_rad=a1, ccw=(b > 0.0))

    def _point_at_angle(self, a: float) -> Point3:
        return Point3(
            self.center.x + self.radius * math.cos(a),
            self.center.y + self.radius * math.sin(a),
            self.center.z,
        )

    @property
    def start_point(self) -> Point3:
        return self._point_at_angle(self.start_rad)

    @property
    def end_point(self) -> Point3:
        return self._point_at_angle(self.end_rad)

    @property
    def length(self) -> float:
        return self.radius * self.sweep()

    def sweep(self) -> float:
        if self.ccw:
            return _ccw_delta(self.start_rad, self.end_rad)
        return _ccw_delta(self.end_rad, self.start_rad)

    def angle_of(self, p: Point3) -> float:
        return math.atan2(p.y - self.center.y, p.x - self.center.x)

    def contains_angle(self, a: float, eps: float = EPS_COINCIDENT) -> bool:
        ang = _norm_angle(a)
        if self.ccw:
            d = _ccw_delta(self.start_rad, ang)
            return d <= self.sweep() + eps
        d = _ccw_delta(self.end_rad, ang)
        return d <= self.sweep() + eps

    def point_at(self, t: float) -> Point3:
        tt = min(1.0, max(0.0, float(t)))
        sw = self.sweep()
        a = self.start_rad + sw * tt if self.ccw else self.start_rad - sw * tt
        return self._point_at_angle(a)

    def midpoint(self) -> Point3:
        return self.point_at(0.5)

    def tessellate(self) -> List[Point3]:
        n = max(2, int(math.ceil(self.sweep() / _SAMPLE_STEP)))
        return [self.point_at(i / float(n)) for i in range(n + 1)]

    def nearest_point(self, p: Point3) -> Point3:
        vx, vy = p.x - self.center.x, p.y - self.center.y
        if math.hypot(vx, vy) <= EPS_POS:
            return min([self.start_point, self.end_point], key=lambda q: q.distance_to(p))
        ang = math.atan2(vy, vx)
        if self.contains_angle(ang):
            return self._point_at_angle(ang)
        return min([self.start_point, self.end_point], key=lambda q: q.distance_to(p))

    def distance_to(self, p: Point3) -> float:
        return self.nearest_point(p).distance_to(p)

    def translated(self, v: Point3) -> "Arc":
        return Arc(center=self.center + v, radius=self.radius, start_rad=self.start_rad, end_rad=self.end_rad, ccw=self.ccw)

    def reversed(self) -> "Arc":
        return Arc(center=self.center, radius=self.radius, start_rad=self.end_rad, end_rad=self.start_rad, ccw=not self.ccw)

    def with_angles(self, start_rad: float, end_rad: float) -> "Arc":
        return Arc(center=self.center, radius=self.radius, start_rad=start_rad, end_rad=end_rad, ccw=self.ccw)

    def line_intersections(self, a: Point3, b: Point3, eps: float = EPS_COINCIDENT, bounded: bool = True) -> List[Point3]:
        """Intersections with the segment ``a``-``b``, or its supporting line when not ``bounded``."""
        cx, cy = self.center.x, self.center.y
        dx, dy = b.x - a.x, b.y - a.y
        fx, fy = a.x - cx, a.y - cy

        A = dx * dx + dy * dy
        if A <= EPS_POS:
            return []
        B = 2.0 * (fx * dx + fy * dy)
        C = fx * fx + fy * fy - self.radius * self.radius
        disc = B * B - 4.0 * A * C
        if disc < -eps:
            return []
        s = math.sqrt(max(0.0, disc))
        out: List[Point3] = []
        for t in ((-B - s) / (2.0 * A), (-B + s) / (2.0 * A)):
            if bounded:
                if t < -eps or t > 1.0 + eps:
                    continue
                t = min(1.0, max(0.0, t))
            p = Point3(a.x + dx * t, a.y + dy * t, self.center.z)
            if bounded and not self.contains_angle(self.angle_of(p), eps=eps):
                continue
            if not any(p.distance_to(q) <= eps for q in out):
                out.append(p)
        return out
