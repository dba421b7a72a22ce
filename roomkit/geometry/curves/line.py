from __future__ import annotations

from dataclasses import dataclass
from typing import List

from roomkit.geometry.primitives import DegenerateGeometryError, Point3
from roomkit.geometry.tolerance import EPS_POS


@dataclass(frozen=True)
class Line:
    a: Point3
    b: Point3

    def __post_init__(self) -> None:
        if self.a.distance_to(self.b) <= EPS_POS:
            raise DegenerateGeometryError("line endpoints coincide")

    @property
    def start_point(self) -> Point3:
        return self.a

    @property
    def end_point(self) -> Point3:
        return self.b

    @property
    def direction(self) -> Point3:
        return (self.b - self.a).normalize()

    @property
    def length(self) -> float:
        return self.a.distance_to(self.b)

    def point_at(self, t: float) -> Point3:
        """Point at normalized parameter ``t`` (0 = start, 1 = end)."""
        return self.a + (self.b - self.a) * float(t)

    def evaluate(self, param: float) -> Point3:
        """Point at distance ``param`` from the start along the unbounded line."""
        return self.a + self.direction * float(param)

    def parameter_of(self, p: Point3) -> float:
        """Signed distance of the projection of ``p`` from the start, unbounded."""
        return (p - self.a).dot(self.direction)

    def project(self, p: Point3) -> Point3:
        t = min(max(self.parameter_of(p), 0.0), self.length)
        return self.evaluate(t)

    def distance_to(self, p: Point3) -> float:
        return self.project(p).distance_to(p)

    def distance_to_unbounded(self, p: Point3) -> float:
        return self.evaluate(self.parameter_of(p)).distance_to(p)

    def midpoint(self) -> Point3:
        return self.point_at(0.5)

    def tessellate(self) -> List[Point3]:
        return [self.a, self.b]

    def translated(self, v: Point3) -> "Line":
        return Line(self.a + v, self.b + v)

    def reversed(self) -> "Line":
        return Line(self.b, self.a)

    def with_end_points(self, start: Point3, end: Point3) -> "Line":
        return Line(start, end)
