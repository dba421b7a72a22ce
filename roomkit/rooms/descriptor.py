"""
Room descriptor.

Geometric and inertial properties of a room contour: signed area, centroid,
second moments about the centroid and the principal axes. The properties are
computed once from the outer loop; a descriptor never changes afterwards,
``with_contours`` builds a new one.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from roomkit.geometry.curves import Line
from roomkit.geometry.loops import CurveLoop, MalformedContourError
from roomkit.geometry.primitives import DegenerateGeometryError, DirectionComparer, Point3
from roomkit.geometry.tolerance import (
    EPS_AREA,
    EPS_AXIS_LENGTH,
    EPS_AXIS_SIGN,
    EPS_DIRECTION_BIN,
    EPS_MOMENT,
    EPS_POS,
    EPS_RECT,
)


def room_label(room_type: str, sequence: int) -> str:
    return f"{room_type} {int(sequence):03d}"


@dataclass(frozen=True)
class SectionProperties:
    area: float
    center: Point3
    ixx: float
    iyy: float
    ixy: float
    i1: float
    i2: float
    major: Point3
    minor: Point3
    theta: float

    @property
    def axes_defined(self) -> bool:
        return self.major.length() >= EPS_AXIS_LENGTH and self.minor.length() >= EPS_AXIS_LENGTH

    def to_dict(self) -> dict:
        return {
            "area": float(self.area),
            "center": list(self.center.to_tuple()),
            "ixx": float(self.ixx),
            "iyy": float(self.iyy),
            "ixy": float(self.ixy),
            "i1": float(self.i1),
            "i2": float(self.i2),
            "major": list(self.major.to_tuple()),
            "minor": list(self.minor.to_tuple()),
            "rotation_deg": math.degrees(self.theta),
        }


def section_properties(vertices: Sequence[Point3]) -> SectionProperties:
    """
    Area, centroid and second moments of a simple polygon (shoelace sums).

    Clockwise input is normalised to the counter-clockwise convention, so the
    area and the moments are always reported positive. Doubly symmetric
    shapes have no preferred principal axes and report zero axis vectors.
    """
    n = len(vertices)
    if n < 3:
        raise MalformedContourError("a polygon must have at least 3 vertices")

    area = cx = cy = ixx = iyy = ixy = 0.0
    for i in range(n):
        j = (i + 1) % n
        xi, yi = vertices[i].x, vertices[i].y
        xj, yj = vertices[j].x, vertices[j].y
        xyij = xi * yj - xj * yi
        area += xyij
        cx += (xi + xj) * xyij
        cy += (yi + yj) * xyij
        ixx += (yi * yi + yi * yj + yj * yj) * xyij
        iyy += (xi * xi + xi * xj + xj * xj) * xyij
        ixy += (xi * yj + 2.0 * xi * yi + 2.0 * xj * yj + xj * yi) * xyij

    area *= 0.5
    if abs(area) <= EPS_AREA:
        raise DegenerateGeometryError("polygon has zero area")

    inv6a = 1.0 / (6.0 * area)
    cx *= inv6a
    cy *= inv6a
    ixx /= 12.0
    iyy /= 12.0
    ixy /= 24.0

    # Shift to centroidal axes.
    ixx -= area * cy * cy
    iyy -= area * cx * cx
    ixy -= area * cx * cy
    if area < 0.0:
        area, ixx, iyy, ixy = -area, -ixx, -iyy, -ixy

    c1 = (ixx + iyy) * 0.5
    c2 = (ixx - iyy) * 0.5
    c3 = math.sqrt(c2 * c2 + ixy * ixy)
    i1 = c1 + c3
    i2 = c1 - c3

    center = Point3(cx, cy, vertices[0].z)
    if abs(ixy) < EPS_MOMENT:
        if abs(ixx - iyy) < EPS_MOMENT:
            zero = Point3.zero()
            return SectionProperties(area, center, ixx, iyy, ixy, i1, i2, zero, zero, 0.0)
        theta = 0.0 if iyy > ixx else math.pi * 0.5
    else:
        theta = 0.5 * math.atan2(2.0 * ixy, iyy - ixx)

    minor = Point3(math.cos(theta), math.sin(theta), 0.0)
    if minor.x < -EPS_AXIS_SIGN:
        minor = -minor
    major = minor.rotated_90()
    return SectionProperties(area, center, ixx, iyy, ixy, i1, i2, major, minor, theta)


@dataclass(frozen=True)
class RectangularityResult:
    is_rectangular: bool
    width: float = 0.0
    length: float = 0.0


@dataclass(frozen=True)
class AxisAlignedBounds:
    width: float
    length: float
    min_point: Point3
    max_point: Point3


@dataclass(frozen=True)
class OrientedBounds:
    origin: Point3
    width_vector: Point3
    length_vector: Point3
    width: float
    length: float

    @property
    def area(self) -> float:
        return self.width * self.length


def _dominant_axes(loop: CurveLoop) -> Tuple[Point3, Point3]:
    """Axis pair from the edge direction carrying the most length."""
    bins: List[List[float]] = []
    for c in loop:
        d = c.direction
        for b in bins:
            if abs(abs(b[0] * d.x + b[1] * d.y) - 1.0) < EPS_DIRECTION_BIN:
                b[2] += c.length
                break
        else:
            bins.append([d.x, d.y, c.length])

    x1 = y1 = v_max = 0.0
    for bx, by, total in bins:
        if total > v_max:
            v_max, x1, y1 = total, bx, by

    if abs(x1) > abs(y1):
        minor = Point3(x1, y1, 0.0)
    else:
        minor = Point3(x1, y1, 0.0).cross(Point3.basis_z())
    if minor.x < -EPS_AXIS_SIGN:
        minor = -minor
    major = minor.cross(Point3.basis_z())
    return major, minor


def _endpoint_array(loops: Sequence[CurveLoop]) -> np.ndarray:
    pts = [(p.x, p.y) for loop in loops for c in loop for p in (c.start_point, c.end_point)]
    return np.asarray(pts, dtype=float).reshape(-1, 2)


@dataclass(frozen=True)
class RoomDescriptor:
    room_type: str
    sequence: int
    contours: Tuple[CurveLoop, ...]
    properties: SectionProperties = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.contours:
            raise MalformedContourError("a room needs an outer contour")
        object.__setattr__(self, "contours", tuple(self.contours))
        object.__setattr__(self, "properties", section_properties(self.contours[0].vertices()))

    @staticmethod
    def from_contour(room_type: str, sequence: int, outer: CurveLoop, islands: Sequence[CurveLoop] = ()) -> "RoomDescriptor":
        return RoomDescriptor(room_type=room_type, sequence=sequence, contours=(outer, *islands))

    def with_contours(self, contours: Sequence[CurveLoop]) -> "RoomDescriptor":
        return RoomDescriptor(room_type=self.room_type, sequence=self.sequence, contours=tuple(contours))

    @property
    def label(self) -> str:
        return room_label(self.room_type, self.sequence)

    @property
    def outer(self) -> CurveLoop:
        return self.contours[0]

    @property
    def has_islands(self) -> bool:
        return len(self.contours) > 1

    @property
    def area(self) -> float:
        return self.properties.area

    @property
    def center(self) -> Point3:
        return self.properties.center

    @property
    def major(self) -> Point3:
        return self.properties.major

    @property
    def minor(self) -> Point3:
        return self.properties.minor

    @property
    def i1(self) -> float:
        return self.properties.i1

    @property
    def i2(self) -> float:
        return self.properties.i2

    @property
    def rotation(self) -> float:
        """Rotation of the principal axes CCW from X, in degrees."""
        return math.degrees(self.properties.theta)

    def is_rectangular(self, tolerance: float = EPS_RECT) -> RectangularityResult:
        if self.has_islands:
            return RectangularityResult(False)
        edges = list(self.outer)
        if not edges or any(not isinstance(c, Line) for c in edges):
            return RectangularityResult(False)

        if self.properties.axes_defined:
            major, minor = self.major, self.minor
        else:
            major, minor = _dominant_axes(self.outer)

        center = self.center
        b_vals = [(c.start_point - center).dot(major) for c in edges]
        h_vals = [(c.start_point - center).dot(minor) for c in edges]

        prev_sign = 0.0
        for k in range(len(edges)):
            prev = edges[k - 1].direction
            cur = edges[k].direction
            cos = cur.dot(prev)
            sin = cur.cross(prev).z
            if abs(cos - 1.0) < tolerance * tolerance:
                continue
            if abs(cos) > tolerance:
                return RectangularityResult(False)
            if prev_sign != 0.0 and prev_sign * sin < 0.0:
                return RectangularityResult(False)
            if prev_sign == 0.0:
                prev_sign = sin

        return RectangularityResult(True, width=max(b_vals) - min(b_vals), length=max(h_vals) - min(h_vals))

    def axis_aligned_bounds(self) -> AxisAlignedBounds:
        pts = _endpoint_array(self.contours)
        lo = pts.min(axis=0)
        hi = pts.max(axis=0)
        z = self.center.z
        return AxisAlignedBounds(
            width=float(hi[0] - lo[0]),
            length=float(hi[1] - lo[1]),
            min_point=Point3(float(lo[0]), float(lo[1]), z),
            max_point=Point3(float(hi[0]), float(hi[1]), z),
        )

    def oriented_bounds(self) -> Optional[OrientedBounds]:
        """
        Smallest bounding rectangle aligned with one of the outer loop's edges.

        Only edge directions are tried, which is exact for orthogonal rooms and
        an approximation otherwise. Ties keep the first direction found.
        """
        loop = self.outer
        if len(loop) < 2:
            return None
        pts = _endpoint_array([loop])
        dirs = DirectionComparer().unique((c.end_point - c.start_point).flattened() for c in loop)

        best: Optional[OrientedBounds] = None
        for d in dirs:
            dx = d.normalize()
            dy = dx.rotated_90()
            px = pts @ np.array([dx.x, dx.y])
            py = pts @ np.array([dy.x, dy.y])
            w = float(px.max() - px.min())
            ln = float(py.max() - py.min())
            if best is None or w * ln < best.area - EPS_POS:
                origin = dx * float(px.min()) + dy * float(py.min())
                best = OrientedBounds(origin=origin, width_vector=dx, length_vector=dy, width=w, length=ln)
        return best

    def to_dict(self) -> dict:
        rect = self.is_rectangular()
        aabb = self.axis_aligned_bounds()
        obb = self.oriented_bounds()
        return {
            "label": self.label,
            "room_type": self.room_type,
            "sequence": int(self.sequence),
            "islands": len(self.contours) - 1,
            "properties": self.properties.to_dict(),
            "rectangular": {"value": rect.is_rectangular, "width": rect.width, "length": rect.length},
            "axis_aligned_bounds": {
                "width": aabb.width,
                "length": aabb.length,
                "min": list(aabb.min_point.to_tuple()),
                "max": list(aabb.max_point.to_tuple()),
            },
            "oriented_bounds": None
            if obb is None
            else {
                "origin": list(obb.origin.to_tuple()),
                "width_vector": list(obb.width_vector.to_tuple()),
                "length_vector": list(obb.length_vector.to_tuple()),
                "width": obb.width,
                "length": obb.length,
            },
        }
