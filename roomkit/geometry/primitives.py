"""
Roomkit geometry primitives.

Points and directions in model space. Geometric comparisons are tolerance based:
two points are the same point when their distance is below the tolerance,
and a direction and its negation describe the same axis.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from roomkit.geometry.tolerance import EPS_ANG, EPS_COINCIDENT, EPS_DIRECTION, EPS_POS


class DegenerateGeometryError(ValueError):
    pass


@dataclass(frozen=True)
class Point3:
    """
    3D point or vector.

    ``==`` and hashing compare coordinates exactly so points can key dicts and
    sets; geometric coincidence is ``is_almost_equal_to``.
    """
    x: float
    y: float
    z: float = 0.0

    def __add__(self, other: 'Point3') -> 'Point3':
        return Point3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: 'Point3') -> 'Point3':
        return Point3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> 'Point3':
        return Point3(self.x * scalar, self.y * scalar, self.z * scalar)

    def __rmul__(self, scalar: float) -> 'Point3':
        return self.__mul__(scalar)

    def __truediv__(self, scalar: float) -> 'Point3':
        return Point3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> 'Point3':
        return Point3(-self.x, -self.y, -self.z)

    def dot(self, other: 'Point3') -> float:
        """Dot product."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: 'Point3') -> 'Point3':
        """Cross product."""
        return Point3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def distance_to(self, other: 'Point3') -> float:
        return (self - other).length()

    def is_zero_length(self) -> bool:
        return self.length() <= EPS_POS

    def normalize(self) -> 'Point3':
        """Unit vector; a zero vector has no direction."""
        n = self.length()
        if n <= EPS_POS:
            raise DegenerateGeometryError("cannot normalize a zero-length vector")
        return self / n

    def is_almost_equal_to(self, other: 'Point3', tolerance: float = EPS_COINCIDENT) -> bool:
        return self.distance_to(other) < tolerance

    def flattened(self, z: float = 0.0) -> 'Point3':
        return Point3(self.x, self.y, z)

    def rotated_90(self) -> 'Point3':
        """Rotate CCW by 90 degrees about Z."""
        return Point3(-self.y, self.x, self.z)

    def to_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @staticmethod
    def from_sequence(values: Sequence[float]) -> 'Point3':
        if len(values) == 2:
            return Point3(float(values[0]), float(values[1]), 0.0)
        return Point3(float(values[0]), float(values[1]), float(values[2]))

    @staticmethod
    def zero() -> 'Point3':
        return Point3(0.0, 0.0, 0.0)

    @staticmethod
    def basis_x() -> 'Point3':
        return Point3(1.0, 0.0, 0.0)

    @staticmethod
    def basis_y() -> 'Point3':
        return Point3(0.0, 1.0, 0.0)

    @staticmethod
    def basis_z() -> 'Point3':
        return Point3(0.0, 0.0, 1.0)


# =============================================================================
# Directions
# =============================================================================

def canonical_direction(direction: Point3) -> Point3:
    """Normalize and flip so the dominant component is non-negative."""
    d = direction.normalize()
    ax, ay, az = abs(d.x), abs(d.y), abs(d.z)
    if ax >= ay and ax >= az:
        return -d if d.x < 0.0 else d
    if ay >= ax and ay >= az:
        return -d if d.y < 0.0 else d
    return -d if d.z < 0.0 else d


def is_parallel(a: Point3, b: Point3, tolerance: float = EPS_ANG) -> bool:
    return abs(abs(a.dot(b)) - 1.0) < tolerance


def is_perpendicular(a: Point3, b: Point3, tolerance: float = EPS_ANG) -> bool:
    return abs(a.dot(b)) < tolerance


class DirectionComparer:
    """Equality over axes: ``(1, 0, 0)`` and ``(-1, 0, 0)`` compare equal."""

    def __init__(self, tolerance: float = EPS_DIRECTION) -> None:
        self.tolerance = float(tolerance)

    def equals(self, a: Optional[Point3], b: Optional[Point3]) -> bool:
        if a is None or b is None:
            return False
        return canonical_direction(a).is_almost_equal_to(canonical_direction(b), self.tolerance)

    def hash_key(self, direction: Point3) -> Tuple[float, float, float]:
        d = canonical_direction(direction)
        return (round(d.x, 6), round(d.y, 6), round(d.z, 6))

    def unique(self, directions: Iterable[Point3]) -> List[Point3]:
        out: List[Point3] = []
        for d in directions:
            if d.is_zero_length() or any(self.equals(d, q) for q in out):
                continue
            out.append(d)
        return out


# =============================================================================
# Point set helpers
# =============================================================================

def geometric_center(points: Sequence[Point3]) -> Point3:
    if not points:
        raise ValueError("points must not be empty")
    n = float(len(points))
    return Point3(
        sum(p.x for p in points) / n,
        sum(p.y for p in points) / n,
        sum(p.z for p in points) / n,
    )


def remove_duplicate_points(points: Iterable[Point3], tolerance: float = EPS_COINCIDENT) -> List[Point3]:
    out: List[Point3] = []
    for p in points:
        if not any(q.distance_to(p) < tolerance for q in out):
            out.append(p)
    return out


def sort_along_axis(points: Iterable[Point3], axis: Optional[Point3] = None) -> List[Point3]:
    ax = (axis or Point3.basis_x()).normalize()
    return sorted(points, key=lambda p: (p.dot(ax), p.z))


def point_with_min_projection(points: Sequence[Point3], direction: Point3) -> Optional[Point3]:
    if not points:
        return None
    d = direction.normalize()
    return min(points, key=lambda p: p.dot(d))
