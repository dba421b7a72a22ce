from __future__ import annotations

import pytest

from roomkit.geometry.primitives import (
    DegenerateGeometryError,
    DirectionComparer,
    Point3,
    canonical_direction,
    geometric_center,
    is_parallel,
    is_perpendicular,
    point_with_min_projection,
    remove_duplicate_points,
    sort_along_axis,
)


def test_point_coincidence_is_tolerance_based() -> None:
    p = Point3(1.0, 2.0, 3.0)
    assert p.is_almost_equal_to(Point3(1.0, 2.0, 3.00005))
    assert not p.is_almost_equal_to(Point3(1.0, 2.0, 3.001))
    assert p.is_almost_equal_to(Point3(1.0, 2.0, 3.001), tolerance=0.01)


def test_vector_arithmetic() -> None:
    a = Point3(1.0, 0.0, 0.0)
    b = Point3(0.0, 1.0, 0.0)
    assert a.cross(b).is_almost_equal_to(Point3(0.0, 0.0, 1.0))
    assert a.dot(b) == 0.0
    assert ((a + b) * 2.0).is_almost_equal_to(Point3(2.0, 2.0, 0.0))
    assert Point3(3.0, 4.0, 0.0).length() == pytest.approx(5.0)
    assert a.rotated_90().is_almost_equal_to(Point3(0.0, 1.0, 0.0))


def test_normalize_zero_vector_raises() -> None:
    with pytest.raises(DegenerateGeometryError):
        Point3.zero().normalize()


def test_canonical_direction_flips_dominant_component() -> None:
    assert canonical_direction(Point3(-2.0, 0.0, 0.0)).is_almost_equal_to(Point3(1.0, 0.0, 0.0))
    assert canonical_direction(Point3(0.3, -1.0, 0.0)).y > 0.0
    # Tie between X and Y resolves on X.
    d = canonical_direction(Point3(-1.0, 1.0, 0.0))
    assert d.x > 0.0 and d.y < 0.0


def test_direction_comparer_treats_opposites_as_equal() -> None:
    cmp = DirectionComparer()
    assert cmp.equals(Point3(0.0, -1.0, 0.0), Point3(0.0, 3.0, 0.0))
    assert not cmp.equals(Point3(1.0, 0.0, 0.0), Point3(0.0, 1.0, 0.0))
    assert not cmp.equals(None, Point3(1.0, 0.0, 0.0))
    assert cmp.hash_key(Point3(-1.0, 0.0, 0.0)) == cmp.hash_key(Point3(5.0, 0.0, 0.0))


def test_direction_comparer_unique_keeps_first_occurrence() -> None:
    x = Point3(1.0, 0.0, 0.0)
    out = DirectionComparer().unique([x, Point3(-1.0, 0.0, 0.0), Point3(0.0, 2.0, 0.0), Point3.zero()])
    assert out == [x, Point3(0.0, 2.0, 0.0)]


def test_parallel_and_perpendicular() -> None:
    x = Point3(1.0, 0.0, 0.0)
    assert is_parallel(x, Point3(-1.0, 0.0, 0.0))
    assert not is_parallel(x, Point3(0.0, 1.0, 0.0))
    assert is_perpendicular(x, Point3(0.0, 1.0, 0.0))
    assert not is_perpendicular(x, Point3(1.0, 1.0, 0.0).normalize())


def test_point_set_helpers() -> None:
    pts = [Point3(3.0, 0.0), Point3(1.0, 1.0), Point3(1.0, 1.00001), Point3(-2.0, 5.0)]
    assert len(remove_duplicate_points(pts)) == 3
    assert [p.x for p in sort_along_axis(pts)] == [-2.0, 1.0, 1.0, 3.0]
    assert point_with_min_projection(pts, Point3(0.0, -1.0, 0.0)).is_almost_equal_to(Point3(-2.0, 5.0))
    assert point_with_min_projection([], Point3(1.0, 0.0, 0.0)) is None
    c = geometric_center([Point3(0.0, 0.0), Point3(2.0, 0.0), Point3(2.0, 2.0), Point3(0.0, 2.0)])
    assert c.is_almost_equal_to(Point3(1.0, 1.0))


def test_equality_is_exact_and_coincidence_is_tolerant() -> None:
    p = Point3(1.0, 2.0)
    q = Point3(1.0 + 1e-6, 2.0)
    assert p != q
    assert p.is_almost_equal_to(q)
    assert len({p, q, Point3(1.0, 2.0)}) == 2
    assert not p.is_almost_equal_to(Point3(1.001, 2.0))
