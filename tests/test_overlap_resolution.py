from __future__ import annotations

import math

import pytest

from roomkit.geometry.curves import Arc, Line
from roomkit.geometry.overlap import MAX_PASSES, OverlapResolutionDivergence, break_overlapping_lines
from roomkit.geometry.primitives import Point3


def _spans(curves):
    return sorted((round(c.start_point.x, 6), round(c.end_point.x, 6)) for c in curves)


def _x(a: float, b: float) -> Line:
    return Line(Point3(a, 0.0), Point3(b, 0.0))


def test_partial_overlap_leaves_outer_pieces() -> None:
    out = break_overlapping_lines([_x(0.0, 5.0), _x(2.0, 8.0)])
    assert _spans(out) == [(0.0, 2.0), (5.0, 8.0)]


def test_contained_line_splits_container() -> None:
    assert _spans(break_overlapping_lines([_x(2.0, 3.0), _x(0.0, 10.0)])) == [(0.0, 2.0), (3.0, 10.0)]
    assert _spans(break_overlapping_lines([_x(0.0, 10.0), _x(2.0, 3.0)])) == [(0.0, 2.0), (3.0, 10.0)]


def test_identical_lines_cancel() -> None:
    assert break_overlapping_lines([_x(0.0, 5.0), _x(5.0, 0.0)]) == []


def test_touching_and_parallel_lines_are_kept() -> None:
    touching = [_x(0.0, 1.0), _x(1.0, 2.0)]
    assert _spans(break_overlapping_lines(touching)) == [(0.0, 1.0), (1.0, 2.0)]
    offset = [_x(0.0, 5.0), Line(Point3(0.0, 1.0), Point3(5.0, 1.0))]
    assert len(break_overlapping_lines(offset)) == 2


def test_arcs_pass_through() -> None:
    arc = Arc(center=Point3(0.0, 0.0), radius=1.0, start_rad=0.0, end_rad=math.pi / 2.0)
    out = break_overlapping_lines([arc, _x(0.0, 5.0), _x(1.0, 2.0)])
    assert arc in out
    assert len(out) == 3


def test_pass_limit_raises_divergence() -> None:
    with pytest.raises(OverlapResolutionDivergence):
        break_overlapping_lines([_x(0.0, 5.0), _x(2.0, 8.0)], max_passes=1)


def _overlapping_pairs(count: int):
    # One overlapping pair per row; rows never interact.
    curves = []
    for k in range(count):
        y = float(k)
        curves.append(Line(Point3(0.0, y), Point3(5.0, y)))
        curves.append(Line(Point3(2.0, y), Point3(8.0, y)))
    return curves


def test_default_cap_settles_99_overlapping_pairs() -> None:
    out = break_overlapping_lines(_overlapping_pairs(99))
    assert len(out) == 198
    assert MAX_PASSES == 100


def test_default_cap_rejects_101_overlapping_pairs() -> None:
    with pytest.raises(OverlapResolutionDivergence):
        break_overlapping_lines(_overlapping_pairs(101))
