"""
Roomkit Geometry Module

Planar points and directions, line and arc segments, closed curve loops and
overlap resolution.
"""

from roomkit.geometry.primitives import (
    DegenerateGeometryError,
    DirectionComparer,
    Point3,
    canonical_direction,
    is_parallel,
    is_perpendicular,
)
from roomkit.geometry.curves import Arc, CurveKindError, Line, Segment
from roomkit.geometry.loops import (
    CurveLoop,
    MalformedContourError,
    close_if_open,
    polygon_from_points,
    rebuild_and_close,
)
from roomkit.geometry.overlap import OverlapResolutionDivergence, break_overlapping_lines

__all__ = [
    "DegenerateGeometryError",
    "DirectionComparer",
    "Point3",
    "canonical_direction",
    "is_parallel",
    "is_perpendicular",
    "Arc",
    "CurveKindError",
    "Line",
    "Segment",
    "CurveLoop",
    "MalformedContourError",
    "close_if_open",
    "polygon_from_points",
    "rebuild_and_close",
    "OverlapResolutionDivergence",
    "break_overlapping_lines",
]
