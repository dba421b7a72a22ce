from .arc import Arc
from .line import Line
from .ops import (
    CurveKindError,
    Segment,
    chord,
    extend_curve,
    is_start_point_closer,
    lies_on_same_straight_line,
    line_line_intersection,
    shared_end_point,
    tessellate_all,
    trim_or_extend_arc,
)

__all__ = [
    "Arc",
    "Line",
    "Segment",
    "CurveKindError",
    "chord",
    "extend_curve",
    "trim_or_extend_arc",
    "shared_end_point",
    "is_start_point_closer",
    "lies_on_same_straight_line",
    "line_line_intersection",
    "tessellate_all",
]
