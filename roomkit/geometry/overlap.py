from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from roomkit.geometry.curves import Line, Segment
from roomkit.geometry.primitives import is_parallel
from roomkit.geometry.tolerance import EPS_COINCIDENT


logger = logging.getLogger(__name__)

# Hard cap on full scans before the input is declared malformed.
MAX_PASSES = 100


class OverlapResolutionDivergence(RuntimeError):
    pass


def _projection_interval(a: Line, b: Line, tolerance: float) -> Optional[Tuple[float, float]]:
    """A's sorted parameter interval on B when A runs along B and overlaps it."""
    if not is_parallel(a.direction, b.direction, tolerance):
        return None
    if any(b.distance_to_unbounded(p) > tolerance for p in a.tessellate()):
        return None
    p0 = b.parameter_of(a.start_point)
    p1 = b.parameter_of(a.end_point)
    if p1 < p0:
        p0, p1 = p1, p0
    overlap = min(p1, b.length) - max(p0, 0.0)
    if overlap <= tolerance:
        return None
    return p0, p1


def _residuals(b: Line, p0: float, p1: float, tolerance: float) -> List[Line]:
    # Pieces of the union outside the overlap: one below it, one above it.
    out: List[Line] = []
    for lo, hi in ((min(p0, 0.0), max(p0, 0.0)), (min(p1, b.length), max(p1, b.length))):
        if hi - lo > tolerance:
            out.append(Line(b.evaluate(lo), b.evaluate(hi)))
    return out


def break_overlapping_lines(
    curves: Sequence[Segment],
    tolerance: float = EPS_COINCIDENT,
    max_passes: int = MAX_PASSES,
) -> List[Segment]:
    """
    Remove collinear overlaps from a set of curves.

    Each overlapping pair is replaced by the parts of the two lines that do
    not overlap; slivers shorter than ``tolerance`` are dropped. Arcs pass
    through unchanged. Raises OverlapResolutionDivergence after ``max_passes``
    scans without reaching a fixed point.
    """
    work: List[Segment] = list(curves)
    passes = 0
    changed = True
    while changed:
        passes += 1
        if passes > max_passes:
            raise OverlapResolutionDivergence(f"overlap resolution did not settle within {max_passes} passes")
        changed = False
        for i, a in enumerate(work):
            if not isinstance(a, Line):
                continue
            for j, b in enumerate(work):
                if i == j or not isinstance(b, Line):
                    continue
                interval = _projection_interval(a, b, tolerance)
                if interval is None:
                    continue
                residual = _residuals(b, interval[0], interval[1], tolerance)
                work = [c for k, c in enumerate(work) if k not in (i, j)] + residual
                logger.debug("Merged overlapping lines %d and %d into %d piece(s)", i, j, len(residual))
                changed = True
                break
            if changed:
                break
    return work
