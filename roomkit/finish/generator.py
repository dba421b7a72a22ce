"""
Finish wall generation.

For every enclosed space a ring of thin finish walls is laid against the
inner faces of the bounding walls:

1. collect the boundary pieces owned by walls,
2. merge pieces continuing on one straight line and break collinear overlaps,
3. move each piece half a finish width toward the space's representative
   point and miter consecutive pieces at the corners,
4. create the walls with end joins disallowed,
5. trim each wall against the obstructions it crosses,
6. join walls meeting end to start,
7. join each finish wall to the base walls lying right behind it.

Failures of single items land in the report; the pass always continues with
the next segment or space. Only OverlapResolutionDivergence ends the pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from roomkit.elements.contracts import BoundarySegment, Document, ElementType, Space
from roomkit.finish.report import FinishReport, SkipRecord, SpaceFinishResult
from roomkit.geometry.curves import (
    Arc,
    Line,
    Segment,
    chord,
    lies_on_same_straight_line,
    line_line_intersection,
    trim_or_extend_arc,
)
from roomkit.geometry.overlap import MAX_PASSES, OverlapResolutionDivergence, break_overlapping_lines
from roomkit.geometry.primitives import DegenerateGeometryError, Point3
from roomkit.geometry.tolerance import EPS_COINCIDENT, MIN_FINISH_SEGMENT
from roomkit.rooms.descriptor import RoomDescriptor
from roomkit.rooms.reader import RoomExtraction


logger = logging.getLogger(__name__)

DEFAULT_ROOM_HEIGHT = 3.0


@dataclass
class _OffsetPiece:
    source: Segment
    curve: Segment
    connected_to_next: bool = False


def inward_direction(curve: Segment, target: Point3) -> Point3:
    """Planar unit vector from the chord midpoint of ``curve`` toward ``target``."""
    mid = chord(curve).midpoint()
    return (target - mid).flattened().normalize()


def offset_toward(curve: Segment, target: Point3, distance: float) -> Segment:
    return curve.translated(inward_direction(curve, target) * distance)


def _closest(points: List[Point3], to: Point3) -> Optional[Point3]:
    if not points:
        return None
    return min(points, key=lambda p: p.distance_to(to))


def miter_pair(first: Segment, second: Segment) -> Optional[Tuple[Segment, Segment]]:
    """
    Trim or extend two consecutive curves so ``first`` ends where ``second``
    starts. Returns None when the pair has no usable corner point.
    """
    corner = (first.end_point + second.start_point) / 2.0
    if isinstance(first, Line) and isinstance(second, Line):
        p = line_line_intersection(first, second)
        if p is None:
            return None
        return Line(first.a, p), Line(p, second.b)
    if isinstance(first, Line) and isinstance(second, Arc):
        p = _closest(second.line_intersections(first.a, first.b, bounded=False), corner)
        if p is None:
            return None
        return Line(first.a, p), trim_or_extend_arc(second, p)
    if isinstance(first, Arc) and isinstance(second, Line):
        p = _closest(first.line_intersections(second.a, second.b, bounded=False), corner)
        if p is None:
            return None
        return trim_or_extend_arc(first, p), Line(p, second.b)
    return None


def merge_collinear(curves: List[Segment], tolerance: float = EPS_COINCIDENT) -> List[Segment]:
    """Join consecutive lines that continue one another on the same straight line."""

    def _continues(a: Segment, b: Segment) -> bool:
        return (
            isinstance(a, Line)
            and isinstance(b, Line)
            and a.end_point.is_almost_equal_to(b.start_point, tolerance)
            and a.direction.dot(b.direction) > 0.0
            and lies_on_same_straight_line(a, b)
        )

    out: List[Segment] = []
    for curve in curves:
        if out and _continues(out[-1], curve):
            out[-1] = Line(out[-1].a, curve.b)
            continue
        out.append(curve)
    # The loop is cyclic: the last piece may run on into the first.
    if len(out) > 2 and _continues(out[-1], out[0]):
        out[0] = Line(out[-1].a, out[0].b)
        out.pop()
    return out


class WallFinishGenerator:
    def __init__(
        self,
        document: Document,
        finish_type: ElementType,
        default_height: float = DEFAULT_ROOM_HEIGHT,
        tolerance: float = EPS_COINCIDENT,
        rooms: Optional[RoomExtraction] = None,
        max_passes: int = MAX_PASSES,
    ) -> None:
        self.document = document
        self.finish_type = finish_type
        self.default_height = float(default_height)
        self.tolerance = float(tolerance)
        self.max_passes = int(max_passes)
        self._descriptors: Dict[str, RoomDescriptor] = {}
        if rooms is not None:
            self._descriptors = {rooms.space_ids[r.label]: r for r in rooms.rooms if r.label in rooms.space_ids}
        self._generated: Set[str] = set()

    @property
    def half_width(self) -> float:
        return self.finish_type.width * 0.5

    def generate(self, spaces: Optional[Iterable[Space]] = None) -> FinishReport:
        report = FinishReport()
        self._generated = set()
        for space in (self.document.spaces() if spaces is None else spaces):
            report.spaces.append(self.generate_space(space))
        logger.info(
            "Finish walls: %d created in %d space(s), %d skip(s)",
            len(report.wall_ids),
            len(report.spaces),
            len(report.skips),
        )
        return report

    def _skip(self, result: SpaceFinishResult, stage: str, item: str, reason: Any) -> None:
        result.skips.append(SkipRecord(stage, item, str(reason)))
        logger.warning("Finish %s skipped for %s: %s", stage, item, reason)

    def representative_point(self, space: Space) -> Optional[Point3]:
        """
        Point the finish walls move toward: the space location, else the host
        bounding box center, else the center of the extracted room's bounds.
        """
        if space.location is not None or (space.bbox_min is not None and space.bbox_max is not None):
            return space.representative_point()
        room = self._descriptors.get(space.id)
        if room is not None:
            bounds = room.axis_aligned_bounds()
            return (bounds.min_point + bounds.max_point) / 2.0
        return space.representative_point()

    def generate_space(self, space: Space) -> SpaceFinishResult:
        """Run every step for one space; a failure ends this space only."""
        result = SpaceFinishResult(space_id=space.id, space_name=space.name)
        try:
            self._generate_into(space, result)
        except OverlapResolutionDivergence:
            raise
        except Exception as e:
            self._skip(result, "space", space.id, e)
        return result

    def _generate_into(self, space: Space, result: SpaceFinishResult) -> None:
        loops = self.collect(space, result)
        if not any(loops):
            self._skip(result, "collect", space.id, "no wall boundary")
            return

        target = self.representative_point(space)
        if target is None:
            self._skip(result, "offset", space.id, "space has no representative point")
            return

        curves: List[Segment] = []
        for index, loop in enumerate(loops):
            pieces = self.offset_loop(loop, target, result, f"{space.id}/{index}")
            curves.extend(p.curve for p in pieces)

        walls = self.create(space, curves, result)
        self.trim(walls, result)
        result.adjacent_joins = self.join_adjacent(walls)
        result.base_joins = self.join_to_base(walls)

    def collect(self, space: Space, result: SpaceFinishResult) -> List[List[BoundarySegment]]:
        loops: List[List[BoundarySegment]] = []
        for li, loop in enumerate(space.boundary):
            kept: List[BoundarySegment] = []
            for si, seg in enumerate(loop):
                if seg.curve is None:
                    continue
                try:
                    owned = self.document.is_wall(seg.element_id)
                except Exception as e:
                    self._skip(result, "collect", f"{space.id}/{li}/{si}", e)
                    continue
                if owned:
                    kept.append(seg)
            loops.append(kept)
        return loops

    def offset_loop(self, loop: List[BoundarySegment], target: Point3, result: SpaceFinishResult, item: str) -> List[_OffsetPiece]:
        curves = merge_collinear([seg.curve for seg in loop], self.tolerance)
        curves = break_overlapping_lines(curves, self.tolerance, self.max_passes)

        pieces: List[_OffsetPiece] = []
        for k, curve in enumerate(curves):
            if curve.length < MIN_FINISH_SEGMENT:
                self._skip(result, "offset", f"{item}/{k}", f"segment shorter than {MIN_FINISH_SEGMENT}")
                continue
            try:
                moved = offset_toward(curve, target, self.half_width)
            except DegenerateGeometryError as e:
                self._skip(result, "offset", f"{item}/{k}", e)
                continue
            pieces.append(_OffsetPiece(source=curve, curve=moved))

        n = len(pieces)
        for i in range(n):
            nxt = pieces[(i + 1) % n]
            if nxt is pieces[i]:
                continue
            pieces[i].connected_to_next = pieces[i].source.end_point.is_almost_equal_to(nxt.source.start_point, self.tolerance)

        if n > 1:
            for i in range(n):
                if not pieces[i].connected_to_next:
                    continue
                j = (i + 1) % n
                try:
                    mitered = miter_pair(pieces[i].curve, pieces[j].curve)
                except DegenerateGeometryError as e:
                    logger.debug("Corner %s/%d left unmitered: %s", item, i, e)
                    continue
                if mitered is not None:
                    pieces[i].curve, pieces[j].curve = mitered
        return pieces

    def create(self, space: Space, curves: List[Segment], result: SpaceFinishResult) -> List[Any]:
        height = space.height if space.height and space.height > 0.0 else self.default_height
        walls: List[Any] = []
        for k, curve in enumerate(curves):
            item = f"{space.id}/{k}"
            try:
                wall = self.document.create_wall(curve, self.finish_type.id, space.level_id, height, 0.0, False, False)
            except Exception as e:
                self._skip(result, "create", item, e)
                continue
            self._generated.add(wall.id)
            walls.append(wall)
            result.wall_ids.append(wall.id)
            for end in (0, 1):
                try:
                    self.document.disallow_wall_join_at_end(wall, end)
                except Exception as e:
                    self._skip(result, "create", f"{wall.id}@{end}", e)
        return walls

    def trim(self, walls: List[Any], result: SpaceFinishResult) -> None:
        doc = self.document
        for wall in walls:
            try:
                solids = list(doc.obstruction_solids(wall))
            except Exception as e:
                self._skip(result, "trim", wall.id, e)
                continue
            combined = None
            for solid in solids:
                if combined is None:
                    combined = solid
                    continue
                try:
                    combined = doc.union(combined, solid)
                except Exception as e:
                    logger.debug("Union of obstruction solids failed for %s: %s", wall.id, e)
            if combined is None:
                continue
            try:
                did_trim, curve = doc.intersect_curve_with_solid(wall.curve, combined)
                if did_trim and curve is not None:
                    doc.set_wall_curve(wall, curve)
                    result.trimmed_ids.append(wall.id)
            except Exception as e:
                self._skip(result, "trim", wall.id, e)

    def join_adjacent(self, walls: List[Any]) -> int:
        doc = self.document
        count = 0
        for a in walls:
            for b in walls:
                if a is b or not a.curve.end_point.is_almost_equal_to(b.curve.start_point, self.tolerance):
                    continue
                try:
                    if doc.are_joined(a, b):
                        continue
                    doc.join(a, b)
                    count += 1
                except Exception as e:
                    logger.debug("Join %s -> %s failed: %s", a.id, b.id, e)
        return count

    def join_to_base(self, walls: List[Any]) -> int:
        doc = self.document
        base = [w for w in doc.walls() if w.id not in self._generated]
        count = 0
        for finish in walls:
            mid = finish.curve.midpoint()
            for wall in base:
                if wall.curve.distance_to(mid) >= finish.width + wall.width:
                    continue
                try:
                    if doc.are_joined(finish, wall):
                        continue
                    doc.join(finish, wall)
                    count += 1
                except Exception as e:
                    logger.debug("Join %s -> base %s failed: %s", finish.id, wall.id, e)
        return count
