"""
In-memory host document.

Implements every collaborator protocol of ``roomkit.elements.contracts`` with
plain records. Obstructions are plan footprints (shapely polygons); the solid
operations the generator needs reduce to 2D unions and line differences.
"""

from __future__ import annotations

import copy
import itertools
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple

from shapely.geometry import LineString, MultiLineString
from shapely.geometry import Point as ShapelyPoint
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

from roomkit.elements.contracts import CollaboratorRejection, ElementType, Space
from roomkit.geometry.curves import Arc, Line, Segment
from roomkit.geometry.loops import CurveLoop
from roomkit.geometry.primitives import Point3
from roomkit.geometry.tolerance import EPS_COINCIDENT, MIN_SOLID_SIZE
from roomkit.ops.transactions import TransactionManager


@dataclass
class WallRecord:
    id: str
    curve: Segment
    type_id: str
    width: float
    level_id: Optional[str] = None
    height: float = 0.0
    offset: float = 0.0
    flip: bool = False
    structural: bool = False
    disallowed_ends: List[int] = field(default_factory=list)
    params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type_id": self.type_id,
            "width": float(self.width),
            "level_id": self.level_id,
            "height": float(self.height),
            "start": list(self.curve.start_point.to_tuple()),
            "end": list(self.curve.end_point.to_tuple()),
            "kind": "arc" if isinstance(self.curve, Arc) else "line",
        }


@dataclass
class SlabRecord:
    """Floor or ceiling."""
    id: str
    kind: str
    loops: Tuple[CurveLoop, ...]
    type_id: str
    level_id: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "type_id": self.type_id,
            "level_id": self.level_id,
            "loops": [[list(p.to_tuple()) for p in loop.vertices()] for loop in self.loops],
            "params": dict(self.params),
        }


@dataclass(frozen=True)
class Obstruction:
    id: str
    footprint: BaseGeometry


def curve_to_linestring(curve: Segment) -> LineString:
    return LineString([(p.x, p.y) for p in curve.tessellate()])


def _longest_part(geom: BaseGeometry) -> Optional[LineString]:
    if geom.is_empty:
        return None
    if isinstance(geom, LineString):
        return geom
    if isinstance(geom, MultiLineString):
        parts = list(geom.geoms)
    else:
        parts = [g for g in getattr(geom, "geoms", []) if isinstance(g, LineString)]
    if not parts:
        return None
    return max(parts, key=lambda g: g.length)


class MemoryDocument:
    def __init__(
        self,
        key: str = "memory",
        spaces: Sequence[Space] = (),
        wall_types: Sequence[ElementType] = (),
        floor_types: Sequence[ElementType] = (),
        ceiling_types: Sequence[ElementType] = (),
        levels: Sequence[ElementType] = (),
        obstructions: Sequence[Obstruction] = (),
    ) -> None:
        self.key = str(key)
        self._spaces: List[Space] = list(spaces)
        self._wall_types = list(wall_types)
        self._floor_types = list(floor_types)
        self._ceiling_types = list(ceiling_types)
        self._levels = list(levels)
        self.obstructions: List[Obstruction] = list(obstructions)

        self.wall_records: Dict[str, WallRecord] = {}
        self.floor_records: Dict[str, SlabRecord] = {}
        self.ceiling_records: Dict[str, SlabRecord] = {}
        self.joins: set[FrozenSet[str]] = set()
        self._ids = itertools.count(1)
        self.transactions = TransactionManager(self)

    # -- BoundarySource -----------------------------------------------------

    def spaces(self) -> List[Space]:
        return list(self._spaces)

    def add_space(self, space: Space) -> None:
        self._spaces.append(space)

    def is_wall(self, element_id: Optional[str]) -> bool:
        return element_id is not None and element_id in self.wall_records

    # -- ElementFactory -----------------------------------------------------

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids)}"

    def _wall_type(self, type_id: str) -> ElementType:
        for t in self._wall_types:
            if t.id == type_id:
                return t
        raise CollaboratorRejection(f"unknown wall type {type_id!r}")

    def add_wall(self, curve: Segment, type_id: str, level_id: Optional[str] = None, height: float = 0.0, wall_id: Optional[str] = None) -> WallRecord:
        """Place a pre-existing wall without going through the creation contract."""
        wtype = self._wall_type(type_id)
        rec = WallRecord(id=wall_id or self._next_id("W"), curve=curve, type_id=type_id, width=wtype.width, level_id=level_id, height=height)
        self.wall_records[rec.id] = rec
        return rec

    def create_wall(
        self,
        curve: Segment,
        type_id: str,
        level_id: Optional[str],
        height: float,
        offset: float,
        flip: bool,
        structural: bool,
    ) -> WallRecord:
        if height <= 0.0:
            raise CollaboratorRejection("wall height must be positive")
        wtype = self._wall_type(type_id)
        rec = WallRecord(
            id=self._next_id("W"),
            curve=curve,
            type_id=type_id,
            width=wtype.width,
            level_id=level_id,
            height=float(height),
            offset=float(offset),
            flip=bool(flip),
            structural=bool(structural),
        )
        self.wall_records[rec.id] = rec
        return rec

    def _wall(self, wall: Any) -> WallRecord:
        rec = self.wall_records.get(getattr(wall, "id", None))
        if rec is None:
            raise CollaboratorRejection(f"unknown wall {getattr(wall, 'id', wall)!r}")
        return rec

    def disallow_wall_join_at_end(self, wall: Any, end: int) -> None:
        if end not in (0, 1):
            raise CollaboratorRejection(f"wall end must be 0 or 1, got {end}")
        rec = self._wall(wall)
        if end not in rec.disallowed_ends:
            rec.disallowed_ends.append(end)

    def set_wall_curve(self, wall: Any, curve: Segment) -> None:
        self._wall(wall).curve = curve

    def _slab(self, kind: str, loops: Sequence[CurveLoop], type_id: str, level_id: Optional[str], types: List[ElementType]) -> SlabRecord:
        if not loops:
            raise CollaboratorRejection(f"{kind} needs at least one loop")
        if any(loop.is_open() for loop in loops):
            raise CollaboratorRejection(f"{kind} boundary must be closed")
        if not any(t.id == type_id for t in types):
            raise CollaboratorRejection(f"unknown {kind} type {type_id!r}")
        return SlabRecord(id=self._next_id(kind[0].upper()), kind=kind, loops=tuple(loops), type_id=type_id, level_id=level_id)

    def create_floor(self, loops: Sequence[CurveLoop], type_id: str, level_id: Optional[str]) -> SlabRecord:
        rec = self._slab("floor", loops, type_id, level_id, self._floor_types)
        self.floor_records[rec.id] = rec
        return rec

    def create_ceiling(self, loops: Sequence[CurveLoop], type_id: str, level_id: Optional[str]) -> SlabRecord:
        rec = self._slab("ceiling", loops, type_id, level_id, self._ceiling_types)
        self.ceiling_records[rec.id] = rec
        return rec

    def set_parameter(self, handle: Any, name: str, value: Any) -> None:
        hid = getattr(handle, "id", None)
        for table in (self.wall_records, self.floor_records, self.ceiling_records):
            if hid in table:
                table[hid].params[str(name)] = value
                return
        raise CollaboratorRejection(f"unknown element {hid!r}")

    def walls(self) -> List[WallRecord]:
        return list(self.wall_records.values())

    # -- SolidKernel ---------------------------------------------------------

    def obstruction_solids(self, wall: Any) -> List[BaseGeometry]:
        rec = self._wall(wall)
        band = curve_to_linestring(rec.curve).buffer(max(rec.width * 0.5, MIN_SOLID_SIZE))
        return [o.footprint for o in self.obstructions if o.footprint.intersects(band)]

    def union(self, a: BaseGeometry, b: BaseGeometry) -> BaseGeometry:
        return unary_union([a, b])

    def intersect_curve_with_solid(self, curve: Segment, solid: Any) -> Tuple[bool, Optional[Segment]]:
        """Longest piece of ``curve`` outside ``solid`` when it is shorter than the curve."""
        if solid is None or solid.is_empty:
            return False, None
        path = curve_to_linestring(curve)
        outside = _longest_part(path.difference(solid))
        # Arcs are compared on their sampled polyline, not their true length.
        if outside is None or abs(outside.length - path.length) <= EPS_COINCIDENT:
            return False, None

        first, last = outside.coords[0], outside.coords[-1]
        if path.project(ShapelyPoint(first)) > path.project(ShapelyPoint(last)):
            first, last = last, first
        z = curve.start_point.z
        p0 = Point3(first[0], first[1], z)
        p1 = Point3(last[0], last[1], z)
        if isinstance(curve, Line):
            return True, Line(p0, p1)
        return True, curve.with_angles(curve.angle_of(p0), curve.angle_of(p1))

    # -- JoinService -----------------------------------------------------------

    def join(self, a: Any, b: Any) -> None:
        ra, rb = self._wall(a), self._wall(b)
        if ra.id == rb.id:
            raise CollaboratorRejection("cannot join a wall to itself")
        pair = frozenset((ra.id, rb.id))
        if pair in self.joins:
            raise CollaboratorRejection(f"walls {ra.id} and {rb.id} are already joined")
        self.joins.add(pair)

    def are_joined(self, a: Any, b: Any) -> bool:
        return frozenset((getattr(a, "id", None), getattr(b, "id", None))) in self.joins

    # -- TransactionScope ------------------------------------------------------

    def begin(self, name: str) -> None:
        self.transactions.begin(name)

    def commit(self) -> None:
        self.transactions.commit()

    def rollback(self) -> None:
        self.transactions.rollback()

    def snapshot(self) -> Dict[str, Any]:
        return {
            "walls": copy.deepcopy(self.wall_records),
            "floors": copy.deepcopy(self.floor_records),
            "ceilings": copy.deepcopy(self.ceiling_records),
            "joins": set(self.joins),
        }

    def restore(self, state: Dict[str, Any]) -> None:
        self.wall_records = copy.deepcopy(state["walls"])
        self.floor_records = copy.deepcopy(state["floors"])
        self.ceiling_records = copy.deepcopy(state["ceilings"])
        self.joins = set(state["joins"])

    # -- TypeCatalog -----------------------------------------------------------

    def wall_types(self) -> List[ElementType]:
        return list(self._wall_types)

    def floor_types(self) -> List[ElementType]:
        return list(self._floor_types)

    def ceiling_types(self) -> List[ElementType]:
        return list(self._ceiling_types)

    def levels(self) -> List[ElementType]:
        return list(self._levels)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "walls": [w.to_dict() for w in self.wall_records.values()],
            "floors": [f.to_dict() for f in self.floor_records.values()],
            "ceilings": [c.to_dict() for c in self.ceiling_records.values()],
            "joins": sorted(sorted(p) for p in self.joins),
        }
