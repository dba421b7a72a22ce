"""
Contracts with the host application.

The engine never persists elements or runs solid booleans itself. It talks
to the host through the protocols below; ``roomkit.elements.memory`` ships an
in-memory implementation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol, Sequence, Tuple

from roomkit.geometry.curves import Segment
from roomkit.geometry.loops import CurveLoop
from roomkit.geometry.primitives import Point3


class CollaboratorRejection(RuntimeError):
    pass


@dataclass(frozen=True)
class BoundarySegment:
    curve: Optional[Segment]
    element_id: Optional[str] = None


@dataclass(frozen=True)
class Space:
    """An enclosed space as reported by the host."""
    id: str
    name: str
    boundary: List[List[BoundarySegment]] = field(default_factory=list)
    location: Optional[Point3] = None
    bbox_min: Optional[Point3] = None
    bbox_max: Optional[Point3] = None
    height: Optional[float] = None
    level_id: Optional[str] = None

    def representative_point(self) -> Optional[Point3]:
        """Location point, else the center of the bounding box."""
        if self.location is not None:
            return self.location
        lo, hi = self.bbox_min, self.bbox_max
        if lo is None or hi is None:
            pts = [p for loop in self.boundary for s in loop if s.curve is not None for p in (s.curve.start_point, s.curve.end_point)]
            if not pts:
                return None
            lo = Point3(min(p.x for p in pts), min(p.y for p in pts), min(p.z for p in pts))
            hi = Point3(max(p.x for p in pts), max(p.y for p in pts), max(p.z for p in pts))
        return (lo + hi) / 2.0


@dataclass(frozen=True)
class ElementType:
    id: str
    name: str
    width: float = 0.0


class WallHandle(Protocol):
    id: str
    curve: Segment
    width: float


class BoundarySource(Protocol):
    def spaces(self) -> Sequence[Space]: ...

    def is_wall(self, element_id: Optional[str]) -> bool: ...


class ElementFactory(Protocol):
    def create_wall(
        self,
        curve: Segment,
        type_id: str,
        level_id: Optional[str],
        height: float,
        offset: float,
        flip: bool,
        structural: bool,
    ) -> WallHandle: ...

    def disallow_wall_join_at_end(self, wall: WallHandle, end: int) -> None: ...

    def set_wall_curve(self, wall: WallHandle, curve: Segment) -> None: ...

    def create_floor(self, loops: Sequence[CurveLoop], type_id: str, level_id: Optional[str]) -> Any: ...

    def create_ceiling(self, loops: Sequence[CurveLoop], type_id: str, level_id: Optional[str]) -> Any: ...

    def set_parameter(self, handle: Any, name: str, value: Any) -> None: ...

    def walls(self) -> Sequence[WallHandle]: ...


class SolidKernel(Protocol):
    def obstruction_solids(self, wall: WallHandle) -> Sequence[Any]: ...

    def union(self, a: Any, b: Any) -> Any: ...

    def intersect_curve_with_solid(self, curve: Segment, solid: Any) -> Tuple[bool, Optional[Segment]]: ...


class JoinService(Protocol):
    def join(self, a: WallHandle, b: WallHandle) -> None: ...

    def are_joined(self, a: WallHandle, b: WallHandle) -> bool: ...


class TransactionScope(Protocol):
    def begin(self, name: str) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class TypeCatalog(Protocol):
    def wall_types(self) -> List[ElementType]: ...

    def floor_types(self) -> List[ElementType]: ...

    def ceiling_types(self) -> List[ElementType]: ...

    def levels(self) -> List[ElementType]: ...


class Document(BoundarySource, ElementFactory, SolidKernel, JoinService, TransactionScope, TypeCatalog, Protocol):
    """Everything the generation phases need from one host document."""
