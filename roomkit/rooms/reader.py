"""
Room extraction.

Turns the spaces reported by a boundary source into room descriptors. The
first usable loop of a space is its outer perimeter, any further loops are
islands (columns, shafts). Rooms share one running number in collector
order; a room that cannot be built does not consume a number.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from roomkit.elements.contracts import BoundarySource
from roomkit.finish.report import SkipRecord
from roomkit.geometry.loops import CurveLoop, MalformedContourError, rebuild_and_close
from roomkit.geometry.primitives import DegenerateGeometryError
from roomkit.geometry.tolerance import EPS_COINCIDENT
from roomkit.rooms.descriptor import RoomDescriptor, room_label


logger = logging.getLogger(__name__)


@dataclass
class RoomExtraction:
    rooms: List[RoomDescriptor] = field(default_factory=list)
    loops: Dict[str, Tuple[CurveLoop, ...]] = field(default_factory=dict)
    space_ids: Dict[str, str] = field(default_factory=dict)
    skips: List[SkipRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "rooms": [r.to_dict() for r in self.rooms],
            "skips": [s.to_dict() for s in self.skips],
        }


def read_rooms(source: BoundarySource, tolerance: float = EPS_COINCIDENT) -> RoomExtraction:
    out = RoomExtraction()
    counter = 0

    for space in source.spaces():
        item = f"{space.name} ({space.id})"
        loops: List[CurveLoop] = []
        for index, raw in enumerate(space.boundary):
            try:
                loop = rebuild_and_close((seg.curve for seg in raw), tolerance)
            except (MalformedContourError, DegenerateGeometryError) as e:
                if not loops:
                    out.skips.append(SkipRecord("extract", item, f"outer contour: {e}"))
                    logger.warning("Skipping room %s: %s", item, e)
                    break
                logger.warning("Dropping island %d of %s: %s", index, item, e)
                continue
            if len(loop) == 0:
                continue
            loops.append(loop)
        else:
            if not loops:
                out.skips.append(SkipRecord("extract", item, "no boundary"))
                logger.warning("Skipping room %s: no boundary", item)
                continue
            seq = counter
            label = room_label(space.name, seq)
            if label in out.loops:
                out.skips.append(SkipRecord("extract", item, f"duplicate label {label!r}"))
                logger.warning("Skipping room %s: duplicate label %r", item, label)
                continue
            try:
                room = RoomDescriptor.from_contour(space.name, seq, loops[0], loops[1:])
            except (MalformedContourError, DegenerateGeometryError) as e:
                out.skips.append(SkipRecord("extract", item, str(e)))
                logger.warning("Skipping room %s: %s", item, e)
                continue
            counter += 1
            out.rooms.append(room)
            out.loops[label] = room.contours
            out.space_ids[label] = space.id

    logger.info("Extracted %d room(s), skipped %d", len(out.rooms), len(out.skips))
    return out
