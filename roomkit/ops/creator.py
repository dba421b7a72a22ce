"""
Element creation phases.

Floors, ceilings and finish walls are created in three independent
transactions. A room that fails inside a phase is recorded and skipped; an
exception escaping the phase rolls back everything the phase created.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from roomkit.elements.cache import TypeCatalogCache
from roomkit.elements.contracts import Document, ElementType
from roomkit.finish.generator import WallFinishGenerator
from roomkit.finish.report import PhaseReport, SkipRecord
from roomkit.geometry.loops import rebuild_and_close
from roomkit.ops.transactions import scoped_transaction
from roomkit.project.settings import GenerationSettings
from roomkit.rooms.reader import RoomExtraction


logger = logging.getLogger(__name__)


def find_type(types: List[ElementType], name: str, ignore_case: bool = False) -> Optional[ElementType]:
    for t in types:
        if (t.name.casefold() == name.casefold()) if ignore_case else (t.name == name):
            return t
    return None


def find_type_or_first(types: List[ElementType], name: str) -> Optional[ElementType]:
    found = find_type(types, name)
    if found is not None:
        return found
    return types[0] if types else None


class ElementCreator:
    def __init__(
        self,
        document: Document,
        settings: Optional[GenerationSettings] = None,
        cache: Optional[TypeCatalogCache] = None,
        document_key: str = "document",
    ) -> None:
        self.document = document
        self.settings = settings or GenerationSettings()
        self.cache = cache or TypeCatalogCache()
        self.document_key = str(getattr(document, "key", document_key))

    def _level_id(self) -> Optional[str]:
        level = find_type_or_first(self.cache.levels(self.document_key, self.document), self.settings.level)
        return level.id if level is not None else None

    def _skip(self, report: PhaseReport, label: str, reason: object) -> None:
        report.skips.append(SkipRecord(report.phase, label, str(reason)))
        logger.warning("%s: skipped %s: %s", report.phase, label, reason)

    def generate_floors(self, rooms: RoomExtraction) -> PhaseReport:
        report = PhaseReport(phase="floors")
        floor_type = find_type_or_first(self.cache.floor_types(self.document_key, self.document), self.settings.floor_type)
        if floor_type is None:
            report.skipped = "no floor types"
            logger.warning("floors: phase skipped, no floor types")
            return report
        level_id = self._level_id()

        with scoped_transaction(self.document, "Create Floors"):
            for label, loops in rooms.loops.items():
                try:
                    closed = [rebuild_and_close(loop, self.settings.tolerance) if loop.is_open(self.settings.tolerance) else loop for loop in loops]
                    handle = self.document.create_floor(closed, floor_type.id, level_id)
                except Exception as e:
                    self._skip(report, label, e)
                    continue
                report.created_ids.append(handle.id)
        logger.info("floors: %d created, %d skipped", len(report.created_ids), len(report.skips))
        return report

    def generate_ceilings(self, rooms: RoomExtraction) -> PhaseReport:
        report = PhaseReport(phase="ceilings")
        ceiling_type = find_type_or_first(self.cache.ceiling_types(self.document_key, self.document), self.settings.ceiling_type)
        if ceiling_type is None:
            report.skipped = "no ceiling types"
            logger.warning("ceilings: phase skipped, no ceiling types")
            return report
        level_id = self._level_id()

        with scoped_transaction(self.document, "Create Ceilings"):
            for label, loops in rooms.loops.items():
                try:
                    handle = self.document.create_ceiling(list(loops), ceiling_type.id, level_id)
                except Exception as e:
                    self._skip(report, label, e)
                    continue
                report.created_ids.append(handle.id)
                try:
                    self.document.set_parameter(handle, self.settings.ceiling_offset_parameter, self.settings.ceiling_height_offset)
                except Exception as e:
                    self._skip(report, label, e)
        logger.info("ceilings: %d created, %d skipped", len(report.created_ids), len(report.skips))
        return report

    def create_wall_finishing(self, rooms: Optional[RoomExtraction] = None) -> PhaseReport:
        report = PhaseReport(phase="finish")
        finish_type = find_type(self.cache.wall_types(self.document_key, self.document), self.settings.finish_wall_type, ignore_case=True)
        if finish_type is None:
            report.skipped = f"wall type {self.settings.finish_wall_type!r} not found"
            logger.warning("finish: phase skipped, %s", report.skipped)
            return report

        generator = WallFinishGenerator(
            self.document,
            finish_type,
            default_height=self.settings.default_room_height,
            tolerance=self.settings.tolerance,
            rooms=rooms,
        )
        with scoped_transaction(self.document, "Create Room Finishing Walls"):
            finish = generator.generate()
        report.finish = finish
        report.created_ids = finish.wall_ids
        report.skips = finish.skips
        return report

    def run_all(self, rooms: RoomExtraction) -> List[PhaseReport]:
        return [self.generate_floors(rooms), self.generate_ceilings(rooms), self.create_wall_finishing(rooms)]
