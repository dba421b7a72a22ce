from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class SkipRecord:
    stage: str
    item: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {"stage": self.stage, "item": self.item, "reason": self.reason}


@dataclass
class SpaceFinishResult:
    space_id: str
    space_name: str
    wall_ids: List[str] = field(default_factory=list)
    trimmed_ids: List[str] = field(default_factory=list)
    adjacent_joins: int = 0
    base_joins: int = 0
    skips: List[SkipRecord] = field(default_factory=list)

    @property
    def skipped(self) -> bool:
        return not self.wall_ids and bool(self.skips)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "space_id": self.space_id,
            "space_name": self.space_name,
            "wall_ids": list(self.wall_ids),
            "trimmed_ids": list(self.trimmed_ids),
            "adjacent_joins": int(self.adjacent_joins),
            "base_joins": int(self.base_joins),
            "skips": [s.to_dict() for s in self.skips],
        }


@dataclass
class FinishReport:
    spaces: List[SpaceFinishResult] = field(default_factory=list)

    @property
    def wall_ids(self) -> List[str]:
        return [w for s in self.spaces for w in s.wall_ids]

    @property
    def skips(self) -> List[SkipRecord]:
        return [k for s in self.spaces for k in s.skips]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "walls_created": len(self.wall_ids),
            "spaces": [s.to_dict() for s in self.spaces],
        }


@dataclass
class PhaseReport:
    """Outcome of one creation phase; ``skipped`` is set when the phase did not run at all."""
    phase: str
    created_ids: List[str] = field(default_factory=list)
    skips: List[SkipRecord] = field(default_factory=list)
    skipped: Optional[str] = None
    finish: Optional[FinishReport] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "phase": self.phase,
            "created": len(self.created_ids),
            "created_ids": list(self.created_ids),
            "skips": [s.to_dict() for s in self.skips],
            "skipped": self.skipped,
        }
        if self.finish is not None:
            out["finish"] = self.finish.to_dict()
        return out
