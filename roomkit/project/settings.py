from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping

from roomkit.finish.generator import DEFAULT_ROOM_HEIGHT
from roomkit.geometry.tolerance import EPS_COINCIDENT


class SceneValidationError(ValueError):
    pass


@dataclass(frozen=True)
class GenerationSettings:
    tolerance: float = EPS_COINCIDENT
    floor_type: str = ""
    ceiling_type: str = "ACTCeiling"
    ceiling_height_offset: float = 2.7
    ceiling_offset_parameter: str = "Height Offset From Level"
    level: str = "Level 0"
    finish_wall_type: str = "Finish"
    default_room_height: float = DEFAULT_ROOM_HEIGHT

    def __post_init__(self) -> None:
        if not self.tolerance > 0.0:
            raise SceneValidationError("settings.tolerance must be positive")
        if not self.default_room_height > 0.0:
            raise SceneValidationError("settings.default_room_height must be positive")

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "GenerationSettings":
        known = {f.name: f for f in fields(GenerationSettings)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise SceneValidationError(f"unknown settings: {', '.join(unknown)}")
        kwargs: Dict[str, Any] = {}
        for name, value in data.items():
            default = known[name].default
            try:
                kwargs[name] = float(value) if isinstance(default, float) else str(value)
            except (TypeError, ValueError) as e:
                raise SceneValidationError(f"settings.{name}: {e}") from e
        return GenerationSettings(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
