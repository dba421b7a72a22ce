"""
Scene files.

A scene is a JSON document describing one host document: type catalogs,
levels, base walls, obstruction footprints and spaces with their boundary
loops. Curves are written as ``{"start": [x, y, z], "end": [x, y, z]}`` with
an optional ``"bulge"`` turning the piece into an arc.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence

from shapely.geometry import Polygon

from roomkit.elements.contracts import BoundarySegment, CollaboratorRejection, ElementType, Space
from roomkit.elements.memory import MemoryDocument, Obstruction
from roomkit.geometry.curves import Arc, Line, Segment
from roomkit.geometry.primitives import DegenerateGeometryError, Point3
from roomkit.geometry.tolerance import MIN_SOLID_SIZE
from roomkit.project.settings import GenerationSettings, SceneValidationError


_SCENE_KEYS = {
    "key",
    "settings",
    "wall_types",
    "floor_types",
    "ceiling_types",
    "levels",
    "walls",
    "spaces",
    "obstructions",
}


@dataclass
class Scene:
    document: MemoryDocument
    settings: GenerationSettings
    root_dir: Optional[str] = None


def _point(value: Any, where: str) -> Point3:
    if not isinstance(value, (list, tuple)) or len(value) not in (2, 3):
        raise SceneValidationError(f"{where}: expected [x, y] or [x, y, z], got {value!r}")
    try:
        return Point3.from_sequence([float(v) for v in value])
    except (TypeError, ValueError) as e:
        raise SceneValidationError(f"{where}: {e}") from e


def curve_from_dict(d: Mapping[str, Any], where: str = "curve") -> Segment:
    start = _point(d.get("start"), f"{where}.start")
    end = _point(d.get("end"), f"{where}.end")
    bulge = float(d.get("bulge", 0.0) or 0.0)
    try:
        if bulge:
            return Arc.from_bulge(start, end, bulge)
        return Line(start, end)
    except (DegenerateGeometryError, ValueError) as e:
        raise SceneValidationError(f"{where}: {e}") from e


def _types(items: Sequence[Mapping[str, Any]], where: str) -> List[ElementType]:
    out: List[ElementType] = []
    for i, t in enumerate(items):
        if "id" not in t or "name" not in t:
            raise SceneValidationError(f"{where}[{i}]: id and name are required")
        out.append(ElementType(id=str(t["id"]), name=str(t["name"]), width=float(t.get("width", 0.0))))
    return out


def _space(d: Mapping[str, Any], where: str) -> Space:
    if "id" not in d or "name" not in d:
        raise SceneValidationError(f"{where}: id and name are required")
    boundary: List[List[BoundarySegment]] = []
    for li, loop in enumerate(d.get("boundary", [])):
        segs: List[BoundarySegment] = []
        for si, seg in enumerate(loop):
            # Pieces without geometry are kept; extraction skips them.
            curve = curve_from_dict(seg, f"{where}.boundary[{li}][{si}]") if "start" in seg else None
            element = seg.get("element")
            segs.append(BoundarySegment(curve=curve, element_id=str(element) if element is not None else None))
        boundary.append(segs)
    bbox = d.get("bbox")
    height = d.get("height")
    return Space(
        id=str(d["id"]),
        name=str(d["name"]),
        boundary=boundary,
        location=_point(d["location"], f"{where}.location") if d.get("location") is not None else None,
        bbox_min=_point(bbox[0], f"{where}.bbox[0]") if bbox else None,
        bbox_max=_point(bbox[1], f"{where}.bbox[1]") if bbox else None,
        height=float(height) if height is not None else None,
        level_id=str(d["level"]) if d.get("level") is not None else None,
    )


def _obstruction(d: Mapping[str, Any], where: str) -> Obstruction:
    ring = d.get("footprint") or []
    if len(ring) < 3:
        raise SceneValidationError(f"{where}.footprint: at least 3 points are required")
    poly = Polygon([(float(p[0]), float(p[1])) for p in ring])
    if not poly.is_valid or poly.area <= MIN_SOLID_SIZE:
        raise SceneValidationError(f"{where}.footprint: invalid or empty polygon")
    return Obstruction(id=str(d.get("id", where)), footprint=poly)


def scene_from_dict(data: Mapping[str, Any]) -> Scene:
    if not isinstance(data, Mapping):
        raise SceneValidationError("scene must be a JSON object")
    unknown = sorted(set(data) - _SCENE_KEYS)
    if unknown:
        raise SceneValidationError(f"unknown scene keys: {', '.join(unknown)}")

    settings = GenerationSettings.from_dict(data.get("settings", {}))
    doc = MemoryDocument(
        key=str(data.get("key", "scene")),
        wall_types=_types(data.get("wall_types", []), "wall_types"),
        floor_types=_types(data.get("floor_types", []), "floor_types"),
        ceiling_types=_types(data.get("ceiling_types", []), "ceiling_types"),
        levels=_types(data.get("levels", []), "levels"),
        obstructions=[_obstruction(o, f"obstructions[{i}]") for i, o in enumerate(data.get("obstructions", []))],
    )
    for i, w in enumerate(data.get("walls", [])):
        where = f"walls[{i}]"
        if "type" not in w:
            raise SceneValidationError(f"{where}: type is required")
        try:
            doc.add_wall(
                curve_from_dict(w, where),
                str(w["type"]),
                level_id=str(w["level"]) if w.get("level") is not None else None,
                height=float(w.get("height", settings.default_room_height)),
                wall_id=str(w["id"]) if w.get("id") is not None else None,
            )
        except CollaboratorRejection as e:
            raise SceneValidationError(f"{where}: {e}") from e
    for i, s in enumerate(data.get("spaces", [])):
        doc.add_space(_space(s, f"spaces[{i}]"))
    return Scene(document=doc, settings=settings)


def load_scene(path: Path) -> Scene:
    path = Path(path).expanduser().resolve()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SceneValidationError(f"{path}: invalid JSON: {e}") from e
    scene = scene_from_dict(data)
    scene.root_dir = str(path.parent)
    return scene


def save_report(report: Mapping[str, Any], path: Path) -> Path:
    path = Path(path).expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report, indent=2, sort_keys=True), encoding="utf-8")
    return path
