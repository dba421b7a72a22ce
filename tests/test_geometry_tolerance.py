from __future__ import annotations

import inspect
import re
from pathlib import Path

from roomkit.geometry import loops, overlap, primitives
from roomkit.geometry.curves import ops
from roomkit.geometry.tolerance import (
    EPS_ANG,
    EPS_AREA,
    EPS_COINCIDENT,
    EPS_DIRECTION,
    EPS_MOMENT,
    EPS_POS,
    EPS_RECT,
    MIN_FINISH_SEGMENT,
    MIN_SOLID_SIZE,
)
from roomkit.rooms import reader


def test_tolerance_constants_exist() -> None:
    assert EPS_POS > 0.0
    assert EPS_ANG > 0.0
    assert EPS_AREA > 0.0
    assert EPS_DIRECTION > 0.0
    assert EPS_MOMENT > 0.0
    assert EPS_RECT > 0.0
    assert MIN_SOLID_SIZE > 0.0
    assert EPS_COINCIDENT == 1e-4
    assert MIN_FINISH_SEGMENT > EPS_COINCIDENT


def test_key_geometry_functions_use_central_tolerance_defaults() -> None:
    assert inspect.signature(loops.rebuild_and_close).parameters["tolerance"].default == EPS_COINCIDENT
    assert inspect.signature(loops.close_if_open).parameters["tolerance"].default == EPS_COINCIDENT
    assert inspect.signature(overlap.break_overlapping_lines).parameters["tolerance"].default == EPS_COINCIDENT
    assert inspect.signature(primitives.remove_duplicate_points).parameters["tolerance"].default == EPS_COINCIDENT
    assert inspect.signature(primitives.is_parallel).parameters["tolerance"].default == EPS_ANG
    assert inspect.signature(ops.shared_end_point).parameters["tolerance"].default == EPS_COINCIDENT
    assert inspect.signature(reader.read_rooms).parameters["tolerance"].default == EPS_COINCIDENT


def test_geometry_package_has_no_inline_scientific_epsilon_literals() -> None:
    root = Path(__file__).resolve().parents[1] / "roomkit" / "geometry"
    pattern = re.compile(r"\b1e-\d+\b")
    offenders: list[str] = []
    for p in sorted(root.rglob("*.py")):
        if p.name == "tolerance.py":
            continue
        text = p.read_text(encoding="utf-8")
        if pattern.search(text):
            offenders.append(str(p.relative_to(root.parent.parent)))
    assert offenders == []
