import json
from pathlib import Path

from roomkit.cli import main


def _scene() -> dict:
    corners = [[-0.1, -0.1], [4.1, -0.1], [4.1, 3.1], [-0.1, 3.1]]
    faces = [[0.0, 0.0], [4.0, 0.0], [4.0, 3.0], [0.0, 3.0]]
    return {
        "key": "cli-scene",
        "settings": {"floor_type": "Screed 50"},
        "wall_types": [{"id": "bt", "name": "Generic 200", "width": 0.2}, {"id": "ft", "name": "Finish", "width": 0.1}],
        "floor_types": [{"id": "f1", "name": "Screed 50"}],
        "ceiling_types": [{"id": "c1", "name": "ACTCeiling"}],
        "levels": [{"id": "L0", "name": "Level 0"}],
        "walls": [
            {"id": f"B{i + 1}", "type": "bt", "level": "L0", "start": corners[i], "end": corners[(i + 1) % 4]}
            for i in range(4)
        ],
        "spaces": [
            {
                "id": "R1",
                "name": "Office",
                "location": [2.0, 1.5],
                "level": "L0",
                "boundary": [
                    [{"start": faces[i], "end": faces[(i + 1) % 4], "element": f"B{i + 1}"} for i in range(4)]
                ],
            }
        ],
    }


def _write(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "scene.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_cli_analyze_prints_rooms(tmp_path: Path, capsys):
    rc = main(["analyze", str(_write(tmp_path, _scene()))])
    assert rc == 0
    out = capsys.readouterr().out
    assert "Office 000" in out
    assert "rectangular" in out


def test_cli_analyze_json(tmp_path: Path, capsys):
    rc = main(["analyze", str(_write(tmp_path, _scene())), "--json"])
    assert rc == 0
    data = json.loads(capsys.readouterr().out)
    assert data["rooms"][0]["label"] == "Office 000"


def test_cli_generate_writes_report_and_plot(tmp_path: Path):
    out = tmp_path / "out" / "report.json"
    png = tmp_path / "plan.png"
    rc = main(["generate", str(_write(tmp_path, _scene())), "--out", str(out), "--plot", str(png)])
    assert rc == 0
    report = json.loads(out.read_text(encoding="utf-8"))
    phases = {ph["phase"]: ph for ph in report["phases"]}
    assert len(phases["floors"]["created_ids"]) == 1
    assert len(phases["ceilings"]["created_ids"]) == 1
    assert len(phases["finish"]["created_ids"]) == 4
    assert len(report["document"]["walls"]) == 8
    assert png.exists()
    assert png.stat().st_size > 0


def test_cli_missing_file_is_an_error(tmp_path: Path, capsys):
    rc = main(["analyze", str(tmp_path / "nope.json")])
    assert rc == 2
    assert "[ERROR]" in capsys.readouterr().out


def test_cli_invalid_scene_is_an_error(tmp_path: Path, capsys):
    data = _scene()
    data["furniture"] = []
    rc = main(["generate", str(_write(tmp_path, data))])
    assert rc == 2
    assert "unknown scene keys" in capsys.readouterr().out
