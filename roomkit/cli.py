from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from roomkit.geometry.overlap import OverlapResolutionDivergence
from roomkit.ops.creator import ElementCreator
from roomkit.ops.transactions import TransactionError
from roomkit.project.io import load_scene, save_report
from roomkit.project.settings import SceneValidationError
from roomkit.rooms.reader import read_rooms


def _load(path_arg: str):
    scene_path = Path(path_arg).expanduser().resolve()
    if not scene_path.exists():
        print(f"[ERROR] File not found: {scene_path}")
        print("        Provide a valid path to a scene .json file.")
        return None
    if not scene_path.is_file():
        print(f"[ERROR] Not a file: {scene_path}")
        return None
    try:
        return load_scene(scene_path)
    except SceneValidationError as e:
        print(f"[ERROR] Invalid scene: {e}")
        return None


def _cmd_analyze(args: argparse.Namespace) -> int:
    scene = _load(args.scene)
    if scene is None:
        return 2
    rooms = read_rooms(scene.document, scene.settings.tolerance)

    if args.json:
        print(json.dumps(rooms.to_dict(), indent=2, sort_keys=True))
        return 0

    print("Roomkit Analyze")
    print(f"  Scene: {scene.document.key}")
    for room in rooms.rooms:
        rect = room.is_rectangular()
        shape = f"rectangular {rect.width:g} x {rect.length:g}" if rect.is_rectangular else "irregular"
        print(
            f"  {room.label}: area={room.area:.4f} center=({room.center.x:.3f}, {room.center.y:.3f}) "
            f"rotation={room.rotation:.2f} deg, {shape}"
        )
    for skip in rooms.skips:
        print(f"  Skipped {skip.item}: {skip.reason}")
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    scene = _load(args.scene)
    if scene is None:
        return 2
    doc = scene.document
    rooms = read_rooms(doc, scene.settings.tolerance)
    creator = ElementCreator(doc, scene.settings)
    try:
        phases = creator.run_all(rooms)
    except (OverlapResolutionDivergence, TransactionError) as e:
        print(f"[ERROR] Generation failed: {e}")
        return 3

    print("Roomkit Generate")
    print(f"  Scene: {doc.key}")
    print(f"  Rooms: {len(rooms.rooms)} ({len(rooms.skips)} skipped)")
    for ph in phases:
        if ph.skipped:
            print(f"  {ph.phase}: skipped ({ph.skipped})")
        else:
            print(f"  {ph.phase}: {len(ph.created_ids)} created, {len(ph.skips)} skipped")

    if args.out:
        out = save_report(
            {
                "rooms": rooms.to_dict(),
                "phases": [ph.to_dict() for ph in phases],
                "document": doc.to_dict(),
            },
            Path(args.out),
        )
        print(f"  Saved: {out}")
    if args.plot:
        from roomkit.plotting.plots import plot_rooms

        finish_ids = {w for ph in phases if ph.finish is not None for w in ph.finish.wall_ids}
        walls = [w.curve for w in doc.walls() if w.id in finish_ids]
        png = plot_rooms(rooms.rooms, walls, Path(args.plot).expanduser().resolve())
        print(f"  Saved: {png}")
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="roomkit")
    p.add_argument("-v", "--verbose", action="store_true", help="Log progress and skipped items")
    p.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    sub = p.add_subparsers(dest="cmd", required=True)

    a = sub.add_parser("analyze", help="Extract rooms from a scene and print their descriptors.")
    a.add_argument("scene", help="Path to scene .json file")
    a.add_argument("--json", action="store_true", help="Print descriptors as JSON")
    a.set_defaults(func=_cmd_analyze)

    g = sub.add_parser("generate", help="Create floors, ceilings and finish walls for a scene.")
    g.add_argument("scene", help="Path to scene .json file")
    g.add_argument("--out", default=None, help="Write a JSON report to this path")
    g.add_argument("--plot", default=None, help="Save a PNG plan of rooms and finish walls")
    g.set_defaults(func=_cmd_generate)

    args = p.parse_args(argv)
    level = logging.ERROR if args.quiet else (logging.INFO if args.verbose else logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
