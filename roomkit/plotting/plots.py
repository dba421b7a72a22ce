from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

import matplotlib
matplotlib.use("Agg")  # headless-safe for servers/CI
import matplotlib.pyplot as plt  # noqa: E402

from roomkit.geometry.curves import Segment, tessellate_all  # noqa: E402
from roomkit.rooms.descriptor import RoomDescriptor  # noqa: E402


def _xy(curve: Segment):
    pts = curve.tessellate()
    return [p.x for p in pts], [p.y for p in pts]


def plot_rooms(rooms: Sequence[RoomDescriptor], walls: Iterable[Segment], outpath: Path) -> Path:
    """
    Save a plan view: room contours, centroids, principal axes and finish walls.
    """
    outpath = Path(outpath)
    outpath.parent.mkdir(parents=True, exist_ok=True)

    fig = plt.figure()
    ax = fig.add_subplot(111)
    for room in rooms:
        for k, loop in enumerate(room.contours):
            pts = tessellate_all(list(loop))
            if pts:
                pts.append(pts[0])
                ax.plot([p.x for p in pts], [p.y for p in pts], color="black" if k == 0 else "gray", linewidth=1.0)
        c = room.center
        ax.plot([c.x], [c.y], marker="+", color="tab:red")
        ax.annotate(room.label, (c.x, c.y), textcoords="offset points", xytext=(4, 4), fontsize=7)
        if room.properties.axes_defined:
            scale = (room.area ** 0.5) * 0.25
            for axis, color in ((room.major, "tab:blue"), (room.minor, "tab:green")):
                ax.plot([c.x, c.x + axis.x * scale], [c.y, c.y + axis.y * scale], color=color, linewidth=0.8)

    for curve in walls:
        xs, ys = _xy(curve)
        ax.plot(xs, ys, color="tab:orange", linewidth=1.5)

    ax.set_aspect("equal", adjustable="datalim")
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_title("Rooms and finish walls")
    fig.tight_layout()
    fig.savefig(outpath, dpi=200)
    plt.close(fig)
    return outpath
