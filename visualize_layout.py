#!/usr/bin/env python3
"""Generate a dungeon layout and plot it with matplotlib."""

import argparse
from datetime import datetime

import matplotlib.pyplot as plt
from matplotlib.patches import Circle as CirclePatch
from matplotlib.patches import Rectangle

from py_dungeon.config import settings
from py_dungeon.core import DungeonGenerator, GenerationPhase, RoomStatus

ROOM_COLORS = {
    RoomStatus.DEFAULT: "#800080",
    RoomStatus.SLEEPING: "#808080",
    RoomStatus.ACTIVE: "#ff8000",
}


def visualize_layout(seed=None, show_circles=False, output=None):
    """Run a generator to completion and save a plot of the result."""
    generator = DungeonGenerator.from_settings(settings, seed=seed)
    ticks = generator.run(settings.max_ticks)
    snapshot = generator.snapshot()

    print(f"Seed: {snapshot.seed}")
    print(f"Ticks: {ticks}")
    print(f"Phase: {snapshot.phase.value}")
    print(f"Rooms: {len(snapshot.rooms)}")
    print(f"Triangles: {len(snapshot.triangles)}")
    print(f"Corridors: {len(snapshot.corridors)}")

    if snapshot.phase is not GenerationPhase.SPANNED:
        print("Tick budget ran out before corridors were built")

    fig, ax = plt.subplots(figsize=(10, 10))

    for triangle in snapshot.triangles:
        xs = [v.x for v in triangle.vertices] + [triangle.vertices[0].x]
        ys = [v.y for v in triangle.vertices] + [triangle.vertices[0].y]
        ax.plot(xs, ys, color="#cccc00", linewidth=0.5, zorder=1)
        if show_circles:
            circle = triangle.circumcircle
            ax.add_patch(
                CirclePatch(circle.center, circle.radius, fill=False, color="#dddddd", linewidth=0.3)
            )

    for corridor in snapshot.corridors:
        ax.plot([corridor.a.x, corridor.b.x], [corridor.a.y, corridor.b.y],
                color="#404040", linewidth=2, zorder=2)

    for room in snapshot.rooms:
        ax.add_patch(Rectangle(
            (room.x, room.y), room.width, room.height,
            facecolor=ROOM_COLORS[room.status], edgecolor="white", alpha=0.7, zorder=3,
        ))

    ax.set_xlim(0, snapshot.width)
    ax.set_ylim(snapshot.height, 0)
    ax.set_aspect("equal")
    ax.set_facecolor("black")
    ax.set_title(f"Dungeon layout (seed {snapshot.seed})")

    if output is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output = f"dungeon_{snapshot.seed}_{timestamp}.png"
    plt.savefig(output, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"Saved visualization to {output}")
    return output


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", help="Layout seed")
    parser.add_argument("--circles", action="store_true", help="Overlay triangle circumcircles")
    parser.add_argument("--output", help="Output PNG path")
    args = parser.parse_args()
    visualize_layout(args.seed, args.circles, args.output)
