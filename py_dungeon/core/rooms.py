"""
Rooms and their random placement.

A room is a box-shaped body in the physics space. Sizes and draw
positions are multiples of a 4px grid; the body center is left free so
the settled layout stays in general position for triangulation.
"""

import math
from enum import Enum
from typing import List, Tuple

from .alea_prng import AleaPRNG
from .geometry import Point
from .physics import BodySpec, PhysicsSpace, ShapeMaterial

GRID = 4
SHAPE_PADDING = 3  # extra pixels around a room's body so neighbours keep a gap


class RoomStatus(str, Enum):
    """Visual state of a room."""
    DEFAULT = "default"
    ACTIVE = "active"
    SLEEPING = "sleeping"


def snap(value: float, grid: int = GRID) -> int:
    """Snap to a multiple of grid; integer values round up."""
    return int(math.floor((value + grid - 1) / grid)) * grid


class Room:
    """Rectangular room backed by a body in a physics space."""

    def __init__(
        self,
        space: PhysicsSpace,
        position: Point,
        width: int,
        height: int,
        material: ShapeMaterial = ShapeMaterial(),
    ):
        if width <= 0 or height <= 0:
            raise ValueError(f"Room size must be positive, got {width}x{height}")
        self.space = space
        self.width = width
        self.height = height
        self.active = False
        self.handle = space.add_body(
            BodySpec(
                position=Point(*position),
                mass=float(width * height),
                half_extents=((width + SHAPE_PADDING) / 2, (height + SHAPE_PADDING) / 2),
                material=material,
            )
        )

    def __repr__(self) -> str:
        return f"Room({self.width}x{self.height} at {self.center}, {self.status.value})"

    @property
    def center(self) -> Point:
        return self.space.position(self.handle)

    @property
    def x(self) -> int:
        return snap(self.center.x - self.width / 2)

    @property
    def y(self) -> int:
        return snap(self.center.y - self.height / 2)

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def sleeping(self) -> bool:
        return self.space.is_asleep(self.handle)

    @property
    def status(self) -> RoomStatus:
        if self.active:
            return RoomStatus.ACTIVE
        return RoomStatus.SLEEPING if self.sleeping else RoomStatus.DEFAULT

    def activate(self) -> None:
        self.active = True

    def deactivate(self) -> None:
        self.active = False

    def detach(self) -> None:
        """Remove the room's body from its space."""
        self.space.remove_body(self.handle)


def random_point_in_ellipse(prng: AleaPRNG, width: float, height: float) -> Point:
    """
    Grid-snapped offset inside an ellipse with the given radii.

    The radius is drawn from a triangular distribution (sum of two
    uniforms folded back at 1), which spreads points evenly over the area.
    """
    t = 2 * math.pi * prng.random()
    u = prng.random() + prng.random()
    r = 2 - u if u > 1 else u
    return Point(
        snap(width * r * math.cos(t)),
        snap(height * r * math.sin(t)),
    )


def random_room_size(prng: AleaPRNG) -> Tuple[int, int]:
    """Width and height in pixels, both multiples of the grid."""
    width = ((prng.rand(10) + 2) + (prng.rand(7) + 1)) * GRID
    height = ((prng.rand(7) + 2) + (prng.rand(5) + 1)) * GRID
    return width, height


def generate_rooms(
    space: PhysicsSpace,
    center: Point,
    offsets: List[Point],
    prng: AleaPRNG,
    material: ShapeMaterial = ShapeMaterial(),
) -> List[Room]:
    """Create one randomly sized room per offset around center."""
    rooms = []
    for offset in offsets:
        width, height = random_room_size(prng)
        rooms.append(Room(space, center + offset, width, height, material))
    return rooms
