"""
Dungeon generation pipeline.

A DungeonGenerator owns a room layout and advances it one phase step per
call to update():
- relax the scattered rooms in the physics space until all are asleep
- pick the largest qualifying rooms as anchors
- triangulate the anchor centers
- extract spanning tree and loop corridors, dropping non-anchor rooms

The phase is derived from the generator's state on every tick, most
advanced first, so a finished layout simply idles.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

import structlog

from .alea_prng import AleaPRNG
from .corridors import DEFAULT_LOOP_FRACTION, Corridor, CorridorPlan, build_corridors
from .delaunay import DegenerateGeometryError, Triangle, Triangulation
from .geometry import Circle, Point
from .kruskal import DisconnectedEdgeSetError
from .physics import PhysicsSpace, SeparationSpace, ShapeMaterial, SpaceOptions
from .rooms import Room, RoomStatus, generate_rooms, random_point_in_ellipse

logger = structlog.get_logger()


class GenerationPhase(str, Enum):
    """Generation phases, least advanced first."""
    EMPTY = "empty"
    RELAXING = "relaxing"
    SETTLED = "settled"
    SELECTED = "selected"
    TRIANGULATED = "triangulated"
    SPANNED = "spanned"


@dataclass
class GeneratorOptions:
    """Tunables for layout generation."""
    time_step: float = 1 / 60
    min_room_size: int = 32  # anchors must be strictly wider and taller
    min_room_area: int = 1280  # and strictly larger in area
    min_anchors: int = 3
    loop_fraction: float = DEFAULT_LOOP_FRACTION
    base_room_count: int = 22  # plus two rand(6) rolls
    scatter_radii: Tuple[float, float] = (64.0, 4.0)
    material: ShapeMaterial = field(default_factory=ShapeMaterial)

    @classmethod
    def from_settings(cls, settings) -> "GeneratorOptions":
        return cls(
            time_step=settings.time_step,
            min_room_size=settings.min_room_size,
            min_room_area=settings.min_room_area,
            loop_fraction=settings.loop_fraction,
        )


@dataclass
class RoomView:
    """Drawable state of a room."""
    x: int
    y: int
    width: int
    height: int
    center: Point
    status: RoomStatus


@dataclass
class TriangleView:
    """Drawable triangle with its circumcircle for debug overlays."""
    vertices: Tuple[Point, Point, Point]
    circumcircle: Circle


@dataclass
class LayoutSnapshot:
    """Read-only view of a generator handed to renderers."""
    phase: GenerationPhase
    width: int
    height: int
    seed: str
    rooms: List[RoomView]
    triangles: List[TriangleView]
    corridors: List[Corridor]


class DungeonGenerator:
    """
    Tick-driven room layout generator.

    Args:
        width: Layout area width in pixels
        height: Layout area height in pixels
        space: Physics space used to separate rooms; a SeparationSpace
            is created when omitted
        options: Generation options
        seed: Seed for the Alea PRNG; a random one is chosen if omitted
    """

    def __init__(
        self,
        width: int,
        height: int,
        space: Optional[PhysicsSpace] = None,
        options: Optional[GeneratorOptions] = None,
        seed: Optional[str] = None,
    ):
        if width <= 0 or height <= 0:
            raise ValueError(f"Layout area must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.center = Point(width // 2, height // 2)
        self.space = space if space is not None else SeparationSpace()
        self.options = options or GeneratorOptions()

        self.rooms: List[Room] = []
        self._triangles: Optional[FrozenSet[Triangle]] = None
        self._plan: Optional[CorridorPlan] = None
        self._corridors: Optional[List[Corridor]] = None

        self._reseed(seed)

    @classmethod
    def from_settings(cls, settings, seed: Optional[str] = None) -> "DungeonGenerator":
        """Build a generator and its separation space from Settings."""
        space = SeparationSpace(
            SpaceOptions(iterations=settings.space_iterations, sleep_time=settings.sleep_time)
        )
        return cls(
            settings.area_width,
            settings.area_height,
            space=space,
            options=GeneratorOptions.from_settings(settings),
            seed=seed or settings.seed,
        )

    def _reseed(self, seed: Optional[str]) -> None:
        self.seed = seed or str(uuid.uuid4())[:8]
        self._prng = AleaPRNG(self.seed)

    @property
    def triangles(self) -> Optional[FrozenSet[Triangle]]:
        return self._triangles

    @property
    def corridors(self) -> Optional[List[Corridor]]:
        return self._corridors

    @property
    def corridor_plan(self) -> Optional[CorridorPlan]:
        return self._plan

    @property
    def phase(self) -> GenerationPhase:
        if self._corridors is not None:
            return GenerationPhase.SPANNED
        if self._triangles is not None:
            return GenerationPhase.TRIANGULATED
        if any(room.active for room in self.rooms):
            return GenerationPhase.SELECTED
        if not self.rooms:
            return GenerationPhase.EMPTY
        if all(room.sleeping for room in self.rooms):
            return GenerationPhase.SETTLED
        return GenerationPhase.RELAXING

    def update(self) -> GenerationPhase:
        """
        Advance the layout by one tick.

        Returns:
            The phase the tick acted in
        """
        phase = self.phase
        if phase is GenerationPhase.SPANNED:
            pass
        elif phase is GenerationPhase.TRIANGULATED:
            self._span()
        elif phase is GenerationPhase.SELECTED:
            self._triangulate()
        elif phase is GenerationPhase.SETTLED:
            self._select_anchors()
        elif phase is GenerationPhase.RELAXING:
            self.space.step(self.options.time_step)
        else:
            self.random_generate()
        return phase

    tick = update

    def run(self, max_ticks: int) -> int:
        """
        Tick until the layout is spanned or the budget runs out.

        Returns:
            Number of ticks used
        """
        ticks = 0
        while ticks < max_ticks and self.phase is not GenerationPhase.SPANNED:
            self.update()
            ticks += 1
        logger.info("Run finished", ticks=ticks, phase=self.phase.value, seed=self.seed)
        return ticks

    def reset(self) -> None:
        """Discard rooms, triangles and corridors."""
        if self.rooms:
            logger.debug("Resetting layout", rooms=len(self.rooms))
        for room in self.rooms:
            room.detach()
        self.rooms = []
        self._triangles = None
        self._plan = None
        self._corridors = None

    def refresh(self, seed: Optional[str] = None) -> None:
        """Reset and scatter a fresh random layout, reseeding if a seed is given."""
        if seed is not None:
            self._reseed(seed)
        self.reset()
        self.random_generate()

    def random_generate(self) -> None:
        """Scatter a random number of randomly sized rooms around the center."""
        prng = self._prng
        count = prng.rand(6) + prng.rand(6) + self.options.base_room_count
        offsets = [random_point_in_ellipse(prng, *self.options.scatter_radii) for _ in range(count)]
        self.rooms.extend(
            generate_rooms(self.space, self.center, offsets, prng, self.options.material)
        )
        logger.info("Rooms generated", rooms=count, seed=self.seed)

    def _select_anchors(self) -> None:
        opts = self.options
        qualifying = [
            room for room in self.rooms
            if room.width > opts.min_room_size
            and room.height > opts.min_room_size
            and room.area > opts.min_room_area
        ]
        if len(qualifying) < opts.min_anchors:
            logger.warning(
                "Too few anchor candidates, regenerating",
                qualifying=len(qualifying),
                rooms=len(self.rooms),
            )
            self.refresh()
            return

        quarter = len(qualifying) // 4
        prng = self._prng
        target = prng.rand(quarter) + prng.rand(quarter) + prng.rand(quarter) + max(quarter, 4)
        anchors = sorted(qualifying, key=lambda room: room.area, reverse=True)[:target]
        for room in anchors:
            room.activate()
        logger.info("Anchors selected", qualifying=len(qualifying), anchors=len(anchors))

    def _triangulate(self) -> None:
        anchors = [room for room in self.rooms if room.active]
        triangulation = Triangulation(self.width, self.height)
        try:
            self._triangles = triangulation.compute(room.center for room in anchors)
        except DegenerateGeometryError as e:
            logger.error("Anchor triangulation failed", anchors=len(anchors), seed=self.seed, error=str(e))
            raise

    def _span(self) -> None:
        anchors = [room.center for room in self.rooms if room.active]
        try:
            plan = build_corridors(
                self._triangles, self._prng, self.options.loop_fraction, anchors=anchors
            )
        except DisconnectedEdgeSetError as e:
            logger.error("Corridor spanning failed", anchors=len(anchors), seed=self.seed, error=str(e))
            raise
        self._plan = plan
        self._corridors = plan.corridors

        kept = []
        for room in self.rooms:
            if room.active:
                kept.append(room)
            else:
                room.detach()
        logger.info("Inactive rooms discarded", kept=len(kept), discarded=len(self.rooms) - len(kept))
        self.rooms = kept

    def snapshot(self) -> LayoutSnapshot:
        """Current layout for drawing."""
        triangles = sorted(self._triangles) if self._triangles else []
        return LayoutSnapshot(
            phase=self.phase,
            width=self.width,
            height=self.height,
            seed=self.seed,
            rooms=[
                RoomView(
                    x=room.x,
                    y=room.y,
                    width=room.width,
                    height=room.height,
                    center=room.center,
                    status=room.status,
                )
                for room in self.rooms
            ],
            triangles=[TriangleView(t.vertices, t.circumcircle()) for t in triangles],
            corridors=list(self._corridors or []),
        )
