"""
Physics collaborator used to push overlapping rooms apart.

The pipeline only talks to the PhysicsSpace protocol. SeparationSpace is
the bundled implementation: a zero-gravity positional solver for
axis-aligned boxes that resolves overlaps along the axis of least
penetration and puts bodies to sleep once they stop moving.
"""

from dataclasses import dataclass, field
from typing import Dict, Protocol, Tuple

import numpy as np

from .geometry import Point


@dataclass(frozen=True)
class ShapeMaterial:
    """Surface parameters of a body's shape."""
    restitution: float = 0.0
    friction: float = 1.0


@dataclass(frozen=True)
class BodySpec:
    """Everything a space needs to create a rigid box body."""
    position: Point
    mass: float
    half_extents: Tuple[float, float]
    material: ShapeMaterial = field(default_factory=ShapeMaterial)


class PhysicsSpace(Protocol):
    """Interface the generation pipeline expects from a physics engine."""

    def add_body(self, spec: BodySpec) -> int: ...

    def remove_body(self, handle: int) -> None: ...

    def step(self, dt: float) -> None: ...

    def position(self, handle: int) -> Point: ...

    def is_asleep(self, handle: int) -> bool: ...


@dataclass
class SpaceOptions:
    """Solver parameters for SeparationSpace."""
    iterations: int = 10  # relaxation passes per step
    bias: float = 0.2  # share of the penetration resolved per pass
    slop: float = 0.1  # allowed penetration, in pixels
    sleep_time: float = 1.0  # seconds a body must stay idle before sleeping
    idle_speed: float = 0.5  # pixels per second


@dataclass
class _Body:
    spec: BodySpec
    position: np.ndarray
    velocity: np.ndarray
    idle_time: float = 0.0
    sleeping: bool = False


class SeparationSpace:
    """Zero-gravity overlap solver for axis-aligned boxes."""

    def __init__(self, options: SpaceOptions = None):
        self.options = options or SpaceOptions()
        if self.options.iterations < 1:
            raise ValueError(f"iterations must be at least 1, got {self.options.iterations}")
        self._bodies: Dict[int, _Body] = {}
        self._next_handle = 0

    def __len__(self) -> int:
        return len(self._bodies)

    def add_body(self, spec: BodySpec) -> int:
        if spec.mass <= 0:
            raise ValueError(f"Body mass must be positive, got {spec.mass}")
        handle = self._next_handle
        self._next_handle += 1
        self._bodies[handle] = _Body(
            spec=spec,
            position=np.array(spec.position, dtype=np.float64),
            velocity=np.zeros(2, dtype=np.float64),
        )
        return handle

    def remove_body(self, handle: int) -> None:
        del self._bodies[handle]

    def position(self, handle: int) -> Point:
        x, y = self._bodies[handle].position
        return Point(float(x), float(y))

    def is_asleep(self, handle: int) -> bool:
        return self._bodies[handle].sleeping

    def step(self, dt: float) -> None:
        """Advance the simulation by dt seconds."""
        if dt <= 0:
            raise ValueError(f"Time step must be positive, got {dt}")
        if not self._bodies:
            return

        bodies = list(self._bodies.values())
        pos = np.array([b.position for b in bodies])
        vel = np.array([b.velocity for b in bodies])
        half = np.array([b.spec.half_extents for b in bodies], dtype=np.float64)
        mass = np.array([b.spec.mass for b in bodies], dtype=np.float64)
        friction = np.array([b.spec.material.friction for b in bodies])
        restitution = np.array([b.spec.material.restitution for b in bodies])

        start = pos.copy()
        pos += vel * np.clip(1.0 - friction, 0.0, 1.0)[:, None] * dt

        for _ in range(self.options.iterations):
            push = self._separation(pos, half, mass, restitution)
            if not push.any():
                break
            pos += push

        velocity = (pos - start) / dt
        speed = np.hypot(velocity[:, 0], velocity[:, 1])

        for i, body in enumerate(bodies):
            body.position = pos[i]
            body.velocity = velocity[i]
            if speed[i] < self.options.idle_speed:
                body.idle_time += dt
            else:
                body.idle_time = 0.0
            body.sleeping = body.idle_time >= self.options.sleep_time

    def _separation(self, pos, half, mass, restitution) -> np.ndarray:
        """Displacement of every body for one relaxation pass."""
        n = len(pos)
        idx = np.arange(n)

        # delta[i, j] points from body i to body j
        delta = pos[None, :, :] - pos[:, None, :]
        overlap = half[:, None, :] + half[None, :, :] - np.abs(delta)
        overlap[idx, idx, :] = 0.0

        slop = self.options.slop
        touching = (overlap[..., 0] > slop) & (overlap[..., 1] > slop)
        if not touching.any():
            return np.zeros_like(pos)

        axis = np.argmin(overlap, axis=2)
        depth = np.take_along_axis(overlap, axis[..., None], axis=2)[..., 0] - slop
        sign = np.sign(np.take_along_axis(delta, axis[..., None], axis=2)[..., 0])
        # coincident centers: the lower index moves back, the higher forward
        sign = np.where(sign == 0, np.sign(idx[None, :] - idx[:, None]), sign)

        share = mass[None, :] / (mass[:, None] + mass[None, :])
        bounce = 1.0 + restitution[:, None] * restitution[None, :]
        magnitude = np.where(touching, depth * share * bounce * self.options.bias * sign, 0.0)

        push = np.zeros_like(pos)
        push[:, 0] = -np.sum(np.where(axis == 0, magnitude, 0.0), axis=1)
        push[:, 1] = -np.sum(np.where(axis == 1, magnitude, 0.0), axis=1)
        return push
