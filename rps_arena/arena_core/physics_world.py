"""
Physics World
=============

Manages the pymunk Space, static boundary walls, and particle bodies.

Collision-start events raised by pymunk during a step are buffered and
handed to listeners as one ordered batch once the step has finished.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

import pymunk

from rps_arena.arena_core.config_loader import ArenaConfig, get_config
from rps_arena.arena_core.errors import ConfigurationError
from rps_arena.arena_core.particle_types import ParticleType


# Collision types for pymunk
COLLISION_TYPE_PARTICLE = 1
COLLISION_TYPE_WALL = 2

WALL_SIDES = ("top", "bottom", "left", "right")

Vec = Tuple[float, float]


@dataclass(frozen=True)
class ArenaBounds:
    """Axis-aligned square arena, fixed for the whole match."""
    x: float
    y: float
    size: float

    @classmethod
    def from_viewport(cls, width: float, height: float, margin: float) -> "ArenaBounds":
        """
        Center the largest square that leaves ``margin`` on every side.

        Raises:
            ConfigurationError: If the resulting square has no area.
        """
        size = min(width, height) - margin * 2
        if size <= 0:
            raise ConfigurationError(
                f"Viewport {width}x{height} leaves no arena with margin {margin}"
            )
        return cls(x=(width - size) / 2, y=(height - size) / 2, size=size)

    @property
    def right(self) -> float:
        return self.x + self.size

    @property
    def bottom(self) -> float:
        return self.y + self.size

    @property
    def center(self) -> Vec:
        return (self.x + self.size / 2, self.y + self.size / 2)

    def contains(self, x: float, y: float, tolerance: float = 0.0) -> bool:
        """True if (x, y) lies within the bounds grown by ``tolerance``."""
        return (
            self.x - tolerance <= x <= self.right + tolerance
            and self.y - tolerance <= y <= self.bottom + tolerance
        )


@dataclass
class Particle:
    """
    A typed, non-static body in the arena.

    Only ``kind`` and the body's position/velocity change after creation.
    """
    uid: int
    kind: ParticleType
    body: pymunk.Body
    shape: pymunk.Circle
    spawn_time: float

    is_static = False

    @property
    def label(self) -> str:
        return self.kind.value

    @property
    def position(self) -> Vec:
        return self.body.position.x, self.body.position.y

    @property
    def velocity(self) -> Vec:
        return self.body.velocity.x, self.body.velocity.y

    @property
    def speed(self) -> float:
        """Linear speed magnitude."""
        vx, vy = self.velocity
        return math.sqrt(vx * vx + vy * vy)


@dataclass
class Wall:
    """A static boundary rectangle with a cosmetic impact intensity."""
    uid: int
    side: str
    rect: Tuple[float, float, float, float]  # x, y, width, height
    body: pymunk.Body
    shape: pymunk.Poly
    impact_intensity: float = 0.0

    is_static = True

    @property
    def label(self) -> str:
        return f"Wall-{self.side.capitalize()}"


@dataclass(frozen=True)
class CollisionPair:
    """Two bodies that started touching during a step, in emitted order."""
    uid_a: int
    uid_b: int


CollisionListener = Callable[[List[CollisionPair]], None]


class PhysicsCollaborator(Protocol):
    """Interface the arena controller needs from a physics engine."""

    def step(self) -> None:
        ...

    def create_static_boundary(self, bounds: ArenaBounds, thickness: float) -> List[Wall]:
        ...

    def spawn_particle(
        self,
        kind: ParticleType,
        x: float,
        y: float,
        velocity: Vec,
        spawn_time: float
    ) -> Particle:
        ...

    def set_velocity(self, particle: Particle, velocity: Vec) -> None:
        ...

    def set_position(self, particle: Particle, position: Vec) -> None:
        ...

    def on_collision_start(self, listener: CollisionListener) -> None:
        ...

    def get_particle(self, uid: int) -> Optional[Particle]:
        ...

    @property
    def particles(self) -> Dict[int, Particle]:
        ...

    @property
    def walls(self) -> Dict[int, Wall]:
        ...

    def stop(self) -> None:
        ...


class PhysicsWorld:
    """
    Manages the pymunk physics simulation.

    Handles:
    - Space creation (zero gravity, no damping)
    - Static boundary walls
    - Particle creation with infinite rotational inertia
    - Physics stepping with substeps
    - Collision-start batching
    """

    def __init__(self, config: Optional[ArenaConfig] = None):
        """
        Initialize physics world.

        Args:
            config: Arena configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config

        self._space = pymunk.Space()
        self._space.gravity = (0.0, 0.0)
        self._space.damping = config.physics.damping

        self._particles: Dict[int, Particle] = {}
        self._walls: Dict[int, Wall] = {}
        self._next_uid = 0

        self._pending_pairs: List[CollisionPair] = []
        self._listeners: List[CollisionListener] = []
        self._stopped = False

        # pymunk 7.x uses on_collision() instead of add_collision_handler()
        self._space.on_collision(begin=self._on_collision_begin)

    @property
    def particles(self) -> Dict[int, Particle]:
        """All particles by UID."""
        return self._particles

    @property
    def walls(self) -> Dict[int, Wall]:
        """All walls by UID."""
        return self._walls

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    def _allocate_uid(self) -> int:
        uid = self._next_uid
        self._next_uid += 1
        return uid

    def _on_collision_begin(
        self,
        arbiter: pymunk.Arbiter,
        space: pymunk.Space,
        data: Any
    ) -> None:
        """Record a collision-start between two known bodies."""
        shape_a, shape_b = arbiter.shapes
        uid_a = getattr(shape_a.body, "arena_uid", None)
        uid_b = getattr(shape_b.body, "arena_uid", None)
        if uid_a is None or uid_b is None:
            return
        self._pending_pairs.append(CollisionPair(uid_a, uid_b))

    def on_collision_start(self, listener: CollisionListener) -> None:
        """
        Register a listener for collision-start batches.

        Args:
            listener: Called once per step with the pairs in emitted order.
        """
        self._listeners.append(listener)

    def create_static_boundary(self, bounds: ArenaBounds, thickness: float) -> List[Wall]:
        """
        Create four static walls hugging the outside of ``bounds``.

        Args:
            bounds: The arena square.
            thickness: Wall thickness.

        Returns:
            The created walls (top, bottom, left, right).
        """
        x, y, size = bounds.x, bounds.y, bounds.size
        rects = {
            "top": (x - thickness, y - thickness, size + thickness * 2, thickness),
            "bottom": (x - thickness, y + size, size + thickness * 2, thickness),
            "left": (x - thickness, y - thickness, thickness, size + thickness * 2),
            "right": (x + size, y - thickness, thickness, size + thickness * 2),
        }

        created = []
        for side in WALL_SIDES:
            rx, ry, rw, rh = rects[side]
            body = pymunk.Body(body_type=pymunk.Body.STATIC)
            shape = pymunk.Poly(
                body,
                [(rx, ry), (rx + rw, ry), (rx + rw, ry + rh), (rx, ry + rh)]
            )
            shape.elasticity = 1.0
            shape.friction = 0.0
            shape.collision_type = COLLISION_TYPE_WALL

            uid = self._allocate_uid()
            body.arena_uid = uid

            wall = Wall(uid=uid, side=side, rect=rects[side], body=body, shape=shape)
            self._space.add(body, shape)
            self._walls[uid] = wall
            created.append(wall)

        return created

    def spawn_particle(
        self,
        kind: ParticleType,
        x: float,
        y: float,
        velocity: Vec = (0.0, 0.0),
        spawn_time: float = 0.0
    ) -> Particle:
        """
        Spawn a new particle.

        Args:
            kind: Initial type.
            x: X coordinate.
            y: Y coordinate.
            velocity: Initial velocity in units per tick.
            spawn_time: Clock reading at spawn, used by the renderer.

        Returns:
            The created Particle.
        """
        particles = self._config.particles

        # Infinite moment: particles never spin
        body = pymunk.Body(particles.mass, float("inf"))
        body.position = (x, y)
        body.velocity = velocity

        shape = pymunk.Circle(body, particles.radius)
        shape.elasticity = particles.elasticity
        shape.friction = particles.friction
        shape.collision_type = COLLISION_TYPE_PARTICLE

        uid = self._allocate_uid()
        body.arena_uid = uid

        particle = Particle(uid=uid, kind=kind, body=body, shape=shape, spawn_time=spawn_time)
        self._space.add(body, shape)
        self._particles[uid] = particle
        return particle

    def get_particle(self, uid: int) -> Optional[Particle]:
        """Get a particle by UID (None for walls and unknown UIDs)."""
        return self._particles.get(uid)

    def set_velocity(self, particle: Particle, velocity: Vec) -> None:
        particle.body.velocity = velocity

    def set_position(self, particle: Particle, position: Vec) -> None:
        particle.body.position = position

    def step(self, dt: Optional[float] = None) -> List[CollisionPair]:
        """
        Advance physics simulation by one tick.

        Args:
            dt: Timestep duration. Uses config default if None.

        Returns:
            The collision-start pairs emitted during this tick.
        """
        if self._stopped:
            return []

        if dt is None:
            dt = self._config.physics.dt

        substeps = self._config.physics.substeps
        for _ in range(substeps):
            self._space.step(dt / substeps)

        batch = self._pending_pairs
        self._pending_pairs = []
        if batch:
            for listener in self._listeners:
                listener(batch)
        return batch

    def stop(self) -> None:
        """Halt stepping and remove every body. Safe to call repeatedly."""
        if self._stopped:
            return
        self._stopped = True
        self.clear()

    def clear(self) -> None:
        """Remove all particles and walls from the world."""
        for particle in self._particles.values():
            self._space.remove(particle.body, particle.shape)
        for wall in self._walls.values():
            self._space.remove(wall.body, wall.shape)
        self._particles.clear()
        self._walls.clear()
        self._pending_pairs.clear()
        self._next_uid = 0
