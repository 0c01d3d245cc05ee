"""
Corrective Pass
===============

Per-tick repair of physically degenerate states: stalled particles get a
minimum speed, escaped particles are teleported back inside the arena.
Also owns the one-shot speed boost and the wall intensity decay.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, TYPE_CHECKING

from rps_arena.arena_core.config_loader import ArenaConfig, get_config

if TYPE_CHECKING:
    from rps_arena.arena_core.physics_world import ArenaBounds, Particle, PhysicsCollaborator, Wall


logger = logging.getLogger(__name__)


@dataclass
class CorrectionReport:
    """UIDs touched by one corrective pass."""
    unstalled: List[int] = field(default_factory=list)
    recalled: List[int] = field(default_factory=list)
    boosted: bool = False


class CorrectivePass:
    """
    Runs once per tick over every non-static particle.

    - Anti-stall: speeds below ``min_speed`` are rescaled to exactly
      ``min_speed``; near-zero velocities get a random direction first.
    - Containment: a particle beyond bounds + buffer is placed ``inset``
      inside the offending edge and sent towards the center.
    - Boost: once elapsed time first exceeds the threshold, every particle
      velocity is multiplied by the boost factor (latched, fires once).
    """

    def __init__(
        self,
        physics: "PhysicsCollaborator",
        bounds: "ArenaBounds",
        config: Optional[ArenaConfig] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize corrective pass.

        Args:
            physics: Physics world used to write velocities and positions.
            bounds: The arena square.
            config: Arena configuration. Uses default if None.
            rng: Random source for stall directions.
        """
        if config is None:
            config = get_config()

        self._physics = physics
        self._bounds = bounds
        self._correction = config.correction
        self._boost = config.boost
        self._wall_decay = config.walls.decay_per_tick
        self._rng = rng if rng is not None else random.Random()

        self._boosted = False

    @property
    def boosted(self) -> bool:
        """True once the one-shot speed boost has fired."""
        return self._boosted

    def run(
        self,
        particles: Iterable["Particle"],
        walls: Iterable["Wall"],
        elapsed: float,
        boost_enabled: bool = True
    ) -> CorrectionReport:
        """
        Apply one full corrective pass.

        Args:
            particles: All particles.
            walls: All walls.
            elapsed: Seconds of unpaused match time.
            boost_enabled: False once the match is over.

        Returns:
            What was corrected.
        """
        particles = [p for p in particles if not p.is_static]
        walls = list(walls)
        report = CorrectionReport()

        if boost_enabled and not self._boosted and elapsed > self._boost.after_seconds:
            self.apply_boost(particles, walls)
            report.boosted = True

        for particle in particles:
            if self.enforce_min_speed(particle):
                report.unstalled.append(particle.uid)
            if self.contain(particle):
                report.recalled.append(particle.uid)

        self.decay_walls(walls)
        return report

    def apply_boost(self, particles: Iterable["Particle"], walls: Iterable["Wall"]) -> None:
        """Multiply every particle velocity once and flash the walls."""
        if self._boosted:
            return
        self._boosted = True

        factor = self._boost.factor
        for particle in particles:
            vx, vy = particle.velocity
            self._physics.set_velocity(particle, (vx * factor, vy * factor))
        for wall in walls:
            wall.impact_intensity = self._boost.wall_flash

        logger.info("Speed boost x%.2f applied", factor)

    def enforce_min_speed(self, particle: "Particle") -> bool:
        """
        Keep a particle moving at no less than ``min_speed``.

        Returns:
            True if the velocity was changed.
        """
        min_speed = self._correction.min_speed
        speed = particle.speed
        if speed >= min_speed:
            return False

        if speed < self._correction.stall_epsilon:
            angle = self._rng.random() * math.pi * 2
            dx, dy = math.cos(angle), math.sin(angle)
        else:
            vx, vy = particle.velocity
            dx, dy = vx / speed, vy / speed

        self._physics.set_velocity(particle, (dx * min_speed, dy * min_speed))
        return True

    def contain(self, particle: "Particle") -> bool:
        """
        Teleport a particle back if it left the arena by more than the buffer.

        Returns:
            True if the particle was recalled.
        """
        bounds = self._bounds
        buffer = self._correction.containment_buffer
        inset = self._correction.containment_inset

        x, y = particle.position
        new_x, new_y = x, y
        escaped = False

        if x < bounds.x - buffer:
            new_x = bounds.x + inset
            escaped = True
        elif x > bounds.right + buffer:
            new_x = bounds.right - inset
            escaped = True

        if y < bounds.y - buffer:
            new_y = bounds.y + inset
            escaped = True
        elif y > bounds.bottom + buffer:
            new_y = bounds.bottom - inset
            escaped = True

        if not escaped:
            return False

        self._physics.set_position(particle, (new_x, new_y))

        center_x, center_y = bounds.center
        angle = math.atan2(center_y - new_y, center_x - new_x)
        speed = self._correction.recall_speed
        self._physics.set_velocity(particle, (math.cos(angle) * speed, math.sin(angle) * speed))

        logger.warning(
            "Particle %d escaped to (%.1f, %.1f), recalled to (%.1f, %.1f)",
            particle.uid, x, y, new_x, new_y
        )
        return True

    def decay_walls(self, walls: Iterable["Wall"]) -> None:
        """Linearly decay wall impact intensities towards zero."""
        for wall in walls:
            if wall.impact_intensity > 0:
                wall.impact_intensity = max(0.0, wall.impact_intensity - self._wall_decay)
