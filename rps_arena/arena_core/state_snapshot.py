"""
State Snapshot
==============

Read-only per-frame view of the arena for renderers. Renderers never touch
pymunk bodies directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, TYPE_CHECKING

import numpy as np

from rps_arena.arena_core.particle_types import ParticleType, TYPE_ORDER
from rps_arena.arena_core.population import Scoreboard

if TYPE_CHECKING:
    from rps_arena.arena_core.physics_world import ArenaBounds, Particle, Wall
    from rps_arena.arena_core.rules import MatchState


@dataclass(frozen=True)
class ParticleView:
    uid: int
    kind: ParticleType
    x: float
    y: float
    spawn_time: float
    intro_progress: float   # 0 at spawn, 1 once the intro animation is done


@dataclass(frozen=True)
class WallView:
    uid: int
    side: str
    rect: Tuple[float, float, float, float]
    impact_intensity: float


@dataclass(frozen=True)
class ArenaSnapshot:
    """Everything a renderer needs for one frame."""
    bounds: "ArenaBounds"
    particles: Tuple[ParticleView, ...]
    walls: Tuple[WallView, ...]
    scoreboard: Scoreboard
    state: "MatchState"
    winner: Optional[ParticleType]
    elapsed: float
    paused: bool
    dominant_type: Optional[ParticleType]

    def to_arrays(self) -> Dict[str, np.ndarray]:
        """
        Pack particle data into numpy arrays.

        Returns:
            Dict with ``uid`` (int32), ``type_id`` (int8, index into
            TYPE_ORDER), ``position`` (N, 2 float32) and ``intro`` (float32).
        """
        count = len(self.particles)
        uids = np.zeros(count, dtype=np.int32)
        type_ids = np.zeros(count, dtype=np.int8)
        positions = np.zeros((count, 2), dtype=np.float32)
        intro = np.zeros(count, dtype=np.float32)

        for i, view in enumerate(self.particles):
            uids[i] = view.uid
            type_ids[i] = TYPE_ORDER.index(view.kind)
            positions[i] = (view.x, view.y)
            intro[i] = view.intro_progress

        return {"uid": uids, "type_id": type_ids, "position": positions, "intro": intro}


class SnapshotBuilder:
    """Builds ArenaSnapshot instances from live registry state."""

    def __init__(self, intro_duration: float):
        self._intro_duration = intro_duration

    def _intro_progress(self, spawn_time: float, now: float) -> float:
        if self._intro_duration <= 0:
            return 1.0
        return float(min(1.0, max(0.0, (now - spawn_time) / self._intro_duration)))

    def build(
        self,
        bounds: "ArenaBounds",
        particles: Dict[int, "Particle"],
        walls: Dict[int, "Wall"],
        scoreboard: Scoreboard,
        state: "MatchState",
        winner: Optional[ParticleType],
        elapsed: float,
        paused: bool,
        dominant_type: Optional[ParticleType],
        now: float
    ) -> ArenaSnapshot:
        particle_views = tuple(
            ParticleView(
                uid=p.uid,
                kind=p.kind,
                x=p.position[0],
                y=p.position[1],
                spawn_time=p.spawn_time,
                intro_progress=self._intro_progress(p.spawn_time, now)
            )
            for p in particles.values()
        )
        wall_views = tuple(
            WallView(uid=w.uid, side=w.side, rect=w.rect, impact_intensity=w.impact_intensity)
            for w in walls.values()
        )
        return ArenaSnapshot(
            bounds=bounds,
            particles=particle_views,
            walls=wall_views,
            scoreboard=scoreboard,
            state=state,
            winner=winner,
            elapsed=elapsed,
            paused=paused,
            dominant_type=dominant_type
        )
