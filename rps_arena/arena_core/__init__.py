"""
Arena Core - The match simulation.

This module provides the arena controller and all supporting systems
(physics adapter, interaction resolution, corrective pass, rules, audio).

Main exports:
- ArenaController: One match, ticked once per frame by the host
- ArenaConfig: Configuration loaded from arena_config.yaml
- ParticleType: rock / paper / scissors
- PhysicsWorld: pymunk-backed physics collaborator
- ToneAudio / NullAudio: audio collaborators
"""

from rps_arena.arena_core.config_loader import ArenaConfig, load_config
from rps_arena.arena_core.errors import (
    ArenaError,
    ConfigurationError,
    InvariantViolation,
    PhysicsUnavailableError,
)
from rps_arena.arena_core.particle_types import ParticleType, TYPE_ORDER, resolve_winner
from rps_arena.arena_core.physics_world import ArenaBounds, PhysicsWorld
from rps_arena.arena_core.population import Scoreboard, TypeCounts
from rps_arena.arena_core.rules import MatchState
from rps_arena.arena_core.audio import NullAudio, ToneAudio
from rps_arena.arena_core.state_snapshot import ArenaSnapshot
from rps_arena.arena_core.arena import ArenaController, TickClock, TickResult

__all__ = [
    "ArenaConfig",
    "load_config",
    "ArenaError",
    "ConfigurationError",
    "InvariantViolation",
    "PhysicsUnavailableError",
    "ParticleType",
    "TYPE_ORDER",
    "resolve_winner",
    "ArenaBounds",
    "PhysicsWorld",
    "Scoreboard",
    "TypeCounts",
    "MatchState",
    "NullAudio",
    "ToneAudio",
    "ArenaSnapshot",
    "ArenaController",
    "TickClock",
    "TickResult",
]
