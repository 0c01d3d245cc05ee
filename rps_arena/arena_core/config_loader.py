"""
Configuration Loader
====================

Loads and validates arena_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from rps_arena.arena_core.errors import ConfigurationError


@dataclass(frozen=True)
class ArenaGeometryConfig:
    """Arena placement inside the viewport."""
    viewport_margin: float   # Gap between viewport edge and arena square
    wall_thickness: float    # Thickness of static boundary walls
    spawn_padding: float     # Inset from bounds for spawn positions


@dataclass(frozen=True)
class ParticleConfig:
    """Particle population and body parameters."""
    population: int          # Total particles, one third per type
    radius: float
    launch_speed: float      # Units per tick
    mass: float
    elasticity: float
    friction: float
    intro_duration: float    # Seconds, render-side spawn animation


@dataclass(frozen=True)
class PhysicsConfig:
    """Physics stepping parameters."""
    dt: float
    substeps: int
    damping: float


@dataclass(frozen=True)
class CorrectionConfig:
    """Corrective pass parameters."""
    min_speed: float           # Anti-stall speed floor
    stall_epsilon: float       # Below this the direction is re-rolled
    containment_buffer: float  # Tolerance outside bounds before recall
    containment_inset: float   # Distance inside the bounds after recall
    recall_speed: float        # Speed towards center after recall


@dataclass(frozen=True)
class BoostConfig:
    """One-shot speed boost."""
    after_seconds: float
    factor: float
    wall_flash: float


@dataclass(frozen=True)
class DominanceConfig:
    """Dominance detection."""
    threshold: float


@dataclass(frozen=True)
class WallConfig:
    """Wall feedback parameters."""
    decay_per_tick: float


@dataclass(frozen=True)
class AudioConfig:
    """Audio cue parameters."""
    enabled: bool
    master_volume: float
    sample_rate: int
    spawn_cue_every: int
    spawn_cue_delay_ms: float


@dataclass(frozen=True)
class ArenaConfig:
    """
    Complete arena configuration loaded from YAML.

    All values are immutable to prevent accidental modification during a match.
    """
    arena: ArenaGeometryConfig
    particles: ParticleConfig
    physics: PhysicsConfig
    correction: CorrectionConfig
    boost: BoostConfig
    dominance: DominanceConfig
    walls: WallConfig
    audio: AudioConfig

    @property
    def per_type_population(self) -> int:
        """Initial count of each type."""
        return self.particles.population // 3


def _validate_config(config: ArenaConfig) -> None:
    """Validate configuration consistency."""
    population = config.particles.population
    if population <= 0 or population % 3 != 0:
        raise ConfigurationError(
            f"particles.population must be a positive multiple of 3, got {population}"
        )

    if config.particles.radius <= 0:
        raise ConfigurationError(f"particles.radius must be positive, got {config.particles.radius}")

    if config.particles.launch_speed <= 0:
        raise ConfigurationError(
            f"particles.launch_speed must be positive, got {config.particles.launch_speed}"
        )

    if config.physics.dt <= 0 or config.physics.substeps < 1:
        raise ConfigurationError(
            f"physics.dt must be positive and substeps >= 1, "
            f"got dt={config.physics.dt}, substeps={config.physics.substeps}"
        )

    correction = config.correction
    if correction.min_speed <= 0:
        raise ConfigurationError(f"correction.min_speed must be positive, got {correction.min_speed}")
    if not 0 <= correction.stall_epsilon < correction.min_speed:
        raise ConfigurationError(
            f"correction.stall_epsilon must be in [0, min_speed), got {correction.stall_epsilon}"
        )
    if correction.containment_buffer < 0 or correction.containment_inset < 0:
        raise ConfigurationError("correction buffer and inset must be non-negative")

    # Above 0.5 at most one type can dominate at a time
    threshold = config.dominance.threshold
    if not 0.5 <= threshold < 1.0:
        raise ConfigurationError(f"dominance.threshold must be in [0.5, 1.0), got {threshold}")

    if config.boost.after_seconds < 0 or config.boost.factor <= 0:
        raise ConfigurationError("boost.after_seconds must be >= 0 and boost.factor positive")
    if not 0.0 <= config.boost.wall_flash <= 1.0:
        raise ConfigurationError(f"boost.wall_flash must be in [0, 1], got {config.boost.wall_flash}")

    if config.audio.spawn_cue_every < 1:
        raise ConfigurationError(
            f"audio.spawn_cue_every must be >= 1, got {config.audio.spawn_cue_every}"
        )


def load_config(config_path: Optional[str] = None) -> ArenaConfig:
    """
    Load and validate arena configuration from YAML.

    Args:
        config_path: Path to arena_config.yaml. If None, uses default location.

    Returns:
        Validated ArenaConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "arena_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    return config_from_dict(raw)


def config_from_dict(raw: dict) -> ArenaConfig:
    """
    Build and validate an ArenaConfig from already-parsed YAML data.

    Missing optional keys fall back to the reference values.
    """
    arena_data = raw["arena"]
    arena = ArenaGeometryConfig(
        viewport_margin=float(arena_data.get("viewport_margin", 50)),
        wall_thickness=float(arena_data.get("wall_thickness", 10)),
        spawn_padding=float(arena_data.get("spawn_padding", 20))
    )

    particle_data = raw["particles"]
    particles = ParticleConfig(
        population=int(particle_data["population"]),
        radius=float(particle_data.get("radius", 12)),
        launch_speed=float(particle_data.get("launch_speed", 3.0)),
        mass=float(particle_data.get("mass", 1.0)),
        elasticity=float(particle_data.get("elasticity", 1.0)),
        friction=float(particle_data.get("friction", 0.0)),
        intro_duration=float(particle_data.get("intro_duration", 0.5))
    )

    physics_data = raw.get("physics", {})
    physics = PhysicsConfig(
        dt=float(physics_data.get("dt", 1.0)),
        substeps=int(physics_data.get("substeps", 1)),
        damping=float(physics_data.get("damping", 1.0))
    )

    correction_data = raw.get("correction", {})
    correction = CorrectionConfig(
        min_speed=float(correction_data.get("min_speed", 2.0)),
        stall_epsilon=float(correction_data.get("stall_epsilon", 0.1)),
        containment_buffer=float(correction_data.get("containment_buffer", 50)),
        containment_inset=float(correction_data.get("containment_inset", 20)),
        recall_speed=float(correction_data.get("recall_speed", 5.0))
    )

    boost_data = raw.get("boost", {})
    boost = BoostConfig(
        after_seconds=float(boost_data.get("after_seconds", 50.0)),
        factor=float(boost_data.get("factor", 1.5)),
        wall_flash=float(boost_data.get("wall_flash", 1.0))
    )

    dominance = DominanceConfig(
        threshold=float(raw.get("dominance", {}).get("threshold", 0.7))
    )

    walls = WallConfig(
        decay_per_tick=float(raw.get("walls", {}).get("decay_per_tick", 0.05))
    )

    audio_data = raw.get("audio", {})
    audio = AudioConfig(
        enabled=bool(audio_data.get("enabled", True)),
        master_volume=float(audio_data.get("master_volume", 0.5)),
        sample_rate=int(audio_data.get("sample_rate", 44100)),
        spawn_cue_every=int(audio_data.get("spawn_cue_every", 10)),
        spawn_cue_delay_ms=float(audio_data.get("spawn_cue_delay_ms", 5))
    )

    config = ArenaConfig(
        arena=arena,
        particles=particles,
        physics=physics,
        correction=correction,
        boost=boost,
        dominance=dominance,
        walls=walls,
        audio=audio
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[ArenaConfig] = None


def get_config() -> ArenaConfig:
    """Get the cached arena configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> ArenaConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
