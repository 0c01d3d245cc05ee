"""
Tests for configuration loading and the physics world.
"""

import copy

import pytest
import yaml

from rps_arena.arena_core.config_loader import config_from_dict, load_config
from rps_arena.arena_core.errors import ConfigurationError
from rps_arena.arena_core.particle_types import ParticleType
from rps_arena.arena_core.physics_world import ArenaBounds, PhysicsWorld


BASE = {
    "arena": {"viewport_margin": 50},
    "particles": {"population": 99},
}


def with_override(section, key, value):
    raw = copy.deepcopy(BASE)
    raw.setdefault(section, {})[key] = value
    return raw


class TestConfig:

    def test_default_file_loads(self, config):
        assert config.particles.population == 99
        assert config.per_type_population == 33
        assert config.dominance.threshold == pytest.approx(0.7)
        assert config.correction.min_speed == pytest.approx(2.0)
        assert config.boost.after_seconds == pytest.approx(50.0)

    def test_minimal_dict_uses_defaults(self):
        config = config_from_dict(BASE)
        assert config.correction.containment_buffer == 50
        assert config.walls.decay_per_tick == pytest.approx(0.05)

    @pytest.mark.parametrize("section, key, value", [
        ("particles", "population", 100),
        ("particles", "population", 0),
        ("particles", "radius", 0),
        ("physics", "substeps", 0),
        ("correction", "min_speed", 0),
        ("correction", "stall_epsilon", 5.0),
        ("dominance", "threshold", 0.4),
        ("dominance", "threshold", 1.0),
        ("boost", "wall_flash", 2.0),
        ("audio", "spawn_cue_every", 0),
    ])
    def test_invalid_values_rejected(self, section, key, value):
        with pytest.raises(ConfigurationError):
            config_from_dict(with_override(section, key, value))

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            config_from_dict(with_override("particles", "population", 10))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_load_from_path(self, tmp_path):
        path = tmp_path / "arena.yaml"
        path.write_text(yaml.safe_dump(with_override("particles", "population", 9)))

        assert load_config(str(path)).particles.population == 9


class TestBounds:

    def test_from_viewport_centers_square(self):
        bounds = ArenaBounds.from_viewport(700, 500, 50)
        assert bounds == ArenaBounds(150, 50, 400)
        assert bounds.center == (350, 250)

    def test_degenerate_viewport(self):
        with pytest.raises(ConfigurationError):
            ArenaBounds.from_viewport(100, 1000, 50)


class TestPhysicsWorld:

    @pytest.fixture
    def physics(self, config):
        return PhysicsWorld(config)

    def test_walls_surround_bounds(self, physics):
        bounds = ArenaBounds(50, 50, 500)
        walls = physics.create_static_boundary(bounds, 10)

        sides = {w.side: w.rect for w in walls}
        assert sides["top"] == (40, 40, 520, 10)
        assert sides["bottom"] == (40, 550, 520, 10)
        assert sides["left"] == (40, 40, 10, 520)
        assert sides["right"] == (550, 40, 10, 520)
        assert all(w.is_static for w in walls)

    def test_uids_are_unique_and_walls_not_particles(self, physics):
        walls = physics.create_static_boundary(ArenaBounds(0, 0, 300), 10)
        particle = physics.spawn_particle(ParticleType.ROCK, 150, 150)

        uids = [w.uid for w in walls] + [particle.uid]
        assert len(set(uids)) == 5
        assert physics.get_particle(walls[0].uid) is None
        assert physics.get_particle(particle.uid) is particle

    def test_particle_bounces_off_wall(self, physics):
        physics.create_static_boundary(ArenaBounds(0, 0, 300), 10)
        particle = physics.spawn_particle(ParticleType.PAPER, 280, 150, velocity=(4, 0))

        emitted = []
        for _ in range(20):
            emitted.extend(physics.step())

        assert particle.velocity[0] < 0
        assert any(particle.uid in (p.uid_a, p.uid_b) for p in emitted)
        assert 0 < particle.position[0] < 300

    def test_particles_do_not_rotate(self, physics):
        particle = physics.spawn_particle(ParticleType.ROCK, 100, 100)
        assert particle.body.moment == float("inf")

    def test_stop_is_idempotent(self, physics):
        physics.create_static_boundary(ArenaBounds(0, 0, 300), 10)
        physics.spawn_particle(ParticleType.ROCK, 150, 150, velocity=(1, 0))

        physics.stop()
        physics.stop()

        assert physics.is_stopped
        assert physics.particles == {}
        assert physics.walls == {}
        assert physics.step() == []
