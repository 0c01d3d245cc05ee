"""
Tests for audio collaborators and spawn cue scheduling.
"""

import pytest

from rps_arena.arena_core.audio import NullAudio, SpawnCueScheduler, ToneAudio
from rps_arena.arena_core.config_loader import config_from_dict
from rps_arena.arena_core.particle_types import ParticleType, TYPE_ORDER


class TestSpawnCueScheduler:

    @pytest.fixture
    def scheduler(self, audio, clock, config):
        return SpawnCueScheduler(audio, clock, config)

    def test_only_every_nth_index_is_scheduled(self, scheduler):
        scheduled = [scheduler.schedule(i, TYPE_ORDER[i % 3]) for i in range(99)]

        assert scheduled.count(True) == 10
        assert scheduler.pending_count == 10

    def test_cues_play_in_due_order(self, scheduler, audio, clock):
        for i in range(0, 30, 10):
            scheduler.schedule(i, TYPE_ORDER[i % 3])

        assert scheduler.flush() == 1
        clock.advance(0.06)
        assert scheduler.flush() == 1
        clock.advance(0.06)
        assert scheduler.flush() == 1

        # 0 -> rock, 10 -> paper, 20 -> scissors
        assert [c[1] for c in audio.named("spawn")] == [
            ParticleType.ROCK, ParticleType.PAPER, ParticleType.SCISSORS
        ]

    def test_clear_drops_pending(self, scheduler, audio, clock):
        scheduler.schedule(0, ParticleType.ROCK)
        scheduler.clear()
        clock.advance(1)

        assert scheduler.flush() == 0
        assert audio.named("spawn") == []


class TestToneAudio:
    """Behaviour that does not need an audio device."""

    @pytest.fixture
    def silent_config(self):
        return config_from_dict({
            "arena": {},
            "particles": {"population": 99},
            "audio": {"enabled": False},
        })

    def test_calls_before_init_are_noops(self, config):
        audio = ToneAudio(config)

        audio.play_spawn_cue(ParticleType.ROCK)
        audio.play_transform_cue(ParticleType.ROCK, ParticleType.PAPER)
        audio.start_dominant_ambience(ParticleType.PAPER)
        audio.stop_ambience()
        audio.close()

        assert not audio.is_initialized

    def test_disabled_audio_never_opens_mixer(self, silent_config):
        audio = ToneAudio(silent_config)
        audio.init()
        audio.resume_on_user_gesture()

        assert not audio.is_initialized

    def test_toggle_mute(self, config):
        audio = ToneAudio(config)

        assert audio.toggle_mute() is True
        assert audio.muted
        assert audio.toggle_mute() is False


class TestNullAudio:

    def test_cues_are_silent(self):
        audio = NullAudio()
        audio.init()
        audio.play_transform_cue(ParticleType.ROCK, ParticleType.PAPER)
        audio.stop_ambience()

        assert not audio.muted

    def test_toggle_mute_alternates(self):
        audio = NullAudio()

        assert audio.toggle_mute() is True
        assert audio.muted
        assert audio.toggle_mute() is False
        assert not audio.muted
