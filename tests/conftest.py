"""
Shared fixtures and fakes for the arena tests.
"""

from typing import List, Tuple

import pytest

from rps_arena.arena_core.config_loader import load_config


class FakeClock:
    """Manually driven clock."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingAudio:
    """Audio collaborator that records every cue."""

    def __init__(self):
        self.calls: List[Tuple] = []
        self.muted = False

    def init(self) -> None:
        self.calls.append(("init",))

    def resume_on_user_gesture(self) -> None:
        self.calls.append(("resume",))

    def play_spawn_cue(self, particle_type) -> None:
        self.calls.append(("spawn", particle_type))

    def play_transform_cue(self, from_type, to_type) -> None:
        self.calls.append(("transform", from_type, to_type))

    def start_dominant_ambience(self, particle_type) -> None:
        self.calls.append(("start_ambience", particle_type))

    def stop_ambience(self) -> None:
        self.calls.append(("stop_ambience",))

    def toggle_mute(self) -> bool:
        self.muted = not self.muted
        self.calls.append(("mute", self.muted))
        return self.muted

    def named(self, name: str) -> List[Tuple]:
        return [c for c in self.calls if c[0] == name]

    def ambience_cues(self) -> List[Tuple]:
        return [c for c in self.calls if c[0] in ("start_ambience", "stop_ambience")]


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def audio():
    return RecordingAudio()


@pytest.fixture
def clock():
    return FakeClock()
