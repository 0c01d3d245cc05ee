"""
Audio
=====

Audio cues are intent only: the arena tells the audio collaborator what
happened and the collaborator decides what to play. Everything here is
best-effort; an uninitialized engine silently ignores every call.
"""

from __future__ import annotations

import heapq
import logging
from typing import Callable, Dict, List, Optional, Protocol, Tuple

import numpy as np

from rps_arena.arena_core.config_loader import ArenaConfig, get_config
from rps_arena.arena_core.particle_types import ParticleType


logger = logging.getLogger(__name__)


class AudioCollaborator(Protocol):
    """Interface the arena controller needs from an audio engine."""

    def init(self) -> None:
        ...

    def resume_on_user_gesture(self) -> None:
        ...

    def play_spawn_cue(self, particle_type: ParticleType) -> None:
        ...

    def play_transform_cue(self, from_type: ParticleType, to_type: ParticleType) -> None:
        ...

    def start_dominant_ambience(self, particle_type: ParticleType) -> None:
        ...

    def stop_ambience(self) -> None:
        ...

    def toggle_mute(self) -> bool:
        """Returns the new muted state."""
        ...


class NullAudio:
    """Audio collaborator that plays nothing."""

    def __init__(self):
        self._muted = False

    @property
    def muted(self) -> bool:
        return self._muted

    def init(self) -> None:
        pass

    def resume_on_user_gesture(self) -> None:
        pass

    def play_spawn_cue(self, particle_type: ParticleType) -> None:
        pass

    def play_transform_cue(self, from_type: ParticleType, to_type: ParticleType) -> None:
        pass

    def start_dominant_ambience(self, particle_type: ParticleType) -> None:
        pass

    def stop_ambience(self) -> None:
        pass

    def toggle_mute(self) -> bool:
        self._muted = not self._muted
        return self._muted


# Spawn tone per type: (frequency Hz, waveform)
SPAWN_TONES: Dict[ParticleType, Tuple[float, str]] = {
    ParticleType.ROCK: (150.0, "square"),
    ParticleType.PAPER: (300.0, "sine"),
    ParticleType.SCISSORS: (450.0, "triangle"),
}

# Transform sweep endpoints
TRANSFORM_TONES: Dict[ParticleType, float] = {
    ParticleType.ROCK: 130.81,
    ParticleType.PAPER: 261.63,
    ParticleType.SCISSORS: 392.00,
}

# Ambience chords
AMBIENCE_CHORDS: Dict[ParticleType, Tuple[float, float, float]] = {
    ParticleType.ROCK: (130.81, 164.81, 196.00),
    ParticleType.PAPER: (261.63, 329.63, 392.00),
    ParticleType.SCISSORS: (392.00, 493.88, 587.33),
}


def _oscillator(phase: np.ndarray, wave: str) -> np.ndarray:
    """Sample a waveform at the given phase (radians)."""
    if wave == "square":
        return np.sign(np.sin(phase))
    if wave == "triangle":
        return 2.0 / np.pi * np.arcsin(np.sin(phase))
    return np.sin(phase)


def _envelope(t: np.ndarray, peak: float, attack: float, duration: float) -> np.ndarray:
    """Linear attack to ``peak`` then exponential decay to 0.01 at ``duration``."""
    env = np.empty_like(t)
    rising = t < attack
    env[rising] = peak * t[rising] / attack
    decay_t = (t[~rising] - attack) / max(duration - attack, 1e-6)
    env[~rising] = peak * (0.01 / peak) ** decay_t
    return env


class ToneAudio:
    """
    Synthesized tones through pygame.mixer.

    Sounds are rendered once with numpy and cached. All calls are no-ops
    until ``init()`` succeeded and while muted.
    """

    def __init__(self, config: Optional[ArenaConfig] = None):
        """
        Initialize tone audio (does not open the mixer).

        Args:
            config: Arena configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config.audio
        self._sample_rate = config.audio.sample_rate
        self._initialized = False
        self._muted = False
        self._channels = 2
        self._cache: Dict[Tuple, object] = {}
        self._ambience = None
        self._ambience_type: Optional[ParticleType] = None

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def muted(self) -> bool:
        return self._muted

    def init(self) -> None:
        """Open the mixer. Failures leave the engine muted, never raise."""
        if self._initialized or not self._config.enabled:
            return

        import pygame

        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init(frequency=self._sample_rate, size=-16, channels=2)
        except pygame.error as e:
            logger.warning("Audio unavailable, continuing muted: %s", e)
            return

        mixer_init = pygame.mixer.get_init()
        if mixer_init is None:
            logger.warning("Audio mixer did not initialize, continuing muted")
            return

        self._sample_rate, _, self._channels = mixer_init
        self._initialized = True

    def resume_on_user_gesture(self) -> None:
        """Hosts call this on the first user input; opens the mixer if needed."""
        if not self._initialized:
            self.init()

    def _make_sound(self, signal: np.ndarray):
        """Convert a float signal in [-1, 1] into a pygame Sound."""
        import pygame

        volume = self._config.master_volume
        data_mono = (np.clip(signal * volume, -1.0, 1.0) * 32767).astype(np.int16)
        if self._channels == 1:
            data = data_mono
        else:
            data = np.ascontiguousarray(np.repeat(data_mono[:, np.newaxis], self._channels, axis=1))
        return pygame.sndarray.make_sound(data)

    def _timeline(self, duration: float) -> np.ndarray:
        return np.arange(int(self._sample_rate * duration)) / self._sample_rate

    def _spawn_sound(self, particle_type: ParticleType):
        key = ("spawn", particle_type)
        if key not in self._cache:
            freq, wave = SPAWN_TONES[particle_type]
            t = self._timeline(0.2)
            signal = _oscillator(2 * np.pi * freq * t, wave) * _envelope(t, 0.2, 0.02, 0.2)
            self._cache[key] = self._make_sound(signal)
        return self._cache[key]

    def _transform_sound(self, from_type: ParticleType, to_type: ParticleType):
        key = ("transform", from_type, to_type)
        if key not in self._cache:
            f0 = TRANSFORM_TONES[from_type]
            f1 = TRANSFORM_TONES[to_type]
            t = self._timeline(0.25)
            # Exponential sweep over 0.2 s, then hold
            freq = f0 * (f1 / f0) ** np.minimum(t / 0.2, 1.0)
            phase = 2 * np.pi * np.cumsum(freq) / self._sample_rate
            signal = np.sin(phase) * _envelope(t, 0.15, 0.02, 0.25)
            self._cache[key] = self._make_sound(signal)
        return self._cache[key]

    def _ambience_sound(self, particle_type: ParticleType):
        key = ("ambience", particle_type)
        if key not in self._cache:
            # 2 s buffer with tones snapped to 0.5 Hz so the loop point is seamless
            t = self._timeline(2.0)
            signal = np.zeros_like(t)
            for freq in AMBIENCE_CHORDS[particle_type]:
                signal += np.sin(2 * np.pi * (round(freq * 2) / 2) * t)
            signal *= 0.1
            self._cache[key] = self._make_sound(signal)
        return self._cache[key]

    def play_spawn_cue(self, particle_type: ParticleType) -> None:
        if not self._initialized or self._muted:
            return
        self._spawn_sound(particle_type).play()

    def play_transform_cue(self, from_type: ParticleType, to_type: ParticleType) -> None:
        if not self._initialized or self._muted:
            return
        self._transform_sound(from_type, to_type).play()

    def start_dominant_ambience(self, particle_type: ParticleType) -> None:
        """Loop the chord of the dominant type, replacing any current ambience."""
        if not self._initialized:
            return
        if self._ambience_type == particle_type and self._ambience is not None:
            return

        self._fade_out_ambience()
        self._ambience_type = particle_type
        if self._muted:
            return

        self._ambience = self._ambience_sound(particle_type)
        self._ambience.play(loops=-1, fade_ms=1000)

    def _fade_out_ambience(self) -> None:
        if self._ambience is not None:
            self._ambience.fadeout(500)
            self._ambience = None

    def stop_ambience(self) -> None:
        if not self._initialized:
            return
        self._fade_out_ambience()
        self._ambience_type = None

    def toggle_mute(self) -> bool:
        """
        Mute or unmute.

        Returns:
            The new muted state.
        """
        self._muted = not self._muted
        if not self._initialized:
            return self._muted

        if self._muted:
            self._fade_out_ambience()
        elif self._ambience_type is not None:
            self._ambience = self._ambience_sound(self._ambience_type)
            self._ambience.play(loops=-1, fade_ms=1000)
        return self._muted

    def close(self) -> None:
        """Silence everything and release the mixer."""
        if not self._initialized:
            return

        import pygame

        self.stop_ambience()
        pygame.mixer.quit()
        self._cache.clear()
        self._initialized = False


class SpawnCueScheduler:
    """
    Delayed spawn cues, flushed by the tick loop.

    Only every ``spawn_cue_every``-th spawn index gets a cue, delayed by
    ``index * spawn_cue_delay_ms``.
    """

    def __init__(
        self,
        audio: AudioCollaborator,
        clock: Callable[[], float],
        config: Optional[ArenaConfig] = None
    ):
        if config is None:
            config = get_config()

        self._audio = audio
        self._clock = clock
        self._every = config.audio.spawn_cue_every
        self._delay_s = config.audio.spawn_cue_delay_ms / 1000.0
        self._pending: List[Tuple[float, int, ParticleType]] = []

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def schedule(self, index: int, particle_type: ParticleType) -> bool:
        """
        Schedule the cue for spawn ``index`` if it is selected.

        Returns:
            True if a cue was queued.
        """
        if index % self._every != 0:
            return False
        due = self._clock() + index * self._delay_s
        heapq.heappush(self._pending, (due, index, particle_type))
        return True

    def flush(self) -> int:
        """
        Play every cue whose due time has passed.

        Returns:
            Number of cues played.
        """
        now = self._clock()
        played = 0
        while self._pending and self._pending[0][0] <= now:
            _, _, particle_type = heapq.heappop(self._pending)
            self._audio.play_spawn_cue(particle_type)
            played += 1
        return played

    def clear(self) -> None:
        self._pending.clear()
