"""
Match Rules
===========

Dominance tracking (edge-triggered ambience) and the win condition.
The two checks are independent: a dominant type is not a winner.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, TYPE_CHECKING

from rps_arena.arena_core.config_loader import ArenaConfig, get_config
from rps_arena.arena_core.particle_types import ParticleType, TYPE_ORDER
from rps_arena.arena_core.population import TypeCounts

if TYPE_CHECKING:
    from rps_arena.arena_core.audio import AudioCollaborator


logger = logging.getLogger(__name__)


class MatchState(str, Enum):
    RUNNING = "running"
    OVER = "over"


@dataclass(frozen=True)
class DominanceChange:
    """Transition of the dominant type."""
    previous: Optional[ParticleType]
    current: Optional[ParticleType]


class DominanceTracker:
    """
    Raises a transition whenever the dominant type changes.

    A type is dominant while its share strictly exceeds the threshold.
    Cues are edge-triggered: steady values never re-issue start/stop.
    """

    def __init__(self, audio: "AudioCollaborator", config: Optional[ArenaConfig] = None):
        """
        Initialize dominance tracker.

        Args:
            audio: Receives start/stop ambience cues.
            config: Arena configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._audio = audio
        self._threshold = config.dominance.threshold
        self._last_dominant: Optional[ParticleType] = None

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def last_dominant_type(self) -> Optional[ParticleType]:
        return self._last_dominant

    def reset(self) -> None:
        self._last_dominant = None

    def current_dominant(self, counts: TypeCounts) -> Optional[ParticleType]:
        """The type whose share exceeds the threshold, if any."""
        if counts.total == 0:
            return None
        for particle_type in TYPE_ORDER:
            if counts.share(particle_type) > self._threshold:
                return particle_type
        return None

    def update(self, counts: TypeCounts) -> Optional[DominanceChange]:
        """
        Evaluate the counts and emit a cue on change.

        Args:
            counts: Current type counts.

        Returns:
            The transition, or None if the dominant type is unchanged.
        """
        current = self.current_dominant(counts)
        if current == self._last_dominant:
            return None

        change = DominanceChange(previous=self._last_dominant, current=current)
        if current is not None:
            self._audio.start_dominant_ambience(current)
        else:
            self._audio.stop_ambience()
        self._last_dominant = current

        logger.debug("Dominant type %s -> %s", change.previous, change.current)
        return change


class WinCondition:
    """
    Ends the match once exactly one type has surviving members.

    Fires the game-over callback at most once per match.
    """

    def __init__(self, on_game_over: Optional[Callable[[str], None]] = None):
        self._on_game_over = on_game_over
        self._state = MatchState.RUNNING
        self._winner: Optional[ParticleType] = None

    @property
    def state(self) -> MatchState:
        return self._state

    @property
    def is_over(self) -> bool:
        return self._state is MatchState.OVER

    @property
    def winner(self) -> Optional[ParticleType]:
        return self._winner

    def reset(self, on_game_over: Optional[Callable[[str], None]] = None) -> None:
        self._on_game_over = on_game_over
        self._state = MatchState.RUNNING
        self._winner = None

    def check(self, counts: TypeCounts) -> Optional[ParticleType]:
        """
        Evaluate the win condition.

        Args:
            counts: Current type counts.

        Returns:
            The winning type if this call ended the match, else None.
        """
        if self.is_over:
            return None

        survivors = counts.surviving_types()
        if len(survivors) != 1:
            return None

        self._state = MatchState.OVER
        self._winner = survivors[0]
        logger.info("Match over, winner: %s", self._winner.display_name)

        if self._on_game_over is not None:
            self._on_game_over(self._winner.display_name)
        return self._winner
