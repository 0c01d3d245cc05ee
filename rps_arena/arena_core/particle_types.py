"""
Particle Types
==============

The three particle types and their fixed precedence:
rock beats scissors, scissors beats paper, paper beats rock.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Tuple


class ParticleType(str, Enum):
    """A particle's type label."""
    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"

    @property
    def display_name(self) -> str:
        """Capitalized name reported to the host ("Rock", ...)."""
        return self.value.capitalize()

    @property
    def color(self) -> Tuple[int, int, int]:
        return _COLORS[self]

    @property
    def beats(self) -> "ParticleType":
        """The type this one converts."""
        return BEATS[self]

    def __str__(self) -> str:
        return self.value


# Fixed evaluation order for counts and dominance
TYPE_ORDER: Tuple[ParticleType, ...] = (
    ParticleType.ROCK,
    ParticleType.PAPER,
    ParticleType.SCISSORS,
)

BEATS: Dict[ParticleType, ParticleType] = {
    ParticleType.ROCK: ParticleType.SCISSORS,
    ParticleType.SCISSORS: ParticleType.PAPER,
    ParticleType.PAPER: ParticleType.ROCK,
}

_COLORS = {
    ParticleType.ROCK: (150, 140, 130),
    ParticleType.PAPER: (235, 235, 220),
    ParticleType.SCISSORS: (230, 80, 90),
}


def resolve_winner(a: ParticleType, b: ParticleType) -> Optional[ParticleType]:
    """
    Decide which of two types wins a collision.

    Args:
        a: Type of the first body.
        b: Type of the second body.

    Returns:
        The winning type, or None when both types are equal.
    """
    if a == b:
        return None
    if BEATS[a] == b:
        return a
    return b
