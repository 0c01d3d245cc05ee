"""
Population
==========

Live per-type counts. A conversion is a pure transfer between two types,
so the total never changes during a match.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from rps_arena.arena_core.errors import InvariantViolation
from rps_arena.arena_core.particle_types import ParticleType, TYPE_ORDER


@dataclass(frozen=True)
class Scoreboard:
    """Read-only view of the counts for display outside the core."""
    rock: int
    paper: int
    scissors: int

    @property
    def total(self) -> int:
        return self.rock + self.paper + self.scissors

    def as_dict(self) -> Dict[str, int]:
        return {"rock": self.rock, "paper": self.paper, "scissors": self.scissors}


class TypeCounts:
    """
    Tracks how many particles currently carry each type.

    The expected total is fixed at reset; ``check_invariant`` raises
    InvariantViolation if the counts ever drift from it.
    """

    def __init__(self, initial: Optional[Mapping[ParticleType, int]] = None):
        self._counts: Dict[ParticleType, int] = {t: 0 for t in TYPE_ORDER}
        self._expected_total = 0
        if initial is not None:
            self.reset(initial)

    def reset(self, initial: Mapping[ParticleType, int]) -> None:
        """Replace all counts and fix the expected total."""
        self._counts = {t: int(initial.get(t, 0)) for t in TYPE_ORDER}
        self._expected_total = sum(self._counts.values())

    def clear(self) -> None:
        self._counts = {t: 0 for t in TYPE_ORDER}
        self._expected_total = 0

    def __getitem__(self, particle_type: ParticleType) -> int:
        return self._counts[particle_type]

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    @property
    def expected_total(self) -> int:
        return self._expected_total

    def transfer(self, from_type: ParticleType, to_type: ParticleType) -> None:
        """
        Move one particle from one type to another.

        Args:
            from_type: The loser's old type.
            to_type: The winner's type.

        Raises:
            InvariantViolation: If from_type has no members to give.
        """
        if from_type == to_type:
            return
        if self._counts[from_type] <= 0:
            raise InvariantViolation(
                f"Cannot convert from {from_type}: count is {self._counts[from_type]}"
            )
        self._counts[from_type] -= 1
        self._counts[to_type] += 1

    def share(self, particle_type: ParticleType) -> float:
        """Fraction of the population carrying this type."""
        total = self.total
        if total == 0:
            return 0.0
        return self._counts[particle_type] / total

    def surviving_types(self) -> List[ParticleType]:
        """Types with at least one member, in fixed type order."""
        return [t for t in TYPE_ORDER if self._counts[t] > 0]

    def check_invariant(self) -> None:
        """Raise InvariantViolation if the sum drifted from the expected total."""
        total = self.total
        if total != self._expected_total:
            raise InvariantViolation(
                f"Population drifted: counts sum to {total}, expected {self._expected_total}"
            )

    def scoreboard(self) -> Scoreboard:
        return Scoreboard(
            rock=self._counts[ParticleType.ROCK],
            paper=self._counts[ParticleType.PAPER],
            scissors=self._counts[ParticleType.SCISSORS],
        )
