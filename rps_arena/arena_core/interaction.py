"""
Interaction System
==================

Queues collision-start pairs from the physics world and resolves them into
type conversions, strictly in the order they were emitted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, TYPE_CHECKING

from rps_arena.arena_core.particle_types import ParticleType, resolve_winner
from rps_arena.arena_core.population import TypeCounts

if TYPE_CHECKING:
    from rps_arena.arena_core.audio import AudioCollaborator
    from rps_arena.arena_core.physics_world import CollisionPair, Particle, PhysicsCollaborator


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    """Result of a single conversion."""
    winner_uid: int
    loser_uid: int
    from_type: ParticleType
    to_type: ParticleType


class InteractionResolver:
    """
    Converts the loser of every unequal-type particle collision.

    Types are re-read from the registry for each pair, so a body relabeled
    earlier in a batch is seen with its new type by later pairs.
    """

    def __init__(
        self,
        physics: "PhysicsCollaborator",
        counts: TypeCounts,
        audio: "AudioCollaborator",
        is_over: Callable[[], bool],
        on_conversion: Optional[Callable[[ConversionResult], None]] = None
    ):
        """
        Initialize the resolver.

        Args:
            physics: Physics world owning the particle registry.
            counts: Live type counts, updated on every conversion.
            audio: Receives transform cues.
            is_over: Returns True once the match is over; the resolver is inert then.
            on_conversion: Called after every conversion (win check hook).
        """
        self._physics = physics
        self._counts = counts
        self._audio = audio
        self._is_over = is_over
        self._on_conversion = on_conversion

        self._queue: List["CollisionPair"] = []

        physics.on_collision_start(self.enqueue)

    def enqueue(self, pairs: List["CollisionPair"]) -> None:
        """Append a collision batch to the queue."""
        self._queue.extend(pairs)

    @property
    def pending_count(self) -> int:
        """Number of queued pairs."""
        return len(self._queue)

    def clear_queue(self) -> None:
        self._queue.clear()

    def resolve_pending(self) -> List[ConversionResult]:
        """
        Drain the queue in received order.

        Returns:
            Conversions performed, in order.
        """
        if not self._queue:
            return []

        queue = self._queue
        self._queue = []

        results: List[ConversionResult] = []
        for pair in queue:
            if self._is_over():
                break

            particle_a = self._physics.get_particle(pair.uid_a)
            particle_b = self._physics.get_particle(pair.uid_b)

            # Walls and unknown bodies take no part in conversions
            if particle_a is None or particle_b is None:
                continue

            result = self.resolve_interaction(particle_a, particle_b)
            if result is not None:
                results.append(result)

        return results

    def resolve_interaction(
        self,
        particle_a: "Particle",
        particle_b: "Particle"
    ) -> Optional[ConversionResult]:
        """
        Resolve one collision between two particles.

        Args:
            particle_a: First particle.
            particle_b: Second particle.

        Returns:
            The conversion, or None for same-type pairs or a finished match.
        """
        if self._is_over():
            return None

        winning_type = resolve_winner(particle_a.kind, particle_b.kind)
        if winning_type is None:
            return None

        if particle_a.kind == winning_type:
            winner, loser = particle_a, particle_b
        else:
            winner, loser = particle_b, particle_a

        result = self._transform(loser, winner)
        if self._on_conversion is not None:
            self._on_conversion(result)
        return result

    def _transform(self, loser: "Particle", winner: "Particle") -> ConversionResult:
        """Relabel the loser and move one unit between counts."""
        old_type = loser.kind
        new_type = winner.kind

        self._counts.transfer(old_type, new_type)
        loser.kind = new_type

        self._audio.play_transform_cue(old_type, new_type)
        logger.debug("Particle %d converted %s -> %s by %d", loser.uid, old_type, new_type, winner.uid)

        return ConversionResult(
            winner_uid=winner.uid,
            loser_uid=loser.uid,
            from_type=old_type,
            to_type=new_type
        )
