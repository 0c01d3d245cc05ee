"""
Tests for type precedence, conversions and collision batches.
"""

import pytest

from rps_arena.arena_core.errors import InvariantViolation
from rps_arena.arena_core.interaction import InteractionResolver
from rps_arena.arena_core.particle_types import ParticleType, TYPE_ORDER, resolve_winner
from rps_arena.arena_core.physics_world import ArenaBounds, CollisionPair, PhysicsWorld
from rps_arena.arena_core.population import TypeCounts
from rps_arena.arena_core.rules import WinCondition


ROCK = ParticleType.ROCK
PAPER = ParticleType.PAPER
SCISSORS = ParticleType.SCISSORS


@pytest.fixture
def physics(config):
    return PhysicsWorld(config)


@pytest.fixture
def win():
    return WinCondition()


@pytest.fixture
def counts():
    return TypeCounts()


@pytest.fixture
def resolver(physics, counts, audio, win):
    return InteractionResolver(
        physics=physics,
        counts=counts,
        audio=audio,
        is_over=lambda: win.is_over,
        on_conversion=lambda result: win.check(counts)
    )


def spawn(physics, counts, kinds):
    """Spawn one particle per kind, spread out so they never touch, and set counts."""
    particles = [
        physics.spawn_particle(kind, 100 + i * 100, 100, velocity=(0, 0))
        for i, kind in enumerate(kinds)
    ]
    counts.reset({t: sum(1 for k in kinds if k == t) for t in TYPE_ORDER})
    return particles


class TestPrecedence:
    """All ordered type pairs."""

    @pytest.mark.parametrize("a, b, expected", [
        (ROCK, SCISSORS, ROCK),
        (SCISSORS, PAPER, SCISSORS),
        (PAPER, ROCK, PAPER),
        (SCISSORS, ROCK, ROCK),
        (PAPER, SCISSORS, SCISSORS),
        (ROCK, PAPER, PAPER),
    ])
    def test_unequal_pairs(self, a, b, expected):
        assert resolve_winner(a, b) == expected

    @pytest.mark.parametrize("kind", TYPE_ORDER)
    def test_equal_pairs_have_no_winner(self, kind):
        assert resolve_winner(kind, kind) is None

    def test_beats_is_a_cycle(self):
        for kind in TYPE_ORDER:
            assert kind.beats.beats.beats == kind
            assert kind.beats != kind

    def test_host_facing_labels(self):
        assert [k.display_name for k in TYPE_ORDER] == ["Rock", "Paper", "Scissors"]
        assert [str(k) for k in TYPE_ORDER] == ["rock", "paper", "scissors"]
        assert len({k.color for k in TYPE_ORDER}) == 3


class TestConversion:
    """Resolving single collisions."""

    @pytest.mark.parametrize("a, b, winner", [
        (ROCK, SCISSORS, ROCK),
        (SCISSORS, PAPER, SCISSORS),
        (PAPER, ROCK, PAPER),
        (SCISSORS, ROCK, ROCK),
        (PAPER, SCISSORS, SCISSORS),
        (ROCK, PAPER, PAPER),
    ])
    def test_loser_takes_winner_type(self, physics, counts, resolver, audio, a, b, winner):
        # Third particle keeps the match from ending on this conversion
        third = next(t for t in TYPE_ORDER if t not in (a, b))
        pa, pb, _ = spawn(physics, counts, [a, b, third])
        loser_type = b if winner == a else a

        result = resolver.resolve_interaction(pa, pb)

        assert result is not None
        assert pa.kind == winner
        assert pb.kind == winner
        assert result.from_type == loser_type
        assert result.to_type == winner
        assert counts[winner] == 2
        assert counts[loser_type] == 0
        assert counts.total == 3
        assert audio.named("transform") == [("transform", loser_type, winner)]

    @pytest.mark.parametrize("kind", TYPE_ORDER)
    def test_same_type_is_inert(self, physics, counts, resolver, audio, kind):
        pa, pb = spawn(physics, counts, [kind, kind])

        assert resolver.resolve_interaction(pa, pb) is None
        assert pa.kind == kind and pb.kind == kind
        assert counts[kind] == 2
        assert audio.named("transform") == []

    def test_transfer_from_empty_type_is_a_violation(self, counts):
        counts.reset({ROCK: 3, PAPER: 0, SCISSORS: 0})
        with pytest.raises(InvariantViolation):
            counts.transfer(PAPER, ROCK)


class TestCollisionBatches:
    """Queued pairs are resolved in emitted order with fresh types."""

    def test_chained_conversion_rereads_types(self, physics, counts, resolver):
        a, b, c = spawn(physics, counts, [ROCK, PAPER, SCISSORS])

        resolver.enqueue([CollisionPair(a.uid, b.uid), CollisionPair(a.uid, c.uid)])
        results = resolver.resolve_pending()

        # a: rock -> paper (by b), then paper -> scissors (by c)
        assert [(r.from_type, r.to_type) for r in results] == [(ROCK, PAPER), (PAPER, SCISSORS)]
        assert a.kind == SCISSORS
        assert counts.scoreboard().as_dict() == {"rock": 0, "paper": 1, "scissors": 2}

    def test_repeated_pair_is_not_double_converted(self, physics, counts, resolver):
        a, b, _ = spawn(physics, counts, [ROCK, SCISSORS, PAPER])

        resolver.enqueue([CollisionPair(a.uid, b.uid), CollisionPair(b.uid, a.uid)])
        results = resolver.resolve_pending()

        assert len(results) == 1
        assert counts[ROCK] == 2
        assert counts[SCISSORS] == 0

    def test_wall_pairs_are_ignored(self, physics, counts, resolver):
        walls = physics.create_static_boundary(ArenaBounds(0, 0, 500), 10)
        a, _ = spawn(physics, counts, [ROCK, PAPER])

        resolver.enqueue([CollisionPair(walls[0].uid, a.uid)])

        assert resolver.resolve_pending() == []
        assert a.kind == ROCK

    def test_queue_is_drained(self, physics, counts, resolver):
        a, b = spawn(physics, counts, [ROCK, ROCK])
        resolver.enqueue([CollisionPair(a.uid, b.uid)])
        assert resolver.pending_count == 1

        resolver.resolve_pending()

        assert resolver.pending_count == 0

    def test_physics_collisions_reach_the_queue(self, physics, counts, resolver):
        """Two particles flying at each other produce a collision-start pair."""
        a = physics.spawn_particle(ROCK, 100, 100, velocity=(5, 0))
        b = physics.spawn_particle(SCISSORS, 130, 100, velocity=(-5, 0))
        counts.reset({ROCK: 1, PAPER: 0, SCISSORS: 1})

        emitted = []
        for _ in range(10):
            emitted.extend(physics.step())
            if emitted:
                break

        assert {emitted[0].uid_a, emitted[0].uid_b} == {a.uid, b.uid}
        assert resolver.pending_count >= 1


class TestMatchOver:
    """Conversions stop once one type survives."""

    def test_resolver_is_inert_after_win(self, physics, counts, resolver, audio, win):
        a, b = spawn(physics, counts, [ROCK, SCISSORS])

        resolver.resolve_interaction(a, b)
        assert win.is_over
        assert win.winner == ROCK

        # Force an unequal pair after the match ended
        a.kind = PAPER
        audio.calls.clear()

        assert resolver.resolve_interaction(a, b) is None
        assert b.kind == ROCK
        assert audio.named("transform") == []

    def test_pending_pairs_after_win_are_dropped(self, physics, counts, resolver, win):
        a, b, c = spawn(physics, counts, [ROCK, SCISSORS, SCISSORS])

        resolver.enqueue([
            CollisionPair(a.uid, b.uid),
            CollisionPair(a.uid, c.uid),
            CollisionPair(a.uid, b.uid),
        ])
        results = resolver.resolve_pending()

        assert len(results) == 2
        assert win.is_over
        assert counts[ROCK] == 3
