"""
Arena Controller
================

Owns all state of one match: the body registry (through the physics
world), type counts, interaction resolution, the corrective pass and the
dominance/win rules. Physics and audio are injected collaborators.

Per tick, strictly in order:
    physics step -> collision resolution -> corrective pass -> dominance
"""

from __future__ import annotations

import logging
import math
import random
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from rps_arena.arena_core.audio import AudioCollaborator, NullAudio, SpawnCueScheduler
from rps_arena.arena_core.config_loader import ArenaConfig, get_config
from rps_arena.arena_core.correction import CorrectionReport, CorrectivePass
from rps_arena.arena_core.errors import PhysicsUnavailableError
from rps_arena.arena_core.interaction import ConversionResult, InteractionResolver
from rps_arena.arena_core.particle_types import ParticleType, TYPE_ORDER
from rps_arena.arena_core.physics_world import ArenaBounds, PhysicsCollaborator, PhysicsWorld
from rps_arena.arena_core.population import Scoreboard, TypeCounts
from rps_arena.arena_core.rules import DominanceChange, DominanceTracker, MatchState, WinCondition
from rps_arena.arena_core.state_snapshot import ArenaSnapshot, SnapshotBuilder


logger = logging.getLogger(__name__)

PhysicsFactory = Callable[[ArenaConfig], Optional[PhysicsCollaborator]]


@dataclass
class TickResult:
    """What happened during one tick."""
    conversions: List[ConversionResult] = field(default_factory=list)
    correction: Optional[CorrectionReport] = None
    dominance_change: Optional[DominanceChange] = None
    winner: Optional[ParticleType] = None   # Set only on the tick the match ended


class TickClock:
    """
    Deterministic clock that advances a fixed frame time per call to ``advance``.

    Used for headless runs where wall-clock time is meaningless.
    """

    def __init__(self, frame_seconds: float = 1.0 / 60.0):
        self._frame_seconds = frame_seconds
        self._now = 0.0

    def __call__(self) -> float:
        return self._now

    def advance(self, frames: int = 1) -> None:
        self._now += self._frame_seconds * frames


class ArenaController:
    """
    One rock-paper-scissors match.

    Lifecycle: ``start()`` sets up walls and particles, the host calls
    ``tick()`` once per frame while ``is_running``, ``stop()`` tears down.
    """

    def __init__(
        self,
        config: Optional[ArenaConfig] = None,
        audio: Optional[AudioCollaborator] = None,
        physics_factory: Optional[PhysicsFactory] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Initialize controller.

        Args:
            config: Arena configuration. Uses default if None.
            audio: Audio collaborator. Silent if None.
            physics_factory: Builds a fresh physics world per match. Uses PhysicsWorld if None.
            seed: Seed for spawn placement and stall recovery.
            rng: Random source; overrides ``seed`` when given.
            clock: Returns seconds; drives elapsed time and spawn times.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._audio: AudioCollaborator = audio if audio is not None else NullAudio()
        self._physics_factory: PhysicsFactory = physics_factory if physics_factory is not None else PhysicsWorld
        self._seed = seed
        self._rng = rng if rng is not None else random.Random(seed)
        self._clock = clock if clock is not None else time.monotonic

        self._counts = TypeCounts()
        self._dominance = DominanceTracker(self._audio, config)
        self._win = WinCondition()
        self._cues = SpawnCueScheduler(self._audio, self._clock, config)
        self._snapshot_builder = SnapshotBuilder(config.particles.intro_duration)

        self._physics: Optional[PhysicsCollaborator] = None
        self._resolver: Optional[InteractionResolver] = None
        self._corrector: Optional[CorrectivePass] = None
        self._bounds: Optional[ArenaBounds] = None

        self._running = False
        self._paused = False
        self._start_time = 0.0
        self._paused_at = 0.0
        self._paused_total = 0.0
        self._final_elapsed = 0.0
        self._tick_count = 0

    @property
    def config(self) -> ArenaConfig:
        return self._config

    @property
    def audio(self) -> AudioCollaborator:
        return self._audio

    @property
    def physics(self) -> Optional[PhysicsCollaborator]:
        """Physics world of the current match, None when stopped."""
        return self._physics

    @property
    def resolver(self) -> Optional[InteractionResolver]:
        return self._resolver

    @property
    def corrector(self) -> Optional[CorrectivePass]:
        return self._corrector

    @property
    def bounds(self) -> Optional[ArenaBounds]:
        return self._bounds

    @property
    def counts(self) -> TypeCounts:
        return self._counts

    @property
    def scoreboard(self) -> Scoreboard:
        """Current per-type counts (read-only)."""
        return self._counts.scoreboard()

    @property
    def match_state(self) -> MatchState:
        return self._win.state

    @property
    def is_over(self) -> bool:
        return self._win.is_over

    @property
    def winner(self) -> Optional[ParticleType]:
        return self._win.winner

    @property
    def dominant_type(self) -> Optional[ParticleType]:
        return self._dominance.last_dominant_type

    @property
    def is_running(self) -> bool:
        """True between start() and stop(); the host keeps scheduling frames while set."""
        return self._running

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def elapsed(self) -> float:
        """Seconds of unpaused match time."""
        if not self._running:
            return self._final_elapsed
        now = self._paused_at if self._paused else self._clock()
        return now - self._start_time - self._paused_total

    def start(
        self,
        viewport_size: Tuple[float, float],
        on_game_over: Optional[Callable[[str], None]] = None,
        seed: Optional[int] = None
    ) -> None:
        """
        Set up a new match. A running match is stopped once the new viewport
        and physics world are ready.

        Args:
            viewport_size: (width, height) available to the arena.
            on_game_over: Called once with the winner's name ("Rock", ...).
            seed: Reseeds the random source if given.

        Raises:
            ConfigurationError: If the viewport leaves no room for an arena.
            PhysicsUnavailableError: If no physics world could be created.
        """
        # Everything that can fail runs before the current match is torn down
        width, height = viewport_size
        bounds = ArenaBounds.from_viewport(width, height, self._config.arena.viewport_margin)

        try:
            physics = self._physics_factory(self._config)
        except Exception as e:
            raise PhysicsUnavailableError(f"Physics world could not be created: {e}") from e
        if physics is None:
            raise PhysicsUnavailableError("Physics factory returned no world")

        if self._running:
            self.stop()

        if seed is not None:
            self._seed = seed
            self._rng.seed(seed)

        self._audio.init()

        self._physics = physics
        self._bounds = bounds
        physics.create_static_boundary(bounds, self._config.arena.wall_thickness)

        self._counts.clear()
        self._win.reset(on_game_over)
        self._dominance.reset()
        self._cues.clear()

        self._resolver = InteractionResolver(
            physics=physics,
            counts=self._counts,
            audio=self._audio,
            is_over=lambda: self._win.is_over,
            on_conversion=self._after_conversion
        )
        self._corrector = CorrectivePass(physics, bounds, self._config, self._rng)

        self._start_time = self._clock()
        self._paused = False
        self._paused_total = 0.0
        self._final_elapsed = 0.0
        self._tick_count = 0
        self._running = True

        self._spawn_particles()

        logger.info(
            "Match started: %d particles in %.0fx%.0f arena at (%.0f, %.0f)",
            self._config.particles.population, bounds.size, bounds.size, bounds.x, bounds.y
        )

    def _spawn_particles(self) -> None:
        """Place one third of the population of each type at random."""
        particles = self._config.particles
        padding = self._config.arena.spawn_padding
        bounds = self._bounds
        span = max(bounds.size - padding * 2, 0.0)

        for i in range(particles.population):
            particle_type = TYPE_ORDER[i % 3]

            x = bounds.x + padding + self._rng.random() * span
            y = bounds.y + padding + self._rng.random() * span

            angle = self._rng.random() * math.pi * 2
            velocity = (math.cos(angle) * particles.launch_speed, math.sin(angle) * particles.launch_speed)

            self._physics.spawn_particle(particle_type, x, y, velocity, spawn_time=self._clock())
            self._cues.schedule(i, particle_type)

        per_type = self._config.per_type_population
        self._counts.reset({t: per_type for t in TYPE_ORDER})

    def _after_conversion(self, result: ConversionResult) -> None:
        self._win.check(self._counts)

    def tick(self) -> Optional[TickResult]:
        """
        Advance the match by one frame.

        Returns:
            TickResult, or None when stopped or paused.
        """
        if not self._running or self._paused:
            return None

        self._cues.flush()

        was_over = self._win.is_over
        result = TickResult()

        self._physics.step()
        result.conversions = self._resolver.resolve_pending()

        result.correction = self._corrector.run(
            self._physics.particles.values(),
            self._physics.walls.values(),
            self.elapsed,
            boost_enabled=not self._win.is_over
        )

        if not self._win.is_over:
            result.dominance_change = self._dominance.update(self._counts)

        if not was_over and self._win.is_over:
            result.winner = self._win.winner

        self._counts.check_invariant()
        self._tick_count += 1
        return result

    def run_headless(
        self,
        max_ticks: int,
        before_tick: Optional[Callable[[], None]] = None
    ) -> Optional[ParticleType]:
        """
        Tick until the match is over or ``max_ticks`` is reached.

        Args:
            max_ticks: Upper bound on ticks.
            before_tick: Called before every tick (e.g. TickClock.advance).

        Returns:
            The winner, or None if the match did not finish.
        """
        for _ in range(max_ticks):
            if not self._running or self._win.is_over:
                break
            if before_tick is not None:
                before_tick()
            self.tick()
        return self._win.winner

    def pause(self) -> None:
        if self._running and not self._paused:
            self._paused = True
            self._paused_at = self._clock()

    def resume(self) -> None:
        if self._running and self._paused:
            self._paused_total += self._clock() - self._paused_at
            self._paused = False

    def toggle_pause(self) -> bool:
        """
        Pause or resume the match.

        Returns:
            The new paused state.
        """
        if self._paused:
            self.resume()
        else:
            self.pause()
        return self._paused

    def stop(self) -> None:
        """
        End the match: stop ticking, halt physics, silence ambience.

        Safe to call repeatedly or before start().
        """
        was_running = self._running
        if was_running:
            self._final_elapsed = self.elapsed
        self._running = False
        self._paused = False

        if self._physics is not None:
            self._physics.stop()
            self._physics = None
        if self._resolver is not None:
            self._resolver.clear_queue()
            self._resolver = None
        self._corrector = None

        self._audio.stop_ambience()
        self._cues.clear()
        self._counts.clear()

        if was_running:
            logger.info("Match stopped after %d ticks", self._tick_count)

    def snapshot(self) -> ArenaSnapshot:
        """
        Read-only view of the current frame for renderers.

        Raises:
            RuntimeError: If no match was started.
        """
        if self._physics is None or self._bounds is None:
            raise RuntimeError("No match in progress")

        return self._snapshot_builder.build(
            bounds=self._bounds,
            particles=self._physics.particles,
            walls=self._physics.walls,
            scoreboard=self.scoreboard,
            state=self._win.state,
            winner=self._win.winner,
            elapsed=self.elapsed,
            paused=self._paused,
            dominant_type=self._dominance.last_dominant_type,
            now=self._clock()
        )
