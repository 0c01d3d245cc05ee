"""
Arena Viewer
============

Watch a rock-paper-scissors match in a pygame window with synthesized audio.

Controls:
    - Click: Enable audio (first click)
    - P / Space: Pause / resume
    - M: Mute / unmute
    - R: Restart match
    - ESC: Quit

Usage:
    python -m tools.play_arena [--seed SEED] [--width WIDTH] [--height HEIGHT]
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from rps_arena.arena_core.arena import ArenaController
from rps_arena.arena_core.audio import ToneAudio
from rps_arena.arena_core.config_loader import ArenaConfig, load_config
from rps_arena.arena_core.particle_types import TYPE_ORDER
from rps_arena.arena_core.state_snapshot import ArenaSnapshot
from rps_arena.logging_config import configure_logging


class ArenaRenderer:
    """Draws an ArenaSnapshot: walls, particles with intro easing, scoreboard."""

    def __init__(self, config: ArenaConfig, window_width: int, window_height: int):
        self._config = config
        self._window_width = window_width
        self._window_height = window_height

        self._background = (18, 18, 28)
        self._wall_idle = (70, 70, 80)
        self._wall_flash = (100, 108, 255)
        self._text = (230, 230, 240)

        pygame.font.init()
        self._font_large = pygame.font.Font(None, 56)
        self._font_medium = pygame.font.Font(None, 28)
        self._font_glyph = pygame.font.Font(None, int(config.particles.radius * 2))

    def render(self, screen: pygame.Surface, snapshot: ArenaSnapshot, muted: bool) -> None:
        screen.fill(self._background)
        self._draw_walls(screen, snapshot)
        self._draw_particles(screen, snapshot)
        self._draw_scoreboard(screen, snapshot, muted)

        if snapshot.winner is not None:
            self._draw_game_over(screen, snapshot.winner.display_name)
        elif snapshot.paused:
            self._draw_banner(screen, "PAUSED")

    def _draw_walls(self, screen: pygame.Surface, snapshot: ArenaSnapshot) -> None:
        for wall in snapshot.walls:
            intensity = min(1.0, wall.impact_intensity)
            color = tuple(
                int(idle + (flash - idle) * intensity)
                for idle, flash in zip(self._wall_idle, self._wall_flash)
            )
            x, y, w, h = wall.rect
            pygame.draw.rect(screen, color, pygame.Rect(int(x), int(y), int(w), int(h)))

    def _draw_particles(self, screen: pygame.Surface, snapshot: ArenaSnapshot) -> None:
        radius = self._config.particles.radius
        for view in snapshot.particles:
            # Ease-in-out scale during the intro
            p = view.intro_progress
            scale = 2 * p * p if p < 0.5 else 1 - (-2 * p + 2) ** 2 / 2
            r = max(1, int(radius * scale))
            center = (int(view.x), int(view.y))

            pygame.draw.circle(screen, view.kind.color, center, r)
            if p >= 1.0:
                glyph = self._font_glyph.render(view.kind.value[0].upper(), True, self._background)
                screen.blit(glyph, glyph.get_rect(center=center))

    def _draw_scoreboard(self, screen: pygame.Surface, snapshot: ArenaSnapshot, muted: bool) -> None:
        counts = snapshot.scoreboard.as_dict()
        x = 12
        for particle_type in TYPE_ORDER:
            label = f"{particle_type.display_name}: {counts[particle_type.value]}"
            surface = self._font_medium.render(label, True, particle_type.color)
            screen.blit(surface, (x, 10))
            x += surface.get_width() + 24

        status = f"{snapshot.elapsed:5.1f}s" + ("  [muted]" if muted else "")
        surface = self._font_medium.render(status, True, self._text)
        screen.blit(surface, (self._window_width - surface.get_width() - 12, 10))

    def _draw_banner(self, screen: pygame.Surface, text: str) -> None:
        surface = self._font_large.render(text, True, self._text)
        screen.blit(surface, surface.get_rect(center=(self._window_width // 2, self._window_height // 2)))

    def _draw_game_over(self, screen: pygame.Surface, winner: str) -> None:
        overlay = pygame.Surface((self._window_width, self._window_height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 150))
        screen.blit(overlay, (0, 0))
        self._draw_banner(screen, f"Winner: {winner}")

        hint = self._font_medium.render("Press R to restart", True, self._text)
        screen.blit(hint, hint.get_rect(center=(self._window_width // 2, self._window_height // 2 + 45)))


class ArenaViewer:
    """pygame host: schedules one controller tick per display frame."""

    def __init__(
        self,
        config: Optional[ArenaConfig] = None,
        seed: Optional[int] = None,
        window_width: int = 700,
        window_height: int = 700,
        target_fps: int = 60
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._seed = seed
        self._window_width = window_width
        self._window_height = window_height
        self._target_fps = target_fps

        pygame.init()
        self._screen = pygame.display.set_mode((window_width, window_height))
        pygame.display.set_caption("Rock Paper Scissors Arena")
        self._clock = pygame.time.Clock()

        self._audio = ToneAudio(config)
        self._controller = ArenaController(config=config, audio=self._audio, seed=seed)
        self._renderer = ArenaRenderer(config, window_width, window_height)

        self._running = True
        self._audio_resumed = False

    def run(self) -> Optional[str]:
        """Run until the window closes. Returns the last winner's name."""
        print("=== Rock Paper Scissors Arena ===")
        print("Click to enable audio, P to pause, M to mute, R to restart, ESC to quit")
        print()

        self._start_match()

        while self._running:
            self._handle_events()
            if self._controller.is_running:
                self._controller.tick()
                self._render()
            self._clock.tick(self._target_fps)

        winner = self._controller.winner
        self._controller.stop()
        self._audio.close()
        pygame.quit()
        return winner.display_name if winner is not None else None

    def _start_match(self) -> None:
        self._controller.start(
            (self._window_width, self._window_height),
            on_game_over=self._on_game_over
        )

    def _on_game_over(self, winner: str) -> None:
        print(f"\nWinner: {winner} ({self._controller.elapsed:.1f}s)")

    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.MOUSEBUTTONDOWN:
                if not self._audio_resumed:
                    self._audio.resume_on_user_gesture()
                    self._audio_resumed = True

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key in (pygame.K_p, pygame.K_SPACE):
                    paused = self._controller.toggle_pause()
                    print("Paused" if paused else "Resumed")
                elif event.key == pygame.K_m:
                    muted = self._audio.toggle_mute()
                    print("Muted" if muted else "Unmuted")
                elif event.key == pygame.K_r:
                    print("\n=== Match Restarted ===\n")
                    self._start_match()

    def _render(self) -> None:
        snapshot = self._controller.snapshot()
        self._renderer.render(self._screen, snapshot, muted=self._audio.muted)
        pygame.display.flip()


def main():
    parser = argparse.ArgumentParser(description="Watch a rock-paper-scissors arena match")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--width", type=int, default=700, help="Window width (default: 700)")
    parser.add_argument("--height", type=int, default=700, help="Window height (default: 700)")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument("--config", type=str, default=None, help="Path to arena_config.yaml")
    parser.add_argument("--log-level", type=str, default=None, help="Log level (default: INFO)")

    args = parser.parse_args()
    configure_logging(args.log_level)

    try:
        config = load_config(args.config)
        viewer = ArenaViewer(
            config=config,
            seed=args.seed,
            window_width=args.width,
            window_height=args.height,
            target_fps=args.fps
        )
        winner = viewer.run()
        if winner is not None:
            print(f"\nFinal winner: {winner}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
