"""
Manual play with a pygame window.

The host owns everything the engine does not: the window, the tick timer,
keyboard repeat, and writing the best score back to disk.
"""

from __future__ import annotations

import pygame

from tetris_engine.config import GameConfig
from tetris_engine.game.tetris import Action, TetrisGame
from tetris_engine.keyboard import KeyRepeat
from tetris_engine.renderer import TetrisRenderer
from tetris_engine.storage import BestScoreStore


# ── Keyboard mapping ─────────────────────────────────────────────────────
# Arrow keys move / rotate / drop; Space starts or resumes, P pauses,
# R resets, S toggles sound.
KEY_MAP: dict[int, Action] = {
    pygame.K_LEFT: Action.LEFT,
    pygame.K_RIGHT: Action.RIGHT,
    pygame.K_UP: Action.ROTATE,
    pygame.K_DOWN: Action.SOFT_DROP,
    pygame.K_SPACE: Action.START,
    pygame.K_p: Action.PAUSE,
    pygame.K_r: Action.RESET,
    pygame.K_s: Action.SOUND,
}

REPEAT_KEYS = (pygame.K_LEFT, pygame.K_RIGHT, pygame.K_DOWN)

TICK_EVENT = pygame.USEREVENT + 1


class PygameScheduler:
    """Tick timer backed by ``pygame.time.set_timer``.

    ``set_timer`` replaces any timer already registered for the event and
    an interval of 0 removes it, which gives cancel-and-reschedule for free.
    """

    def __init__(self, event_type: int = TICK_EVENT) -> None:
        self.event_type = event_type
        self.interval: int | None = None

    def bind(self, game: TetrisGame) -> PygameScheduler:
        game.on_interval_change = self.schedule
        return self

    def schedule(self, interval: int | None) -> None:
        self.interval = interval
        pygame.time.set_timer(self.event_type, interval or 0)

    def cancel(self) -> None:
        self.schedule(None)


def play_manual(config: GameConfig, store: BestScoreStore | None = None) -> None:
    """Run the game in manual (human) play mode.

    The player uses keyboard controls:
      - Left/Right arrow: move piece (repeats while held)
      - Down arrow: soft drop (repeats while held)
      - Up arrow: rotate
      - Space: start, or resume when paused
      - P: pause
      - R: reset
      - S: toggle sound
      - Escape / close window: quit

    Args:
        config: Loaded game settings.
        store: Best-score store; defaults to the file named in ``config``.
    """
    if store is None:
        store = BestScoreStore(config.best_score_path)
    game = TetrisGame(config, best_score_store=store)
    renderer = TetrisRenderer(
        config.board_width,
        config.board_height,
        cell_size=config.cell_size,
        max_points=config.max_points,
    )
    # Force renderer init before the event loop (pygame must be initialized)
    renderer.render(game.snapshot(), config.fps, game.is_showing_logo)

    scheduler = PygameScheduler().bind(game)
    repeat = KeyRepeat(config.das_delay_ms, config.das_rate_ms, REPEAT_KEYS)
    running = True
    dt = 0

    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
                break
            elif event.type == scheduler.event_type:
                game.tick()
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                    break
                if event.key in KEY_MAP:
                    repeat.press(event.key)
                    game.step(KEY_MAP[event.key])
            elif event.type == pygame.KEYUP:
                repeat.release(event.key)

        if not running:
            break

        for key in repeat.update(dt):
            game.step(KEY_MAP[key])

        if game.is_over and game.record_best_score():
            print(f"New best score: {game.state.best_score}")

        dt = renderer.render(game.snapshot(), config.fps, game.is_showing_logo)

    scheduler.cancel()
    game.record_best_score()
    s = game.state
    print(
        f"Points: {s.points} | Lines: {s.cleared_lines} | Speed: {s.current_speed}"
        f" | Best: {s.best_score}"
    )
    renderer.close()
