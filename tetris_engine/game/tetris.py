"""
Game engine — state machine, tick cycle, scoring, and speed progression.

This module ties together the Board, Piece, PieceFactory, and lookup tables
into a host-driven falling-block game. The engine never schedules itself:
it reports the tick interval it wants through ``on_interval_change`` and
the host calls ``tick()`` on that cadence, cancelling and rescheduling its
timer whenever the interval changes.

The current piece is drawn into the board while it falls. Every move is
applied as erase → ``store()`` → transform → collision test →
(``revert()`` on failure) → redraw.
"""

from __future__ import annotations

import enum
import random
from dataclasses import dataclass
from typing import Callable, Protocol

import numpy as np

from tetris_engine.config import GameConfig
from tetris_engine.game.board import Board, Tile
from tetris_engine.game.factory import PieceFactory
from tetris_engine.game.pieces import Piece
from tetris_engine.tables import points_for, speed_for, tick_interval_for


class GameState(enum.Enum):
    """Lifecycle of a game."""
    LOADING = "loading"
    STARTED = "started"
    PAUSED = "paused"
    OVER = "over"


class Action(enum.IntEnum):
    """Host commands, for table-driven input maps."""
    LEFT = 0
    RIGHT = 1
    ROTATE = 2
    SOFT_DROP = 3
    START = 4
    PAUSE = 5
    RESET = 6
    SOUND = 7


class ScoreStore(Protocol):
    def load(self) -> int: ...

    def save(self, points: int) -> None: ...


@dataclass
class EngineState:
    """Single source of truth for a game.

    Attributes:
        board: Tile grid, including the falling piece once it is drawn.
        current: Falling piece, or None before the first start.
        next: Piece promoted to ``current`` on the next spawn.
        points: Score.
        locked: Reentrancy guard; movement commands and ticks are ignored
            while it is set.
        sound: Sound flag (no gameplay effect).
        init_speed: Speed a new game starts at.
        current_speed: Speed now, in ``[init_speed, 6]``.
        cleared_lines: Rows cleared since the game started.
        game_state: Lifecycle state.
        best_score: Best score read from the store.
    """
    board: Board
    current: Piece | None
    next: Piece
    points: int = 0
    locked: bool = True
    sound: bool = True
    init_speed: int = 1
    current_speed: int = 1
    cleared_lines: int = 0
    game_state: GameState = GameState.LOADING
    best_score: int = 0


@dataclass(frozen=True)
class EngineSnapshot:
    """Read-only view of an EngineState handed to observers."""
    board: np.ndarray
    current: Piece | None
    next: Piece
    points: int
    locked: bool
    sound: bool
    init_speed: int
    current_speed: int
    cleared_lines: int
    game_state: GameState
    best_score: int
    tick_interval: int | None


class TetrisGame:
    """Falling-block game engine driven by external ticks and commands.

    Attributes:
        config: Board size, speed, and table settings.
        factory: Source of random pieces.
        state: The current EngineState.
        on_change: Called with a snapshot after every mutating call.
        on_interval_change: Called with the desired tick interval in ms,
            or None when the host should stop ticking.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        rng: random.Random | None = None,
        best_score_store: ScoreStore | None = None,
        on_change: Callable[[EngineSnapshot], None] | None = None,
        on_interval_change: Callable[[int | None], None] | None = None,
    ) -> None:
        """Create a game in the LOADING state.

        Args:
            config: Settings (defaults to ``GameConfig()``).
            rng: Random source for pieces and start lines; seeded from
                ``config.seed`` when omitted.
            best_score_store: Where the best score is read from and saved to.
            on_change: Change notification hook.
            on_interval_change: Tick scheduling hook.
        """
        self.config = config or GameConfig()
        self._rng = rng or random.Random(self.config.seed)
        self.factory = PieceFactory(self.config.board_width, self._rng)
        self.best_score_store = best_score_store
        self.on_change = on_change
        self.on_interval_change = on_interval_change
        self._tick_interval: int | None = None
        self.state = self._initial_state()

    # ── Lifecycle ────────────────────────────────────────────────────────

    def _initial_state(self) -> EngineState:
        width, height = self.config.board_width, self.config.board_height
        if self.config.start_lines:
            board = Board.with_start_lines(width, height, self.config.start_lines, self._rng)
        else:
            board = Board.empty_board(width, height)
        return EngineState(
            board=board,
            current=None,
            next=self.factory.random_piece(),
            sound=self.config.sound,
            init_speed=self.config.init_speed,
            current_speed=self.config.init_speed,
            best_score=self.best_score_store.load() if self.best_score_store else 0,
        )

    def start(self) -> None:
        """Begin a new game, or resume a paused one.

        The first start promotes ``next`` to ``current`` and sets the speed
        to ``init_speed``; a resume keeps the piece and speed it had.
        Does nothing while already started or after game over.
        """
        s = self.state
        if s.game_state in (GameState.STARTED, GameState.OVER):
            return
        if s.current is None:
            self._spawn()
            s.current_speed = s.init_speed
        s.game_state = GameState.STARTED
        self._schedule(self._interval_for(s.current_speed))
        s.locked = False
        self._notify()

    def resume(self) -> None:
        if self.state.game_state is GameState.PAUSED:
            self.start()

    def pause(self) -> None:
        """Freeze a running game and ask the host to stop ticking."""
        if self.state.game_state is not GameState.STARTED:
            return
        self.state.locked = True
        self.state.game_state = GameState.PAUSED
        self._schedule(None)
        self._notify()

    def reset(self) -> None:
        """Throw the game away and return to LOADING; ``start()`` begins anew."""
        self.state = self._initial_state()
        self._schedule(None)
        self._notify()

    # ── Player commands ──────────────────────────────────────────────────

    def move_left(self) -> None:
        if not self._can_move():
            return
        self._erase()
        piece = self.state.current.store().move_left()
        if self._collides_left(piece):
            piece = piece.revert()
        self.state.current = piece
        self._draw()
        self._notify()

    def move_right(self) -> None:
        if not self._can_move():
            return
        self._erase()
        piece = self.state.current.store().move_right()
        if self._collides_right(piece):
            piece = piece.revert()
        self.state.current = piece
        self._draw()
        self._notify()

    def rotate(self) -> None:
        """Rotate the current piece, nudging it left off the right wall.

        If the rotated piece hits the right wall or the stack it is shifted
        left one column at a time; hitting the left wall or the stack during
        that correction abandons the rotation.
        """
        if not self._can_move():
            return
        self._erase()
        piece = self.state.current.store().rotate()
        while self._collides_right(piece):
            piece = piece.move_left()
            if self._collides_left(piece):
                piece = piece.revert()
                break
        if self._collides(piece):
            # The rotated layout can cross the left wall or the floor
            piece = piece.revert()
        self.state.current = piece
        self._draw()
        self._notify()

    def soft_drop(self) -> None:
        """Move down one row now, exactly as a tick would."""
        self.tick()

    def set_sound_enabled(self, enabled: bool) -> None:
        self.state.sound = bool(enabled)
        self._notify()

    def toggle_sound(self) -> None:
        self.set_sound_enabled(not self.state.sound)

    def step(self, action: int) -> None:
        """Dispatch an Action to the matching command."""
        handlers = {
            Action.LEFT: self.move_left,
            Action.RIGHT: self.move_right,
            Action.ROTATE: self.rotate,
            Action.SOFT_DROP: self.soft_drop,
            Action.START: self.start,
            Action.PAUSE: self.pause,
            Action.RESET: self.reset,
            Action.SOUND: self.toggle_sound,
        }
        handlers[Action(action)]()

    # ── Tick cycle ───────────────────────────────────────────────────────

    def tick(self) -> None:
        """Advance the game by one row.

        Moves the current piece down. When it cannot move it comes to rest,
        full rows are cleared, the next piece spawns, and the game ends if
        the spawned piece has no room.
        """
        s = self.state
        if s.locked or s.current is None:
            return
        s.locked = True
        self._erase()
        piece = s.current.store().move_down()

        if not self._collides_bottom(piece):
            s.current = piece
            self._draw()
            s.locked = False
            self._notify()
            return

        s.current = piece.revert()
        self._draw()
        self._clear_full_lines()
        self._spawn()
        if self._is_game_over():
            self._game_over()
            self._notify()
            return
        s.locked = False
        self._notify()

    def _clear_full_lines(self) -> int:
        s = self.state
        lines = s.board.clear_lines()
        if not lines:
            return 0
        s.cleared_lines += lines
        s.points += points_for(lines, self.config.points_table)
        new_speed = speed_for(s.init_speed, s.cleared_lines, s.board.height)
        if new_speed != s.current_speed:
            s.current_speed = new_speed
            self._schedule(self._interval_for(new_speed))
        return lines

    def _spawn(self) -> None:
        self.state.current = self.state.next
        self.state.next = self.factory.random_piece()

    def _is_game_over(self) -> bool:
        # Spawn cells must be free so the undrawn piece can later be erased safely
        piece = self.state.current
        return self._collides(piece) or self._collides_bottom(piece.move_down())

    def _game_over(self) -> None:
        self.state.locked = True
        self.state.game_state = GameState.OVER
        self._schedule(None)

    # ── Collision ────────────────────────────────────────────────────────

    def _overlaps(self, piece: Piece) -> bool:
        """Whether any in-column cell is off the top/bottom or on a filled tile."""
        board = self.state.board
        for row, col in piece.cells():
            if not 0 <= col < board.width:
                continue
            if not 0 <= row < board.height:
                return True
            if board.get(row * board.width + col) == Tile.FILLED:
                return True
        return False

    def _collides_left(self, piece: Piece) -> bool:
        return piece.left_col < 0 or self._overlaps(piece)

    def _collides_right(self, piece: Piece) -> bool:
        return piece.right_col >= self.state.board.width or self._overlaps(piece)

    def _collides_bottom(self, piece: Piece) -> bool:
        return piece.bottom_row >= self.state.board.height or self._overlaps(piece)

    def _collides(self, piece: Piece) -> bool:
        return (
            piece.left_col < 0
            or piece.right_col >= self.state.board.width
            or self._overlaps(piece)
        )

    # ── Board drawing ────────────────────────────────────────────────────

    def _draw(self) -> None:
        s = self.state
        s.current = s.current.clear_store()
        s.board.fill(s.current.positions(s.board.width), Tile.FILLED)

    def _erase(self) -> None:
        s = self.state
        s.board.fill(s.current.positions(s.board.width), Tile.EMPTY)

    # ── Scheduling / notification ────────────────────────────────────────

    def _interval_for(self, speed: int) -> int:
        return tick_interval_for(speed, self.config.speed_delays_ms)

    def _schedule(self, interval: int | None) -> None:
        self._tick_interval = interval
        if self.on_interval_change is not None:
            self.on_interval_change(interval)

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self.snapshot())

    def _can_move(self) -> bool:
        return not self.state.locked and self.state.current is not None

    # ── Best score ───────────────────────────────────────────────────────

    def record_best_score(self) -> bool:
        """Save ``points`` to the store if they beat the best score.

        Returns:
            True if a new best score was written.
        """
        s = self.state
        if s.points <= s.best_score:
            return False
        s.best_score = s.points
        if self.best_score_store is not None:
            self.best_score_store.save(s.points)
        self._notify()
        return True

    # ── Queries ──────────────────────────────────────────────────────────

    def snapshot(self) -> EngineSnapshot:
        """Return a read-only copy of the current state."""
        s = self.state
        grid = s.board.get_grid()
        grid.flags.writeable = False
        return EngineSnapshot(
            board=grid,
            current=s.current,
            next=s.next,
            points=s.points,
            locked=s.locked,
            sound=s.sound,
            init_speed=s.init_speed,
            current_speed=s.current_speed,
            cleared_lines=s.cleared_lines,
            game_state=s.game_state,
            best_score=s.best_score,
            tick_interval=self._tick_interval,
        )

    @property
    def tick_interval(self) -> int | None:
        """Interval last requested from the host, or None when stopped."""
        return self._tick_interval

    @property
    def is_playing(self) -> bool:
        return self.state.game_state is GameState.STARTED

    @property
    def is_paused(self) -> bool:
        return self.state.game_state is GameState.PAUSED

    @property
    def is_over(self) -> bool:
        return self.state.game_state is GameState.OVER

    @property
    def is_showing_logo(self) -> bool:
        """True on the title screen: loading or over, with no piece in play."""
        return (
            self.state.game_state in (GameState.LOADING, GameState.OVER)
            and self.state.current is None
        )
