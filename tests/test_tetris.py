import random

import numpy as np
import pytest

from conftest import HEIGHT, WIDTH, fill_row
from tetris_engine.config import GameConfig
from tetris_engine.game.board import Tile
from tetris_engine.game.pieces import I_PIECE, O_PIECE, PIECE_TYPES, T_PIECE, Piece
from tetris_engine.game.tetris import Action, GameState, TetrisGame
from tetris_engine.tables import points_for, tick_interval_for


def start_with(game: TetrisGame, piece: Piece) -> TetrisGame:
    """Start ``game`` and swap in ``piece`` as the (not yet drawn) current piece."""
    game.start()
    game.state.current = piece
    return game


def drawn(game: TetrisGame) -> bool:
    s = game.state
    return all(s.board.get(p) == Tile.FILLED for p in s.current.positions(WIDTH))


def state_key(game: TetrisGame):
    s = game.state
    return (
        s.board.get_grid().tobytes(),
        s.current,
        s.next,
        s.points,
        s.locked,
        s.current_speed,
        s.cleared_lines,
        s.game_state,
    )


# ── Lifecycle ────────────────────────────────────────────────────────────

def test_initial_state_is_loading(game):
    s = game.state
    assert s.game_state is GameState.LOADING
    assert s.current is None
    assert s.next is not None
    assert s.locked
    assert s.points == 0
    assert s.cleared_lines == 0
    assert s.current_speed == s.init_speed == 1
    assert s.best_score == 500
    assert not s.board.grid.any()
    assert game.tick_interval is None
    assert game.is_showing_logo


def test_commands_before_start_are_noops(game, changes):
    before = state_key(game)
    game.move_left()
    game.move_right()
    game.rotate()
    game.soft_drop()
    game.tick()
    game.pause()
    assert state_key(game) == before
    assert changes == []


def test_start_promotes_next_and_requests_interval(game, scheduler, changes):
    upcoming = game.state.next
    game.start()
    s = game.state
    assert s.current == upcoming
    assert s.next is not upcoming
    assert s.game_state is GameState.STARTED
    assert not s.locked
    assert scheduler.interval == tick_interval_for(1) == 700
    assert game.tick_interval == 700
    assert game.is_playing and not game.is_showing_logo
    assert len(changes) == 1
    assert changes[0].game_state is GameState.STARTED


def test_start_uses_init_speed_interval(store):
    config = GameConfig(init_speed=3, seed=1)
    intervals = []
    game = TetrisGame(config, best_score_store=store, on_interval_change=intervals.append)
    game.start()
    assert game.state.current_speed == 3
    assert intervals == [450]


def test_start_while_started_is_noop(game, scheduler, changes):
    game.start()
    current = game.state.current
    game.start()
    assert game.state.current == current
    assert scheduler.history == [700]
    assert len(changes) == 1


def test_spawned_piece_is_drawn_by_first_tick(game):
    game.start()
    spawned = game.state.current
    assert not game.state.board.grid.any()
    game.tick()
    assert game.state.current.row == spawned.row + 1
    assert drawn(game)
    assert int(game.state.board.grid.sum()) == 4


def test_pause_and_resume_keep_speed(game, scheduler):
    game.start()
    game.state.current_speed = 3
    game.pause()
    assert game.is_paused
    assert game.state.locked
    assert scheduler.interval is None

    before = state_key(game)
    game.tick()
    game.move_left()
    game.rotate()
    assert state_key(game) == before

    game.resume()
    assert game.is_playing
    assert not game.state.locked
    assert game.state.current_speed == 3
    assert scheduler.interval == tick_interval_for(3)


def test_start_resumes_a_paused_game(game, scheduler):
    game.start()
    current = game.state.current
    game.pause()
    game.start()
    assert game.is_playing
    assert game.state.current == current


def test_resume_only_applies_when_paused(game, changes):
    game.resume()
    assert game.state.game_state is GameState.LOADING
    assert changes == []


def test_reset_returns_to_loading_without_starting(game, scheduler, store):
    game.start()
    for _ in range(5):
        game.tick()
    game.state.points = 900
    game.state.current_speed = 4
    store.best_score = 800

    game.reset()
    s = game.state
    assert s.game_state is GameState.LOADING
    assert s.current is None
    assert s.locked
    assert s.points == 0
    assert s.current_speed == 1
    assert s.best_score == 800
    assert not s.board.grid.any()
    assert scheduler.interval is None

    game.tick()
    assert not game.state.board.grid.any()
    game.start()
    assert game.is_playing


def test_title_screen_only_before_first_piece(game):
    assert game.is_showing_logo
    game.start()
    assert not game.is_showing_logo
    game.pause()
    assert not game.is_showing_logo
    game.reset()
    assert game.is_showing_logo


# ── Movement ─────────────────────────────────────────────────────────────

def test_move_left_and_right(game):
    start_with(game, Piece(O_PIECE, row=5, col=4))
    game.move_left()
    assert game.state.current.col == 3
    game.move_right()
    game.move_right()
    assert game.state.current.col == 5
    assert drawn(game)
    assert int(game.state.board.grid.sum()) == 4


def test_move_blocked_by_walls(game):
    start_with(game, Piece(O_PIECE, row=5, col=0))
    game.move_left()
    assert game.state.current == Piece(O_PIECE, row=5, col=0)
    assert drawn(game)

    game.state.board.reset()
    game.state.current = Piece(O_PIECE, row=5, col=8)
    game.move_right()
    assert game.state.current == Piece(O_PIECE, row=5, col=8)
    assert drawn(game)


def test_move_blocked_by_stack(game):
    start_with(game, Piece(O_PIECE, row=5, col=3))
    game.state.board.set(5 * WIDTH + 2, Tile.FILLED)
    game.move_left()
    assert game.state.current.col == 3
    assert game.state.board.get(5 * WIDTH + 2) is Tile.FILLED


def test_commands_notify_once_each(game, changes):
    game.start()
    changes.clear()
    game.move_left()
    game.move_right()
    game.rotate()
    game.tick()
    game.soft_drop()
    assert len(changes) == 5
    assert changes[-1].current == game.state.current


def test_soft_drop_moves_down_like_a_tick(game):
    start_with(game, Piece(T_PIECE, row=3, col=3))
    game.soft_drop()
    assert game.state.current.row == 4


def test_commands_under_lock_change_nothing(game, changes):
    start_with(game, Piece(T_PIECE, row=3, col=3))
    game.tick()
    game.state.locked = True
    changes.clear()
    before = state_key(game)
    for command in (game.move_left, game.move_right, game.rotate, game.soft_drop, game.tick):
        command()
    assert state_key(game) == before
    assert changes == []


# ── Rotation ─────────────────────────────────────────────────────────────

def test_rotate_in_open_space(game):
    start_with(game, Piece(T_PIECE, row=5, col=3))
    game.rotate()
    assert game.state.current == Piece(T_PIECE, rotation=1, row=5, col=3)
    assert drawn(game)
    assert int(game.state.board.grid.sum()) == 4


def test_rotate_off_right_wall_shifts_left(game):
    start_with(game, Piece(I_PIECE, rotation=1, row=5, col=7))
    game.rotate()
    piece = game.state.current
    assert piece.rotation == 0
    assert piece.cells() == {(5, 6), (5, 7), (5, 8), (5, 9)}
    assert drawn(game)


def test_rotate_reverts_when_correction_hits_stack(game):
    original = Piece(I_PIECE, rotation=1, row=5, col=7)
    start_with(game, original)
    game.state.board.set(5 * WIDTH + 6, Tile.FILLED)
    game.rotate()
    assert game.state.current == original
    assert drawn(game)
    assert game.state.board.get(5 * WIDTH + 6) is Tile.FILLED
    assert int(game.state.board.grid.sum()) == 5


def test_rotate_reverts_across_left_wall(game):
    original = Piece(I_PIECE, rotation=1, row=5, col=-2)
    start_with(game, original)
    game.rotate()
    assert game.state.current == original
    assert drawn(game)


def test_rotate_reverts_off_the_floor(game):
    original = Piece(I_PIECE, rotation=0, row=18, col=3)
    start_with(game, original)
    game.rotate()
    assert game.state.current == original


def test_o_piece_rotation_is_identity(game):
    start_with(game, Piece(O_PIECE, row=5, col=4))
    game.rotate()
    assert game.state.current == Piece(O_PIECE, row=5, col=4)


@pytest.mark.parametrize("kind", PIECE_TYPES, ids=lambda k: k.name)
def test_spawned_piece_rotates_before_first_tick(game, kind):
    spawned = Piece.spawn(kind, WIDTH)
    start_with(game, spawned)
    game.rotate()
    piece = game.state.current
    assert piece.rotation == (1 if len(kind.layouts) > 1 else 0)
    assert (piece.row, piece.col) == (spawned.row, spawned.col)
    assert piece.top_row >= 0
    assert drawn(game)


def test_i_piece_rotates_right_after_spawn(game):
    start_with(game, Piece.spawn(I_PIECE, WIDTH))
    game.rotate()
    piece = game.state.current
    assert piece.rotation == 1
    assert piece.cells() == {(0, 5), (1, 5), (2, 5), (3, 5)}
    assert drawn(game)


# ── Lock / line clear / speed ────────────────────────────────────────────

def test_vertical_i_fills_gap_and_clears_one_line(game):
    start_with(game, Piece(I_PIECE, rotation=1, row=0, col=7))
    fill_row(game.state.board, HEIGHT - 1, except_cols=(9,))

    for _ in range(16):
        game.tick()
    assert game.state.current.bottom_row == HEIGHT - 1
    assert game.state.board.is_row_full(HEIGHT - 1)
    assert game.state.points == 0

    upcoming = game.state.next
    game.tick()
    s = game.state
    assert s.points == points_for(1)
    assert s.cleared_lines == 1
    assert s.board.row(HEIGHT - 1) == [Tile.EMPTY] * 9 + [Tile.FILLED]
    for row in (HEIGHT - 3, HEIGHT - 2, HEIGHT - 1):
        assert s.board.get(row * WIDTH + 9) is Tile.FILLED
    assert int(s.board.grid.sum()) == 3
    assert s.current == upcoming
    assert s.game_state is GameState.STARTED
    assert not s.locked


def test_four_lines_score_a_single_bonus(game):
    start_with(game, Piece(I_PIECE, rotation=1, row=0, col=7))
    for row in range(HEIGHT - 4, HEIGHT):
        fill_row(game.state.board, row, except_cols=(9,))

    for _ in range(17):
        game.tick()
    s = game.state
    assert s.cleared_lines == 4
    assert s.points == points_for(4)
    assert s.points != 4 * points_for(1)
    assert not s.board.grid.any()


def test_speed_increases_after_board_height_lines(game, scheduler):
    start_with(game, Piece(I_PIECE, rotation=1, row=0, col=7))
    game.state.cleared_lines = HEIGHT - 1
    fill_row(game.state.board, HEIGHT - 1, except_cols=(9,))

    assert scheduler.advance(16 * 700) == 16
    assert game.state.current_speed == 1
    scheduler.advance(700)
    assert game.state.cleared_lines == HEIGHT
    assert game.state.current_speed == 2
    assert scheduler.interval == tick_interval_for(2) < tick_interval_for(1)
    assert scheduler.history == [700, 600]

    assert scheduler.advance(599) == 0
    assert scheduler.advance(1) == 1


def test_speed_is_capped(store):
    config = GameConfig(init_speed=6, seed=3)
    intervals = []
    game = TetrisGame(config, best_score_store=store, on_interval_change=intervals.append)
    start_with(game, Piece(I_PIECE, rotation=1, row=0, col=7))
    game.state.cleared_lines = 100
    fill_row(game.state.board, HEIGHT - 1, except_cols=(9,))
    for _ in range(17):
        game.tick()
    assert game.state.cleared_lines == 101
    assert game.state.current_speed == 6
    assert intervals == [160]


def test_custom_points_table(store):
    config = GameConfig(points_table=[10, 20, 30, 40], seed=3)
    game = TetrisGame(config, best_score_store=store)
    start_with(game, Piece(I_PIECE, rotation=1, row=0, col=7))
    fill_row(game.state.board, HEIGHT - 1, except_cols=(9,))
    for _ in range(17):
        game.tick()
    assert game.state.points == 10


# ── Game over ────────────────────────────────────────────────────────────

def test_game_over_when_spawned_piece_cannot_fall(game, scheduler, changes):
    start_with(game, Piece(O_PIECE, row=0, col=0))
    for row in range(2, HEIGHT):
        fill_row(game.state.board, row, except_cols=(0,))
    game.state.next = Piece.spawn(O_PIECE, WIDTH)

    game.tick()
    s = game.state
    assert s.game_state is GameState.OVER
    assert s.locked
    assert scheduler.interval is None
    assert s.current == Piece.spawn(O_PIECE, WIDTH)
    # The locked piece stays visible, the spawned one is never drawn
    for pos in (0, 1, WIDTH, WIDTH + 1):
        assert s.board.get(pos) is Tile.FILLED
    for pos in s.current.positions(WIDTH):
        assert s.board.get(pos) is Tile.EMPTY
    assert changes[-1].game_state is GameState.OVER


def test_game_over_when_spawn_overlaps_stack(game, scheduler):
    start_with(game, Piece(O_PIECE, row=HEIGHT - 2, col=0))
    game.state.board.set(5, Tile.FILLED)
    game.state.next = Piece.spawn(O_PIECE, WIDTH)

    game.tick()
    assert game.is_over
    assert scheduler.interval is None
    assert game.state.board.get(4) is Tile.EMPTY
    assert game.state.board.get(5) is Tile.FILLED


def test_over_is_terminal_until_reset(game, changes):
    start_with(game, Piece(O_PIECE, row=HEIGHT - 2, col=0))
    game.state.board.set(5, Tile.FILLED)
    game.state.next = Piece.spawn(O_PIECE, WIDTH)
    game.tick()
    assert game.is_over

    changes.clear()
    before = state_key(game)
    for command in (
        game.start, game.pause, game.resume, game.tick, game.soft_drop,
        game.move_left, game.move_right, game.rotate,
    ):
        command()
    assert state_key(game) == before
    assert changes == []

    game.reset()
    assert game.state.game_state is GameState.LOADING
    game.start()
    assert game.is_playing


# ── Sound / best score / queries ─────────────────────────────────────────

def test_toggle_sound_has_no_gameplay_effect(game, changes):
    assert game.state.sound
    game.toggle_sound()
    assert not game.state.sound
    game.set_sound_enabled(True)
    assert game.state.sound
    assert len(changes) == 2
    assert game.state.game_state is GameState.LOADING


def test_sound_flag_comes_from_config(store):
    game = TetrisGame(GameConfig(sound=False), best_score_store=store)
    assert not game.state.sound


def test_record_best_score_only_when_beaten(game, store):
    game.state.points = 400
    assert not game.record_best_score()
    assert store.best_score == 500

    game.state.points = 1200
    assert game.record_best_score()
    assert store.best_score == 1200
    assert game.state.best_score == 1200
    assert not game.record_best_score()


def test_best_score_without_store():
    game = TetrisGame(GameConfig(seed=0))
    assert game.state.best_score == 0
    game.state.points = 10
    assert game.record_best_score()
    assert game.state.best_score == 10


def test_snapshot_is_read_only(game):
    game.start()
    game.tick()
    snap = game.snapshot()
    assert snap.current == game.state.current
    assert snap.tick_interval == 700
    with pytest.raises(ValueError):
        snap.board[0, 0] = Tile.FILLED
    np.testing.assert_array_equal(snap.board, game.state.board.grid)


def test_step_dispatches_actions(game):
    game.step(Action.START)
    assert game.is_playing
    game.step(Action.SOUND)
    assert not game.state.sound
    game.step(Action.PAUSE)
    assert game.is_paused
    game.step(Action.RESET)
    assert game.state.game_state is GameState.LOADING


def test_start_lines_prefill_bottom_rows(store):
    game = TetrisGame(GameConfig(start_lines=5, seed=8), best_score_store=store)
    grid = game.state.board.grid
    assert not grid[: HEIGHT - 5].any()
    assert all(grid[row].any() for row in range(HEIGHT - 5, HEIGHT))
    assert not any(game.state.board.is_row_full(r) for r in range(HEIGHT))


# ── Invariants under random play ─────────────────────────────────────────

def test_invariants_hold_during_random_play(store):
    rng = random.Random(2024)
    game = TetrisGame(GameConfig(seed=77), best_score_store=store)
    game.start()
    commands = [
        game.move_left, game.move_right, game.rotate,
        game.soft_drop, game.tick, game.tick, game.tick,
    ]
    last_speed = game.state.current_speed
    last_points = 0
    games_over = 0

    for _ in range(10000):
        rng.choice(commands)()
        s = game.state
        if s.game_state is GameState.OVER:
            games_over += 1
            game.reset()
            game.start()
            last_speed = game.state.current_speed
            last_points = 0
            continue

        assert len(s.board) == WIDTH * HEIGHT
        for row, col in s.current.cells():
            assert 0 <= row < HEIGHT and 0 <= col < WIDTH
        # The falling piece is either fully drawn or sits on empty cells
        tiles = {s.board.get(p) for p in s.current.positions(WIDTH)}
        assert len(tiles) == 1
        assert s.current_speed >= last_speed
        assert s.points >= last_points
        assert not s.locked
        last_speed = s.current_speed
        last_points = s.points

    assert games_over > 0
