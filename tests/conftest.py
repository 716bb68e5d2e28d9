"""Shared fixtures: a seeded engine wired to a virtual-clock scheduler."""

from __future__ import annotations

import random

import pytest

from tetris_engine.config import GameConfig
from tetris_engine.game.board import Board, Tile
from tetris_engine.game.tetris import TetrisGame
from tetris_engine.scheduler import ManualScheduler
from tetris_engine.storage import InMemoryBestScoreStore

WIDTH = 10
HEIGHT = 20


def fill_row(board: Board, row: int, except_cols: tuple[int, ...] = ()) -> None:
    """Fill ``row`` completely, leaving ``except_cols`` empty."""
    board.set_row(
        row,
        [Tile.EMPTY if c in except_cols else Tile.FILLED for c in range(board.width)],
    )


@pytest.fixture
def config() -> GameConfig:
    return GameConfig(board_width=WIDTH, board_height=HEIGHT, seed=1234)


@pytest.fixture
def store() -> InMemoryBestScoreStore:
    return InMemoryBestScoreStore(500)


@pytest.fixture
def changes() -> list:
    return []


@pytest.fixture
def game(config, store, changes) -> TetrisGame:
    return TetrisGame(
        config,
        rng=random.Random(1234),
        best_score_store=store,
        on_change=changes.append,
    )


@pytest.fixture
def scheduler(game) -> ManualScheduler:
    return ManualScheduler().bind(game)
