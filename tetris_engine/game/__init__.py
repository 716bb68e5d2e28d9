"""Game logic: board, pieces, factory, and the engine."""

from tetris_engine.game.board import Board, Tile
from tetris_engine.game.factory import PieceFactory
from tetris_engine.game.pieces import PIECE_TYPES, Piece, PieceKind
from tetris_engine.game.tetris import (
    Action,
    EngineSnapshot,
    EngineState,
    GameState,
    TetrisGame,
)
from tetris_engine.tables import points_for, tick_interval_for

__all__ = [
    "Board",
    "Tile",
    "PieceFactory",
    "PIECE_TYPES",
    "Piece",
    "PieceKind",
    "points_for",
    "tick_interval_for",
    "Action",
    "EngineSnapshot",
    "EngineState",
    "GameState",
    "TetrisGame",
]
