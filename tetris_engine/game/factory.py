"""Uniform random piece source."""

from __future__ import annotations

import random
from typing import Sequence

from tetris_engine.game.pieces import PIECE_TYPES, Piece, PieceKind


class PieceFactory:
    """Draws pieces uniformly and independently from a kind catalog.

    There is no bag or repeat protection: every draw is a fresh
    ``rng.choice`` over the catalog, so long droughts and repeats can occur.

    Attributes:
        board_width: Width used to center spawned pieces.
        kinds: The catalog drawn from.
    """

    def __init__(
        self,
        board_width: int = 10,
        rng: random.Random | None = None,
        kinds: Sequence[PieceKind] = PIECE_TYPES,
    ) -> None:
        if not kinds:
            raise ValueError("piece catalog must not be empty")
        self.board_width = board_width
        self.kinds = list(kinds)
        self._rng = rng or random.Random()

    def random_piece(self) -> Piece:
        """Return a new piece at rotation 0, centered at the top of the board."""
        return Piece.spawn(self._rng.choice(self.kinds), self.board_width)
