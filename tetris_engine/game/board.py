"""
Board model for a fixed-size falling-block grid.

The board is a 2D numpy array (height x width) of int8 tile values:
  - 0 = empty cell (Tile.EMPTY)
  - 1 = filled cell (Tile.FILLED)

Row 0 is the top of the board. Cells are addressed either by (row, col)
or by a linear, row-major position: pos = row * width + col.
"""

from __future__ import annotations

import enum
import random
from typing import Iterable, Sequence

import numpy as np


class Tile(enum.IntEnum):
    """A single board cell."""
    EMPTY = 0
    FILLED = 1


class Board:
    """Fixed-size tile grid with row queries and line clearing.

    The board never changes size: mutation replaces whole rows or single
    cells only, so ``len(board) == width * height`` always holds.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        grid: 2D numpy array of shape (height, width), dtype int8.
    """

    def __init__(self, width: int = 10, height: int = 20) -> None:
        """Initialize an empty board.

        Args:
            width: Number of columns.
            height: Number of rows.
        """
        self.width = width
        self.height = height
        self.grid = np.full((self.height, self.width), Tile.EMPTY, dtype=np.int8)

    @classmethod
    def empty_board(cls, width: int = 10, height: int = 20) -> Board:
        """Return a board where every cell is empty."""
        return cls(width, height)

    @classmethod
    def with_start_lines(
        cls,
        width: int,
        height: int,
        lines: int,
        rng: random.Random | None = None,
    ) -> Board:
        """Return a board whose bottom ``lines`` rows hold random tiles.

        Each generated row contains at least one filled and at least one
        empty cell, so no row starts out full.

        Args:
            width: Number of columns.
            height: Number of rows.
            lines: Number of bottom rows to populate.
            rng: Random source (a fresh ``random.Random`` if omitted).

        Returns:
            The populated board.

        Raises:
            ValueError: If ``lines`` is outside ``[0, height - 4]``.
        """
        if not 0 <= lines <= height - 4:
            raise ValueError(f"start_lines must be in [0, {height - 4}], got {lines}")
        rng = rng or random.Random()
        board = cls(width, height)
        for row in range(height - lines, height):
            tiles = [Tile(rng.randint(0, 1)) for _ in range(width)]
            # Force at least one hole and one block per row
            hole = rng.randrange(width)
            tiles[hole] = Tile.EMPTY
            if all(t == Tile.EMPTY for t in tiles):
                tiles[(hole + 1 + rng.randrange(width - 1)) % width] = Tile.FILLED
            board.set_row(row, tiles)
        return board

    def __len__(self) -> int:
        return self.width * self.height

    def _check_pos(self, pos: int) -> tuple[int, int]:
        if not 0 <= pos < self.width * self.height:
            raise IndexError(
                f"board position {pos} outside [0, {self.width * self.height})"
            )
        return divmod(pos, self.width)

    def _check_row(self, index: int) -> int:
        if not 0 <= index < self.height:
            raise IndexError(f"board row {index} outside [0, {self.height})")
        return index

    def get(self, pos: int) -> Tile:
        """Return the tile at a linear position.

        Raises:
            IndexError: If ``pos`` is not a valid board position.
        """
        row, col = self._check_pos(pos)
        return Tile(int(self.grid[row, col]))

    def set(self, pos: int, tile: Tile) -> None:
        """Replace the tile at a linear position.

        Raises:
            IndexError: If ``pos`` is not a valid board position.
        """
        row, col = self._check_pos(pos)
        self.grid[row, col] = tile

    def row(self, index: int) -> list[Tile]:
        """Return the tiles of one row, left to right.

        Raises:
            IndexError: If ``index`` is not a valid row.
        """
        return [Tile(int(v)) for v in self.grid[self._check_row(index)]]

    def set_row(self, index: int, tiles: Sequence[Tile]) -> None:
        """Replace an entire row.

        Raises:
            IndexError: If ``index`` is not a valid row.
            ValueError: If ``tiles`` does not hold exactly ``width`` tiles.
        """
        self._check_row(index)
        if len(tiles) != self.width:
            raise ValueError(f"row needs {self.width} tiles, got {len(tiles)}")
        self.grid[index] = np.asarray([int(t) for t in tiles], dtype=np.int8)

    def is_row_full(self, index: int) -> bool:
        """True iff every cell in the row is filled."""
        return bool(np.all(self.grid[self._check_row(index)] == Tile.FILLED))

    def fill(self, positions: Iterable[int], tile: Tile) -> None:
        """Write ``tile`` at every linear position given."""
        for pos in positions:
            self.set(pos, tile)

    def clear_lines(self) -> int:
        """Remove all full rows and drop the rest down to fill the gap.

        Rows are scanned bottom to top. Non-full rows keep their relative
        order and become the bottom ``height - n`` rows; ``n`` empty rows
        are prepended on top.

        Returns:
            The number of rows cleared.
        """
        full_rows = [r for r in range(self.height - 1, -1, -1) if self.is_row_full(r)]
        if not full_rows:
            return 0

        lines_cleared = len(full_rows)
        mask = np.ones(self.height, dtype=bool)
        mask[full_rows] = False
        remaining = self.grid[mask]
        empty_rows = np.full((lines_cleared, self.width), Tile.EMPTY, dtype=np.int8)
        self.grid = np.vstack([empty_rows, remaining])
        return lines_cleared

    def get_grid(self) -> np.ndarray:
        """Return a copy of the board grid.

        Returns:
            A numpy array of shape (height, width), dtype int8.
        """
        return self.grid.copy()

    def reset(self) -> None:
        """Clear the entire board."""
        self.grid.fill(Tile.EMPTY)
