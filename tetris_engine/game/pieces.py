"""
Tetromino catalog and the immutable Piece value.

Coordinate convention:
  - Each rotation layout is drawn as a small 2D array where 1 marks a
    filled cell; it is stored as a tuple of (row, col) offsets relative to
    the piece's anchor (top-left corner of the layout box).
  - On the board, row 0 is the top and row increases downward.
  - Column 0 is the left edge and column increases rightward.

Rotation cycles are the classic ones: O has a single layout, I/S/Z have
two, and T/J/L have four. ``rotate()`` steps to the next layout and wraps.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

import numpy as np

Cell = tuple[int, int]

# =============================================================================
# Piece Colors (RGB) — only used by hosts for the next-piece preview
# =============================================================================

COLOR_CYAN   = (0, 255, 255)    # I
COLOR_YELLOW = (255, 255, 0)    # O
COLOR_PURPLE = (128, 0, 128)    # T
COLOR_GREEN  = (0, 255, 0)      # S
COLOR_RED    = (255, 0, 0)      # Z
COLOR_BLUE   = (0, 0, 255)      # J
COLOR_ORANGE = (255, 165, 0)    # L


def _offsets(layout: np.ndarray) -> tuple[Cell, ...]:
    return tuple((int(r), int(c)) for r, c in np.argwhere(layout != 0))


@dataclass(frozen=True)
class PieceKind:
    """One tetromino shape and its fixed rotation cycle.

    Attributes:
        id: Stable numeric identifier (1-7).
        name: Single-letter name.
        color: RGB color for previews.
        layouts: One tuple of (row, col) offsets per rotation state.
    """
    id: int
    name: str
    color: tuple[int, int, int]
    layouts: tuple[tuple[Cell, ...], ...]

    @classmethod
    def from_arrays(
        cls, id: int, name: str, color: tuple[int, int, int], arrays: list[np.ndarray]
    ) -> PieceKind:
        return cls(id, name, color, tuple(_offsets(a) for a in arrays))

    @property
    def box_width(self) -> int:
        """Width of the spawn layout's bounding box."""
        return max(c for _, c in self.layouts[0]) + 1

    @property
    def spawn_row_offset(self) -> int:
        """Anchor row that puts the spawn layout's top cells on row 0."""
        return -min(r for r, _ in self.layouts[0])


# =============================================================================
# Tetromino Definitions
# =============================================================================

I_PIECE = PieceKind.from_arrays(1, "I", COLOR_CYAN, [
    np.array([
        [1, 1, 1, 1],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
    ], dtype=np.int8),
    np.array([
        [0, 0, 1, 0],
        [0, 0, 1, 0],
        [0, 0, 1, 0],
        [0, 0, 1, 0],
    ], dtype=np.int8),
])

O_PIECE = PieceKind.from_arrays(2, "O", COLOR_YELLOW, [
    np.array([
        [1, 1],
        [1, 1],
    ], dtype=np.int8),
])

T_PIECE = PieceKind.from_arrays(3, "T", COLOR_PURPLE, [
    np.array([
        [0, 1, 0],
        [1, 1, 1],
        [0, 0, 0],
    ], dtype=np.int8),
    np.array([
        [0, 1, 0],
        [0, 1, 1],
        [0, 1, 0],
    ], dtype=np.int8),
    np.array([
        [0, 0, 0],
        [1, 1, 1],
        [0, 1, 0],
    ], dtype=np.int8),
    np.array([
        [0, 1, 0],
        [1, 1, 0],
        [0, 1, 0],
    ], dtype=np.int8),
])

S_PIECE = PieceKind.from_arrays(4, "S", COLOR_GREEN, [
    np.array([
        [0, 1, 1],
        [1, 1, 0],
        [0, 0, 0],
    ], dtype=np.int8),
    np.array([
        [0, 1, 0],
        [0, 1, 1],
        [0, 0, 1],
    ], dtype=np.int8),
])

Z_PIECE = PieceKind.from_arrays(5, "Z", COLOR_RED, [
    np.array([
        [1, 1, 0],
        [0, 1, 1],
        [0, 0, 0],
    ], dtype=np.int8),
    np.array([
        [0, 0, 1],
        [0, 1, 1],
        [0, 1, 0],
    ], dtype=np.int8),
])

J_PIECE = PieceKind.from_arrays(6, "J", COLOR_BLUE, [
    np.array([
        [1, 0, 0],
        [1, 1, 1],
        [0, 0, 0],
    ], dtype=np.int8),
    np.array([
        [0, 1, 1],
        [0, 1, 0],
        [0, 1, 0],
    ], dtype=np.int8),
    np.array([
        [0, 0, 0],
        [1, 1, 1],
        [0, 0, 1],
    ], dtype=np.int8),
    np.array([
        [0, 1, 0],
        [0, 1, 0],
        [1, 1, 0],
    ], dtype=np.int8),
])

L_PIECE = PieceKind.from_arrays(7, "L", COLOR_ORANGE, [
    np.array([
        [0, 0, 1],
        [1, 1, 1],
        [0, 0, 0],
    ], dtype=np.int8),
    np.array([
        [0, 1, 0],
        [0, 1, 0],
        [0, 1, 1],
    ], dtype=np.int8),
    np.array([
        [0, 0, 0],
        [1, 1, 1],
        [1, 0, 0],
    ], dtype=np.int8),
    np.array([
        [1, 1, 0],
        [0, 1, 0],
        [0, 1, 0],
    ], dtype=np.int8),
])

PIECE_TYPES: list[PieceKind] = [I_PIECE, O_PIECE, T_PIECE, S_PIECE, Z_PIECE, J_PIECE, L_PIECE]


# =============================================================================
# Piece value
# =============================================================================

@dataclass(frozen=True)
class Piece:
    """A placed instance of a PieceKind.

    Pieces are immutable: every transform returns a new value. ``saved``
    holds a single (rotation, row, col) snapshot taken by ``store()`` and
    restored by ``revert()``; it is one level of undo, not a history.

    Attributes:
        kind: The tetromino shape.
        rotation: Index into ``kind.layouts``.
        row: Anchor row (top of the layout box, may be negative).
        col: Anchor column (left of the layout box, may be negative).
        saved: Snapshot from the last ``store()``, or None.
    """
    kind: PieceKind
    rotation: int = 0
    row: int = 0
    col: int = 0
    saved: tuple[int, int, int] | None = None

    # ── Derived queries ──────────────────────────────────────────────────

    def cells(self) -> frozenset[Cell]:
        """Absolute (row, col) cells occupied by the piece."""
        return frozenset(
            (self.row + r, self.col + c) for r, c in self.kind.layouts[self.rotation]
        )

    def positions(self, width: int) -> frozenset[int]:
        """Absolute linear board positions for a board ``width`` columns wide."""
        return frozenset(r * width + c for r, c in self.cells())

    @property
    def top_row(self) -> int:
        return min(r for r, _ in self.cells())

    @property
    def bottom_row(self) -> int:
        return max(r for r, _ in self.cells())

    @property
    def left_col(self) -> int:
        return min(c for _, c in self.cells())

    @property
    def right_col(self) -> int:
        return max(c for _, c in self.cells())

    # ── Transforms (no collision checks) ─────────────────────────────────

    def move_left(self) -> Piece:
        return dataclasses.replace(self, col=self.col - 1)

    def move_right(self) -> Piece:
        return dataclasses.replace(self, col=self.col + 1)

    def move_down(self) -> Piece:
        return dataclasses.replace(self, row=self.row + 1)

    def rotate(self) -> Piece:
        """Advance to the next layout in the kind's rotation cycle."""
        return dataclasses.replace(
            self, rotation=(self.rotation + 1) % len(self.kind.layouts)
        )

    # ── Single-slot snapshot ─────────────────────────────────────────────

    def store(self) -> Piece:
        """Return this piece with its current placement saved."""
        return dataclasses.replace(self, saved=(self.rotation, self.row, self.col))

    def revert(self) -> Piece:
        """Return this piece restored to the placement saved by ``store()``.

        Without a saved snapshot the piece is returned unchanged.
        """
        if self.saved is None:
            return self
        rotation, row, col = self.saved
        return dataclasses.replace(self, rotation=rotation, row=row, col=col)

    def clear_store(self) -> Piece:
        return dataclasses.replace(self, saved=None)

    @classmethod
    def spawn(cls, kind: PieceKind, board_width: int) -> Piece:
        """Create ``kind`` at rotation 0, centered with its top cells on row 0."""
        return cls(
            kind=kind,
            rotation=0,
            row=kind.spawn_row_offset,
            col=(board_width - kind.box_width) // 2,
        )
