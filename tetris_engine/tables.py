"""
Scoring and speed lookup tables.

Points for a single lock are awarded once per clear, indexed by how many
rows went at the same time; a four-row clear earns one large bonus rather
than four single-row awards.
"""

from __future__ import annotations

from typing import Sequence

MIN_SPEED = 1
MAX_SPEED = 6

# Points awarded for clearing 1, 2, 3, 4 rows at once.
POINTS_TABLE: tuple[int, ...] = (100, 300, 700, 1500)

# Milliseconds between ticks at speed 1..6.
SPEED_DELAY_TABLE: tuple[int, ...] = (700, 600, 450, 320, 240, 160)


def is_int(value: object) -> bool:
    """True for real integers; ``bool`` is not accepted as one."""
    return isinstance(value, int) and not isinstance(value, bool)


def _int_tuple(name: str, table: Sequence[int]) -> tuple[int, ...]:
    if not isinstance(table, (list, tuple)) or not all(is_int(v) for v in table):
        raise ValueError(f"{name} must be a list of integers, got {table!r}")
    return tuple(table)


def validate_points_table(table: Sequence[int]) -> tuple[int, ...]:
    """Check that ``table`` holds four positive, strictly increasing values.

    Raises:
        ValueError: If the table is malformed.
    """
    table = _int_tuple("points_table", table)
    if len(table) != 4:
        raise ValueError(f"points_table needs 4 entries, got {len(table)}")
    if table[0] <= 0 or any(a >= b for a, b in zip(table, table[1:])):
        raise ValueError(f"points_table must be positive and strictly increasing: {table}")
    return table


def validate_speed_delays(table: Sequence[int]) -> tuple[int, ...]:
    """Check that ``table`` holds six positive, non-increasing delays.

    Raises:
        ValueError: If the table is malformed.
    """
    table = _int_tuple("speed_delays_ms", table)
    if len(table) != MAX_SPEED:
        raise ValueError(f"speed_delays_ms needs {MAX_SPEED} entries, got {len(table)}")
    if table[-1] <= 0 or any(a < b for a, b in zip(table, table[1:])):
        raise ValueError(f"speed_delays_ms must be positive and non-increasing: {table}")
    return table


def points_for(lines_cleared: int, table: Sequence[int] = POINTS_TABLE) -> int:
    """Return the points for clearing ``lines_cleared`` rows in one lock.

    Args:
        lines_cleared: Rows cleared at once (1-4).
        table: Points per clear size.

    Raises:
        ValueError: If ``lines_cleared`` is outside 1..4.
    """
    if not 1 <= lines_cleared <= len(table):
        raise ValueError(f"lines_cleared must be in [1, {len(table)}], got {lines_cleared}")
    return table[lines_cleared - 1]


def tick_interval_for(speed: int, table: Sequence[int] = SPEED_DELAY_TABLE) -> int:
    """Return the tick interval in milliseconds for a speed level.

    Raises:
        ValueError: If ``speed`` is outside 1..6.
    """
    if not MIN_SPEED <= speed <= MAX_SPEED:
        raise ValueError(f"speed must be in [{MIN_SPEED}, {MAX_SPEED}], got {speed}")
    return table[speed - 1]


def speed_for(init_speed: int, cleared_lines: int, board_height: int) -> int:
    """Speed after ``cleared_lines`` total rows: one level per board height."""
    return min(MAX_SPEED, init_speed + cleared_lines // board_height)
