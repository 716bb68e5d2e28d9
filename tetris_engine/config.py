"""
Configuration loading.

Settings live in a YAML file (``config/game.yaml`` by default) and are
turned into a ``GameConfig``. Every key is optional; missing keys take the
defaults below and unknown keys are ignored.
"""

from __future__ import annotations

import dataclasses
import pathlib
from dataclasses import dataclass, field
from typing import Any

import yaml

from tetris_engine.tables import (
    MAX_SPEED,
    MIN_SPEED,
    POINTS_TABLE,
    SPEED_DELAY_TABLE,
    is_int,
    validate_points_table,
    validate_speed_delays,
)

DEFAULT_CONFIG_PATH = pathlib.Path("config/game.yaml")
DEFAULT_BEST_SCORE_FILE = "~/.tetris_engine/best_score.yaml"

INT_FIELDS = (
    "board_width",
    "board_height",
    "init_speed",
    "start_lines",
    "max_points",
    "cell_size",
    "fps",
    "das_delay_ms",
    "das_rate_ms",
)


def load_config(config_path: str | pathlib.Path) -> dict:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML config file.

    Returns:
        Dict of configuration key-value pairs (empty for an empty file).

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If the file does not contain a mapping.
    """
    config_path = pathlib.Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with open(config_path, "r") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")
    return data


@dataclass
class GameConfig:
    """Engine and host settings.

    Attributes:
        board_width: Number of columns.
        board_height: Number of rows.
        init_speed: Speed level a new game starts at (1-6).
        start_lines: Bottom rows pre-filled with random tiles on a new board.
        sound: Initial sound flag.
        points_table: Points for clearing 1, 2, 3, 4 rows at once.
        speed_delays_ms: Tick interval for speed 1..6.
        max_points: Highest score a host displays.
        seed: Seed for the piece factory and start lines (None = random).
        best_score_file: Where the host keeps the best score.
        cell_size: Pixel size of a board cell.
        fps: Host frame rate.
        das_delay_ms: Hold time before a key starts repeating.
        das_rate_ms: Time between repeats once a key repeats.
    """
    board_width: int = 10
    board_height: int = 20
    init_speed: int = 1
    start_lines: int = 0
    sound: bool = True
    points_table: tuple[int, ...] = field(default=POINTS_TABLE)
    speed_delays_ms: tuple[int, ...] = field(default=SPEED_DELAY_TABLE)
    max_points: int = 999999
    seed: int | None = None
    best_score_file: str = DEFAULT_BEST_SCORE_FILE
    cell_size: int = 30
    fps: int = 60
    das_delay_ms: int = 170
    das_rate_ms: int = 50

    def __post_init__(self) -> None:
        self.validate()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameConfig:
        """Build a config from a loaded YAML dict.

        Raises:
            ValueError: If a value has the wrong type or is out of range.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_file(cls, config_path: str | pathlib.Path) -> GameConfig:
        return cls.from_dict(load_config(config_path))

    def replace(self, **changes: Any) -> GameConfig:
        """Return a copy with ``changes`` applied; None values are skipped."""
        changes = {k: v for k, v in changes.items() if v is not None}
        return dataclasses.replace(self, **changes)

    def validate(self) -> None:
        """Check types and ranges; tables are normalized to tuples.

        Raises:
            ValueError: If a value has the wrong type or is out of range.
        """
        for name in INT_FIELDS:
            value = getattr(self, name)
            if not is_int(value):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        if self.seed is not None and not is_int(self.seed):
            raise ValueError(f"seed must be an integer or null, got {self.seed!r}")
        if not isinstance(self.sound, bool):
            raise ValueError(f"sound must be true or false, got {self.sound!r}")
        if not isinstance(self.best_score_file, str):
            raise ValueError(f"best_score_file must be a path, got {self.best_score_file!r}")
        if self.board_width < 4 or self.board_height < 4:
            raise ValueError(
                f"board must be at least 4x4, got {self.board_width}x{self.board_height}"
            )
        if not MIN_SPEED <= self.init_speed <= MAX_SPEED:
            raise ValueError(
                f"init_speed must be in [{MIN_SPEED}, {MAX_SPEED}], got {self.init_speed}"
            )
        if not 0 <= self.start_lines <= self.board_height - 4:
            raise ValueError(
                f"start_lines must be in [0, {self.board_height - 4}], got {self.start_lines}"
            )
        if self.max_points <= 0:
            raise ValueError(f"max_points must be positive, got {self.max_points}")
        self.points_table = validate_points_table(self.points_table)
        self.speed_delays_ms = validate_speed_delays(self.speed_delays_ms)

    @property
    def best_score_path(self) -> pathlib.Path:
        return pathlib.Path(self.best_score_file).expanduser()
