"""
Best-score stores.

The engine only reads the stored best when a game state is created; the
host decides when to write back.
"""

from __future__ import annotations

import pathlib

import yaml


class BestScoreStore:
    """Best score kept in a small YAML file: ``best_score: <int>``."""

    KEY = "best_score"

    def __init__(self, path: str | pathlib.Path) -> None:
        self.path = pathlib.Path(path).expanduser()

    def load(self) -> int:
        """Return the stored best score, or 0 when nothing was saved yet.

        Raises:
            ValueError: If the file exists but does not hold a valid score.
        """
        if not self.path.exists():
            return 0
        with open(self.path, "r") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Unreadable best score file {self.path}: {e}") from e
        if data is None:
            return 0
        if not isinstance(data, dict) or not isinstance(data.get(self.KEY), int):
            raise ValueError(f"Best score file {self.path} has no integer '{self.KEY}'")
        return max(0, data[self.KEY])

    def save(self, points: int) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            yaml.safe_dump({self.KEY: int(points)}, f)


class InMemoryBestScoreStore:
    """Best score held in memory, for tests and headless hosts."""

    def __init__(self, best_score: int = 0) -> None:
        self.best_score = best_score

    def load(self) -> int:
        return self.best_score

    def save(self, points: int) -> None:
        self.best_score = int(points)
