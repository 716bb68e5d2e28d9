"""
Host-side tick timers.

Schedulers use cancel-and-reschedule semantics: scheduling replaces
whatever timer was pending, so two timers never drive ``tick()`` at once.
Bind one to an engine with ``scheduler.bind(game)``, which wires the
engine's ``on_interval_change`` hook to ``schedule()``.
"""

from __future__ import annotations

from typing import Callable

from tetris_engine.game.tetris import TetrisGame


class ManualScheduler:
    """Virtual-clock timer for tests and headless hosts.

    Time only moves when ``advance()`` is called. The interval is re-read
    after every fire, so a reschedule requested from inside a tick applies
    to the very next one.

    Attributes:
        interval: Pending interval in ms, or None when cancelled.
        elapsed: Time since the last fire (or since scheduling).
        fired: Total number of callbacks fired.
    """

    def __init__(self, callback: Callable[[], None] | None = None) -> None:
        self.callback = callback
        self.interval: int | None = None
        self.elapsed = 0
        self.fired = 0
        self.history: list[int | None] = []

    def bind(self, game: TetrisGame) -> ManualScheduler:
        self.callback = game.tick
        game.on_interval_change = self.schedule
        return self

    def schedule(self, interval: int | None) -> None:
        """Replace the pending timer; None cancels."""
        self.history.append(interval)
        self.interval = interval
        self.elapsed = 0

    def cancel(self) -> None:
        self.schedule(None)

    def advance(self, ms: int) -> int:
        """Move the clock forward and fire every tick that falls due.

        Returns:
            Number of ticks fired.
        """
        fired = 0
        remaining = ms
        while self.interval is not None and self.elapsed + remaining >= self.interval:
            remaining -= self.interval - self.elapsed
            self.elapsed = 0
            self.fired += 1
            fired += 1
            # A tick may reschedule or cancel; the loop then follows the new timer
            if self.callback is not None:
                self.callback()
        if self.interval is not None:
            self.elapsed += remaining
        return fired
