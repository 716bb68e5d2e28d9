"""
Key repeat policy for hosts (DAS: delayed auto shift).

A held key fires once on press, again after ``delay_ms``, and then every
``rate_ms`` while it stays down. The engine knows nothing about this; the
host turns each firing into a command call.
"""

from __future__ import annotations

from typing import Hashable, Iterable


class KeyRepeat:
    """Tracks held keys and reports when they should fire again.

    Attributes:
        delay_ms: Hold time before repeating starts.
        rate_ms: Time between repeats once repeating.
        keys: Keys that repeat; other keys fire on press only.
    """

    def __init__(self, delay_ms: int, rate_ms: int, keys: Iterable[Hashable]) -> None:
        if delay_ms < 0 or rate_ms <= 0:
            raise ValueError(f"invalid repeat timing: delay={delay_ms} rate={rate_ms}")
        self.delay_ms = delay_ms
        self.rate_ms = rate_ms
        self.keys = frozenset(keys)
        self._held: dict[Hashable, int] = {}
        self._repeating: set[Hashable] = set()

    def press(self, key: Hashable) -> bool:
        """Record a key press. Returns True (a press always fires once)."""
        if key in self.keys:
            self._held[key] = 0
            self._repeating.discard(key)
        return True

    def release(self, key: Hashable) -> None:
        self._held.pop(key, None)
        self._repeating.discard(key)

    def clear(self) -> None:
        self._held.clear()
        self._repeating.clear()

    def is_held(self, key: Hashable) -> bool:
        return key in self._held

    @property
    def held(self) -> frozenset:
        return frozenset(self._held)

    def update(self, dt_ms: int) -> list[Hashable]:
        """Advance time by ``dt_ms`` and return one entry per repeat due.

        A key can appear several times if ``dt_ms`` spans several repeats.
        """
        fires: list[Hashable] = []
        for key in list(self._held):
            t = self._held[key] + dt_ms
            if key not in self._repeating:
                if t < self.delay_ms:
                    self._held[key] = t
                    continue
                fires.append(key)
                self._repeating.add(key)
                t -= self.delay_ms
            while t >= self.rate_ms:
                fires.append(key)
                t -= self.rate_ms
            self._held[key] = t
        return fires
