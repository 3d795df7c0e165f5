"""Environment-driven runtime settings and a wall-clock ticker for the daemons."""

from __future__ import annotations

import json
import os
import re
import threading
import time
from typing import Any

_INTEGER = re.compile(r"[+-]?[0-9]+")


class ConfigError(ValueError):
    """Raised when a runtime setting from the environment is invalid."""


class WallClockTicker:
    """Delivers ticks at a fixed interval until stopped.

    Missed ticks are dropped rather than queued, so a slow consumer
    sees at most one pending tick.
    """

    def __init__(self, interval: float) -> None:
        if interval <= 0:
            raise ValueError("non-positive interval for ticker")
        self.interval = float(interval)
        self._next = time.monotonic() + self.interval
        self._stopped = False

    def wait(self, stop: threading.Event) -> bool:
        """Block until the next tick or until ``stop`` is set.

        Returns True when a tick fired and False when ``stop`` was set.
        A stopped ticker never fires again.
        """
        if self._stopped:
            stop.wait()
            return False
        remaining = self._next - time.monotonic()
        if remaining > 0 and stop.wait(remaining):
            return False
        if stop.is_set():
            return False
        now = time.monotonic()
        while self._next <= now:
            self._next += self.interval
        return True

    def stop(self) -> None:
        """Stop the ticker; no further ticks are delivered."""
        self._stopped = True


def load_positive_int_env(key: str, default: int) -> int:
    """Read a positive integer from the environment, or return ``default`` if unset."""
    raw = os.environ.get(key, "")
    if raw == "":
        return default
    if not _INTEGER.fullmatch(raw):
        raise ConfigError(f"{key} must be an integer: invalid syntax {raw!r}")
    value = int(raw)
    if value < 1:
        raise ConfigError(f"{key} must be >= 1")
    return value


def load_json_map_env(key: str) -> dict[str, Any]:
    """Read a JSON object from the environment, or return an empty dict if unset."""
    raw = os.environ.get(key, "")
    if raw == "":
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{key} must be valid JSON object: {exc}") from exc
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(
            f"{key} must be valid JSON object: got {type(value).__name__}"
        )
    return value