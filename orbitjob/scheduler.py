"""Scheduler daemon loop: periodically turns due cron jobs into instances."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Protocol

from orbitjob.runtime import WallClockTicker, load_positive_int_env

logger = logging.getLogger(__name__)


class _TickRunner(Protocol):
    def run_batch(self, now: datetime, limit: int) -> int: ...


class _Ticker(Protocol):
    def wait(self, stop: threading.Event) -> bool: ...

    def stop(self) -> None: ...


@dataclass(frozen=True)
class SchedulerConfig:
    """Runtime settings of the scheduler daemon."""

    batch_size: int = 100
    tick_interval: timedelta = timedelta(seconds=5)
    health_port: str = "6060"


def load_scheduler_config() -> SchedulerConfig:
    """Read the scheduler settings from the environment."""
    batch_size = load_positive_int_env("SCHEDULER_BATCH_SIZE", 100)
    tick_seconds = load_positive_int_env("SCHEDULER_TICK_INTERVAL_SEC", 5)
    health_port = os.environ.get("SCHEDULER_HEALTH_PORT", "") or "6060"
    return SchedulerConfig(
        batch_size=batch_size,
        tick_interval=timedelta(seconds=tick_seconds),
        health_port=health_port,
    )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def run_loop(
    runner: _TickRunner,
    config: SchedulerConfig,
    stop: threading.Event,
    new_ticker: Callable[[float], _Ticker] = WallClockTicker,
    now: Callable[[], datetime] = _utc_now,
) -> None:
    """Run a batch per tick until ``stop`` is set, then run one final drain batch."""
    ticker = new_ticker(config.tick_interval.total_seconds())
    try:
        while True:
            current = now().astimezone(timezone.utc)
            try:
                handled = runner.run_batch(current, config.batch_size)
            except Exception as exc:
                logger.error("scheduler tick failed: %s", exc)
            else:
                logger.info("scheduler tick completed: handled_due_jobs=%d", handled)

            if not ticker.wait(stop):
                break

        logger.info("scheduler draining, running final tick")
        current = now().astimezone(timezone.utc)
        try:
            handled = runner.run_batch(current, config.batch_size)
        except Exception as exc:
            logger.error("scheduler drain tick failed: %s", exc)
        else:
            logger.info("scheduler drain tick completed: handled_due_jobs=%d", handled)
    finally:
        ticker.stop()