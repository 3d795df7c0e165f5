"""Dispatcher daemon loop: periodically claims pending instances under a lease."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Protocol

from orbitjob.runtime import WallClockTicker, load_positive_int_env

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClaimSpec:
    """What a dispatch batch claims: a tenant's instances, leased until a deadline."""

    tenant_id: str
    lease_expires_at: datetime
    now: datetime


class _TickRunner(Protocol):
    def run_batch(self, spec: ClaimSpec, limit: int) -> int: ...


class _Ticker(Protocol):
    def wait(self, stop: threading.Event) -> bool: ...

    def stop(self) -> None: ...


@dataclass(frozen=True)
class DispatcherConfig:
    """Runtime settings of the dispatcher daemon."""

    tenant_id: str = "default"
    batch_size: int = 50
    tick_interval: timedelta = timedelta(seconds=2)
    lease_duration: timedelta = timedelta(seconds=30)
    health_port: str = "6061"


def load_dispatcher_config() -> DispatcherConfig:
    """Read the dispatcher settings from the environment."""
    tenant_id = os.environ.get("DISPATCHER_TENANT_ID", "") or "default"
    batch_size = load_positive_int_env("DISPATCHER_BATCH_SIZE", 50)
    tick_seconds = load_positive_int_env("DISPATCHER_TICK_INTERVAL_SEC", 2)
    lease_seconds = load_positive_int_env("DISPATCHER_LEASE_DURATION_SEC", 30)
    health_port = os.environ.get("DISPATCHER_HEALTH_PORT", "") or "6061"
    return DispatcherConfig(
        tenant_id=tenant_id,
        batch_size=batch_size,
        tick_interval=timedelta(seconds=tick_seconds),
        lease_duration=timedelta(seconds=lease_seconds),
        health_port=health_port,
    )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _claim_spec(config: DispatcherConfig, now: Callable[[], datetime]) -> ClaimSpec:
    current = now().astimezone(timezone.utc)
    return ClaimSpec(
        tenant_id=config.tenant_id,
        lease_expires_at=current + config.lease_duration,
        now=current,
    )


def run_loop(
    runner: _TickRunner,
    config: DispatcherConfig,
    stop: threading.Event,
    new_ticker: Callable[[float], _Ticker] = WallClockTicker,
    now: Callable[[], datetime] = _utc_now,
) -> None:
    """Dispatch a batch per tick until ``stop`` is set, then run one final drain batch."""
    ticker = new_ticker(config.tick_interval.total_seconds())
    try:
        while True:
            try:
                handled = runner.run_batch(_claim_spec(config, now), config.batch_size)
            except Exception as exc:
                logger.error("dispatcher tick failed: %s", exc)
            else:
                logger.info("dispatcher tick completed: dispatched=%d", handled)

            if not ticker.wait(stop):
                break

        logger.info("dispatcher draining, running final tick")
        try:
            handled = runner.run_batch(_claim_spec(config, now), config.batch_size)
        except Exception as exc:
            logger.error("dispatcher drain tick failed: %s", exc)
        else:
            logger.info("dispatcher drain tick completed: dispatched=%d", handled)
    finally:
        ticker.stop()