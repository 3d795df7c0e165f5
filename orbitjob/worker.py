"""Worker daemon: polls for dispatched tasks and reports liveness heartbeats."""

from __future__ import annotations

import logging
import os
import socket
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Protocol

from orbitjob.runtime import WallClockTicker, load_json_map_env, load_positive_int_env

logger = logging.getLogger(__name__)

SHUTDOWN_DEADLINE = timedelta(seconds=30)


class WorkerStatus(str, Enum):
    """Lifecycle state a worker reports in its heartbeats."""

    ONLINE = "online"
    DRAINING = "draining"
    OFFLINE = "offline"


@dataclass(frozen=True)
class Heartbeat:
    """One liveness report sent by a worker."""

    tenant_id: str
    worker_id: str
    status: WorkerStatus
    last_heartbeat_at: datetime
    lease_expires_at: datetime
    capacity: int
    labels: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WorkerConfig:
    """Runtime settings of the worker daemon."""

    worker_id: str
    tenant_id: str = "default"
    poll_interval: timedelta = timedelta(seconds=2)
    heartbeat_interval: timedelta = timedelta(seconds=10)
    lease_duration: timedelta = timedelta(seconds=60)
    capacity: int = 1
    labels: dict[str, Any] = field(default_factory=dict)


class _TickRunner(Protocol):
    def run_once(
        self, tenant_id: str, worker_id: str, limit: int, lease_duration: timedelta
    ) -> int: ...


class _Heartbeater(Protocol):
    def upsert_heartbeat(self, heartbeat: Heartbeat) -> object: ...


class _Ticker(Protocol):
    def wait(self, stop: threading.Event) -> bool: ...

    def stop(self) -> None: ...


def _generated_worker_id() -> str:
    return f"{socket.gethostname()}-{str(uuid.uuid4())[:8]}"


def load_worker_config() -> WorkerConfig:
    """Read the worker settings from the environment."""
    worker_id = os.environ.get("WORKER_ID", "").strip() or _generated_worker_id()
    tenant_id = os.environ.get("WORKER_TENANT_ID", "") or "default"
    poll = load_positive_int_env("WORKER_POLL_INTERVAL_SEC", 2)
    heartbeat = load_positive_int_env("WORKER_HEARTBEAT_INTERVAL_SEC", 10)
    lease = load_positive_int_env("WORKER_LEASE_DURATION_SEC", 60)
    capacity = load_positive_int_env("WORKER_CAPACITY", 1)
    labels = load_json_map_env("WORKER_LABELS")
    return WorkerConfig(
        worker_id=worker_id,
        tenant_id=tenant_id,
        poll_interval=timedelta(seconds=poll),
        heartbeat_interval=timedelta(seconds=heartbeat),
        lease_duration=timedelta(seconds=lease),
        capacity=capacity,
        labels=labels,
    )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def send_heartbeat(
    heartbeater: _Heartbeater,
    config: WorkerConfig,
    now: Callable[[], datetime],
    status: WorkerStatus | str,
) -> Heartbeat | None:
    """Send one heartbeat; failures are logged. Returns what was sent, or None."""
    try:
        worker_status = WorkerStatus(status)
    except ValueError as exc:
        logger.error("normalize heartbeat failed: %s", exc)
        return None

    current = now()
    heartbeat = Heartbeat(
        tenant_id=config.tenant_id,
        worker_id=config.worker_id,
        status=worker_status,
        last_heartbeat_at=current,
        lease_expires_at=current + config.lease_duration,
        capacity=config.capacity,
        labels=dict(config.labels),
    )
    try:
        heartbeater.upsert_heartbeat(heartbeat)
    except Exception as exc:
        logger.error("heartbeat failed: %s", exc)
        return None
    return heartbeat


def heartbeat_loop(
    stop: threading.Event,
    loop_done: threading.Event,
    heartbeater: _Heartbeater,
    config: WorkerConfig,
    new_ticker: Callable[[float], _Ticker] = WallClockTicker,
    now: Callable[[], datetime] = _utc_now,
) -> None:
    """Report online on every tick; on stop, report draining, await the poll loop, then offline."""
    send_heartbeat(heartbeater, config, now, WorkerStatus.ONLINE)

    ticker = new_ticker(config.heartbeat_interval.total_seconds())
    try:
        while ticker.wait(stop):
            send_heartbeat(heartbeater, config, now, WorkerStatus.ONLINE)
    finally:
        ticker.stop()

    send_heartbeat(heartbeater, config, now, WorkerStatus.DRAINING)
    if not loop_done.wait(SHUTDOWN_DEADLINE.total_seconds()):
        logger.warning("shutdown deadline exceeded, forcing offline")
    send_heartbeat(heartbeater, config, now, WorkerStatus.OFFLINE)


def run_loop(
    runner: _TickRunner,
    heartbeater: _Heartbeater,
    config: WorkerConfig,
    stop: threading.Event,
    new_ticker: Callable[[float], _Ticker] = WallClockTicker,
    now: Callable[[], datetime] = _utc_now,
) -> None:
    """Poll for work until ``stop`` is set, heartbeating alongside.

    While tasks keep arriving the loop polls again at once; when idle it
    waits for the next poll tick. Returns after the final offline heartbeat.
    """
    loop_done = threading.Event()
    heartbeats = threading.Thread(
        target=heartbeat_loop,
        args=(stop, loop_done, heartbeater, config, new_ticker, now),
        name="worker-heartbeat",
        daemon=True,
    )
    heartbeats.start()

    ticker = new_ticker(config.poll_interval.total_seconds())
    try:
        while True:
            try:
                handled = runner.run_once(
                    config.tenant_id,
                    config.worker_id,
                    config.capacity,
                    config.lease_duration,
                )
            except Exception as exc:
                logger.error("worker tick failed: %s", exc)
            else:
                if handled > 0:
                    logger.info("worker executed task: handled=%d", handled)
                    if stop.is_set():
                        break
                    continue

            if not ticker.wait(stop):
                break
    finally:
        ticker.stop()
        loop_done.set()
        logger.info("worker drain complete, shutting down")
        heartbeats.join()