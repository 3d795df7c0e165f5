import threading
from datetime import datetime, timedelta, timezone

import pytest

from orbitjob.dispatcher import (
    ClaimSpec,
    DispatcherConfig,
    load_dispatcher_config,
    run_loop,
)
from orbitjob.runtime import ConfigError

KEYS = (
    "DISPATCHER_TENANT_ID",
    "DISPATCHER_BATCH_SIZE",
    "DISPATCHER_TICK_INTERVAL_SEC",
    "DISPATCHER_LEASE_DURATION_SEC",
)


class StubRunner:
    def __init__(self, handled=0, error=None, on_call=None):
        self.handled = handled
        self.error = error
        self.on_call = on_call
        self.calls = []

    def run_batch(self, spec, limit):
        self.calls.append((spec, limit))
        if self.on_call is not None:
            self.on_call(len(self.calls))
        if self.error is not None:
            raise self.error
        return self.handled


class FakeTicker:
    def __init__(self, ticks=0):
        self.ticks = ticks
        self.stopped = False
        self.intervals = []

    def __call__(self, interval):
        self.intervals.append(interval)
        return self

    def wait(self, stop):
        if stop.is_set():
            return False
        if self.ticks:
            self.ticks -= 1
            return True
        raise AssertionError("run loop would block")

    def stop(self):
        self.stopped = True


def _config(batch_size):
    return DispatcherConfig(
        tenant_id="t1",
        batch_size=batch_size,
        tick_interval=timedelta(seconds=1),
        lease_duration=timedelta(seconds=30),
    )


def test_config_custom(monkeypatch):
    monkeypatch.setenv("DISPATCHER_TENANT_ID", "tenant-42")
    monkeypatch.setenv("DISPATCHER_BATCH_SIZE", "100")
    monkeypatch.setenv("DISPATCHER_TICK_INTERVAL_SEC", "5")
    monkeypatch.setenv("DISPATCHER_LEASE_DURATION_SEC", "60")

    cfg = load_dispatcher_config()
    assert cfg.tenant_id == "tenant-42"
    assert cfg.batch_size == 100
    assert cfg.tick_interval == timedelta(seconds=5)
    assert cfg.lease_duration == timedelta(seconds=60)


def test_config_defaults(monkeypatch):
    for key in KEYS:
        monkeypatch.setenv(key, "")
    monkeypatch.delenv("DISPATCHER_HEALTH_PORT", raising=False)

    cfg = load_dispatcher_config()
    assert cfg.tenant_id == "default"
    assert cfg.batch_size == 50
    assert cfg.tick_interval == timedelta(seconds=2)
    assert cfg.lease_duration == timedelta(seconds=30)
    assert cfg.health_port == "6061"


def test_config_invalid_batch_size(monkeypatch):
    for key in KEYS:
        monkeypatch.setenv(key, "")
    monkeypatch.setenv("DISPATCHER_BATCH_SIZE", "abc")
    with pytest.raises(ConfigError, match="DISPATCHER_BATCH_SIZE"):
        load_dispatcher_config()


def test_run_loop_stops_on_cancel():
    stop = threading.Event()
    now = datetime(2026, 4, 20, 12, 0, 0, tzinfo=timezone.utc)
    ticker = FakeTicker()
    runner = StubRunner(handled=1, on_call=lambda n: n == 1 and stop.set())

    run_loop(runner, _config(7), stop, ticker, lambda: now)

    assert len(runner.calls) == 2
    spec, limit = runner.calls[-1]
    assert limit == 7
    assert spec == ClaimSpec(
        tenant_id="t1",
        lease_expires_at=now + timedelta(seconds=30),
        now=now,
    )
    assert ticker.stopped is True


def test_run_loop_continues_after_tick():
    stop = threading.Event()
    ticker = FakeTicker(ticks=1)
    runner = StubRunner(on_call=lambda n: n == 2 and stop.set())

    run_loop(runner, _config(3), stop, ticker)

    assert len(runner.calls) == 3
    assert ticker.intervals == [1.0]


def test_run_loop_error_path_still_drains():
    stop = threading.Event()
    ticker = FakeTicker()
    runner = StubRunner(error=RuntimeError("boom"), on_call=lambda n: n == 1 and stop.set())

    run_loop(runner, _config(1), stop, ticker)

    assert len(runner.calls) == 2
    assert ticker.stopped is True


def test_run_loop_lease_is_relative_to_utc_now():
    stop = threading.Event()
    local = datetime(2026, 4, 20, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    runner = StubRunner(on_call=lambda n: stop.set())

    run_loop(runner, _config(1), stop, FakeTicker(), lambda: local)

    spec, _ = runner.calls[0]
    assert spec.now == local
    assert spec.now.utcoffset() == timedelta(0)
    assert spec.lease_expires_at - spec.now == timedelta(seconds=30)