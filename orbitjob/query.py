"""Control-plane read models and use cases for reading jobs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from orbitjob.query_input import (
    GetInput,
    ListInput,
    normalize_get_input,
    normalize_list_input,
)


@dataclass(kw_only=True)
class GetItem:
    """Detailed view of one job."""

    id: int = 0
    name: str = ""
    tenant_id: str = ""
    version: int = 0
    priority: int = 0
    trigger_type: str = ""
    partition_key: str | None = None
    cron_expr: str | None = None
    timezone: str = ""
    schedule_summary: str = ""
    handler_type: str = ""
    handler_payload: dict[str, Any] = field(default_factory=dict)
    timeout_sec: int = 0
    retry_limit: int = 0
    retry_backoff_sec: int = 0
    retry_backoff_strategy: str = ""
    concurrency_policy: str = ""
    misfire_policy: str = ""
    status: str = ""
    next_run_at: datetime | None = None
    last_scheduled_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(kw_only=True)
class ListItem:
    """Summary view of a job as shown in list results."""

    id: int = 0
    name: str = ""
    tenant_id: str = ""
    priority: int = 0
    trigger_type: str = ""
    partition_key: str | None = None
    schedule_summary: str = ""
    handler_type: str = ""
    concurrency_policy: str = ""
    misfire_policy: str = ""
    status: str = ""
    next_run_at: datetime | None = None
    last_scheduled_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class _JobGetReader(Protocol):
    def get(self, request: GetInput) -> GetItem: ...


class _JobListReader(Protocol):
    def list(self, request: ListInput) -> list[ListItem]: ...


class GetJobUseCase:
    """Reads one job after validating the request."""

    def __init__(self, repo: _JobGetReader) -> None:
        self.repo = repo

    def get(self, request: GetInput) -> GetItem:
        return self.repo.get(normalize_get_input(request))


class ListJobsUseCase:
    """Lists jobs after validating and defaulting the request."""

    def __init__(self, repo: _JobListReader) -> None:
        self.repo = repo

    def list(self, request: ListInput) -> list[ListItem]:
        return self.repo.list(normalize_list_input(request))