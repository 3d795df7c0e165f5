"""Normalisation and validation of control-plane job read requests."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 100

STATUS_ACTIVE = "active"
STATUS_PAUSED = "paused"

DEFAULT_TENANT_ID = "default"
MAX_TENANT_ID_LENGTH = 64

TRIGGER_TYPE_MANUAL = "manual"
TRIGGER_TYPE_CRON = "cron"
DEFAULT_TIMEZONE = "UTC"


class ValidationError(ValueError):
    """A request field failed validation."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


@dataclass(frozen=True)
class GetInput:
    """Request to read one job."""

    id: int
    tenant_id: str = ""


@dataclass(frozen=True)
class ListInput:
    """Request to list jobs; zero limit means the default page size."""

    tenant_id: str = ""
    status: str = ""
    limit: int = 0
    offset: int = 0


def _normalize_tenant(tenant_id: str) -> str:
    tenant = tenant_id.strip() or DEFAULT_TENANT_ID
    if len(tenant.encode("utf-8")) > MAX_TENANT_ID_LENGTH:
        raise ValidationError(
            "tenant_id", f"must be <= {MAX_TENANT_ID_LENGTH} characters"
        )
    return tenant


def normalize_get_input(value: GetInput) -> GetInput:
    """Trim and validate a single-job read request."""
    if value.id < 1:
        raise ValidationError("id", "must be >= 1")
    return GetInput(id=value.id, tenant_id=_normalize_tenant(value.tenant_id))


def normalize_list_input(value: ListInput) -> ListInput:
    """Trim, default and validate a job list request."""
    tenant = _normalize_tenant(value.tenant_id)

    status = value.status.strip()
    if status and status not in (STATUS_ACTIVE, STATUS_PAUSED):
        raise ValidationError(
            "status", f"must be one of: {STATUS_ACTIVE}, {STATUS_PAUSED}"
        )

    limit = value.limit or DEFAULT_LIST_LIMIT
    if limit < 1:
        raise ValidationError("limit", "must be >= 1")
    if limit > MAX_LIST_LIMIT:
        raise ValidationError("limit", f"must be <= {MAX_LIST_LIMIT}")

    if value.offset < 0:
        raise ValidationError("offset", "must be >= 0")

    return ListInput(tenant_id=tenant, status=status, limit=limit, offset=value.offset)


def build_schedule_summary(
    trigger_type: str, cron_expr: str | None, timezone: str
) -> str:
    """Describe a job's schedule for list views."""
    if trigger_type == TRIGGER_TYPE_MANUAL:
        return "manual"
    if trigger_type == TRIGGER_TYPE_CRON:
        expr = (cron_expr or "").strip()
        tz = timezone.strip() or DEFAULT_TIMEZONE
        if not expr:
            return f"cron ({tz})"
        return f"cron: {expr} ({tz})"
    return trigger_type.strip()