import pytest

from orbitjob.query import GetItem, GetJobUseCase, ListItem, ListJobsUseCase
from orbitjob.query_input import (
    DEFAULT_LIST_LIMIT,
    MAX_LIST_LIMIT,
    STATUS_ACTIVE,
    GetInput,
    ListInput,
    ValidationError,
)


class FakeGetReader:
    def __init__(self, out=None, err=None):
        self.called = False
        self.received = None
        self.out = out
        self.err = err

    def get(self, request):
        self.called = True
        self.received = request
        if self.err is not None:
            raise self.err
        return self.out


class FakeListReader:
    def __init__(self, out=None, err=None):
        self.called = False
        self.received = None
        self.out = out or []
        self.err = err

    def list(self, request):
        self.called = True
        self.received = request
        if self.err is not None:
            raise self.err
        return self.out


class QueryFailed(Exception):
    pass


def test_get_job_use_case_get():
    repo = FakeGetReader(
        out=GetItem(id=1, name="demo-job", tenant_id="tenant-a", version=3, status=STATUS_ACTIVE)
    )
    out = GetJobUseCase(repo).get(GetInput(id=1, tenant_id=" tenant-a "))
    assert repo.called
    assert repo.received.id == 1
    assert repo.received.tenant_id == "tenant-a"
    assert out.version == 3


def test_get_job_use_case_validation_error():
    repo = FakeGetReader()
    with pytest.raises(ValidationError):
        GetJobUseCase(repo).get(GetInput(id=0))
    assert repo.called is False


def test_get_job_use_case_repo_error():
    repo_err = QueryFailed("query failed")
    repo = FakeGetReader(err=repo_err)
    with pytest.raises(QueryFailed) as info:
        GetJobUseCase(repo).get(GetInput(id=10))
    assert info.value is repo_err
    assert repo.called


def test_list_jobs_use_case_list():
    repo = FakeListReader(out=[ListItem(id=1, name="demo-job", status=STATUS_ACTIVE)])
    out = ListJobsUseCase(repo).list(ListInput(tenant_id=" tenant-a ", status=STATUS_ACTIVE))
    assert repo.called
    assert repo.received.tenant_id == "tenant-a"
    assert repo.received.status == STATUS_ACTIVE
    assert repo.received.limit == DEFAULT_LIST_LIMIT
    assert len(out) == 1
    assert out[0].id == 1


def test_list_jobs_use_case_validation_error():
    repo = FakeListReader()
    with pytest.raises(ValidationError):
        ListJobsUseCase(repo).list(ListInput(limit=MAX_LIST_LIMIT + 1))
    assert repo.called is False


def test_list_jobs_use_case_repo_error():
    repo_err = QueryFailed("query failed")
    repo = FakeListReader(err=repo_err)
    with pytest.raises(QueryFailed) as info:
        ListJobsUseCase(repo).list(ListInput(limit=10))
    assert info.value is repo_err
    assert repo.called


def test_get_item_defaults_are_independent():
    first = GetItem(id=1)
    second = GetItem(id=2)
    first.handler_payload["url"] = "https://example.com/hook"
    assert second.handler_payload == {}