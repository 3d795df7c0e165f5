# orbitjob

Building blocks for a job orchestration system:

- `orbitjob.scheduler` – a loop that runs a scheduling batch on every tick;
- `orbitjob.dispatcher` – a loop that claims a tenant's pending instances
  under a lease on every tick;
- `orbitjob.worker` – a loop that polls for tasks and sends liveness
  heartbeats alongside;
- `orbitjob.runtime` – reading settings from the environment and a
  wall-clock ticker;
- `orbitjob.health` – `/healthz` and `/readyz` HTTP endpoints;
- `orbitjob.query_input` and `orbitjob.query` – validation and use cases for
  reading jobs;
- `orbitjob.openapi_gen` – rendering an OpenAPI document to YAML and
  checking a file on disk for drift.

Everything here is a library. You supply the storage-backed runners and
repositories; orbitjob supplies the settings, the tick loops with graceful
draining, and request validation.

## Reading jobs

Requests are normalised before they reach your repository: tenant ids are
trimmed and default to `"default"` (at most 64 bytes), list limits default to
50 and may not exceed 100, the offset may not be negative, and a list status
filter must be empty, `active` or `paused`. Invalid values raise
`ValidationError`, which carries `field` and `message`.

```python
from orbitjob.query_input import (
    GetInput,
    ListInput,
    ValidationError,
    build_schedule_summary,
    normalize_get_input,
    normalize_list_input,
)

request = normalize_list_input(ListInput(tenant_id=" tenant-a ", status="active"))
assert request.tenant_id == "tenant-a"
assert request.limit == 50

try:
    normalize_get_input(GetInput(id=0))
except ValidationError as exc:
    print(exc.field, exc.message)   # id must be >= 1

print(build_schedule_summary("cron", "*/5 * * * *", "Asia/Shanghai"))
# cron: */5 * * * * (Asia/Shanghai)
print(build_schedule_summary("cron", None, ""))
# cron (UTC)
```

`GetJobUseCase(repo).get(request)` and `ListJobsUseCase(repo).list(request)`
validate the request and pass the normalised value to `repo.get` or
`repo.list`, returning what the repository returns (`GetItem` and
`ListItem` are the read models for this).

## Runtime loops

Each component reads its settings from the environment:

| Function                   | Variables (defaults) |
|----------------------------|----------------------|
| `load_scheduler_config()`  | `SCHEDULER_BATCH_SIZE` (100), `SCHEDULER_TICK_INTERVAL_SEC` (5), `SCHEDULER_HEALTH_PORT` (6060) |
| `load_dispatcher_config()` | `DISPATCHER_TENANT_ID` (default), `DISPATCHER_BATCH_SIZE` (50), `DISPATCHER_TICK_INTERVAL_SEC` (2), `DISPATCHER_LEASE_DURATION_SEC` (30), `DISPATCHER_HEALTH_PORT` (6061) |
| `load_worker_config()`     | `WORKER_ID` (host name plus a short random suffix), `WORKER_TENANT_ID` (default), `WORKER_POLL_INTERVAL_SEC` (2), `WORKER_HEARTBEAT_INTERVAL_SEC` (10), `WORKER_LEASE_DURATION_SEC` (60), `WORKER_CAPACITY` (1), `WORKER_LABELS` (JSON object, empty) |

Integer settings must be whole numbers of at least 1, and `WORKER_LABELS`
must be a JSON object; anything else raises `orbitjob.runtime.ConfigError`.

Runners are your own objects:

- scheduler: `run_batch(now, limit) -> int`
- dispatcher: `run_batch(spec, limit) -> int`, where `spec` is a `ClaimSpec`
  with `tenant_id`, `now` and `lease_expires_at`
- worker: `run_once(tenant_id, worker_id, limit, lease_duration) -> int`,
  plus a heartbeater with `upsert_heartbeat(heartbeat)`

Each loop runs one batch at once, then one per tick, until the `stop` event
is set. Exceptions raised by a runner are logged and the loop carries on. On
shutdown the scheduler and dispatcher run one final drain batch. The worker
polls again immediately while tasks keep arriving; its heartbeat thread sends
`online` on every heartbeat tick and, on shutdown, `draining`, then waits up
to 30 seconds for the poll loop to finish, then `offline`.

```python
import threading

from orbitjob.scheduler import load_scheduler_config, run_loop


class PrintingRunner:
    def run_batch(self, now, limit):
        print("tick at", now, "limit", limit)
        return 0


stop = threading.Event()
threading.Timer(12, stop.set).start()
run_loop(PrintingRunner(), load_scheduler_config(), stop)
```

`run_loop` also takes `new_ticker` (defaults to `WallClockTicker`) and `now`
(defaults to the current UTC time), which is handy for tests.

## Health endpoints

```python
from orbitjob.health import HealthServer

with HealthServer(6060, ping=my_db_ping, component="scheduler") as server:
    ...
```

`/healthz` always answers `200 ok`. `/readyz` calls `ping` and answers
`200 ready`, or `503 db ping failed` if it raises. Any other path answers 404.
Port `0` binds a free port, which `server.port` then holds.

## OpenAPI YAML

`render_openapi_yaml(document)` turns a JSON-compatible document into YAML
bytes ending in a newline; non-finite floats are rejected with
`OpenAPIGenError`. `write_spec(path, data)` writes the bytes, creating parent
directories, and `verify_spec(path, data)` raises `OpenAPIGenError` when the
file is missing or differs. `run(argv, document)` wraps these with `-out`
(default `api/openapi.yaml`) and `-check` options.

## What this package does not do

- It has no storage: no database connection, no repositories for jobs,
  instances or workers. Runners, heartbeaters and query repositories are
  yours to provide.
- It has no task handlers; the worker loop only calls your runner.
- It has no admin HTTP API and does not contain an OpenAPI document of its
  own; `openapi_gen` renders whatever document you pass in.
- It installs no commands; the loops and `openapi_gen.run` are called from
  your own code.