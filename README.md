# taskweave

Building blocks for working with task graphs in Python. The package has
no dependencies outside the standard library.

| Module | What it offers |
| --- | --- |
| `taskweave.cycle_detection` | `CycleDetector` and `CycleDetectionResult`: cycle search, topological order, strongly connected components |
| `taskweave.algorithms` | `parallel_for_each`, `parallel_reduce`, `parallel_transform`, `parallel_sort`, `parallel_inclusive_scan`, `parallel_exclusive_scan` on a thread pool |
| `taskweave.composition` | `CloneableWork`, `CompositionParams`, `ParameterizedComposition` |
| `taskweave.debug` | `DebugLogger`, `LogEntry`, `LogLevel` |
| `taskweave.dashboard` | `DashboardServer`, `DashboardHandle`, `DashboardConfig`, `MetricSnapshot`, `build_html` |

## Installation

```
pip install taskweave
```

## Cycle detection

Task ids can be any hashable values. Tasks are visited in the order they
were first added, so results are deterministic.

```python
from taskweave.cycle_detection import CycleDetector

detector = CycleDetector()
detector.add_dependency(1, 2)
detector.add_dependency(2, 3)

print(detector.detect_cycle().has_cycle())  # False
print(detector.topological_sort())          # [1, 2, 3]

detector.add_dependency(3, 1)
print(detector.detect_cycle().cycle_path()) # the task ids that form the cycle
print(detector.topological_sort())          # None
print(detector.strongly_connected_components())
```

`strongly_connected_components()` lists only cyclic components: groups of
more than one task, or a single task with an edge to itself.

## Parallel algorithms

Each function splits its input into chunks of `chunk_size` items and runs
the chunks on a `concurrent.futures.ThreadPoolExecutor` (`max_workers`
defaults to the pool's own default). Results are returned directly, in
input order. A `chunk_size` below 1 raises `ValueError`.

```python
from taskweave.algorithms import (
    parallel_exclusive_scan,
    parallel_inclusive_scan,
    parallel_reduce,
    parallel_sort,
    parallel_transform,
)

add = lambda a, b: a + b

print(parallel_reduce(range(1, 101), 25, 0, add))          # 5050
print(parallel_transform([1, 2, 3], 2, lambda x: x * 2))   # [2, 4, 6]
print(parallel_sort([5, 3, 9, 1], 2))                      # [1, 3, 5, 9]
print(parallel_inclusive_scan([1, 2, 3, 4], 2, add, 0))    # [1, 3, 6, 10]
print(parallel_exclusive_scan([1, 2, 3, 4], 2, add, 0))    # [0, 1, 3, 6]
```

`parallel_for_each(data, chunk_size, func)` calls `func` on every item and
returns nothing. `parallel_sort` takes an optional `key` and is stable. The
scans expect `op` to be associative.

## Compositions

`CompositionParams` holds typed values. Setters check the type (raising
`TypeError`) and return the instance so calls can be chained; a getter
returns `None` when the key is missing or holds another kind of value.

```python
from taskweave.composition import CloneableWork, CompositionParams, ParameterizedComposition

params = CompositionParams().set_int("count", 5).set_string("name", "stage")
print(params.get_int("count"))     # 5
print(params.get_string("count"))  # None

builder = ParameterizedComposition(lambda p: [f"task {i}" for i in range(p.get_int("count") or 3)])
print(builder.instantiate(params))        # five items
print(builder.instantiate_default())      # three items

work = CloneableWork(lambda: print("run"))
work.execute()
work()  # calling the object runs it too
```

`ParameterizedComposition` returns whatever its factory builds;
`with_defaults(params)` sets the parameters used by `instantiate_default()`.

## Debug logging

`DebugLogger` is thread-safe, disabled by default and records `INFO` and
above once enabled. Recorded entries are also printed.

```python
from taskweave.debug import DebugLogger, LogLevel

logger = DebugLogger()
logger.enable()
logger.set_log_level(LogLevel.WARN)

logger.info("Executor", "not recorded")
logger.warn("Scheduler", "work stealing triggered")
logger.log(LogLevel.ERROR, "Task-1", "failed", worker_id=0, task_id=1)

print(len(logger.get_logs()))  # 2
print(logger.export_logs())    # e.g. "[    0.002] [ERROR] [W0] [T1] [Task-1] failed"
logger.save_to_file("execution.log")
```

`save_to_file` raises `OSError` if the file cannot be written; `clear()`
discards the recorded entries.

## Dashboard

`DashboardServer` serves live metrics on 127.0.0.1. It reads from any
object that provides `tasks_completed()`, `tasks_stolen()`, `steal_rate()`,
`average_task_duration()` (a `timedelta` or seconds as a float) and
`worker_utilization(i)`. A background thread samples it every
`push_interval_ms` into a history of at most `history_len` snapshots.

```python
from datetime import timedelta
from taskweave.dashboard import DashboardConfig, DashboardServer

class Metrics:
    def tasks_completed(self): return 100
    def tasks_stolen(self): return 5
    def steal_rate(self): return 5.0
    def average_task_duration(self): return timedelta(microseconds=250)
    def worker_utilization(self, worker_id): return 80.0

server = DashboardServer(Metrics(), 4, DashboardConfig(port=9090))
with server.start() as handle:
    print(handle.port, handle.is_running())
    # open http://127.0.0.1:9090/ in a browser
```

Paths served:

- `/` or `/index.html` — a self-contained HTML page (also available as `build_html(title, num_workers)`)
- `/events` — Server-Sent Events: the stored history, then the latest snapshot at each interval
- `/snapshot` — the latest `MetricSnapshot` as JSON, or `{}` before the first sample
- anything else — `404 Not Found`

`DashboardConfig` defaults: port 9090, push interval 500 ms, history of 120,
title "Taskweave Dashboard". Port 0 picks a free port, reported by
`handle.port`. If the port cannot be bound, the error is printed to stderr
and the handle's `port` is `None`. A server can be started once; a second
`start()` raises `RuntimeError`. `stop()` (or leaving the `with` block) shuts
the server down.

## What the package does not do

- It does not run task graphs: there is no executor, scheduler or task
  object. The algorithms run their chunks on a thread pool and return
  results; `CycleDetector` only analyses the edges you give it.
- It has no metrics collector of its own; the dashboard needs a metrics
  object supplied by the caller. A profile passed to `set_profile()` is
  stored but not shown on the page.
- It has no command-line program.

## Running the tests

```
pip install -e ".[test]"
pytest
```