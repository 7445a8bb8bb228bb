"""Live performance dashboard served over HTTP with Server-Sent Events.

The server reads from any metrics object that offers ``tasks_completed()``,
``tasks_stolen()``, ``steal_rate()``, ``average_task_duration()`` and
``worker_utilization(index)``. A collector thread samples it at a fixed
interval into a bounded history; browsers receive the history and then
live updates on ``/events``, the latest sample as JSON on ``/snapshot`` and
a self-contained HTML page on ``/``.
"""

from __future__ import annotations

import socket
import sys
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Protocol


class MetricsSource(Protocol):
    """What the dashboard needs from a metrics collector."""

    def tasks_completed(self) -> int: ...

    def tasks_stolen(self) -> int: ...

    def steal_rate(self) -> float: ...

    def average_task_duration(self) -> timedelta | float: ...

    def worker_utilization(self, worker_id: int) -> float: ...


@dataclass
class DashboardConfig:
    """Settings for the dashboard server."""

    port: int = 9090
    push_interval_ms: int = 500
    history_len: int = 120
    title: str = "Taskweave Dashboard"


@dataclass(frozen=True)
class MetricSnapshot:
    """One sample of the metrics at a point in time."""

    timestamp_ms: int
    tasks_completed: int
    tasks_stolen: int
    steal_rate: float
    avg_task_us: int
    worker_utilizations: list[float] = field(default_factory=list)
    throughput_per_sec: float = 0.0

    def to_json(self) -> str:
        """Return the snapshot as a compact JSON object."""
        utils = ",".join(f"{u:.2f}" for u in self.worker_utilizations)
        return (
            f'{{"ts":{self.timestamp_ms},"completed":{self.tasks_completed},'
            f'"stolen":{self.tasks_stolen},"steal_rate":{self.steal_rate:.3f},'
            f'"avg_task_us":{self.avg_task_us},"worker_utils":[{utils}],'
            f'"throughput":{self.throughput_per_sec:.2f}}}'
        )


def _micros(duration: timedelta | float) -> int:
    if isinstance(duration, timedelta):
        return duration // timedelta(microseconds=1)
    return int(float(duration) * 1_000_000)


_CSS = """
  :root{--bg:#0f1117;--surface:#1a1d27;--border:#2d3148;--accent:#5865f2;--green:#3ba55d;--text:#dcddde;--muted:#72767d}
  *{box-sizing:border-box;margin:0;padding:0}
  body{background:var(--bg);color:var(--text);font-family:"SF Mono",Consolas,monospace;font-size:13px;display:flex;flex-direction:column;min-height:100vh}
  header{background:var(--surface);border-bottom:1px solid var(--border);padding:12px 24px;display:flex;align-items:center;gap:12px}
  .dot{width:10px;height:10px;border-radius:50%;background:var(--green);animation:pulse 2s infinite}
  @keyframes pulse{0%,100%{opacity:1}50%{opacity:.4}}
  h1{font-size:15px;font-weight:600;letter-spacing:.5px}
  .status{margin-left:auto;color:var(--muted);font-size:11px}
  main{display:grid;grid-template-columns:repeat(auto-fit,minmax(280px,1fr));gap:16px;padding:20px}
  .card{background:var(--surface);border:1px solid var(--border);border-radius:8px;padding:16px}
  .card h2{font-size:11px;text-transform:uppercase;letter-spacing:1px;color:var(--muted);margin-bottom:12px}
  .stat-grid{display:grid;grid-template-columns:1fr 1fr;gap:10px}
  .stat{background:var(--bg);border-radius:6px;padding:10px 12px}
  .stat .label{font-size:10px;color:var(--muted);margin-bottom:4px}
  .stat .value{font-size:22px;font-weight:700;color:var(--accent)}
  .stat .unit{font-size:11px;color:var(--muted)}
  canvas{width:100%;height:180px;display:block}
  .worker-bars{display:flex;flex-direction:column;gap:8px}
  .worker-row{display:flex;align-items:center;gap:8px}
  .worker-row .wlabel{width:28px;text-align:right;color:var(--muted);font-size:11px}
  .bar-bg{flex:1;height:16px;background:var(--bg);border-radius:4px;overflow:hidden}
  .bar-fill{height:100%;border-radius:4px;transition:width .4s ease}
  .worker-row .wpct{width:38px;text-align:right;font-size:11px}
"""

_JS = """
(function(){
  "use strict";
  var HISTORY = 120;
  var throughputHistory = [];
  var canvas = document.getElementById("chart-tp");
  var ctx = canvas.getContext("2d");

  function resizeCanvas(){
    canvas.width  = canvas.offsetWidth  * window.devicePixelRatio;
    canvas.height = canvas.offsetHeight * window.devicePixelRatio;
    ctx.scale(window.devicePixelRatio, window.devicePixelRatio);
  }
  resizeCanvas();
  window.addEventListener("resize", function(){ resizeCanvas(); drawChart(); });

  function drawChart(){
    var W = canvas.offsetWidth, H = canvas.offsetHeight;
    ctx.clearRect(0,0,W,H);
    if(throughputHistory.length < 2) return;
    var max = Math.max.apply(null, throughputHistory.concat([1])) * 1.2;
    var padL=48, padR=12, padT=10, padB=24;
    var cw = W-padL-padR, ch = H-padT-padB;
    ctx.strokeStyle = "#2d3148"; ctx.lineWidth = 1;
    for(var i=0; i<=4; i++){
      var y = padT + ch*(1 - i/4);
      ctx.beginPath(); ctx.moveTo(padL,y); ctx.lineTo(padL+cw,y); ctx.stroke();
      ctx.fillStyle = "#72767d"; ctx.font = "10px monospace";
      ctx.fillText((max*i/4).toFixed(0), 2, y+4);
    }
    ctx.beginPath(); ctx.strokeStyle = "#5865f2"; ctx.lineWidth = 2;
    throughputHistory.forEach(function(v,i){
      var x = padL + (i/(HISTORY-1))*cw;
      var y = padT + ch*(1 - v/max);
      i === 0 ? ctx.moveTo(x,y) : ctx.lineTo(x,y);
    });
    ctx.stroke();
    ctx.lineTo(padL+cw, padT+ch); ctx.lineTo(padL, padT+ch); ctx.closePath();
    ctx.fillStyle = "rgba(88,101,242,0.12)"; ctx.fill();
  }

  function updateWorkerBars(utils){
    utils.forEach(function(u,i){
      var fill = document.getElementById("wfill-" + i);
      var pct  = document.getElementById("wpct-"  + i);
      if(!fill) return;
      var color = u > 80 ? "#3ba55d" : u > 40 ? "#faa61a" : "#ed4245";
      fill.style.width      = u.toFixed(1) + "%";
      fill.style.background = color;
      pct.textContent       = u.toFixed(1) + "%";
    });
  }

  function setText(id, val){ var el=document.getElementById(id); if(el) el.textContent=val; }

  var dot    = document.getElementById("dot");
  var status = document.getElementById("status");
  var evtSrc = new EventSource("/events");

  evtSrc.onopen = function(){
    dot.style.background = "#3ba55d";
    status.textContent   = "Live";
  };
  evtSrc.onerror = function(){
    dot.style.background = "#ed4245";
    status.textContent   = "Disconnected - retrying...";
  };
  evtSrc.onmessage = function(e){
    var d; try{ d = JSON.parse(e.data); } catch(ex){ return; }
    setText("s-completed",  d.completed);
    setText("s-throughput", d.throughput.toFixed(1));
    setText("s-avg",        d.avg_task_us);
    setText("s-steal",      (d.steal_rate * 100).toFixed(1));
    throughputHistory.push(d.throughput);
    if(throughputHistory.length > HISTORY) throughputHistory.shift();
    drawChart();
    if(d.worker_utils) updateWorkerBars(d.worker_utils);
  };
})();
"""


def build_html(title: str, num_workers: int) -> str:
    """Return the self-contained dashboard page with one bar per worker."""
    worker_rows = "\n".join(
        f'<div class="worker-row">'
        f'<span class="wlabel">W{i}</span>'
        f'<div class="bar-bg"><div class="bar-fill" id="wfill-{i}" style="width:0%"></div></div>'
        f'<span class="wpct" id="wpct-{i}">0%</span>'
        f"</div>"
        for i in range(num_workers)
    )
    lines = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '<meta charset="UTF-8">',
        '<meta name="viewport" content="width=device-width,initial-scale=1">',
        f"<title>{title}</title>",
        f"<style>{_CSS}</style>",
        "</head>",
        "<body>",
        "<header>",
        '<div class="dot" id="dot"></div>',
        f"<h1>{title}</h1>",
        '<span class="status" id="status">Connecting...</span>',
        "</header>",
        "<main>",
        '<div class="card" style="grid-column:span 2">',
        "<h2>Live Metrics</h2>",
        '<div class="stat-grid">',
        '<div class="stat"><div class="label">Tasks Completed</div>'
        '<div class="value" id="s-completed">-</div></div>',
        '<div class="stat"><div class="label">Throughput</div>'
        '<div class="value" id="s-throughput">-</div><div class="unit">tasks / sec</div></div>',
        '<div class="stat"><div class="label">Avg Task Duration</div>'
        '<div class="value" id="s-avg">-</div><div class="unit">us</div></div>',
        '<div class="stat"><div class="label">Steal Rate</div>'
        '<div class="value" id="s-steal">-</div><div class="unit">%</div></div>',
        "</div>",
        "</div>",
        '<div class="card" style="grid-column:span 2">',
        "<h2>Throughput over time (tasks/sec)</h2>",
        '<canvas id="chart-tp"></canvas>',
        "</div>",
        '<div class="card" style="grid-column:span 2">',
        "<h2>Worker Utilisation</h2>",
        f'<div class="worker-bars">{worker_rows}</div>',
        "</div>",
        "</main>",
        f"<script>{_JS}</script>",
        "</body>",
        "</html>",
    ]
    return "\n".join(lines)


def _log(message: str) -> None:
    print(f"[dashboard] {message}", file=sys.stderr)


class _SharedState:
    """State shared by the server, collector and connection threads."""

    def __init__(
        self,
        metrics: MetricsSource,
        num_workers: int,
        config: DashboardConfig,
        shutdown: threading.Event,
        profile_box: list[Any],
    ) -> None:
        self.metrics = metrics
        self.num_workers = num_workers
        self.config = config
        self.shutdown = shutdown
        self.profile_box = profile_box
        self.interval = config.push_interval_ms / 1000.0
        self.history: deque[MetricSnapshot] = deque(maxlen=max(1, config.history_len))
        self.lock = threading.Lock()
        self.start = time.monotonic()
        self.last_completed = 0

    def collect(self) -> MetricSnapshot:
        m = self.metrics
        completed = m.tasks_completed()
        delta = max(0, completed - self.last_completed)
        self.last_completed = completed
        throughput = delta / self.interval if self.interval > 0 else 0.0
        snapshot = MetricSnapshot(
            timestamp_ms=int((time.monotonic() - self.start) * 1000),
            tasks_completed=completed,
            tasks_stolen=m.tasks_stolen(),
            steal_rate=m.steal_rate(),
            avg_task_us=_micros(m.average_task_duration()),
            worker_utilizations=[m.worker_utilization(i) for i in range(self.num_workers)],
            throughput_per_sec=throughput,
        )
        with self.lock:
            self.history.append(snapshot)
        return snapshot

    def latest(self) -> MetricSnapshot | None:
        with self.lock:
            return self.history[-1] if self.history else None

    def all_snapshots(self) -> list[MetricSnapshot]:
        with self.lock:
            return list(self.history)


def _run_collector(state: _SharedState) -> None:
    while not state.shutdown.is_set():
        state.collect()
        state.shutdown.wait(state.interval)


def _serve_html(conn: socket.socket, state: _SharedState) -> None:
    body = build_html(state.config.title, state.num_workers).encode("utf-8")
    head = (
        "HTTP/1.1 200 OK\r\nContent-Type: text/html; charset=utf-8\r\n"
        f"Content-Length: {len(body)}\r\nCache-Control: no-cache\r\n\r\n"
    )
    conn.sendall(head.encode("ascii") + body)


def _serve_sse(conn: socket.socket, state: _SharedState) -> None:
    conn.sendall(
        b"HTTP/1.1 200 OK\r\nContent-Type: text/event-stream\r\nCache-Control: no-cache\r\n"
        b"Access-Control-Allow-Origin: *\r\nX-Accel-Buffering: no\r\n\r\n"
    )
    for snapshot in state.all_snapshots():
        conn.sendall(f"data: {snapshot.to_json()}\n\n".encode("utf-8"))
    while not state.shutdown.wait(state.interval):
        snapshot = state.latest()
        if snapshot is not None:
            conn.sendall(f"data: {snapshot.to_json()}\n\n".encode("utf-8"))


def _serve_snapshot(conn: socket.socket, state: _SharedState) -> None:
    snapshot = state.latest()
    body = (snapshot.to_json() if snapshot is not None else "{}").encode("utf-8")
    head = f"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\nContent-Length: {len(body)}\r\n\r\n"
    conn.sendall(head.encode("ascii") + body)


def _serve_404(conn: socket.socket) -> None:
    conn.sendall(b"HTTP/1.1 404 Not Found\r\nContent-Length: 0\r\n\r\n")


def _handle_connection(conn: socket.socket, state: _SharedState) -> None:
    try:
        conn.settimeout(5.0)
        with conn.makefile("rb") as reader:
            request_line = reader.readline().decode("latin-1")
            while len(reader.readline()) > 2:
                pass
        parts = request_line.split()
        path = parts[1] if len(parts) > 1 else "/"
        if path in ("/", "/index.html"):
            _serve_html(conn, state)
        elif path == "/events":
            _serve_sse(conn, state)
        elif path == "/snapshot":
            _serve_snapshot(conn, state)
        else:
            _serve_404(conn)
    except OSError:
        pass
    finally:
        conn.close()


def _run_server(listener: socket.socket, state: _SharedState) -> None:
    threading.Thread(
        target=_run_collector, args=(state,), name="dashboard-collector", daemon=True
    ).start()
    with listener:
        while not state.shutdown.is_set():
            try:
                conn, _ = listener.accept()
            except TimeoutError:
                continue
            except OSError as exc:
                if not state.shutdown.is_set():
                    _log(f"accept error: {exc}")
                break
            threading.Thread(
                target=_handle_connection, args=(conn, state), daemon=True
            ).start()
    _log("server stopped")


class DashboardHandle:
    """Handle to a running dashboard; stopping it shuts the server down."""

    def __init__(
        self,
        shutdown: threading.Event,
        thread: threading.Thread | None,
        port: int | None,
    ) -> None:
        self._shutdown = shutdown
        self._thread = thread
        self.port = port

    def stop(self) -> None:
        """Signal the server to stop and wait for its thread to exit."""
        self._shutdown.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def is_running(self) -> bool:
        """Return True until the server has been told to stop."""
        return not self._shutdown.is_set()

    def __enter__(self) -> DashboardHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def __del__(self) -> None:
        shutdown = getattr(self, "_shutdown", None)
        if shutdown is not None:
            shutdown.set()


class DashboardServer:
    """Dashboard server over a metrics source; call :meth:`start` to serve it."""

    def __init__(
        self,
        metrics: MetricsSource,
        num_workers: int,
        config: DashboardConfig | None = None,
    ) -> None:
        self._metrics = metrics
        self._num_workers = num_workers
        self._config = config if config is not None else DashboardConfig()
        self._profile_box: list[Any] = [None]
        self._started = False

    @property
    def config(self) -> DashboardConfig:
        return self._config

    @property
    def profile(self) -> Any:
        """The execution profile last given to :meth:`set_profile`, or None."""
        return self._profile_box[0]

    def set_profile(self, profile: Any) -> None:
        """Attach an execution profile to the dashboard."""
        self._profile_box[0] = profile

    def start(self) -> DashboardHandle:
        """Bind to 127.0.0.1 on the configured port and serve in background threads.

        A server can be started only once. If the port cannot be bound the
        error is reported on stderr and the returned handle has no port.
        """
        if self._started:
            raise RuntimeError("dashboard server already started")
        self._started = True

        shutdown = threading.Event()
        address = ("127.0.0.1", self._config.port)
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            listener.bind(address)
            listener.listen()
        except OSError as exc:
            listener.close()
            _log(f"bind error on {address[0]}:{address[1]}: {exc}")
            return DashboardHandle(shutdown, None, None)

        listener.settimeout(0.01)
        port = listener.getsockname()[1]
        _log(f"listening on http://127.0.0.1:{port}")

        state = _SharedState(
            self._metrics, self._num_workers, self._config, shutdown, self._profile_box
        )
        thread = threading.Thread(
            target=_run_server, args=(listener, state), name="dashboard-server", daemon=True
        )
        thread.start()
        return DashboardHandle(shutdown, thread, port)