"""Per-host probing loop with fire-and-forget probe dispatch."""

import logging

from PySide6.QtCore import QObject, QThreadPool, QTimer, Signal

from inhealth.cancellation import CancellationToken
from inhealth.config import PROBE_INTERVAL_MS, PROBE_TIMEOUT_MS
from inhealth.metrics import PingMetrics
from inhealth.models import MonitorState
from inhealth.prober import Prober, resolve_ipv4
from inhealth.workers import ProbeWorker, ResolveWorker

logger = logging.getLogger(__name__)


class HostMonitor(QObject):
    """Probes one host on a fixed cadence and records every attempt.

    Key features:
    - Resolves the host once on the pool; a failed resolution is final
    - One probe per tick, counted as sent before any network I/O
    - Ticks never wait for earlier probes (unbounded in-flight probes)
    - Cancellation stops ticking; in-flight probes finish on their own

    A prober slower than the interval therefore leaves several probes for the
    same host in flight at once. Capping them would change how ``sent`` grows
    under load, so no cap is applied.

    Thread-safe: monitor state is only touched on the Qt main thread; pool
    threads only resolve, probe and write metrics.
    """

    # Signals
    state_changed = Signal(object)  # MonitorState
    failed = Signal(str, str)  # (host, reason)
    probe_finished = Signal(object)  # ProbeOutcome

    def __init__(
        self,
        host: str,
        cancel_token: CancellationToken,
        metrics: PingMetrics,
        prober: Prober,
        thread_pool: QThreadPool,
        resolver=resolve_ipv4,
        interval_ms: int = PROBE_INTERVAL_MS,
        timeout_ms: int = PROBE_TIMEOUT_MS,
        parent=None,
    ):
        """Initialize host monitor.

        Args:
            host: Host name or address, used verbatim as the metric label
            cancel_token: Shared process-wide cancellation token
            metrics: Shared metric series
            prober: Shared prober, called concurrently from pool threads
            thread_pool: Pool that runs probe workers
            resolver: Callable mapping host to an IPv4 address
            interval_ms: Tick period in milliseconds
            timeout_ms: Per-probe timeout in milliseconds
            parent: Qt parent object
        """
        super().__init__(parent)

        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

        self.host = host
        self.cancel_token = cancel_token
        self.metrics = metrics
        self.prober = prober
        self.thread_pool = thread_pool
        self.resolver = resolver
        self.interval_ms = interval_ms
        self.timeout_ms = timeout_ms

        self.address = None
        self.state = MonitorState.IDLE
        self._sequence = 0
        self._in_flight = 0

        self.timer = QTimer(self)
        self.timer.setInterval(interval_ms)
        self.timer.timeout.connect(self._on_tick)

        cancel_token.cancelled.connect(self.stop)

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def ticks(self) -> int:
        return self._sequence

    def start(self):
        """Resolve the host on the pool and start ticking once it resolves.

        Returns immediately; the monitor moves to RUNNING or FAILED when the
        lookup finishes, independently of every other monitor.
        """
        if self.state is not MonitorState.IDLE:
            return

        if self.cancel_token.is_cancelled:
            self._set_state(MonitorState.STOPPED)
            return

        logger.info("Monitor starting: host=%s", self.host)
        self._set_state(MonitorState.RESOLVING)

        worker = ResolveWorker(self.resolver, self.host)
        worker.signals.resolved.connect(self._on_resolved)
        worker.signals.failed.connect(self._on_resolve_failed)
        self.thread_pool.start(worker)

    def stop(self):
        """Stop scheduling probes. In-flight probes are left to finish."""
        if self.state not in (MonitorState.RUNNING, MonitorState.RESOLVING):
            return

        self.timer.stop()
        self._set_state(MonitorState.STOPPED)
        logger.info(
            "Monitor stopped: host=%s, ticks=%d, in-flight=%d",
            self.host,
            self._sequence,
            self._in_flight,
        )

    def _on_resolved(self, address: str):
        # Cancelled while the lookup was running
        if self.state is not MonitorState.RESOLVING:
            return

        self.address = address
        self.metrics.track_host(self.host)
        self.timer.start()
        self._set_state(MonitorState.RUNNING)
        logger.info(
            "Pinging %s (%s): interval=%dms, timeout=%dms",
            self.host,
            self.address,
            self.interval_ms,
            self.timeout_ms,
        )

    def _on_resolve_failed(self, reason: str):
        if self.state is not MonitorState.RESOLVING:
            return

        logger.error("Failed to resolve host: host=%s, error=%s", self.host, reason)
        self._set_state(MonitorState.FAILED)
        self.failed.emit(self.host, reason)

    def _on_tick(self):
        """Handle timer tick - count and dispatch one probe attempt."""
        if self.state is not MonitorState.RUNNING or self.cancel_token.is_cancelled:
            return

        self._sequence += 1
        self.metrics.record_sent(self.host)

        worker = ProbeWorker(
            self.prober,
            self.metrics,
            self.host,
            self.address,
            self._sequence,
            self.timeout_ms / 1000.0,
        )
        worker.signals.probe_finished.connect(self.probe_finished)
        worker.signals.finished.connect(self._on_worker_finished)

        self._in_flight += 1
        self.thread_pool.start(worker)

        logger.debug(
            "Tick: host=%s, seq=%d, in-flight=%d", self.host, self._sequence, self._in_flight
        )

    def _on_worker_finished(self):
        self._in_flight = max(0, self._in_flight - 1)

    def _set_state(self, state: MonitorState):
        self.state = state
        self.state_changed.emit(state)

    def get_stats(self):
        """Get monitor statistics.

        Returns:
            Dict with monitor state info
        """
        return {
            "host": self.host,
            "address": self.address,
            "state": self.state.value,
            "ticks": self._sequence,
            "in_flight": self._in_flight,
            "interval_ms": self.interval_ms,
        }
