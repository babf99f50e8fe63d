"""Process wiring: prober, exposition server and one monitor per host."""

import logging

from PySide6.QtCore import QCoreApplication, QThreadPool, QTimer

from inhealth.cancellation import CancellationToken
from inhealth.config import Settings
from inhealth.fake_prober import FakeProber
from inhealth.metrics import PingMetrics, start_exposition_server
from inhealth.monitor import HostMonitor
from inhealth.prober import IcmpProber, ProberUnavailable, resolve_ipv4

logger = logging.getLogger(__name__)

# QThreadPool queues runnables past its thread cap; lift it so every tick
# gets its own thread right away
UNBOUNDED_THREADS = 2**31 - 1

# Lets Python run signal handlers while the Qt loop is in C++
SIGNAL_POLL_MS = 200


def create_prober(settings: Settings):
    """Build the prober selected by settings.

    Raises:
        ProberUnavailable: if the ICMP transport cannot be opened
    """
    if settings.prober == "fake":
        logger.info("Using FakeProber (INHEALTH_PROBER=fake)")
        return FakeProber()
    return IcmpProber(privileged=settings.privileged)


class Supervisor:
    """Owns the shared state of one inhealth process and runs it to completion."""

    def __init__(
        self,
        settings: Settings,
        app: QCoreApplication | None = None,
        metrics: PingMetrics | None = None,
        prober_factory=None,
        resolver=resolve_ipv4,
        cancel_token: CancellationToken | None = None,
    ):
        self.settings = settings
        self.app = app or QCoreApplication.instance()
        if self.app is None:
            raise RuntimeError("a QCoreApplication must exist before Supervisor")

        self.metrics = metrics if metrics is not None else PingMetrics()
        self.prober_factory = prober_factory or (lambda: create_prober(settings))
        self.resolver = resolver
        self.cancel_token = cancel_token or CancellationToken()

        self.thread_pool = QThreadPool()
        self.thread_pool.setMaxThreadCount(UNBOUNDED_THREADS)

        self.monitors = []
        self.server = None
        self.prober = None

        self._signal_timer = QTimer()
        self._signal_timer.setInterval(SIGNAL_POLL_MS)
        # No-op slot: each timeout hands control back to Python so pending
        # SIGINT/SIGTERM handlers get to run
        self._signal_timer.timeout.connect(lambda: None)

    def run(self):
        """Start everything and block until cancellation.

        Returns without waiting for in-flight probes to drain.
        """
        try:
            self.prober = self.prober_factory()
        except ProberUnavailable as e:
            logger.error("Failed to set up prober: %s", e)
            return

        try:
            self.server = start_exposition_server(
                self.metrics, self.settings.port, self.settings.listen_address
            )
        except OSError as e:
            logger.error(
                "Failed to start exposition server on %s:%d: %s",
                self.settings.listen_address,
                self.settings.port,
                e,
            )
            return

        for host in self.settings.hosts:
            monitor = HostMonitor(
                host,
                self.cancel_token,
                self.metrics,
                self.prober,
                self.thread_pool,
                resolver=self.resolver,
            )
            self.monitors.append(monitor)
            monitor.start()

        logger.info("Started %d host monitors", len(self.monitors))

        if not self.cancel_token.is_cancelled:
            self.cancel_token.cancelled.connect(self.app.quit)
            self._signal_timer.start()
            self.app.exec()
            self._signal_timer.stop()

        logger.info("wrapping up...")
        self.shutdown()

    def shutdown(self):
        """Stop monitors and the exposition server."""
        for monitor in self.monitors:
            monitor.stop()

        if self.server is not None:
            self.server.shutdown()
            self.server.server_close()
            self.server = None

    def get_stats(self):
        return [monitor.get_stats() for monitor in self.monitors]
