"""Worker classes for background probe attempts."""

import logging

from PySide6.QtCore import QObject, QRunnable, Signal

from inhealth.metrics import PingMetrics
from inhealth.models import ProbeOutcome
from inhealth.prober import ProbeError, ProbeTimeout, Prober, ResolutionError

logger = logging.getLogger(__name__)


class WorkerSignals(QObject):
    """Signals for communicating between worker threads and main thread."""

    probe_finished = Signal(object)  # Emits ProbeOutcome
    finished = Signal()  # Emits when worker completes


class ProbeWorker(QRunnable):
    """Worker that performs one probe attempt in a pool thread.

    The outcome is recorded into metrics from the pool thread itself, so a
    probe still in flight when the event loop stops is recorded all the same.
    """

    def __init__(
        self,
        prober: Prober,
        metrics: PingMetrics,
        host: str,
        address: str,
        sequence: int,
        timeout: float,
    ):
        super().__init__()
        self.prober = prober
        self.metrics = metrics
        self.host = host
        self.address = address
        self.sequence = sequence
        self.timeout = timeout
        self.signals = WorkerSignals()

    def run(self):
        """Execute the probe in background thread."""
        try:
            logger.debug("Probe starting: host=%s, seq=%d", self.host, self.sequence)

            outcome = self._probe()
            self.metrics.record_outcome(outcome)

            if outcome.ok:
                logger.debug(
                    "Probe completed: host=%s, seq=%d, rtt=%.3fms",
                    self.host,
                    self.sequence,
                    outcome.rtt_seconds * 1000,
                )
            else:
                logger.warning(
                    "Ping error: host=%s, seq=%d, error=%s",
                    self.host,
                    self.sequence,
                    outcome.error,
                )

            self.signals.probe_finished.emit(outcome)

        finally:
            # Always signal completion
            self.signals.finished.emit()

    def _probe(self) -> ProbeOutcome:
        try:
            rtt = self.prober.probe(self.address, self.timeout)
        except ProbeTimeout as e:
            return ProbeOutcome(self.host, self.sequence, None, f"timeout: {e}")
        except ProbeError as e:
            return ProbeOutcome(self.host, self.sequence, None, f"transport: {e}")
        except Exception as e:
            logger.exception(
                "Probe exception: host=%s, seq=%d, error=%s", self.host, self.sequence, e
            )
            return ProbeOutcome(self.host, self.sequence, None, f"transport: {e}")
        return ProbeOutcome(self.host, self.sequence, rtt)


class ResolveSignals(QObject):
    """Signals carrying a resolution result back to the monitor's thread."""

    resolved = Signal(str)  # Emits the IPv4 address
    failed = Signal(str)  # Emits the failure reason


class ResolveWorker(QRunnable):
    """Worker that resolves a host once, off the event-loop thread.

    A slow lookup for one host must not hold up the ticks of the others.
    """

    def __init__(self, resolver, host: str):
        super().__init__()
        self.resolver = resolver
        self.host = host
        self.signals = ResolveSignals()

    def run(self):
        try:
            address = self.resolver(self.host)
        except ResolutionError as e:
            self.signals.failed.emit(str(e))
            return
        except Exception as e:
            logger.exception("Resolver exception: host=%s, error=%s", self.host, e)
            self.signals.failed.emit(f"resolver error: {e}")
            return
        logger.debug("Resolved: host=%s, address=%s", self.host, address)
        self.signals.resolved.emit(address)
