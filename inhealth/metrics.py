"""Prometheus metric series for inhealth and their HTTP exposition."""

import logging

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    disable_created_metrics,
    generate_latest,
    start_http_server,
)
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from inhealth.models import ProbeOutcome

logger = logging.getLogger(__name__)

RTT_METRIC = "ping_rtt"
SENT_METRIC = "ping_n_sent"
RECV_METRIC = "ping_n_recv"

# Seconds; 0.5ms .. 1s
RTT_BUCKETS = (0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1)

DEFAULT_PORT = 9088


class BareCounterCollector(Collector):
    """Exposes a labeled counter under its bare name.

    prometheus_client writes counter samples as ``<name>_total``. Existing
    scrape configs and dashboards query ``ping_n_sent`` and ``ping_n_recv``,
    so the counter values are re-exported with the exact name (and an
    untyped TYPE line, which keeps the exposition self-consistent).
    """

    def __init__(self, counter: Counter, name: str, documentation: str):
        self._counter = counter
        self._name = name
        self._documentation = documentation

    def describe(self):
        return [Metric(self._name, self._documentation, "unknown")]

    def collect(self):
        family = Metric(self._name, self._documentation, "unknown")
        for counter_family in self._counter.collect():
            for sample in counter_family.samples:
                if sample.name == counter_family.name + "_total":
                    family.add_sample(self._name, sample.labels, sample.value)
        yield family


class PingMetrics:
    """The three per-host ping series, kept in an explicitly owned registry.

    All update methods are safe to call from any thread; the only
    synchronization is prometheus_client's per-series locking.
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """Create the series and register them.

        Args:
            registry: Registry to register into. A fresh registry is created
                      when omitted, the process-global default is never used.
        """
        self.registry = registry if registry is not None else CollectorRegistry()

        # client_golang writes no *_created samples; match its exposition
        disable_created_metrics()

        self.rtt = Histogram(
            RTT_METRIC,
            "histogram of the rtts of icmp echo replies",
            ["host"],
            buckets=RTT_BUCKETS,
            registry=self.registry,
        )

        # Counters live outside the registry and are exposed by name below
        self.sent = Counter(
            SENT_METRIC, "counter of sent icmp packets", ["host"], registry=None
        )
        self.received = Counter(
            RECV_METRIC, "counter of received reply icmp packets", ["host"], registry=None
        )
        self.registry.register(
            BareCounterCollector(self.sent, SENT_METRIC, "counter of sent icmp packets")
        )
        self.registry.register(
            BareCounterCollector(
                self.received, RECV_METRIC, "counter of received reply icmp packets"
            )
        )

    def track_host(self, host: str) -> None:
        """Create all three series for host at zero."""
        self.rtt.labels(host)
        self.sent.labels(host)
        self.received.labels(host)
        logger.debug("Series created: host=%s", host)

    def record_sent(self, host: str) -> None:
        self.sent.labels(host).inc()

    def record_outcome(self, outcome: ProbeOutcome) -> None:
        """Fold a probe outcome into the series.

        Failures update nothing; the attempt was already counted as sent.
        """
        if not outcome.ok:
            return
        self.rtt.labels(outcome.host).observe(outcome.rtt_seconds)
        self.received.labels(outcome.host).inc()

    def value(self, name: str, host: str) -> float | None:
        """Read the current value of an exposed sample for host.

        Args:
            name: Exposed sample name, e.g. ``ping_n_sent`` or ``ping_rtt_count``
            host: Host label value

        Returns:
            Sample value, or None if the series does not exist
        """
        return self.registry.get_sample_value(name, {"host": host})

    def exposition(self) -> bytes:
        """Render the current snapshot in the Prometheus text format."""
        return generate_latest(self.registry)


def start_exposition_server(metrics: PingMetrics, port: int = DEFAULT_PORT, addr: str = "0.0.0.0"):
    """Serve metrics over HTTP on a daemon thread.

    Args:
        metrics: Metrics whose registry is served
        port: TCP port, 0 picks a free one
        addr: Listen address

    Returns:
        The running HTTP server; call ``shutdown()`` to stop it

    Raises:
        OSError: if the address cannot be bound
    """
    server, _thread = start_http_server(port, addr=addr, registry=metrics.registry)
    logger.info("Exposition server listening on %s:%d", addr, server.server_address[1])
    return server
