"""Simulated prober for running inhealth without ICMP privileges."""

import random
import threading
import time

from inhealth.prober import ProbeTimeout


class FakeProber:
    """Generates simulated round-trip times instead of sending packets."""

    def __init__(self, seed: int | None = None, delay: bool = True):
        """Initialize with optional random seed for deterministic behavior.

        Args:
            seed: Seed for the isolated random generator
            delay: Sleep for the simulated round trip before returning
        """
        # random.Random is not safe to share across pool threads unguarded
        self._random = random.Random(seed)
        self._lock = threading.Lock()
        self.delay = delay

        # Simulation parameters
        self.base_latency = 0.025  # Base latency in seconds
        self.latency_variance = 0.005  # Normal variance
        self.spike_probability = 0.05  # 5% chance of latency spike
        self.spike_multiplier = 3.0  # Spike makes latency 3x higher
        self.loss_probability = 0.02  # 2% chance of packet loss

    def probe(self, address: str, timeout: float) -> float:
        """Simulate one echo round trip to address."""
        if not address or not address.strip():
            raise ValueError("address cannot be empty")

        with self._lock:
            is_lost = self._random.random() < self.loss_probability
            is_spike = self._random.random() < self.spike_probability
            jitter = self._random.gauss(0, self.latency_variance)

        if is_lost:
            if self.delay:
                time.sleep(timeout)
            raise ProbeTimeout(f"no reply from {address} within {timeout:g}s")

        if is_spike:
            rtt = self.base_latency * self.spike_multiplier + jitter
        else:
            rtt = self.base_latency + jitter

        # Keep latency positive
        rtt = max(0.0001, rtt)

        if rtt > timeout:
            if self.delay:
                time.sleep(timeout)
            raise ProbeTimeout(f"no reply from {address} within {timeout:g}s")

        if self.delay:
            time.sleep(rtt)
        return rtt
