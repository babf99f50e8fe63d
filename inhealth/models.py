"""Data models for inhealth probing."""

from dataclasses import dataclass
from enum import Enum


class MonitorState(Enum):
    """Lifecycle of a single host monitor."""

    IDLE = "idle"
    RESOLVING = "resolving"
    RUNNING = "running"
    STOPPED = "stopped"
    FAILED = "failed"  # terminal, resolution is never retried


@dataclass
class ProbeOutcome:
    """The result of one probe attempt, folded into metrics right away."""

    host: str
    sequence: int
    rtt_seconds: float | None  # None indicates no reply
    error: str | None = None

    def __post_init__(self):
        """Ensure exactly one of rtt_seconds and error is set."""
        if self.error is not None:
            self.rtt_seconds = None
        elif self.rtt_seconds is None:
            self.error = "no reply"

    @property
    def ok(self) -> bool:
        return self.rtt_seconds is not None
