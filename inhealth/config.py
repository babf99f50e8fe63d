"""Startup configuration for inhealth, read from the environment."""

import os
import re
from dataclasses import dataclass

from inhealth.metrics import DEFAULT_PORT

# Fixed cadence; not configurable
PROBE_INTERVAL_MS = 1000
PROBE_TIMEOUT_MS = 1000

DEFAULT_HOSTS = ("1.0.0.1", "8.8.8.8", "icanhazip.com")

PROBER_CHOICES = ("icmp", "fake")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def parse_hosts(value: str) -> tuple[str, ...]:
    """Split a comma or whitespace separated host list.

    Blank entries are dropped and duplicates keep their first position.
    """
    hosts = []
    for host in re.split(r"[,\s]+", value):
        if host and host not in hosts:
            hosts.append(host)
    return tuple(hosts)


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


@dataclass(frozen=True)
class Settings:
    """Process settings.

    Environment Variables:
        INHEALTH_HOSTS: Hosts to monitor, comma or whitespace separated
        INHEALTH_PORT: Exposition port (default 9088)
        INHEALTH_LISTEN_ADDRESS: Exposition listen address (default 0.0.0.0)
        INHEALTH_PRIVILEGED: Use raw ICMP sockets (default true)
        INHEALTH_PROBER: "icmp" (default) or "fake" for simulated probes
    """

    hosts: tuple[str, ...] = DEFAULT_HOSTS
    port: int = DEFAULT_PORT
    listen_address: str = "0.0.0.0"
    privileged: bool = True
    prober: str = "icmp"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Build settings from environment variables.

        Raises:
            ValueError: if a variable holds an invalid value
        """
        if environ is None:
            environ = os.environ

        kwargs = {}

        if "INHEALTH_HOSTS" in environ:
            hosts = parse_hosts(environ["INHEALTH_HOSTS"])
            if not hosts:
                raise ValueError("INHEALTH_HOSTS must name at least one host")
            kwargs["hosts"] = hosts

        if "INHEALTH_PORT" in environ:
            try:
                port = int(environ["INHEALTH_PORT"])
            except ValueError:
                raise ValueError(
                    f"INHEALTH_PORT must be an integer, got {environ['INHEALTH_PORT']!r}"
                ) from None
            if not 0 <= port <= 65535:
                raise ValueError(f"INHEALTH_PORT out of range: {port}")
            kwargs["port"] = port

        if "INHEALTH_LISTEN_ADDRESS" in environ:
            kwargs["listen_address"] = environ["INHEALTH_LISTEN_ADDRESS"].strip()

        if "INHEALTH_PRIVILEGED" in environ:
            kwargs["privileged"] = _parse_bool(
                "INHEALTH_PRIVILEGED", environ["INHEALTH_PRIVILEGED"]
            )

        if "INHEALTH_PROBER" in environ:
            prober = environ["INHEALTH_PROBER"].strip().lower()
            if prober not in PROBER_CHOICES:
                raise ValueError(
                    f"INHEALTH_PROBER must be one of {', '.join(PROBER_CHOICES)}, got {prober!r}"
                )
            kwargs["prober"] = prober

        return cls(**kwargs)
