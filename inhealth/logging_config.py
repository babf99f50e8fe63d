"""Logging setup for the inhealth exporter."""

import logging
import os
import sys

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Per-attempt log lines (tick dispatch, probe results and failures)
PROBE_LOGGERS = ("inhealth.workers", "inhealth.monitor")

# Library loggers that only add noise at a probe every second
QUIET_LOGGERS = ("prometheus_client", "wsgiref")


def _level(environ, name: str, default: int | None) -> int | None:
    value = environ.get(name)
    if value is None:
        return default
    return LEVELS.get(value.strip().upper(), default)


def configure_logging(environ=None) -> None:
    """Send inhealth logs to stderr.

    INHEALTH_LOG_LEVEL sets the overall level (default INFO, unknown values
    fall back to INFO). INHEALTH_PROBE_LOG_LEVEL sets the level of the
    per-attempt loggers on its own, so a one-probe-a-second DEBUG trace can be
    turned on without the rest, or probe failure WARNINGs silenced with
    ``INHEALTH_PROBE_LOG_LEVEL=ERROR``.
    """
    if environ is None:
        environ = os.environ

    level = _level(environ, "INHEALTH_LOG_LEVEL", logging.INFO)
    probe_level = _level(environ, "INHEALTH_PROBE_LOG_LEVEL", None)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )

    for name in PROBE_LOGGERS:
        # NOTSET defers to the overall level
        logging.getLogger(name).setLevel(probe_level if probe_level is not None else logging.NOTSET)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.getLogger(__name__).info(
        "Logging configured: level=%s, probe level=%s",
        logging.getLevelName(level),
        logging.getLevelName(probe_level) if probe_level is not None else "inherited",
    )
