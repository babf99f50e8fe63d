"""Tests for inhealth.logging_config."""

import logging

import pytest

from inhealth.logging_config import PROBE_LOGGERS, QUIET_LOGGERS, configure_logging


@pytest.fixture
def restore_loggers():
    """Put the root and touched loggers back the way pytest configured them."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    named = {name: logging.getLogger(name).level for name in PROBE_LOGGERS + QUIET_LOGGERS}
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, named_level in named.items():
        logging.getLogger(name).setLevel(named_level)


class TestConfigureLogging:
    def test_default_level_is_info(self, restore_loggers):
        configure_logging({})
        assert restore_loggers.level == logging.INFO

    def test_reads_os_environ_by_default(self, monkeypatch, restore_loggers):
        monkeypatch.setenv("INHEALTH_LOG_LEVEL", "ERROR")
        configure_logging()
        assert restore_loggers.level == logging.ERROR

    def test_level_is_case_insensitive(self, restore_loggers):
        configure_logging({"INHEALTH_LOG_LEVEL": "debug"})
        assert restore_loggers.level == logging.DEBUG

    def test_invalid_level_falls_back_to_info(self, restore_loggers):
        configure_logging({"INHEALTH_LOG_LEVEL": "INVALID"})
        assert restore_loggers.level == logging.INFO

    def test_replaces_existing_handlers(self, restore_loggers):
        stale = logging.NullHandler()
        restore_loggers.addHandler(stale)

        configure_logging({"INHEALTH_LOG_LEVEL": "WARNING"})

        assert stale not in restore_loggers.handlers
        assert len(restore_loggers.handlers) == 1


class TestProbeLogLevel:
    """Per-attempt logging is tuned apart from everything else."""

    def test_probe_loggers_inherit_by_default(self, restore_loggers):
        configure_logging({"INHEALTH_LOG_LEVEL": "INFO"})

        for name in PROBE_LOGGERS:
            assert logging.getLogger(name).level == logging.NOTSET
            assert logging.getLogger(name).getEffectiveLevel() == logging.INFO

    def test_probe_debug_without_global_debug(self, restore_loggers):
        configure_logging({"INHEALTH_LOG_LEVEL": "INFO", "INHEALTH_PROBE_LOG_LEVEL": "DEBUG"})

        assert logging.getLogger("inhealth.workers").isEnabledFor(logging.DEBUG)
        assert not logging.getLogger("inhealth.supervisor").isEnabledFor(logging.DEBUG)

    def test_probe_failures_silenced(self, restore_loggers):
        configure_logging({"INHEALTH_LOG_LEVEL": "INFO", "INHEALTH_PROBE_LOG_LEVEL": "ERROR"})

        assert not logging.getLogger("inhealth.workers").isEnabledFor(logging.WARNING)
        assert logging.getLogger("inhealth.supervisor").isEnabledFor(logging.WARNING)

    def test_library_loggers_quiet_even_at_debug(self, restore_loggers):
        configure_logging({"INHEALTH_LOG_LEVEL": "DEBUG"})

        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
