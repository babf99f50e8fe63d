"""Tests for inhealth.cancellation."""

import os
import signal

import pytest
from PySide6.QtCore import QCoreApplication

from inhealth.cancellation import CancellationToken, install_signal_handlers


@pytest.fixture(scope="module")
def app():
    """Create QCoreApplication instance for tests."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


class TestCancellationToken:
    def test_initial_state(self, app):
        assert not CancellationToken().is_cancelled

    def test_cancel_emits_once(self, app):
        token = CancellationToken()
        emitted = []
        token.cancelled.connect(lambda: emitted.append(True))

        token.cancel()
        token.cancel()

        assert token.is_cancelled
        assert emitted == [True]


class TestInstallSignalHandlers:
    def test_signal_cancels_token(self, app):
        token = CancellationToken()
        previous = install_signal_handlers(token, signals=(signal.SIGUSR1,))
        try:
            os.kill(os.getpid(), signal.SIGUSR1)
            assert token.is_cancelled
        finally:
            for signum, handler in previous.items():
                signal.signal(signum, handler)

    def test_returns_previous_handlers(self, app):
        original = signal.getsignal(signal.SIGUSR2)
        previous = install_signal_handlers(CancellationToken(), signals=(signal.SIGUSR2,))
        try:
            assert previous == {signal.SIGUSR2: original}
        finally:
            signal.signal(signal.SIGUSR2, original)
