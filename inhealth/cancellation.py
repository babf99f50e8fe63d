"""Process-wide cancellation shared by the supervisor and every monitor."""

import logging
import signal

from PySide6.QtCore import QObject, Signal

logger = logging.getLogger(__name__)


class CancellationToken(QObject):
    """A one-shot cancellation signal.

    ``cancel()`` may be called any number of times; ``cancelled`` is emitted
    only on the first call.
    """

    cancelled = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._cancelled = False

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self):
        if self._cancelled:
            return
        self._cancelled = True
        logger.info("Cancellation requested")
        self.cancelled.emit()


def install_signal_handlers(token: CancellationToken, signals=(signal.SIGINT, signal.SIGTERM)):
    """Cancel token when any of the given OS signals is delivered.

    Must be called from the main thread.

    Returns:
        Dict mapping each signal to its previous handler
    """

    def _handler(signum, frame):
        logger.info("Received signal %s", signal.Signals(signum).name)
        token.cancel()

    previous = {}
    for signum in signals:
        previous[signum] = signal.signal(signum, _handler)
    return previous
