"""Entry point for the inhealth exporter."""

import logging
import sys

from PySide6.QtCore import QCoreApplication

from inhealth.cancellation import CancellationToken, install_signal_handlers
from inhealth.config import Settings
from inhealth.logging_config import configure_logging
from inhealth.supervisor import Supervisor

logger = logging.getLogger(__name__)


def main() -> int:
    """Monitor connectivity health using ICMP pings.

    Both the cancellation path and unexpected errors log and return 0.
    """
    configure_logging()

    try:
        settings = Settings.from_env()
        logger.info(
            "Starting inhealth: hosts=%s, port=%d, prober=%s",
            ", ".join(settings.hosts),
            settings.port,
            settings.prober,
        )

        app = QCoreApplication.instance() or QCoreApplication(sys.argv)
        app.setApplicationName("inhealth")

        token = CancellationToken()
        install_signal_handlers(token)

        Supervisor(settings, app=app, cancel_token=token).run()
    except Exception:
        logger.exception("ERROR: inhealth terminated unexpectedly")

    return 0


if __name__ == "__main__":
    sys.exit(main())
