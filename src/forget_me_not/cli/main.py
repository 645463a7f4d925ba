# src/forget_me_not/cli/main.py

"""
fmn-daemon entrypoint.

Initializes logging, builds AppState (which starts the scheduler thread),
then serves client requests from a background thread until SIGINT/SIGTERM.
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..daemon.server import DaemonServer, start_server_in_background
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = settings.log_level.upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s daemon...", settings.app_name)

    state = create_initial_state(settings=settings)

    try:
        server = DaemonServer((settings.daemon_host, settings.daemon_port), state)
    except OSError:
        logger.exception("Cannot listen on %s", settings.daemon_addr)
        state.scheduler.close()
        raise SystemExit(1)

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError, AttributeError):
        # Some platforms may not support SIGTERM, etc.
        logger.debug("Signal handlers not installed.", exc_info=True)

    server_thread = start_server_in_background(server)
    try:
        stop_main.wait()
    finally:
        server.shutdown()
        server.server_close()
        server_thread.join(timeout=5.0)

        state.scheduler.close()
        logger.info("Bye.")


if __name__ == "__main__":
    main()
