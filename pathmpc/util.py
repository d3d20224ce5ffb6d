import logging
import os
import sys
from datetime import datetime
from typing import List

LOG_FORMAT = "[%(threadName)-10.10s:%(name)-20.20s] [%(levelname)-6.6s]  %(message)s"

# Third-party loggers that flood DEBUG output while replaying telemetry.
QUIET_LOGGERS = ("matplotlib", "PIL")


def setup_logging(main_logger: logging.Logger = None,
                  debug: bool = False,
                  log_path: str = None) -> List[logging.Handler]:
    """Route controller logs to stdout and optionally to ``<log_path>/<timestamp>.log``.

    Per-tick commands are logged at INFO by the telemetry handler; solver
    diagnostics (cost, first controls, curvatures) only appear with ``debug``.

    Returns:
        The handlers added to the root logger.
    """
    if log_path and not os.path.isdir(log_path):
        raise FileNotFoundError(f"Logging path {log_path} does not exist.")

    level = logging.DEBUG if debug else logging.INFO
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler(stream=sys.stdout)]
    if log_path:
        stamp = datetime.today().strftime('%Y%m%d_%H%M%S')
        handlers.append(logging.FileHandler(os.path.join(log_path, f"mpc_{stamp}.log")))

    root_logger = logging.getLogger("")
    root_logger.setLevel(level)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logging.getLogger("pathmpc").setLevel(level)
    if main_logger is not None:
        main_logger.setLevel(level)
    return handlers
