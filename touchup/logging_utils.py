import logging
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(*, debug: bool = False, log_path: Optional[str] = None) -> None:
    """Configure app-wide logging.

    - Console output at INFO (DEBUG when *debug* is set)
    - Optionally a rotating log file at *log_path*
    """
    level = logging.DEBUG if debug else logging.INFO
    root = logging.getLogger()
    root.setLevel(level)

    # Avoid duplicating handlers if called more than once.
    if getattr(root, "_touchup_configured", False):
        return

    fmt = logging.Formatter(LOG_FORMAT)
    console = logging.StreamHandler()
    console.setFormatter(fmt)
    root.addHandler(console)

    if log_path:
        file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3,
                                           encoding="utf-8")
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    setattr(root, "_touchup_configured", True)
