import logging
import sys


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Install a single stream handler on the package logger."""
    log = logging.getLogger("face_auth")
    log.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    # Avoid duplicate handlers when called twice (CLI + API startup)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
    return log
