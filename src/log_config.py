import logging
import os
import sys


LOG_DIR = os.environ.get(
    "NIGHT_WATCH_LOG_DIR", os.path.join(os.path.dirname(__file__), "..", "logs")
)

LOG_FORMAT = "%(asctime)s | %(name)-18s | %(levelname)-7s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(name: str, level: int = logging.DEBUG, log_dir: str | None = None) -> logging.Logger:
    """Configure logging with console + file output.

    Each process gets its own log file (e.g. logs/app.log for the "app" logger).
    Console shows INFO+ on stderr so JSON written to stdout stays clean,
    file captures DEBUG+.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    # Console handler: INFO and above
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console)

    # File handler: DEBUG and above
    log_dir = log_dir or LOG_DIR
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, f"{name}.log")
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(file_handler)

    return logger
