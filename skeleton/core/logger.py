import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send every log record to stdout at the given level. Safe to call again with a new level."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)

    stdout = logging.StreamHandler(sys.stdout)
    stdout.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(stdout)
    root.setLevel(level.upper())

    # AccessLogMiddleware writes the request lines
    logging.getLogger("uvicorn.access").disabled = True
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
