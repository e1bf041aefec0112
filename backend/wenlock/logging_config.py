import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stderr handler on the root logger. Safe to call twice."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    if any(getattr(h, "_wenlock", False) for h in root_logger.handlers):
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._wenlock = True
    root_logger.addHandler(handler)

    # uvicorn's access log duplicates the request middleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
