import logging
from colorlog import ColoredFormatter
from app.core.settings import settings

LOGGER_NAME = "user_console"

LOG_FORMAT = (
    "%(log_color)s[%(asctime)s] [%(levelname)-8s] "
    "%(reset)s%(blue)s%(name)s:%(reset)s %(message)s"
)

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def build_handler() -> logging.Handler:
    """Stream handler with the colored console format."""
    handler = logging.StreamHandler()
    handler.setFormatter(
        ColoredFormatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S", reset=True, log_colors=LOG_COLORS)
    )
    return handler


def configure_logging(level: str) -> logging.Logger:
    """Apply `level` to the console logger and attach the colored handler once."""
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(level.upper())
    if not root.handlers:
        root.addHandler(build_handler())
    root.propagate = False
    return root


logger = configure_logging(settings.LOG_LEVEL)
