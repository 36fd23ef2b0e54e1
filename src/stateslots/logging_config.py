import logging
import os
from typing import Optional, Union

from .settings import ENV_LOG_LEVEL


def configure_logging(level: Optional[Union[int, str]] = None) -> None:
    """Configure the root logger with a stream handler and a sane default format.

    Respects STATESLOTS_LOG_LEVEL when ``level`` is not given. Intended for
    applications and the CLI; the library itself only creates module loggers.
    """
    if level is None:
        level = os.getenv(ENV_LOG_LEVEL, "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"))

    root = logging.getLogger()
    root.setLevel(level)
    # Remove existing handlers to avoid duplicates on repeated calls
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
