# geonft/utils/logging.py
from __future__ import annotations

import logging
import sys

_ROOT = "geonft"
_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a logger living under the ``geonft`` namespace."""
    if name != _ROOT and not name.startswith(_ROOT + "."):
        name = f"{_ROOT}.{name}"
    return logging.getLogger(name)


def setup_logging(verbose: int = 0) -> None:
    """
    Configure the ``geonft`` logger for CLI use.

    0 -> WARNING, 1 -> INFO, 2 or more -> DEBUG (per-subnet merge tracing).
    Calling it again replaces the handler installed by the previous call.
    """
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logger = logging.getLogger(_ROOT)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if getattr(handler, "_geonft_cli", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._geonft_cli = True
    logger.addHandler(handler)
