"""Logger factory shared by the API client and dashboard layers."""

from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = 'IRRBB_LOG_LEVEL'
_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'
_configured = False


def _configure_root() -> None:
    global _configured
    if _configured:
        return
    level_name = str(os.environ.get(LOG_LEVEL_ENV, 'INFO')).strip().upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format=_FORMAT)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring the root handler on first use."""
    _configure_root()
    return logging.getLogger(name)
