# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Centralised logging configuration.

Handlers, formats and rotation live in etc/logging.conf.  Two settings can
override it per deployment:

* LOG_DIR    – where app.log is written (default: <project root>/log)
* LOG_LEVEL  – level of the ``canvas_ide`` logger (default: from the file)

Import the ready-made logger anywhere:
    from core.logger import logger
"""

import configparser as _cp
import logging
import logging.config
from pathlib import Path

from core.config import settings

# project root: backend/core/logger.py  →  ../../
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_LOGGING_CONF = _PROJECT_ROOT / "etc" / "logging.conf"

LOGGER_NAME = "canvas_ide"


def _log_file() -> Path:
    log_dir = Path(settings.log_dir) if settings.log_dir else _PROJECT_ROOT / "log"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "app.log"


def configure_logging() -> logging.Logger:
    """
    Apply etc/logging.conf.  The file carries ``%(log_file)s`` as a
    placeholder for the absolute log path, so it is patched in before the
    text reaches the parser.
    """
    raw = _LOGGING_CONF.read_text(encoding="utf-8")
    raw = raw.replace("%(log_file)s", _log_file().as_posix())

    # RawConfigParser: the format strings contain %(asctime)s etc.
    parser = _cp.RawConfigParser()
    parser.read_string(raw)
    logging.config.fileConfig(parser, disable_existing_loggers=False)

    app_logger = logging.getLogger(LOGGER_NAME)
    if settings.log_level:
        app_logger.setLevel(settings.log_level.upper())
    return app_logger


logger = configure_logging()
