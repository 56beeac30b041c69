# =============================================================================
# Logging Setup
# =============================================================================
#
# Modules log through `logging.getLogger(__name__)`; this module only wires
# handlers onto the root logger:
#
#   console      — every record at settings.log_level and above
#   combined.log — same records, rotated at log_max_bytes
#   error.log    — ERROR and above, rotated at log_max_bytes
#
# File handlers are skipped when settings.log_dir is None.
# =============================================================================

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from earnings_qa.config import Settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Marks handlers installed here so repeated calls replace rather than stack.
_HANDLER_TAG = "_earnings_qa_handler"


def configure_logging(settings: Settings) -> None:
    """Install console and rotating file handlers on the root logger."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root.removeHandler(handler)
            handler.close()

    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    root.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        handlers.append(RotatingFileHandler(
            log_dir / "combined.log",
            maxBytes=settings.log_max_bytes,
            backupCount=settings.log_backup_count,
            encoding="utf-8",
        ))

        error_handler = RotatingFileHandler(
            log_dir / "error.log",
            maxBytes=settings.log_max_bytes,
            backupCount=settings.log_backup_count,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        handlers.append(error_handler)

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_TAG, True)
        root.addHandler(handler)

    # httpx logs every request URL at INFO, which would leak the FMP apikey.
    logging.getLogger("httpx").setLevel(logging.WARNING)
