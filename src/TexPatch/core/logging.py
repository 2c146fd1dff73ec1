"""Console and log-file handlers for the ``texpatch`` logger."""

import logging
import logging.handlers
import os
from typing import Optional

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _owned(handler: logging.Handler) -> bool:
    return getattr(handler, "_texpatch_owned", False)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Route ``texpatch`` records to stderr and, optionally, a rotating log file.

    Only the ``texpatch`` logger is configured; the root logger is left to
    whoever embeds the editor. Calling this again replaces the handlers a
    previous call installed, so the CLI can reconfigure after loading its
    config without duplicating output.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level '{level}'")

    editor_logger = logging.getLogger("texpatch")
    for handler in [h for h in editor_logger.handlers if _owned(h)]:
        editor_logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handlers = [console]
    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=5 * 1024 * 1024, backupCount=2, encoding="utf-8",
        )
        rotating.setFormatter(logging.Formatter(FILE_FORMAT))
        handlers.append(rotating)

    for handler in handlers:
        handler._texpatch_owned = True
        editor_logger.addHandler(handler)
    editor_logger.setLevel(numeric_level)
    # cli.main also configures the root logger; records stop here.
    editor_logger.propagate = False
    editor_logger.debug("Logging at %s%s", level.upper(),
                        f", file {log_file}" if log_file else "")
    return editor_logger
