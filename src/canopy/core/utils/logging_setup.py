from __future__ import annotations

import logging
import sys
from pathlib import Path

_PACKAGE_LOGGER = "canopy"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_CONFIGURED_TARGET: str | None = None
_CANOPY_HANDLER: logging.Handler | None = None


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(*, level: str = "WARNING", log_path: Path | None = None) -> logging.Logger:
    """Attach a single canopy-owned handler to the ``canopy`` logger.

    Logs go to ``log_path`` when given, otherwise to stderr. Calling again with
    the same target only adjusts the level; a new target replaces the handler.
    """
    global _CONFIGURED_TARGET, _CANOPY_HANDLER

    logger = logging.getLogger(_PACKAGE_LOGGER)
    logger.setLevel(_level_from_name(level))

    target = str(Path(log_path).resolve()) if log_path is not None else "<stderr>"
    if _CONFIGURED_TARGET == target and _CANOPY_HANDLER is not None:
        _CANOPY_HANDLER.setLevel(_level_from_name(level))
        return logger

    if _CANOPY_HANDLER is not None:
        logger.removeHandler(_CANOPY_HANDLER)
        _CANOPY_HANDLER.close()
        _CANOPY_HANDLER = None

    if log_path is not None:
        Path(target).parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(target, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_level_from_name(level))
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)

    _CANOPY_HANDLER = handler
    _CONFIGURED_TARGET = target
    return logger


def reset_logging_for_tests() -> None:
    """Test-only: drop the canopy handler and restore the default level."""
    global _CONFIGURED_TARGET, _CANOPY_HANDLER
    logger = logging.getLogger(_PACKAGE_LOGGER)
    if _CANOPY_HANDLER is not None:
        logger.removeHandler(_CANOPY_HANDLER)
        _CANOPY_HANDLER.close()
    logger.setLevel(logging.NOTSET)
    _CONFIGURED_TARGET = None
    _CANOPY_HANDLER = None


__all__ = ["configure_logging", "reset_logging_for_tests"]
