"""Typed view over the ``engine`` and ``logging`` configuration sections."""
from __future__ import annotations

import logging
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from canopy.core.utils.logging_setup import configure_logging
from canopy.core.utils.merge import deep_merge

from .manager import ConfigManager


class EngineConfig:
    """Typed accessors for engine settings.

    Usage:
        cfg = EngineConfig()                      # defaults + environment
        cfg = EngineConfig.from_mapping({"engine": {"detectCycles": False}})
        bound = my_ruleset.against(doc, config=cfg)
    """

    def __init__(self, path: Optional[Path] = None, *, data: Optional[Dict[str, Any]] = None) -> None:
        self._config = data if data is not None else ConfigManager().load_config(path)

    @classmethod
    def from_mapping(cls, overrides: Mapping[str, Any]) -> "EngineConfig":
        """Build a config from bundled defaults plus ``overrides``, ignoring the environment."""
        manager = ConfigManager(environ={})
        data = deep_merge(manager.load_config(), overrides)
        manager.validate(data)
        return cls(data=data)

    @property
    def raw(self) -> Dict[str, Any]:
        return dict(self._config)

    @cached_property
    def engine(self) -> Dict[str, Any]:
        return self._config.get("engine", {}) or {}

    @cached_property
    def detect_cycles(self) -> bool:
        return bool(self.engine.get("detectCycles", True))

    @cached_property
    def default_score(self) -> float:
        return float(self.engine.get("defaultScore", 1.0))

    @cached_property
    def log_level(self) -> str:
        return str((self._config.get("logging") or {}).get("level", "WARNING")).upper()

    @cached_property
    def log_file(self) -> Optional[Path]:
        raw = (self._config.get("logging") or {}).get("file")
        return Path(raw) if raw else None

    def apply_logging(self) -> logging.Logger:
        """Install the canopy log handler described by the ``logging`` section."""
        return configure_logging(level=self.log_level, log_path=self.log_file)


__all__ = ["EngineConfig"]
