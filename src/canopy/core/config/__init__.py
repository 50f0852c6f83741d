"""Configuration: bundled YAML defaults, project file, CANOPY_* overrides."""
from __future__ import annotations

from .manager import ConfigManager, load_config
from .engine import EngineConfig

__all__ = ["ConfigManager", "load_config", "EngineConfig"]
