"""
Configuration loading (YAML layers + environment overrides).

Sources, highest priority first:
1. Environment variables: CANOPY_<section>__<key>
2. Project file: explicit ``path`` argument, else $CANOPY_CONFIG_FILE
3. Bundled defaults: canopy.data/config/defaults.yaml
"""
from __future__ import annotations

import copy
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import jsonschema
import yaml

from canopy.core.exceptions import ConfigError
from canopy.core.utils.merge import deep_merge
from canopy.data import read_yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "CANOPY_"
CONFIG_FILE_ENV = "CANOPY_CONFIG_FILE"


class ConfigManager:
    """Load, merge, and validate canopy configuration."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        self._environ = os.environ if environ is None else environ

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        path = Path(path)
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}", context={"path": str(path)})
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}", context={"path": str(path)}) from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping", context={"path": str(path)})
        return data

    # ---------- environment overrides ----------

    def _coerce_type(self, value: str) -> Any:
        s = value.strip()
        low = s.lower()
        if low in {"true", "false"}:
            return low == "true"
        if low in {"null", "none"}:
            return None
        if re.fullmatch(r"[-+]?\d+", s):
            return int(s)
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return s
        return s

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(self._environ.keys()):
            if not key.startswith(ENV_PREFIX) or key == CONFIG_FILE_ENV:
                continue
            raw = key[len(ENV_PREFIX):]
            segments = raw.split("__")
            if not raw or any(seg == "" for seg in segments):
                raise ConfigError(
                    f"Malformed {ENV_PREFIX}* key: empty segment in '{key}'.",
                    context={"key": key},
                )
            yield segments, self._coerce_type(self._environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        # Env var names lose their case, so match existing keys case-insensitively.
        cur = root
        for i, part in enumerate(path):
            existing = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
            key = existing.get(part.lower(), part)
            if i == len(path) - 1:
                cur[key] = value
                return
            nxt = cur.setdefault(key, {})
            if not isinstance(nxt, dict):
                raise ConfigError(
                    f"Environment override {'__'.join(path)} traverses a non-mapping value",
                    context={"path": path},
                )
            cur = nxt

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> Dict[str, Any]:
        for path, value in self._iter_env_overrides():
            logger.debug("Config override from environment: %s=%r", "__".join(path), value)
            self._set_nested(cfg, path, value)
        return cfg

    # ---------- validation ----------

    def validate(self, cfg: Dict[str, Any]) -> None:
        schema = read_yaml("schemas", "config.schema.yaml")
        validator = jsonschema.Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(cfg), key=lambda e: list(e.path))
        if errors:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err.path) or '<root>'}: {err.message}" for err in errors
            )
            raise ConfigError(f"Invalid configuration: {details}", context={"errors": details})

    # ---------- entry point ----------

    def load_config(self, path: Optional[Path] = None, *, validate: bool = True) -> Dict[str, Any]:
        cfg = copy.deepcopy(read_yaml("config", "defaults.yaml") or {})

        project_file = path or self._environ.get(CONFIG_FILE_ENV)
        if project_file:
            cfg = deep_merge(cfg, self.load_yaml(Path(project_file)))

        self.apply_env_overrides(cfg)
        if validate:
            self.validate(cfg)
        return cfg


def load_config(path: Optional[Path] = None, *, validate: bool = True) -> Dict[str, Any]:
    """Convenience wrapper around ConfigManager().load_config()."""
    return ConfigManager().load_config(path, validate=validate)


__all__ = ["ConfigManager", "load_config", "ENV_PREFIX", "CONFIG_FILE_ENV"]
