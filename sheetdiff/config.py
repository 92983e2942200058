from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigurationError
from .models import Config

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"


def load_config(path: Optional[str] = None) -> Config:
    """Load a YAML config; a missing default ``config.yaml`` yields ``{}``."""
    target = path or DEFAULT_CONFIG_PATH
    if path is None and not Path(target).exists():
        return {}
    try:
        with open(target, "r", encoding="utf-8") as file:
            data = yaml.safe_load(file) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot read config {target}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config {target} must be a mapping, got {type(data).__name__}")
    LOGGER.debug("Loaded config %s", target)
    return data


def excluded_fields(config: Config) -> List[str]:
    value = config.get("excluded_fields") or []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


def sort_options(config: Config) -> Dict[str, Any]:
    sort = config.get("sort") or {}
    return {"field": sort.get("field") or "", "ascending": bool(sort.get("ascending", True))}


def export_labels(config: Config) -> Dict[str, str]:
    return {str(k): str(v) for k, v in ((config.get("export") or {}).get("labels") or {}).items()}
