"""YAML config loader with runtime get/set by dotted key."""

import json
from pathlib import Path
from typing import Any

import yaml

from cityweather.config.defaults import DEFAULT_CITIES
from cityweather.config.schema import AppConfig


def load_config(path: str | Path) -> AppConfig:
    """Load and validate an AppConfig from YAML.

    An empty or missing ``cities`` list seeds the registry with
    DEFAULT_CITIES, so ``ops/configs/default.yaml`` yields the ten
    built-in French cities.
    """
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    if not raw.get("cities"):
        raw["cities"] = [c.model_dump() for c in DEFAULT_CITIES]

    return AppConfig(**raw)


def get_config_value(config: AppConfig, dotted_key: str) -> Any:
    """Read a value by dotted key; list items are addressed by index.

    >>> get_config_value(config, "storage.db_path")
    'data/weather.db'
    >>> get_config_value(config, "cities.3.name")
    'Lyon'
    """
    obj: Any = config
    for part in dotted_key.split("."):
        if isinstance(obj, list):
            obj = obj[int(part)]
        elif hasattr(obj, part):
            obj = getattr(obj, part)
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj


def set_config_value(config: AppConfig, dotted_key: str, value: Any) -> AppConfig:
    """Return a re-validated copy with one value replaced.

    String values from the CLI are coerced to the type of the value they
    replace, so ``set_config_value(config, "forecast.window_days", "3")``
    stores the int 3, and a window of "0" fails validation.
    """
    data = json.loads(config.model_dump_json())
    parts = dotted_key.split(".")
    target = data
    for part in parts[:-1]:
        target = target[int(part)] if isinstance(target, list) else target[part]
    old_value = target.get(parts[-1])
    if isinstance(old_value, bool) and isinstance(value, str):
        value = value.lower() in ("1", "true", "yes", "on")
    elif isinstance(old_value, int) and isinstance(value, str):
        value = int(value)
    elif isinstance(old_value, float) and isinstance(value, str):
        value = float(value)
    target[parts[-1]] = value
    return AppConfig(**data)
