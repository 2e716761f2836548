"""Utilities for loading the platform registry from JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Tuple

import jsonschema

from .models import (
    CallToAction,
    Platform,
    PlatformRegistry,
    ResolvedDefaults,
    TimingConfig,
    build_items,
)
from .schemas import REGISTRY_SCHEMA

_LOGGER = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when the registry file cannot be loaded or validated."""


def _repository_root() -> Path:
    return Path(__file__).resolve().parents[2]


def default_registry_path() -> Path:
    return _repository_root() / "config" / "platforms.json"


def load_registry(
    config_path: Optional[Path] = None,
    *,
    schema_path: Optional[Path] = None,
) -> Tuple[PlatformRegistry, Optional[ResolvedDefaults]]:
    """Load a platform registry and optional overlay defaults from JSON.

    Args:
        config_path: Registry file; defaults to ``config/platforms.json`` at
            the repository root.
        schema_path: Optional JSON schema file replacing the bundled schema.

    Raises:
        ConfigError: The file is missing, is not JSON, or fails validation.
    """

    cfg_path = config_path or default_registry_path()
    try:
        data = json.loads(cfg_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(f"Registry file {cfg_path} is missing") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Registry file {cfg_path} is not valid JSON: {exc}") from exc
    except (UnicodeDecodeError, OSError) as exc:
        raise ConfigError(f"Registry file {cfg_path} could not be read: {exc}") from exc

    _validate_config(data, schema_path)
    registry, defaults = _hydrate_config(data)
    _LOGGER.info("Loaded %d platforms from %s", len(registry), cfg_path)
    return registry, defaults


def _load_schema(schema_path: Optional[Path]) -> dict:
    if schema_path is None:
        return REGISTRY_SCHEMA
    try:
        return json.loads(schema_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(f"Schema file {schema_path} is missing") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(
            f"Schema file {schema_path} is not valid JSON: {exc}"
        ) from exc


def _validate_config(data: dict, schema_path: Optional[Path]) -> None:
    schema = _load_schema(schema_path)
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as exc:
        raise ConfigError(f"Registry validation error: {exc.message}") from exc


def _hydrate_config(
    data: dict,
) -> Tuple[PlatformRegistry, Optional[ResolvedDefaults]]:
    platforms = []
    for raw in data["platforms"]:
        cta_raw = raw["cta"]
        platforms.append(
            Platform(
                id=raw["id"],
                name=raw["name"],
                icon=raw["icon"],
                background=raw["background"],
                text_color=raw.get("text_color", "#000000"),
                cta=CallToAction(
                    text=cta_raw["text"],
                    background=cta_raw["background"],
                    text_color=cta_raw.get("text_color", "#ffffff"),
                    icon=cta_raw.get("icon"),
                ),
            )
        )
    try:
        registry = PlatformRegistry(platforms)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    defaults: Optional[ResolvedDefaults] = None
    if isinstance(data.get("defaults"), dict):
        d = data["defaults"]
        timing = TimingConfig().merged(
            hold_ms=d.get("hold_ms"),
            anim_in_ms=d.get("anim_in_ms"),
            anim_out_ms=d.get("anim_out_ms"),
        )
        if "items" in d:
            items = build_items((i["platform"], i["text"]) for i in d["items"])
            if not items:
                raise ConfigError("Registry defaults list no item with text")
            defaults = ResolvedDefaults(items=tuple(items), timing=timing)
        else:
            defaults = ResolvedDefaults(timing=timing)
    return registry, defaults
