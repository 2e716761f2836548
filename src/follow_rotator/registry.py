"""Platform registry for the Follow Rotator overlay."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

from .config_loader import ConfigError, default_registry_path, load_registry
from .models import CallToAction, Platform, PlatformRegistry, ResolvedDefaults

_LOGGER = logging.getLogger(__name__)
_ASSETS_DIR = Path(__file__).resolve().parents[2] / "assets"

REGISTRY_ENV_VAR = "FOLLOW_ROTATOR_REGISTRY"

_HEART_ICON = "icons/icons8-heart-90-white.png"
_GLASS = "rgba(0, 0, 0, 0.4)"

_CACHED_REGISTRY: PlatformRegistry | None = None
_CACHED_DEFAULTS: ResolvedDefaults | None = None


def _cta(text: str, background: str) -> CallToAction:
    return CallToAction(text=text, background=background, icon=_HEART_ICON)


def builtin_platforms() -> List[Platform]:
    """Return the platforms bundled with the overlay, in display order."""

    return [
        Platform(
            id="tiktok",
            name="TikTok",
            icon="icons/icons8-tiktok-480.png",
            background=_GLASS,
            text_color="#ffffff",
            cta=_cta("Follow", _GLASS),
        ),
        Platform(
            id="discord",
            name="Discord",
            icon="icons/icons8-discord-480.png",
            background="#ffffff",
            cta=_cta("Join", "#5865F2"),
        ),
        Platform(
            id="youtube",
            name="YouTube",
            icon="icons/icons8-youtube-480.png",
            background="#ffffff",
            cta=_cta("Subscribe", "#dc2626"),
        ),
        Platform(
            id="twitch",
            name="Twitch",
            icon="icons/icons8-twitch-480.png",
            background="#ffffff",
            cta=_cta("Follow", "#9146FF"),
        ),
        Platform(
            id="facebook",
            name="Facebook",
            icon="icons/icons8-facebook-480.png",
            background="#ffffff",
            cta=_cta("Follow", "#1877F2"),
        ),
        Platform(
            id="instagram",
            name="Instagram",
            icon="icons/icons8-instagram-480.png",
            background="#ffffff",
            cta=_cta(
                "Follow",
                "qlineargradient(x1:0, y1:0, x2:1, y2:0, "
                "stop:0 #ec4899, stop:1 #9333ea)",
            ),
        ),
        Platform(
            id="x",
            name="X",
            icon="icons/icons8-x-480.png",
            background="#ffffff",
            cta=_cta("Follow", "#000000"),
        ),
    ]


def builtin_registry() -> PlatformRegistry:
    return PlatformRegistry(builtin_platforms())


def _registry_path() -> Path:
    override = os.environ.get(REGISTRY_ENV_VAR)
    return Path(override) if override else default_registry_path()


def _load_registry_cached() -> Tuple[PlatformRegistry, ResolvedDefaults]:
    global _CACHED_REGISTRY, _CACHED_DEFAULTS
    if _CACHED_REGISTRY is not None and _CACHED_DEFAULTS is not None:
        return _CACHED_REGISTRY, _CACHED_DEFAULTS

    path = _registry_path()
    registry: Optional[PlatformRegistry] = None
    defaults: Optional[ResolvedDefaults] = None
    if path.is_file():
        try:
            registry, defaults = load_registry(path)
        except ConfigError as exc:
            _LOGGER.warning("Falling back to built-in platforms: %s", exc)
    else:
        _LOGGER.debug("No registry file at %s; using built-in platforms", path)

    _CACHED_REGISTRY = registry or builtin_registry()
    _CACHED_DEFAULTS = defaults or ResolvedDefaults()
    return _CACHED_REGISTRY, _CACHED_DEFAULTS


def get_registry() -> PlatformRegistry:
    """Return the active platform registry (file-backed or built-in)."""
    registry, _ = _load_registry_cached()
    return registry


def get_defaults() -> ResolvedDefaults:
    """Return the fallback items and timing for the resolver."""
    _, defaults = _load_registry_cached()
    return defaults


def reset_cache() -> None:
    """Forget the cached registry so the next lookup reloads it."""

    global _CACHED_REGISTRY, _CACHED_DEFAULTS
    _CACHED_REGISTRY = None
    _CACHED_DEFAULTS = None


def assets_dir() -> Path:
    """Return the canonical location for icon assets."""

    return _ASSETS_DIR


def resolve_asset(relative: str) -> Path:
    """Resolve an icon path from the registry against the assets directory."""

    path = Path(relative)
    return path if path.is_absolute() else _ASSETS_DIR / path
