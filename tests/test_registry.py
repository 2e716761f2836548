from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from follow_rotator.codec import PLATFORM_CODES
from follow_rotator.models import DEFAULT_ITEMS, TimingConfig

SAMPLE_PATH = Path(__file__).resolve().parents[1] / "config" / "platforms.sample.json"


def test_builtin_registry_matches_codec_table(clean_registry) -> None:
    platforms = clean_registry.builtin_registry()

    assert list(platforms) == list(PLATFORM_CODES)
    assert platforms["discord"].cta.text == "Join"
    assert platforms["youtube"].cta.text == "Subscribe"
    assert platforms["tiktok"].text_color == "#ffffff"


def test_registry_is_read_only(clean_registry) -> None:
    platforms = clean_registry.builtin_registry()

    with pytest.raises(TypeError):
        platforms["x"] = platforms["tiktok"]  # type: ignore[index]


def test_get_registry_without_file_uses_builtins(clean_registry) -> None:
    assert list(clean_registry.get_registry()) == list(PLATFORM_CODES)
    assert clean_registry.get_defaults().items == DEFAULT_ITEMS
    assert clean_registry.get_defaults().timing == TimingConfig()


def test_get_registry_loads_file_from_env(clean_registry, monkeypatch) -> None:
    monkeypatch.setenv(clean_registry.REGISTRY_ENV_VAR, str(SAMPLE_PATH))
    clean_registry.reset_cache()

    assert list(clean_registry.get_registry()) == ["tiktok", "twitch", "kick"]
    assert clean_registry.get_defaults().timing.hold_ms == 6000


def test_get_registry_falls_back_on_invalid_file(
    clean_registry, monkeypatch, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    bad = tmp_path / "platforms.json"
    bad.write_text(json.dumps({"platforms": "nope"}), encoding="utf-8")
    monkeypatch.setenv(clean_registry.REGISTRY_ENV_VAR, str(bad))
    clean_registry.reset_cache()

    with caplog.at_level(logging.WARNING):
        platforms = clean_registry.get_registry()

    assert list(platforms) == list(PLATFORM_CODES)
    assert "Falling back to built-in platforms" in caplog.text


def test_get_registry_falls_back_on_undecodable_file(
    clean_registry, monkeypatch, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    bad = tmp_path / "platforms.json"
    bad.write_bytes(b"\xff\xfe\x00garbage")
    monkeypatch.setenv(clean_registry.REGISTRY_ENV_VAR, str(bad))
    clean_registry.reset_cache()

    with caplog.at_level(logging.WARNING):
        platforms = clean_registry.get_registry()

    assert list(platforms) == list(PLATFORM_CODES)
    assert "Falling back to built-in platforms" in caplog.text


def test_registry_is_cached(clean_registry) -> None:
    assert clean_registry.get_registry() is clean_registry.get_registry()


def test_resolve_asset(clean_registry, tmp_path: Path) -> None:
    assert clean_registry.resolve_asset("icons/a.png") == (
        clean_registry.assets_dir() / "icons" / "a.png"
    )
    absolute = tmp_path / "icon.png"
    assert clean_registry.resolve_asset(str(absolute)) == absolute
