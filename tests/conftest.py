from __future__ import annotations

import os
import pathlib
import sys

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"

for path in (PROJECT_ROOT, SRC_ROOT):
    as_str = str(path)
    if as_str not in sys.path:
        sys.path.insert(0, as_str)

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture()
def clean_registry(monkeypatch, tmp_path):
    """Point the registry at an empty location and clear its cache."""

    from follow_rotator import registry

    monkeypatch.setenv(registry.REGISTRY_ENV_VAR, str(tmp_path / "absent.json"))
    registry.reset_cache()
    yield registry
    registry.reset_cache()
