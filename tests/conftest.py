"""Pytest configuration and test helpers."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest


# Ensure the application package is importable when running tests without an
# editable install. ``app`` sits at the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


def build_settings(**overrides: Any):
    """Return a settings object with defaults suitable for tests."""

    from app.config import Settings

    base: dict[str, Any] = {"KODIK_API_TOKEN": "test-token"}
    base.update(overrides)
    return Settings(_env_file=None, **base)  # type: ignore[arg-type]


def raw_material(
    material_id: str,
    title: str,
    *,
    kinopoisk_id: Any = None,
    translation: Any = None,
    **extra: Any,
) -> dict[str, Any]:
    """Return a Kodik-shaped raw material object."""

    payload: dict[str, Any] = {
        "id": material_id,
        "type": "anime-serial",
        "title": title,
        "year": 2020,
    }
    if kinopoisk_id is not None:
        payload["kinopoisk_id"] = kinopoisk_id
    if translation is not None:
        payload["translation"] = translation
    payload.update(extra)
    return payload
