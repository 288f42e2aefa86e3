from __future__ import annotations

from typing import Iterable

import pytest

from datastore.sensor_registry import build_default_registry
from services.analyzer import build_default_service
from settings import get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


CACHES = (get_settings, build_default_registry, build_default_service)


@pytest.fixture(autouse=True)
def _reset_caches() -> Iterable[None]:
    _clear_caches(CACHES)
    yield
    _clear_caches(CACHES)


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    registry_path = tmp_path / "sensors.json"

    monkeypatch.setenv("SENSOR_REGISTRY_PATH", str(registry_path))
    monkeypatch.setenv("TREND_WINDOW", "14")
    monkeypatch.setenv("LOG_LEVEL", " debug ")

    service = build_default_service()

    assert service.registry.persistence_path == registry_path
    assert service.scorer.trend_window == 14
    assert get_settings().log_level == "DEBUG"


@pytest.mark.parametrize("raw", ["", "abc", "1", "-3"])
def test_invalid_trend_window_falls_back(monkeypatch, raw: str) -> None:
    monkeypatch.setenv("TREND_WINDOW", raw)

    assert get_settings().trend_window == 7


def test_defaults(monkeypatch) -> None:
    for name in ("SENSOR_REGISTRY_PATH", "TREND_WINDOW", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.registry_path is None
    assert settings.trend_window == 7
    assert settings.log_level == "INFO"
    assert build_default_registry().persistence_path is None
