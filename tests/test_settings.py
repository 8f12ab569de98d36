from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from package_pricing.config.settings import Settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    for name in (
        "PRICING_LOG_LEVEL",
        "PRICING_LOG_DIR",
        "PRICING_CATALOG_PATH",
        "PRICING_CATALOG_URL",
        "PRICING_LOOKUP_TIMEOUT_S",
        "PRICING_DEBOUNCE_MS",
    ):
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the assertions.
    monkeypatch.chdir(tmp_path)


def test_defaults():
    settings = Settings()
    assert settings.log_level == "INFO"
    assert settings.catalog_url is None
    assert settings.catalog_path == Path("data/packages/catalog.json")
    assert settings.lookup_timeout_s == 30.0
    assert settings.debounce_seconds() == pytest.approx(0.3)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PRICING_CATALOG_URL", "  https://catalog.internal/api  ")
    monkeypatch.setenv("PRICING_DEBOUNCE_MS", "500")
    monkeypatch.setenv("PRICING_LOOKUP_TIMEOUT_S", "none")

    settings = Settings()

    assert settings.catalog_url == "https://catalog.internal/api"
    assert settings.debounce_seconds() == pytest.approx(0.5)
    assert settings.lookup_timeout_s is None


def test_blank_catalog_url_means_file_catalog(monkeypatch):
    monkeypatch.setenv("PRICING_CATALOG_URL", "")
    assert Settings().catalog_url is None


def test_home_is_expanded_in_paths(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    settings = Settings(log_dir="~/pricing-logs")
    assert settings.log_dir == tmp_path / "pricing-logs"


@pytest.mark.parametrize("field,value", [("lookup_timeout_s", 0), ("debounce_ms", -1)])
def test_invalid_timings_are_rejected(field, value):
    with pytest.raises(ValidationError):
        Settings(**{field: value})


def test_ensure_directories_creates_log_dir(tmp_path):
    settings = Settings(log_dir=tmp_path / "logs" / "nested")
    settings.ensure_directories()
    assert settings.log_dir.is_dir()
