"""Unit tests for environment-backed settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from page_fetcher.config.settings import Settings, get_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("DNListCheck", "DNLISTCHECK", "LOG_LEVEL", "ALLOW_LIST_URL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestAllowListSwitch:
    def test_gate_is_disabled_by_default(self) -> None:
        settings = Settings(_env_file=None)
        assert settings.dnlist_check == "Disable"
        assert settings.allow_list_enabled is False

    @pytest.mark.parametrize("value", ["Enable", "enable", " ENABLE "])
    def test_enable_is_case_insensitive(self, monkeypatch, value: str) -> None:
        monkeypatch.setenv("DNListCheck", value)
        assert Settings(_env_file=None).allow_list_enabled is True

    @pytest.mark.parametrize("value", ["Disable", "", "yes", "true"])
    def test_any_other_value_disables(self, monkeypatch, value: str) -> None:
        monkeypatch.setenv("DNListCheck", value)
        assert Settings(_env_file=None).allow_list_enabled is False

    def test_field_name_is_accepted_in_code(self) -> None:
        assert Settings(_env_file=None, dnlist_check="Enable").allow_list_enabled is True


class TestOtherSettings:
    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)
        assert settings.log_level == "INFO"
        assert settings.allow_list_cache_file == "dnlist.cache.json"
        assert settings.allow_list_url.startswith("https://")

    def test_env_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("ALLOW_LIST_URL", "https://allowlist.test/list")
        settings = Settings(_env_file=None)
        assert settings.log_level == "DEBUG"
        assert settings.allow_list_url == "https://allowlist.test/list"

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, allow_list_timeout=0)

    def test_settings_are_frozen(self) -> None:
        settings = Settings(_env_file=None)
        with pytest.raises(ValidationError):
            settings.log_level = "DEBUG"

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()
