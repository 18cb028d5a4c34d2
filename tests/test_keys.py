"""
Tests for key storage and provider selection.

The OS keychain is never touched: every KeyManager here is built with
use_keyring=False and a temporary config directory.
"""

import json
import stat

import pytest

from hymnforge.keys import PROVIDER_ENV_VAR, KeyManager


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("GEMINI_API_KEY", "ZHIPU_API_KEY", PROVIDER_ENV_VAR):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def km(tmp_path):
    return KeyManager(config_dir=tmp_path, use_keyring=False)


class TestKeyStorage:
    """Key lookup order and persistence."""

    def test_empty(self, km):
        assert km.get_key("gemini") is None
        info = km.get_key_info("gemini")
        assert not info.is_set
        assert info.source == "none"

    def test_set_writes_config(self, km, tmp_path):
        assert km.set_key("Gemini", "AIzaSyTESTKEY123456") == "config"
        data = json.loads((tmp_path / "keys.json").read_text())
        assert data == {"gemini": "AIzaSyTESTKEY123456"}
        assert km.get_key("gemini") == "AIzaSyTESTKEY123456"

    def test_config_file_private(self, km, tmp_path):
        km.set_key("zhipu", "abc")
        mode = stat.S_IMODE((tmp_path / "keys.json").stat().st_mode)
        assert mode == 0o600

    def test_env_wins(self, km, monkeypatch):
        km.set_key("zhipu", "from-config")
        monkeypatch.setenv("ZHIPU_API_KEY", "from-env")
        assert km.get_key("zhipu") == "from-env"
        assert km.get_key_info("zhipu").source == "env"

    def test_delete(self, km):
        km.set_key("zhipu", "abc")
        assert km.delete_key("zhipu") is True
        assert km.get_key("zhipu") is None
        assert km.delete_key("zhipu") is False

    def test_unreadable_config_ignored(self, km, tmp_path):
        (tmp_path / "keys.json").write_text("{broken")
        assert km.get_key("gemini") is None

    def test_masking(self, km):
        km.set_key("gemini", "AIzaSyTESTKEY123456")
        km.set_key("zhipu", "short")
        infos = {info.service: info for info in km.list_keys()}
        assert infos["gemini"].masked_value == "AIza...3456"
        assert infos["zhipu"].masked_value == "*****"

    def test_export_to_env(self, km):
        km.set_key("gemini", "g-key")
        assert km.export_to_env() == {"GEMINI_API_KEY": "g-key"}


class TestProviderChoice:
    """Active provider persistence."""

    def test_default(self, km):
        assert km.get_provider() == "gemini"

    def test_set_provider(self, km):
        km.set_key("gemini", "g-key")
        km.set_provider("ZHIPU")
        assert km.get_provider() == "zhipu"
        # Keys survive alongside the provider entry
        assert km.get_key("gemini") == "g-key"

    def test_unknown_provider_rejected(self, km):
        with pytest.raises(ValueError):
            km.set_provider("openai")

    def test_env_override(self, km, monkeypatch):
        km.set_provider("gemini")
        monkeypatch.setenv(PROVIDER_ENV_VAR, "zhipu")
        assert km.get_provider() == "zhipu"

    def test_unknown_stored_value_falls_back(self, km, monkeypatch):
        monkeypatch.setenv(PROVIDER_ENV_VAR, "openai")
        assert km.get_provider() == "gemini"


class TestLoadSettings:
    """AISettings assembly."""

    def test_collects_both_keys(self, km):
        km.set_key("gemini", "g-key")
        km.set_key("zhipu", "z-key")
        km.set_provider("zhipu")
        settings = km.load_settings()
        assert settings.provider == "zhipu"
        assert settings.api_key == "z-key"
        assert settings.credentials.gemini == "g-key"

    def test_override(self, km):
        km.set_provider("zhipu")
        assert km.load_settings(provider="Gemini").provider == "gemini"

    def test_invalid_override(self, km):
        with pytest.raises(ValueError):
            km.load_settings(provider="openai")
