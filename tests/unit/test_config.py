"""Unit tests for config."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from studiolens.core.config import (
    DEFAULT_GEMINI_BASE_URL,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_KEY_FILE,
    DEFAULT_PING_MODEL,
    Config,
    api_key_from_env,
    get_config,
    set_config,
)
from studiolens.utils.exceptions import ConfigurationError


@pytest.mark.unit
class TestConfig:
    def test_defaults(self):
        c = Config()
        assert c.gemini_base_url == DEFAULT_GEMINI_BASE_URL
        assert c.image_model == DEFAULT_IMAGE_MODEL
        assert c.ping_model == DEFAULT_PING_MODEL
        assert c.generation_timeout is None
        assert c.key_file == DEFAULT_KEY_FILE
        assert c.debug_api is False

    def test_validate_does_not_require_api_key(self):
        c = Config(gemini_api_key="")
        c.validate()
        assert c.is_valid() is True

    def test_validate_rejects_empty_model(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Config(image_model="  ").validate()
        assert "Image model" in str(exc_info.value)

    def test_validate_rejects_non_http_base_url(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Config(gemini_base_url="ftp://example.com").validate()
        assert "http://" in str(exc_info.value)

    def test_validate_rejects_non_positive_timeout(self):
        with pytest.raises(ConfigurationError):
            Config(generation_timeout=0).validate()
        with pytest.raises(ConfigurationError):
            Config(ping_timeout=-1).validate()

    def test_repr_does_not_contain_api_key(self):
        c = Config(gemini_api_key="AIza-secret")
        assert "AIza-secret" not in repr(c)

    def test_set_image_model_resets_validation(self):
        c = Config()
        c.validate()
        c.set_image_model("gemini-2.5-flash-image")
        assert c.image_model == "gemini-2.5-flash-image"
        assert c.is_valid() is False

    def test_set_image_model_rejects_empty(self):
        with pytest.raises(ConfigurationError):
            Config().set_image_model("")


@pytest.mark.unit
class TestConfigFromEnv:
    def test_from_env_uses_env_vars(self, tmp_path: Path):
        key_file = tmp_path / "k.json"
        with patch.dict(
            os.environ,
            {
                "GEMINI_API_KEY": "AIza-from-env",
                "STUDIOLENS_BASE_URL": "http://localhost:8080/v1beta",
                "STUDIOLENS_IMAGE_MODEL": "custom-image",
                "STUDIOLENS_PING_MODEL": "custom-text",
                "STUDIOLENS_TIMEOUT": "90",
                "STUDIOLENS_KEY_FILE": str(key_file),
                "STUDIOLENS_DEBUG_API": "true",
            },
            clear=False,
        ):
            c = Config.from_env()
        assert c.gemini_api_key == "AIza-from-env"
        assert c.gemini_base_url == "http://localhost:8080/v1beta"
        assert c.image_model == "custom-image"
        assert c.ping_model == "custom-text"
        assert c.generation_timeout == 90
        assert c.key_file == key_file
        assert c.debug_api is True

    def test_blank_timeout_means_no_limit(self):
        with patch.dict(os.environ, {"STUDIOLENS_TIMEOUT": ""}, clear=False):
            assert Config.from_env().generation_timeout is None

    def test_bad_timeout_raises(self):
        with patch.dict(os.environ, {"STUDIOLENS_TIMEOUT": "soon"}, clear=False):
            with pytest.raises(ConfigurationError) as exc_info:
                Config.from_env()
        assert "STUDIOLENS_TIMEOUT" in str(exc_info.value)


@pytest.mark.unit
class TestApiKeyFromEnv:
    def test_empty_when_unset(self):
        assert api_key_from_env() == ""

    def test_gemini_key_wins(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("API_KEY", "generic")
        monkeypatch.setenv("GOOGLE_API_KEY", "google")
        monkeypatch.setenv("GEMINI_API_KEY", "gemini")
        assert api_key_from_env() == "gemini"

    def test_falls_through_blank_values(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GEMINI_API_KEY", "   ")
        monkeypatch.setenv("API_KEY", "generic")
        assert api_key_from_env() == "generic"


@pytest.mark.unit
class TestGlobalConfig:
    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_set_config_replaces_global(self):
        c = Config(image_model="other")
        set_config(c)
        assert get_config() is c
