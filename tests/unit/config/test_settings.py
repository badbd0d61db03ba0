"""Behavioral tests for settings resolution and validation."""

import pytest

from content_assistant.config import AssistantSettings, config_scope, resolve_config
from content_assistant.exceptions import ConfigurationError

pytestmark = pytest.mark.unit


def test_defaults_without_environment():
    config = resolve_config()
    assert config.model == "gemini-1.5-flash"
    assert config.use_real_api is False
    assert config.api_key is None
    assert config.safety_threshold == "BLOCK_MEDIUM_AND_ABOVE"
    assert config.default_temperature == 0.7
    assert config.default_max_output_tokens == 2048
    assert (config.fetch_timeout_s, config.render_timeout_s) == (10.0, 60.0)
    assert config.parse_timeout_s == 30.0
    assert (config.min_content_chars, config.max_url_chars) == (200, 15_000)
    assert config.history_limit == 5


def test_environment_is_read_with_prefix(monkeypatch):
    monkeypatch.setenv("CONTENT_ASSISTANT_MODEL", "gemini-2.0-flash")
    monkeypatch.setenv("CONTENT_ASSISTANT_PARSE_TIMEOUT_S", "5")
    config = resolve_config()
    assert config.model == "gemini-2.0-flash"
    assert config.parse_timeout_s == 5.0


def test_gemini_names_are_accepted(monkeypatch, mock_api_key):
    monkeypatch.setenv("GEMINI_API_KEY", mock_api_key)
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-flash")
    config = resolve_config()
    assert config.api_key == mock_api_key
    assert config.model == "gemini-2.5-flash"


def test_overrides_beat_environment(monkeypatch):
    monkeypatch.setenv("CONTENT_ASSISTANT_MODEL", "env-model")
    assert resolve_config({"model": "override-model"}).model == "override-model"


def test_real_api_requires_key():
    with pytest.raises(ConfigurationError, match="api_key is required"):
        resolve_config({"use_real_api": True})


def test_safety_threshold_is_case_insensitive_and_validated():
    assert resolve_config({"safety_threshold": "block_only_high"}).safety_threshold == (
        "BLOCK_ONLY_HIGH"
    )
    with pytest.raises(ConfigurationError, match="safety threshold"):
        resolve_config({"safety_threshold": "BLOCK_EVERYTHING"})


def test_invalid_numbers_are_configuration_errors():
    with pytest.raises(ConfigurationError):
        resolve_config({"parse_timeout_s": 0})


def test_config_scope_replaces_environment(monkeypatch):
    monkeypatch.setenv("CONTENT_ASSISTANT_MODEL", "env-model")
    scoped = AssistantSettings(model="scoped-model")
    with config_scope(scoped):
        assert resolve_config() is scoped
        assert resolve_config({"history_limit": 2}).model == "scoped-model"
    assert resolve_config().model == "env-model"


def test_to_dict_redacts_api_key(mock_api_key):
    config = resolve_config({"api_key": mock_api_key})
    assert config.to_dict()["api_key"] == "<redacted>"
    assert mock_api_key not in repr(config)


def test_cors_origin_list():
    config = AssistantSettings(cors_origins="http://a.test, http://b.test,")
    assert config.cors_origin_list == ["http://a.test", "http://b.test"]
