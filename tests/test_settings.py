"""Tests for print_bridge/config/settings.py: Settings, config file and tokens."""

import json

import pytest
from pydantic import ValidationError

from print_bridge.config.settings import (
    CONFIG_PATH,
    Settings,
    generate_secure_token,
    get_settings,
    load_config,
    save_config,
    update_config,
)
from print_bridge.errors import ConfigError


class TestSettings:

    def test_defaults(self):
        s = get_settings()
        assert s.host == "127.0.0.1"
        assert s.port == 8765
        assert s.max_file_size_mb == 50
        assert s.rate_limit_per_minute == 60
        assert s.api_token is None
        assert s.allowed_origins == ["*"]
        assert s.allowed_file_types == ["pdf", "html", "text", "image"]
        assert s.default_printer is None

    def test_env_override(self, override_settings):
        override_settings(
            RATE_LIMIT_PER_MINUTE="5",
            API_TOKEN="s3cret",
            ALLOWED_ORIGINS='["https://app.example.com"]',
        )
        s = get_settings()
        assert s.rate_limit_per_minute == 5
        assert s.api_token == "s3cret"
        assert s.allowed_origins == ["https://app.example.com"]
        assert s.allows_any_origin is False

    def test_env_beats_config_file(self, override_settings):
        CONFIG_PATH.write_text(json.dumps({"port": 9000, "default_printer": "Office"}), encoding="utf-8")
        override_settings(PORT="9100")
        s = get_settings()
        assert s.port == 9100
        assert s.default_printer == "Office"

    def test_settings_are_immutable(self):
        s = Settings()
        with pytest.raises(ValidationError):
            s.port = 1

    def test_rate_limit_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(rate_limit_per_minute=0)

    def test_file_types_must_not_be_empty(self):
        with pytest.raises(ValidationError):
            Settings(allowed_file_types=[])
        with pytest.raises(ValidationError):
            Settings(allowed_file_types=["  "])

    def test_file_types_normalized(self):
        s = Settings(allowed_file_types=[" PDF", "text"])
        assert s.allowed_file_types == ["pdf", "text"]

    def test_max_file_size_bytes(self):
        assert Settings(max_file_size_mb=2).max_file_size_bytes == 2 * 1024 * 1024


class TestConfigFile:

    def test_first_run_creates_file_with_defaults(self):
        assert not CONFIG_PATH.exists()
        s = load_config()
        assert CONFIG_PATH.exists()
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
        assert data["port"] == s.port == 8765
        assert data["allowed_file_types"] == ["pdf", "html", "text", "image"]

    def test_first_run_does_not_persist_environment(self, override_settings):
        override_settings(API_TOKEN="from-env", PORT="9100")
        s = load_config()
        assert s.api_token == "from-env"
        assert s.port == 9100
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
        assert data["api_token"] is None
        assert data["port"] == 8765

    def test_loads_existing_file(self):
        CONFIG_PATH.write_text(json.dumps({"port": 9999, "api_token": "abc"}), encoding="utf-8")
        s = load_config()
        assert s.port == 9999
        assert s.api_token == "abc"

    def test_malformed_json_raises_config_error(self):
        CONFIG_PATH.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config()

    def test_invalid_value_raises_config_error(self):
        CONFIG_PATH.write_text(json.dumps({"rate_limit_per_minute": 0}), encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config()

    def test_save_round_trip(self):
        save_config(Settings(default_printer="Office_Printer", max_file_size_mb=10))
        s = load_config()
        assert s.default_printer == "Office_Printer"
        assert s.max_file_size_mb == 10

    def test_update_replaces_cached_settings(self):
        old = get_settings()
        assert old.api_token is None

        update_config(old.model_copy(update={"api_token": "new-token"}))

        assert get_settings().api_token == "new-token"
        # the previous instance is untouched
        assert old.api_token is None


class TestGenerateSecureToken:

    def test_length_and_charset(self):
        token = generate_secure_token()
        assert len(token) == 32
        assert token.isalnum()
        assert token.isascii()

    def test_uniqueness(self):
        tokens = {generate_secure_token() for _ in range(50)}
        assert len(tokens) == 50
