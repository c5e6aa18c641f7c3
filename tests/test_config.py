"""Tests for Settings and environment loading."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from kudamono import ConfigError, Settings


class TestDefaults:
    def test_defaults(self):
        settings = Settings()
        assert settings.max_tokens == 1024
        assert settings.max_iterations == 10
        assert settings.max_retries == 1
        assert settings.anthropic_version == "2023-06-01"
        assert settings.api_url == "https://api.anthropic.com/v1/messages"
        assert settings.search_binary == "rg"

    def test_frozen(self):
        settings = Settings()
        with pytest.raises(ValidationError):
            settings.max_tokens = 5

    def test_no_credentials_field(self):
        assert not any("key" in name for name in Settings.model_fields)


class TestFromEnv:
    def test_empty_environment_gives_defaults(self):
        assert Settings.from_env({}) == Settings()

    def test_reads_prefixed_variables(self):
        settings = Settings.from_env({
            "KUDAMONO_MODEL": "claude-test",
            "KUDAMONO_MAX_TOKENS": "2048",
            "KUDAMONO_TIMEOUT": "30.5",
            "KUDAMONO_MAX_ITERATIONS": "3",
            "KUDAMONO_SEARCH_BINARY": "/opt/rg",
        })
        assert settings.model == "claude-test"
        assert settings.max_tokens == 2048
        assert settings.timeout == 30.5
        assert settings.max_iterations == 3
        assert settings.search_binary == "/opt/rg"

    def test_empty_values_are_ignored(self):
        assert Settings.from_env({"KUDAMONO_MODEL": ""}).model == Settings().model

    def test_overrides_win(self):
        settings = Settings.from_env({"KUDAMONO_MODEL": "from-env"}, model="from-flag")
        assert settings.model == "from-flag"

    def test_none_overrides_are_ignored(self):
        settings = Settings.from_env({"KUDAMONO_MAX_ITERATIONS": "4"}, max_iterations=None)
        assert settings.max_iterations == 4

    def test_reads_process_environment_by_default(self, monkeypatch):
        monkeypatch.setenv("KUDAMONO_MAX_RETRIES", "3")
        assert Settings.from_env().max_retries == 3

    @pytest.mark.parametrize(
        "var, value",
        [
            ("KUDAMONO_MAX_TOKENS", "abc"),
            ("KUDAMONO_MAX_TOKENS", "0"),
            ("KUDAMONO_MAX_ITERATIONS", "0"),
            ("KUDAMONO_MAX_RETRIES", "0"),
            ("KUDAMONO_TIMEOUT", "-1"),
        ],
    )
    def test_invalid_values_raise_config_error(self, var, value):
        with pytest.raises(ConfigError, match="Invalid settings"):
            Settings.from_env({var: value})
