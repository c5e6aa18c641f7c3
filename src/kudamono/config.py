"""Configuration models for Kudamono.

Settings holds process-wide defaults for the model client, the turn
processor and the built-in tools. API credentials are deliberately not
part of Settings: clients read them from the environment when a request
is issued.
"""

from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from kudamono.exceptions import ConfigError

ANTHROPIC_API_KEY_ENV = "ANTHROPIC_API_KEY"
PLANNER_API_KEY_ENV = "KUDAMONO_PLANNER_API_KEY"
GITHUB_TOKEN_ENV = "GITHUB_TOKEN"

# Settings field -> environment variable
_ENV_FIELDS: dict[str, str] = {
    "model": "KUDAMONO_MODEL",
    "max_tokens": "KUDAMONO_MAX_TOKENS",
    "api_url": "KUDAMONO_API_URL",
    "anthropic_version": "KUDAMONO_ANTHROPIC_VERSION",
    "timeout": "KUDAMONO_TIMEOUT",
    "max_retries": "KUDAMONO_MAX_RETRIES",
    "max_iterations": "KUDAMONO_MAX_ITERATIONS",
    "planner_base_url": "KUDAMONO_PLANNER_BASE_URL",
    "planner_model": "KUDAMONO_PLANNER_MODEL",
    "search_binary": "KUDAMONO_SEARCH_BINARY",
    "github_api_url": "KUDAMONO_GITHUB_API_URL",
}


class Settings(BaseModel):
    """Kudamono runtime settings."""

    model_config = {"frozen": True}

    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = Field(default=1024, gt=0)
    api_url: str = "https://api.anthropic.com/v1/messages"
    anthropic_version: str = "2023-06-01"
    timeout: float = Field(default=120.0, gt=0)
    max_retries: int = Field(default=1, ge=1)  # 1 = no automatic retry
    max_iterations: int = Field(default=10, ge=1)
    planner_base_url: str = "https://api.openai.com/v1"
    planner_model: str = "gpt-4o-mini"
    planner_max_tokens: Optional[int] = None
    search_binary: str = "rg"
    github_api_url: str = "https://api.github.com"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, **overrides) -> Settings:
        """Build Settings from ``KUDAMONO_*`` environment variables.

        Explicit ``overrides`` take precedence over the environment.

        Raises:
            ConfigError: If a value cannot be parsed or fails validation.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        for field_name, var in _ENV_FIELDS.items():
            raw = env.get(var)
            if raw is not None and raw != "":
                values[field_name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigError(f"Invalid settings: {e}") from e
