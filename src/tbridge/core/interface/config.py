"""Model configuration — model id, credentials, endpoint and token budgets."""

import os
from typing import Any

from pydantic import BaseModel, Field, SecretStr

DEFAULT_BASE_URL = "https://api.anthropic.com"
DEFAULT_API_VERSION = "2023-06-01"
DEFAULT_TIMEOUT = 120.0
DEFAULT_MAX_TOKENS = 4096


class ModelConfig(BaseModel):
    """Configuration for one Claude model handle.

    ``thinking_budget_tokens`` enables extended thinking; the request's
    ``max_tokens`` then becomes the budget plus the text budget.
    """

    model: str
    api_key: SecretStr
    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    api_version: str = DEFAULT_API_VERSION
    default_max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, gt=0)
    thinking_budget_tokens: int | None = Field(default=None, gt=0)

    @classmethod
    def from_environment(cls, **overrides: Any) -> "ModelConfig | None":
        """Build a config from ``ANTHROPIC_*`` environment variables.

        Returns ``None`` when no API key is available. Keyword overrides win
        over the environment; ``model`` must be given as an override.
        """
        values: dict[str, Any] = {}
        api_key = os.environ.get("ANTHROPIC_API_KEY")
        if api_key:
            values["api_key"] = api_key
        base_url = os.environ.get("ANTHROPIC_BASE_URL")
        if base_url:
            values["base_url"] = base_url
        timeout = os.environ.get("ANTHROPIC_TIMEOUT")
        if timeout:
            values["timeout"] = timeout
        api_version = os.environ.get("ANTHROPIC_API_VERSION")
        if api_version:
            values["api_version"] = api_version

        values.update({key: value for key, value in overrides.items() if value is not None})
        if not values.get("api_key"):
            return None
        return cls(**values)
