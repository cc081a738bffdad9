"""Tests for ModelConfig."""

import pytest
from pydantic import ValidationError

from tbridge.core.interface.config import (
    DEFAULT_API_VERSION,
    DEFAULT_BASE_URL,
    DEFAULT_MAX_TOKENS,
    ModelConfig,
)

_ENV_VARS = (
    "ANTHROPIC_API_KEY",
    "ANTHROPIC_BASE_URL",
    "ANTHROPIC_TIMEOUT",
    "ANTHROPIC_API_VERSION",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestModelConfig:
    def test_defaults(self) -> None:
        config = ModelConfig(model="m", api_key="k")
        assert config.base_url == DEFAULT_BASE_URL
        assert config.api_version == DEFAULT_API_VERSION
        assert config.default_max_tokens == DEFAULT_MAX_TOKENS
        assert config.thinking_budget_tokens is None

    def test_api_key_hidden_from_repr(self) -> None:
        config = ModelConfig(model="m", api_key="sk-secret")
        assert "sk-secret" not in repr(config)
        assert config.api_key.get_secret_value() == "sk-secret"

    @pytest.mark.parametrize(
        "field", ["timeout", "default_max_tokens", "thinking_budget_tokens"]
    )
    def test_positive_limits(self, field: str) -> None:
        with pytest.raises(ValidationError):
            ModelConfig(model="m", api_key="k", **{field: 0})


class TestFromEnvironment:
    def test_missing_key_returns_none(self) -> None:
        assert ModelConfig.from_environment(model="m") is None

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key")
        monkeypatch.setenv("ANTHROPIC_BASE_URL", "https://proxy.test")
        monkeypatch.setenv("ANTHROPIC_TIMEOUT", "30")
        monkeypatch.setenv("ANTHROPIC_API_VERSION", "2099-01-01")

        config = ModelConfig.from_environment(model="m")

        assert config is not None
        assert config.api_key.get_secret_value() == "env-key"
        assert config.base_url == "https://proxy.test"
        assert config.timeout == 30.0
        assert config.api_version == "2099-01-01"

    def test_overrides_win(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key")
        config = ModelConfig.from_environment(
            model="m", api_key="override", thinking_budget_tokens=1024
        )
        assert config is not None
        assert config.api_key.get_secret_value() == "override"
        assert config.thinking_budget_tokens == 1024

    def test_none_overrides_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key")
        config = ModelConfig.from_environment(model="m", thinking_budget_tokens=None)
        assert config is not None
        assert config.thinking_budget_tokens is None

    def test_invalid_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key")
        monkeypatch.setenv("ANTHROPIC_TIMEOUT", "-1")
        with pytest.raises(ValidationError):
            ModelConfig.from_environment(model="m")
