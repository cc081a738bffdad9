"""Smoke test to verify the project scaffolding works."""

from __future__ import annotations

import pytest


def test_import() -> None:
    import tbridge

    assert tbridge.__version__ == "0.1.0"


def test_cli_entrypoint() -> None:
    from tbridge.cli import main

    assert callable(main)


def test_interface_imports() -> None:
    from tbridge.core.interface import (
        AnthropicTranspiler,
        ClaudeModel,
        ModelConfig,
        StreamReconstructor,
        ThinkingBlockStore,
        build_request,
    )

    assert ClaudeModel is not None
    assert ModelConfig is not None
    assert AnthropicTranspiler is not None
    assert StreamReconstructor is not None
    assert ThinkingBlockStore is not None
    assert build_request is not None


def test_lazy_import_from_tbridge() -> None:
    import tbridge

    assert tbridge.ClaudeModel is not None
    assert tbridge.ModelConfig is not None
    assert tbridge.Transcript is not None


def test_unknown_attribute() -> None:
    import tbridge

    with pytest.raises(AttributeError, match="no attribute"):
        tbridge.DoesNotExist  # noqa: B018
