"""transcript-bridge — provider-agnostic transcripts on the Anthropic Messages API."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from tbridge.core.interface.client import ClaudeModel as ClaudeModel
    from tbridge.core.interface.config import ModelConfig as ModelConfig
    from tbridge.core.transcript.models import Transcript as Transcript

_EXPORTS = {
    "ClaudeModel": "tbridge.core.interface.client",
    "ModelConfig": "tbridge.core.interface.config",
    "Transcript": "tbridge.core.transcript.models",
}


def __getattr__(name: str) -> object:
    module_path = _EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'tbridge' has no attribute {name!r}")
