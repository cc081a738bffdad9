"""Provider-specific transpiler implementations."""

from tbridge.core.interface.transpilers.anthropic import AnthropicTranspiler

__all__ = ["AnthropicTranspiler"]
