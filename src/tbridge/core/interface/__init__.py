"""Transcript-to-Messages-API bridge: conversion, request building, streaming."""

from tbridge.core.interface.client import ClaudeModel
from tbridge.core.interface.config import ModelConfig
from tbridge.core.interface.errors import (
    APIConnectionError,
    APIStatusError,
    BridgeError,
    ProviderAPIError,
    ResponseDecodingError,
    SchemaTranslationError,
    StreamError,
    TransportError,
)
from tbridge.core.interface.http import AnthropicHTTPClient
from tbridge.core.interface.request_builder import BuildResult, build_request
from tbridge.core.interface.streaming import StreamReconstructor, reconstruct
from tbridge.core.interface.thinking import ThinkingBlockStore, inject_thinking_blocks
from tbridge.core.interface.transpiler import Transpiler
from tbridge.core.interface.transpilers.anthropic import AnthropicTranspiler

__all__ = [
    "APIConnectionError",
    "APIStatusError",
    "AnthropicHTTPClient",
    "AnthropicTranspiler",
    "BridgeError",
    "BuildResult",
    "ClaudeModel",
    "ModelConfig",
    "ProviderAPIError",
    "ResponseDecodingError",
    "SchemaTranslationError",
    "StreamError",
    "StreamReconstructor",
    "ThinkingBlockStore",
    "Transpiler",
    "TransportError",
    "build_request",
    "inject_thinking_blocks",
    "reconstruct",
]
