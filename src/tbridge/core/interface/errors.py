"""Error types for request building and provider transport."""


class BridgeError(Exception):
    """Base error for all transcript-bridge failures."""


class SchemaTranslationError(BridgeError):
    """An output or tool schema cannot be expressed as an object-rooted wire schema."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Schema translation failed" + (f": {detail}" if detail else ""))


class TransportError(BridgeError):
    """Base error for failures talking to the provider."""


class APIConnectionError(TransportError):
    """The provider could not be reached."""


class APIStatusError(TransportError):
    """The provider answered with an HTTP error and no recognisable error body."""

    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        msg = f"HTTP {status_code}"
        if body:
            msg += f": {body[:200]}"
        super().__init__(msg)


class ProviderAPIError(TransportError):
    """The provider returned a structured error envelope."""

    def __init__(self, status_code: int, error_type: str, message: str) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.message = message
        super().__init__(f"{error_type} (HTTP {status_code}): {message}")


class ResponseDecodingError(TransportError):
    """A response body could not be decoded into the expected shape."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Could not decode provider response" + (f": {detail}" if detail else ""))


class StreamError(TransportError):
    """The event stream carried an ``error`` event."""

    def __init__(self, error_type: str, message: str) -> None:
        self.error_type = error_type
        self.message = message
        super().__init__(f"Stream error {error_type}: {message}")
