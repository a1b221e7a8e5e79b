"""Custom exception classes raised by the response builder.

Each exception carries a stable error code so hosts can branch on the
failure kind without parsing the message text.
"""


class ResponseBuilderError(Exception):
    """Base response builder error."""

    def __init__(self, message: str, error_code: str = "RESPONSE_BUILDER_ERROR"):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class ConfigurationError(ResponseBuilderError):
    """Raised when code range, code map or handler configuration is malformed."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="CONFIGURATION_ERROR")


class InvalidCodeError(ResponseBuilderError):
    """Raised when an API code is outside the valid code space."""

    def __init__(self, api_code, message: str | None = None):
        self.api_code = api_code
        super().__init__(
            message=message or f"API code {api_code!r} is not valid",
            error_code="INVALID_API_CODE",
        )


class InvalidHttpCodeError(ResponseBuilderError):
    """Raised when an HTTP status code does not fit the requested response kind."""

    def __init__(self, http_code, message: str | None = None):
        self.http_code = http_code
        super().__init__(
            message=message or f"HTTP code {http_code!r} is not valid",
            error_code="INVALID_HTTP_CODE",
        )


class InvalidMessageError(ResponseBuilderError):
    """Raised when a custom or resolved message is not a string."""

    def __init__(self, message_value, source: str):
        self.message_value = message_value
        super().__init__(
            message=f"{source} message must be a string ({type(message_value).__name__} given)",
            error_code="INVALID_MESSAGE",
        )


class ConversionError(ResponseBuilderError):
    """Raised when a payload cannot be turned into a serialisable structure."""

    def __init__(self, message: str, error_code: str = "CONVERSION_ERROR"):
        super().__init__(message=message, error_code=error_code)


class NoConverterError(ConversionError):
    """Raised when no registered converter matches a payload value."""

    def __init__(self, value_type: type):
        self.value_type = value_type
        super().__init__(
            message=(
                f"No data conversion mapping configured for "
                f"'{value_type.__module__}.{value_type.__qualname__}'"
            ),
            error_code="NO_CONVERTER",
        )


class DepthExceededError(ConversionError):
    """Raised when a payload nests deeper than the configured maximum."""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(
            message=f"Payload nesting exceeds maximum depth of {max_depth}",
            error_code="DEPTH_EXCEEDED",
        )
