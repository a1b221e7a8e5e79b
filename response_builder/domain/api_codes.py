"""Reserved API codes and their built-in message identifiers.

Codes ``0..63`` belong to the response builder itself. Every code in that
range is always valid, regardless of the configured ``min_code``/``max_code``.
"""

RESERVED_MIN_API_CODE = 0
RESERVED_MAX_API_CODE = 63

OK = 0
NO_ERROR_MESSAGE = 1
EX_HTTP_NOT_FOUND = 10
EX_HTTP_SERVICE_UNAVAILABLE = 11
EX_HTTP_EXCEPTION = 12
EX_UNCAUGHT_EXCEPTION = 13
EX_AUTHENTICATION_EXCEPTION = 14
EX_VALIDATION_EXCEPTION = 15

# Codes that must resolve to a message identifier in the effective code map.
REQUIRED_CODES: tuple[int, ...] = (OK, NO_ERROR_MESSAGE)

BASE_MAP: dict[int, str] = {
    OK: "response_builder.ok",
    NO_ERROR_MESSAGE: "response_builder.no_error_message",
    EX_HTTP_NOT_FOUND: "response_builder.http_not_found",
    EX_HTTP_SERVICE_UNAVAILABLE: "response_builder.http_service_unavailable",
    EX_HTTP_EXCEPTION: "response_builder.http_exception",
    EX_UNCAUGHT_EXCEPTION: "response_builder.uncaught_exception",
    EX_AUTHENTICATION_EXCEPTION: "response_builder.authentication_exception",
    EX_VALIDATION_EXCEPTION: "response_builder.validation_exception",
}


def is_reserved(code: int) -> bool:
    return RESERVED_MIN_API_CODE <= code <= RESERVED_MAX_API_CODE
