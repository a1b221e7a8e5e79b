"""Exception mapper: turns raised exceptions into error envelopes.

Framework agnostic. An exception carrying an integer HTTP error status in
``status_code`` (or ``code``) is treated as an HTTP error; everything else
is an uncaught exception reported with HTTP 500.
"""

import logging
from collections.abc import Mapping

from response_builder.domain import api_codes
from response_builder.schemas.config_schema import (
    DEFAULT_HANDLER_KEY,
    ExceptionHandlerSchema,
    HandlerEntrySchema,
    validate_section,
)
from response_builder.schemas.envelope import Envelope
from response_builder.services.response_builder import (
    ERROR_HTTP_CODE_MAX,
    ERROR_HTTP_CODE_MIN,
    ResponseBuilder,
)

logger = logging.getLogger(__name__)

UNCAUGHT_HTTP_CODE = 500

HTTP_STATUS_CODES: dict[int, int] = {
    401: api_codes.EX_AUTHENTICATION_EXCEPTION,
    404: api_codes.EX_HTTP_NOT_FOUND,
    422: api_codes.EX_VALIDATION_EXCEPTION,
    503: api_codes.EX_HTTP_SERVICE_UNAVAILABLE,
}


def http_status_of(exc: BaseException) -> int | None:
    """Return the HTTP error status an exception carries, if any."""
    for attribute in ("status_code", "code"):
        status = getattr(exc, attribute, None)
        if isinstance(status, bool) or not isinstance(status, int):
            continue
        if ERROR_HTTP_CODE_MIN <= status <= ERROR_HTTP_CODE_MAX:
            return status
    return None


class ExceptionMapper:
    """Maps exceptions to error envelopes via a ``ResponseBuilder``.

    Args:
        builder: Builder used to assemble the envelopes.
        handler_config: The ``exception_handler`` configuration block.
            Defaults to the one held in ``builder.settings``.
    """

    def __init__(self, builder: ResponseBuilder, handler_config: Mapping | None = None):
        if handler_config is None:
            handler_config = builder.settings.get("exception_handler") or {}
        self._builder = builder
        self._config: ExceptionHandlerSchema = validate_section(
            ExceptionHandlerSchema, handler_config, "exception_handler",
        )

    def to_envelope(self, exc: BaseException) -> Envelope:
        """Build the error envelope describing ``exc``."""
        status = http_status_of(exc)
        if status is None:
            return self._uncaught(exc)
        return self._http_error(exc, status)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _http_error(self, exc: BaseException, status: int) -> Envelope:
        entry = self._config.map.get(status)
        if entry is None:
            entry = HandlerEntrySchema(
                api_code=HTTP_STATUS_CODES.get(status, api_codes.EX_HTTP_EXCEPTION),
            )

        message = self._describe(exc) or f"Exception code #{status}"
        logger.info("Mapping HTTP %d exception to API code %d", status, entry.api_code)
        return self._builder.error(
            entry.api_code,
            http_code=entry.http_code or status,
            message_params={"message": message},
        )

    def _uncaught(self, exc: BaseException) -> Envelope:
        entry = self._config.map.get(DEFAULT_HANDLER_KEY) or HandlerEntrySchema(
            api_code=api_codes.EX_UNCAUGHT_EXCEPTION,
        )

        logger.error("Uncaught exception mapped to error response", exc_info=exc)
        return self._builder.error(
            entry.api_code,
            http_code=entry.http_code or UNCAUGHT_HTTP_CODE,
            message_params={"message": self._describe(exc)},
        )

    def _describe(self, exc: BaseException) -> str:
        message = str(exc).strip()
        if self._config.include_class_name:
            class_name = type(exc).__name__
            return f"{class_name}: {message}" if message else class_name
        return message
