"""Response builder service: envelope assembly.

Flow: validate code -> CodeRegistry message key -> message lookup ->
ConversionEngine.convert(data) -> Envelope.
"""

import logging
from collections.abc import Mapping
from typing import Any

from response_builder.domain import api_codes
from response_builder.domain.code_registry import CodeRegistry
from response_builder.domain.conversion_engine import ConversionEngine
from response_builder.domain.exceptions import (
    InvalidCodeError,
    InvalidHttpCodeError,
    InvalidMessageError,
)
from response_builder.schemas.envelope import Envelope
from response_builder.services.messages import CatalogMessageResolver, MessageResolver

logger = logging.getLogger(__name__)

DEFAULT_HTTP_CODE_OK = 200
DEFAULT_HTTP_CODE_ERROR = 400

SUCCESS_HTTP_CODE_MIN = 200
SUCCESS_HTTP_CODE_MAX = 299
ERROR_HTTP_CODE_MIN = 400
ERROR_HTTP_CODE_MAX = 599


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ResponseBuilder:
    """Builds uniform response envelopes.

    Args:
        code_registry: Validates codes and supplies default message keys.
        engine: Converts payloads into plain data.
        message_resolver: Turns a message key and params into text.
        locale: Locale tag copied into every envelope.
        key_map: Output key renames applied by ``to_dict``.
        settings: The effective configuration, kept for collaborators such
            as ``ExceptionMapper``.
    """

    def __init__(
        self,
        code_registry: CodeRegistry,
        engine: ConversionEngine,
        message_resolver: MessageResolver | None = None,
        locale: str | None = None,
        key_map: Mapping[str, str] | None = None,
        settings: Mapping | None = None,
    ):
        self.code_registry = code_registry
        self.engine = engine
        self.message_resolver = message_resolver or CatalogMessageResolver()
        self.locale = locale
        self.key_map = dict(key_map or {})
        self.settings = settings or {}

    def build(
        self,
        api_code: int,
        message: str | None = None,
        data: Any = None,
        http_code: int = DEFAULT_HTTP_CODE_OK,
        message_params: Mapping[str, Any] | None = None,
    ) -> Envelope:
        """Assemble an envelope.

        Args:
            api_code: Application code; must be reserved or within the configured range.
            message: Custom message. When omitted the code's message key is
                resolved with ``message_params``.
            data: Payload to convert. ``None`` stays ``None``.
            http_code: HTTP status carried through unchanged.
            message_params: Placeholder values for the resolved message.

        Raises:
            InvalidCodeError: ``api_code`` is not valid.
            InvalidHttpCodeError: ``http_code`` is not an integer.
            InvalidMessageError: the custom or resolved message is not a string.
            ConversionError: the payload cannot be converted.
            ConfigurationError: the code registry configuration is broken.
        """
        self._assert_code_valid(api_code)
        if not _is_int(http_code):
            raise InvalidHttpCodeError(http_code, "http_code must be an integer")

        if message is None:
            message = self._resolve_message(api_code, message_params)
        elif not isinstance(message, str):
            raise InvalidMessageError(message, "Custom")

        converted = None if data is None else self.engine.convert(data)

        return Envelope(
            success=api_code == api_codes.OK,
            code=api_code,
            locale=self.locale,
            message=message,
            data=converted,
            http_code=http_code,
        )

    def success(
        self,
        data: Any = None,
        api_code: int = api_codes.OK,
        http_code: int = DEFAULT_HTTP_CODE_OK,
        message_params: Mapping[str, Any] | None = None,
    ) -> Envelope:
        """Build a success envelope; ``http_code`` must be within 200-299."""
        self._assert_http_code_in(http_code, SUCCESS_HTTP_CODE_MIN, SUCCESS_HTTP_CODE_MAX)
        return self.build(api_code, data=data, http_code=http_code, message_params=message_params)

    def error(
        self,
        api_code: int,
        data: Any = None,
        http_code: int = DEFAULT_HTTP_CODE_ERROR,
        message_params: Mapping[str, Any] | None = None,
        message: str | None = None,
    ) -> Envelope:
        """Build an error envelope; ``api_code`` must not be OK, ``http_code`` within 400-599."""
        if _is_int(api_code) and api_code == api_codes.OK:
            raise InvalidCodeError(api_code, "Error responses must not use the OK code")
        self._assert_http_code_in(http_code, ERROR_HTTP_CODE_MIN, ERROR_HTTP_CODE_MAX)
        return self.build(
            api_code,
            message=message,
            data=data,
            http_code=http_code,
            message_params=message_params,
        )

    def to_dict(self, envelope: Envelope) -> dict:
        """Serialise ``envelope`` using the configured key names."""
        return envelope.to_dict(self.key_map)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _assert_code_valid(self, api_code: Any) -> None:
        if not _is_int(api_code):
            raise InvalidCodeError(api_code, "API code must be an integer")

        if not self.code_registry.is_code_valid(api_code):
            registry = self.code_registry
            logger.warning("Rejected API code %d", api_code)
            raise InvalidCodeError(
                api_code,
                f"API code value ({api_code}) is out of allowed range "
                f"{registry.get_min_code()}-{registry.get_max_code()}",
            )

    def _resolve_message(self, api_code: int, message_params: Mapping[str, Any] | None) -> str:
        message_key = self.code_registry.get_message_key(api_code)
        params = {**message_key.params, **(message_params or {})}
        message = self.message_resolver(message_key.key, params)
        if not isinstance(message, str):
            logger.warning(
                "Message resolver returned %s for key %s", type(message).__name__, message_key.key,
            )
            raise InvalidMessageError(message, "Resolved")
        return message

    @staticmethod
    def _assert_http_code_in(http_code: Any, lowest: int, highest: int) -> None:
        if not _is_int(http_code):
            raise InvalidHttpCodeError(http_code, "http_code must be an integer")
        if not lowest <= http_code <= highest:
            raise InvalidHttpCodeError(
                http_code,
                f"http_code must be within {lowest}-{highest} ({http_code} given)",
            )
