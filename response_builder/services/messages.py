"""Message lookup collaborators.

The builder only needs a callable ``(message_key, params) -> str``. Hosts
with a translation layer plug that in; ``CatalogMessageResolver`` is a
dictionary-backed stand-in with English defaults.
"""

from collections.abc import Mapping
from typing import Any, Callable

MessageResolver = Callable[[str, Mapping[str, Any]], str]

DEFAULT_MESSAGES: dict[str, str] = {
    "response_builder.ok": "OK",
    "response_builder.no_error_message": "Error #{api_code}",
    "response_builder.http_not_found": "Unknown method",
    "response_builder.http_service_unavailable": "Service maintenance in progress",
    "response_builder.http_exception": "HTTP exception: {message}",
    "response_builder.uncaught_exception": "Uncaught exception: {message}",
    "response_builder.authentication_exception": "Not authorized to access the resource",
    "response_builder.validation_exception": "Invalid data: {message}",
}


class CatalogMessageResolver:
    """Resolves message identifiers from a template catalog.

    Unknown identifiers resolve to ``fallback`` when given, else to
    themselves. Templates use ``{name}`` placeholders; a template whose
    placeholders cannot all be filled is returned unformatted.
    """

    def __init__(self, catalog: Mapping[str, str] | None = None, fallback: str | None = None):
        self._catalog = {**DEFAULT_MESSAGES, **(catalog or {})}
        self._fallback = fallback

    def __call__(self, message_key: str, params: Mapping[str, Any]) -> str:
        template = self._catalog.get(message_key)
        if template is None:
            template = message_key if self._fallback is None else self._fallback
        try:
            return template.format_map(params)
        except (KeyError, IndexError, ValueError):
            return template
