"""Envelope: the uniform response structure handed to the host's serializer."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict


class Envelope(BaseModel):
    """A single API response.

    ``success`` is true only when ``code`` is the OK code; ``data`` is
    either ``None`` or fully converted plain data. ``message`` holds the
    locale message text, resolved for ``locale`` when one is configured;
    ``locale_message`` is a read-only alias for it.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    code: int
    locale: str | None = None
    message: str
    data: Any = None
    http_code: int

    @property
    def locale_message(self) -> str:
        return self.message

    def to_dict(self, key_map: Mapping[str, str] | None = None) -> dict:
        """Return the wire-ready dict, optionally renaming top level keys.

        Args:
            key_map: Reference key (``success``, ``code``, ...) to output key name.
        """
        key_map = key_map or {}
        body = {
            "success": self.success,
            "code": self.code,
            "locale": self.locale,
            "message": self.message,
            "data": self.data,
            "http_code": self.http_code,
        }
        return {key_map.get(key, key): value for key, value in body.items()}
