"""Code Registry: validates and serves the API code space.

Pure business logic with no framework dependency. Configuration is read
lazily: nothing is checked until the first accessor call, after which the
validated state is cached for the lifetime of the registry.

Note: changes made to the configuration mapping after the first successful
access are not picked up. Build a new registry to apply new configuration.
"""

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from response_builder.domain import api_codes
from response_builder.domain.exceptions import ConfigurationError
from response_builder.schemas.config_schema import (
    CodeMapSchema,
    CodeRangeSchema,
    validate_section,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MessageKey:
    """A message identifier plus the placeholder values it expects."""

    key: str
    params: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CodeSpace:
    """Immutable snapshot of validated range and code map."""

    min_code: int
    max_code: int
    code_map: Mapping[int, str]


class CodeRegistry:
    """Owns the valid code range and the code to message identifier map.

    Args:
        config: Mapping holding ``min_code``, ``max_code`` and ``map``.
    """

    def __init__(self, config: Mapping):
        self._config = config
        self._code_space: CodeSpace | None = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public accessors
    # ------------------------------------------------------------------

    def get_min_code(self) -> int:
        return self._validated().min_code

    def get_max_code(self) -> int:
        return self._validated().max_code

    def get_code_map(self) -> Mapping[int, str]:
        """Return the effective code map (base map overlaid by configuration)."""
        return self._validated().code_map

    def get_message_key(self, code: int) -> MessageKey:
        """Return the message identifier for ``code``.

        Unmapped codes fall back to the ``NO_ERROR_MESSAGE`` identifier with
        the code passed as the ``api_code`` parameter.
        """
        code_map = self._validated().code_map
        key = code_map.get(code)
        if key is not None:
            return MessageKey(key=key)
        return MessageKey(
            key=code_map[api_codes.NO_ERROR_MESSAGE],
            params={"api_code": code},
        )

    def is_code_valid(self, code: int) -> bool:
        """True if ``code`` is reserved or lies within ``[min_code, max_code]``."""
        code_space = self._validated()
        if isinstance(code, bool) or not isinstance(code, int):
            return False
        return api_codes.is_reserved(code) or code_space.min_code <= code <= code_space.max_code

    # ------------------------------------------------------------------
    # Lazy validation
    # ------------------------------------------------------------------

    def _validated(self) -> CodeSpace:
        code_space = self._code_space
        if code_space is not None:
            return code_space

        with self._lock:
            if self._code_space is None:
                self._code_space = self._build_code_space(self._config)
            return self._code_space

    @staticmethod
    def _build_code_space(config: Mapping) -> CodeSpace:
        if not isinstance(config, Mapping):
            raise ConfigurationError(
                f"CONFIG: configuration must be a mapping ({type(config).__name__} given)",
            )

        for key in ("min_code", "max_code", "map"):
            if config.get(key) is None:
                raise ConfigurationError(f"CONFIG: Missing '{key}' key")

        code_range = validate_section(
            CodeRangeSchema,
            {"min_code": config["min_code"], "max_code": config["max_code"]},
            "min_code/max_code",
        )
        configured = validate_section(CodeMapSchema, {"entries": config["map"]}, "map").entries

        out_of_range = sorted(
            code for code in configured
            if not api_codes.is_reserved(code)
            and not code_range.min_code <= code <= code_range.max_code
        )
        if out_of_range:
            raise ConfigurationError(
                f"CONFIG: map code(s) {out_of_range} outside allowed range "
                f"{code_range.min_code}-{code_range.max_code}",
            )

        code_map = {**api_codes.BASE_MAP, **configured}
        missing = [code for code in api_codes.REQUIRED_CODES if not code_map.get(code)]
        if missing:
            raise ConfigurationError(f"CONFIG: map lacks required reserved code(s) {missing}")

        logger.info(
            "Code registry validated: range=%d-%d, mapped codes=%d",
            code_range.min_code, code_range.max_code, len(code_map),
        )
        return CodeSpace(
            min_code=code_range.min_code,
            max_code=code_range.max_code,
            code_map=MappingProxyType(code_map),
        )
