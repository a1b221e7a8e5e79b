"""Conversion Engine: turns arbitrary payloads into plain serialisable data.

Pure business logic with no framework dependency. The result contains only
``dict``, ``list``, ``str``, ``int``, ``float``, ``bool`` and ``None``.
"""

import logging
from typing import Any

from response_builder.domain.converter_registry import SCALAR_TYPES, ConverterRegistry
from response_builder.domain.exceptions import ConversionError, DepthExceededError

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64


class ConversionEngine:
    """Recursively converts a payload using a ``ConverterRegistry``.

    Payload graphs are expected to be acyclic. Cycles and overly deep
    structures end in ``DepthExceededError`` once ``max_depth`` nesting
    levels have been entered.
    """

    def __init__(self, registry: ConverterRegistry, max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self._registry = registry
        self._max_depth = max_depth

    @property
    def registry(self) -> ConverterRegistry:
        return self._registry

    def convert(self, value: Any) -> Any:
        """Convert ``value`` into a plain serialisable structure.

        Raises:
            NoConverterError: a value in the payload has no matching converter.
            DepthExceededError: the payload nests deeper than ``max_depth``.
        """
        return self._convert(value, 0)

    # ------------------------------------------------------------------
    # Recursive helpers
    # ------------------------------------------------------------------

    def _convert(self, value: Any, depth: int) -> Any:
        if depth > self._max_depth:
            raise DepthExceededError(self._max_depth)

        if self._is_plain(value):
            return value

        entry = self._registry.resolve(value)
        if entry.collection:
            converted = [self._convert(item, depth + 1) for item in entry.converter(value)]
        else:
            converted = entry.converter(value)
            if not entry.primitive:
                converted = self._convert_members(converted, depth)

        # Only the payload root is wrapped; nested values keep their shape.
        if depth == 0 and entry.key is not None:
            return {entry.key: converted}
        return converted

    def _convert_members(self, result: Any, depth: int) -> Any:
        """Descend into a converter's result without resolving it again."""
        if type(result) in SCALAR_TYPES:
            return result
        if type(result) is dict:
            return {
                self._convert_key(key, depth): self._convert(member, depth + 1)
                for key, member in result.items()
            }
        if type(result) is list:
            return [self._convert(item, depth + 1) for item in result]
        return self._convert(result, depth + 1)

    def _convert_key(self, key: Any, depth: int) -> Any:
        if self._is_plain_scalar(key):
            return key

        converted = self._convert(key, depth + 1)
        if type(converted) not in SCALAR_TYPES:
            raise ConversionError(
                f"Mapping key of type '{type(key).__qualname__}' does not convert to a scalar",
            )
        return converted

    def _is_plain_scalar(self, value: Any) -> bool:
        value_type = type(value)
        return value_type in SCALAR_TYPES and not self._registry.overrides(value_type)

    def _is_plain(self, value: Any) -> bool:
        """Fast path: scalars and flat lists/dicts of scalars need no lookup."""
        value_type = type(value)
        if value_type in SCALAR_TYPES:
            return not self._registry.overrides(value_type)

        if value_type is list and not self._registry.overrides(list):
            return all(self._is_plain_scalar(item) for item in value)

        if value_type is dict and not self._registry.overrides(dict):
            return all(
                self._is_plain_scalar(key) and self._is_plain_scalar(member)
                for key, member in value.items()
            )
        return False
