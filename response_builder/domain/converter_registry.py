"""Converter Registry: maps payload types to converter functions.

Resolution order for a runtime value, highest first:

  1. Exact match on the value's concrete type.
  2. Registered parent type, walking the MRO nearest ancestor first.
     Abstract bases the value really inherits from count here too.
  3. Value is already a scalar (str, int, float, bool): passed through.
  4. Registered interface the value satisfies only virtually (through
     ``ABC.register()`` or a runtime-checkable protocol), in registration
     order.
  5. A converter registered for ``object``, if any.

The registry is meant to be populated once at start-up and read-only
afterwards. It does no locking of its own.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable

from response_builder.domain.exceptions import NoConverterError

logger = logging.getLogger(__name__)

SCALAR_TYPES: tuple[type, ...] = (str, int, float, bool, type(None))

Converter = Callable[[Any], Any]


@dataclass(frozen=True)
class ConverterEntry:
    """A registered converter and the way its result is treated.

    ``collection`` converters return an iterable of raw items, each of which
    is converted again. ``primitive`` converters return a final value that
    is not descended into. A non-empty ``key`` wraps the converted payload
    root as ``{key: result}``.
    """

    descriptor: type
    converter: Converter
    collection: bool = False
    primitive: bool = False
    interface: bool = False
    builtin: bool = False
    key: str | None = None


PASSTHROUGH = ConverterEntry(descriptor=object, converter=lambda value: value, primitive=True)


def _looks_like_interface(descriptor: type) -> bool:
    return inspect.isabstract(descriptor) or bool(getattr(descriptor, "_is_protocol", False))


class ConverterRegistry:
    """Type to converter mapping with deterministic resolution.

    Args:
        debug: Log every resolution (with its reason) at DEBUG level.
    """

    def __init__(self, debug: bool = False):
        self._entries: dict[type, ConverterEntry] = {}
        self._resolved: dict[type, tuple[ConverterEntry, str]] = {}
        self._debug = debug

    @classmethod
    def with_defaults(cls, debug: bool = False) -> ConverterRegistry:
        """Create a registry preloaded with the built-in converters."""
        from response_builder.domain.converters import install_default_converters

        registry = cls(debug=debug)
        install_default_converters(registry)
        return registry

    def register(
        self,
        descriptor: type,
        converter: Converter,
        *,
        collection: bool = False,
        primitive: bool = False,
        interface: bool | None = None,
        builtin: bool = False,
        key: str | None = None,
    ) -> None:
        """Associate ``converter`` with ``descriptor``.

        Registering the same descriptor again replaces the earlier converter
        but keeps its original position for interface tie-breaking.

        Args:
            descriptor: The type (or interface) the converter handles.
            converter: Callable taking the value and returning its converted form.
            collection: Result is an iterable whose items are converted again.
            primitive: Result is final; no recursive conversion.
            interface: Match via ``isinstance`` after the MRO walk. Detected
                automatically for abstract classes and protocols when omitted.
            builtin: Marks converters installed by default.
            key: Wrap the result under this key when the value is the payload
                root.
        """
        if not isinstance(descriptor, type):
            raise TypeError(f"Converter descriptor must be a type, got {descriptor!r}")
        if not callable(converter):
            raise TypeError(f"Converter for {descriptor.__qualname__} must be callable")
        if collection and primitive:
            raise ValueError("A converter cannot be both collection-like and primitive")
        if key is not None and (not isinstance(key, str) or not key):
            raise ValueError(f"Converter key for {descriptor.__qualname__} must be a non-empty string")

        if interface is None:
            interface = _looks_like_interface(descriptor)

        self._entries[descriptor] = ConverterEntry(
            descriptor=descriptor,
            converter=converter,
            collection=collection,
            primitive=primitive,
            interface=interface,
            builtin=builtin,
            key=key,
        )
        self._resolved.clear()

    def get(self, descriptor: type) -> ConverterEntry | None:
        """Return the entry registered for exactly ``descriptor``."""
        return self._entries.get(descriptor)

    def is_builtin(self, descriptor: type) -> bool:
        """True if ``descriptor`` is handled by a default converter."""
        entry = self._entries.get(descriptor)
        return entry is not None and entry.builtin

    def overrides(self, descriptor: type) -> bool:
        """True if ``descriptor`` has a converter registered by the host."""
        entry = self._entries.get(descriptor)
        return entry is not None and not entry.builtin

    def __contains__(self, descriptor: object) -> bool:
        return descriptor in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def resolve(self, value: Any) -> ConverterEntry:
        """Return the converter entry to use for ``value``.

        Raises:
            NoConverterError: nothing matches and ``value`` is not a scalar.
        """
        value_type = type(value)
        cached = self._resolved.get(value_type)
        if cached is None:
            cached = self._lookup(value, value_type)
            self._resolved[value_type] = cached

        entry, reason = cached
        if self._debug:
            logger.debug(
                "Converting %s using %s because: %s",
                value_type.__qualname__, entry.descriptor.__qualname__, reason,
            )
        return entry

    # ------------------------------------------------------------------
    # Private lookup helpers
    # ------------------------------------------------------------------

    def _lookup(self, value: Any, value_type: type) -> tuple[ConverterEntry, str]:
        entry = self._entries.get(value_type)
        if entry is not None:
            return entry, "exact match"

        for ancestor in value_type.__mro__[1:-1]:
            entry = self._entries.get(ancestor)
            if entry is not None:
                return entry, f"subclass of {ancestor.__qualname__}"

        if isinstance(value, SCALAR_TYPES):
            return PASSTHROUGH, "scalar"

        for entry in self._entries.values():
            if entry.interface and isinstance(value, entry.descriptor):
                return entry, f"implements {entry.descriptor.__qualname__}"

        entry = self._entries.get(object)
        if entry is not None:
            return entry, "fallback for object"

        raise NoConverterError(value_type)
