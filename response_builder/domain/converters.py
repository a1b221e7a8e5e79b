"""Built-in converters installed by ``ConverterRegistry.with_defaults()``.

Any of these can be replaced by registering another converter for the
same type.
"""

import dataclasses
import datetime
import importlib
import logging
import uuid
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Protocol, runtime_checkable

from pydantic import BaseModel

from response_builder.domain.converter_registry import ConverterRegistry
from response_builder.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@runtime_checkable
class SupportsToDict(Protocol):
    """Objects exposing a ``to_dict()`` method (ORM models, value objects)."""

    def to_dict(self) -> dict: ...


@runtime_checkable
class DataclassInstance(Protocol):
    """Instances of classes decorated with ``@dataclass``."""

    __dataclass_fields__: ClassVar[dict[str, Any]]


def convert_to_dict(obj: SupportsToDict) -> dict:
    return obj.to_dict()


def convert_model(model: BaseModel) -> dict:
    return model.model_dump()


def convert_dataclass(obj: Any) -> dict:
    # Field values are converted by the engine afterwards.
    return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}


def convert_enum(member: Enum) -> Any:
    return member.value


def convert_temporal(value: datetime.date | datetime.time) -> str:
    return value.isoformat()


def install_default_converters(registry: ConverterRegistry) -> None:
    """Register the default converter set on ``registry``."""
    for sequence_type in (list, tuple, set, frozenset):
        registry.register(sequence_type, list, collection=True, builtin=True)

    registry.register(dict, dict, builtin=True)
    registry.register(BaseModel, convert_model, builtin=True)
    registry.register(Enum, convert_enum, builtin=True)

    for temporal_type in (datetime.datetime, datetime.date, datetime.time):
        registry.register(temporal_type, convert_temporal, primitive=True, builtin=True)
    registry.register(Decimal, float, primitive=True, builtin=True)
    registry.register(uuid.UUID, str, primitive=True, builtin=True)

    # Interfaces, in tie-breaking order.
    registry.register(Mapping, dict, interface=True, builtin=True)
    registry.register(SupportsToDict, convert_to_dict, interface=True, builtin=True)
    registry.register(DataclassInstance, convert_dataclass, interface=True, builtin=True)


def import_object(path: str) -> Any:
    """Import ``package.module.name`` and return ``name``."""
    module_name, _, attribute = path.rpartition(".")
    if not module_name or not attribute:
        raise ConfigurationError(f"CONFIG: '{path}' is not a dotted import path")

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"CONFIG: cannot import module '{module_name}': {exc}") from exc

    try:
        return getattr(module, attribute)
    except AttributeError as exc:
        raise ConfigurationError(f"CONFIG: module '{module_name}' has no '{attribute}'") from exc


def install_configured_converters(registry: ConverterRegistry, classes: Mapping[str, Any]) -> None:
    """Register ``converter.classes`` entries on ``registry``.

    Entries are registered highest ``priority`` first, so a higher priority
    wins interface tie-breaks. Equal priorities keep their configured order.

    Args:
        registry: Registry to populate.
        classes: Dotted class path to a validated ``ClassMappingSchema``.

    Raises:
        ConfigurationError: a class or handler cannot be imported, the class
            path does not name a type or the handler is not callable.
    """
    ordered = sorted(classes.items(), key=lambda item: item[1].priority, reverse=True)
    for class_path, mapping in ordered:
        descriptor = import_object(class_path)
        if not isinstance(descriptor, type):
            raise ConfigurationError(f"CONFIG: converter class '{class_path}' is not a type")

        handler = import_object(mapping.handler)
        if not callable(handler):
            raise ConfigurationError(
                f"CONFIG: converter handler '{mapping.handler}' for '{class_path}' is not callable",
            )

        registry.register(
            descriptor,
            handler,
            collection=mapping.collection,
            primitive=mapping.primitive,
            key=mapping.key,
        )
        logger.info("Registered configured converter %s for %s", mapping.handler, class_path)
