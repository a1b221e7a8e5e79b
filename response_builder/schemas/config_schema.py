"""Pydantic schemas for response builder configuration validation."""

from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    ValidationError,
    field_validator,
    model_validator,
)

from response_builder.domain.exceptions import ConfigurationError

DEFAULT_HANDLER_KEY = "default"

MessageKeyStr = Annotated[str, Field(min_length=1)]


def _to_code(raw: Any) -> int:
    """Normalise a map key to an integer code (numeric strings allowed)."""
    if isinstance(raw, bool):
        raise ValueError(f"code {raw!r} must be an integer, not a boolean")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().removeprefix("-").isdigit():
        return int(raw)
    raise ValueError(f"code {raw!r} is not an integer")


class CodeRangeSchema(BaseModel):
    """Validates the configured ``min_code``/``max_code`` bounds."""

    model_config = ConfigDict(strict=True)

    min_code: int
    max_code: int

    @model_validator(mode="after")
    def validate_range(self) -> "CodeRangeSchema":
        if self.min_code > self.max_code:
            msg = f"min_code ({self.min_code}) must not be greater than max_code ({self.max_code})."
            raise ValueError(msg)
        return self


class CodeMapSchema(BaseModel):
    """Validates the shape of the configured code to message identifier map."""

    entries: dict[int, MessageKeyStr]

    @field_validator("entries", mode="before")
    @classmethod
    def normalise_codes(cls, value: Any) -> dict[int, Any]:
        if not isinstance(value, Mapping):
            raise ValueError(f"map must be a mapping ({type(value).__name__} given)")

        normalised: dict[int, Any] = {}
        for raw_code, message_key in value.items():
            code = _to_code(raw_code)
            if code in normalised:
                raise ValueError(f"duplicate code {code} in map")
            normalised[code] = message_key
        return normalised


class HandlerEntrySchema(BaseModel):
    """A single exception handler mapping entry."""

    api_code: StrictInt
    http_code: Annotated[StrictInt, Field(ge=400, le=599)] | None = None


class ExceptionHandlerSchema(BaseModel):
    """Validates the ``exception_handler`` configuration block."""

    include_class_name: bool = False
    map: dict[int | str, HandlerEntrySchema] = Field(default_factory=dict)

    @field_validator("map", mode="before")
    @classmethod
    def normalise_statuses(cls, value: Any) -> dict[int | str, Any]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ValueError(f"map must be a mapping ({type(value).__name__} given)")

        normalised: dict[int | str, Any] = {}
        for raw_status, entry in value.items():
            status = DEFAULT_HANDLER_KEY if raw_status == DEFAULT_HANDLER_KEY else _to_code(raw_status)
            if status in normalised:
                raise ValueError(f"duplicate entry {status!r} in exception handler map")
            normalised[status] = entry
        return normalised


class ClassMappingSchema(BaseModel):
    """One ``converter.classes`` entry, keyed by the dotted path of the class."""

    handler: Annotated[str, Field(min_length=1)]
    key: Annotated[str, Field(min_length=1)] | None = None
    priority: StrictInt = 0
    collection: bool = False
    primitive: bool = False

    @model_validator(mode="after")
    def validate_kind(self) -> "ClassMappingSchema":
        if self.collection and self.primitive:
            raise ValueError("a class mapping cannot be both collection and primitive")
        return self


class ConverterSettingsSchema(BaseModel):
    """Validates the ``converter`` configuration block."""

    max_depth: StrictInt = Field(default=64, ge=1)
    debug: bool = False
    classes: dict[str, ClassMappingSchema] = Field(default_factory=dict)

    @field_validator("classes", mode="before")
    @classmethod
    def default_classes(cls, value: Any) -> Any:
        return {} if value is None else value


RESPONSE_KEYS: tuple[str, ...] = ("success", "code", "locale", "message", "data", "http_code")


class ResponseKeyMapSchema(BaseModel):
    """Validates user renames of the envelope's top level keys."""

    keys: dict[str, MessageKeyStr] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_keys(self) -> "ResponseKeyMapSchema":
        unknown = sorted(set(self.keys) - set(RESPONSE_KEYS))
        if unknown:
            raise ValueError(f"unknown response key reference(s): {unknown}")

        effective = [self.keys.get(key, key) for key in RESPONSE_KEYS]
        if len(set(effective)) != len(effective):
            raise ValueError("response keys must be mapped to distinct names")
        return self

    def effective(self) -> dict[str, str]:
        return {key: self.keys.get(key, key) for key in RESPONSE_KEYS}


def validate_section(schema: type[BaseModel], data: Any, section: str) -> Any:
    """Validate ``data`` with ``schema``, reporting failures as ``ConfigurationError``."""
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"CONFIG: invalid '{section}': {format_errors(exc)}") from exc


def format_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)
