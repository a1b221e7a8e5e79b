"""Response builder factory.

Creates a fully wired ``ResponseBuilder``: code registry, converter
registry, conversion engine and message lookup, each instance with its
own state.
"""

import logging
from collections.abc import Mapping

from response_builder.config.settings import load_config
from response_builder.domain import api_codes
from response_builder.domain.code_registry import CodeRegistry, MessageKey
from response_builder.domain.conversion_engine import ConversionEngine
from response_builder.domain.converter_registry import ConverterRegistry
from response_builder.domain.converters import install_configured_converters
from response_builder.domain.exceptions import (
    ConfigurationError,
    ConversionError,
    DepthExceededError,
    InvalidCodeError,
    InvalidHttpCodeError,
    InvalidMessageError,
    NoConverterError,
    ResponseBuilderError,
)
from response_builder.schemas.config_schema import (
    ConverterSettingsSchema,
    ResponseKeyMapSchema,
    validate_section,
)
from response_builder.schemas.envelope import Envelope
from response_builder.services.exception_mapper import ExceptionMapper
from response_builder.services.messages import CatalogMessageResolver, MessageResolver
from response_builder.services.response_builder import ResponseBuilder

__all__ = [
    "api_codes",
    "create_builder",
    "CatalogMessageResolver",
    "CodeRegistry",
    "ConfigurationError",
    "ConversionEngine",
    "ConversionError",
    "ConverterRegistry",
    "DepthExceededError",
    "Envelope",
    "ExceptionMapper",
    "InvalidCodeError",
    "InvalidHttpCodeError",
    "InvalidMessageError",
    "MessageKey",
    "NoConverterError",
    "ResponseBuilder",
    "ResponseBuilderError",
]


def create_builder(
    config: Mapping | None = None,
    converters: ConverterRegistry | None = None,
    message_resolver: MessageResolver | None = None,
) -> ResponseBuilder:
    """Build and configure a ``ResponseBuilder``.

    Args:
        config: Host configuration (``min_code``, ``max_code``, ``map`` and
            optional sections). Merged onto the package defaults. The code
            range and map are validated on first use, not here.
        converters: Converter registry to use. Defaults to a fresh registry
            with the built-in converters. Entries from ``converter.classes``
            are registered on it either way.
        message_resolver: Message lookup. Defaults to ``CatalogMessageResolver``.
    """
    settings = load_config(config)

    # --- Logging ---
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # --- Conversion ---
    converter_settings = validate_section(
        ConverterSettingsSchema, settings["converter"], "converter",
    )
    if converters is None:
        converters = ConverterRegistry.with_defaults(debug=converter_settings.debug)
    install_configured_converters(converters, converter_settings.classes)
    engine = ConversionEngine(converters, max_depth=converter_settings.max_depth)

    # --- Output ---
    key_map = validate_section(
        ResponseKeyMapSchema, {"keys": settings["response_key_map"] or {}}, "response_key_map",
    ).effective()

    return ResponseBuilder(
        code_registry=CodeRegistry(settings),
        engine=engine,
        message_resolver=message_resolver,
        locale=settings["locale"],
        key_map=key_map,
        settings=settings,
    )
