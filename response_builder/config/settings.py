"""Response builder configuration defaults.

``min_code``, ``max_code`` and ``map`` have no defaults: the host must supply
them. Locale and converter debugging can be set via environment variables.
"""

import copy
import os
from collections.abc import Mapping

from response_builder.domain.exceptions import ConfigurationError

DEFAULTS: dict = {
    "locale": None,
    "response_key_map": {},
    "converter": {
        "max_depth": 64,
        "debug": False,
        "classes": {},
    },
    "exception_handler": {
        "include_class_name": False,
        "map": {},
    },
}

_TRUTHY = {"1", "true", "yes", "on"}


def merge_config(original: Mapping, merging: Mapping) -> dict:
    """Recursively merge ``merging`` onto ``original``.

    Nested mappings are merged key by key; any other value replaces the
    original one. A key present in both with values of different types
    (``None`` excepted) is a configuration error.
    """
    result = dict(original)
    for key, value in merging.items():
        if key not in original or original[key] is None or value is None:
            result[key] = copy.deepcopy(value)
            continue

        current = original[key]
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = merge_config(current, value)
        elif type(current) is not type(value):
            raise ConfigurationError(
                f"Cannot merge '{type(value).__name__}' into "
                f"'{type(current).__name__}' for key '{key}'.",
            )
        else:
            result[key] = copy.deepcopy(value)
    return result


def load_config(overrides: Mapping | None = None) -> dict:
    """Build the effective configuration: defaults, then environment, then overrides."""
    if overrides is not None and not isinstance(overrides, Mapping):
        raise ConfigurationError(
            f"CONFIG: configuration must be a mapping ({type(overrides).__name__} given)",
        )

    config = copy.deepcopy(DEFAULTS)

    locale = os.getenv("RESPONSE_BUILDER_LOCALE")
    if locale:
        config["locale"] = locale

    debug = os.getenv("RESPONSE_BUILDER_DEBUG_CONVERTER")
    if debug is not None:
        config["converter"]["debug"] = debug.strip().lower() in _TRUTHY

    return merge_config(config, overrides or {})
