"""Shared test fixtures."""

import pytest

from response_builder import create_builder


@pytest.fixture()
def config():
    """Configuration used across the builder tests."""
    return {
        "min_code": 100,
        "max_code": 999,
        "map": {
            0: "OK",
            100: "validation_error",
        },
    }


@pytest.fixture()
def builder(config):
    """A builder wired with the default converters and message catalog."""
    return create_builder(config)
