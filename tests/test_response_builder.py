"""Tests for the ResponseBuilder service and the create_builder factory."""

from fractions import Fraction

import pytest
from pydantic import ValidationError

from response_builder import create_builder
from response_builder.domain import api_codes
from response_builder.domain.conversion_engine import ConversionEngine
from response_builder.domain.converter_registry import ConverterRegistry
from response_builder.domain.exceptions import (
    ConfigurationError,
    InvalidCodeError,
    InvalidHttpCodeError,
    InvalidMessageError,
    NoConverterError,
    ResponseBuilderError,
)
from response_builder.services.messages import CatalogMessageResolver


class Widget:
    def __init__(self, widget_id):
        self.widget_id = widget_id


class Bag:
    def __init__(self, *items):
        self._items = list(items)

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        return iter(self._items)


class TestBuild:
    """Tests for ResponseBuilder.build()."""

    def test_ok_envelope(self, builder):
        envelope = builder.build(0, None, None, 200)
        assert envelope.success is True
        assert envelope.code == 0
        assert envelope.data is None
        assert envelope.http_code == 200
        assert envelope.message == "OK"

    def test_error_code_envelope(self, builder):
        envelope = builder.build(100, None, {"field": "name"}, 422)
        assert envelope.success is False
        assert envelope.code == 100
        assert envelope.data == {"field": "name"}
        assert envelope.http_code == 422
        assert envelope.message == "validation_error"

    def test_code_above_max_raises(self, builder):
        with pytest.raises(InvalidCodeError) as exc_info:
            builder.build(5000, None, None, 400)
        assert exc_info.value.api_code == 5000
        assert "100-999" in exc_info.value.message

    def test_non_integer_code_raises(self, builder):
        with pytest.raises(InvalidCodeError):
            builder.build("100")
        with pytest.raises(InvalidCodeError):
            builder.build(False)

    def test_non_integer_http_code_raises(self, builder):
        with pytest.raises(InvalidHttpCodeError):
            builder.build(100, http_code="422")

    def test_custom_message_wins(self, builder):
        envelope = builder.build(100, "Name is required", None, 422)
        assert envelope.message == "Name is required"

    def test_non_string_custom_message_raises(self, builder):
        with pytest.raises(InvalidMessageError) as exc_info:
            builder.build(100, message=42)
        assert exc_info.value.error_code == "INVALID_MESSAGE"

    def test_non_string_resolved_message_raises(self, config):
        builder = create_builder(config, message_resolver=lambda key, params: None)
        with pytest.raises(ResponseBuilderError) as exc_info:
            builder.build(100)
        assert isinstance(exc_info.value, InvalidMessageError)
        assert "NoneType" in exc_info.value.message

    def test_unmapped_code_uses_fallback_message(self, builder):
        envelope = builder.build(250, http_code=400)
        assert envelope.message == "Error #250"

    def test_message_params_are_substituted(self, config):
        config["map"][101] = "api.too_long"
        resolver = CatalogMessageResolver({"api.too_long": "{field} is too long"})
        builder = create_builder(config, message_resolver=resolver)

        envelope = builder.build(101, message_params={"field": "title"})
        assert envelope.message == "title is too long"

    def test_payload_objects_are_converted(self, config):
        registry = ConverterRegistry.with_defaults()
        registry.register(Widget, lambda widget: {"id": widget.widget_id})
        builder = create_builder(config, converters=registry)

        envelope = builder.build(0, data=[Widget(1), Widget(2)])
        assert envelope.data == [{"id": 1}, {"id": 2}]

    def test_unconvertible_payload_raises(self, builder):
        with pytest.raises(NoConverterError):
            builder.build(0, data={"widget": Widget(1)})

    def test_invalid_code_is_reported_before_conversion(self, builder):
        with pytest.raises(InvalidCodeError):
            builder.build(5000, data=Widget(1))

    def test_broken_configuration_surfaces_on_build(self):
        builder = create_builder({"min_code": 100, "map": {}})
        with pytest.raises(ConfigurationError):
            builder.build(0)

    def test_envelope_is_immutable(self, builder):
        envelope = builder.build(0)
        with pytest.raises(ValidationError):
            envelope.code = 1


class TestSuccessAndError:
    """Tests for the success()/error() shortcuts."""

    def test_success_defaults(self, builder):
        envelope = builder.success({"id": 1})
        assert envelope.success is True
        assert envelope.code == api_codes.OK
        assert envelope.http_code == 200
        assert envelope.data == {"id": 1}

    @pytest.mark.parametrize("http_code", [199, 300, 404])
    def test_success_rejects_non_2xx(self, builder, http_code):
        with pytest.raises(InvalidHttpCodeError) as exc_info:
            builder.success(http_code=http_code)
        assert exc_info.value.http_code == http_code

    def test_error_defaults(self, builder):
        envelope = builder.error(100)
        assert envelope.success is False
        assert envelope.http_code == 400

    def test_error_rejects_ok_code(self, builder):
        with pytest.raises(InvalidCodeError):
            builder.error(api_codes.OK)

    @pytest.mark.parametrize("http_code", [200, 399, 600])
    def test_error_rejects_non_error_http_codes(self, builder, http_code):
        with pytest.raises(InvalidHttpCodeError):
            builder.error(100, http_code=http_code)

    def test_error_with_message_and_data(self, builder):
        envelope = builder.error(100, data={"field": "email"}, http_code=422, message="Bad email")
        assert envelope.message == "Bad email"
        assert envelope.data == {"field": "email"}


class TestSerialisation:
    """Tests for envelope output shape."""

    def test_default_keys(self, builder):
        body = builder.to_dict(builder.build(0))
        assert body == {
            "success": True,
            "code": 0,
            "locale": None,
            "message": "OK",
            "data": None,
            "http_code": 200,
        }

    def test_locale_and_key_map(self, config):
        config["locale"] = "en"
        config["response_key_map"] = {"code": "api_code", "data": "payload"}
        builder = create_builder(config)

        body = builder.to_dict(builder.build(0, data=[1]))
        assert body["api_code"] == 0
        assert body["payload"] == [1]
        assert body["locale"] == "en"
        assert "code" not in body

    def test_locale_message_alias(self, builder):
        envelope = builder.build(0)
        assert envelope.locale_message == envelope.message == "OK"

    def test_unknown_key_reference_raises(self, config):
        config["response_key_map"] = {"status": "state"}
        with pytest.raises(ConfigurationError):
            create_builder(config)

    def test_colliding_key_names_raise(self, config):
        config["response_key_map"] = {"code": "data"}
        with pytest.raises(ConfigurationError):
            create_builder(config)


class TestFactory:
    """Tests for create_builder wiring."""

    def test_builders_do_not_share_state(self, config):
        first = create_builder(config)
        second = create_builder({"min_code": 1000, "max_code": 1999, "map": {}})

        assert first.code_registry.is_code_valid(500)
        assert not second.code_registry.is_code_valid(500)
        assert first.engine.registry is not second.engine.registry

    def test_converter_max_depth_is_applied(self, config):
        config["converter"] = {"max_depth": 1}
        builder = create_builder(config)
        assert builder.build(0, data=[[1]]).data == [[1]]

    def test_invalid_converter_settings_raise(self, config):
        config["converter"] = {"max_depth": 0}
        with pytest.raises(ConfigurationError):
            create_builder(config)

    def test_custom_engine_can_be_injected(self, config):
        from response_builder.domain.code_registry import CodeRegistry
        from response_builder.services.response_builder import ResponseBuilder

        builder = ResponseBuilder(CodeRegistry(config), ConversionEngine(ConverterRegistry()))
        assert builder.build(0, data={"a": 1}).data == {"a": 1}


class TestCatalogMessageResolver:
    def test_unknown_key_resolves_to_itself(self):
        resolver = CatalogMessageResolver()
        assert resolver("api.unknown", {}) == "api.unknown"

    def test_unknown_key_uses_fallback_template(self):
        resolver = CatalogMessageResolver(fallback="No message for {api_code}")
        assert resolver("api.unknown", {"api_code": 7}) == "No message for 7"

    def test_missing_params_leave_template_unformatted(self):
        resolver = CatalogMessageResolver({"api.greet": "Hello {name}"})
        assert resolver("api.greet", {}) == "Hello {name}"


class TestConfiguredConverters:
    """Tests for converters declared in ``converter.classes``."""

    def test_configured_class_with_key(self, config):
        config["converter"] = {
            "classes": {
                "fractions.Fraction": {"handler": "builtins.str", "key": "ratio", "primitive": True},
            },
        }
        builder = create_builder(config)
        assert builder.build(0, data=Fraction(1, 3)).data == {"ratio": "1/3"}

    def test_equal_priorities_keep_configured_order(self, config):
        config["converter"] = {
            "classes": {
                "collections.abc.Sized": {"handler": "builtins.len", "primitive": True},
                "collections.abc.Iterable": {"handler": "builtins.list", "collection": True},
            },
        }
        builder = create_builder(config)
        assert builder.build(0, data=Bag(1, 2)).data == 2

    def test_higher_priority_is_tried_first(self, config):
        config["converter"] = {
            "classes": {
                "collections.abc.Sized": {"handler": "builtins.len", "primitive": True},
                "collections.abc.Iterable": {
                    "handler": "builtins.list",
                    "collection": True,
                    "priority": 10,
                },
            },
        }
        builder = create_builder(config)
        assert builder.build(0, data=Bag(1, 2)).data == [1, 2]

    def test_injected_registry_receives_configured_classes(self, config):
        config["converter"] = {
            "classes": {"fractions.Fraction": {"handler": "builtins.float", "primitive": True}},
        }
        registry = ConverterRegistry()
        create_builder(config, converters=registry)
        assert Fraction in registry

    @pytest.mark.parametrize(
        "classes",
        [
            {"missing_module_for_tests.Thing": {"handler": "builtins.str"}},
            {"fractions.Fraction": {"handler": "fractions.NoSuchHandler"}},
            {"fractions.Fraction": {"handler": "math.pi"}},
            {"math.sqrt": {"handler": "builtins.str"}},
            {"Fraction": {"handler": "builtins.str"}},
            {"fractions.Fraction": {"handler": "builtins.str", "collection": True, "primitive": True}},
            {"fractions.Fraction": {"key": "ratio"}},
        ],
    )
    def test_invalid_class_mapping_raises(self, config, classes):
        config["converter"] = {"classes": classes}
        with pytest.raises(ConfigurationError):
            create_builder(config)
