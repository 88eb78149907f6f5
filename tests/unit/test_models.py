"""
Unit tests for Pydantic data models.

Tests rule configuration parsing, normalization and constraint enforcement.
"""

import pytest
from pydantic import ValidationError

from field_validation.core.models import (
    ConfigurationError,
    RuleConfiguration,
    ValidationFailure,
)


class TestRuleConfiguration:
    """Tests for RuleConfiguration model"""

    def test_defaults(self):
        """Test an empty payload yields a disabled no-op rule"""
        config = RuleConfiguration.from_payload({})
        assert config.enabled is False
        assert config.required is False
        assert config.format == "none"
        assert config.regex == ""
        assert config.min_length is None
        assert config.max_length is None
        assert config.min is None
        assert config.max is None
        assert config.message == ""

    def test_camel_case_payload(self):
        """Test the editor's camelCase keys map onto the model"""
        config = RuleConfiguration.from_payload(
            {"enabled": True, "format": "length", "minLength": 3, "maxLength": "12"}
        )
        assert config.min_length == 3
        assert config.max_length == 12

    def test_snake_case_names_accepted(self):
        """Test population by field name"""
        config = RuleConfiguration(enabled=True, format="length", min_length=2)
        assert config.min_length == 2

    def test_to_payload_uses_camel_case(self):
        """Test serialization to the shared JSON shape"""
        payload = RuleConfiguration(enabled=True, format="range", min=0, max=10).to_payload()
        assert payload == {
            "enabled": True,
            "required": False,
            "format": "range",
            "regex": "",
            "minLength": None,
            "maxLength": None,
            "min": 0.0,
            "max": 10.0,
            "message": "",
        }

    def test_payload_round_trip(self):
        """Test to_payload output parses back to an equal configuration"""
        config = RuleConfiguration(
            enabled=True, required=True, format="regex", regex="^[A-Z]{2}$", message="Two capitals"
        )
        assert RuleConfiguration.from_payload(config.to_payload()) == config

    @pytest.mark.parametrize("blank", ["", "   ", None])
    def test_blank_operands_become_none(self, blank):
        """Test the editor's empty inputs clear numeric operands"""
        config = RuleConfiguration.from_payload(
            {"minLength": blank, "maxLength": blank, "min": blank, "max": blank}
        )
        assert config.min_length is None
        assert config.max_length is None
        assert config.min is None
        assert config.max is None

    def test_null_text_becomes_empty(self):
        """Test null regex/message are stored as empty text"""
        config = RuleConfiguration.from_payload({"regex": None, "message": None})
        assert config.regex == ""
        assert config.message == ""

    def test_unknown_format_rejected(self):
        """Test that an unknown format raises ConfigurationError"""
        with pytest.raises(ConfigurationError) as exc_info:
            RuleConfiguration.from_payload({"format": "soundex"}, field_name="sku")

        assert exc_info.value.field_name == "sku"
        assert "sku" in str(exc_info.value)
        assert "format" in str(exc_info.value)

    def test_negative_length_rejected(self):
        with pytest.raises(ConfigurationError):
            RuleConfiguration.from_payload({"minLength": -1})

    def test_non_numeric_bound_rejected(self):
        with pytest.raises(ConfigurationError):
            RuleConfiguration.from_payload({"min": "ten"})

    def test_infinite_bound_rejected(self):
        with pytest.raises(ConfigurationError):
            RuleConfiguration.from_payload({"max": float("inf")})

    def test_non_mapping_payload_rejected(self):
        with pytest.raises(ConfigurationError, match="must be an object"):
            RuleConfiguration.from_payload(["enabled"], field_name="sku")

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            RuleConfiguration.from_payload("enabled")

    def test_existing_instance_passes_through(self):
        config = RuleConfiguration(enabled=True)
        assert RuleConfiguration.from_payload(config) is config

    def test_custom_message_is_trimmed(self):
        assert RuleConfiguration(message="  Fix it ").custom_message == "Fix it"

    def test_pattern_error(self):
        """Test compile errors of the regex operand are reported"""
        assert RuleConfiguration(format="regex", regex="[0-9").pattern_error()
        assert RuleConfiguration(format="regex", regex="^[0-9]+$").pattern_error() is None
        assert RuleConfiguration(format="regex", regex="").pattern_error() is None
        assert RuleConfiguration(format="length", regex="[0-9").pattern_error() is None

    def test_frozen(self):
        config = RuleConfiguration(enabled=True, format="email")
        with pytest.raises(ValidationError):
            config.enabled = False


class TestValidationFailure:
    """Tests for ValidationFailure model"""

    def test_encode(self):
        failure = ValidationFailure(field_name="sku", message="Minimum length is 3")
        assert failure.encode() == "Minimum length is 3 fieldname=sku"

    def test_alias(self):
        failure = ValidationFailure.model_validate({"fieldName": "sku", "message": "x"})
        assert failure.field_name == "sku"
        assert failure.model_dump(by_alias=True) == {"fieldName": "sku", "message": "x"}

    def test_with_field_name(self):
        failure = ValidationFailure(message="This field is required")
        named = failure.with_field_name("title")

        assert named.field_name == "title"
        assert failure.field_name == ""

    def test_frozen(self):
        failure = ValidationFailure(field_name="sku", message="x")
        with pytest.raises(ValidationError):
            failure.message = "y"
