"""
Rule engine for evaluating a field value against its rule configuration.

The engine turns a RuleConfiguration into validators, runs them in order
and reports the first failing check as a ValidationFailure. Evaluation is
pure: it never raises and never touches shared state.
"""

from collections.abc import Mapping
from typing import Any

from field_validation.core.models import (
    ConfigurationError,
    RuleConfiguration,
    ValidationFailure,
)
from field_validation.core.validators import (
    BaseValidator,
    EmailFormatValidator,
    FieldValue,
    LengthValidator,
    PatternValidator,
    RangeValidator,
    RegexValidator,
    RequiredFieldValidator,
    ValidationError,
)
from field_validation.observability.logger import get_logger

logger = get_logger(__name__)


class RuleEngine:
    """
    Evaluates values against one field's RuleConfiguration.

    Order of checks:
    1. disabled rules pass everything
    2. required (unless the mandatory check is omitted)
    3. empty values pass; content checks only apply to present values
    4. the format check selected by the configuration
    """

    # format -> (validator class, parameter builder)
    VALIDATOR_REGISTRY = {
        "email": (EmailFormatValidator, lambda c: {}),
        "phone": (PatternValidator, lambda c: {"format": "phone"}),
        "alpha": (PatternValidator, lambda c: {"format": "alpha"}),
        "alphanumeric": (PatternValidator, lambda c: {"format": "alphanumeric"}),
        "numeric": (PatternValidator, lambda c: {"format": "numeric"}),
        "regex": (RegexValidator, lambda c: {"pattern": c.regex}),
        "length": (
            LengthValidator,
            lambda c: {"min_length": c.min_length, "max_length": c.max_length},
        ),
        "range": (RangeValidator, lambda c: {"min": c.min, "max": c.max}),
    }

    def __init__(self, config: RuleConfiguration, field_name: str = ""):
        """
        Initialize the rule engine for one field.

        Args:
            config: The field's rule configuration
            field_name: Field the configuration belongs to (copied into failures)
        """
        self.config = config
        self.field_name = field_name
        self.required_validator = RequiredFieldValidator(field_name)
        self.format_validator = self._build_format_validator()

    def _build_format_validator(self) -> BaseValidator | None:
        """Build the content check for the configured format ("none" has none)."""
        entry = self.VALIDATOR_REGISTRY.get(self.config.format)
        if entry is None:
            return None
        validator_class, build_parameters = entry
        return validator_class(self.field_name, build_parameters(self.config))

    def evaluate(self, value: Any, omit_mandatory_check: bool = False) -> ValidationFailure | None:
        """
        Evaluate a runtime value.

        Args:
            value: The field's current value
            omit_mandatory_check: Skip the required check (host-driven drafts)

        Returns:
            ValidationFailure for the first failing check, or None
        """
        if not self.config.enabled:
            return None

        field_value = FieldValue.of(value)

        try:
            if self.config.required and not omit_mandatory_check:
                self.required_validator.validate(field_value)

            if field_value.is_empty:
                return None

            if self.format_validator is not None:
                self.format_validator.validate(field_value)

        except ValidationError as e:
            return ValidationFailure(
                field_name=self.field_name,
                message=self.config.custom_message or e.message,
            )

        return None

    def describe(self) -> dict[str, Any]:
        """
        Summary of the checks this engine runs.

        Returns:
            Dictionary with enabled flag and the active check types
        """
        checks = []
        if self.config.enabled:
            if self.config.required:
                checks.append(self.required_validator.rule_type)
            if self.format_validator is not None:
                checks.append(self.format_validator.rule_type)
        return {
            "field_name": self.field_name,
            "enabled": self.config.enabled,
            "checks": checks,
        }


def evaluate(
    value: Any,
    config: RuleConfiguration | Mapping[str, Any],
    omit_mandatory_check: bool = False,
    field_name: str = "",
) -> ValidationFailure | None:
    """
    Evaluate a value against a rule configuration.

    Args:
        value: The field's runtime value
        config: RuleConfiguration or its JSON-shaped mapping
        omit_mandatory_check: Skip the required check
        field_name: Field name to put on the failure

    Returns:
        ValidationFailure or None. A configuration mapping that cannot be
        parsed is logged and treated as "no rule".
    """
    if not isinstance(config, RuleConfiguration):
        try:
            config = RuleConfiguration.from_payload(config, field_name=field_name or None)
        except ConfigurationError as e:
            logger.warning(
                f"Skipping unreadable rule configuration: {e}",
                extra={"field_name": field_name},
            )
            return None

    return RuleEngine(config, field_name).evaluate(value, omit_mandatory_check)
