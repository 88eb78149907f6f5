"""
Base validator interface for all field checks.

All validators inherit from BaseValidator and implement validate().
A failing check raises ValidationError carrying its default message;
the rule engine turns it into a ValidationFailure.
"""

from abc import ABC, abstractmethod
from typing import Any

from .field_value import FieldValue


class ValidationError(Exception):
    """Raised when a check does not pass."""

    def __init__(self, rule_name: str, field_name: str, message: str):
        self.rule_name = rule_name
        self.field_name = field_name
        self.message = message
        super().__init__(f"[{rule_name}] {field_name}: {message}")


class BaseValidator(ABC):
    """
    Abstract base class for all validators.

    Each validator implements one check (required, email, phone, regex,
    alpha, alphanumeric, numeric, length, range).
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        """
        Initialize validator.

        Args:
            field_name: Name of the field to validate
            parameters: Check-specific parameters (e.g., min/max for range)
        """
        self.field_name = field_name
        self.parameters = parameters or {}

    @abstractmethod
    def validate(self, value: FieldValue) -> None:
        """
        Validate a value against this check.

        Args:
            value: The normalized field value

        Raises:
            ValidationError: If the check fails
        """
        pass

    @property
    @abstractmethod
    def rule_type(self) -> str:
        """Return the rule type identifier."""
        pass

    def fail(self, message: str) -> None:
        raise ValidationError(rule_name=self.rule_type, field_name=self.field_name, message=message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(field={self.field_name}, params={self.parameters})"
