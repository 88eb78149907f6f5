"""
RangeValidator - validates numeric values are within a specified range.
"""

from typing import Any

from .base_validator import BaseValidator
from .field_value import FieldValue, format_number


class RangeValidator(BaseValidator):
    """
    Validates that a field holds a number within an inclusive range.

    Parameters:
    - min: Minimum value (inclusive), optional
    - max: Maximum value (inclusive), optional

    Numeric strings count as numbers. Any other non-empty value fails
    with "Invalid numeric value".
    """

    INVALID_NUMBER_MESSAGE = "Invalid numeric value"

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.min_value = self.parameters.get("min")
        self.max_value = self.parameters.get("max")

    def validate(self, value: FieldValue) -> None:
        number = value.numeric_value
        if number is None:
            self.fail(self.INVALID_NUMBER_MESSAGE)

        if self.min_value is not None and number < self.min_value:
            self.fail(f"Minimum value is {format_number(self.min_value)}")

        if self.max_value is not None and number > self.max_value:
            self.fail(f"Maximum value is {format_number(self.max_value)}")

    @property
    def rule_type(self) -> str:
        return "range"
