"""
LengthValidator - validates the character count of a scalar value.
"""

from typing import Any

from .base_validator import BaseValidator
from .field_value import FieldValue


class LengthValidator(BaseValidator):
    """
    Validates that the trimmed text of a value lies within length bounds.

    Parameters:
    - min_length: Minimum number of characters (0 or None = no lower bound)
    - max_length: Maximum number of characters (0 or None = no upper bound)

    Length counts Unicode code points. Only the first failing bound reports.
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.min_length = self.parameters.get("min_length")
        self.max_length = self.parameters.get("max_length")

    def validate(self, value: FieldValue) -> None:
        if value.string_value is None:
            return

        length = len(value.string_value)

        if self.min_length and length < self.min_length:
            self.fail(f"Minimum length is {self.min_length}")

        if self.max_length and length > self.max_length:
            self.fail(f"Maximum length is {self.max_length}")

    @property
    def rule_type(self) -> str:
        return "length"
