"""
RequiredFieldValidator - ensures a field carries a non-empty value.
"""

from .base_validator import BaseValidator
from .field_value import FieldValue


class RequiredFieldValidator(BaseValidator):
    """
    Validates that a required field is not empty.

    Fails if the value is None, a blank string, or an empty collection.
    Numbers and booleans (including 0 and False) count as present.
    """

    DEFAULT_MESSAGE = "This field is required"

    def validate(self, value: FieldValue) -> None:
        if value.is_empty:
            self.fail(self.DEFAULT_MESSAGE)

    @property
    def rule_type(self) -> str:
        return "required"
