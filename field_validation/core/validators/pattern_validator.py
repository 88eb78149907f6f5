"""
PatternValidator - validates scalar values against the built-in character-class formats.
"""

import re
from re import Pattern
from typing import Any

from .base_validator import BaseValidator
from .field_value import FieldValue


class PatternValidator(BaseValidator):
    """
    Validates that a scalar value fully matches one of the built-in formats.

    Parameters:
    - format: One of "phone", "alpha", "alphanumeric", "numeric"

    Patterns are ASCII-only; the value is trimmed before matching.
    """

    FORMATS: dict[str, tuple[Pattern, str]] = {
        "phone": (
            re.compile(r"^\+?[0-9 ()\-]{6,}$", re.ASCII),
            "Invalid phone number",
        ),
        "alpha": (
            re.compile(r"^[A-Za-z\s]+$", re.ASCII),
            "Only letters are allowed",
        ),
        "alphanumeric": (
            re.compile(r"^[A-Za-z0-9\s]+$", re.ASCII),
            "Only letters and numbers are allowed",
        ),
        "numeric": (
            re.compile(r"^-?[0-9]+(?:\.[0-9]+)?$", re.ASCII),
            "Only numeric values are allowed",
        ),
    }

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.format = self.parameters.get("format")
        if self.format not in self.FORMATS:
            raise ValueError(
                f"PatternValidator requires 'format' to be one of {sorted(self.FORMATS)}, got {self.format!r}"
            )
        self.pattern, self.default_message = self.FORMATS[self.format]

    def validate(self, value: FieldValue) -> None:
        if value.string_value is None:
            return

        if not self.pattern.fullmatch(value.string_value):
            self.fail(self.default_message)

    @property
    def rule_type(self) -> str:
        return self.format
