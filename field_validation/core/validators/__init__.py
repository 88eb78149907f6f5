"""
Field check implementations.

Provides validators for required fields, email addresses, built-in
character-class formats, administrator regexes, text length and numeric ranges.
"""

from .base_validator import BaseValidator, ValidationError
from .email_format_validator import EmailFormatValidator
from .field_value import FieldValue, format_number, is_empty
from .length_validator import LengthValidator
from .pattern_validator import PatternValidator
from .range_validator import RangeValidator
from .regex_validator import PatternError, RegexValidator
from .required_field_validator import RequiredFieldValidator

__all__ = [
    "BaseValidator",
    "ValidationError",
    "FieldValue",
    "is_empty",
    "format_number",
    "RequiredFieldValidator",
    "EmailFormatValidator",
    "PatternValidator",
    "RegexValidator",
    "PatternError",
    "LengthValidator",
    "RangeValidator",
]
