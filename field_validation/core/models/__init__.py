"""
Core data models for field validation rules.

All models use Pydantic for runtime validation and type safety.
"""

from .rule_configuration import (
    RULE_FORMATS,
    ConfigurationError,
    RuleConfiguration,
    RuleFormat,
)
from .validation_failure import FIELD_NAME_MARKER, ValidationFailure

__all__ = [
    "RuleConfiguration",
    "RuleFormat",
    "RULE_FORMATS",
    "ConfigurationError",
    "ValidationFailure",
    "FIELD_NAME_MARKER",
]
