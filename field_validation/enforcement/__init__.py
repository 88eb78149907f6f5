"""
Save-time enforcement of field rules and the failure channel encoding.
"""

from .failure_channel import (
    encode_failures,
    format_aggregate_message,
    merge_validation_messages,
    parse_field_errors,
)
from .object_validator import ObjectValidationError, ObjectValidator, validate_object

__all__ = [
    "ObjectValidator",
    "ObjectValidationError",
    "validate_object",
    "encode_failures",
    "merge_validation_messages",
    "format_aggregate_message",
    "parse_field_errors",
]
