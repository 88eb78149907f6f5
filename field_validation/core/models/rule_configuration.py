"""
RuleConfiguration model: the declarative validation rule attached to one schema field.
"""

import re
from collections.abc import Mapping
from typing import Any, Literal, get_args

from pydantic import BaseModel, Field, ValidationError, field_validator

RuleFormat = Literal[
    "none",
    "email",
    "phone",
    "regex",
    "alpha",
    "alphanumeric",
    "numeric",
    "length",
    "range",
]

RULE_FORMATS: tuple[str, ...] = get_args(RuleFormat)


class ConfigurationError(ValueError):
    """Raised when a rule configuration or identifier is malformed on the write path."""

    def __init__(self, message: str, field_name: str | None = None):
        self.field_name = field_name
        self.message = message
        super().__init__(message)


class RuleConfiguration(BaseModel):
    """
    Validation rule for a single field of a schema.

    Attributes:
        enabled: Master switch; when False no check runs, not even required
        required: Value must be non-empty (unless the mandatory check is omitted)
        format: Content check to apply, independent of required
        regex: Pattern body (no delimiters) for format "regex", matched unanchored
        min_length: Lower length bound for format "length" (0/None = unbounded)
        max_length: Upper length bound for format "length" (0/None = unbounded)
        min: Lower bound for format "range"
        max: Upper bound for format "range"
        message: Custom error text overriding every default message
    """

    enabled: bool = False
    required: bool = False
    format: RuleFormat = "none"
    regex: str = ""
    min_length: int | None = Field(None, ge=0, alias="minLength")
    max_length: int | None = Field(None, ge=0, alias="maxLength")
    min: float | None = Field(None, allow_inf_nan=False)
    max: float | None = Field(None, allow_inf_nan=False)
    message: str = ""

    @field_validator("regex", "message", mode="before")
    @classmethod
    def null_text_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("min_length", "max_length", "min", "max", mode="before")
    @classmethod
    def blank_operand_to_none(cls, v):
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    class Config:
        populate_by_name = True
        frozen = True
        json_schema_extra = {
            "example": {
                "enabled": True,
                "required": True,
                "format": "length",
                "regex": "",
                "minLength": 3,
                "maxLength": 40,
                "min": None,
                "max": None,
                "message": ""
            }
        }

    @classmethod
    def from_payload(cls, payload: Any, field_name: str | None = None) -> "RuleConfiguration":
        """
        Build a configuration from its wire representation.

        Args:
            payload: RuleConfiguration instance or JSON-shaped mapping
            field_name: Field the payload belongs to (for error messages)

        Returns:
            Validated RuleConfiguration

        Raises:
            ConfigurationError: If the payload does not describe a valid rule
        """
        if isinstance(payload, cls):
            return payload

        label = f"field '{field_name}'" if field_name else "rule"
        if not isinstance(payload, Mapping):
            raise ConfigurationError(
                f"Rule configuration for {label} must be an object, got {type(payload).__name__}",
                field_name=field_name,
            )

        try:
            return cls.model_validate(dict(payload))
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(
                f"Invalid rule configuration for {label}: {problems}",
                field_name=field_name,
            ) from e

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape shared with the editor."""
        return self.model_dump(by_alias=True)

    @property
    def custom_message(self) -> str:
        return self.message.strip()

    def pattern_error(self) -> str | None:
        """
        Compile-check the regex operand.

        Returns:
            The compiler's error text when format is "regex" and the pattern
            is invalid, otherwise None
        """
        pattern = self.regex.strip()
        if self.format != "regex" or not pattern:
            return None
        try:
            re.compile(pattern)
        except (re.error, RecursionError, OverflowError) as e:
            return str(e)
        return None
