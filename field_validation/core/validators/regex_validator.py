"""
RegexValidator - validates field values against an administrator-supplied pattern.
"""

import re
from functools import lru_cache
from re import Pattern
from typing import Any

from field_validation.observability.logger import get_logger

from .base_validator import BaseValidator
from .field_value import FieldValue

logger = get_logger(__name__)


class PatternError(ValueError):
    """Raised when a rule's regex operand cannot be compiled."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid regex pattern '{pattern}': {reason}")


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> Pattern:
    """
    Compile a pattern body (no delimiters, default flags).

    Raises:
        PatternError: If the pattern is invalid
    """
    try:
        return re.compile(pattern)
    except (re.error, RecursionError, OverflowError) as e:
        raise PatternError(pattern, str(e)) from e


class RegexValidator(BaseValidator):
    """
    Validates that the pattern is found somewhere in a scalar value.

    Parameters:
    - pattern: Regular expression body, matched unanchored

    An empty pattern disables the check. An invalid pattern never raises
    to the caller: it is treated as "does not match".
    """

    DEFAULT_MESSAGE = "Invalid format"

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.pattern = str(self.parameters.get("pattern") or "").strip()

    def validate(self, value: FieldValue) -> None:
        if value.string_value is None or not self.pattern:
            return

        try:
            matched = compile_pattern(self.pattern).search(value.string_value) is not None
        except PatternError as e:
            logger.warning(
                f"Regex rule for field '{self.field_name}' has an invalid pattern: {e.reason}",
                extra={"field_name": self.field_name, "pattern": self.pattern},
            )
            matched = False
        except RecursionError:
            matched = False

        if not matched:
            self.fail(self.DEFAULT_MESSAGE)

    @property
    def rule_type(self) -> str:
        return "regex"
