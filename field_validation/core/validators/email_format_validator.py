"""
EmailFormatValidator - validates email address syntax.
"""

from email_validator import EmailNotValidError, validate_email

from .base_validator import BaseValidator
from .field_value import FieldValue


class EmailFormatValidator(BaseValidator):
    """
    Validates that a scalar value is a syntactically valid email address.

    Only syntax is checked; no DNS or deliverability lookups are made,
    so special-use domains (intranet.local), quoted local parts and
    IP-literal domains are accepted. Non-scalar values are not content-checked.
    """

    DEFAULT_MESSAGE = "Invalid email address"

    def validate(self, value: FieldValue) -> None:
        if value.string_value is None:
            return

        try:
            validate_email(
                value.string_value,
                check_deliverability=False,
                globally_deliverable=False,
                allow_smtputf8=False,
                allow_quoted_local=True,
                allow_domain_literal=True,
            )
        except EmailNotValidError:
            self.fail(self.DEFAULT_MESSAGE)

    @property
    def rule_type(self) -> str:
        return "email"
