"""
Encoding of validation failures into the host's failure-reporting channel.

The host shows object-save errors as one aggregate message. Each failure
travels as "<message> fieldname=<field>", failures are joined with " / ",
and the aggregate carries a "Validation failed: " prefix. The editor maps
messages back to form fields by parsing that text.

A message that itself contains "fieldname=" is ambiguous: parsing splits
at the last occurrence, so such a message is attributed to whatever
follows it.
"""

import re
from collections.abc import Iterable

from field_validation.core.models import FIELD_NAME_MARKER, ValidationFailure

FAILURE_SEPARATOR = " / "
AGGREGATE_PREFIX = "Validation failed: "

_PREFIX_PATTERN = re.compile(r"^Validation failed:\s*", re.IGNORECASE)


def encode_failures(failures: Iterable[ValidationFailure]) -> list[str]:
    """Encode each failure as "<message> fieldname=<field>"."""
    return [failure.encode() for failure in failures]


def merge_validation_messages(
    existing: Iterable[str],
    failures: Iterable[ValidationFailure],
) -> list[str]:
    """
    Append encoded failures to the messages the host pipeline already produced.

    Args:
        existing: Messages from the host's own validation
        failures: Failures from rule enforcement

    Returns:
        New list: existing messages first, then one entry per failure
    """
    return [*existing, *encode_failures(failures)]


def format_aggregate_message(messages: Iterable[str]) -> str:
    """
    Join encoded messages into the aggregate text shown for a failed save.

    Returns:
        "Validation failed: a / b", or "" when there is nothing to report
    """
    messages = list(messages)
    if not messages:
        return ""
    return AGGREGATE_PREFIX + FAILURE_SEPARATOR.join(messages)


def parse_field_errors(message: str) -> dict[str, list[str]]:
    """
    Map an aggregate failure message back to per-field messages.

    Segments without the "fieldname=" marker or with an empty field name
    are skipped. A field with an empty message still appears, with no
    messages.

    Returns:
        Field name -> messages in order of appearance
    """
    result: dict[str, list[str]] = {}

    for part in str(message).split(FAILURE_SEPARATOR):
        idx = part.rfind(FIELD_NAME_MARKER)
        if idx == -1:
            continue

        text = _PREFIX_PATTERN.sub("", part[:idx]).strip()
        field_name = part[idx + len(FIELD_NAME_MARKER):].strip()
        if not field_name:
            continue

        messages = result.setdefault(field_name, [])
        if text:
            messages.append(text)

    return result
