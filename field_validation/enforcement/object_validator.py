"""
Save-time enforcement of field rules against an object instance.

Rules are always read fresh from the store; the loader cache serves
editor surfaces only.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from field_validation.core.models import ValidationFailure
from field_validation.core.rules import RuleEngine
from field_validation.observability.logger import get_logger
from field_validation.observability.metrics import (
    increment_counter,
    record_validation_failure,
    rule_evaluations_total,
)
from field_validation.warehouse.rule_store import InMemoryRuleStore, RuleStore

from .failure_channel import format_aggregate_message, merge_validation_messages

logger = get_logger(__name__)


class ObjectValidationError(Exception):
    """
    Aggregate failure for an object save, in the host's message format.

    Attributes:
        messages: Encoded messages ("<message> fieldname=<field>")
        failures: The rule failures among them
    """

    def __init__(self, messages: list[str], failures: list[ValidationFailure] | None = None):
        self.messages = messages
        self.failures = failures or []
        super().__init__(format_aggregate_message(messages))


class ObjectValidator:
    """
    Runs a schema's stored rules against an object's field values.

    Args:
        store: RuleStore or InMemoryRuleStore to read rules from
    """

    def __init__(self, store: RuleStore | InMemoryRuleStore):
        self.store = store

    def validate_object(
        self,
        schema_id: str,
        field_values: Mapping[str, Any],
        omit_mandatory_check: bool = False,
    ) -> list[ValidationFailure]:
        """
        Validate an object instance at save time.

        Args:
            schema_id: Schema of the object
            field_values: Field name -> current value for the fields the object exposes
            omit_mandatory_check: Skip required checks (host-driven drafts)

        Returns:
            Every failure, ordered by field name. Rules for fields the object
            does not expose are skipped.
        """
        rules = self.store.get_rules_for_schema(schema_id)
        if not rules:
            return []

        failures = []
        skipped = []
        for field_name in sorted(rules):
            if field_name not in field_values:
                skipped.append(field_name)
                continue

            config = rules[field_name]
            failure = RuleEngine(config, field_name).evaluate(
                field_values[field_name], omit_mandatory_check
            )
            if failure is None:
                increment_counter(rule_evaluations_total, format=config.format, status="passed")
                continue

            increment_counter(rule_evaluations_total, format=config.format, status="failed")
            record_validation_failure(str(schema_id), config.format)
            failures.append(failure)

        if skipped:
            logger.debug(
                f"Object of schema {schema_id} does not expose ruled fields: {', '.join(skipped)}",
                extra={"schema_id": str(schema_id)},
            )
        if failures:
            logger.info(
                f"Object of schema {schema_id} failed {len(failures)} field rule(s)",
                extra={"schema_id": str(schema_id), "fields": [f.field_name for f in failures]},
            )

        return failures

    def enforce(
        self,
        schema_id: str,
        field_values: Mapping[str, Any],
        omit_mandatory_check: bool = False,
        existing_messages: Iterable[str] = (),
    ) -> None:
        """
        Validate and raise the host's aggregate error if anything failed.

        Args:
            existing_messages: Failures the host pipeline already collected;
                they are reported together with the rule failures

        Raises:
            ObjectValidationError: If the host or any rule reported a failure
        """
        existing_messages = list(existing_messages)
        failures = self.validate_object(schema_id, field_values, omit_mandatory_check)
        messages = merge_validation_messages(existing_messages, failures)
        if messages:
            raise ObjectValidationError(messages, failures)


def validate_object(
    store: RuleStore | InMemoryRuleStore,
    schema_id: str,
    field_values: Mapping[str, Any],
    omit_mandatory_check: bool = False,
) -> list[ValidationFailure]:
    """Shortcut for ObjectValidator(store).validate_object(...)."""
    return ObjectValidator(store).validate_object(schema_id, field_values, omit_mandatory_check)
