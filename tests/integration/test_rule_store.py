"""
Integration tests for the PostgreSQL rule store.

Tests replace/read semantics, atomicity and concurrent replaces against a
real database.
"""

import threading

import pytest

from field_validation.core.models import ConfigurationError, RuleConfiguration
from field_validation.core.rules import RuleConfigBuilder
from field_validation.enforcement import ObjectValidator
from field_validation.warehouse.rule_store import PersistenceError


def product_rules():
    return RuleConfigBuilder() \
        .add_required_field("sku") \
        .add_length("sku", min_length=3, max_length=12) \
        .add_format("email", "email") \
        .add_range("price", min_value=0, max_value=99.5) \
        .add_regex("code", "^[A-Z]{2}$") \
        .build()


@pytest.mark.integration
def test_round_trip(rule_store):
    """Test stored rules read back equal, ordered by field name"""
    rules = product_rules()
    rule_store.replace_rules_for_schema("product", rules)

    stored = rule_store.get_rules_for_schema("product")

    assert stored == rules
    assert list(stored) == ["code", "email", "price", "sku"]


@pytest.mark.integration
def test_replace_is_idempotent(rule_store):
    """Test replacing twice with the same set equals replacing once"""
    rules = product_rules()
    rule_store.replace_rules_for_schema("product", rules)
    once = rule_store.get_rules_for_schema("product")

    rule_store.replace_rules_for_schema("product", rules)

    assert rule_store.get_rules_for_schema("product") == once
    assert rule_store.list_schema_ids()[0]["rule_count"] == len(rules)


@pytest.mark.integration
def test_replace_removes_absent_fields(rule_store):
    rule_store.replace_rules_for_schema("product", product_rules())
    rule_store.replace_rules_for_schema("product", {"title": RuleConfiguration(enabled=True)})

    assert list(rule_store.get_rules_for_schema("product")) == ["title"]


@pytest.mark.integration
def test_empty_replace_clears_schema(rule_store):
    rule_store.replace_rules_for_schema("product", product_rules())
    rule_store.replace_rules_for_schema("product", {})

    assert rule_store.get_rules_for_schema("product") == {}
    assert rule_store.list_schema_ids() == []


@pytest.mark.integration
def test_schemas_are_isolated(rule_store):
    rule_store.replace_rules_for_schema("product", product_rules())
    rule_store.replace_rules_for_schema("customer", {"email": {"enabled": True, "format": "email"}})
    rule_store.replace_rules_for_schema("customer", {})

    assert len(rule_store.get_rules_for_schema("product")) == 4
    assert [entry["schema_id"] for entry in rule_store.list_schema_ids()] == ["product"]


@pytest.mark.integration
def test_get_rule(rule_store):
    rule_store.replace_rules_for_schema("product", product_rules())

    assert rule_store.get_rule("product", "code").regex == "^[A-Z]{2}$"
    assert rule_store.get_rule("product", "missing") is None


@pytest.mark.integration
def test_invalid_configuration_writes_nothing(rule_store):
    rule_store.replace_rules_for_schema("product", product_rules())

    with pytest.raises(ConfigurationError):
        rule_store.replace_rules_for_schema("product", {"sku": {"format": "soundex"}})

    assert rule_store.get_rules_for_schema("product") == product_rules()


@pytest.mark.integration
def test_failed_transaction_keeps_previous_rules(rule_store, db_pool):
    """Test a database error after the delete rolls the whole replace back"""
    rule_store.replace_rules_for_schema("product", product_rules())
    db_pool.execute_command(
        f"ALTER TABLE {rule_store.table_name} "
        "ADD CONSTRAINT reject_boom CHECK (field_name <> 'boom')"
    )

    with pytest.raises(PersistenceError) as exc_info:
        rule_store.replace_rules_for_schema("product", {"aaa": {}, "boom": {}})

    assert exc_info.value.schema_id == "product"
    assert rule_store.get_rules_for_schema("product") == product_rules()


@pytest.mark.integration
def test_concurrent_replaces_leave_one_complete_set(rule_store):
    """Test the last committed replace wins wholesale"""
    set_a = {f"a_{i}": RuleConfiguration(enabled=True) for i in range(20)}
    set_b = {f"b_{i}": RuleConfiguration(enabled=True, required=True) for i in range(20)}
    errors = []

    def replace_repeatedly(rules):
        try:
            for _ in range(10):
                rule_store.replace_rules_for_schema("product", rules)
        except Exception as e:  # collected for the assertion below
            errors.append(e)

    threads = [
        threading.Thread(target=replace_repeatedly, args=(set_a,)),
        threading.Thread(target=replace_repeatedly, args=(set_b,)),
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert errors == []
    assert rule_store.get_rules_for_schema("product") in (set_a, set_b)


@pytest.mark.integration
def test_object_validation_reads_committed_rules(rule_store):
    rule_store.replace_rules_for_schema("product", product_rules())
    validator = ObjectValidator(rule_store)

    failures = validator.validate_object("product", {"sku": "AB", "code": "abc", "price": 100})

    assert [(f.field_name, f.message) for f in failures] == [
        ("code", "Invalid format"),
        ("price", "Maximum value is 99.5"),
        ("sku", "Minimum length is 3"),
    ]
