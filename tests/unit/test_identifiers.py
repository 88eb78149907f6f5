"""
Unit tests for identifier validation and the in-memory rule store contract.
"""

import pytest

from field_validation.core.models import ConfigurationError, RuleConfiguration
from field_validation.utils.validation import (
    sanitize_sql_identifier,
    validate_field_name,
    validate_schema_id,
)
from field_validation.warehouse.rule_store import InMemoryRuleStore, normalize_rules


class TestSchemaId:
    """Tests for validate_schema_id"""

    @pytest.mark.parametrize("schema_id", ["7", "product", "product-v2", "shop.item_3"])
    def test_valid(self, schema_id):
        assert validate_schema_id(schema_id) == schema_id

    def test_integer_ids_become_text(self):
        assert validate_schema_id(7) == "7"

    def test_whitespace_is_stripped(self):
        assert validate_schema_id("  7 ") == "7"

    @pytest.mark.parametrize("schema_id", ["", "   ", None, True, "a b", "a/b", "x" * 65, ["7"]])
    def test_invalid(self, schema_id):
        with pytest.raises(ConfigurationError):
            validate_schema_id(schema_id)


class TestFieldName:
    """Tests for validate_field_name"""

    @pytest.mark.parametrize("name", ["sku", "_internal", "Price2", "a" * 190])
    def test_valid(self, name):
        assert validate_field_name(name) == name

    @pytest.mark.parametrize("name", ["", "1st", "with space", "dash-ed", "a" * 191, None, 7])
    def test_invalid(self, name):
        with pytest.raises(ConfigurationError):
            validate_field_name(name)


class TestSqlIdentifier:
    """Tests for sanitize_sql_identifier"""

    def test_valid(self):
        assert sanitize_sql_identifier("field_validation_rule") == "field_validation_rule"

    @pytest.mark.parametrize("identifier", ["drop", "rules; DROP TABLE x", "1table", "t" * 64, ""])
    def test_invalid(self, identifier):
        with pytest.raises(ConfigurationError):
            sanitize_sql_identifier(identifier)


class TestNormalizeRules:
    """Tests for write-path normalization"""

    def test_sorted_and_parsed(self):
        schema_id, rules = normalize_rules(" 7 ", {
            "sku": {"enabled": True},
            "email": RuleConfiguration(enabled=True, format="email"),
        })

        assert schema_id == "7"
        assert list(rules) == ["email", "sku"]
        assert all(isinstance(config, RuleConfiguration) for config in rules.values())

    def test_non_mapping_rejected(self):
        with pytest.raises(ConfigurationError):
            normalize_rules("7", [("sku", {})])

    def test_bad_field_name_rejected(self):
        with pytest.raises(ConfigurationError):
            normalize_rules("7", {"bad name": {}})


@pytest.mark.unit
class TestInMemoryRuleStore:
    """Tests for the process-local store"""

    def test_round_trip(self, memory_store):
        rules = {"sku": RuleConfiguration(enabled=True, required=True)}
        memory_store.replace_rules_for_schema("7", rules)

        assert memory_store.get_rules_for_schema("7") == rules
        assert memory_store.get_rule("7", "sku") == rules["sku"]
        assert memory_store.get_rule("7", "price") is None

    def test_replace_is_whole_set(self, memory_store):
        memory_store.replace_rules_for_schema("7", {"sku": {}, "price": {}})
        memory_store.replace_rules_for_schema("7", {"title": {}})

        assert list(memory_store.get_rules_for_schema("7")) == ["title"]

    def test_invalid_input_leaves_previous_rules(self, memory_store):
        memory_store.replace_rules_for_schema("7", {"sku": {}})

        with pytest.raises(ConfigurationError):
            memory_store.replace_rules_for_schema("7", {"sku": {"format": "soundex"}})

        assert list(memory_store.get_rules_for_schema("7")) == ["sku"]

    def test_empty_replace_clears_schema(self, memory_store):
        memory_store.replace_rules_for_schema("7", {"sku": {}})
        memory_store.replace_rules_for_schema("7", {})

        assert memory_store.get_rules_for_schema("7") == {}
        assert memory_store.list_schema_ids() == []

    def test_returned_mapping_is_a_copy(self, memory_store):
        memory_store.replace_rules_for_schema("7", {"sku": {}})
        memory_store.get_rules_for_schema("7").clear()

        assert list(memory_store.get_rules_for_schema("7")) == ["sku"]

    def test_list_schema_ids(self, memory_store):
        memory_store.replace_rules_for_schema("8", {"sku": {}})
        memory_store.replace_rules_for_schema("7", {"sku": {}, "price": {}})

        listed = memory_store.list_schema_ids()

        assert [(entry["schema_id"], entry["rule_count"]) for entry in listed] == [("7", 2), ("8", 1)]

    def test_uninstall_drops_everything(self):
        store = InMemoryRuleStore()
        store.replace_rules_for_schema("7", {"sku": {}})
        store.uninstall()

        assert store.get_rules_for_schema("7") == {}
