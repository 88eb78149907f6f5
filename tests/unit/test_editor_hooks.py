"""
Unit tests for the editor extension hooks.
"""

import pytest

from field_validation.client import EditorHooks, SchemaRuleLoader, validation_indicators
from field_validation.client.editor_hooks import EDITOR_OPENED, OBJECT_OPENED, SCHEMA_SAVED
from field_validation.core.models import RuleConfiguration
from field_validation.core.schema import RULE_KEY

RULES = {
    "sku": RuleConfiguration(enabled=True, required=True, format="length", minLength=3),
    "price": RuleConfiguration(enabled=False, format="range", min=0),
    "email": RuleConfiguration(enabled=True, format="email"),
}


class StaticFetcher:
    def __init__(self, rules):
        self.rules = rules
        self.calls = 0

    def __call__(self, schema_id):
        self.calls += 1
        return self.rules


@pytest.fixture
def loader():
    loader = SchemaRuleLoader(fetch=StaticFetcher(RULES))
    # Warm the cache so callbacks run synchronously
    loader.fetch_rules("product").result(timeout=5)
    yield loader
    loader.close()


@pytest.mark.unit
class TestEditorHooks:
    """Tests for EditorHooks"""

    def test_editor_opened_embeds_rules(self, loader):
        layout = {
            "datatype": "layout",
            "children": [
                {"datatype": "data", "name": "sku"},
                {"datatype": "data", "name": "notes"},
            ],
        }
        events = []
        hooks = EditorHooks(loader)
        hooks.subscribe(EDITOR_OPENED, lambda *args: events.append(args))

        hooks.editor_opened("product", layout)

        assert layout["children"][0][RULE_KEY]["minLength"] == 3
        assert RULE_KEY not in layout["children"][1]
        assert events == [("product", layout, RULES)]

    def test_object_opened_reports_indicators(self, loader):
        events = []
        hooks = EditorHooks(loader)
        hooks.subscribe(OBJECT_OPENED, lambda *args: events.append(args))

        hooks.object_opened("product", ["sku", "price", "notes"])

        assert events == [("product", {"sku": "Validation: length"})]

    def test_schema_saved_invalidates_cache(self, loader):
        events = []
        hooks = EditorHooks(loader)
        hooks.subscribe(SCHEMA_SAVED, lambda *args: events.append(args))

        hooks.schema_saved("product")

        assert loader.cached_rules("product") is None
        assert events == [("product",)]

    def test_unknown_event_rejected(self, loader):
        with pytest.raises(ValueError, match="Unknown editor event"):
            EditorHooks(loader).subscribe("editor_closed", print)

    def test_unsubscribe(self, loader):
        events = []
        listener = lambda *args: events.append(args)  # noqa: E731
        hooks = EditorHooks(loader)
        hooks.subscribe(SCHEMA_SAVED, listener)
        hooks.unsubscribe(SCHEMA_SAVED, listener)

        hooks.schema_saved("product")

        assert events == []

    def test_unsubscribe_unknown_listener_is_noop(self, loader):
        EditorHooks(loader).unsubscribe(OBJECT_OPENED, print)


@pytest.mark.unit
def test_validation_indicators_skip_disabled_and_hidden_fields():
    assert validation_indicators(RULES, ["price", "email"]) == {"email": "Validation: email"}
