"""
Extension point for the host's schema and object editors.

The host registers the hooks once its editor components are loaded and
calls them synchronously on editor events; listeners subscribed here
receive the rule-derived data for each event.
"""

from collections import defaultdict
from collections.abc import Callable, Iterable, MutableMapping
from typing import Any

from field_validation.core.models import RuleConfiguration
from field_validation.core.schema import apply_rules_to_layout
from field_validation.observability.logger import get_logger

from .rule_loader import RuleSet, SchemaRuleLoader

logger = get_logger(__name__)

EDITOR_OPENED = "editor_opened"
OBJECT_OPENED = "object_opened"
SCHEMA_SAVED = "schema_saved"

EVENTS = (EDITOR_OPENED, OBJECT_OPENED, SCHEMA_SAVED)


def validation_indicators(rules: RuleSet, field_names: Iterable[str]) -> dict[str, str]:
    """
    Tooltips for the visible fields that carry an enabled rule.

    Returns:
        Field name -> "Validation: <format>"
    """
    visible = set(field_names)
    return {
        field_name: f"Validation: {config.format}"
        for field_name, config in rules.items()
        if field_name in visible and config.enabled
    }


class EditorHooks:
    """
    Observer registry the host editor calls into.

    Events:
        editor_opened(schema_id, layout): stored rules are embedded into the
            layout's field nodes, then listeners get (schema_id, layout, rules)
        object_opened(schema_id, field_names): listeners get
            (schema_id, indicators) with one tooltip per ruled field
        schema_saved(schema_id): the loader's cache entry is dropped, then
            listeners get (schema_id,)
    """

    def __init__(self, loader: SchemaRuleLoader):
        self.loader = loader
        self._listeners: dict[str, list[Callable[..., Any]]] = defaultdict(list)

    def subscribe(self, event: str, listener: Callable[..., Any]) -> None:
        if event not in EVENTS:
            raise ValueError(f"Unknown editor event '{event}'. Expected one of {EVENTS}")
        self._listeners[event].append(listener)

    def unsubscribe(self, event: str, listener: Callable[..., Any]) -> None:
        if listener in self._listeners.get(event, []):
            self._listeners[event].remove(listener)

    def _notify(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners.get(event, [])):
            listener(*args)

    def editor_opened(self, schema_id: str, layout: MutableMapping[str, Any]) -> None:
        """Schema editor finished loading ``layout`` for ``schema_id``."""

        def on_rules(rules: dict[str, RuleConfiguration]) -> None:
            applied = apply_rules_to_layout(layout, rules)
            logger.debug(f"Embedded {applied} rule(s) into layout of schema {schema_id}")
            self._notify(EDITOR_OPENED, schema_id, layout, rules)

        self.loader.load_rules_for_schema(schema_id, on_rules)

    def object_opened(self, schema_id: str, field_names: Iterable[str]) -> None:
        """Object editor opened an instance of ``schema_id`` showing ``field_names``."""
        field_names = list(field_names)

        def on_rules(rules: dict[str, RuleConfiguration]) -> None:
            self._notify(OBJECT_OPENED, schema_id, validation_indicators(rules, field_names))

        self.loader.load_rules_for_schema(schema_id, on_rules)

    def schema_saved(self, schema_id: str) -> None:
        """A schema edit round-tripped; cached rules for it are stale."""
        self.loader.invalidate(schema_id)
        self._notify(SCHEMA_SAVED, schema_id)
