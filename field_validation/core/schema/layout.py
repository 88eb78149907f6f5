"""
Schema layout traversal.

The schema editor submits its layout as a tree of nodes. Field nodes have
``datatype == "data"`` and a string ``name``; a field's rule travels
embedded in the node under ``pimcoreValidation``. Every field node
reachable from the root is visited once, including nodes shared between
several parents.
"""

import json
from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any

from field_validation.core.models import ConfigurationError, RuleConfiguration

RULE_KEY = "pimcoreValidation"
FIELD_DATATYPE = "data"


def parse_layout(configuration: Any) -> Mapping[str, Any]:
    """
    Accept a layout tree as a mapping or as its JSON text.

    Raises:
        ConfigurationError: If the payload is not a JSON object
    """
    if isinstance(configuration, (str, bytes)):
        try:
            configuration = json.loads(configuration)
        except ValueError as e:
            raise ConfigurationError(f"Schema layout is not valid JSON: {e}") from e

    if not isinstance(configuration, Mapping):
        raise ConfigurationError("Schema layout must be a JSON object")
    return configuration


def iter_field_nodes(root: Mapping[str, Any]) -> Iterator[Mapping[str, Any]]:
    """
    Yield every field node reachable from ``root``, depth first, in document order.

    Non-mapping children are ignored.
    """
    stack: list[Any] = [root]
    seen: set[int] = set()

    while stack:
        node = stack.pop()
        if not isinstance(node, Mapping) or id(node) in seen:
            continue
        seen.add(id(node))

        if node.get("datatype") == FIELD_DATATYPE and isinstance(node.get("name"), str):
            yield node

        children = node.get("children")
        if isinstance(children, (list, tuple)):
            stack.extend(reversed(children))


def collect_rules_from_layout(root: Mapping[str, Any]) -> dict[str, RuleConfiguration]:
    """
    Extract the embedded rule of every field node.

    Fields without an embedded rule are absent from the result. Disabled
    rules are kept so editor state survives a reload.

    Raises:
        ConfigurationError: If any embedded rule is malformed
    """
    rules: dict[str, RuleConfiguration] = {}
    for node in iter_field_nodes(root):
        payload = node.get(RULE_KEY)
        if payload is None:
            continue
        if not isinstance(payload, Mapping):
            raise ConfigurationError(
                f"'{RULE_KEY}' of field '{node['name']}' must be an object",
                field_name=node["name"],
            )
        rules[node["name"]] = RuleConfiguration.from_payload(payload, field_name=node["name"])
    return rules


def apply_rules_to_layout(
    root: MutableMapping[str, Any],
    rules: Mapping[str, RuleConfiguration],
) -> int:
    """
    Embed stored rules into the matching field nodes of a layout (editor re-open).

    Returns:
        Number of field nodes annotated
    """
    applied = 0
    for node in iter_field_nodes(root):
        config = rules.get(node["name"])
        if config is None or not isinstance(node, MutableMapping):
            continue
        node[RULE_KEY] = config.to_payload()
        applied += 1
    return applied
