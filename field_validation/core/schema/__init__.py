"""
Schema layout traversal: extracting and embedding per-field rules.
"""

from .layout import (
    RULE_KEY,
    apply_rules_to_layout,
    collect_rules_from_layout,
    iter_field_nodes,
    parse_layout,
)

__all__ = [
    "RULE_KEY",
    "parse_layout",
    "iter_field_nodes",
    "collect_rules_from_layout",
    "apply_rules_to_layout",
]
