"""
Editor-facing rule loading and extension hooks.
"""

from .editor_hooks import EditorHooks, validation_indicators
from .rule_loader import FetchError, HttpRulesFetcher, SchemaRuleLoader

__all__ = [
    "SchemaRuleLoader",
    "HttpRulesFetcher",
    "FetchError",
    "EditorHooks",
    "validation_indicators",
]
