"""
Rule evaluation engine and rule configuration management.
"""

from .rule_config import RuleConfigBuilder, RuleConfigLoader, dump_rules
from .rule_engine import RuleEngine, evaluate

__all__ = [
    "RuleEngine",
    "evaluate",
    "RuleConfigLoader",
    "RuleConfigBuilder",
    "dump_rules",
]
