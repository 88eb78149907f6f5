"""
Rule configuration management.

Loads per-field rule sets from YAML (or JSON) files and provides a
builder for assembling them in code.
"""

from pathlib import Path
from typing import Any

import yaml

from field_validation.core.models import ConfigurationError, RuleConfiguration


class RuleConfigLoader:
    """
    Loads a schema's field rules from a YAML configuration file.

    Expected YAML format:
    ```yaml
    schema_id: "product"      # optional, may be given on the command line
    rules:
      sku:
        enabled: true
        required: true
        format: length
        minLength: 3
        maxLength: 12

      price:
        enabled: true
        format: range
        min: 0
        message: "Price must not be negative"
    ```
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the rule config loader.

        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Rule configuration file not found: {config_path}")
        self._document: dict[str, Any] | None = None

    def _load_document(self) -> dict[str, Any]:
        if self._document is None:
            with open(self.config_path) as f:
                try:
                    document = yaml.safe_load(f)
                except yaml.YAMLError as e:
                    raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e

            if not isinstance(document, dict) or "rules" not in document:
                raise ConfigurationError("Configuration file must contain a 'rules' section")
            self._document = document
        return self._document

    @property
    def schema_id(self) -> str | None:
        """Schema id declared in the file, if any."""
        schema_id = self._load_document().get("schema_id")
        return str(schema_id) if schema_id is not None else None

    def load_rules(self) -> dict[str, RuleConfiguration]:
        """
        Load and validate the field rules.

        Returns:
            Mapping of field name to RuleConfiguration

        Raises:
            ConfigurationError: If the file or any rule is malformed
        """
        field_rules = self._load_document()["rules"] or {}
        if not isinstance(field_rules, dict):
            raise ConfigurationError("'rules' must map field names to rule configurations")

        return {
            str(field_name): RuleConfiguration.from_payload(payload, field_name=str(field_name))
            for field_name, payload in field_rules.items()
        }


def dump_rules(rules: dict[str, RuleConfiguration], schema_id: str | None = None) -> str:
    """
    Render field rules in the RuleConfigLoader YAML format.

    Args:
        rules: Mapping of field name to RuleConfiguration
        schema_id: Optional schema id to record in the document

    Returns:
        YAML document text
    """
    document: dict[str, Any] = {}
    if schema_id is not None:
        document["schema_id"] = schema_id
    document["rules"] = {name: config.to_payload() for name, config in rules.items()}
    return yaml.safe_dump(document, sort_keys=False)


class RuleConfigBuilder:
    """
    Programmatically build a schema's rule set (for testing or dynamic rules).

    Each field holds exactly one configuration; later calls for the same
    field refine it.
    """

    def __init__(self):
        """Initialize empty rule configuration."""
        self.rules: dict[str, dict[str, Any]] = {}

    def _field(self, field_name: str) -> dict[str, Any]:
        return self.rules.setdefault(field_name, {"enabled": True})

    def add_required_field(self, field_name: str, message: str = "") -> "RuleConfigBuilder":
        """Mark a field as required."""
        config = self._field(field_name)
        config["required"] = True
        if message:
            config["message"] = message
        return self

    def add_format(self, field_name: str, rule_format: str, message: str = "") -> "RuleConfigBuilder":
        """Add an operand-free format check (email, phone, alpha, alphanumeric, numeric)."""
        config = self._field(field_name)
        config["format"] = rule_format
        if message:
            config["message"] = message
        return self

    def add_regex(self, field_name: str, pattern: str) -> "RuleConfigBuilder":
        """Add a regex check."""
        config = self._field(field_name)
        config["format"] = "regex"
        config["regex"] = pattern
        return self

    def add_length(
        self,
        field_name: str,
        min_length: int | None = None,
        max_length: int | None = None
    ) -> "RuleConfigBuilder":
        """Add a length check."""
        config = self._field(field_name)
        config["format"] = "length"
        config["minLength"] = min_length
        config["maxLength"] = max_length
        return self

    def add_range(
        self,
        field_name: str,
        min_value: float | None = None,
        max_value: float | None = None
    ) -> "RuleConfigBuilder":
        """Add a numeric range check."""
        config = self._field(field_name)
        config["format"] = "range"
        config["min"] = min_value
        config["max"] = max_value
        return self

    def disable(self, field_name: str) -> "RuleConfigBuilder":
        """Keep a field's configuration but switch it off."""
        self._field(field_name)["enabled"] = False
        return self

    def build(self) -> dict[str, RuleConfiguration]:
        """Build and return the validated rule set."""
        return {
            field_name: RuleConfiguration.from_payload(payload, field_name=field_name)
            for field_name, payload in self.rules.items()
        }
