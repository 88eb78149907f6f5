"""
Input validation utilities for identifiers crossing the store boundary.

Schema ids and field names end up as table keys; table names end up in
SQL text. Each is checked before it gets there.
"""

import re

from field_validation.core.models import ConfigurationError

SCHEMA_ID_MAX_LENGTH = 64
FIELD_NAME_MAX_LENGTH = 190


def validate_schema_id(schema_id: str, field_name: str = "schema_id") -> str:
    """
    Validate a schema id.

    Schema ids are non-empty strings of alphanumerics, hyphens,
    underscores and dots.

    Args:
        schema_id: The schema id to validate
        field_name: Name of the argument (for error messages)

    Returns:
        The validated schema id (stripped of whitespace)

    Raises:
        ConfigurationError: If validation fails

    Examples:
        >>> validate_schema_id("7")
        '7'
        >>> validate_schema_id("product-v2")
        'product-v2'
    """
    if schema_id is None or not isinstance(schema_id, (str, int)) or isinstance(schema_id, bool):
        raise ConfigurationError(f"{field_name} must be a non-empty string")

    schema_id = str(schema_id).strip()

    if not schema_id:
        raise ConfigurationError(f"{field_name} cannot be empty or whitespace-only")

    if not re.fullmatch(r"[a-zA-Z0-9_\-\.]+", schema_id):
        raise ConfigurationError(
            f"{field_name} contains invalid characters. "
            "Only alphanumeric, hyphens, underscores, and dots are allowed."
        )

    if len(schema_id) > SCHEMA_ID_MAX_LENGTH:
        raise ConfigurationError(
            f"{field_name} exceeds maximum length of {SCHEMA_ID_MAX_LENGTH} characters"
        )

    return schema_id


def validate_field_name(name: str) -> str:
    """
    Validate a schema field name.

    Field names start with a letter or underscore and contain only
    alphanumerics and underscores.

    Examples:
        >>> validate_field_name("sku")
        'sku'
        >>> validate_field_name("1st")  # doctest: +SKIP
        ConfigurationError: field name '1st' is not a valid identifier
    """
    if not name or not isinstance(name, str):
        raise ConfigurationError("field name must be a non-empty string")

    if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", name):
        raise ConfigurationError(f"field name '{name}' is not a valid identifier", field_name=name)

    if len(name) > FIELD_NAME_MAX_LENGTH:
        raise ConfigurationError(
            f"field name '{name[:32]}...' exceeds maximum length of {FIELD_NAME_MAX_LENGTH} characters",
            field_name=name,
        )

    return name


def sanitize_sql_identifier(identifier: str, field_name: str = "identifier") -> str:
    """
    Sanitize an SQL identifier (table name, index name).

    Args:
        identifier: The identifier to sanitize
        field_name: Name of the argument (for error messages)

    Returns:
        The validated identifier

    Raises:
        ConfigurationError: If validation fails

    Examples:
        >>> sanitize_sql_identifier("field_validation_rule")
        'field_validation_rule'
    """
    if not identifier or not isinstance(identifier, str):
        raise ConfigurationError(f"{field_name} must be a non-empty string")

    identifier = identifier.strip()

    if not re.fullmatch(r"[a-zA-Z_][a-zA-Z0-9_]*", identifier):
        raise ConfigurationError(
            f"{field_name} contains invalid characters. "
            "SQL identifiers must start with a letter or underscore and contain only "
            "alphanumeric characters and underscores."
        )

    if len(identifier) > 63:  # PostgreSQL limit
        raise ConfigurationError(f"{field_name} exceeds PostgreSQL maximum length of 63 characters")

    reserved_keywords = {
        "select", "insert", "update", "delete", "drop", "create", "alter",
        "table", "database", "index", "view", "user", "grant", "revoke"
    }
    if identifier.lower() in reserved_keywords:
        raise ConfigurationError(f"{field_name} '{identifier}' is a reserved SQL keyword")

    return identifier
