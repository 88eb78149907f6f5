"""
Rule store: durable (schema_id, field_name) -> RuleConfiguration table.

A schema's rule set is only ever replaced as a whole. The PostgreSQL
store deletes and re-inserts inside one transaction, serialized per
schema with a transaction-scoped advisory lock; the in-memory store swaps
the schema's whole mapping in one assignment.
"""

import threading
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

import psycopg
from psycopg import sql
from psycopg.types.json import Jsonb

from field_validation.core.models import ConfigurationError, RuleConfiguration
from field_validation.observability.logger import get_logger
from field_validation.observability.metrics import (
    record_store_operation,
    store_operation_duration_seconds,
    track_duration,
)
from field_validation.utils.validation import (
    sanitize_sql_identifier,
    validate_field_name,
    validate_schema_id,
)

from .connection import DatabaseConnectionPool

logger = get_logger(__name__)

DEFAULT_TABLE_NAME = "field_validation_rule"


class PersistenceError(Exception):
    """Raised when the store cannot read or write rules; writes are rolled back."""

    def __init__(self, message: str, schema_id: str | None = None):
        self.schema_id = schema_id
        super().__init__(message)


def normalize_rules(
    schema_id: Any,
    rules_by_field_name: Mapping[str, Any],
) -> tuple[str, dict[str, RuleConfiguration]]:
    """
    Validate a schema id and its rule set before anything is written.

    Args:
        schema_id: Schema the rules belong to
        rules_by_field_name: Field name -> RuleConfiguration or JSON-shaped mapping

    Returns:
        Tuple of (clean schema id, field name -> RuleConfiguration sorted by field name)

    Raises:
        ConfigurationError: If the id, any field name or any configuration is malformed
    """
    schema_id = validate_schema_id(schema_id)

    if not isinstance(rules_by_field_name, Mapping):
        raise ConfigurationError("Rules must be a mapping of field name to rule configuration")

    normalized = {}
    for field_name in sorted(rules_by_field_name, key=str):
        payload = rules_by_field_name[field_name]
        field_name = validate_field_name(field_name)
        normalized[field_name] = RuleConfiguration.from_payload(payload, field_name=field_name)

    return schema_id, normalized


class RuleStore:
    """
    PostgreSQL-backed rule store.

    Table layout:
        rule_id      BIGSERIAL primary key
        schema_id    VARCHAR(64), indexed
        field_name   VARCHAR(190), UNIQUE with schema_id
        config       JSONB (camelCase RuleConfiguration)
        modified_at  TIMESTAMPTZ, diagnostics only
    """

    def __init__(self, pool: DatabaseConnectionPool, table_name: str = DEFAULT_TABLE_NAME):
        """
        Initialize rule store.

        Args:
            pool: Open database connection pool
            table_name: Table holding the rules
        """
        self.pool = pool
        self.table_name = sanitize_sql_identifier(table_name, "table_name")
        self._table = sql.Identifier(self.table_name)

    def install(self) -> None:
        """Create the rule table and its indexes if they do not exist."""
        statements = [
            sql.SQL("""
                CREATE TABLE IF NOT EXISTS {table} (
                    rule_id BIGSERIAL PRIMARY KEY,
                    schema_id VARCHAR(64) NOT NULL,
                    field_name VARCHAR(190) NOT NULL,
                    config JSONB NOT NULL,
                    modified_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                    CONSTRAINT {unique} UNIQUE (schema_id, field_name)
                )
            """).format(
                table=self._table,
                unique=sql.Identifier(f"uniq_{self.table_name}_schema_field"),
            ),
            sql.SQL("CREATE INDEX IF NOT EXISTS {index} ON {table} (schema_id)").format(
                index=sql.Identifier(f"idx_{self.table_name}_schema"),
                table=self._table,
            ),
        ]
        try:
            with self.pool.transaction() as cur:
                for statement in statements:
                    cur.execute(statement)
        except psycopg.Error as e:
            logger.error(f"Failed to install rule table {self.table_name}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to install rule table: {e}") from e

        logger.info(f"Rule table {self.table_name} installed")

    def uninstall(self) -> None:
        """Drop the rule table."""
        try:
            self.pool.execute_command(
                sql.SQL("DROP TABLE IF EXISTS {table}").format(table=self._table)
            )
        except psycopg.Error as e:
            logger.error(f"Failed to drop rule table {self.table_name}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to drop rule table: {e}") from e

        logger.info(f"Rule table {self.table_name} dropped")

    def replace_rules_for_schema(
        self,
        schema_id: str,
        rules_by_field_name: Mapping[str, Any],
    ) -> None:
        """
        Atomically replace every rule of a schema.

        Args:
            schema_id: Schema whose rule set is replaced
            rules_by_field_name: The complete new rule set (empty clears the schema)

        Raises:
            ConfigurationError: If the input is malformed (nothing is written)
            PersistenceError: If the transaction fails (previous rules stay in place)
        """
        schema_id, rules = normalize_rules(schema_id, rules_by_field_name)

        delete_sql = sql.SQL("DELETE FROM {table} WHERE schema_id = %s").format(table=self._table)
        insert_sql = sql.SQL("""
            INSERT INTO {table} (schema_id, field_name, config, modified_at)
            VALUES (%s, %s, %s, NOW())
        """).format(table=self._table)

        try:
            with track_duration(store_operation_duration_seconds, operation="replace"):
                with self.pool.transaction() as cur:
                    # Serializes concurrent replaces of the same schema
                    cur.execute(
                        "SELECT pg_advisory_xact_lock(hashtext(%s))",
                        (f"{self.table_name}:{schema_id}",),
                    )
                    cur.execute(delete_sql, (schema_id,))
                    removed = cur.rowcount
                    if rules:
                        cur.executemany(
                            insert_sql,
                            [
                                (schema_id, field_name, Jsonb(config.to_payload()))
                                for field_name, config in rules.items()
                            ],
                        )
        except psycopg.Error as e:
            record_store_operation("replace", success=False)
            logger.error(
                f"Failed to replace rules for schema {schema_id}: {e}",
                extra={"schema_id": schema_id},
                exc_info=True,
            )
            raise PersistenceError(f"Failed to replace rules for schema {schema_id}: {e}", schema_id) from e

        record_store_operation("replace", success=True)
        logger.info(
            f"Replaced rules for schema {schema_id}",
            extra={"schema_id": schema_id, "removed": removed, "stored": len(rules)},
        )

    def get_rules_for_schema(self, schema_id: str) -> dict[str, RuleConfiguration]:
        """
        Read a schema's committed rule set.

        Returns:
            Field name -> RuleConfiguration ordered by field name (empty if none)

        Raises:
            PersistenceError: If the query fails
            ConfigurationError: If a stored configuration is unreadable
        """
        schema_id = validate_schema_id(schema_id)
        query = sql.SQL("""
            SELECT field_name, config
            FROM {table}
            WHERE schema_id = %s
            ORDER BY field_name
        """).format(table=self._table)

        try:
            with track_duration(store_operation_duration_seconds, operation="read"):
                rows = self.pool.execute_query(query, (schema_id,))
        except psycopg.Error as e:
            record_store_operation("read", success=False)
            logger.error(f"Failed to read rules for schema {schema_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to read rules for schema {schema_id}: {e}", schema_id) from e

        record_store_operation("read", success=True)
        return {
            row["field_name"]: RuleConfiguration.from_payload(row["config"], field_name=row["field_name"])
            for row in rows
        }

    def get_rule(self, schema_id: str, field_name: str) -> RuleConfiguration | None:
        """
        Point lookup of one field's rule.

        Returns:
            RuleConfiguration or None if the field has no stored rule
        """
        schema_id = validate_schema_id(schema_id)
        query = sql.SQL(
            "SELECT config FROM {table} WHERE schema_id = %s AND field_name = %s"
        ).format(table=self._table)

        try:
            rows = self.pool.execute_query(query, (schema_id, field_name))
        except psycopg.Error as e:
            logger.error(f"Failed to read rule {schema_id}.{field_name}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to read rule {schema_id}.{field_name}: {e}", schema_id) from e

        if not rows:
            return None
        return RuleConfiguration.from_payload(rows[0]["config"], field_name=field_name)

    def list_schema_ids(self) -> list[dict[str, Any]]:
        """
        List schemas that have stored rules.

        Returns:
            One entry per schema with its rule count and latest modification time
        """
        query = sql.SQL("""
            SELECT schema_id, COUNT(*) AS rule_count, MAX(modified_at) AS modified_at
            FROM {table}
            GROUP BY schema_id
            ORDER BY schema_id
        """).format(table=self._table)

        try:
            return self.pool.execute_query(query)
        except psycopg.Error as e:
            logger.error(f"Failed to list schemas: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list schemas: {e}") from e


class InMemoryRuleStore:
    """
    Process-local rule store with the same contract as RuleStore.

    There are no transactions; each replace builds the new rule set first
    and then swaps it in with a single assignment under a lock, so readers
    see either the old set or the new one.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._rules: dict[str, dict[str, RuleConfiguration]] = {}
        self._modified_at: dict[str, datetime] = {}

    def install(self) -> None:
        pass

    def uninstall(self) -> None:
        with self._lock:
            self._rules = {}
            self._modified_at = {}

    def replace_rules_for_schema(self, schema_id: str, rules_by_field_name: Mapping[str, Any]) -> None:
        schema_id, rules = normalize_rules(schema_id, rules_by_field_name)

        with self._lock:
            if rules:
                self._rules[schema_id] = rules
                self._modified_at[schema_id] = datetime.now(timezone.utc)
            else:
                self._rules.pop(schema_id, None)
                self._modified_at.pop(schema_id, None)

        record_store_operation("replace", success=True)
        logger.debug(f"Replaced rules for schema {schema_id}", extra={"stored": len(rules)})

    def get_rules_for_schema(self, schema_id: str) -> dict[str, RuleConfiguration]:
        schema_id = validate_schema_id(schema_id)
        with self._lock:
            current = self._rules.get(schema_id, {})
        record_store_operation("read", success=True)
        return dict(current)

    def get_rule(self, schema_id: str, field_name: str) -> RuleConfiguration | None:
        return self.get_rules_for_schema(schema_id).get(field_name)

    def list_schema_ids(self) -> list[dict[str, Any]]:
        with self._lock:
            return [
                {
                    "schema_id": schema_id,
                    "rule_count": len(rules),
                    "modified_at": self._modified_at.get(schema_id),
                }
                for schema_id, rules in sorted(self._rules.items())
            ]
