"""
Admin CLI for managing field validation rules.

Usage:
    python -m field_validation.cli.admin_cli install [options]
    python -m field_validation.cli.admin_cli uninstall --yes
    python -m field_validation.cli.admin_cli list-schemas
    python -m field_validation.cli.admin_cli show-rules --schema-id <id> [--format table|json]
    python -m field_validation.cli.admin_cli import-rules --file <path> [--schema-id <id>]
    python -m field_validation.cli.admin_cli export-rules --schema-id <id> [--output <path>]
    python -m field_validation.cli.admin_cli validate-object --schema-id <id> --values <path|->
    python -m field_validation.cli.admin_cli check-rule --rule <json> --value <value>
    python -m field_validation.cli.admin_cli serve [--host <host>] [--port <port>] [--in-memory]
"""

import argparse
import json
import os
import sys
from datetime import datetime
from typing import Any

import psycopg
from dotenv import load_dotenv

from field_validation.core.models import ConfigurationError, RuleConfiguration
from field_validation.core.rules import RuleConfigLoader, RuleEngine, dump_rules
from field_validation.core.validators import format_number
from field_validation.enforcement import ObjectValidator, encode_failures, format_aggregate_message
from field_validation.observability.logger import get_logger, log_operation, set_log_level
from field_validation.warehouse.connection import DatabaseConnectionPool
from field_validation.warehouse.rule_store import InMemoryRuleStore, PersistenceError, RuleStore

logger = get_logger(__name__)


def format_timestamp(ts: datetime | str | None) -> str:
    """Format timestamp for display."""
    if isinstance(ts, str):
        return ts
    return ts.strftime("%Y-%m-%d %H:%M:%S") if ts else "N/A"


def create_pool(args) -> DatabaseConnectionPool:
    """Build a connection pool from the global --db-* options (env vars fill the gaps)."""
    return DatabaseConnectionPool(
        host=args.db_host,
        port=args.db_port,
        database=args.db_name,
        user=args.db_user,
        password=args.db_password,
    )


def open_pool(args) -> DatabaseConnectionPool:
    """
    Create and open the connection pool, exiting with status 1 when the
    settings are incomplete or the database cannot be reached.
    """
    try:
        pool = create_pool(args)
        pool.open()
    except (ValueError, psycopg.OperationalError) as e:
        print(f"\nError: {e}")
        sys.exit(1)
    return pool


def install_command(args):
    """
    Create the rule table.

    Args:
        args: Command line arguments
    """
    pool = open_pool(args)

    try:
        store = RuleStore(pool, table_name=args.table)
        store.install()
        print(f"\nRule table '{store.table_name}' is installed")

    except (PersistenceError, ConfigurationError) as e:
        print(f"\nError: {e}")
        sys.exit(1)

    finally:
        pool.close()


def uninstall_command(args):
    """
    Drop the rule table and every stored rule.

    Args:
        args: Command line arguments
    """
    if not args.yes:
        print("\nRefusing to drop the rule table without --yes")
        sys.exit(1)

    pool = open_pool(args)

    try:
        store = RuleStore(pool, table_name=args.table)
        store.uninstall()
        print(f"\nRule table '{store.table_name}' dropped")

    except (PersistenceError, ConfigurationError) as e:
        print(f"\nError: {e}")
        sys.exit(1)

    finally:
        pool.close()


def list_schemas_command(args):
    """
    List schemas with stored rules.

    Args:
        args: Command line arguments
    """
    pool = open_pool(args)

    try:
        schemas = RuleStore(pool, table_name=args.table).list_schema_ids()

        if not schemas:
            print("\nNo schemas have stored rules.")
            return

        print(f"\n{'=' * 60}")
        print("SCHEMAS WITH FIELD RULES")
        print(f"{'=' * 60}\n")
        print(f"{'Schema':<30} {'Rules':>8}   {'Modified'}")
        print(f"{'-' * 60}")
        for entry in schemas:
            print(
                f"{entry['schema_id']:<30} {entry['rule_count']:>8}   "
                f"{format_timestamp(entry['modified_at'])}"
            )
        print(f"\n{'=' * 60}\n")

    except PersistenceError as e:
        print(f"\nError: {e}")
        sys.exit(1)

    finally:
        pool.close()


def show_rules_command(args):
    """
    Show a schema's stored rules.

    Args:
        args: Command line arguments
    """
    pool = open_pool(args)

    try:
        rules = RuleStore(pool, table_name=args.table).get_rules_for_schema(args.schema_id)

        if args.format == "json":
            print(json.dumps(
                {field_name: config.to_payload() for field_name, config in rules.items()},
                indent=2,
            ))
            return

        if not rules:
            print(f"\nNo rules stored for schema: {args.schema_id}")
            return

        print(f"\n{'=' * 80}")
        print(f"FIELD RULES FOR SCHEMA: {args.schema_id}")
        print(f"{'=' * 80}\n")
        print(f"{'Field':<25} {'Enabled':<8} {'Required':<9} {'Format':<13} {'Operands'}")
        print(f"{'-' * 80}")
        for field_name, config in rules.items():
            print(
                f"{field_name:<25} {'yes' if config.enabled else 'no':<8} "
                f"{'yes' if config.required else 'no':<9} {config.format:<13} "
                f"{describe_operands(config)}"
            )
        print(f"\n{'=' * 80}\n")

    except (PersistenceError, ConfigurationError) as e:
        print(f"\nError: {e}")
        sys.exit(1)

    finally:
        pool.close()


def describe_operands(config) -> str:
    """Compact operand summary for table output."""
    parts = []
    if config.format == "regex" and config.regex:
        parts.append(f"regex={config.regex}")
    if config.format == "length":
        parts.append(f"length={config.min_length or '-'}..{config.max_length or '-'}")
    if config.format == "range":
        low = "-" if config.min is None else format_number(config.min)
        high = "-" if config.max is None else format_number(config.max)
        parts.append(f"range={low}..{high}")
    if config.custom_message:
        parts.append(f"message={config.custom_message!r}")
    return ", ".join(parts)


def import_rules_command(args):
    """
    Replace a schema's rules with the contents of a YAML/JSON rule file.

    Args:
        args: Command line arguments
    """
    try:
        loader = RuleConfigLoader(args.file)
        rules = loader.load_rules()
        schema_id = args.schema_id or loader.schema_id
    except (FileNotFoundError, ConfigurationError) as e:
        print(f"\nError: {e}")
        sys.exit(1)

    if not schema_id:
        print("\nError: no schema id given (use --schema-id or set schema_id in the file)")
        sys.exit(1)

    pool = open_pool(args)

    try:
        store = RuleStore(pool, table_name=args.table)
        with log_operation("Importing rules", logger=logger, schema_id=schema_id, file=args.file):
            store.replace_rules_for_schema(schema_id, rules)

        print(f"\nImported {len(rules)} rule(s) for schema {schema_id}")
        for field_name, config in rules.items():
            pattern_error = config.pattern_error()
            if pattern_error:
                print(f"  Warning: regex of field '{field_name}' does not compile: {pattern_error}")

    except (PersistenceError, ConfigurationError) as e:
        print(f"\nError: {e}")
        sys.exit(1)

    finally:
        pool.close()


def export_rules_command(args):
    """
    Write a schema's rules as a YAML rule file.

    Args:
        args: Command line arguments
    """
    pool = open_pool(args)

    try:
        rules = RuleStore(pool, table_name=args.table).get_rules_for_schema(args.schema_id)
        document = dump_rules(rules, schema_id=args.schema_id)

        if args.output:
            with open(args.output, "w") as f:
                f.write(document)
            print(f"\nExported {len(rules)} rule(s) to {args.output}")
        else:
            print(document, end="")

    except (PersistenceError, ConfigurationError) as e:
        print(f"\nError: {e}")
        sys.exit(1)

    finally:
        pool.close()


def load_field_values(path: str) -> dict[str, Any]:
    """Read a JSON object of field values from a file, or stdin for "-"."""
    if path == "-":
        values = json.load(sys.stdin)
    else:
        with open(path, "r") as f:
            values = json.load(f)

    if not isinstance(values, dict):
        raise ConfigurationError("Field values must be a JSON object")
    return values


def validate_object_command(args):
    """
    Validate an object's field values against a schema's stored rules.

    Exits with status 1 when any rule fails.

    Args:
        args: Command line arguments
    """
    try:
        field_values = load_field_values(args.values)
    except (OSError, ValueError) as e:
        print(f"\nError: {e}")
        sys.exit(1)

    pool = open_pool(args)

    try:
        validator = ObjectValidator(RuleStore(pool, table_name=args.table))
        failures = validator.validate_object(
            args.schema_id,
            field_values,
            omit_mandatory_check=args.omit_mandatory_check,
        )

    except (PersistenceError, ConfigurationError) as e:
        print(f"\nError: {e}")
        sys.exit(1)

    finally:
        pool.close()

    if not failures:
        print("\nAll field rules passed")
        return

    print(f"\n{format_aggregate_message(encode_failures(failures))}\n")
    print(f"{'Field':<25} {'Message'}")
    print(f"{'-' * 60}")
    for failure in failures:
        print(f"{failure.field_name:<25} {failure.message}")
    print()
    sys.exit(1)


def check_rule_command(args):
    """
    Evaluate one value against an ad-hoc rule (no database needed).

    Args:
        args: Command line arguments
    """
    try:
        config = json.loads(args.rule)
        value = json.loads(args.value) if args.json_value else args.value
        engine = RuleEngine(RuleConfiguration.from_payload(config, field_name=args.field), args.field)
    except (ValueError, ConfigurationError) as e:
        print(f"\nError: {e}")
        sys.exit(1)

    failure = engine.evaluate(value, omit_mandatory_check=args.omit_mandatory_check)
    if failure is None:
        print("passed")
        return

    print(failure.encode())
    sys.exit(1)


def serve_command(args):
    """
    Run the admin HTTP API with uvicorn.

    Args:
        args: Command line arguments
    """
    import uvicorn

    from field_validation.api.app import create_app

    pool = None
    if args.in_memory:
        store = InMemoryRuleStore()
        logger.warning("Serving from an in-memory rule store; rules are lost on exit")
    else:
        pool = open_pool(args)
        store = RuleStore(pool, table_name=args.table)

    try:
        uvicorn.run(
            create_app(store),
            host=args.host or os.getenv("API_HOST", "127.0.0.1"),
            port=args.port or int(os.getenv("API_PORT", "8000")),
            log_level=args.log_level.lower(),
        )
    finally:
        if pool is not None:
            pool.close()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        description="Admin CLI for field validation rules",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    # Global options
    parser.add_argument(
        "--env-file",
        help="Load environment variables (DB_*, LOG_*, API_*) from this file first"
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Log level (default: env LOG_LEVEL or INFO)"
    )
    parser.add_argument(
        "--db-host",
        help="Database host (default: env DB_HOST or localhost)"
    )
    parser.add_argument(
        "--db-port",
        type=int,
        help="Database port (default: env DB_PORT or 5432)"
    )
    parser.add_argument(
        "--db-name",
        help="Database name (default: env DB_NAME or field_validation)"
    )
    parser.add_argument(
        "--db-user",
        help="Database user (default: env DB_USER or field_validation)"
    )
    parser.add_argument(
        "--db-password",
        help="Database password (default: env DB_PASSWORD)"
    )
    parser.add_argument(
        "--table",
        default="field_validation_rule",
        help="Rule table name (default: field_validation_rule)"
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("install", help="Create the rule table")

    uninstall_parser = subparsers.add_parser(
        "uninstall",
        help="Drop the rule table and all stored rules"
    )
    uninstall_parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm dropping the table"
    )

    subparsers.add_parser("list-schemas", help="List schemas with stored rules")

    show_parser = subparsers.add_parser("show-rules", help="Show a schema's stored rules")
    show_parser.add_argument(
        "--schema-id",
        required=True,
        help="Schema ID"
    )
    show_parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)"
    )

    import_parser = subparsers.add_parser(
        "import-rules",
        help="Replace a schema's rules from a YAML or JSON rule file"
    )
    import_parser.add_argument(
        "--file",
        required=True,
        help="Path to the rule file"
    )
    import_parser.add_argument(
        "--schema-id",
        help="Schema ID (overrides schema_id in the file)"
    )

    export_parser = subparsers.add_parser(
        "export-rules",
        help="Export a schema's rules as YAML"
    )
    export_parser.add_argument(
        "--schema-id",
        required=True,
        help="Schema ID"
    )
    export_parser.add_argument(
        "--output",
        help="Output file (default: stdout)"
    )

    validate_parser = subparsers.add_parser(
        "validate-object",
        help="Validate field values against a schema's stored rules"
    )
    validate_parser.add_argument(
        "--schema-id",
        required=True,
        help="Schema ID"
    )
    validate_parser.add_argument(
        "--values",
        required=True,
        help="JSON file with field values ('-' reads stdin)"
    )
    validate_parser.add_argument(
        "--omit-mandatory-check",
        action="store_true",
        help="Skip required checks"
    )

    check_parser = subparsers.add_parser(
        "check-rule",
        help="Evaluate one value against an inline JSON rule"
    )
    check_parser.add_argument(
        "--rule",
        required=True,
        help='Rule configuration as JSON, e.g. \'{"enabled": true, "format": "email"}\''
    )
    check_parser.add_argument(
        "--value",
        required=True,
        help="Value to check"
    )
    check_parser.add_argument(
        "--json-value",
        action="store_true",
        help="Parse --value as JSON instead of taking it as text"
    )
    check_parser.add_argument(
        "--field",
        default="value",
        help="Field name to report (default: value)"
    )
    check_parser.add_argument(
        "--omit-mandatory-check",
        action="store_true",
        help="Skip the required check"
    )

    serve_parser = subparsers.add_parser("serve", help="Run the admin HTTP API")
    serve_parser.add_argument(
        "--host",
        help="Bind address (default: env API_HOST or 127.0.0.1)"
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        help="Bind port (default: env API_PORT or 8000)"
    )
    serve_parser.add_argument(
        "--in-memory",
        action="store_true",
        help="Use a process-local rule store instead of PostgreSQL"
    )

    return parser


COMMANDS = {
    "install": install_command,
    "uninstall": uninstall_command,
    "list-schemas": list_schemas_command,
    "show-rules": show_rules_command,
    "import-rules": import_rules_command,
    "export-rules": export_rules_command,
    "validate-object": validate_object_command,
    "check-rule": check_rule_command,
    "serve": serve_command,
}


def main(argv: list[str] | None = None):
    """Main entry point for admin CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.env_file:
        load_dotenv(args.env_file, override=True)

    set_log_level(args.log_level)

    try:
        COMMANDS[args.command](args)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
