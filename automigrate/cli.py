"""
Command line interface for the schema manager.

Usage:
    python -m automigrate migrate --db data/app.db --models config/models.yaml
    python -m automigrate plan --db data/app.db --models config/models.yaml
    python -m automigrate columns --db data/app.db --table notes
    python -m automigrate create --db data/app.db --models config/models.yaml --table notes
    python -m automigrate alter --db data/app.db --models config/models.yaml --table notes
    python -m automigrate env
"""
import argparse
import json
import logging
import sys
from typing import List, Optional

from .config.env_config import Config, ConfigError, get_env_var_docs, validate_config
from .errors import SchemaError
from .models import TableModel, load_models
from .schema import Schema

logger = logging.getLogger(__name__)

COMMANDS = ["migrate", "plan", "columns", "create", "alter", "env"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="automigrate",
        description="Keep SQLite tables in line with model definitions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  migrate   Create or rebuild every table whose columns differ from its model
  plan      Show what migrate would do, without changing anything
  columns   List the current columns of a table
  create    Create one model's table if it does not exist
  alter     Rebuild one model's table from its model
  env       Show the supported environment variables

Examples:
  python -m automigrate migrate --db data/app.db --models models.yaml
  python -m automigrate plan --db data/app.db --models models.yaml --json
  python -m automigrate columns --db data/app.db --table notes
        """,
    )
    parser.add_argument("command", choices=COMMANDS, help="Command to run")
    parser.add_argument("--db", help="Database path")
    parser.add_argument("--models", help="YAML file with model definitions")
    parser.add_argument("--table", help="Restrict to a single table")
    parser.add_argument("--environment", help="Apply overrides from environments/<name>.yaml")
    parser.add_argument("--version", dest="db_version", default=None, help="Database version label")
    parser.add_argument("--debug", action="store_true", help="Trace executed SQL")
    parser.add_argument("--json", action="store_true", help="Output in JSON format")
    return parser


def _select_models(args: argparse.Namespace) -> List[TableModel]:
    models_path = args.models or Config.AUTOMIGRATE_MODELS
    if not models_path:
        raise ConfigError("No model definitions given. Use --models or set AUTOMIGRATE_MODELS")

    models = load_models(models_path, environment=args.environment)
    if args.table:
        models = [m for m in models if m.get_model_name() == args.table]
        if not models:
            raise ConfigError(f"Model '{args.table}' is not defined in {models_path}")
    return models


def _emit(payload, as_json: bool, lines: List[str]) -> None:
    if as_json:
        print(json.dumps(payload, indent=2, default=str))
    else:
        for line in lines:
            print(line)


def run(args: argparse.Namespace) -> int:
    if args.command == "env":
        print(get_env_var_docs())
        return 0

    if not args.db:
        raise ConfigError("--db is required")

    with Schema(args.db, version=args.db_version, debug=args.debug or None) as schema:
        if args.command == "columns":
            if not args.table:
                raise ConfigError("--table is required for the columns command")
            columns = schema.get_columns(args.table)
            lines = columns if columns else [f"Table {args.table} does not exist"]
            _emit({"table": args.table, "columns": columns}, args.json, lines)
            return 0

        models = _select_models(args)

        if args.command == "plan":
            plans = [schema.plan(m) for m in models]
            lines = []
            for plan in plans:
                lines.append(f"{plan.model_name}: {plan.action}")
                if plan.added_columns and plan.action == "alter":
                    lines.append(f"  add:  {', '.join(plan.added_columns)}")
                if plan.dropped_columns:
                    lines.append(f"  drop: {', '.join(plan.dropped_columns)}")
            _emit([p.to_dict() for p in plans], args.json, lines)
            return 0

        if args.command == "create":
            results = [schema.create_table(m) for m in models]
        elif args.command == "alter":
            results = [schema.alter_table(m) for m in models]
        else:
            results = schema.automigrate_all(models)

        lines = [f"{r.data['model_name']}: {r.data['action']}" for r in results]
        _emit([r.to_dict() for r in results], args.json, lines)
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point."""
    args = build_parser().parse_args(argv)

    try:
        validate_config()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    level = "debug" if args.debug else Config.AUTOMIGRATE_LOG_LEVEL
    logging.basicConfig(level=getattr(logging, level.upper()), format="%(levelname)s: %(message)s")

    try:
        return run(args)
    except (SchemaError, ConfigError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
