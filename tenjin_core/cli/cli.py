
import argparse
import json
import logging
import sys
from tenjin_core.lib.config import Settings
from tenjin_core.lib.errors import TenjinError
from tenjin_core.lib.loader import load_source
from tenjin_core.lib.migration import create_migration, generate_sql_content, generate_statements, list_migration_files
from tenjin_core.lib.rls import diff_schema_policies


def write_to_file(content, filename):
    """Write generated SQL to a file."""
    with open(filename, 'w', encoding='utf-8') as f:
        f.write(content)


def preview_statements(statements, title="Statements"):
    """Log a preview of statements, truncating long ones."""
    logging.info(f"{title}:")
    logging.info("=" * 50)

    if len(statements) <= 10:
        shown = list(enumerate(statements, 1))
    else:
        shown = list(enumerate(statements[:5], 1)) + list(enumerate(statements[-5:], len(statements) - 4))

    for i, statement in shown:
        first_line = statement.splitlines()[0] if statement else ""
        preview = first_line[:100] + "..." if len(first_line) > 100 else first_line
        logging.info(f"{i}. {preview}")
        if len(statements) > 10 and i == 5:
            logging.info(f"... ({len(statements) - 10} more statements) ...")
    logging.info("=" * 50)


def _generate(args, settings):
    schemas = load_source(args.schema)
    description = args.description or settings.description

    if args.name:
        migrations_dir = args.migrations_dir or settings.migrations_dir
        migration = create_migration(
            migrations_dir,
            args.name,
            schemas,
            description=description,
            tool_name=settings.tool_name
        )
        print(f"Migration written to: {migration.path}")
        return

    preview_statements(generate_statements(schemas), "Generated statements")
    content = generate_sql_content(schemas, description=description, tool_name=settings.tool_name)
    if args.output:
        write_to_file(content, args.output)
        print(f"SQL written to: {args.output}")
    else:
        sys.stdout.write(content)


def _policy_diff(args, settings):
    old_schemas = load_source(args.old)
    new_schemas = load_source(args.new)
    if len(old_schemas) != 1 or len(new_schemas) != 1:
        raise TenjinError("policy-diff expects exactly one schema on each side")

    statements = diff_schema_policies(old_schemas[0], new_schemas[0])
    logging.info(f"Total: {len(statements)} policy statements")
    if args.output_format == "json":
        print(json.dumps(statements, indent=2))
    elif statements:
        print("\n".join(statements))


def _list(args, settings):
    migrations_dir = args.migrations_dir or settings.migrations_dir
    for migration in list_migration_files(migrations_dir):
        print(f"{migration.timestamp or '-':<16}{migration.filename}")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="tenjin",
        description="tenjin: compile declarative schema definitions into PostgreSQL migrations"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Compile a schema into a migration document")
    generate.add_argument("schema", help="Schema source (.json file, directory of .json files, or raw JSON)")
    generate.add_argument("--description", help="Description placed in the migration header")
    generate.add_argument("-o", "--output", help="Write the document to this file instead of stdout")
    generate.add_argument(
        "--name",
        help="Create a timestamped migration file with this name in the migrations directory"
    )
    generate.add_argument("--migrations-dir", help="Migrations directory (default: supabase/migrations)")
    generate.set_defaults(handler=_generate)

    policy_diff = subparsers.add_parser("policy-diff", help="Show policy drops and creates between two schemas")
    policy_diff.add_argument("old", help="Previous schema source")
    policy_diff.add_argument("new", help="Updated schema source")
    policy_diff.add_argument(
        "--output-format",
        choices=["sql", "json"],
        default="sql",
        help="Output format (default: sql)"
    )
    policy_diff.set_defaults(handler=_policy_diff)

    list_cmd = subparsers.add_parser("list", help="List migration files")
    list_cmd.add_argument("--migrations-dir", help="Migrations directory (default: supabase/migrations)")
    list_cmd.set_defaults(handler=_list)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Set log level based on verbosity count
    if args.verbose == 0:
        log_level = logging.WARNING
    elif args.verbose == 1:
        log_level = logging.INFO
    else:
        log_level = logging.DEBUG

    # Configure logging
    logging.basicConfig(
        level=log_level,
        format='%(levelname)s: %(message)s',
        datefmt='%H:%M:%S'
    )

    settings = Settings.from_env()
    try:
        args.handler(args, settings)
    except (TenjinError, OSError) as e:
        logging.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
