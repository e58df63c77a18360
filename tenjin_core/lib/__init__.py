"""
Core library functionality for compiling declarative schemas into PostgreSQL migrations.
"""

from tenjin_core.lib.errors import TenjinError, SchemaError, MigrationError
from tenjin_core.lib.schema import Schema, SchemaBuilder
from tenjin_core.lib.types import to_sql_type, parse_file_size
from tenjin_core.lib.rls import generate_policy_changes, policy_changes, diff_schema_policies
from tenjin_core.lib.migration import (
    generate_statements,
    generate_sql_content,
    create_migration,
    list_migration_files,
    MigrationFile,
)
from tenjin_core.lib.loader import load_source

__all__ = [
    # Errors
    "TenjinError",
    "SchemaError",
    "MigrationError",

    # Schema model
    "Schema",
    "SchemaBuilder",
    "load_source",

    # Type mapping
    "to_sql_type",
    "parse_file_size",

    # Policies
    "generate_policy_changes",
    "policy_changes",
    "diff_schema_policies",

    # Migrations
    "generate_statements",
    "generate_sql_content",
    "create_migration",
    "list_migration_files",
    "MigrationFile",
]
