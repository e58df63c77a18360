"""
tenjin-core: compile declarative schema definitions into PostgreSQL migrations

This package turns a structured description of tables, fields, indexes,
triggers, functions, views, custom types, storage buckets and row level
security policies into ordered PostgreSQL DDL wrapped in a migration document.
"""

# Import core library functionality
from tenjin_core.lib import (
    Schema,
    SchemaBuilder,
    load_source,
    generate_sql_content,
    generate_policy_changes,
)

__version__ = "0.1.0"
__all__ = [
    "Schema",
    "SchemaBuilder",
    "load_source",
    "generate_sql_content",
    "generate_policy_changes",
]
