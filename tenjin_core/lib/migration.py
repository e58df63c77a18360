"""
Migration assembly: orders generated statements and wraps them in a
migration document.
"""

import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Union

from tenjin_core.lib import rls, sql
from tenjin_core.lib.config import DEFAULT_DESCRIPTION, DEFAULT_TOOL_NAME
from tenjin_core.lib.errors import MigrationError
from tenjin_core.lib.schema import Schema, StorageBucket, Table

_TIMESTAMP_RE = re.compile(r'^(\d{14})')


@dataclass
class MigrationFile:
    """
    A migration document on disk.

    Attributes:
        filename: Base name of the file
        path: Full path of the file
        name: Migration name without timestamp prefix or extension
        timestamp: 14-digit creation timestamp taken from the filename, if present
        content: File content when known
    """
    filename: str
    path: str
    name: str
    timestamp: Optional[str] = None
    content: Optional[str] = None


def generate_table_statements(table: Table) -> List[str]:
    """
    Statements for one table: CREATE TABLE, ENABLE ROW LEVEL SECURITY,
    policies, indexes, triggers.
    """
    statements = [sql.generate_table(table)]
    if table.rls_enabled:
        statements.append(sql.enable_rls(table.name))
    if table.policies:
        if not table.rls_enabled:
            logging.warning(
                f"Table {table.name} declares {len(table.policies)} policies but RLS is not enabled; "
                f"they will have no effect until it is"
            )
        statements.append(rls.generate_policies(table))
    if table.indexes:
        statements.append(sql.generate_indexes(table))
    if table.triggers:
        statements.append(sql.generate_triggers(table))
    return statements


def generate_storage_bucket_statements(bucket: StorageBucket) -> List[str]:
    statements = [sql.generate_storage_bucket(bucket)]
    statements.extend(rls.generate_storage_policy(bucket.name, policy) for policy in bucket.policies)
    return statements


def generate_schema_statements(schema: Schema) -> List[str]:
    """
    All statements for a schema in dependency-safe order: custom types,
    tables, functions, views, storage buckets.
    """
    statements = [sql.generate_custom_type(t) for t in schema.custom_types]
    for table in schema.tables:
        statements.extend(generate_table_statements(table))
    statements.extend(sql.generate_function(f) for f in schema.functions)
    statements.extend(sql.generate_view(v) for v in schema.views)
    for bucket in schema.storage_buckets:
        statements.extend(generate_storage_bucket_statements(bucket))

    logging.debug(f"Generated {len(statements)} statements for {schema}")
    return statements


def generate_statements(schemas: Union[Schema, List[Schema]]) -> List[str]:
    """Ordered, non-empty statements for one schema or several schemas in turn."""
    if isinstance(schemas, Schema):
        schemas = [schemas]
    statements = []
    for schema in schemas:
        statements.extend(generate_schema_statements(schema))
    return [s for s in statements if s]


def format_migration_sql(
    description: str,
    statements: List[str],
    *,
    created_at: Optional[datetime] = None,
    tool_name: str = DEFAULT_TOOL_NAME
) -> str:
    """Prefix statements with the three-line header and join them with blank lines."""
    created_at = (created_at or datetime.now(timezone.utc)).astimezone(timezone.utc)
    header = (
        f"-- {description}\n"
        f"-- Created: {created_at.isoformat()}\n"
        f"-- Generated by: {tool_name}\n"
    )
    return header + "\n" + "\n\n".join(statements) + "\n"


def generate_sql_content(
    schemas: Union[Schema, List[Schema]],
    *,
    description: str = DEFAULT_DESCRIPTION,
    created_at: Optional[datetime] = None,
    tool_name: str = DEFAULT_TOOL_NAME
) -> str:
    """
    Compile schemas into a complete migration document.

    Args:
        schemas: A schema or list of schemas, compiled in order
        description: First header line
        created_at: Header timestamp; current UTC time when omitted
        tool_name: Generator named in the header

    Returns:
        The migration document. Any error while compiling an object propagates,
        so no partial document is ever returned.
    """
    statements = generate_statements(schemas)
    return format_migration_sql(description, statements, created_at=created_at, tool_name=tool_name)


def migration_filename(name: str, now: Optional[datetime] = None) -> str:
    """<YYYYMMDDHHMMSS>_<name>.sql, timestamp in UTC"""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return f"{now.strftime('%Y%m%d%H%M%S')}_{name}.sql"


def create_migration(
    migrations_dir: str,
    name: str,
    schemas: Union[Schema, List[Schema]],
    *,
    description: str = DEFAULT_DESCRIPTION,
    now: Optional[datetime] = None,
    tool_name: str = DEFAULT_TOOL_NAME
) -> MigrationFile:
    """
    Compile schemas and write the document into a new timestamped file.

    Raises:
        MigrationError: If the directory or file cannot be written
    """
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    content = generate_sql_content(schemas, description=description, created_at=now, tool_name=tool_name)
    filename = migration_filename(name, now)
    path = os.path.join(migrations_dir, filename)

    try:
        os.makedirs(migrations_dir, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        raise MigrationError(f"Could not write migration {path}: {e}") from e

    logging.info(f"Created migration {path}")
    return MigrationFile(
        filename=filename,
        path=path,
        name=name,
        timestamp=now.strftime('%Y%m%d%H%M%S'),
        content=content,
    )


def list_migration_files(migrations_dir: str) -> List[MigrationFile]:
    """List .sql files in the migrations directory, sorted by filename."""
    if not os.path.isdir(migrations_dir):
        return []

    migrations = []
    for filename in sorted(os.listdir(migrations_dir)):
        if not filename.endswith(".sql"):
            continue
        match = _TIMESTAMP_RE.match(filename)
        stem = filename[:-len(".sql")]
        if match and stem[14:15] == "_":
            name = stem[15:]
        else:
            name = stem
        migrations.append(MigrationFile(
            filename=filename,
            path=os.path.join(migrations_dir, filename),
            name=name,
            timestamp=match.group(1) if match else None,
        ))
    return migrations
