"""
DDL generation for schema definitions.

Each generate_* function renders one kind of schema object into PostgreSQL
statements. Output depends only on the object passed in, so rendering the
same definition twice yields identical text.
"""

import logging
import numbers
from typing import Any, List

from tenjin_core.lib.schema import (
    CustomType,
    Field,
    Function,
    Index,
    ReferentialAction,
    StorageBucket,
    Table,
    Trigger,
    TriggerTiming,
    TypeKind,
    View,
)
from tenjin_core.lib.types import parse_file_size, to_sql_type

REFERENTIAL_ACTIONS = {
    ReferentialAction.CASCADE: "CASCADE",
    ReferentialAction.RESTRICT: "RESTRICT",
    ReferentialAction.SET_NULL: "SET NULL",
    ReferentialAction.SET_DEFAULT: "SET DEFAULT",
}

TRIGGER_TIMINGS = {
    TriggerTiming.BEFORE: "BEFORE",
    TriggerTiming.AFTER: "AFTER",
    TriggerTiming.INSTEAD_OF: "INSTEAD OF",
}


def escape_string(value: Any) -> str:
    """Render a value as a single-quoted SQL literal, doubling embedded quotes."""
    return "'" + str(value).replace("'", "''") + "'"


def format_default_value(value: Any) -> str:
    """
    Render a column default.

    Numbers and booleans are emitted bare. Strings that look like function
    calls or expressions (ending in "()", or containing a parenthesis or
    whitespace) are emitted verbatim; any other string becomes a quoted literal.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, numbers.Number):
        return str(value)
    if isinstance(value, str):
        if value.endswith("()"):
            return value
        if "(" in value or ")" in value or any(ch.isspace() for ch in value):
            return value
    return escape_string(value)


def generate_field(column: Field, inline_primary_key: bool = True) -> str:
    """
    Render a column definition for use inside CREATE TABLE.

    Constraints follow a fixed order: PRIMARY KEY, NOT NULL, UNIQUE, DEFAULT,
    REFERENCES (with ON DELETE / ON UPDATE), GENERATED ALWAYS AS ... STORED.

    Args:
        column: The field to render
        inline_primary_key: Set to False when the table declares a composite
            primary key, so the column does not carry its own PRIMARY KEY
    """
    opts = column.options
    parts = [f"{column.name} {to_sql_type(column.type)}"]

    if opts.primary_key and inline_primary_key:
        parts.append("PRIMARY KEY")
    if opts.null is False:
        parts.append("NOT NULL")
    if opts.unique:
        parts.append("UNIQUE")
    if opts.default is not None:
        parts.append(f"DEFAULT {format_default_value(opts.default)}")
    if opts.references:
        parts.append(f"REFERENCES {opts.references}")
        if opts.on_delete:
            parts.append(f"ON DELETE {REFERENTIAL_ACTIONS[opts.on_delete]}")
        if opts.on_update:
            parts.append(f"ON UPDATE {REFERENTIAL_ACTIONS[opts.on_update]}")
    if opts.generated:
        parts.append(f"GENERATED ALWAYS AS ({opts.generated}) STORED")

    return " ".join(parts)


def generate_table(table: Table) -> str:
    """
    Render CREATE TABLE plus any table and column comments.

    A single primary-key field keeps PRIMARY KEY inline. With two or more,
    the inline markers are dropped and one table-level PRIMARY KEY (...)
    constraint is appended, columns in declaration order.
    """
    primary_keys = table.primary_key_columns()
    composite = len(primary_keys) > 1

    definitions = [generate_field(f, inline_primary_key=not composite) for f in table.fields]
    if composite:
        definitions.append(f"PRIMARY KEY ({', '.join(primary_keys)})")

    body = ",\n  ".join(definitions)
    statements = [f"CREATE TABLE {table.name} (\n  {body}\n);"]

    if table.options.comment is not None:
        statements.append(f"COMMENT ON TABLE {table.name} IS {escape_string(table.options.comment)};")
    for column in table.fields:
        if column.options.comment is not None:
            statements.append(
                f"COMMENT ON COLUMN {table.name}.{column.name} IS {escape_string(column.options.comment)};"
            )

    logging.debug(f"Rendered table {table.name} with {len(table.fields)} fields")
    return "\n".join(statements)


def index_name(table_name: str, index: Index) -> str:
    """Explicit index name, or <table>_<fields...>_<unique|idx>."""
    if index.options.name:
        return index.options.name
    suffix = "unique" if index.options.unique else "idx"
    return f"{table_name}_{'_'.join(index.fields)}_{suffix}"


def generate_index(table_name: str, index: Index) -> str:
    opts = index.options
    name = index_name(table_name, index)
    unique = "UNIQUE " if opts.unique else ""
    using = f" USING {opts.using}" if opts.using else ""
    where = f" WHERE {opts.where}" if opts.where else ""

    sql = f"CREATE {unique}INDEX {name} ON {table_name}{using} ({', '.join(index.fields)}){where};"
    if opts.comment is not None:
        sql += f"\nCOMMENT ON INDEX {name} IS {escape_string(opts.comment)};"
    return sql


def generate_indexes(table: Table) -> str:
    """Render every index of a table, one statement per line."""
    return "\n".join(generate_index(table.name, index) for index in table.indexes)


def trigger_function_name(table_name: str, trigger: Trigger) -> str:
    return f"{table_name}_{trigger.name}_trigger_fn"


def generate_trigger(table_name: str, trigger: Trigger) -> str:
    """
    Render a trigger together with the plpgsql function backing it.

    The trigger body is wrapped in BEGIN ... RETURN NEW; END; inside a
    function named <table>_<trigger>_trigger_fn.
    """
    opts = trigger.options
    function_name = trigger_function_name(table_name, trigger)
    events = " OR ".join(str(event).upper() for event in trigger.events)
    when = f" WHEN ({opts.when})" if opts.when else ""

    function_sql = (
        f"CREATE OR REPLACE FUNCTION {function_name}()\n"
        f"RETURNS TRIGGER AS $$\n"
        f"BEGIN\n"
        f"  {trigger.body}\n"
        f"  RETURN NEW;\n"
        f"END;\n"
        f"$$ LANGUAGE plpgsql;"
    )
    trigger_sql = (
        f"CREATE TRIGGER {trigger.name}\n"
        f"  {TRIGGER_TIMINGS[opts.timing]} {events} ON {table_name}\n"
        f"  FOR EACH {opts.for_each.value.upper()}{when}\n"
        f"  EXECUTE FUNCTION {function_name}();"
    )
    return function_sql + "\n\n" + trigger_sql


def generate_triggers(table: Table) -> str:
    return "\n\n".join(generate_trigger(table.name, trigger) for trigger in table.triggers)


def generate_function(function: Function) -> str:
    """
    Render CREATE OR REPLACE FUNCTION.

    Arguments are declared positionally as $1..$N with their mapped types.
    plpgsql bodies are wrapped in BEGIN ... END; bodies in other languages
    are emitted as written.
    """
    opts = function.options
    args = ", ".join(f"${position} {to_sql_type(arg)}" for position, arg in enumerate(function.args, 1))
    volatility = f" {opts.volatility.value.upper()}" if opts.volatility else ""
    security = f" SECURITY {opts.security.value.upper()}" if opts.security else ""

    if opts.language == "plpgsql":
        body = f"BEGIN\n  {function.body}\nEND;"
    else:
        body = function.body

    return (
        f"CREATE OR REPLACE FUNCTION {function.name}({args})\n"
        f"RETURNS {to_sql_type(function.return_type)}{volatility}{security} AS $$\n"
        f"{body}\n"
        f"$$ LANGUAGE {opts.language};"
    )


def generate_view(view: View) -> str:
    materialized = "MATERIALIZED " if view.options.materialized else ""
    sql = f"CREATE {materialized}VIEW {view.name} AS\n{view.query.strip()};"
    if view.options.comment is not None:
        object_kind = "MATERIALIZED VIEW" if view.options.materialized else "VIEW"
        sql += f"\nCOMMENT ON {object_kind} {view.name} IS {escape_string(view.options.comment)};"
    return sql


def generate_custom_type(custom_type: CustomType) -> str:
    """Render CREATE TYPE for enums and composites, CREATE DOMAIN for domains."""
    name = custom_type.name
    if custom_type.kind is TypeKind.ENUM:
        values = ", ".join(escape_string(value) for value in custom_type.values)
        return f"CREATE TYPE {name} AS ENUM ({values});"

    if custom_type.kind is TypeKind.COMPOSITE:
        columns = ", ".join(f"{field_name} {to_sql_type(field_type)}" for field_name, field_type in custom_type.fields)
        return f"CREATE TYPE {name} AS ({columns});"

    constraint = ""
    if custom_type.constraint:
        constraint = f" CONSTRAINT {name}_check CHECK ({custom_type.constraint})"
    return f"CREATE DOMAIN {name} AS {to_sql_type(custom_type.base_type)}{constraint};"


def enable_rls(table_name: str) -> str:
    return f"ALTER TABLE {table_name} ENABLE ROW LEVEL SECURITY;"


def _format_file_size_limit(limit: Any) -> str:
    if limit is None:
        return "NULL"
    size, ok = parse_file_size(limit)
    if not ok:
        logging.warning(f"Could not parse file size limit {limit!r}, using NULL")
        return "NULL"
    return str(size)


def _format_mime_types(types: List[str]) -> str:
    if types is None:
        return "NULL"
    if not types:
        return "ARRAY[]::text[]"
    return f"ARRAY[{', '.join(escape_string(t) for t in types)}]"


def generate_storage_bucket(bucket: StorageBucket) -> str:
    """Render an idempotent upsert of the bucket into storage.buckets."""
    opts = bucket.options
    bucket_id = escape_string(bucket.name)
    public = "true" if opts.public else "false"

    return (
        "INSERT INTO storage.buckets (id, name, public, file_size_limit, allowed_mime_types)\n"
        f"VALUES ({bucket_id}, {bucket_id}, {public}, {_format_file_size_limit(opts.file_size_limit)}, "
        f"{_format_mime_types(opts.allowed_mime_types)})\n"
        "ON CONFLICT (id) DO UPDATE SET\n"
        "  name = EXCLUDED.name,\n"
        "  public = EXCLUDED.public,\n"
        "  file_size_limit = EXCLUDED.file_size_limit,\n"
        "  allowed_mime_types = EXCLUDED.allowed_mime_types;"
    )
