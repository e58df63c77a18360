"""
Mapping of abstract field types to PostgreSQL types, plus file-size parsing
for storage buckets.
"""

from enum import Enum
from typing import Any, Tuple, Union
import re

POSTGRESQL_TYPES = frozenset([
    # Numeric
    "smallint", "integer", "bigint", "decimal", "numeric", "real", "double_precision",
    "smallserial", "serial", "bigserial",
    # Monetary
    "money",
    # Character
    "varchar", "char", "text",
    # Binary
    "bytea",
    # Date/time
    "timestamp", "timestamptz", "date", "time", "timetz", "interval",
    "boolean",
    "enum",
    # Geometric
    "point", "line", "lseg", "box", "path", "polygon", "circle",
    # Network address
    "cidr", "inet", "macaddr", "macaddr8",
    # Bit string
    "bit", "bit_varying",
    # Text search
    "tsvector", "tsquery",
    "uuid",
    "xml",
    "json", "jsonb",
    "array",
    # Range
    "int4range", "int8range", "numrange", "tsrange", "tstzrange", "daterange",
])

TYPE_MAP = {
    "string": "text",
    "text": "text",
    "integer": "integer",
    "bigint": "bigint",
    "float": "real",
    "decimal": "decimal",
    "boolean": "boolean",
    "uuid": "uuid",
    "timestamptz": "timestamptz",
    "timestamp": "timestamp",
    "date": "date",
    "time": "time",
    "json": "json",
    "jsonb": "jsonb",
}

RLS_ACTIONS = ("select", "insert", "update", "delete", "all")

FILE_SIZE_UNITS = {
    "B": 1,
    "KB": 1024,
    "MB": 1024 ** 2,
    "GB": 1024 ** 3,
    "TB": 1024 ** 4,
}

_FILE_SIZE_RE = re.compile(r'^(\d+(?:\.\d+)?)\s*(B|KB|MB|GB|TB)?$', re.IGNORECASE)


def _identifier(value: Union[str, Enum]) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return value


def to_sql_type(identifier: Union[str, Enum]) -> str:
    """
    Convert an abstract type identifier to its PostgreSQL type name.

    Identifiers in TYPE_MAP are translated; anything else (``varchar(255)``,
    ``numeric(10,2)``, a custom enum name) is passed through unchanged.
    """
    name = _identifier(identifier)
    return TYPE_MAP.get(name, name)


def is_valid_type(identifier: Union[str, Enum]) -> bool:
    """Check whether an identifier names a known PostgreSQL type."""
    return _identifier(identifier) in POSTGRESQL_TYPES


def is_valid_rls_action(action: Union[str, Enum]) -> bool:
    """Check whether an action is one PostgreSQL accepts in CREATE POLICY ... FOR."""
    return _identifier(action) in RLS_ACTIONS


def parse_file_size(size: Any) -> Tuple[int, bool]:
    """
    Parse a human file size into a byte count.

    Accepts an integer byte count or a string such as ``"5MB"``, ``"1.5 gb"``
    or ``"512"``. Units are powers of 1024.

    Returns:
        Tuple of (bytes, ok). ``ok`` is False when the input cannot be parsed,
        in which case bytes is 0 and callers should emit NULL instead.
    """
    if isinstance(size, bool):
        return 0, False
    if isinstance(size, int):
        return size, True
    if not isinstance(size, str):
        return 0, False

    match = _FILE_SIZE_RE.match(size.strip())
    if not match:
        return 0, False

    number, unit = match.groups()
    multiplier = FILE_SIZE_UNITS[(unit or "B").upper()]
    # Round half up to whole bytes
    return int(float(number) * multiplier + 0.5), True
