"""
Schema container for all declared database objects.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any

from tenjin_core.lib.errors import SchemaError
from tenjin_core.lib.schema.function import CustomType, Function, View
from tenjin_core.lib.schema.storage import StorageBucket
from tenjin_core.lib.schema.table import Table


@dataclass
class Schema:
    """
    Top-level container of a declarative schema.

    Every list is kept in author-declared order; the compiler iterates them
    as-is and never reorders.
    """
    tables: List[Table] = field(default_factory=list)
    functions: List[Function] = field(default_factory=list)
    views: List[View] = field(default_factory=list)
    storage_buckets: List[StorageBucket] = field(default_factory=list)
    custom_types: List[CustomType] = field(default_factory=list)

    def __post_init__(self):
        seen = set()
        for table in self.tables:
            if table.name in seen:
                raise SchemaError(f"Duplicate table '{table.name}'")
            seen.add(table.name)

    def table(self, name: str) -> Optional[Table]:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Schema':
        if not isinstance(data, dict):
            raise SchemaError(f"Schema definition must be a mapping, got {type(data).__name__}")
        return cls(
            tables=[Table.from_dict(t) for t in data.get("tables", [])],
            functions=[Function.from_dict(f) for f in data.get("functions", [])],
            views=[View.from_dict(v) for v in data.get("views", [])],
            storage_buckets=[StorageBucket.from_dict(b) for b in data.get("storage_buckets", [])],
            custom_types=[CustomType.from_dict(t) for t in data.get("custom_types", [])],
        )

    def __str__(self) -> str:
        return (f"Schema({len(self.tables)} tables, {len(self.functions)} functions, "
                f"{len(self.views)} views, {len(self.storage_buckets)} buckets, "
                f"{len(self.custom_types)} types)")
