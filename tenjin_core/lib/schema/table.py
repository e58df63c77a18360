from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any

from tenjin_core.lib.errors import SchemaError
from tenjin_core.lib.schema.objects import (
    Policy,
    ReferentialAction,
    RelationshipKind,
    TriggerScope,
    TriggerTiming,
    coerce_enum,
    options_from_dict,
    require,
)


@dataclass
class FieldOptions:
    """
    Column settings.

    Attributes:
        null: Whether the column accepts NULL (nullable by default)
        default: Literal value or SQL expression used as the column default
        primary_key: Whether the column is part of the primary key
        unique: Whether the column carries a UNIQUE constraint
        references: Foreign key target in the form "table(column)"
        on_delete: Action taken when the referenced row is deleted
        on_update: Action taken when the referenced key is updated
        generated: Expression for a stored generated column
        comment: Column comment
    """
    null: bool = True
    default: Any = None
    primary_key: bool = False
    unique: bool = False
    references: Optional[str] = None
    on_delete: Optional[ReferentialAction] = None
    on_update: Optional[ReferentialAction] = None
    generated: Optional[str] = None
    comment: Optional[str] = None

    def __post_init__(self):
        self.on_delete = coerce_enum(ReferentialAction, self.on_delete, "on_delete action")
        self.on_update = coerce_enum(ReferentialAction, self.on_update, "on_update action")


@dataclass
class Field:
    name: str
    type: Any
    options: FieldOptions = field(default_factory=FieldOptions)

    def __post_init__(self):
        if isinstance(self.options, dict):
            self.options = options_from_dict(FieldOptions, self.options, f"field '{self.name}'")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Field':
        name = require(data, "name", "Field")
        return cls(
            name=name,
            type=require(data, "type", f"Field '{name}'"),
            options=options_from_dict(FieldOptions, data.get("options"), f"field '{name}'"),
        )


@dataclass
class IndexOptions:
    name: Optional[str] = None
    unique: bool = False
    using: Optional[str] = None
    where: Optional[str] = None
    comment: Optional[str] = None


@dataclass
class Index:
    fields: List[str]
    options: IndexOptions = field(default_factory=IndexOptions)

    def __post_init__(self):
        if not self.fields:
            raise SchemaError("Index must cover at least one field")
        self.fields = [str(f) for f in self.fields]
        if isinstance(self.options, dict):
            self.options = options_from_dict(IndexOptions, self.options, f"index on {self.fields}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Index':
        columns = require(data, "fields", "Index")
        return cls(
            fields=list(columns),
            options=options_from_dict(IndexOptions, data.get("options"), f"index on {columns}"),
        )


@dataclass
class TriggerOptions:
    timing: TriggerTiming = TriggerTiming.BEFORE
    for_each: TriggerScope = TriggerScope.ROW
    when: Optional[str] = None

    def __post_init__(self):
        self.timing = coerce_enum(TriggerTiming, self.timing, "trigger timing") or TriggerTiming.BEFORE
        self.for_each = coerce_enum(TriggerScope, self.for_each, "trigger scope") or TriggerScope.ROW


@dataclass
class Trigger:
    """A trigger whose body is compiled into a dedicated plpgsql trigger function."""
    name: str
    events: List[str]
    body: str
    options: TriggerOptions = field(default_factory=TriggerOptions)

    def __post_init__(self):
        if not self.events:
            raise SchemaError(f"Trigger '{self.name}' has no events")
        if isinstance(self.options, dict):
            self.options = options_from_dict(TriggerOptions, self.options, f"trigger '{self.name}'")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Trigger':
        name = require(data, "name", "Trigger")
        return cls(
            name=name,
            events=list(require(data, "events", f"Trigger '{name}'")),
            body=require(data, "body", f"Trigger '{name}'"),
            options=options_from_dict(TriggerOptions, data.get("options"), f"trigger '{name}'"),
        )


@dataclass
class Relationship:
    """Informational link to another table. Not compiled to SQL."""
    kind: RelationshipKind
    name: str
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.kind = coerce_enum(RelationshipKind, self.kind, "relationship kind")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Relationship':
        name = require(data, "name", "Relationship")
        return cls(
            kind=require(data, "kind", f"Relationship '{name}'"),
            name=name,
            options=dict(data.get("options") or {}),
        )


@dataclass
class TableOptions:
    comment: Optional[str] = None


@dataclass
class Table:
    """
    A table definition with everything compiled alongside it.

    Attributes:
        name: Table name, unique within a schema
        fields: Columns in declaration order
        indexes: Indexes in declaration order
        policies: RLS policies in declaration order
        triggers: Triggers in declaration order
        relationships: Informational relationships
        rls_enabled: Whether row level security is switched on
        options: Table-level settings
    """
    name: str
    fields: List[Field] = field(default_factory=list)
    indexes: List[Index] = field(default_factory=list)
    policies: List[Policy] = field(default_factory=list)
    triggers: List[Trigger] = field(default_factory=list)
    relationships: List[Relationship] = field(default_factory=list)
    rls_enabled: bool = False
    options: TableOptions = field(default_factory=TableOptions)

    def __post_init__(self):
        if isinstance(self.options, dict):
            self.options = options_from_dict(TableOptions, self.options, f"table '{self.name}'")
        seen = set()
        for column in self.fields:
            if column.name in seen:
                raise SchemaError(f"Duplicate field '{column.name}' in table '{self.name}'")
            seen.add(column.name)

    def primary_key_columns(self) -> List[str]:
        """Names of fields marked primary_key, in declaration order."""
        return [f.name for f in self.fields if f.options.primary_key]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Table':
        name = require(data, "name", "Table")
        return cls(
            name=name,
            fields=[Field.from_dict(f) for f in data.get("fields", [])],
            indexes=[Index.from_dict(i) for i in data.get("indexes", [])],
            policies=[Policy.from_dict(p) for p in data.get("policies", [])],
            triggers=[Trigger.from_dict(t) for t in data.get("triggers", [])],
            relationships=[Relationship.from_dict(r) for r in data.get("relationships", [])],
            rls_enabled=bool(data.get("rls_enabled", False)),
            options=options_from_dict(TableOptions, data.get("options"), f"table '{name}'"),
        )

    def __str__(self) -> str:
        return f"Table({self.name}: {len(self.fields)} fields)"


__all__ = [
    "FieldOptions",
    "Field",
    "IndexOptions",
    "Index",
    "TriggerOptions",
    "Trigger",
    "Relationship",
    "TableOptions",
    "Table",
]
