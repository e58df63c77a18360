"""
Builder API for authoring schemas in ordinary Python code.

Example:

    builder = SchemaBuilder()
    with builder.table("users") as t:
        t.field("id", "uuid", primary_key=True, default="gen_random_uuid()")
        t.field("email", "text", unique=True, null=False)
        t.enable_rls()
        t.policy("select", "Users can view their own profile", "auth.uid() = id")
        t.index(["email"], unique=True)
    schema = builder.build()
"""

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from tenjin_core.lib.errors import SchemaError
from tenjin_core.lib.schema.container import Schema
from tenjin_core.lib.schema.function import (
    CustomType,
    Function,
    FunctionOptions,
    View,
    ViewOptions,
)
from tenjin_core.lib.schema.objects import (
    Policy,
    PolicyOptions,
    RelationshipKind,
    options_from_dict,
)
from tenjin_core.lib.schema.storage import BucketOptions, StorageBucket
from tenjin_core.lib.schema.table import (
    Field,
    FieldOptions,
    Index,
    IndexOptions,
    Relationship,
    Table,
    TableOptions,
    Trigger,
    TriggerOptions,
)


class _Block:
    """Base for builders that are only usable inside their `with` block."""

    kind = "block"

    def __init__(self, name: str):
        self.name = name
        self._open = True

    def _check_open(self, operation: str):
        if not self._open:
            raise SchemaError(f"{operation}() can only be used inside a {self.kind} block")

    def _close(self):
        self._open = False


class TableBuilder(_Block):
    kind = "table"

    def __init__(self, name: str, **options):
        super().__init__(name)
        self._options = options_from_dict(TableOptions, options, f"table '{name}'")
        self._fields: List[Field] = []
        self._indexes: List[Index] = []
        self._policies: List[Policy] = []
        self._triggers: List[Trigger] = []
        self._relationships: List[Relationship] = []
        self._rls_enabled = False

    def field(self, name: str, type: Any, **options) -> 'TableBuilder':
        self._check_open("field")
        self._fields.append(Field(name, type, options_from_dict(FieldOptions, options, f"field '{name}'")))
        return self

    def enable_rls(self) -> 'TableBuilder':
        self._check_open("enable_rls")
        self._rls_enabled = True
        return self

    def policy(self, action: str, description: str, condition: str, **options) -> 'TableBuilder':
        self._check_open("policy")
        self._policies.append(Policy(
            action, description, condition,
            options_from_dict(PolicyOptions, options, f"policy '{description}'"),
        ))
        return self

    def index(self, fields: List[str], **options) -> 'TableBuilder':
        self._check_open("index")
        self._indexes.append(Index(list(fields), options_from_dict(IndexOptions, options, f"index on {fields}")))
        return self

    def trigger(self, name: str, events: List[str], body: str, **options) -> 'TableBuilder':
        self._check_open("trigger")
        self._triggers.append(Trigger(
            name, list(events), body,
            options_from_dict(TriggerOptions, options, f"trigger '{name}'"),
        ))
        return self

    def _relationship(self, kind: RelationshipKind, name: str, options) -> 'TableBuilder':
        self._check_open(kind.value)
        self._relationships.append(Relationship(kind, name, dict(options)))
        return self

    def belongs_to(self, name: str, **options) -> 'TableBuilder':
        return self._relationship(RelationshipKind.BELONGS_TO, name, options)

    def has_one(self, name: str, **options) -> 'TableBuilder':
        return self._relationship(RelationshipKind.HAS_ONE, name, options)

    def has_many(self, name: str, **options) -> 'TableBuilder':
        return self._relationship(RelationshipKind.HAS_MANY, name, options)

    def many_to_many(self, name: str, **options) -> 'TableBuilder':
        return self._relationship(RelationshipKind.MANY_TO_MANY, name, options)

    def to_table(self) -> Table:
        return Table(
            name=self.name,
            fields=list(self._fields),
            indexes=list(self._indexes),
            policies=list(self._policies),
            triggers=list(self._triggers),
            relationships=list(self._relationships),
            rls_enabled=self._rls_enabled,
            options=self._options,
        )


class BucketBuilder(_Block):
    kind = "storage_bucket"

    def __init__(self, name: str, **options):
        super().__init__(name)
        self._options = options_from_dict(BucketOptions, options, f"bucket '{name}'")
        self._policies: List[Policy] = []

    def public(self, value: bool = True) -> 'BucketBuilder':
        self._check_open("public")
        self._options.public = value
        return self

    def file_size_limit(self, limit) -> 'BucketBuilder':
        self._check_open("file_size_limit")
        self._options.file_size_limit = limit
        return self

    def allowed_mime_types(self, types: List[str]) -> 'BucketBuilder':
        self._check_open("allowed_mime_types")
        self._options.allowed_mime_types = list(types)
        return self

    def policy(self, action: str, description: str, condition: str, **options) -> 'BucketBuilder':
        self._check_open("policy")
        self._policies.append(Policy(
            action, description, condition,
            options_from_dict(PolicyOptions, options, f"policy '{description}'"),
        ))
        return self

    def to_bucket(self) -> StorageBucket:
        return StorageBucket(name=self.name, policies=list(self._policies), options=self._options)


class SchemaBuilder:
    """
    Append-only collector of schema definitions.

    Objects are recorded in the order they are declared and build() hands
    them to the Schema in that same order.
    """

    def __init__(self):
        self._tables: List[Table] = []
        self._functions: List[Function] = []
        self._views: List[View] = []
        self._buckets: List[StorageBucket] = []
        self._custom_types: List[CustomType] = []
        self._current: Optional[_Block] = None

    @contextmanager
    def table(self, name: str, **options) -> Iterator[TableBuilder]:
        block = self._enter(TableBuilder(name, **options))
        try:
            yield block
        finally:
            self._exit(block)
        self._tables.append(block.to_table())

    @contextmanager
    def storage_bucket(self, name: str, **options) -> Iterator[BucketBuilder]:
        block = self._enter(BucketBuilder(name, **options))
        try:
            yield block
        finally:
            self._exit(block)
        self._buckets.append(block.to_bucket())

    def function(self, name: str, args: List[Any], return_type: Any, body: str, **options) -> 'SchemaBuilder':
        self._functions.append(Function(
            name, list(args), return_type, body,
            options_from_dict(FunctionOptions, options, f"function '{name}'"),
        ))
        return self

    def view(self, name: str, query: str, **options) -> 'SchemaBuilder':
        self._views.append(View(name, query, options_from_dict(ViewOptions, options, f"view '{name}'")))
        return self

    def custom_type(self, name: str, kind: str, **options) -> 'SchemaBuilder':
        unknown = set(options) - {"values", "fields", "base_type", "constraint"}
        if unknown:
            raise SchemaError(f"Unknown option '{sorted(unknown)[0]}' for custom type '{name}'")
        self._custom_types.append(CustomType(name, kind, **options))
        return self

    def build(self) -> Schema:
        if self._current is not None:
            raise SchemaError(f"Cannot build schema while {self._current.kind} '{self._current.name}' is open")
        return Schema(
            tables=list(self._tables),
            functions=list(self._functions),
            views=list(self._views),
            storage_buckets=list(self._buckets),
            custom_types=list(self._custom_types),
        )

    def _enter(self, block: _Block) -> _Block:
        if self._current is not None:
            raise SchemaError(f"{block.kind} '{block.name}' cannot be nested inside {self._current.kind} '{self._current.name}'")
        self._current = block
        return block

    def _exit(self, block: _Block):
        block._close()
        self._current = None
