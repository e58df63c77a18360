from tenjin_core.lib.schema.objects import (
    PolicyAction,
    ReferentialAction,
    TriggerTiming,
    TriggerScope,
    Volatility,
    SecurityMode,
    TypeKind,
    RelationshipKind,
    PolicyOptions,
    Policy,
)
from tenjin_core.lib.schema.table import (
    FieldOptions,
    Field,
    IndexOptions,
    Index,
    TriggerOptions,
    Trigger,
    Relationship,
    TableOptions,
    Table,
)
from tenjin_core.lib.schema.function import (
    FunctionOptions,
    Function,
    ViewOptions,
    View,
    CustomType,
)
from tenjin_core.lib.schema.storage import BucketOptions, StorageBucket
from tenjin_core.lib.schema.container import Schema
from tenjin_core.lib.schema.builder import SchemaBuilder

__all__ = [
    "PolicyAction",
    "ReferentialAction",
    "TriggerTiming",
    "TriggerScope",
    "Volatility",
    "SecurityMode",
    "TypeKind",
    "RelationshipKind",
    "PolicyOptions",
    "Policy",
    "FieldOptions",
    "Field",
    "IndexOptions",
    "Index",
    "TriggerOptions",
    "Trigger",
    "Relationship",
    "TableOptions",
    "Table",
    "FunctionOptions",
    "Function",
    "ViewOptions",
    "View",
    "CustomType",
    "BucketOptions",
    "StorageBucket",
    "Schema",
    "SchemaBuilder",
]
