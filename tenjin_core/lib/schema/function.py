from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Tuple

from tenjin_core.lib.errors import SchemaError
from tenjin_core.lib.schema.objects import (
    SecurityMode,
    TypeKind,
    Volatility,
    coerce_enum,
    options_from_dict,
    require,
)


@dataclass
class FunctionOptions:
    language: str = "plpgsql"
    volatility: Optional[Volatility] = None
    security: Optional[SecurityMode] = None

    def __post_init__(self):
        self.volatility = coerce_enum(Volatility, self.volatility, "function volatility")
        self.security = coerce_enum(SecurityMode, self.security, "function security")


@dataclass
class Function:
    """
    A standalone database function.

    Arguments are positional: only their types are declared and the body
    refers to them as $1..$N.
    """
    name: str
    args: List[Any]
    return_type: Any
    body: str
    options: FunctionOptions = field(default_factory=FunctionOptions)

    def __post_init__(self):
        if isinstance(self.options, dict):
            self.options = options_from_dict(FunctionOptions, self.options, f"function '{self.name}'")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Function':
        name = require(data, "name", "Function")
        return cls(
            name=name,
            args=list(data.get("args", [])),
            return_type=require(data, "return_type", f"Function '{name}'"),
            body=require(data, "body", f"Function '{name}'"),
            options=options_from_dict(FunctionOptions, data.get("options"), f"function '{name}'"),
        )


@dataclass
class ViewOptions:
    materialized: bool = False
    comment: Optional[str] = None


@dataclass
class View:
    name: str
    query: str
    options: ViewOptions = field(default_factory=ViewOptions)

    def __post_init__(self):
        if isinstance(self.options, dict):
            self.options = options_from_dict(ViewOptions, self.options, f"view '{self.name}'")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'View':
        name = require(data, "name", "View")
        return cls(
            name=name,
            query=require(data, "query", f"View '{name}'"),
            options=options_from_dict(ViewOptions, data.get("options"), f"view '{name}'"),
        )


@dataclass
class CustomType:
    """
    A user-defined type.

    Attributes:
        name: Type name
        kind: enum, composite or domain
        values: Labels of an enum type
        fields: (name, type) pairs of a composite type
        base_type: Underlying type of a domain
        constraint: Optional CHECK expression of a domain
    """
    name: str
    kind: TypeKind
    values: Optional[List[str]] = None
    fields: Optional[List[Tuple[str, Any]]] = None
    base_type: Optional[Any] = None
    constraint: Optional[str] = None

    def __post_init__(self):
        self.kind = coerce_enum(TypeKind, self.kind, "custom type kind")
        if self.kind is TypeKind.ENUM and not self.values:
            raise SchemaError(f"Enum type '{self.name}' requires values")
        if self.kind is TypeKind.COMPOSITE:
            if not self.fields:
                raise SchemaError(f"Composite type '{self.name}' requires fields")
            pairs = self.fields.items() if isinstance(self.fields, dict) else self.fields
            self.fields = [tuple(pair) for pair in pairs]
        if self.kind is TypeKind.DOMAIN and self.base_type is None:
            raise SchemaError(f"Domain '{self.name}' requires a base_type")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CustomType':
        name = require(data, "name", "Custom type")
        return cls(
            name=name,
            kind=require(data, "kind", f"Custom type '{name}'"),
            values=data.get("values"),
            fields=data.get("fields"),
            base_type=data.get("base_type"),
            constraint=data.get("constraint"),
        )
