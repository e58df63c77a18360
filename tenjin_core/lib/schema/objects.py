from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from tenjin_core.lib.errors import SchemaError

E = TypeVar("E", bound=Enum)
T = TypeVar("T")


class PolicyAction(Enum):
    """Actions an RLS policy can apply to."""
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    ALL = "all"


class ReferentialAction(Enum):
    """ON DELETE / ON UPDATE actions for foreign keys."""
    CASCADE = "cascade"
    RESTRICT = "restrict"
    SET_NULL = "set_null"
    SET_DEFAULT = "set_default"


class TriggerTiming(Enum):
    BEFORE = "before"
    AFTER = "after"
    INSTEAD_OF = "instead_of"


class TriggerScope(Enum):
    ROW = "row"
    STATEMENT = "statement"


class Volatility(Enum):
    IMMUTABLE = "immutable"
    STABLE = "stable"
    VOLATILE = "volatile"


class SecurityMode(Enum):
    DEFINER = "definer"
    INVOKER = "invoker"


class TypeKind(Enum):
    """Kinds of user-defined PostgreSQL types."""
    ENUM = "enum"
    COMPOSITE = "composite"
    DOMAIN = "domain"


class RelationshipKind(Enum):
    BELONGS_TO = "belongs_to"
    HAS_ONE = "has_one"
    HAS_MANY = "has_many"
    MANY_TO_MANY = "many_to_many"


def coerce_enum(enum_cls: Type[E], value: Union[str, E, None], what: str) -> Optional[E]:
    """
    Convert a raw string into a member of enum_cls.

    None passes through so optional settings stay unset.

    Raises:
        SchemaError: If the value is not one of the enum's values
    """
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise SchemaError(f"Invalid {what} '{value}', expected one of: {allowed}") from None


# Option keys that are Python keywords are stored with a trailing underscore
_OPTION_ALIASES = {"for": "for_"}


def options_from_dict(options_cls: Type[T], data: Optional[Dict[str, Any]], owner: str) -> T:
    """
    Build a typed options object from a plain dictionary.

    Raises:
        SchemaError: If the dictionary carries keys the options type does not recognise
    """
    if data is None:
        return options_cls()
    if isinstance(data, options_cls):
        return data
    if not isinstance(data, dict):
        raise SchemaError(f"Options for {owner} must be a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(options_cls)}
    kwargs = {}
    for key, value in data.items():
        attr = _OPTION_ALIASES.get(key, key)
        if attr not in known:
            raise SchemaError(f"Unknown option '{key}' for {owner}")
        kwargs[attr] = value
    return options_cls(**kwargs)


def require(data: Dict[str, Any], key: str, owner: str) -> Any:
    """Fetch a required key from a definition dictionary."""
    if key not in data or data[key] is None:
        raise SchemaError(f"{owner} is missing required '{key}'")
    return data[key]


@dataclass
class PolicyOptions:
    """
    Optional settings of an RLS policy.

    Attributes:
        name: Explicit policy name; derived from table, action and description when unset
        for_: Role restriction: a role name, a list of roles, or "all" for no restriction
        with_check: Separate WITH CHECK expression for update policies
    """
    name: Optional[str] = None
    for_: Optional[Union[str, List[str]]] = None
    with_check: Optional[str] = None


@dataclass
class Policy:
    """
    A named row-level security rule.

    Used both for table policies and for storage bucket policies, which are
    rendered against storage.objects.
    """
    action: PolicyAction
    description: str
    condition: str
    options: PolicyOptions = field(default_factory=PolicyOptions)

    def __post_init__(self):
        self.action = coerce_enum(PolicyAction, self.action, "policy action")
        if self.action is None:
            raise SchemaError(f"Policy '{self.description}' has no action")
        if not self.condition:
            raise SchemaError(f"Policy '{self.description}' has no condition")
        if isinstance(self.options, dict):
            self.options = options_from_dict(PolicyOptions, self.options, f"policy '{self.description}'")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Policy':
        description = data.get("description", "")
        return cls(
            action=require(data, "action", f"Policy '{description}'"),
            description=description,
            condition=require(data, "condition", f"Policy '{description}'"),
            options=options_from_dict(PolicyOptions, data.get("options"), f"policy '{description}'"),
        )

    def __str__(self) -> str:
        return f"Policy({self.action.value}: {self.options.name or self.description})"
