from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Union

from tenjin_core.lib.schema.objects import Policy, options_from_dict, require


@dataclass
class BucketOptions:
    """
    Attributes:
        public: Whether objects are readable without authentication
        file_size_limit: Byte count or human size such as "5MB"
        allowed_mime_types: Accepted content types; any type when unset
    """
    public: bool = False
    file_size_limit: Optional[Union[int, str]] = None
    allowed_mime_types: Optional[List[str]] = None


@dataclass
class StorageBucket:
    name: str
    policies: List[Policy] = field(default_factory=list)
    options: BucketOptions = field(default_factory=BucketOptions)

    def __post_init__(self):
        if isinstance(self.options, dict):
            self.options = options_from_dict(BucketOptions, self.options, f"bucket '{self.name}'")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StorageBucket':
        name = require(data, "name", "Storage bucket")
        return cls(
            name=name,
            policies=[Policy.from_dict(p) for p in data.get("policies", [])],
            options=options_from_dict(BucketOptions, data.get("options"), f"bucket '{name}'"),
        )
