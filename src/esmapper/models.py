"""
esmapper Models — Indices and Type Mappings
===========================================

Plain data holders for the registry. Dynamic flags stay a two-state enum
until to_dict()/to_body() turns them into the "true"/"false" strings the
search engine expects.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

# Settings key that switches an index to index-level dynamic control
INDEX_DYNAMIC_KEY = "index.mapper.dynamic"


class Dynamic(str, Enum):
    """Whether unknown fields are auto-indexed for a type."""

    TRUE = "true"
    FALSE = "false"

    @classmethod
    def from_bool(cls, status: Any) -> "Dynamic":
        return cls.TRUE if status else cls.FALSE

    def __bool__(self) -> bool:
        return self is Dynamic.TRUE


@dataclass
class TypeMapping:
    """
    Field mapping for one document type.

    The properties tree comes from the inference builder; the registry only
    ever touches ``dynamic``.
    """

    properties: Dict[str, Any] = field(default_factory=dict)
    dynamic: Dynamic = Dynamic.TRUE

    def __contains__(self, field_name: str) -> bool:
        return field_name in self.properties

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dynamic": self.dynamic.value,
            "properties": self.properties
        }


@dataclass
class IndexRecord:
    """
    A registered index: a settings snapshot plus its type mappings.

    Example:
        record = IndexRecord("shop", settings={"analysis": {...}})
        record.mappings["product"] = TypeMapping({"name": {"type": "text"}})
        body = record.to_body()
    """

    name: str
    settings: Dict[str, Any] = field(default_factory=dict)
    mappings: Dict[str, TypeMapping] = field(default_factory=dict)

    @property
    def index_level_dynamic(self) -> Optional[bool]:
        """None while type-level control is active, else the index-wide flag."""
        if INDEX_DYNAMIC_KEY not in self.settings:
            return None
        return self.settings[INDEX_DYNAMIC_KEY]

    def to_body(self) -> Dict[str, Any]:
        """
        Build an index-creation body.

        Returns:
            Dict with "settings" and "mappings" keyed by type name
        """
        return {
            "settings": self.settings,
            "mappings": {
                type_name: mapping.to_dict()
                for type_name, mapping in self.mappings.items()
            }
        }
