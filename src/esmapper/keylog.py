"""
esmapper Key Log — Cross-Build Field Shapes
===========================================

Records, per index and dotted field path, the shape last assigned to a field.
Builders read a frozen copy and hand back a dict of updates; only the
Mapper commits them.
"""

import logging
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

LogKey = Tuple[str, str]


class KeyLog:
    """
    Table of (index_name, field_path) -> field shape.

    Example:
        log = KeyLog()
        log.apply({("shop", "price"): {"type": "double"}})
        log.get("shop", "price")  # {"type": "double"}
    """

    def __init__(self):
        self._entries: Dict[LogKey, Dict[str, Any]] = {}

    def get(self, index_name: str, path: str) -> Optional[Dict[str, Any]]:
        return self._entries.get((index_name, path))

    def snapshot(self) -> Mapping[LogKey, Dict[str, Any]]:
        """Read-only copy handed to builders; later commits do not show through."""
        return MappingProxyType(dict(self._entries))

    def apply(self, updates: Mapping[LogKey, Dict[str, Any]]) -> int:
        """
        Commit updates returned by a builder.

        Returns:
            Number of entries written
        """
        for key, shape in updates.items():
            self._entries[key] = dict(shape)
        if updates:
            logger.debug(f"Key log: committed {len(updates)} update(s)")
        return len(updates)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: LogKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogKey]:
        return iter(self._entries)
