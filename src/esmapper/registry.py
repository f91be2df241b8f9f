"""
esmapper Registry — Index Records and Dynamic Mapping Control
=============================================================

Maps index names to IndexRecords and enforces the two dynamic-mapping
control levels:

    IndexLevelOff (default)  →  "index.mapper.dynamic" absent,
                                type_dynamic_mapping() allowed
    IndexLevelOn             →  "index.mapper.dynamic" present,
                                dynamic_mapping() cascades to every type

Transitions happen only through enable/disable.
"""

import logging
from typing import Any, Dict, Optional

from .config import ConfigurationStore
from .exceptions import (
    DynamicMappingStateError,
    IndexNotFound,
    InvalidIndexName,
    TypeNotFound,
)
from .models import INDEX_DYNAMIC_KEY, Dynamic, IndexRecord, TypeMapping

logger = logging.getLogger(__name__)


class IndexRegistry:
    """
    In-memory registry of index definitions.

    Example:
        registry = IndexRegistry(ConfigurationStore())
        registry.create("shop")
        registry.enable_index_level_dynamic("shop", True)
        registry.dynamic_mapping("shop", False)
    """

    def __init__(self, config: ConfigurationStore):
        self.config = config
        self._indices: Dict[str, IndexRecord] = {}

    # ============================================================
    # LIFECYCLE
    # ============================================================

    def create(self, name: str) -> IndexRecord:
        """
        Register an index with a snapshot of the current default settings.

        Registering an existing name replaces the record and its mappings.

        Args:
            name: Index name

        Returns:
            The new IndexRecord
        """
        if not name or not isinstance(name, str):
            raise InvalidIndexName(f"Invalid index name: {name!r}")

        previous = self._indices.get(name)
        if previous is not None and previous.mappings:
            logger.warning(
                f"Re-registering index '{name}' drops {len(previous.mappings)} mapping(s)"
            )

        record = IndexRecord(name=name, settings=self.config.snapshot())
        self._indices[name] = record
        logger.info(f"Registered index: {name}")
        return record

    def get(self, name: str) -> Optional[IndexRecord]:
        return self._indices.get(name)

    def ensure(self, name: str) -> IndexRecord:
        """Return the index, creating it with current defaults if unknown."""
        record = self.get(name)
        if record is None:
            record = self.create(name)
        return record

    def require(self, name: str) -> IndexRecord:
        record = self.get(name)
        if record is None:
            raise IndexNotFound(f"Index not found: {name}")
        return record

    def count(self) -> int:
        return len(self._indices)

    def clear(self) -> None:
        self._indices.clear()

    def __contains__(self, name: str) -> bool:
        return name in self._indices

    # ============================================================
    # MAPPINGS
    # ============================================================

    def get_mappings(self, name: str) -> Dict[str, TypeMapping]:
        return self.require(name).mappings

    def get_single_mapping(self, name: str, type_name: str) -> Optional[TypeMapping]:
        return self.get_mappings(name).get(type_name)

    def install(self, name: str, type_name: str, mapping: TypeMapping) -> TypeMapping:
        """Attach a mapping under type_name, replacing any previous one."""
        record = self.require(name)
        if type_name in record.mappings:
            logger.debug(f"Replacing mapping {name}/{type_name}")
        record.mappings[type_name] = mapping
        return mapping

    # ============================================================
    # DYNAMIC MAPPING CONTROL
    # ============================================================

    def enable_index_level_dynamic(self, name: str, status: Any = False) -> None:
        """
        Switch the index to index-level dynamic control.

        No-op if already enabled; an existing status is kept.

        Args:
            name: Index name
            status: Initial index-wide status (default False)
        """
        record = self.require(name)
        if INDEX_DYNAMIC_KEY in record.settings:
            return
        record.settings[INDEX_DYNAMIC_KEY] = bool(status)
        logger.info(f"Index-level dynamic mappings enabled on {name} ({bool(status)})")

    def disable_index_level_dynamic(self, name: str) -> None:
        """Revert the index to per-type dynamic control."""
        record = self.require(name)
        if record.settings.pop(INDEX_DYNAMIC_KEY, None) is not None:
            logger.info(f"Index-level dynamic mappings disabled on {name}")

    def dynamic_mapping(self, name: str, status: Any) -> None:
        """
        Set the index-wide dynamic flag and cascade it to every type.

        Raises:
            IndexNotFound: index is not registered
            DynamicMappingStateError: index-level control is not enabled
        """
        record = self.require(name)
        if INDEX_DYNAMIC_KEY not in record.settings:
            raise DynamicMappingStateError(
                f"Index level dynamic mapping is disabled in index {name}. "
                "Enable index level dynamic mappings or use type level dynamic mappings"
            )

        record.settings[INDEX_DYNAMIC_KEY] = bool(status)
        dynamic = Dynamic.from_bool(status)
        for mapping in record.mappings.values():
            mapping.dynamic = dynamic

    def type_dynamic_mapping(self, name: str, type_name: str, status: Any) -> None:
        """
        Set the dynamic flag of a single type.

        Raises:
            IndexNotFound: index is not registered
            DynamicMappingStateError: index-level control is active
            TypeNotFound: type is not registered under the index
        """
        record = self.require(name)
        if INDEX_DYNAMIC_KEY in record.settings:
            raise DynamicMappingStateError(
                f"Index level dynamic mappings is active on {name}. Disable and try again"
            )

        mapping = record.mappings.get(type_name)
        if mapping is None:
            raise TypeNotFound(f"Type not found: {name}/{type_name}")

        mapping.dynamic = Dynamic.from_bool(status)
