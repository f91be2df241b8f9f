"""
esmapper Core — Mapping Registry and Builder Gateway
====================================================

The Mapper ties together everything one registry needs:

    ConfigurationStore  →  default analysis settings for new indices
    IndexRegistry       →  index records, type mappings, dynamic control
    KeyLog              →  field shapes seen so far, per index and path
    MappingBuilder      →  document → mapping inference (replaceable)

Each Mapper is independent; create as many as needed.

Usage:
    from esmapper import Mapper

    mapper = Mapper()
    mapper.index("shop")
    mapping = mapper.map_from_doc("shop", "product", {"name": "Widget", "price": 9.99})
    body = mapper.get_index("shop").to_body()
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional

from .builder import FieldConfig, MappingBuilder
from .config import ConfigurationStore
from .exceptions import MappingCancelled
from .keylog import KeyLog
from .models import IndexRecord, TypeMapping
from .registry import IndexRegistry
from .sources import CollectionConfig

logger = logging.getLogger(__name__)


MappingCallback = Callable[[TypeMapping], Any]


class MappingTask:
    """
    Handle for a running collection mapping.

    Example:
        task = mapper.map_from_collection("shop", "product", config)
        mapping = task.result(timeout=30)
    """

    def __init__(self, future: Future, cancel_event: threading.Event):
        self._future = future
        self._cancel_event = cancel_event

    def result(self, timeout: Optional[float] = None) -> TypeMapping:
        return self._future.result(timeout=timeout)

    def exception(self, timeout: Optional[float] = None) -> Optional[BaseException]:
        return self._future.exception(timeout=timeout)

    def cancel(self) -> bool:
        """
        Request cancellation.

        A queued task never starts; a running one stops before its next
        document and installs nothing.

        Returns:
            True if the task was stopped before it started
        """
        self._cancel_event.set()
        return self._future.cancel()

    def cancelled(self) -> bool:
        return self._future.cancelled()

    def done(self) -> bool:
        return self._future.done()


class Mapper:
    """
    Registry of index definitions with mapping inference.

    Example:
        with Mapper() as mapper:
            mapper.configure({"analyzers": {"folding": {"tokenizer": "standard",
                                                        "filter": ["lowercase", "asciifolding"]}}})
            mapper.map_from_doc("shop", "product", doc, [{"field": "name", "analyzer": "folding"}])
            mapper.enable_index_level_dynamic_mappings("shop")
            mapper.dynamic_mapping("shop", True)
    """

    def __init__(self, builder: Optional[MappingBuilder] = None, max_workers: int = 4):
        """
        Args:
            builder: Inference collaborator (default: MappingBuilder())
            max_workers: Threads for collection mappings
        """
        self.builder = builder or MappingBuilder()
        self.max_workers = max_workers

        self.config = ConfigurationStore()
        self.registry = IndexRegistry(self.config)
        self.key_log = KeyLog()

        self._executor: Optional[ThreadPoolExecutor] = None

    # ============================================================
    # CONFIGURATION
    # ============================================================

    def configure(self, config: Dict[str, Any]) -> None:
        """
        Add filters and analyzers to the defaults used by new indices.

        Names already registered are left untouched.

        Args:
            config: Dict with optional "filters" and "analyzers" maps
        """
        self.config.merge(
            filters=config.get("filters"),
            analyzers=config.get("analyzers")
        )

    def get_default_config(self) -> Dict[str, Any]:
        """Live default settings (not a copy)."""
        return self.config.settings

    def clear(self) -> None:
        """Reset indices, default settings and the key log."""
        self.registry.clear()
        self.config.reset()
        self.key_log.clear()
        logger.debug("Mapper cleared")

    # ============================================================
    # INDICES
    # ============================================================

    def index(self, index_name: str) -> IndexRecord:
        """
        Register an index. Replaces any existing index of the same name.

        Raises:
            InvalidIndexName: name is empty or not a string
        """
        return self.registry.create(index_name)

    def get_index(self, index_name: str) -> Optional[IndexRecord]:
        return self.registry.get(index_name)

    def index_count(self) -> int:
        return self.registry.count()

    def get_mappings(self, index_name: str) -> Dict[str, TypeMapping]:
        """
        All mappings registered under an index.

        Raises:
            IndexNotFound: index is not registered
        """
        return self.registry.get_mappings(index_name)

    def get_single_mapping(self, index_name: str, mapping_name: str) -> Optional[TypeMapping]:
        return self.registry.get_single_mapping(index_name, mapping_name)

    # ============================================================
    # DYNAMIC MAPPINGS
    # ============================================================

    def enable_index_level_dynamic_mappings(self, index_name: str, status: Any = False) -> None:
        self.registry.enable_index_level_dynamic(index_name, status)

    def disable_index_level_dynamic_mappings(self, index_name: str) -> None:
        self.registry.disable_index_level_dynamic(index_name)

    def dynamic_mapping(self, index_name: str, status: Any) -> None:
        self.registry.dynamic_mapping(index_name, status)

    def type_dynamic_mapping(self, index_name: str, type_name: str, status: Any) -> None:
        self.registry.type_dynamic_mapping(index_name, type_name, status)

    # ============================================================
    # MAPPING GENERATION
    # ============================================================

    def map_from_doc(
        self,
        index_name: str,
        type_name: str,
        document: Dict[str, Any],
        config: Optional[FieldConfig] = None
    ) -> TypeMapping:
        """
        Create a type and attach a mapping generated from a document.

        Unknown indices are created with the current defaults.

        Args:
            index_name: Index to create the type in
            type_name: Type to attach the mapping to
            document: Document to infer field types from
            config: Per-field overrides (if empty, all string fields are searchable)

        Returns:
            The installed mapping
        """
        record = self.registry.ensure(index_name)
        result = self.builder.build(
            document,
            record.settings,
            config,
            index_name,
            self.key_log.snapshot()
        )
        mapping = self.registry.install(index_name, type_name, result.mapping)
        self.key_log.apply(result.key_log_updates)
        return mapping

    def map_from_collection(
        self,
        index_name: str,
        type_name: str,
        collection: CollectionConfig,
        callback: Optional[MappingCallback] = None
    ) -> MappingTask:
        """
        Create a type and attach a mapping sampled from a collection.

        Returns immediately; sampling and inference run on a worker thread.
        callback receives the mapping once, after it is installed. Errors from
        the source or builder surface through MappingTask.result(). The
        source is left open; closing it is up to the caller.

        Args:
            index_name: Index to create the type in
            type_name: Type to attach the mapping to
            collection: Source, sample size and field overrides
            callback: Called with the installed mapping on success

        Returns:
            MappingTask
        """
        record = self.registry.ensure(index_name)
        cancel_event = threading.Event()

        def run() -> TypeMapping:
            logger.info(f"Sampling up to {collection.sample_size} documents for {index_name}/{type_name}")
            try:
                result = self.builder.build_many(
                    collection.source.sample(collection.sample_size),
                    record.settings,
                    collection.field_config,
                    index_name,
                    self.key_log.snapshot(),
                    cancel_event=cancel_event
                )
                # Cancelled while the source was finishing its last document
                if cancel_event.is_set():
                    raise MappingCancelled(f"Mapping build for {index_name}/{type_name} cancelled")
            except MappingCancelled:
                logger.info(f"Cancelled mapping {index_name}/{type_name}; nothing installed")
                raise

            mapping = self.registry.install(index_name, type_name, result.mapping)
            self.key_log.apply(result.key_log_updates)
            logger.info(f"Installed mapping {index_name}/{type_name} ({len(mapping.properties)} fields)")

            if callback is not None:
                callback(mapping)
            return mapping

        future = self._get_executor().submit(run)
        return MappingTask(future, cancel_event)

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="esmapper"
            )
        return self._executor

    def close(self):
        """Wait for running collection mappings. Sources stay with the caller."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
