"""
esmapper Builder — Field Mapping Inference
==========================================

Walks sample documents and derives an Elasticsearch field-mapping tree.

Inference rules:
    - bool → boolean, int → long, float/Decimal → double
    - datetime/date and ISO 8601 strings → date
    - other strings → text with a keyword sub-field
    - dict → object, list of dicts → nested, list of scalars → element type
    - None and empty lists are skipped

Consistency across builds:
    The builder receives a read-only key log snapshot and never writes to it.
    Every shape it assigns or changes is returned in
    InferenceResult.key_log_updates; the Mapper commits them.

Typical usage:
    builder = MappingBuilder()
    result = builder.build(doc, settings, [], "shop", key_log.snapshot())
"""

import datetime
import logging
import re
import threading
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .exceptions import FieldConfigError, MappingCancelled
from .keylog import LogKey
from .models import INDEX_DYNAMIC_KEY, Dynamic, TypeMapping

logger = logging.getLogger(__name__)


NUMERIC_TYPES = ("long", "double")
CONTAINER_TYPES = ("object", "nested")

# Analyzers every cluster ships with
BUILTIN_ANALYZERS = frozenset({
    "standard", "simple", "whitespace", "stop", "keyword",
    "pattern", "fingerprint", "english"
})

ISO_DATE = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"([T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?)?$"
)

# Per-field overrides: one dict per field, e.g. {"field": "title", "analyzer": "english"}
FieldConfig = List[Dict[str, Any]]


@dataclass
class InferenceResult:
    """A built mapping plus the key log entries it wants committed."""

    mapping: TypeMapping
    key_log_updates: Dict[LogKey, Dict[str, Any]] = field(default_factory=dict)


@dataclass
class _BuildContext:
    index_name: str
    key_log: Mapping[LogKey, Dict[str, Any]]
    overrides: Dict[str, Dict[str, Any]]
    updates: Dict[LogKey, Dict[str, Any]] = field(default_factory=dict)

    @property
    def strict(self) -> bool:
        # With explicit overrides, only configured strings stay searchable
        return bool(self.overrides)

    def logged(self, path: str) -> Optional[Dict[str, Any]]:
        key = (self.index_name, path)
        if key in self.updates:
            return self.updates[key]
        return self.key_log.get(key)

    def record(self, path: str, mapping: Dict[str, Any]) -> None:
        self.updates[(self.index_name, path)] = _shape(mapping)


def _shape(mapping: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in mapping.items() if k != "properties"}


def merge_properties(target: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge a properties tree into another, in place.

    Fields only in source are added; object/nested fields merge recursively;
    long and double collapse to double. Other clashes keep the target.

    Returns:
        target
    """
    for name, incoming in source.items():
        current = target.get(name)
        if current is None:
            target[name] = incoming
            continue

        if "properties" in current and "properties" in incoming:
            merge_properties(current["properties"], incoming["properties"])
        elif (
            current.get("type") != incoming.get("type")
            and current.get("type") in NUMERIC_TYPES
            and incoming.get("type") in NUMERIC_TYPES
        ):
            current["type"] = "double"
    return target


class MappingBuilder:
    """
    Default inference collaborator for the Mapper.

    Any object exposing build() and build_many() with the same signatures
    can replace it.
    """

    def __init__(self, detect_dates: bool = True, ignore_above: int = 256):
        """
        Args:
            detect_dates: Map ISO 8601 strings to date instead of text
            ignore_above: ignore_above for keyword sub-fields of text fields
        """
        self.detect_dates = detect_dates
        self.ignore_above = ignore_above

    def build(
        self,
        document: Dict[str, Any],
        settings: Dict[str, Any],
        field_config: Optional[FieldConfig],
        index_name: str,
        key_log: Mapping[LogKey, Dict[str, Any]]
    ) -> InferenceResult:
        """
        Build a mapping from a single document.

        Args:
            document: JSON-like document
            settings: Settings of the target index
            field_config: Per-field overrides (empty: all strings searchable)
            index_name: Namespace for key log entries
            key_log: Read-only key log snapshot

        Returns:
            InferenceResult with the mapping and key log updates
        """
        return self.build_many([document], settings, field_config, index_name, key_log)

    def build_many(
        self,
        documents: Iterable[Dict[str, Any]],
        settings: Dict[str, Any],
        field_config: Optional[FieldConfig],
        index_name: str,
        key_log: Mapping[LogKey, Dict[str, Any]],
        cancel_event: Optional[threading.Event] = None
    ) -> InferenceResult:
        """
        Build one merged mapping from several documents.

        Args:
            documents: Iterable of JSON-like documents
            cancel_event: Checked before each document

        Returns:
            InferenceResult with the merged mapping and key log updates
        """
        ctx = _BuildContext(
            index_name=index_name,
            key_log=key_log,
            overrides=self._parse_field_config(field_config, settings)
        )

        properties: Dict[str, Any] = {}
        count = 0
        for document in documents:
            if cancel_event is not None and cancel_event.is_set():
                raise MappingCancelled(f"Mapping build for {index_name} cancelled after {count} document(s)")
            if not isinstance(document, dict):
                raise TypeError(f"Expected a dict document, got {type(document).__name__}")
            merge_properties(properties, self._map_object(document, "", ctx))
            count += 1

        logger.debug(f"Built mapping for {index_name} from {count} document(s), {len(properties)} field(s)")
        return InferenceResult(
            mapping=TypeMapping(properties=properties, dynamic=self._initial_dynamic(settings)),
            key_log_updates=ctx.updates
        )

    # ============================================================
    # FIELD CONFIG
    # ============================================================

    def _parse_field_config(
        self,
        field_config: Optional[FieldConfig],
        settings: Dict[str, Any]
    ) -> Dict[str, Dict[str, Any]]:
        known = set(settings.get("analysis", {}).get("analyzer", {})) | BUILTIN_ANALYZERS
        overrides: Dict[str, Dict[str, Any]] = {}

        for entry in field_config or []:
            if not isinstance(entry, dict) or not entry.get("field"):
                raise FieldConfigError(f"Field config entry needs a 'field' key: {entry!r}")

            override = {k: v for k, v in entry.items() if k != "field"}
            for key in ("analyzer", "search_analyzer"):
                if key in override and override[key] not in known:
                    raise FieldConfigError(
                        f"Unknown {key} '{override[key]}' for field '{entry['field']}'"
                    )
            overrides[entry["field"]] = override
        return overrides

    @staticmethod
    def _initial_dynamic(settings: Dict[str, Any]) -> Dynamic:
        if INDEX_DYNAMIC_KEY in settings:
            return Dynamic.from_bool(settings[INDEX_DYNAMIC_KEY])
        return Dynamic.TRUE

    # ============================================================
    # DOCUMENT WALK
    # ============================================================

    def _map_object(self, obj: Dict[str, Any], prefix: str, ctx: _BuildContext) -> Dict[str, Any]:
        properties = {}
        for name, value in obj.items():
            path = f"{prefix}.{name}" if prefix else str(name)
            mapping = self._map_field(value, path, ctx)
            if mapping is not None:
                properties[str(name)] = mapping
        return properties

    def _map_field(self, value: Any, path: str, ctx: _BuildContext) -> Optional[Dict[str, Any]]:
        inferred = self._infer(value, path, ctx)
        override = ctx.overrides.get(path)

        if override is not None:
            if inferred is None:
                return None
            if "type" in override and override["type"] != inferred.get("type"):
                mapping = dict(override)
                if override["type"] in CONTAINER_TYPES and "properties" in inferred:
                    mapping["properties"] = inferred["properties"]
            else:
                mapping = {**inferred, **override}
            ctx.record(path, mapping)
            return mapping

        if inferred is None:
            return None
        return self._reconcile(inferred, path, ctx)

    def _infer(self, value: Any, path: str, ctx: _BuildContext) -> Optional[Dict[str, Any]]:
        if value is None:
            return None
        if isinstance(value, bool):
            return {"type": "boolean"}
        if isinstance(value, int):
            return {"type": "long"}
        if isinstance(value, (float, Decimal)):
            return {"type": "double"}
        if isinstance(value, (datetime.datetime, datetime.date)):
            return {"type": "date"}
        if isinstance(value, str):
            if self.detect_dates and ISO_DATE.match(value):
                return {"type": "date"}
            return self._text_mapping(path, ctx)
        if isinstance(value, dict):
            return {"type": "object", "properties": self._map_object(value, path, ctx)}
        if isinstance(value, (list, tuple)):
            return self._infer_list(value, path, ctx)
        # ObjectId, UUID and friends
        return {"type": "keyword"}

    def _infer_list(self, values: Iterable[Any], path: str, ctx: _BuildContext) -> Optional[Dict[str, Any]]:
        items = [v for v in values if v is not None]
        if not items:
            return None

        if isinstance(items[0], dict):
            properties: Dict[str, Any] = {}
            for item in items:
                if isinstance(item, dict):
                    merge_properties(properties, self._map_object(item, path, ctx))
            return {"type": "nested", "properties": properties}

        return self._infer(items[0], path, ctx)

    def _text_mapping(self, path: str, ctx: _BuildContext) -> Dict[str, Any]:
        mapping: Dict[str, Any] = {
            "type": "text",
            "fields": {"keyword": {"type": "keyword", "ignore_above": self.ignore_above}}
        }
        if ctx.strict and path not in ctx.overrides:
            mapping["index"] = False
        return mapping

    # ============================================================
    # KEY LOG RECONCILIATION
    # ============================================================

    def _reconcile(self, inferred: Dict[str, Any], path: str, ctx: _BuildContext) -> Dict[str, Any]:
        logged = ctx.logged(path)
        if logged is None:
            ctx.record(path, inferred)
            return inferred

        logged_type = logged.get("type")
        inferred_type = inferred.get("type")
        if logged_type == inferred_type:
            return inferred

        if logged_type in NUMERIC_TYPES and inferred_type in NUMERIC_TYPES:
            widened = {**inferred, "type": "double"}
            if logged_type != "double":
                ctx.record(path, widened)
            return widened

        logger.warning(
            f"Field '{path}' in {ctx.index_name} inferred as {inferred_type}, "
            f"keeping logged type {logged_type}"
        )
        mapping = dict(logged)
        if logged_type in CONTAINER_TYPES:
            mapping["properties"] = inferred.get("properties", {})
        return mapping
