"""
esmapper — Elasticsearch Mapping Registry
=========================================

Build Elasticsearch index definitions (settings, analyzers, field mappings)
in code, inferring field types from sample documents instead of
hand-writing mapping JSON.

Key Features:
- Field mapping inference from documents, JSONL files, Elasticsearch
  indices and MongoDB collections
- Consistent field types across documents and types via a key log
- Additive analyzer/filter configuration (first registration wins)
- Index-level or type-level dynamic mapping control
- Independent registries: one Mapper per context, no global state

Usage:
    from esmapper import Mapper

    mapper = Mapper()
    mapper.index("shop")

    # Infer a mapping from a sample document
    mapping = mapper.map_from_doc("shop", "product", {"name": "Widget", "price": 9.99})

    # Ready for indices.create(index="shop", body=...)
    body = mapper.get_index("shop").to_body()

License: MIT
"""

__version__ = "0.1.0"

from .builder import InferenceResult, MappingBuilder
from .core import Mapper, MappingTask
from .exceptions import (
    DynamicMappingStateError,
    FieldConfigError,
    IndexNotFound,
    InvalidIndexName,
    MapperError,
    MappingCancelled,
    TypeNotFound,
)
from .models import Dynamic, IndexRecord, TypeMapping
from .sources import (
    CollectionConfig,
    CollectionSource,
    ElasticsearchSource,
    JsonlSource,
    MongoSource,
)

__all__ = [
    "Mapper",
    "MappingTask",
    "MappingBuilder",
    "InferenceResult",
    "Dynamic",
    "IndexRecord",
    "TypeMapping",
    "CollectionConfig",
    "CollectionSource",
    "ElasticsearchSource",
    "JsonlSource",
    "MongoSource",
    "MapperError",
    "InvalidIndexName",
    "IndexNotFound",
    "TypeNotFound",
    "DynamicMappingStateError",
    "FieldConfigError",
    "MappingCancelled",
]
