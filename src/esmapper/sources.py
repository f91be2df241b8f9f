"""
esmapper Sources — Sample Documents for Collection Mapping
==========================================================

A collection mapping samples up to N documents from somewhere and merges the
mappings inferred from each. Sources only read; nothing is written back.

    JsonlSource          →  local JSONL files (glob, "**" supported)
    ElasticsearchSource  →  an existing Elasticsearch index
    MongoSource          →  a MongoDB collection (needs the "mongo" extra)

Typical usage:
    source = ElasticsearchSource("legacy-products", hosts=["http://localhost:9200"])
    config = CollectionConfig(source, sample_size=500)
    task = mapper.map_from_collection("shop", "product", config)
"""

import json
import logging
from dataclasses import dataclass
from itertools import islice
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from elasticsearch import Elasticsearch
from elasticsearch.helpers import scan

from .builder import FieldConfig
from .exceptions import FieldConfigError

logger = logging.getLogger(__name__)


DEFAULT_SAMPLE_SIZE = 100
DEFAULT_HOSTS = ["http://localhost:9200"]

# Largest page a plain search request may return
MAX_SEARCH_WINDOW = 10_000


class CollectionSource:
    """Base class for document sources."""

    def sample(self, limit: int) -> Iterator[Dict[str, Any]]:
        raise NotImplementedError

    def close(self) -> None:
        """Release connections. No-op by default."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


@dataclass
class CollectionConfig:
    """Where to sample from, how many documents, and per-field overrides."""

    source: CollectionSource
    sample_size: int = DEFAULT_SAMPLE_SIZE
    field_config: Optional[FieldConfig] = None

    def __post_init__(self):
        if not isinstance(self.sample_size, int) or self.sample_size <= 0:
            raise FieldConfigError(f"sample_size must be a positive integer, got {self.sample_size!r}")


class JsonlSource(CollectionSource):
    """
    Documents from JSONL files.

    Example:
        source = JsonlSource("data/**/*.jsonl")
        docs = list(source.sample(50))
    """

    def __init__(self, pattern: str):
        """
        Args:
            pattern: Glob pattern for files (e.g., "data/**/*.jsonl")
        """
        self.pattern = pattern
        self.errors = 0

    def files(self) -> List[Path]:
        if '**' in self.pattern:
            base = self.pattern.split('**')[0] or "."
            return sorted(Path(base).rglob(self.pattern.split('**/')[-1]))
        base_path = Path(self.pattern).parent
        return sorted(base_path.glob(Path(self.pattern).name))

    def sample(self, limit: int) -> Iterator[Dict[str, Any]]:
        files = self.files()
        logger.info(f"Found {len(files)} files matching {self.pattern}")

        yielded = 0
        for filepath in files:
            with open(filepath, 'r', encoding='utf-8') as f:
                for line in f:
                    if not line.strip():
                        continue
                    try:
                        rec = json.loads(line)
                    except json.JSONDecodeError:
                        self.errors += 1
                        continue
                    if not isinstance(rec, dict):
                        self.errors += 1
                        continue

                    yield rec
                    yielded += 1
                    if yielded >= limit:
                        return


class ElasticsearchSource(CollectionSource):
    """
    Documents sampled from an existing Elasticsearch index.

    Example:
        # Local Elasticsearch
        source = ElasticsearchSource("legacy-products")

        # Production cluster
        source = ElasticsearchSource(
            "legacy-products",
            hosts=["https://es1:9200", "https://es2:9200"],
            api_key="your-api-key"
        )
    """

    def __init__(
        self,
        index_name: str,
        hosts: Optional[List[str]] = None,
        api_key: Optional[str] = None,
        basic_auth: Optional[tuple] = None,
        verify_certs: bool = True,
        query: Optional[Dict[str, Any]] = None,
        client: Optional[Elasticsearch] = None
    ):
        """
        Args:
            index_name: Index to sample documents from
            hosts: List of ES node URLs (default: ["http://localhost:9200"])
            api_key: API key for authentication
            basic_auth: Tuple of (username, password)
            verify_certs: Verify SSL certificates
            query: Query DSL restricting the sample (default: match_all)
            client: Pre-built client; connection arguments are ignored when given
        """
        self.index_name = index_name
        self.query = query or {"match_all": {}}
        self._owns_client = client is None

        if client is None:
            conn_kwargs: Dict[str, Any] = {
                "hosts": hosts or DEFAULT_HOSTS,
                "verify_certs": verify_certs
            }
            if api_key:
                conn_kwargs["api_key"] = api_key
            elif basic_auth:
                conn_kwargs["basic_auth"] = basic_auth
            client = Elasticsearch(**conn_kwargs)

        self._client = client

    def sample(self, limit: int) -> Iterator[Dict[str, Any]]:
        if limit <= MAX_SEARCH_WINDOW:
            response = self._client.search(index=self.index_name, query=self.query, size=limit)
            for hit in response["hits"]["hits"]:
                yield hit["_source"]
            return

        hits = scan(self._client, index=self.index_name, query={"query": self.query})
        for hit in islice(hits, limit):
            yield hit["_source"]

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


class MongoSource(CollectionSource):
    """
    Documents sampled from a MongoDB collection.

    Example:
        source = MongoSource("mongodb://localhost:27017", "shop", "products")
    """

    def __init__(
        self,
        uri: Optional[str],
        database: str,
        collection: str,
        query: Optional[Dict[str, Any]] = None,
        client: Any = None,
        drop_id: bool = True
    ):
        """
        Args:
            uri: MongoDB connection string (ignored when client is given)
            database: Database name
            collection: Collection name
            query: Filter document for find()
            client: Pre-built MongoClient
            drop_id: Strip the _id field, which Elasticsearch reserves
        """
        self._owns_client = client is None
        if client is None:
            from pymongo import MongoClient
            client = MongoClient(uri)

        self._client = client
        self._collection = client[database][collection]
        self.query = query or {}
        self.drop_id = drop_id

    def sample(self, limit: int) -> Iterator[Dict[str, Any]]:
        for doc in self._collection.find(self.query).limit(limit):
            if self.drop_id:
                doc = {k: v for k, v in doc.items() if k != "_id"}
            yield doc

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
