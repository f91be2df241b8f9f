"""Shared fixtures for esmapper tests."""

import pytest

from esmapper import Mapper


class FakeElasticsearch:
    """Stands in for elasticsearch.Elasticsearch; serves canned documents."""

    def __init__(self, documents):
        self.documents = documents
        self.calls = []
        self.closed = False

    def search(self, index, query=None, size=10):
        self.calls.append({"index": index, "query": query, "size": size})
        return {
            "hits": {
                "hits": [{"_index": index, "_source": doc} for doc in self.documents[:size]]
            }
        }

    def close(self):
        self.closed = True


class FakeCursor:
    def __init__(self, documents):
        self.documents = documents
        self.limit_value = None

    def limit(self, n):
        self.limit_value = n
        return self

    def __iter__(self):
        docs = self.documents if self.limit_value is None else self.documents[:self.limit_value]
        return iter(docs)


class FakeCollection:
    def __init__(self, documents):
        self.documents = documents
        self.queries = []

    def find(self, query):
        self.queries.append(query)
        return FakeCursor(self.documents)


class FakeMongoClient:
    """Stands in for pymongo.MongoClient: client[db][collection]."""

    def __init__(self, databases):
        self.databases = databases
        self.closed = False

    def __getitem__(self, name):
        return self.databases[name]

    def close(self):
        self.closed = True


@pytest.fixture
def mapper():
    with Mapper(max_workers=2) as m:
        yield m


@pytest.fixture
def product():
    return {"name": "Widget", "price": 9.99}


@pytest.fixture
def es_client():
    return FakeElasticsearch([
        {"sku": "A-1", "price": 10, "tags": ["red"]},
        {"sku": "A-2", "price": 12.5, "released": "2024-03-01"},
        {"sku": "A-3", "stock": {"warehouse": "north", "count": 4}},
    ])


@pytest.fixture
def mongo_client():
    products = FakeCollection([
        {"_id": "65f0c0ffee", "title": "Lamp", "weight": 1.2},
        {"_id": "65f0c0ffef", "title": "Desk", "dimensions": {"width": 120}},
    ])
    return FakeMongoClient({"shop": {"products": products}})
