"""Tests for collection sources."""

import json

from esmapper import CollectionConfig, ElasticsearchSource, JsonlSource, MongoSource


class TestJsonlSource:
    """Tests for JsonlSource."""

    def write(self, path, lines):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    def test_reads_documents(self, tmp_path):
        self.write(tmp_path / "a.jsonl", [json.dumps({"n": 1}), json.dumps({"n": 2})])
        source = JsonlSource(str(tmp_path / "*.jsonl"))
        assert list(source.sample(10)) == [{"n": 1}, {"n": 2}]

    def test_stops_at_limit(self, tmp_path):
        self.write(tmp_path / "a.jsonl", [json.dumps({"n": i}) for i in range(5)])
        source = JsonlSource(str(tmp_path / "*.jsonl"))
        assert len(list(source.sample(3))) == 3

    def test_recursive_pattern(self, tmp_path):
        self.write(tmp_path / "x" / "one.jsonl", [json.dumps({"f": "one"})])
        self.write(tmp_path / "y" / "z" / "two.jsonl", [json.dumps({"f": "two"})])
        source = JsonlSource(str(tmp_path) + "/**/*.jsonl")
        assert sorted(d["f"] for d in source.sample(10)) == ["one", "two"]

    def test_counts_malformed_lines(self, tmp_path):
        self.write(tmp_path / "a.jsonl", ["{broken", "", "[1, 2]", json.dumps({"ok": True})])
        source = JsonlSource(str(tmp_path / "*.jsonl"))
        assert list(source.sample(10)) == [{"ok": True}]
        assert source.errors == 2


class TestElasticsearchSource:
    """Tests for ElasticsearchSource."""

    def test_samples_hits(self, es_client):
        source = ElasticsearchSource("legacy", client=es_client)
        docs = list(source.sample(2))
        assert docs == es_client.documents[:2]
        assert es_client.calls == [{"index": "legacy", "query": {"match_all": {}}, "size": 2}]

    def test_custom_query(self, es_client):
        query = {"term": {"sku": "A-1"}}
        list(ElasticsearchSource("legacy", query=query, client=es_client).sample(5))
        assert es_client.calls[0]["query"] == query

    def test_external_client_left_open(self, es_client):
        ElasticsearchSource("legacy", client=es_client).close()
        assert es_client.closed is False

    def test_collection_mapping(self, mapper, es_client):
        config = CollectionConfig(ElasticsearchSource("legacy", client=es_client), sample_size=10)
        mapping = mapper.map_from_collection("shop", "product", config).result(timeout=5)
        props = mapping.properties
        assert props["price"] == {"type": "double"}
        assert props["released"] == {"type": "date"}
        assert props["stock"]["properties"]["count"] == {"type": "long"}


class TestMongoSource:
    """Tests for MongoSource."""

    def test_drops_id_and_limits(self, mongo_client):
        source = MongoSource(None, "shop", "products", client=mongo_client)
        docs = list(source.sample(1))
        assert docs == [{"title": "Lamp", "weight": 1.2}]

    def test_keeps_id_when_asked(self, mongo_client):
        source = MongoSource(None, "shop", "products", client=mongo_client, drop_id=False)
        assert "_id" in next(iter(source.sample(1)))

    def test_query_passed_to_find(self, mongo_client):
        query = {"title": "Desk"}
        list(MongoSource(None, "shop", "products", query=query, client=mongo_client).sample(5))
        assert mongo_client["shop"]["products"].queries == [query]

    def test_collection_mapping(self, mapper, mongo_client):
        source = MongoSource(None, "shop", "products", client=mongo_client)
        mapping = mapper.map_from_collection("shop", "product", CollectionConfig(source)).result(timeout=5)
        assert set(mapping.properties) == {"title", "weight", "dimensions"}
        assert "_id" not in mapping.properties
