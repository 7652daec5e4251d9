"""
Item provider and precomputed embedder tests.
"""

import json

import pytest

from triage_server.services import JsonItemProvider, PrecomputedEmbedder, StaticItemProvider


class TestItemProviders:
    def test_static_provider(self):
        provider = StaticItemProvider([{"id": 1, "handle": "a.jpg"}, {"id": 2}])
        items = provider.list_all()
        assert [i.id for i in items] == [1, 2]
        assert items[1].embed_key == "2"

    def test_json_provider_sorts_newest_first(self, tmp_path):
        path = tmp_path / "items.json"
        path.write_text(json.dumps({"items": [
            {"id": 1, "handle": "a.jpg", "timestamp": 100},
            {"id": 2, "handle": "b.jpg", "timestamp": 300},
            {"id": 3, "handle": "c.jpg", "timestamp": 200, "album": "Camera"},
        ]}))
        items = JsonItemProvider(path).list_all()
        assert [i.id for i in items] == [2, 3, 1]
        assert items[1].album == "Camera"

    def test_json_provider_bare_list(self, tmp_path):
        path = tmp_path / "items.json"
        path.write_text(json.dumps([{"id": 5, "handle": "e.jpg"}]))
        assert [i.id for i in JsonItemProvider(path).list_all()] == [5]

    def test_json_provider_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            JsonItemProvider(tmp_path / "nope.json")


class TestPrecomputedEmbedder:
    def test_from_file_with_metadata(self, tmp_path):
        path = tmp_path / "embeddings.json"
        path.write_text(json.dumps({
            "embedding_model": "mobilenet_v2",
            "embedding_dimensions": 3,
            "embeddings": {"a.jpg": [0.1, 0.2, 0.3], "b.jpg": [0.0, 1.0, 0.0]},
        }))
        embedder = PrecomputedEmbedder.from_file(path)
        assert embedder.dimensions == 3
        assert embedder.embedding_model == "mobilenet_v2"
        assert len(embedder) == 2
        assert embedder.embed("b.jpg") == [0.0, 1.0, 0.0]

    def test_bare_mapping_infers_dimensions(self, tmp_path):
        path = tmp_path / "embeddings.json"
        path.write_text(json.dumps({"7": [1.0, 2.0]}))
        embedder = PrecomputedEmbedder.from_file(path)
        assert embedder.dimensions == 2
        assert embedder.embed("7") == [1.0, 2.0]

    def test_unknown_handle_raises(self):
        embedder = PrecomputedEmbedder({"a.jpg": [1.0]})
        with pytest.raises(KeyError):
            embedder.embed("missing.jpg")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PrecomputedEmbedder.from_file(tmp_path / "embeddings.json")
