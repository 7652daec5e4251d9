"""
Configuration tests: QueueConfig defaults and overrides, ServerConfig from environment.
"""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from triage import DEFAULT_CONFIG, QueueConfig, resolve_config
from triage_server.config import ServerConfig


class TestQueueConfig:
    def test_defaults(self):
        cfg = QueueConfig()
        assert (cfg.min_keep_samples, cfg.min_delete_samples) == (20, 20)
        assert cfg.training_batch_size == 70
        assert cfg.training_refill_size == 20
        assert cfg.sorted_queue_size == 200
        assert cfg.refill_threshold == 150
        assert cfg.refill_size == 100
        assert cfg.saturation_threshold == 15
        assert cfg.knn_k == 7
        assert cfg.embedding_dimensions == 1280

    def test_from_dict_nested(self):
        cfg = QueueConfig.from_dict({
            "training": {"min_keep": 5, "min_delete": 3, "batch_size": 30},
            "sorted": {"queue_size": 50, "saturation_threshold": 8},
            "classifier": {"k": 3},
            "seed": 11,
            "unknown": "ignored",
        })
        assert cfg.min_keep_samples == 5
        assert cfg.min_delete_samples == 3
        assert cfg.training_batch_size == 30
        assert cfg.sorted_queue_size == 50
        assert cfg.saturation_threshold == 8
        assert cfg.knn_k == 3
        assert cfg.seed == 11
        assert cfg.refill_size == 100

    def test_from_dict_flat(self):
        cfg = QueueConfig.from_dict({"refill_threshold": 10, "refill_size": 5})
        assert (cfg.refill_threshold, cfg.refill_size) == (10, 5)

    @pytest.mark.parametrize(
        "overrides",
        [{"knn_k": 0}, {"sorted_queue_size": 0}, {"min_keep_samples": -1}, {"refill_threshold": -1}],
    )
    def test_rejects_invalid(self, overrides):
        with pytest.raises(ValidationError):
            QueueConfig(**overrides)

    def test_resolve_config(self):
        assert resolve_config(None) is DEFAULT_CONFIG
        custom = QueueConfig(knn_k=3)
        assert resolve_config(custom) is custom


class TestServerConfig:
    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PORT", "9001")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("DATA_DIR", str(tmp_path))
        monkeypatch.setenv("ITEMS_JSON_PATH", str(tmp_path / "library.json"))
        monkeypatch.delenv("LEDGER_PATH", raising=False)
        monkeypatch.delenv("EMBEDDINGS_JSON_PATH", raising=False)
        monkeypatch.delenv("QUEUE_CONFIG_PATH", raising=False)

        cfg = ServerConfig.from_env()

        assert cfg.port == 9001
        assert cfg.log_level == "DEBUG"
        assert cfg.items_json_path == tmp_path / "library.json"
        assert cfg.embeddings_json_path == tmp_path / "embeddings.json"
        assert cfg.ledger_path == tmp_path / "decisions.json"
        assert cfg.queue_config_path is None

    def test_validate_reports_missing_files(self, tmp_path):
        cfg = ServerConfig(
            data_dir=tmp_path,
            items_json_path=tmp_path / "items.json",
            embeddings_json_path=tmp_path / "embeddings.json",
            log_level="LOUD",
        )
        ok, errors = cfg.validate()
        assert not ok
        assert len(errors) == 3

    def test_validate_ok(self, tmp_path):
        (tmp_path / "items.json").write_text("[]")
        (tmp_path / "embeddings.json").write_text("{}")
        cfg = ServerConfig(
            data_dir=tmp_path,
            items_json_path=tmp_path / "items.json",
            embeddings_json_path=tmp_path / "embeddings.json",
        )
        assert cfg.validate() == (True, [])

    def test_load_queue_config(self, tmp_path):
        path = tmp_path / "queue_config.json"
        path.write_text(json.dumps({"training": {"min_keep": 4}}))
        cfg = ServerConfig(data_dir=tmp_path, queue_config_path=path)
        assert cfg.load_queue_config().min_keep_samples == 4
        assert ServerConfig(data_dir=Path(tmp_path)).load_queue_config() is DEFAULT_CONFIG
