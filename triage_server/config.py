"""
Server Configuration

Loads configuration from environment variables and provides defaults.
Supports loading from .env file using python-dotenv.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from triage.models.config import DEFAULT_CONFIG, QueueConfig

# Single .env at project root
root_env = Path(__file__).resolve().parent.parent / ".env"
if root_env.exists():
    load_dotenv(root_env)


@dataclass
class ServerConfig:
    """Server configuration."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    # Paths
    data_dir: Path = Path(__file__).parent.parent / "data"
    # Library listing (list of {id, handle, timestamp, display_name})
    items_json_path: Optional[Path] = None
    # Offline feature extractor output (handle -> vector)
    embeddings_json_path: Optional[Path] = None
    # Decision ledger file; None keeps decisions in memory only
    ledger_path: Optional[Path] = None
    # Optional QueueConfig overrides (flat or nested JSON)
    queue_config_path: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        base_dir = Path(__file__).parent.parent
        data_dir = Path(os.getenv("DATA_DIR", str(base_dir / "data")))

        def _path_env(key: str, default: Optional[Path] = None) -> Optional[Path]:
            v = os.getenv(key)
            if not v:
                return default
            p = Path(v)
            return p if p.is_absolute() else (base_dir / p).resolve()

        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            data_dir=data_dir,
            items_json_path=_path_env("ITEMS_JSON_PATH", data_dir / "items.json"),
            embeddings_json_path=_path_env("EMBEDDINGS_JSON_PATH", data_dir / "embeddings.json"),
            ledger_path=_path_env("LEDGER_PATH", data_dir / "decisions.json"),
            queue_config_path=_path_env("QUEUE_CONFIG_PATH"),
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        if self.items_json_path is None or not self.items_json_path.exists():
            errors.append(f"Items JSON not found: {self.items_json_path}")

        if self.embeddings_json_path is None or not self.embeddings_json_path.exists():
            errors.append(f"Embeddings JSON not found: {self.embeddings_json_path}")

        if self.queue_config_path is not None and not self.queue_config_path.exists():
            errors.append(f"Queue config not found: {self.queue_config_path}")

        if logging.getLevelName(self.log_level) == f"Level {self.log_level}":
            errors.append(f"Unknown LOG_LEVEL: {self.log_level}")

        # Ledger file is created on first write

        return len(errors) == 0, errors

    def ensure_directories(self):
        """Create required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def load_queue_config(self) -> QueueConfig:
        """QueueConfig from queue_config_path, or defaults."""
        if self.queue_config_path is None:
            return DEFAULT_CONFIG
        with open(self.queue_config_path) as f:
            return QueueConfig.from_dict(json.load(f))


# Global config instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
        _config.ensure_directories()
    return _config


def reload_config() -> ServerConfig:
    """Reload configuration from environment."""
    global _config
    _config = None
    return get_config()
