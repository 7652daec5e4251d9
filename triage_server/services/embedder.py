"""
Precomputed feature vectors.

The feature extractor runs offline and writes its output as JSON; this module
serves those vectors to the engine by content handle.

File format:
    {
        "embedding_model": "mobilenet_v2",
        "embedding_dimensions": 1280,
        "created_at": "...",
        "embeddings": {"<handle or id>": [0.1, ...], ...}
    }
A bare {"<handle>": [...]} mapping is accepted too.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union


class PrecomputedEmbedder:
    """Embedder that looks vectors up in a preloaded handle -> vector map."""

    def __init__(
        self,
        embeddings: Dict[str, Sequence[float]],
        embedding_model: str = "",
        dimensions: Optional[int] = None,
    ):
        self._embeddings = {str(k): list(v) for k, v in embeddings.items()}
        self.embedding_model = embedding_model
        if dimensions is None and self._embeddings:
            dimensions = len(next(iter(self._embeddings.values())))
        self.dimensions = dimensions

    @classmethod
    def from_file(cls, path: Union[Path, str]) -> "PrecomputedEmbedder":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Embeddings JSON not found: {path}")
        with open(path) as f:
            data = json.load(f)
        if isinstance(data, dict) and isinstance(data.get("embeddings"), dict):
            return cls(
                data["embeddings"],
                embedding_model=data.get("embedding_model", ""),
                dimensions=data.get("embedding_dimensions") or None,
            )
        return cls(data)

    def __len__(self) -> int:
        return len(self._embeddings)

    def embed(self, handle: str) -> List[float]:
        """Vector for handle. Raises KeyError when the extractor never saw it."""
        try:
            return self._embeddings[handle]
        except KeyError:
            raise KeyError(f"No precomputed embedding for {handle!r}") from None
