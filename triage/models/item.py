"""
Item model — one photo from the source collection.

Used by the candidate pool, feature cache and queue entries instead of raw dicts.
Built from provider/API dicts via Item.model_validate(d).
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class Item(BaseModel):
    """
    An item awaiting or having received a keep/delete decision.

    id: stable unique identity (ledger key).
    handle: opaque content handle passed to the embedder (URI, path, ...).
    timestamp: display/tie-break only; never part of ranking.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    id: int
    handle: str = ""
    timestamp: Optional[int] = None
    display_name: Optional[str] = None

    @property
    def embed_key(self) -> str:
        """Handle used for embedding lookups; falls back to the id."""
        return self.handle or str(self.id)


def ensure_items(items: List[Union[Dict[str, Any], "Item"]]) -> List["Item"]:
    """Convert list of dicts or Items to list of Item models."""
    return [
        Item.model_validate(i) if isinstance(i, dict) else i
        for i in items
    ]
