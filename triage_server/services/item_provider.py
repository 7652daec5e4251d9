"""
Item Provider abstraction.

Supplies the photo library to the review queue engine.
Implementations: static list (tests, embedding callers) and JSON file
(items.json exported by whatever scans the device library).
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from triage.models.item import Item, ensure_items


class StaticItemProvider:
    """Item provider over an in-memory list."""

    def __init__(self, items: List[Union[Dict[str, Any], Item]]):
        self._items = ensure_items(list(items))

    def list_all(self) -> List[Item]:
        return list(self._items)


class JsonItemProvider:
    """
    Item provider backed by a JSON file.

    Accepts a list of item dicts or {"items": [...]}. Each dict needs an
    integer id; handle, timestamp and display_name are optional.
    Sorted newest first by timestamp, matching the library listing order.
    """

    def __init__(self, items_path: Union[Path, str]):
        self._items_path = Path(items_path)
        if not self._items_path.exists():
            raise FileNotFoundError(f"Items JSON not found: {self._items_path}")
        with open(self._items_path) as f:
            data = json.load(f)
        raw = data.get("items", []) if isinstance(data, dict) else data
        self._items = ensure_items(raw)
        self._items.sort(key=lambda i: i.timestamp or 0, reverse=True)

    @property
    def path(self) -> Path:
        return self._items_path

    def list_all(self) -> List[Item]:
        return list(self._items)
