"""
Decision ledger implementations.

Durable item_id -> Decision store consulted at startup and written on every
decision. Implementations: in-memory (tests, throwaway sessions) and a single
JSON file (local persistence). Last write wins per item id.
"""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional, Union

from triage.errors import LedgerError
from triage.models.decision import Decision, Outcome, ensure_decisions, make_decision


class InMemoryDecisionLedger:
    """Ledger held in a dict. Nothing survives the process."""

    def __init__(self, decisions: Optional[List[Union[Dict, Decision]]] = None):
        self._rows: Dict[int, Decision] = {}
        self._lock = threading.Lock()
        for d in ensure_decisions(decisions or []):
            self._rows[d.item_id] = d

    def upsert(self, item_id: int, outcome: Outcome) -> Decision:
        decision = make_decision(item_id, Outcome(outcome))
        with self._lock:
            self._rows[item_id] = decision
        return decision

    def get(self, item_id: int) -> Optional[Decision]:
        with self._lock:
            return self._rows.get(item_id)

    def get_all(self) -> List[Decision]:
        with self._lock:
            return list(self._rows.values())

    def delete_by_item_id(self, item_id: int) -> bool:
        with self._lock:
            return self._rows.pop(item_id, None) is not None

    def delete_all(self) -> None:
        with self._lock:
            self._rows.clear()

    def list_trash(self) -> List[Decision]:
        with self._lock:
            return [d for d in self._rows.values() if d.in_trash]

    def empty_trash(self) -> int:
        with self._lock:
            return self._clear_trash_flags(list(self._rows))

    def _clear_trash_flags(self, item_ids: List[int]) -> int:
        cleared = 0
        for item_id in item_ids:
            row = self._rows.get(item_id)
            if row is not None and row.in_trash:
                self._rows[item_id] = row.model_copy(update={"in_trash": False})
                cleared += 1
        return cleared


class JsonDecisionLedger(InMemoryDecisionLedger):
    """
    Ledger backed by a JSON file (e.g. data/decisions.json).

    Every mutation rewrites the file through a temp file + rename, so a crash
    leaves either the old or the new contents. I/O failures raise LedgerError
    and leave the in-memory rows unchanged.
    """

    def __init__(self, path: Union[Path, str]):
        super().__init__()
        self._path = Path(path)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LedgerError(f"Cannot create ledger directory {self._path.parent}: {e}") from e
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            with open(self._path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise LedgerError(f"Failed to read ledger {self._path}: {e}") from e
        rows = data.get("decisions", []) if isinstance(data, dict) else data
        for d in ensure_decisions(rows):
            self._rows[d.item_id] = d

    def _save(self, rows: Dict[int, Decision]) -> None:
        out = {"decisions": [d.model_dump(mode="json") for d in rows.values()]}
        try:
            fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".decisions-", suffix=".json")
            with os.fdopen(fd, "w") as f:
                json.dump(out, f, indent=2)
            os.replace(tmp, self._path)
        except OSError as e:
            raise LedgerError(f"Failed to write ledger {self._path}: {e}") from e

    def _commit(self, rows: Dict[int, Decision]) -> None:
        """Persist rows, then adopt them in memory."""
        self._save(rows)
        self._rows = rows

    def upsert(self, item_id: int, outcome: Outcome) -> Decision:
        decision = make_decision(item_id, Outcome(outcome))
        with self._lock:
            rows = dict(self._rows)
            rows[item_id] = decision
            self._commit(rows)
        return decision

    def delete_by_item_id(self, item_id: int) -> bool:
        with self._lock:
            if item_id not in self._rows:
                return False
            rows = dict(self._rows)
            del rows[item_id]
            self._commit(rows)
            return True

    def delete_all(self) -> None:
        with self._lock:
            self._commit({})

    def empty_trash(self) -> int:
        with self._lock:
            return self._clear_and_commit(list(self._rows))

    def _clear_and_commit(self, item_ids: List[int]) -> int:
        rows = dict(self._rows)
        cleared = 0
        for item_id in item_ids:
            row = rows.get(item_id)
            if row is not None and row.in_trash:
                rows[item_id] = row.model_copy(update={"in_trash": False})
                cleared += 1
        if cleared:
            self._commit(rows)
        return cleared
