"""
Collaborator protocols — embedder, decision ledger, and item source.

The engine only depends on these shapes. Implementations live in
triage_server.services (JSON files, in-memory) or in the caller's own code.
"""

from typing import List, Optional, Protocol, Sequence

from .models.decision import Decision, Outcome
from .models.item import Item


class Embedder(Protocol):
    """Turns an item's content handle into a fixed-length feature vector."""

    def embed(self, handle: str) -> Optional[Sequence[float]]:
        """
        Return the feature vector for this content handle.
        May raise or return None on failure; the engine substitutes a zero vector.
        """
        ...


class DecisionLedger(Protocol):
    """Durable item_id -> Decision store. Implementations raise LedgerError on I/O failure."""

    def upsert(self, item_id: int, outcome: Outcome) -> Decision:
        """Record the current decision for item_id, replacing any previous one."""
        ...

    def get_all(self) -> List[Decision]:
        """Return every current decision."""
        ...

    def delete_by_item_id(self, item_id: int) -> bool:
        """Remove the row for item_id. Return True if a row existed."""
        ...

    def delete_all(self) -> None:
        """Remove every row (reset)."""
        ...

    def list_trash(self) -> List[Decision]:
        """Return DELETE decisions still pending in the trash."""
        ...

    def empty_trash(self) -> int:
        """Clear the pending-trash flag on every row. Return the number cleared."""
        ...


class ItemProvider(Protocol):
    """Source collection of items (photo library)."""

    def list_all(self) -> List[Item]:
        """Return every item in the collection."""
        ...
