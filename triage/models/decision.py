"""
Decision model — the user's current keep/delete verdict on one item.

The ledger holds at most one Decision per item_id (last write wins).
Built from ledger rows via Decision.model_validate(d) or ensure_decisions().
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field


class Outcome(str, Enum):
    KEEP = "KEEP"
    DELETE = "DELETE"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Decision(BaseModel):
    """
    A single recorded decision.

    in_trash: DELETE decisions start in the pending trash; restore or a
    batch empty clears the flag.
    """

    model_config = ConfigDict(extra="allow")

    item_id: int
    outcome: Outcome
    timestamp: str = Field(default_factory=_now_iso)
    in_trash: bool = False

    @property
    def is_delete(self) -> bool:
        return self.outcome == Outcome.DELETE


def make_decision(item_id: int, outcome: Outcome) -> Decision:
    """Fresh decision stamped now; DELETEs land in the pending trash."""
    return Decision(item_id=item_id, outcome=outcome, in_trash=outcome == Outcome.DELETE)


def ensure_decisions(
    rows: List[Union[Dict, "Decision"]],
) -> List["Decision"]:
    """Convert list of dicts or Decisions to list of Decision models."""
    return [
        Decision.model_validate(r) if isinstance(r, dict) else r
        for r in rows
    ]
