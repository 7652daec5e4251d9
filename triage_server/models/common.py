"""Common Pydantic models shared across routes."""

from typing import Optional

from pydantic import BaseModel


class ItemCard(BaseModel):
    id: int
    handle: str
    display_name: Optional[str] = None
    timestamp: Optional[int] = None
    score: Optional[float] = None
    queue_position: Optional[int] = None


class DecisionCard(BaseModel):
    item_id: int
    outcome: str
    timestamp: str
    in_trash: bool = False
