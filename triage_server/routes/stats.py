"""Stats and reset endpoints."""

from fastapi import APIRouter

from ..state import get_state
from ..utils import require_engine

router = APIRouter()


@router.get("/stats")
def get_stats():
    """Get current progress statistics."""
    state = get_state()
    if not state.is_loaded:
        return {"loaded": False, "message": "No library loaded"}
    return {"loaded": True, **state.engine.stats().model_dump(mode="json")}


@router.post("/reset")
async def reset():
    """Forget every decision and restart training."""
    engine = require_engine()
    await engine.reset()
    return {"reset": True, "phase": engine.phase.value}
