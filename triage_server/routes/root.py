"""Root and health endpoints."""

from fastapi import APIRouter

from ..state import get_state

router = APIRouter()


@router.get("/")
def root():
    state = get_state()
    engine = state.engine
    return {
        "name": "Photo Triage API",
        "version": "1.0.0",
        "status": "loaded" if state.is_loaded else "not_configured",
        "current": {
            "phase": engine.phase.value if engine else None,
            "library_size": len(engine.library()) if engine else 0,
            "cached_vectors": len(engine.features) if engine else 0,
        },
        "endpoints": {
            "queue": ["/api/queue/next", "/api/queue/pending"],
            "decisions": ["/api/decisions", "/api/decisions/{item_id}/restore"],
            "trash": ["/api/trash", "/api/trash/empty", "/api/trash/purge"],
            "stats": ["/api/stats", "/api/reset"],
        },
    }


@router.get("/api/health")
def health():
    state = get_state()
    engine = state.engine
    return {
        "status": "healthy",
        "loaded": state.is_loaded,
        "ledger": type(state.ledger).__name__,
        "embedding_fallbacks": engine.features.fallback_count if engine else 0,
    }
