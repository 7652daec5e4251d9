"""
Photo Triage API — FastAPI app factory.

Use: uvicorn triage_server.app:app
Or:  photo-triage-server
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from triage.errors import EngineNotInitializedError, LedgerError

from .config import get_config
from .routes import register_routes
from .state import get_state


def create_app() -> FastAPI:
    """Build FastAPI app with CORS, routes, error mapping and startup."""
    app = FastAPI(
        title="Photo Triage API",
        description="Adaptive keep/delete review queue with an on-device k-NN delete scorer",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_routes(app)

    @app.exception_handler(LedgerError)
    async def _ledger_error(request: Request, exc: LedgerError):
        return JSONResponse(status_code=503, content={"detail": f"Decision ledger unavailable: {exc}"})

    @app.exception_handler(EngineNotInitializedError)
    async def _not_initialized(request: Request, exc: EngineNotInitializedError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.on_event("startup")
    async def auto_load_library():
        state = get_state()
        level = state.config.log_level
        logging.basicConfig(
            level=level if isinstance(logging.getLevelName(level), int) else logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
        if state.is_loaded:
            print("[startup] Library already loaded")
            return
        needs_files = state.item_provider is None or state.embedder is None
        ok, errors = state.config.validate() if needs_files else (True, [])
        if not ok:
            for err in errors:
                print(f"[startup] WARNING: {err}")
            return
        try:
            await state.load()
        except (OSError, ValueError, LedgerError) as e:
            print(f"[startup] WARNING: Failed to load library: {e}")

    @app.on_event("shutdown")
    async def _close_engine():
        await get_state().close()

    return app


app = create_app()


def main() -> None:
    import uvicorn

    config = get_config()
    uvicorn.run("triage_server.app:app", host=config.host, port=config.port)
