"""FastAPI application main entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

load_dotenv()

from .middleware import SessionGateMiddleware, register_error_handlers  # noqa: E402
from .routes import auth, documents, exa, notes, spaces, storage, summarize, system  # noqa: E402
from ..services.config import PROJECT_ROOT, get_config  # noqa: E402
from ..services.session import SessionResolver  # noqa: E402

logger = logging.getLogger(__name__)

API_PREFIXES = ("api/", "auth/")
FRONTEND_DIST = PROJECT_ROOT / "frontend" / "dist"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log which collaborators are configured at startup."""
    config = get_config()
    logger.info(
        "Starting Mind-It API",
        extra={
            "environment": config.environment,
            "supabase_configured": bool(config.supabase_url and config.supabase_anon_key),
            "exa_configured": bool(config.exa_api_key),
            "summaries_enabled": bool(config.openrouter_api_key),
        },
    )
    yield


def _mount_pages(app: FastAPI, frontend_dist: Path) -> None:
    """Serve the SPA build when present; otherwise answer page routes with a stub."""
    if frontend_dist.exists():
        app.mount(
            "/assets", StaticFiles(directory=str(frontend_dist / "assets")), name="assets"
        )
        logger.info(f"Serving frontend SPA from: {frontend_dist}")
    else:
        logger.warning(f"Frontend dist not found at: {frontend_dist}")

    @app.get("/", include_in_schema=False)
    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_page(full_path: str = ""):
        """Serve a page route (the gate has already run for gated paths)."""
        if full_path.startswith(API_PREFIXES):
            raise HTTPException(status_code=404, detail="Not found")

        if not frontend_dist.exists():
            return {"status": "ok", "service": "Mind-It API", "page": f"/{full_path}"}

        file_path = frontend_dist / full_path
        if full_path and file_path.is_file():
            return FileResponse(file_path)
        return FileResponse(frontend_dist / "index.html")


def create_app(
    *,
    resolver: Optional[SessionResolver] = None,
    frontend_dist: Path = FRONTEND_DIST,
) -> FastAPI:
    """Build the application; ``resolver`` overrides the gate's session lookup."""
    system.install_memory_log_handler()
    config = get_config()

    app = FastAPI(
        title="Mind-It API",
        description="Notes, spaces, document ingestion and web search for Mind-It",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Added first so CORS wraps it and redirects still carry CORS headers.
    app.add_middleware(SessionGateMiddleware, resolver=resolver)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(auth.router, tags=["auth"])
    app.include_router(notes.router, tags=["notes"])
    app.include_router(spaces.router, tags=["spaces"])
    app.include_router(exa.router, tags=["search"])
    app.include_router(documents.router, tags=["documents"])
    app.include_router(summarize.router, tags=["summarize"])
    app.include_router(storage.router, tags=["storage"])
    app.include_router(system.router, tags=["system"])

    # Catch-all page route goes last.
    _mount_pages(app, frontend_dist)
    return app


app = create_app()


__all__ = ["app", "create_app"]
