"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from repo_graph import __version__
from repo_graph.web.api import router


def create_app() -> FastAPI:
    app = FastAPI(title="repo-graph", version=__version__)

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    app.include_router(router)
    return app


app = create_app()
