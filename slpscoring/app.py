from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from slpscoring import __version__
from slpscoring.routes.preferences import router as preferences_router
from slpscoring.routes.scoring import router as scoring_router


def create_app() -> FastAPI:
    app = FastAPI(title="SLP Scoring", version=__version__)
    allow = os.getenv(
        "CORS_ALLOW_ORIGINS", "http://localhost,http://127.0.0.1"
    ).split(",")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in allow if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    app.include_router(scoring_router)
    app.include_router(preferences_router)
    return app


app = create_app()
