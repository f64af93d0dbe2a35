"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from saudai_relay.infrastructure.config import get_settings
from saudai_relay.interface.dependencies import shutdown, startup
from saudai_relay.interface.error_handlers import register_error_handlers
from saudai_relay.interface.routes import router


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage startup / shutdown of shared resources."""
    await startup()
    yield
    await shutdown()


def create_app() -> FastAPI:
    """Build and wire the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title="SaudAI Relay",
        version="1.0.0",
        description=(
            "Forwards a short message, together with the SaudAI persona prompt, "
            "to a language-model backend and returns the generated reply."
        ),
        lifespan=_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(router)

    # ── Liveness probes ─────────────────────────────────────────────────

    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    async def root() -> str:
        return f"SaudAI backend ({settings.model}) is running."

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
