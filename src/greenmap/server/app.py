"""FastAPI application factory for the GreenMap assistant backend."""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..llm import LLMProvider
from . import chat_api, insights_api

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors (405, 503, ...) as ``{"error": detail}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def create_app(
    llm: LLMProvider | None = None,
    analysis_model: str | None = None,
    cors_origins: list[str] | None = None,
) -> FastAPI:
    """Create the API application.

    Args:
        llm: Provider for chat and insight requests; None disables them (503)
        analysis_model: Model used for report analysis
        cors_origins: Allowed browser origins (default: GREENMAP_CORS_ORIGINS or the Vite dev server)
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if llm is None:
            logger.warning("No LLM provider configured; AI endpoints will answer 503")
        yield
        if llm is not None:
            await llm.close()

    app = FastAPI(
        title="GreenMap Assistant API",
        description="GreenBot chat relay and AI insights for GreenMap",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.llm = llm
    app.state.analysis_model = analysis_model

    origins = cors_origins
    if origins is None:
        origins = [o.strip() for o in os.getenv("GREENMAP_CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, _http_error)

    app.include_router(chat_api.router, prefix="/api")
    app.include_router(insights_api.router, prefix="/api")

    @app.get("/api/health")
    def health_check():
        return {"status": "ok", "llm": app.state.llm is not None}

    return app
