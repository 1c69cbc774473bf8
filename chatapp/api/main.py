"""FastAPI entrypoint - thin layer that wires together the store, services & routes."""

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from chatapp.config import Settings, get_settings
from chatapp.services.llm_service import LLMService
from chatapp.services.session_store import SessionStore
from chatapp.utils.logging import configure_logging
from .routers import compare, conversations, messages, upload, usage, user_settings


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[SessionStore] = None,
    llm: Optional[LLMService] = None,
) -> FastAPI:
    """Builds an application around explicitly supplied (or default) collaborators."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Gemini Chat Backend",
        description="Session-scoped conversations with Gemini models and usage analytics.",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.store = store if store is not None else SessionStore(max_sessions=settings.max_sessions)
    app.state.llm = llm if llm is not None else LLMService(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        logging.info(f"Rejected invalid request to {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
        )

    for module in (conversations, messages, user_settings, usage, compare, upload):
        app.include_router(module.router, prefix=settings.api_prefix)

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=upload_dir), name="uploads")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


configure_logging(get_settings().log_level)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
