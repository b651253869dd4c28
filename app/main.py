import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from app.core.config import Settings, get_settings
from app.core.cors import build_cors_headers
from app.core.errors import GuestbookError, StoreError
from app.core.logger import setup_logging
from app.routers import admin, auth, messages
from app.services.guestbook import GuestbookService
from app.services.moderation import ModerationGate
from app.storage import MessageStore, build_store

logger = logging.getLogger("app")


def create_app(settings: Optional[Settings] = None, store: Optional[MessageStore] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)
    store = store or build_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.ensure_schema()
        logger.info(
            "Guestbook started (backend=%s, moderation=%s)",
            settings.STORE_BACKEND, settings.MODERATION_POLICY,
        )
        yield
        store.close()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Guestbook API",
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = GuestbookService(store, ModerationGate.from_settings(settings), settings)

    # CORS + request log
    @app.middleware("http")
    async def cors_and_log(request: Request, call_next):
        cors_headers = build_cors_headers(request.headers.get("origin"), settings.CORS_ALLOW_ORIGINS)
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=cors_headers)

        start_time = time.perf_counter()
        response = await call_next(request)
        process_time = (time.perf_counter() - start_time) * 1000

        response.headers.update(cors_headers)
        if request.url.path.startswith(settings.API_PREFIX):
            logger.info(
                "%s %s -> %s (%.2fms)",
                request.method, request.url.path, response.status_code, process_time,
                extra={"status": response.status_code, "latency_ms": round(process_time, 2)},
            )
        return response

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error("Store error on %s %s: %s", request.method, request.url.path, exc.detail)
        body = exc.to_dict()
        if settings.DEBUG and not settings.is_production:
            body["detail"] = exc.detail
        return JSONResponse(status_code=exc.status_code, content={"error": body})

    @app.exception_handler(GuestbookError)
    async def guestbook_error_handler(request: Request, exc: GuestbookError):
        if exc.status_code == 401:
            logger.warning("Unauthorized %s %s", request.method, request.url.path)
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()}, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = f"{location}: {first.get('msg', 'invalid value')}" if location else "Invalid request"
        return JSONResponse(status_code=400, content={"error": {"code": "invalid_request", "message": message}})

    app.include_router(messages.router, prefix=settings.API_PREFIX)
    app.include_router(auth.router, prefix=settings.API_PREFIX)
    app.include_router(admin.router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root():
        return {"message": f"Welcome to {settings.APP_NAME}", "docs": "/docs"}

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    return app
