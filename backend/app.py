import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional, Union

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from backend.config import ConfigurationError, DatabaseSettings, get_database_settings
from backend.db import check_database, create_db_engine
from backend.error_handlers import register_error_handlers
from backend.errors import async_handler, errors
from backend.health_checks import check_env, get_app_metadata
from backend.i18n import get_translator, resolve_language
from backend.performance import add_timing_headers, measure_and_log

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str
    uptime_seconds: float
    timestamp: float


class ApiHealthResponse(HealthResponse):
    database: str
    environment: Union[str, dict]
    metadata: dict


class TranslationResponse(BaseModel):
    key: str
    language: str
    value: str


def create_app(database_settings: Optional[DatabaseSettings] = None) -> FastAPI:
    start_time = time.time()

    # Lifespan context for startup/shutdown
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings = database_settings
        if settings is None:
            try:
                settings = get_database_settings()
            except ConfigurationError as e:
                logger.warning("Database not configured: %s", e)
        app.state.engine = create_db_engine(settings) if settings else None
        logger.info("🚀 FastAPI app starting")
        yield
        if app.state.engine is not None:
            app.state.engine.dispose()
        logger.info("🛑 FastAPI app shutting down")

    application = FastAPI(
        title="Church Directory API",
        description="Operations API for the church directory",
        version="1.0.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Middlewares run outermost-last: request id wraps language wraps timing
    @application.middleware("http")
    async def collect_timings(request: Request, call_next):
        request.state.timings = {}
        response = await call_next(request)
        return add_timing_headers(response, request.state.timings)

    @application.middleware("http")
    async def negotiate_language(request: Request, call_next):
        language = resolve_language(
            request.headers.get("accept-language"),
            override=request.query_params.get("lang"),
        )
        request.state.language = language
        request.state.translator = get_translator(language)
        response = await call_next(request)
        response.headers["Content-Language"] = language
        return response

    @application.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        logger.info(
            "%s %s", request.method, request.url.path,
            extra={"request_id": request_id},
        )
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    register_error_handlers(application)

    @application.get("/health", response_model=HealthResponse)
    async def health_check():
        """Simple health check."""
        return {
            "status": "ok",
            "uptime_seconds": time.time() - start_time,
            "timestamp": time.time(),
        }

    @application.get("/api/health", response_model=ApiHealthResponse)
    async def api_health_check(request: Request):
        """Detailed health check with DB and env checks."""
        engine = getattr(request.app.state, "engine", None)

        async def ping():
            return await run_in_threadpool(check_database, engine)

        db_status = await measure_and_log(
            ping, "health_check", route=request.url.path, timings=request.state.timings
        )
        return {
            "status": "ok" if db_status == "ok" else "degraded",
            "uptime_seconds": time.time() - start_time,
            "database": db_status,
            "environment": check_env(),
            "metadata": get_app_metadata(start_time),
            "timestamp": time.time(),
        }

    @application.get("/api/i18n/{key}", response_model=TranslationResponse)
    @async_handler
    async def translate(key: str, request: Request):
        """Translated UI string; extra query parameters fill its placeholders."""
        translator = request.state.translator
        if not translator.has(key):
            raise errors.not_found(f"Translation key '{key}'")
        params = {name: value for name, value in request.query_params.items() if name != "lang"}
        return TranslationResponse(key=key, language=translator.language, value=translator.t(key, **params))

    return application
