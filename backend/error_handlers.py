# backend/error_handlers.py

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.errors import AppError, generate_error_id, sanitize_error_message

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI):
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, e: AppError):
        if e.status_code >= 500:
            logger.error("Application error on %s: %s", request.url.path, e.message, exc_info=e)
        return JSONResponse(status_code=e.status_code, content=e.to_dict())

    @app.exception_handler(Exception)
    async def handle_exception(request: Request, e: Exception):
        error_id = generate_error_id()
        logger.error(
            "Unhandled exception",
            exc_info=e,
            extra={"fields": {"error_id": error_id, "path": request.url.path}},
        )
        body = sanitize_error_message(e)
        body["error_id"] = error_id
        return JSONResponse(status_code=500, content={"error": "Internal server error", **body})
