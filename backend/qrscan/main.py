from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError

from qrscan.api.api import api_router
from qrscan.core.config import settings
from qrscan.core.exceptions import InvalidScanDataError, ScanError, ScanNotFoundError, StorageError
from qrscan.core.logging import configure_logging
from qrscan.db.session import Database
from qrscan.schemas.scan import ErrorResponse

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("access")


def _error_response(exc: ScanError) -> JSONResponse:
    body = ErrorResponse(error=exc.error, message=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(body, exclude_none=True))


def create_app(database: Optional[Database] = None) -> FastAPI:
    configure_logging()

    app = FastAPI(title=settings.PROJECT_NAME)
    app.state.database = database or Database(settings.DATABASE_URL)

    @app.middleware("http")
    async def access_log_middleware(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        access_logger.info(
            "%s %s - Status: %s - Time: %.4fs",
            request.method,
            request.url.path,
            response.status_code,
            process_time,
        )
        response.headers["X-Process-Time"] = str(process_time)
        return response

    @app.middleware("http")
    async def cors_middleware(request: Request, call_next):
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            response = await call_next(request)

        origin = request.headers.get("origin")
        if origin and ("*" in settings.CORS_ORIGINS or origin in settings.CORS_ORIGINS):
            response.headers["Access-Control-Allow-Origin"] = origin
        elif "*" in settings.CORS_ORIGINS:
            response.headers["Access-Control-Allow-Origin"] = "*"

        response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
        request_headers = request.headers.get("Access-Control-Request-Headers")
        if request_headers:
            response.headers["Access-Control-Allow-Headers"] = request_headers
        else:
            response.headers["Access-Control-Allow-Headers"] = "*"

        response.headers["Access-Control-Allow-Credentials"] = "false"
        return response

    @app.exception_handler(ScanError)
    async def scan_error_handler(request: Request, exc: ScanError) -> JSONResponse:
        if isinstance(exc, StorageError):
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        elif isinstance(exc, ScanNotFoundError):
            logger.info("%s %s: scan not found", request.method, request.url.path)
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": str(err.get("msg", ""))}
            for err in exc.errors()
        ]
        return _error_response(InvalidScanDataError(details=details))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(ScanError(str(exc) or None))

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.on_event("startup")
    def on_startup() -> None:
        try:
            app.state.database.init()
        except SQLAlchemyError:
            # Requests report the failure as a storage error.
            logger.exception("Database unavailable at startup")

    app.include_router(api_router, prefix=settings.API_PREFIX)

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run("qrscan.main:app", host=settings.HOST, port=settings.PORT)
