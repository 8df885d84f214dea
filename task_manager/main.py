"""Task Manager Backend - FastAPI Application."""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from uuid import uuid4

import structlog
import uvicorn
from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from task_manager.boot import Bootloader, BootMode
from task_manager.config import settings
from task_manager.database import gateway
from task_manager.errors import StorageError
from task_manager.logger import configure_logging, elapsed_ms, get_logger, log_exception
from task_manager.routers import auth, health, tasks

# Initialize logging early
configure_logging()
logger = get_logger(__name__)

INTERNAL_ERROR = "Internal server error"
VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan - validate config and open the pool before serving."""
    # Will sys.exit(1) on a missing secret or an unreachable database
    await Bootloader.validate(mode=BootMode.CRITICAL)
    Bootloader.print_config()
    logger.info("Application started", version=VERSION)
    try:
        yield
    finally:
        await gateway.shutdown()
        logger.info("Application shutting down")


app = FastAPI(
    title="Task Manager API",
    description="Per-user task lists with token authentication",
    version=VERSION,
    lifespan=lifespan,
)


def error_response(
    status_code: int,
    message: str,
    *,
    exc: BaseException | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the {"error": ...} envelope, adding details only in DEBUG mode."""
    content: dict[str, Any] = {"error": message}
    if settings.debug and exc is not None:
        content["details"] = str(exc)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid JSON body"
    field = ".".join(
        str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query", "header")
    )
    message = first.get("msg", "Invalid value")
    return f"{field}: {message}" if field else f"body: {message}"


@app.middleware("http")
async def logging_middleware(request: Request, call_next: Any) -> Response:
    """Inject Request-ID, log the request, and turn crashes into 500s."""
    request_id = request.headers.get("X-Request-ID", str(uuid4()))

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
    )

    start_time = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as exc:
        log_exception(
            logger,
            exc,
            "HTTP Request Failed",
            duration_ms=elapsed_ms(start_time),
        )
        response = error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR, exc=exc)
    else:
        logger.info(
            "HTTP Request",
            status_code=response.status_code,
            duration_ms=elapsed_ms(start_time),
        )

    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing errors (404/405) and handler HTTPExceptions in the error envelope."""
    return error_response(exc.status_code, str(exc.detail), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report the first validation problem as a 400."""
    return error_response(status.HTTP_400_BAD_REQUEST, first_validation_message(exc))


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Log storage faults in full; the client only sees a generic 500."""
    log_exception(logger, exc, "Storage fault while handling request")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR, exc=exc)


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(tasks.router)


def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
