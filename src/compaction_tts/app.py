"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from compaction_tts.dependencies import close_resources, init_resources
from compaction_tts.logging import setup_logging
from compaction_tts.routes import tts_router
from compaction_tts.routes.tts import METHOD_NOT_ALLOWED

logger = setup_logging()


async def _invalid_body(request: Request, exc: RequestValidationError):
    logger.error("Invalid request body", extra={"errors": str(exc.errors())})
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


async def _http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        message = METHOD_NOT_ALLOWED
    else:
        message = str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": message})


def create_app(lifespan=None) -> FastAPI:
    """Builds the app; ``lifespan`` is omitted in tests."""
    app = FastAPI(title="Compaction TTS Service", lifespan=lifespan)
    app.include_router(tts_router)
    app.add_exception_handler(RequestValidationError, _invalid_body)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    return app


@asynccontextmanager
async def resources_lifespan(app: FastAPI):
    """Prepares the database and bucket on startup and closes clients on shutdown."""
    init_resources()
    yield
    close_resources()
