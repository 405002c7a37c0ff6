"""Cartesia TTS webhook endpoint."""

import time
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse

from compaction_tts.dependencies import get_handler
from compaction_tts.exceptions import CompactionNotFoundError, PipelineError, UnauthorizedError
from compaction_tts.handlers import TTSRequestHandler
from compaction_tts.logging import setup_logging
from compaction_tts.response_models import ErrorResponse, TTSRequest, TTSResponse

logger = setup_logging()

router = APIRouter(tags=["tts"])

HandlerDep = Annotated[TTSRequestHandler, Depends(get_handler)]

TTS_PATH = "/cartesia-tts"
METHOD_NOT_ALLOWED = "Method not allowed"


def _error(status_code: int, message: str, processing_time_ms: int | None = None):
    body = ErrorResponse(error=message, processing_time_ms=processing_time_ms)
    return JSONResponse(
        status_code=status_code, content=body.model_dump(exclude_none=True)
    )


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


@router.post(
    TTS_PATH,
    response_model=TTSResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def cartesia_tts(
    handler: HandlerDep,
    payload: TTSRequest | None = None,
    authorization: Annotated[str | None, Header()] = None,
):
    """
    Synthesizes a compaction's transcript and publishes the MP3.

    Updates the compaction document with the audio URL on success and with
    the failure status otherwise.
    """
    start = time.monotonic()

    compaction_id = payload.compaction_id if payload else None
    if not compaction_id:
        logger.error("Missing compaction_id in request body")
        return _error(400, "Missing compaction_id")

    logger.info(
        "Received TTS request",
        extra={
            "compaction_id": compaction_id,
            "authorization_present": authorization is not None,
        },
    )

    try:
        result = handler.process(compaction_id, authorization)
    except (UnauthorizedError, CompactionNotFoundError) as e:
        return _error(e.status_code, e.message)
    except PipelineError as e:
        processing_time_ms = _elapsed_ms(start)
        logger.error(
            "TTS processing failed",
            extra={
                "compaction_id": compaction_id,
                "error": e.message,
                "status_code": e.status_code,
                "processing_time_ms": processing_time_ms,
            },
        )
        return _error(e.status_code, e.message, processing_time_ms)
    except Exception:
        processing_time_ms = _elapsed_ms(start)
        logger.exception(
            "Unexpected error during TTS processing",
            extra={
                "compaction_id": compaction_id,
                "processing_time_ms": processing_time_ms,
            },
        )
        return _error(500, "Internal server error", processing_time_ms)

    processing_time_ms = _elapsed_ms(start)
    logger.info(
        "TTS processing complete",
        extra={
            "compaction_id": compaction_id,
            "audio_url": result.audio_url,
            "record_updated": result.record_updated,
            "processing_time_ms": processing_time_ms,
        },
    )

    return TTSResponse(
        audio_url=result.audio_url,
        cartesia_request_id=result.cartesia_request_id,
        compaction_audio_duration=result.compaction_audio_duration,
        processing_time_ms=processing_time_ms,
    )


@router.api_route(
    TTS_PATH,
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
def method_not_allowed(request: Request):
    """Rejects every method other than POST."""
    logger.error("Invalid method", extra={"method": request.method})
    return _error(405, METHOD_NOT_ALLOWED)


@router.get("/health")
def health():
    """Liveness probe."""
    return {"status": "ok"}
