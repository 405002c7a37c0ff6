"""Response models for the TTS webhook."""

from pydantic import BaseModel


class TTSRequest(BaseModel):
    """Webhook body; other keys sent by the caller are ignored."""

    compaction_id: str | None = None


class TTSResponse(BaseModel):
    """Response returned after audio is synthesized and published."""

    success: bool = True
    audio_url: str
    cartesia_request_id: str | None = None
    compaction_audio_duration: float | None = None
    processing_time_ms: int | None = None


class ErrorResponse(BaseModel):
    """Response returned for every failed request."""

    error: str
    processing_time_ms: int | None = None
