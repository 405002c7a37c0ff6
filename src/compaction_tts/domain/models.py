"""Domain models for compaction audio synthesis."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from compaction_tts.db_models import CompactionEntity
from compaction_tts.exceptions import CompactionValidationError

REQUIRED_FIELDS = ("compaction_text_human", "voice_id", "video_id")

STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


class PipelineState(str, Enum):
    """Stages a TTS request moves through."""

    RECEIVED = "received"
    AUTHENTICATED = "authenticated"
    RECORD_LOADED = "record_loaded"
    SYNTHESIZED = "synthesized"
    PUBLISHED = "published"
    UPDATED = "updated"
    COMPLETED = "completed"
    FAILED = "failed"


class AuthResult(BaseModel, frozen=True):
    """Outcome of validating a caller's bearer token."""

    authenticated: bool
    subject: str | None = None


class Compaction(BaseModel, frozen=True):
    """
    A compaction document that is ready for synthesis.

    Only constructed through `from_entity`, which guarantees the transcript,
    voice and video identifiers are present.
    """

    id: str
    compaction_text_human: str
    voice_id: str
    video_id: str
    audio_url: str | None = None
    cartesia_request_id: str | None = None
    compaction_audio_duration: float | None = None
    status: str | None = None
    status_code: int | None = None
    error_message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, entity: CompactionEntity) -> "Compaction":
        """
        Builds a Compaction from a stored row.

        Raises:
            CompactionValidationError: If any required field is missing or empty.
        """
        missing = [name for name in REQUIRED_FIELDS if not getattr(entity, name)]
        if missing:
            raise CompactionValidationError(entity.id, missing)

        return cls.model_validate(entity.model_dump())


class CompactionUpdate(BaseModel):
    """Partial update; only fields explicitly set are written."""

    audio_url: str | None = None
    cartesia_request_id: str | None = None
    compaction_audio_duration: float | None = None
    status: str | None = None
    status_code: int | None = None
    error_message: str | None = None


class SynthesisResult(BaseModel, frozen=True):
    """Audio returned by the speech synthesizer."""

    audio: bytes
    request_id: str | None = None
    duration_seconds: float | None = None


class TTSResult(BaseModel, frozen=True):
    """Result of a completed TTS request."""

    compaction_id: str
    audio_url: str
    cartesia_request_id: str | None = None
    compaction_audio_duration: float | None = None
    record_updated: bool = True
