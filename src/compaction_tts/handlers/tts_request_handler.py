"""Handler that runs a single compaction through synthesis and publishing."""

from compaction_tts.domain import (
    AudioPublisher,
    CompactionUpdate,
    PipelineState,
    TokenValidator,
    TTSResult,
    audio_object_name,
)
from compaction_tts.domain.models import STATUS_COMPLETED, STATUS_FAILED
from compaction_tts.exceptions import (
    CompactionNotFoundError,
    CompactionUpdateError,
    PipelineError,
    UnauthorizedError,
)
from compaction_tts.infrastructure.interfaces import SpeechSynthesizer
from compaction_tts.logging import setup_logging
from compaction_tts.repositories import CompactionRepository

logger = setup_logging()


class TTSRequestHandler:
    """Orchestrates authenticate, load, synthesize, publish and record steps."""

    def __init__(
        self,
        validator: TokenValidator,
        repository: CompactionRepository,
        synthesizer: SpeechSynthesizer,
        publisher: AudioPublisher,
    ):
        self._validator = validator
        self._repository = repository
        self._synthesizer = synthesizer
        self._publisher = publisher
        self.state = PipelineState.RECEIVED

    def process(self, compaction_id: str, authorization: str | None) -> TTSResult:
        """
        Processes one TTS request.

        Any failure after authentication, other than a missing document,
        is written back to the document as ``status=failed`` on a
        best-effort basis before the error is re-raised.

        Args:
            compaction_id: Identifier of the compaction document.
            authorization: Raw Authorization header value.

        Returns:
            TTSResult with the published audio URL.

        Raises:
            UnauthorizedError: If the token is rejected.
            CompactionNotFoundError: If the document does not exist.
            PipelineError: If validation, synthesis or publishing fails.
        """
        self.state = PipelineState.RECEIVED

        auth = self._validator.validate(authorization)
        if not auth.authenticated:
            self._transition(PipelineState.FAILED, compaction_id)
            logger.error(
                "Authentication failed",
                extra={
                    "compaction_id": compaction_id,
                    "security_event": "authentication_failure",
                },
            )
            raise UnauthorizedError()

        subject = auth.subject
        self._transition(PipelineState.AUTHENTICATED, compaction_id, subject)

        try:
            return self._run(compaction_id, subject)
        except CompactionNotFoundError:
            self._transition(PipelineState.FAILED, compaction_id, subject)
            raise
        except PipelineError as e:
            self._transition(PipelineState.FAILED, compaction_id, subject)
            self._record_failure(compaction_id, e.status_code, e.message, subject)
            raise
        except Exception as e:
            self._transition(PipelineState.FAILED, compaction_id, subject)
            self._record_failure(compaction_id, 500, str(e), subject)
            raise

    def _run(self, compaction_id: str, subject: str | None) -> TTSResult:
        compaction = self._repository.get_by_id(compaction_id)
        self._transition(PipelineState.RECORD_LOADED, compaction_id, subject)

        synthesis = self._synthesizer.synthesize(
            transcript=compaction.compaction_text_human,
            voice_id=compaction.voice_id,
            compaction_id=compaction_id,
        )
        self._transition(PipelineState.SYNTHESIZED, compaction_id, subject)

        audio_url = self._publisher.publish(
            synthesis.audio, audio_object_name(compaction.video_id)
        )
        self._transition(PipelineState.PUBLISHED, compaction_id, subject)

        record_updated = True
        try:
            self._repository.update(
                compaction_id,
                CompactionUpdate(
                    audio_url=audio_url,
                    cartesia_request_id=synthesis.request_id,
                    compaction_audio_duration=synthesis.duration_seconds,
                    status=STATUS_COMPLETED,
                    status_code=200,
                    error_message=None,
                ),
            )
            self._transition(PipelineState.UPDATED, compaction_id, subject)
        except CompactionUpdateError:
            # Audio is already public; the caller still gets its URL.
            record_updated = False
            logger.error(
                "Result not recorded on compaction document",
                extra={"compaction_id": compaction_id, "audio_url": audio_url},
            )

        self._transition(PipelineState.COMPLETED, compaction_id, subject)
        return TTSResult(
            compaction_id=compaction_id,
            audio_url=audio_url,
            cartesia_request_id=synthesis.request_id,
            compaction_audio_duration=synthesis.duration_seconds,
            record_updated=record_updated,
        )

    def _record_failure(
        self,
        compaction_id: str,
        status_code: int,
        message: str,
        subject: str | None,
    ) -> None:
        """Best-effort failure annotation; never raises."""
        try:
            self._repository.update(
                compaction_id,
                CompactionUpdate(
                    status=STATUS_FAILED,
                    status_code=status_code,
                    error_message=message,
                ),
            )
        except Exception:
            logger.exception(
                "Failed to record error on compaction document",
                extra={"compaction_id": compaction_id, "subject": subject},
            )

    def _transition(
        self,
        state: PipelineState,
        compaction_id: str,
        subject: str | None = None,
    ) -> None:
        self.state = state
        logger.info(
            "Pipeline state changed",
            extra={
                "compaction_id": compaction_id,
                "subject": subject,
                "state": state.value,
            },
        )
