"""Cartesia implementation of the SpeechSynthesizer interface."""

import httpx

from compaction_tts.config import CartesiaConfig
from compaction_tts.domain.models import SynthesisResult
from compaction_tts.domain.retry import FailedAttempt, RetryPolicy
from compaction_tts.exceptions import (
    EmptyAudioError,
    SynthesisAuthenticationError,
    SynthesisClientError,
    SynthesisConfigurationError,
    SynthesisError,
    SynthesisNetworkError,
    SynthesisRateLimitError,
    SynthesisServerError,
    SynthesisTimeoutError,
)
from compaction_tts.logging import setup_logging

from .interfaces import SpeechSynthesizer

logger = setup_logging()

REQUEST_ID_HEADERS = ("Cartesia-Request-Id", "X-Request-Id")


def is_transient(error: Exception) -> bool:
    """False for vendor rejections that will not change on retry."""
    return not isinstance(
        error, (SynthesisAuthenticationError, SynthesisClientError)
    )


class CartesiaSpeechSynthesizer(SpeechSynthesizer):
    """Handles speech synthesis using the Cartesia bytes endpoint."""

    def __init__(
        self,
        client: httpx.Client,
        config: CartesiaConfig,
        retry_policy: RetryPolicy | None = None,
    ):
        self._client = client
        self._config = config
        if retry_policy is None:
            predicate = (
                (lambda _: True) if config.retry_client_errors else is_transient
            )
            retry_policy = RetryPolicy.from_config(config.retry, is_retryable=predicate)
        self._retry_policy = retry_policy

    def synthesize(
        self, transcript: str, voice_id: str, compaction_id: str | None = None
    ) -> SynthesisResult:
        if not self._config.api_key.strip():
            logger.error(
                "Cartesia API key not configured",
                extra={"compaction_id": compaction_id},
            )
            raise SynthesisConfigurationError()

        def on_failed_attempt(failure: FailedAttempt) -> None:
            logger.warning(
                "Cartesia attempt failed",
                extra={
                    "compaction_id": compaction_id,
                    "attempt": failure.attempt_number,
                    "retries_left": failure.retries_left,
                    "error": str(failure.error),
                },
            )

        try:
            result = self._retry_policy.execute(
                lambda: self._request(transcript, voice_id),
                on_failed_attempt=on_failed_attempt,
            )
        except SynthesisError:
            logger.exception(
                "Cartesia TTS failed", extra={"compaction_id": compaction_id}
            )
            raise

        logger.info(
            "Cartesia TTS succeeded",
            extra={
                "compaction_id": compaction_id,
                "audio_bytes": len(result.audio),
                "cartesia_request_id": result.request_id,
            },
        )
        return result

    def _payload(self, transcript: str, voice_id: str) -> dict:
        return {
            "model_id": self._config.model_id,
            "transcript": transcript,
            "voice": {"mode": "id", "id": voice_id},
            "output_format": {
                "container": self._config.container,
                "bit_rate": self._config.bit_rate,
                "sample_rate": self._config.sample_rate,
            },
            "language": self._config.language,
        }

    def _request(self, transcript: str, voice_id: str) -> SynthesisResult:
        """Performs a single synthesis attempt."""
        try:
            response = self._client.post(
                self._config.url,
                headers={
                    "Cartesia-Version": self._config.api_version,
                    "Authorization": f"Bearer {self._config.api_key.strip()}",
                    "Content-Type": "application/json",
                },
                json=self._payload(transcript, voice_id),
                timeout=self._config.timeout_seconds,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._status_error(e) from e
        except httpx.TimeoutException as e:
            raise SynthesisTimeoutError(e) from e
        except httpx.HTTPError as e:
            raise SynthesisNetworkError(e) from e

        audio = response.content
        if not audio:
            raise EmptyAudioError()

        return SynthesisResult(
            audio=audio,
            request_id=self._request_id(response),
            duration_seconds=self._estimate_duration(len(audio)),
        )

    @staticmethod
    def _status_error(error: httpx.HTTPStatusError) -> SynthesisError:
        status = error.response.status_code
        if status == 401:
            return SynthesisAuthenticationError(error)
        if status == 429:
            return SynthesisRateLimitError(error)
        if status >= 500:
            return SynthesisServerError(status, error)
        return SynthesisClientError(status, error)

    @staticmethod
    def _request_id(response: httpx.Response) -> str | None:
        for header in REQUEST_ID_HEADERS:
            value = response.headers.get(header)
            if value:
                return value
        return None

    def _estimate_duration(self, size: int) -> float | None:
        # Constant bit rate MP3, so size maps directly to playback time.
        if self._config.container != "mp3" or self._config.bit_rate <= 0:
            return None
        return round(size * 8 / self._config.bit_rate, 3)
