"""Publishes synthesized audio to public object storage."""

import io

from compaction_tts.infrastructure.interfaces import StorageClient
from compaction_tts.logging import setup_logging

logger = setup_logging()

AUDIO_CONTENT_TYPE = "audio/mpeg"
DEFAULT_CACHE_CONTROL = "public, max-age=31536000"


def audio_object_name(video_id: str) -> str:
    """Storage key for a video's narration audio."""
    return f"{video_id}.mp3"


class AudioPublisher:
    """Writes audio under a deterministic key and exposes it publicly."""

    def __init__(
        self, storage: StorageClient, cache_control: str = DEFAULT_CACHE_CONTROL
    ):
        self._storage = storage
        self._cache_control = cache_control

    def publish(self, audio: bytes, object_name: str) -> str:
        """
        Uploads audio, marks it publicly readable and returns its URL.

        Existing objects under the same name are overwritten. Failures are
        not retried.

        Raises:
            StorageError: If the upload or the access change fails.
        """
        self._storage.upload(
            object_name=object_name,
            data=io.BytesIO(audio),
            size=len(audio),
            content_type=AUDIO_CONTENT_TYPE,
            cache_control=self._cache_control,
        )
        self._storage.make_public(object_name)

        url = self._storage.public_url(object_name)
        logger.info(
            "Audio published",
            extra={"object_name": object_name, "size": len(audio), "url": url},
        )
        return url

    def audio_exists(self, video_id: str) -> bool:
        return self._storage.exists(audio_object_name(video_id))

    def delete_audio(self, video_id: str) -> None:
        self._storage.delete(audio_object_name(video_id))
