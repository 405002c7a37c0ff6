"""Infrastructure layer exports."""

from .cartesia_tts import CartesiaSpeechSynthesizer
from .minio_storage import MinioStorageClient

__all__ = ["CartesiaSpeechSynthesizer", "MinioStorageClient"]
