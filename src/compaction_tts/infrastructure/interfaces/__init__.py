"""Infrastructure interface exports."""

from .speech_synthesizer import SpeechSynthesizer
from .storage_client import StorageClient

__all__ = ["SpeechSynthesizer", "StorageClient"]
