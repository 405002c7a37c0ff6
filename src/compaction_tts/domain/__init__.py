"""Domain layer exports."""

from .models import (
    AuthResult,
    Compaction,
    CompactionUpdate,
    PipelineState,
    SynthesisResult,
    TTSResult,
)
from .retry import FailedAttempt, RetryPolicy
from .token_validator import TokenValidator
from .audio_publisher import AudioPublisher, audio_object_name

__all__ = [
    "AuthResult",
    "Compaction",
    "CompactionUpdate",
    "PipelineState",
    "SynthesisResult",
    "TTSResult",
    "FailedAttempt",
    "RetryPolicy",
    "TokenValidator",
    "AudioPublisher",
    "audio_object_name",
]
