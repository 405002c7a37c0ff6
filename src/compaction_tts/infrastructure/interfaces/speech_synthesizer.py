"""Abstract interface for text-to-speech backends."""

from abc import ABC, abstractmethod

from compaction_tts.domain.models import SynthesisResult


class SpeechSynthesizer(ABC):
    """Abstract base class for speech synthesis backends."""

    @abstractmethod
    def synthesize(
        self, transcript: str, voice_id: str, compaction_id: str | None = None
    ) -> SynthesisResult:
        """
        Converts transcript text into audio.

        Args:
            transcript: Text to speak.
            voice_id: Vendor voice identifier.
            compaction_id: Optional identifier used only for log correlation.

        Returns:
            SynthesisResult with the audio bytes and vendor metadata.

        Raises:
            SynthesisError: If synthesis fails after all retries.
        """
