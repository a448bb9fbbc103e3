"""Base TTS engine interface and data structures.

This module defines the abstract base class for TTS engines and
the data structures shared by the sentence audio pipeline.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal


@dataclass
class VoiceInfo:
    """Information about an available voice.

    Attributes:
        voice_id: Voice identifier sent to the provider
        language: Language code (e.g., "en-US")
        gender: Voice gender
    """

    voice_id: str
    language: str
    gender: Literal["male", "female", "neutral"]


@dataclass
class SynthesizedSpeech:
    """Raw result of one synthesis call.

    Attributes:
        audio: Encoded audio bytes
        voice_id: Voice that produced the audio
        mime_type: MIME type of ``audio``
    """

    audio: bytes
    voice_id: str
    mime_type: str = "audio/mpeg"

    @property
    def size_bytes(self) -> int:
        return len(self.audio)


class BaseTTSEngine(ABC):
    """Abstract base class for TTS engines.

    Engines turn one piece of text into one audio buffer. Sequencing,
    voice selection and retries live in the caller.
    """

    name: str = "base"

    @abstractmethod
    async def synthesize(self, text: str, voice_id: str, prompt: str) -> SynthesizedSpeech:
        """Synthesize speech from text.

        Args:
            text: Text to speak
            voice_id: Provider voice name
            prompt: Style instructions for the voice

        Returns:
            SynthesizedSpeech with the audio bytes

        Raises:
            ExternalAPIError: If the provider rejects the request
            TTSError: If the provider response carries no audio
        """
        pass

    @abstractmethod
    def get_available_voices(self, language: str | None = None) -> list[VoiceInfo]:
        """Get available voices.

        Args:
            language: Optional language filter (e.g., "en-US")

        Returns:
            List of available voices
        """
        pass


__all__ = [
    "BaseTTSEngine",
    "SynthesizedSpeech",
    "VoiceInfo",
]
