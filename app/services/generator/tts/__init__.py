"""TTS (Text-to-Speech) engines.

- GeminiTTSEngine: Cloud Text-to-Speech with the Gemini TTS model
"""

from app.services.generator.tts.base import BaseTTSEngine, SynthesizedSpeech, VoiceInfo
from app.services.generator.tts.gemini import GeminiTTSEngine
from app.services.generator.tts.utils import estimate_audio_duration

__all__ = [
    "BaseTTSEngine",
    "GeminiTTSEngine",
    "SynthesizedSpeech",
    "VoiceInfo",
    "estimate_audio_duration",
]
