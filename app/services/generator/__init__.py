"""Lesson generation services.

- Content: lesson passages and translations via the LLM
- Audio: per-sentence speech synthesis with voice alternation
- TTS: speech-synthesis engines
"""

from app.services.generator.audio import (
    AudioSynthesizer,
    SentenceAudio,
    VoicePlan,
    resolve_voice_plan,
)
from app.services.generator.content import (
    ContentGenerator,
    GeneratedLesson,
    Passage,
    parse_lines,
)
from app.services.generator.tts import BaseTTSEngine, GeminiTTSEngine

__all__ = [
    # Content
    "ContentGenerator",
    "GeneratedLesson",
    "Passage",
    "parse_lines",
    # Audio
    "AudioSynthesizer",
    "SentenceAudio",
    "VoicePlan",
    "resolve_voice_plan",
    # TTS
    "BaseTTSEngine",
    "GeminiTTSEngine",
]
