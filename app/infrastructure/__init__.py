"""Infrastructure layer components.

External API clients (LLM, HTTP, Google OAuth) and audio blob storage.
"""

from app.infrastructure.http_client import HTTPClient
from app.infrastructure.llm import LLMClient, LLMConfig, LLMResponse
from app.infrastructure.storage import AudioStorage, LocalAudioStorage, S3AudioStorage

__all__ = [
    "AudioStorage",
    "HTTPClient",
    "LLMClient",
    "LLMConfig",
    "LLMResponse",
    "LocalAudioStorage",
    "S3AudioStorage",
]
