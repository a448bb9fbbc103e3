"""Gemini TTS engine implementation.

Calls the Cloud Text-to-Speech ``text:synthesize`` endpoint with the
``gemini-2.5-flash-tts`` model. The request carries a free-form style
prompt next to the text, which is how difficulty and speaker roles are
expressed.
"""

import base64
import binascii

from app.config.tts import FEMALE_VOICES, MALE_VOICES
from app.core.exceptions import ErrorKind, ExternalAPIError, TTSError
from app.core.logging import get_logger
from app.infrastructure.google_auth import AccessTokenCache
from app.infrastructure.http_client import HTTPClient
from app.services.generator.tts.base import BaseTTSEngine, SynthesizedSpeech, VoiceInfo

logger = get_logger(__name__)

DEFAULT_TTS_ENDPOINT = "https://texttospeech.googleapis.com/v1/text:synthesize"


class GeminiTTSEngine(BaseTTSEngine):
    """Gemini TTS engine.

    Example:
        >>> engine = GeminiTTSEngine(http_client=http_client, token_cache=token_cache)
        >>> speech = await engine.synthesize("Hello world", "Charon", "Speak slowly.")
        >>> len(speech.audio)
    """

    name = "gemini-tts"

    def __init__(
        self,
        http_client: HTTPClient,
        token_cache: AccessTokenCache,
        endpoint: str = DEFAULT_TTS_ENDPOINT,
        model_name: str = "gemini-2.5-flash-tts",
        language_code: str = "en-US",
        audio_encoding: str = "MP3",
    ) -> None:
        """Initialize GeminiTTSEngine.

        Args:
            http_client: Shared HTTP client
            token_cache: OAuth access token cache
            endpoint: Synthesis endpoint URL
            model_name: TTS model name
            language_code: BCP-47 language code of the spoken text
            audio_encoding: Provider audio encoding
        """
        self.http_client = http_client
        self.token_cache = token_cache
        self.endpoint = endpoint
        self.model_name = model_name
        self.language_code = language_code
        self.audio_encoding = audio_encoding

    def build_request(self, text: str, voice_id: str, prompt: str) -> dict:
        """Build the JSON body of a synthesis request."""
        return {
            "input": {"text": text, "prompt": prompt},
            "voice": {
                "languageCode": self.language_code,
                "name": voice_id,
                "modelName": self.model_name,
            },
            "audioConfig": {"audioEncoding": self.audio_encoding},
        }

    async def synthesize(self, text: str, voice_id: str, prompt: str) -> SynthesizedSpeech:
        access_token = await self.token_cache.get_or_refresh()

        logger.debug(
            "Calling TTS API",
            text_length=len(text),
            voice=voice_id,
            prompt_length=len(prompt),
            model=self.model_name,
        )

        response = await self.http_client.post(
            self.endpoint,
            json=self.build_request(text, voice_id, prompt),
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
        )

        if response.status_code >= 400:
            if response.status_code == 401:
                self.token_cache.clear()
            raise ExternalAPIError(
                service="gemini-tts",
                message=f"{response.status_code} {response.text}",
                kind=ErrorKind.from_status(response.status_code),
                status_code=response.status_code,
                endpoint=self.endpoint,
                response_body=response.text,
            )

        data = response.json()
        audio_content = data.get("audioContent") if isinstance(data, dict) else None
        if not audio_content:
            logger.error(
                "No audioContent in TTS response",
                response_keys=list(data) if isinstance(data, dict) else None,
            )
            raise TTSError(
                "No audio content returned from TTS API",
                engine=self.name,
                voice_id=voice_id,
            )

        try:
            audio = base64.b64decode(audio_content, validate=True)
        except (binascii.Error, ValueError) as e:
            raise TTSError(
                f"Invalid base64 audio content: {e}",
                engine=self.name,
                voice_id=voice_id,
            ) from e

        logger.debug("Speech synthesized", voice=voice_id, size_bytes=len(audio))
        return SynthesizedSpeech(audio=audio, voice_id=voice_id)

    def get_available_voices(self, language: str | None = None) -> list[VoiceInfo]:
        if language and language != self.language_code:
            return []
        voices = [
            VoiceInfo(voice_id=v, language=self.language_code, gender="female")
            for v in FEMALE_VOICES
        ]
        voices.extend(
            VoiceInfo(voice_id=v, language=self.language_code, gender="male") for v in MALE_VOICES
        )
        return voices


__all__ = ["DEFAULT_TTS_ENDPOINT", "GeminiTTSEngine"]
