"""Tests for the Gemini TTS engine."""

import base64
import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from app.core.exceptions import ErrorKind, ExternalAPIError, TTSError
from app.infrastructure.http_client import HTTPClient
from app.services.generator.tts.gemini import DEFAULT_TTS_ENDPOINT, GeminiTTSEngine
from app.services.generator.tts.utils import estimate_audio_duration


@pytest.fixture
def token_cache() -> MagicMock:
    cache = MagicMock()
    cache.get_or_refresh = AsyncMock(return_value="ya29.token")
    return cache


def make_engine(handler, token_cache) -> GeminiTTSEngine:
    return GeminiTTSEngine(
        http_client=HTTPClient(transport=httpx.MockTransport(handler)),
        token_cache=token_cache,
    )


class TestBuildRequest:
    """Tests for the synthesis request body."""

    def test_body(self, token_cache) -> None:
        engine = GeminiTTSEngine(http_client=MagicMock(), token_cache=token_cache)

        assert engine.build_request("Hello.", "Charon", "Speak slowly.") == {
            "input": {"text": "Hello.", "prompt": "Speak slowly."},
            "voice": {
                "languageCode": "en-US",
                "name": "Charon",
                "modelName": "gemini-2.5-flash-tts",
            },
            "audioConfig": {"audioEncoding": "MP3"},
        }


class TestSynthesize:
    """Tests for GeminiTTSEngine.synthesize."""

    @pytest.mark.asyncio
    async def test_success(self, token_cache) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200, json={"audioContent": base64.b64encode(b"ID3audio").decode()}
            )

        engine = make_engine(handler, token_cache)
        speech = await engine.synthesize("Hello.", "Kore", "Speak.")

        assert speech.audio == b"ID3audio"
        assert speech.voice_id == "Kore"
        assert speech.mime_type == "audio/mpeg"
        assert str(requests[0].url) == DEFAULT_TTS_ENDPOINT
        assert requests[0].headers["Authorization"] == "Bearer ya29.token"
        assert json.loads(requests[0].content)["voice"]["name"] == "Kore"

    @pytest.mark.asyncio
    async def test_unauthorized_clears_token(self, token_cache) -> None:
        engine = make_engine(lambda request: httpx.Response(401, text="expired"), token_cache)

        with pytest.raises(ExternalAPIError) as exc_info:
            await engine.synthesize("Hello.", "Kore", "Speak.")

        assert exc_info.value.kind is ErrorKind.AUTHORIZATION
        token_cache.clear.assert_called_once()

    @pytest.mark.asyncio
    async def test_server_error_is_unavailable(self, token_cache) -> None:
        engine = make_engine(lambda request: httpx.Response(503, text="busy"), token_cache)

        with pytest.raises(ExternalAPIError) as exc_info:
            await engine.synthesize("Hello.", "Kore", "Speak.")

        assert exc_info.value.kind is ErrorKind.UNAVAILABLE
        assert exc_info.value.status_code == 503
        token_cache.clear.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_audio_content(self, token_cache) -> None:
        engine = make_engine(lambda request: httpx.Response(200, json={}), token_cache)

        with pytest.raises(TTSError, match="No audio content"):
            await engine.synthesize("Hello.", "Kore", "Speak.")

    @pytest.mark.asyncio
    async def test_invalid_base64(self, token_cache) -> None:
        engine = make_engine(
            lambda request: httpx.Response(200, json={"audioContent": "not base64!"}),
            token_cache,
        )

        with pytest.raises(TTSError, match="Invalid base64"):
            await engine.synthesize("Hello.", "Kore", "Speak.")


class TestVoices:
    """Tests for voice listing."""

    def test_all_voices(self, token_cache) -> None:
        engine = GeminiTTSEngine(http_client=MagicMock(), token_cache=token_cache)
        voices = engine.get_available_voices()

        assert {voice.gender for voice in voices} == {"female", "male"}
        assert engine.get_available_voices("ja-JP") == []


class TestEstimateAudioDuration:
    """Tests for estimate_audio_duration."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("", 1), ("one", 1), ("one two three", 2), ("a b c d e", 2), ("a b c d e f", 3)],
    )
    def test_estimate(self, text: str, expected: int) -> None:
        assert estimate_audio_duration(text) == expected
