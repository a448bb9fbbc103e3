"""Unit tests for LLMClient."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import litellm
import pytest

from app.core.exceptions import ErrorKind, ExternalAPIError
from app.infrastructure.llm import (
    LLMClient,
    LLMConfig,
    LLMResponse,
    classify_llm_exception,
)


def _completion(content: str | None, model: str = "gemini/gemini-2.5-flash") -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        model=model,
        usage=SimpleNamespace(prompt_tokens=10, completion_tokens=5, total_tokens=15),
    )


class TestLLMConfig:
    """Test LLMConfig dataclass."""

    def test_default_values(self) -> None:
        """Should have correct default values."""
        config = LLMConfig(model="gemini/gemini-2.5-flash")

        assert config.max_tokens == 1000
        assert config.temperature == 0.7
        assert config.timeout == 60


class TestClassifyLLMException:
    """Test mapping of LiteLLM exceptions to error kinds."""

    def test_authentication(self) -> None:
        """Authentication failures are authorization errors."""
        error = litellm.AuthenticationError(
            message="bad key", llm_provider="gemini", model="gemini-2.5-flash"
        )
        assert classify_llm_exception(error) is ErrorKind.AUTHORIZATION

    def test_rate_limited(self) -> None:
        """Plain 429s are rate limited."""
        error = litellm.RateLimitError(
            message="Too many requests", llm_provider="gemini", model="gemini-2.5-flash"
        )
        assert classify_llm_exception(error) is ErrorKind.RATE_LIMITED

    def test_quota_exhausted(self) -> None:
        """Quota markers upgrade a 429 to quota exhausted."""
        error = litellm.RateLimitError(
            message="RESOURCE_EXHAUSTED: Quota exceeded",
            llm_provider="gemini",
            model="gemini-2.5-flash",
        )
        assert classify_llm_exception(error) is ErrorKind.QUOTA_EXHAUSTED

    def test_timeout(self) -> None:
        """Timeouts are network errors."""
        error = litellm.Timeout(
            message="timed out", model="gemini-2.5-flash", llm_provider="gemini"
        )
        assert classify_llm_exception(error) is ErrorKind.NETWORK

    def test_status_code_fallback(self) -> None:
        """Unknown exception types fall back to their status code."""
        error = RuntimeError("boom")
        error.status_code = 503  # type: ignore[attr-defined]
        assert classify_llm_exception(error) is ErrorKind.UNAVAILABLE

    def test_unknown(self) -> None:
        """Anything else is unknown."""
        assert classify_llm_exception(ValueError("boom")) is ErrorKind.UNKNOWN


class TestLLMClientComplete:
    """Test LLMClient.complete."""

    @pytest.mark.asyncio
    async def test_complete_success(self) -> None:
        """Should return a normalized response."""
        client = LLMClient(api_key="test-key")
        config = LLMConfig(model="gemini/gemini-2.5-flash", max_tokens=2000, temperature=0.8)

        with patch(
            "app.infrastructure.llm.acompletion",
            new=AsyncMock(return_value=_completion("Title\nLine")),
        ) as mock_completion:
            response = await client.complete(
                config=config, messages=[{"role": "user", "content": "Hi"}]
            )

        assert isinstance(response, LLMResponse)
        assert response.content == "Title\nLine"
        assert response.usage["total_tokens"] == 15

        kwargs = mock_completion.call_args.kwargs
        assert kwargs["model"] == "gemini/gemini-2.5-flash"
        assert kwargs["max_tokens"] == 2000
        assert kwargs["temperature"] == 0.8
        assert kwargs["api_key"] == "test-key"

    @pytest.mark.asyncio
    async def test_complete_without_api_key(self) -> None:
        """No api_key kwarg is sent when none is configured."""
        client = LLMClient()

        with patch(
            "app.infrastructure.llm.acompletion",
            new=AsyncMock(return_value=_completion("x")),
        ) as mock_completion:
            await client.complete(
                config=LLMConfig(model="gemini/gemini-2.5-flash"),
                messages=[{"role": "user", "content": "Hi"}],
            )

        assert "api_key" not in mock_completion.call_args.kwargs

    @pytest.mark.asyncio
    async def test_complete_none_content(self) -> None:
        """None content becomes an empty string."""
        client = LLMClient()

        with patch(
            "app.infrastructure.llm.acompletion",
            new=AsyncMock(return_value=_completion(None)),
        ):
            response = await client.complete(
                config=LLMConfig(model="gemini/gemini-2.5-flash"),
                messages=[{"role": "user", "content": "Hi"}],
            )

        assert response.content == ""

    @pytest.mark.asyncio
    async def test_complete_wraps_provider_error(self) -> None:
        """Provider failures are raised as classified ExternalAPIError."""
        client = LLMClient()
        error = litellm.RateLimitError(
            message="Too many requests, retry in 12s",
            llm_provider="gemini",
            model="gemini-2.5-flash",
        )

        with (
            patch("app.infrastructure.llm.acompletion", new=AsyncMock(side_effect=error)),
            pytest.raises(ExternalAPIError) as exc_info,
        ):
            await client.complete(
                config=LLMConfig(model="gemini/gemini-2.5-flash"),
                messages=[{"role": "user", "content": "Hi"}],
            )

        assert exc_info.value.kind is ErrorKind.RATE_LIMITED
        assert exc_info.value.__cause__ is error
