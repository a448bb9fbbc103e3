"""LLM client abstraction using LiteLLM.

Lesson text and translations are generated through LiteLLM so the provider
(Gemini by default) can be switched via config. Provider failures are
re-raised as ``ExternalAPIError`` tagged with an ``ErrorKind`` so the retry
policy never has to interpret provider messages.
"""

from dataclasses import dataclass
from typing import Any

import litellm
from litellm import acompletion

from app.core.exceptions import ErrorKind, ExternalAPIError
from app.core.logging import get_logger
from app.core.retry import retry_hint_seconds

logger = get_logger(__name__)

litellm.drop_params = True  # Drop unsupported params for each provider

_QUOTA_MARKERS = ("RESOURCE_EXHAUSTED", "Quota exceeded")


@dataclass
class LLMConfig:
    """LLM configuration for a specific use case.

    Attributes:
        model: Model identifier (e.g., "gemini/gemini-2.5-flash")
        max_tokens: Maximum tokens in response
        temperature: Sampling temperature
        timeout: Request timeout in seconds
    """

    model: str
    max_tokens: int = 1000
    temperature: float = 0.7
    timeout: int = 60


@dataclass
class LLMResponse:
    """Standardized LLM response.

    Attributes:
        content: Generated text content
        model: Model used for generation
        usage: Token usage statistics
        raw_response: Raw response from provider
    """

    content: str
    model: str
    usage: dict[str, int]
    raw_response: Any = None


def classify_llm_exception(error: Exception) -> ErrorKind:
    """Map a LiteLLM exception to an error kind.

    Args:
        error: Exception raised by ``acompletion``

    Returns:
        ErrorKind for the failure
    """
    if isinstance(error, litellm.AuthenticationError | litellm.PermissionDeniedError):
        return ErrorKind.AUTHORIZATION
    if isinstance(error, litellm.NotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(error, litellm.BadRequestError):
        return ErrorKind.VALIDATION
    if isinstance(error, litellm.RateLimitError):
        if any(marker in str(error) for marker in _QUOTA_MARKERS):
            return ErrorKind.QUOTA_EXHAUSTED
        return ErrorKind.RATE_LIMITED
    if isinstance(error, litellm.Timeout | litellm.APIConnectionError):
        return ErrorKind.NETWORK
    if isinstance(error, litellm.ServiceUnavailableError | litellm.InternalServerError):
        return ErrorKind.UNAVAILABLE

    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        return ErrorKind.from_status(status_code)
    return ErrorKind.UNKNOWN


class LLMClient:
    """Unified LLM client using LiteLLM.

    Model naming convention:
        - Gemini: "gemini/gemini-2.5-flash"
        - OpenAI: "openai/gpt-4o"
        - Anthropic: "anthropic/claude-3-5-haiku-20241022"

    Example:
        >>> client = LLMClient(api_key="...")
        >>> response = await client.complete(
        ...     config=LLMConfig(model="gemini/gemini-2.5-flash"),
        ...     messages=[{"role": "user", "content": "Hello!"}]
        ... )
        >>> print(response.content)
    """

    def __init__(self, api_key: str | None = None) -> None:
        """Initialize LLM client.

        Args:
            api_key: Provider API key (falls back to LiteLLM's environment lookup)
        """
        self._api_key = api_key or None
        logger.info("LLMClient initialized", has_api_key=bool(self._api_key))

    async def complete(
        self,
        config: LLMConfig,
        messages: list[dict[str, str]],
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate completion from LLM.

        Args:
            config: LLM configuration
            messages: List of message dicts with 'role' and 'content'
            **kwargs: Additional parameters passed to the model

        Returns:
            LLMResponse with generated content

        Raises:
            ExternalAPIError: If the provider call fails (tagged with ErrorKind)
        """
        if self._api_key:
            kwargs.setdefault("api_key", self._api_key)

        logger.debug(
            "LLM request",
            model=config.model,
            max_tokens=config.max_tokens,
            message_count=len(messages),
        )

        try:
            response = await acompletion(
                model=config.model,
                messages=messages,
                max_tokens=config.max_tokens,
                temperature=config.temperature,
                timeout=config.timeout,
                **kwargs,
            )
        except Exception as e:
            kind = classify_llm_exception(e)
            logger.warning(
                "LLM request failed",
                model=config.model,
                kind=kind.value,
                error=str(e),
            )
            raise ExternalAPIError(
                service="llm",
                message=str(e),
                kind=kind,
                status_code=getattr(e, "status_code", None),
                endpoint=config.model,
                retry_after=retry_hint_seconds(e),
            ) from e

        content = response.choices[0].message.content or ""

        usage = {}
        if getattr(response, "usage", None):
            usage = {
                "prompt_tokens": response.usage.prompt_tokens or 0,
                "completion_tokens": response.usage.completion_tokens or 0,
                "total_tokens": response.usage.total_tokens or 0,
            }

        logger.debug(
            "LLM response",
            model=response.model,
            content_length=len(content),
            usage=usage,
        )

        return LLMResponse(
            content=content,
            model=response.model or config.model,
            usage=usage,
            raw_response=response,
        )


__all__ = [
    "LLMClient",
    "LLMConfig",
    "LLMResponse",
    "classify_llm_exception",
]
