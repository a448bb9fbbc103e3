"""Google service-account access tokens for the speech-synthesis API.

The service account JSON is turned into a signed JWT assertion with
google-auth and exchanged for an OAuth2 access token. Tokens are held by an
explicit ``AccessTokenCache`` object that the TTS engine receives through
dependency injection.
"""

import asyncio
import json
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from google.auth import crypt, jwt

from app.core.exceptions import ErrorKind, ExternalAPIError, InvalidCredentialsError
from app.core.logging import get_logger
from app.core.types import Clock
from app.infrastructure.http_client import HTTPClient

logger = get_logger(__name__)

TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME_SECONDS = 3600
# Tokens are treated as expired this long before the provider says so
EXPIRY_SAFETY_MARGIN_SECONDS = 300


@dataclass(frozen=True)
class AccessToken:
    """OAuth2 access token.

    Attributes:
        token: Bearer token value
        expires_in: Lifetime in seconds as reported by the token endpoint
    """

    token: str
    expires_in: int


def parse_service_account(credentials_json: str) -> dict[str, Any]:
    """Parse and validate service account JSON.

    Args:
        credentials_json: Raw service account JSON

    Returns:
        Parsed credentials dictionary

    Raises:
        InvalidCredentialsError: If the JSON is missing, malformed or incomplete
    """
    if not credentials_json:
        raise InvalidCredentialsError(
            "google-tts", "GOOGLE_TTS_CREDENTIALS environment variable is not set"
        )

    try:
        info = json.loads(credentials_json)
    except json.JSONDecodeError as e:
        raise InvalidCredentialsError("google-tts", "Invalid service account JSON format") from e

    if not isinstance(info, dict) or not info.get("client_email") or not info.get("private_key"):
        raise InvalidCredentialsError(
            "google-tts", "Invalid credentials: missing client_email or private_key"
        )
    return info


class ServiceAccountTokenProvider:
    """Exchange a service-account JWT for an access token.

    Example:
        >>> provider = ServiceAccountTokenProvider(config.google_tts_credentials, http_client)
        >>> token = await provider.fetch()
    """

    def __init__(
        self,
        credentials_json: str,
        http_client: HTTPClient,
        token_endpoint: str = TOKEN_ENDPOINT,
        scope: str = CLOUD_PLATFORM_SCOPE,
        clock: Clock = time.time,
    ) -> None:
        self._credentials_json = credentials_json
        self._http_client = http_client
        self._token_endpoint = token_endpoint
        self._scope = scope
        self._clock = clock

    def build_assertion(self) -> str:
        """Build the signed JWT assertion.

        Returns:
            Encoded JWT string

        Raises:
            InvalidCredentialsError: If the credentials cannot be used for signing
        """
        info = parse_service_account(self._credentials_json)
        try:
            signer = crypt.RSASigner.from_service_account_info(info)
        except ValueError as e:
            raise InvalidCredentialsError("google-tts", f"Unusable private key: {e}") from e

        now = int(self._clock())
        payload = {
            "iss": info["client_email"],
            "scope": self._scope,
            "aud": self._token_endpoint,
            "iat": now,
            "exp": now + ASSERTION_LIFETIME_SECONDS,
        }
        assertion = jwt.encode(signer, payload)
        return assertion.decode("utf-8") if isinstance(assertion, bytes) else assertion

    async def fetch(self) -> AccessToken:
        """Request a fresh access token.

        Returns:
            AccessToken from the token endpoint

        Raises:
            InvalidCredentialsError: If the credentials are unusable
            ExternalAPIError: If the token endpoint rejects the request
        """
        assertion = self.build_assertion()

        response = await self._http_client.post(
            self._token_endpoint,
            data={"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

        if response.status_code >= 400:
            kind = ErrorKind.from_status(response.status_code)
            if kind is ErrorKind.VALIDATION:
                # invalid_grant: the assertion itself was rejected
                kind = ErrorKind.AUTHORIZATION
            raise ExternalAPIError(
                service="google-oauth",
                message=f"Failed to exchange JWT for access token: {response.status_code}",
                kind=kind,
                status_code=response.status_code,
                endpoint=self._token_endpoint,
                response_body=response.text,
            )

        data = response.json()
        token = data.get("access_token")
        if not token:
            raise ExternalAPIError(
                service="google-oauth",
                message="Token response did not contain access_token",
                kind=ErrorKind.AUTHORIZATION,
                endpoint=self._token_endpoint,
            )
        return AccessToken(token=token, expires_in=int(data.get("expires_in", 3600)))


class AccessTokenCache:
    """Cached access token with lazy refresh.

    Holds one ``(token, expires_at)`` pair. ``get_or_refresh()`` returns the
    cached token while it is valid and otherwise fetches a new one; the
    refresh is serialized by a lock so concurrent callers share one fetch.

    Attributes:
        safety_margin: Seconds subtracted from the reported lifetime
    """

    def __init__(
        self,
        fetch_token: Callable[[], Awaitable[AccessToken]],
        safety_margin: float = EXPIRY_SAFETY_MARGIN_SECONDS,
        clock: Clock = time.time,
    ) -> None:
        """Initialize AccessTokenCache.

        Args:
            fetch_token: Coroutine factory returning a fresh AccessToken
            safety_margin: Seconds of lifetime to discard
            clock: Wall clock returning seconds
        """
        self._fetch_token = fetch_token
        self.safety_margin = safety_margin
        self._clock = clock
        self._token: str | None = None
        self._expires_at: float = 0.0
        self._lock = asyncio.Lock()

    @property
    def is_valid(self) -> bool:
        """Whether a cached token exists and has not expired."""
        return self._token is not None and self._expires_at > self._clock()

    async def get_or_refresh(self) -> str:
        """Return a valid access token, refreshing it if needed.

        Returns:
            Bearer token value
        """
        if self.is_valid:
            logger.debug(
                "Using cached access token",
                expires_in_seconds=int(self._expires_at - self._clock()),
            )
            return self._token  # type: ignore[return-value]

        async with self._lock:
            # Another caller may have refreshed while we waited
            if self.is_valid:
                return self._token  # type: ignore[return-value]

            logger.info("Access token expired or not cached, fetching new token")
            fresh = await self._fetch_token()
            self._token = fresh.token
            self._expires_at = self._clock() + fresh.expires_in - self.safety_margin
            logger.info(
                "Access token refreshed",
                expires_in_seconds=fresh.expires_in,
                usable_for_seconds=max(int(self._expires_at - self._clock()), 0),
            )
            return self._token

    def clear(self) -> None:
        """Drop the cached token so the next call refreshes."""
        self._token = None
        self._expires_at = 0.0
        logger.debug("Access token cache cleared")


__all__ = [
    "AccessToken",
    "AccessTokenCache",
    "ServiceAccountTokenProvider",
    "parse_service_account",
]
