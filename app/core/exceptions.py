"""Custom exceptions for ShadowCast application.

This module defines all custom exceptions used throughout the application.
All exceptions inherit from ShadowCastError for easy catching.

Exception classes include context dictionaries for structured logging
and debugging. Use the `context` property to access additional details.
"""

import enum
from typing import Any


class ErrorKind(str, enum.Enum):
    """Classification of a failed external call.

    Set by the client that observed the failure (HTTP status or provider
    exception type) so retry decisions never depend on message wording.
    """

    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    QUOTA_EXHAUSTED = "quota_exhausted"
    UNAVAILABLE = "unavailable"
    NETWORK = "network"
    UNKNOWN = "unknown"

    @property
    def is_retryable(self) -> bool:
        """Whether a call failing with this kind may succeed if repeated."""
        return self in _RETRYABLE_KINDS

    @property
    def is_fatal(self) -> bool:
        """Whether a call failing with this kind must never be repeated."""
        return self in _FATAL_KINDS

    @property
    def is_throttle(self) -> bool:
        """Whether the provider asked us to slow down."""
        return self in (ErrorKind.RATE_LIMITED, ErrorKind.QUOTA_EXHAUSTED)

    @classmethod
    def from_status(cls, status_code: int) -> "ErrorKind":
        """Map an HTTP status code to an error kind.

        Args:
            status_code: HTTP response status

        Returns:
            Matching ErrorKind (UNKNOWN for unmapped codes)
        """
        if status_code in (401, 403):
            return cls.AUTHORIZATION
        if status_code == 400:
            return cls.VALIDATION
        if status_code == 404:
            return cls.NOT_FOUND
        if status_code == 408:
            return cls.NETWORK
        if status_code == 429:
            return cls.RATE_LIMITED
        if status_code in (500, 502, 503, 504):
            return cls.UNAVAILABLE
        return cls.UNKNOWN


_RETRYABLE_KINDS = frozenset(
    {
        ErrorKind.RATE_LIMITED,
        ErrorKind.QUOTA_EXHAUSTED,
        ErrorKind.UNAVAILABLE,
        ErrorKind.NETWORK,
    }
)
_FATAL_KINDS = frozenset({ErrorKind.AUTHORIZATION, ErrorKind.VALIDATION, ErrorKind.NOT_FOUND})


class ShadowCastError(Exception):
    """Base exception for all ShadowCast errors.

    All custom exceptions in the application should inherit from this class.
    Provides a context dictionary for structured error information.

    Attributes:
        context: Dictionary with additional error context

    Example:
        >>> try:
        ...     raise ShadowCastError("Something went wrong", context={"series_id": "123"})
        ... except ShadowCastError as e:
        ...     print(f"Error: {e}, Context: {e.context}")
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize ShadowCastError.

        Args:
            message: Error message
            context: Optional dictionary with additional context
        """
        self.context = context or {}
        super().__init__(message)

    def with_context(self, **kwargs: Any) -> "ShadowCastError":
        """Add additional context to the exception.

        Args:
            **kwargs: Key-value pairs to add to context

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization.

        Returns:
            Dictionary with error type, message, and context
        """
        return {
            "error_type": self.__class__.__name__,
            "message": str(self),
            "context": self.context,
        }


# ============================================
# Database Errors
# ============================================


class DatabaseError(ShadowCastError):
    """Base exception for database-related errors."""

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        operation: str | None = None,
    ) -> None:
        """Initialize DatabaseError.

        Args:
            message: Error message
            context: Additional context
            operation: Database operation that failed (e.g., "insert", "update")
        """
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        super().__init__(message, context=ctx)


class RecordNotFoundError(DatabaseError):
    """Raised when a database record is not found.

    Attributes:
        model: The model class that was queried
        record_id: The ID that was not found
    """

    def __init__(
        self,
        model: str,
        record_id: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        ctx.update({"model": model, "record_id": record_id})
        super().__init__(f"{model} with id={record_id} not found", context=ctx)
        self.model = model
        self.record_id = record_id


class RecordAlreadyExistsError(DatabaseError):
    """Raised when attempting to create a duplicate record.

    Attributes:
        model: The model class
        field: Field that caused the conflict
        value: Value that already exists
    """

    def __init__(
        self,
        model: str,
        field: str,
        value: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        ctx.update({"model": model, "field": field, "value": value})
        super().__init__(
            f"{model} with {field}={value} already exists",
            context=ctx,
        )
        self.model = model
        self.field = field
        self.value = value


# ============================================
# Configuration Errors
# ============================================


class ConfigError(ShadowCastError):
    """Base exception for configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigError.

        Args:
            message: Error message
            config_path: Path to the config file/key
            context: Additional context
        """
        ctx = context or {}
        if config_path:
            ctx["config_path"] = config_path
        super().__init__(message, context=ctx)


class ConfigValidationError(ConfigError):
    """Raised when configuration validation fails.

    Supports two usage patterns:
    1. Simple: ConfigValidationError("error message")
    2. Structured: ConfigValidationError(field="name", value="x", reason="invalid")

    Attributes:
        field: Field that failed validation (optional)
        value: Invalid value (optional)
        reason: Validation failure reason (optional)
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        field: str | None = None,
        value: Any = None,
        reason: str | None = None,
        config_path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}

        self.field = field
        self.value = value
        self.reason = reason

        if field and reason:
            ctx.update({"field": field, "reason": reason})
            if value is not None:
                ctx["value"] = str(value)
            final_message = f"Config validation failed for '{field}': {reason}"
        elif message:
            final_message = message
        else:
            final_message = "Configuration validation failed"

        super().__init__(final_message, config_path=config_path, context=ctx)


class ConfigNotFoundError(ConfigError):
    """Raised when a required configuration value is missing.

    Attributes:
        config_key: The configuration key that was not found
    """

    def __init__(
        self,
        config_key: str,
        config_path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        ctx["config_key"] = config_key
        super().__init__(
            f"Configuration '{config_key}' not found",
            config_path=config_path,
            context=ctx,
        )
        self.config_key = config_key


# ============================================
# Service Errors
# ============================================


class ServiceError(ShadowCastError):
    """Base exception for service-related errors."""

    def __init__(
        self,
        message: str,
        service_name: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if service_name:
            ctx["service_name"] = service_name
        super().__init__(message, context=ctx)


class ExternalAPIError(ServiceError):
    """Raised when an external API call fails.

    Attributes:
        service: Name of the external service
        kind: Classification used by the retry policy
        status_code: HTTP status code (if applicable)
        endpoint: API endpoint that was called
        retry_after: Provider-suggested wait in seconds (if any)
    """

    def __init__(
        self,
        service: str,
        message: str,
        kind: ErrorKind | None = None,
        status_code: int | None = None,
        endpoint: str | None = None,
        response_body: str | None = None,
        retry_after: float | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ExternalAPIError.

        Args:
            service: Name of the external service
            message: Error message
            kind: Error classification (derived from status_code when omitted)
            status_code: HTTP status code (optional)
            endpoint: API endpoint (optional)
            response_body: Response body for debugging (optional)
            retry_after: Provider-suggested wait in seconds (optional)
            context: Additional context
        """
        if kind is None:
            kind = ErrorKind.from_status(status_code) if status_code else ErrorKind.UNKNOWN

        ctx = context or {}
        ctx["service"] = service
        ctx["kind"] = kind.value
        if status_code is not None:
            ctx["status_code"] = status_code
        if endpoint:
            ctx["endpoint"] = endpoint
        if response_body:
            ctx["response_body"] = response_body[:500]  # Truncate long responses
        if retry_after is not None:
            ctx["retry_after"] = retry_after

        self.service = service
        self.kind = kind
        self.status_code = status_code
        self.endpoint = endpoint
        self.retry_after = retry_after

        super().__init__(f"{service} API error: {message}", service_name=service, context=ctx)


# ============================================
# Content Errors
# ============================================


class ContentError(ShadowCastError):
    """Base exception for lesson text errors."""

    def __init__(
        self,
        message: str,
        content_type: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ContentError.

        Args:
            message: Error message
            content_type: Type of content (e.g., "passage", "translation")
            context: Additional context
        """
        ctx = context or {}
        if content_type:
            ctx["content_type"] = content_type
        super().__init__(message, context=ctx)


class ContentGenerationError(ContentError):
    """Raised when passage generation fails.

    Attributes:
        stage: Generation stage that failed
        model: Model used for generation
    """

    def __init__(
        self,
        message: str,
        stage: str | None = None,
        model: str | None = None,
        content_type: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ContentGenerationError.

        Args:
            message: Error message
            stage: Generation stage (e.g., "prompt", "inference", "parsing")
            model: Model used
            content_type: Type of content
            context: Additional context
        """
        ctx = context or {}
        if stage:
            ctx["stage"] = stage
        if model:
            ctx["model"] = model

        self.stage = stage
        self.model = model

        super().__init__(message, content_type=content_type, context=ctx)


class GenerationEmptyError(ContentGenerationError):
    """Raised when the text model returns no text."""

    def __init__(self, model: str | None = None, context: dict[str, Any] | None = None) -> None:
        super().__init__(
            "No content generated",
            stage="inference",
            model=model,
            content_type="passage",
            context=context,
        )


class ParseEmptyError(ContentGenerationError):
    """Raised when generated text yields no usable lines after parsing."""

    def __init__(self, model: str | None = None, context: dict[str, Any] | None = None) -> None:
        super().__init__(
            "No valid content lines generated",
            stage="parsing",
            model=model,
            content_type="passage",
            context=context,
        )


class TranslationError(ContentError):
    """Raised when translating a passage fails.

    Attributes:
        language: Target language code
    """

    def __init__(
        self,
        message: str,
        language: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        ctx["language"] = language
        self.language = language
        super().__init__(message, content_type="translation", context=ctx)


# ============================================
# Audio Errors
# ============================================


class AudioError(ShadowCastError):
    """Base exception for sentence audio errors."""

    def __init__(
        self,
        message: str,
        line_index: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize AudioError.

        Args:
            message: Error message
            line_index: Zero-based index of the sentence being voiced
            context: Additional context
        """
        ctx = context or {}
        if line_index is not None:
            ctx["line_index"] = line_index
        self.line_index = line_index
        super().__init__(message, context=ctx)


class TTSError(AudioError):
    """Raised when speech synthesis fails.

    Attributes:
        engine: TTS engine that failed
        voice_id: Voice being used
    """

    def __init__(
        self,
        message: str,
        engine: str | None = None,
        voice_id: str | None = None,
        line_index: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize TTSError.

        Args:
            message: Error message
            engine: TTS engine name
            voice_id: Voice name
            line_index: Sentence index
            context: Additional context
        """
        ctx = context or {}
        if engine:
            ctx["engine"] = engine
        if voice_id:
            ctx["voice_id"] = voice_id

        self.engine = engine
        self.voice_id = voice_id

        super().__init__(message, line_index=line_index, context=ctx)


# ============================================
# Storage Errors
# ============================================


class StorageError(ShadowCastError):
    """Base exception for persistence of lesson artifacts."""


class BlobStorageError(StorageError):
    """Raised when uploading or removing an audio object fails.

    Attributes:
        path: Object path within the audio bucket
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if path:
            ctx["path"] = path
        self.path = path
        super().__init__(message, context=ctx)


class LessonPersistError(StorageError):
    """Raised when a lesson transaction fails and has been rolled back.

    Rollback failures do not replace the original error; they are appended
    to the message and kept in ``cleanup_errors``.

    Attributes:
        lesson_id: Lesson row that was being written (if created)
        cleanup_errors: Messages of rollback steps that failed
    """

    def __init__(
        self,
        message: str,
        lesson_id: str | None = None,
        cleanup_errors: list[str] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if lesson_id:
            ctx["lesson_id"] = lesson_id
        self.lesson_id = lesson_id
        self.cleanup_errors = list(cleanup_errors or [])
        if self.cleanup_errors:
            ctx["cleanup_errors"] = self.cleanup_errors
            message = f"{message}. Cleanup errors: {'; '.join(self.cleanup_errors)}"
        super().__init__(message, context=ctx)


# ============================================
# Authentication Errors
# ============================================


class AuthError(ShadowCastError):
    """Base exception for authentication errors."""

    def __init__(
        self,
        message: str,
        service: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if service:
            ctx["service"] = service
        super().__init__(message, context=ctx)


class InvalidCredentialsError(AuthError):
    """Raised when credentials are missing or malformed."""

    def __init__(
        self,
        service: str,
        message: str = "Invalid credentials",
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"{service}: {message}", service=service, context=context)


__all__ = [
    "ErrorKind",
    "ShadowCastError",
    "DatabaseError",
    "RecordNotFoundError",
    "RecordAlreadyExistsError",
    "ConfigError",
    "ConfigValidationError",
    "ConfigNotFoundError",
    "ServiceError",
    "ExternalAPIError",
    "ContentError",
    "ContentGenerationError",
    "GenerationEmptyError",
    "ParseEmptyError",
    "TranslationError",
    "AudioError",
    "TTSError",
    "StorageError",
    "BlobStorageError",
    "LessonPersistError",
    "AuthError",
    "InvalidCredentialsError",
]
