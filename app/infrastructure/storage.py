"""Blob storage for sentence audio.

Two backends share the ``AudioStorage`` interface:

- LocalAudioStorage: files under ``local_storage_path/<bucket>/``,
  served by the API at ``public_base_url``
- S3AudioStorage: any S3-compatible bucket (AWS S3, Cloudflare R2, MinIO)

Blocking I/O runs in a worker thread so the event loop stays free.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.core.exceptions import BlobStorageError
from app.core.logging import get_logger

if TYPE_CHECKING:
    from app.core.config import Config

logger = get_logger(__name__)

AUDIO_CACHE_CONTROL = "max-age=3600"


class AudioStorage(ABC):
    """Abstract blob store for audio objects.

    Paths are relative to the audio bucket, e.g.
    ``<channel_id>/<lesson_id>/sentence_0.mp3``.
    """

    @abstractmethod
    async def upload(self, path: str, data: bytes, content_type: str = "audio/mpeg") -> None:
        """Store ``data`` at ``path``, overwriting any existing object.

        Raises:
            BlobStorageError: If the upload fails
        """
        ...

    @abstractmethod
    def public_url(self, path: str) -> str:
        """Public URL of the object at ``path`` (without cache-busting query)."""
        ...

    @abstractmethod
    async def remove(self, paths: Sequence[str]) -> None:
        """Delete the objects at ``paths``.

        Raises:
            BlobStorageError: If any deletion fails
        """
        ...

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check whether an object exists at ``path``."""
        ...


class LocalAudioStorage(AudioStorage):
    """Filesystem-backed audio storage.

    Example:
        >>> storage = LocalAudioStorage("./outputs", "audio-files", "http://localhost:8000/audio")
        >>> await storage.upload("c/l/sentence_0.mp3", b"...")
        >>> storage.public_url("c/l/sentence_0.mp3")
        'http://localhost:8000/audio/c/l/sentence_0.mp3'
    """

    def __init__(self, root: str | Path, bucket: str, public_base_url: str) -> None:
        self.root = Path(root) / bucket
        self.public_base_url = public_base_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if not target.is_relative_to(self.root.resolve()):
            raise BlobStorageError("Path escapes storage root", path=path)
        return target

    async def upload(self, path: str, data: bytes, content_type: str = "audio/mpeg") -> None:
        target = self._resolve(path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            raise BlobStorageError(f"Failed to write audio file: {e}", path=path) from e

        logger.debug("Stored audio file", path=path, size_bytes=len(data))

    def public_url(self, path: str) -> str:
        return f"{self.public_base_url}/{path}"

    async def remove(self, paths: Sequence[str]) -> None:
        failed: list[str] = []

        def _unlink(target: Path) -> None:
            target.unlink(missing_ok=True)

        for path in paths:
            try:
                await asyncio.to_thread(_unlink, self._resolve(path))
            except (OSError, BlobStorageError) as e:
                logger.warning("Failed to remove audio file", path=path, error=str(e))
                failed.append(path)

        if failed:
            raise BlobStorageError(
                f"Failed to remove {len(failed)} of {len(paths)} audio files",
                context={"failed_paths": failed},
            )

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._resolve(path).exists)


class S3AudioStorage(AudioStorage):
    """S3-compatible audio storage using boto3.

    Example:
        >>> storage = S3AudioStorage(
        ...     bucket="audio-files",
        ...     public_base_url="https://cdn.example.com/audio-files",
        ...     endpoint_url="https://<account>.r2.cloudflarestorage.com",
        ...     access_key_id="...",
        ...     secret_access_key="...",
        ... )
    """

    def __init__(
        self,
        bucket: str,
        public_base_url: str,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        region: str = "auto",
        client: Any | None = None,
    ) -> None:
        """Initialize S3AudioStorage.

        Args:
            bucket: Bucket name
            public_base_url: Public URL prefix for objects in the bucket
            endpoint_url: Custom endpoint for S3-compatible services
            access_key_id: Access key
            secret_access_key: Secret key
            region: Region name ("auto" for R2)
            client: Pre-built boto3 S3 client (tests inject a stub)
        """
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")
        self._client = client or boto3.client(
            "s3",
            endpoint_url=endpoint_url or None,
            aws_access_key_id=access_key_id or None,
            aws_secret_access_key=secret_access_key or None,
            region_name=region,
        )

    async def upload(self, path: str, data: bytes, content_type: str = "audio/mpeg") -> None:
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self.bucket,
                Key=path,
                Body=data,
                ContentType=content_type,
                CacheControl=AUDIO_CACHE_CONTROL,
            )
        except (ClientError, BotoCoreError) as e:
            raise BlobStorageError(f"Failed to upload audio: {e}", path=path) from e

        logger.debug("Uploaded audio object", bucket=self.bucket, path=path, size_bytes=len(data))

    def public_url(self, path: str) -> str:
        return f"{self.public_base_url}/{path}"

    async def remove(self, paths: Sequence[str]) -> None:
        if not paths:
            return
        try:
            response = await asyncio.to_thread(
                self._client.delete_objects,
                Bucket=self.bucket,
                Delete={"Objects": [{"Key": p} for p in paths], "Quiet": True},
            )
        except (ClientError, BotoCoreError) as e:
            raise BlobStorageError(f"Failed to remove audio objects: {e}") from e

        errors = response.get("Errors") or []
        if errors:
            raise BlobStorageError(
                f"Failed to remove {len(errors)} of {len(paths)} audio objects",
                context={"failed_paths": [err.get("Key") for err in errors]},
            )

    async def exists(self, path: str) -> bool:
        try:
            await asyncio.to_thread(self._client.head_object, Bucket=self.bucket, Key=path)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise BlobStorageError(f"Failed to check audio object: {e}", path=path) from e
        return True


def create_audio_storage(config: "Config") -> AudioStorage:
    """Build the storage backend selected by ``config.storage_type``."""
    if config.storage_type == "s3":
        public_base_url = config.public_base_url
        if not public_base_url and config.s3_endpoint_url:
            public_base_url = f"{config.s3_endpoint_url.rstrip('/')}/{config.audio_bucket}"
        return S3AudioStorage(
            bucket=config.audio_bucket,
            public_base_url=public_base_url,
            endpoint_url=config.s3_endpoint_url,
            access_key_id=config.s3_access_key_id,
            secret_access_key=config.s3_secret_access_key,
            region=config.s3_region,
        )
    return LocalAudioStorage(
        root=config.local_storage_path,
        bucket=config.audio_bucket,
        public_base_url=config.public_base_url,
    )


__all__ = [
    "AUDIO_CACHE_CONTROL",
    "AudioStorage",
    "LocalAudioStorage",
    "S3AudioStorage",
    "create_audio_storage",
]
