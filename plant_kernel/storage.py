"""
Module: plant_kernel.storage
Responsibility: Bucket-style file storage used for QA evidence and template
    files.  Services depend on the ``FileStorage`` protocol; the bundled
    ``LocalFileStorage`` keeps buckets as directories under a root path and
    hands out public URLs under a configurable base URL.
Architecture position: Kernel.  No imports from plant_modules.

Failure modes:
    - FileUploadError when the target already exists (no upsert) or the
      write fails.
    - FileDeleteError when the object is missing or cannot be removed.
    - InvalidFileUrlError when a URL does not contain ``{bucket}/``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from plant_kernel.exceptions import (
    FileDeleteError,
    FileUploadError,
    InvalidFileUrlError,
)
from plant_kernel.logging_config import get_logger

logger = get_logger("storage")


@runtime_checkable
class FileStorage(Protocol):
    """
    Protocol for a bucketed object store.

    Paths are bucket-relative, slash separated (``lot/test/photos/x.jpg``).
    """

    def upload(self, bucket: str, path: str, content: bytes) -> str: ...

    def public_url(self, bucket: str, path: str) -> str: ...

    def remove(self, bucket: str, paths: list[str]) -> None: ...


def path_from_url(bucket: str, url: str) -> str:
    """Return the bucket-relative path embedded in a public URL."""
    marker = f"{bucket}/"
    parts = url.split(marker, 1)
    if len(parts) < 2 or not parts[1]:
        raise InvalidFileUrlError(bucket, url)
    return parts[1]


class LocalFileStorage:
    """
    Filesystem-backed ``FileStorage``.

    Each bucket is a directory below ``root``; ``public_url`` joins
    ``base_url``, bucket and path.
    """

    def __init__(self, root: str | Path, base_url: str = "file://storage"):
        self._root = Path(root)
        self._base_url = base_url.rstrip("/")

    def _resolve(self, bucket: str, path: str) -> Path:
        target = (self._root / bucket / path).resolve()
        bucket_root = (self._root / bucket).resolve()
        if bucket_root not in target.parents:
            raise InvalidFileUrlError(bucket, path)
        return target

    def upload(self, bucket: str, path: str, content: bytes) -> str:
        target = self._resolve(bucket, path)
        if target.exists():
            raise FileUploadError(bucket, path, "object already exists")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as exc:
            raise FileUploadError(bucket, path, str(exc)) from exc

        logger.info(
            "file_uploaded",
            extra={"bucket": bucket, "path": path, "size_bytes": len(content)},
        )
        return path

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self._base_url}/{bucket}/{path}"

    def remove(self, bucket: str, paths: list[str]) -> None:
        for path in paths:
            target = self._resolve(bucket, path)
            try:
                target.unlink()
            except FileNotFoundError as exc:
                raise FileDeleteError(bucket, path, "object not found") from exc
            except OSError as exc:
                raise FileDeleteError(bucket, path, str(exc)) from exc
            logger.info("file_removed", extra={"bucket": bucket, "path": path})

    def exists(self, bucket: str, path: str) -> bool:
        return self._resolve(bucket, path).exists()
