from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

from dolphin_parser.config import Settings, settings
from dolphin_parser.core.errors import ConfigurationError
from dolphin_parser.logging_utils import log_timing

try:
    from minio import Minio
except ImportError:  # pragma: no cover - optional dependency
    Minio = None  # type: ignore

logger = logging.getLogger(__name__)


def _minio_endpoint_parts(endpoint: str) -> tuple[str, bool]:
    parsed = urlparse(endpoint)
    if parsed.scheme:
        host = parsed.netloc or parsed.path
        secure = parsed.scheme == "https"
    else:
        host = endpoint
        secure = endpoint.startswith("https")
    return host, secure


def _ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


class StorageDisk:
    """A named place to put downloaded archives, addressed by relative path."""

    name = "local"

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path(self, relative_path: str) -> Path:
        """Absolute path for ``relative_path``; it must stay inside the disk root."""
        root = self.root.resolve()
        target = (root / relative_path.strip("/")).resolve()
        if root not in target.parents:
            raise ValueError(f"Path {relative_path!r} escapes the {self.name} disk root")
        return target

    def put(self, relative_path: str, data: bytes) -> Path:
        target = self.path(relative_path)
        _ensure_dir(target.parent)
        with log_timing(logger, f"Writing {relative_path} to {self.name} disk"):
            target.write_bytes(data)
        logger.info("Stored %d bytes at %s", len(data), target)
        return target


class LocalDisk(StorageDisk):
    name = "local"


class MinioDisk(StorageDisk):
    """Local disk that mirrors every written file into a MinIO bucket."""

    name = "minio"

    def __init__(self, root: Path, client: Optional[Any], bucket: str) -> None:
        super().__init__(root)
        self.client = client
        self.bucket = bucket
        self._bucket_ready = False

    def _ensure_bucket(self) -> bool:
        if self._bucket_ready:
            return True
        try:
            if not self.client.bucket_exists(self.bucket):
                self.client.make_bucket(self.bucket)
                logger.info("Created MinIO bucket %s", self.bucket)
            self._bucket_ready = True
            return True
        except Exception as exc:  # pragma: no cover - network failure
            logger.error("Failed to ensure MinIO bucket %s: %s", self.bucket, exc)
            return False

    def put(self, relative_path: str, data: bytes) -> Path:
        target = super().put(relative_path, data)
        if self.client is None or not self._ensure_bucket():
            return target
        object_name = relative_path.strip("/")
        try:
            self.client.fput_object(self.bucket, object_name, str(target))
            logger.info("Synced %s to MinIO as %s", target, object_name)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Failed to sync %s to MinIO: %s", target, exc)
        return target


def _build_minio_client(source: Settings) -> Optional[Any]:
    if Minio is None:
        logger.warning("MinIO disk selected but 'minio' package is not installed")
        return None
    if not source.minio_access_key or not source.minio_secret_key:
        logger.warning("MinIO disk selected but credentials are missing")
        return None
    host, secure = _minio_endpoint_parts(source.minio_endpoint)
    client = Minio(
        host,
        access_key=source.minio_access_key,
        secret_key=source.minio_secret_key,
        secure=secure,
    )
    logger.info("Initialized MinIO client for %s (secure=%s)", host, secure)
    return client


def get_disk(name: str, root: Path, source: Settings | None = None) -> StorageDisk:
    source = source or settings
    disk_name = (name or "local").lower()
    if disk_name == "local":
        return LocalDisk(root)
    if disk_name == "minio":
        return MinioDisk(root, _build_minio_client(source), source.minio_bucket)
    raise ConfigurationError.unknown_disk(name)
