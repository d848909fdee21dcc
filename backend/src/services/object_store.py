"""Filesystem-backed object storage with durable URLs."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import json
import logging
import mimetypes
from pathlib import Path
import secrets
import time
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import quote, unquote

from ..models.storage import FileMetadata, UploadProgress, UploadState
from .config import AppConfig, get_config

logger = logging.getLogger(__name__)

INVALID_PATH_CHARS = {"<", ">", ":", '"', "|", "?", "*", "\x00"}
META_DIR = ".meta"
DEFAULT_CHUNK_SIZE = 256 * 1024
DEFAULT_CONTENT_TYPE = "application/octet-stream"

ProgressCallback = Callable[[UploadProgress], None]


class ObjectStoreError(Exception):
    """Raised when an object cannot be written, read or removed."""


class ObjectNotFoundError(ObjectStoreError):
    """Raised when no object exists at a path."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Object not found: {path}")
        self.path = path


class UploadCanceledError(ObjectStoreError):
    """Raised when an upload is canceled through its control handle."""


class UploadControl:
    """Pause, resume or cancel an in-flight ``upload_with_progress`` call."""

    def __init__(self) -> None:
        self._resumed = asyncio.Event()
        self._resumed.set()
        self.canceled = False

    @property
    def paused(self) -> bool:
        return not self._resumed.is_set()

    def pause(self) -> None:
        self._resumed.clear()

    def resume(self) -> None:
        self._resumed.set()

    def cancel(self) -> None:
        self.canceled = True
        self._resumed.set()

    async def wait_until_resumed(self) -> None:
        await self._resumed.wait()


def validate_object_path(path: str) -> Tuple[bool, str]:
    """
    Validate a relative object path.

    Returns (is_valid, message). Message is empty when valid.
    """
    if not path or len(path) > 512:
        return False, "Path must be 1-512 characters"
    if ".." in path.split("/"):
        return False, "Path must not contain '..'"
    if "\\" in path:
        return False, "Path must use Unix separators (/)"
    if path.startswith("/"):
        return False, "Path must be relative (no leading /)"
    if path.endswith("/"):
        return False, "Path must name a file"
    if path.split("/", 1)[0] == META_DIR:
        return False, "Path is reserved"
    if any(char in INVALID_PATH_CHARS for char in path):
        return False, "Path contains invalid characters"
    return True, ""


def timestamp_ms() -> int:
    return int(time.time() * 1000)


def random_suffix() -> str:
    return secrets.token_hex(5)


def _percentage(done: int, total: int) -> float:
    if total <= 0:
        return 100.0
    return round(done / total * 100, 2)


class ObjectStore:
    """Binary blobs addressed by path under ``<DATA_DIR>/storage``."""

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or get_config()
        self.root = self.config.storage_path.resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self.files_base_url = f"{self.config.public_base_url}/files/"

    # ------------------------------------------------------------------
    # Path helpers
    # ------------------------------------------------------------------

    def resolve_path(self, path: str) -> Path:
        """Validate ``path`` and resolve it inside the storage root."""
        is_valid, message = validate_object_path(path)
        if not is_valid:
            raise ValueError(message)
        full_path = (self.root / path).resolve()
        if not str(full_path).startswith(str(self.root) + "/"):
            raise ValueError(f"Path escapes storage root: {path}")
        return full_path

    def _meta_path(self, path: str) -> Path:
        return self.root / META_DIR / f"{path}.json"

    def _require(self, path: str) -> Path:
        full_path = self.resolve_path(path)
        if not full_path.is_file():
            raise ObjectNotFoundError(path)
        return full_path

    def url_for(self, path: str) -> str:
        return self.files_base_url + quote(path)

    def is_durable_url(self, url: Optional[str]) -> bool:
        return bool(url) and url.startswith(self.files_base_url)

    def path_from_url(self, url: str) -> Optional[str]:
        """Return the object path behind a durable URL, ``None`` for foreign URLs."""
        if not self.is_durable_url(url):
            return None
        return unquote(url[len(self.files_base_url):].split("?", 1)[0])

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upload(
        self,
        data: bytes,
        path: str,
        metadata: Optional[Dict[str, str]] = None,
        content_type: Optional[str] = None,
    ) -> str:
        """Write ``data`` to ``path`` (overwriting) and return its durable URL."""
        full_path = self.resolve_path(path)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_bytes(data)
            self._write_meta(path, content_type, metadata)
        except OSError as exc:
            logger.error(f"Failed to store object {path}: {exc}")
            raise ObjectStoreError(f"Failed to store object: {exc}") from exc

        logger.info("Stored object", extra={"path": path, "bytes": len(data)})
        return self.url_for(path)

    async def upload_with_progress(
        self,
        data: bytes,
        path: str,
        on_progress: Optional[ProgressCallback] = None,
        metadata: Optional[Dict[str, str]] = None,
        content_type: Optional[str] = None,
        control: Optional[UploadControl] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> str:
        """
        Chunked upload reporting progress after every chunk.

        Resolves with the durable URL only on success. Cancellation removes the
        partial object and raises ``UploadCanceledError``; I/O failures report the
        ``error`` state and raise ``ObjectStoreError``.
        """
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        full_path = self.resolve_path(path)
        control = control or UploadControl()
        total = len(data)
        written = 0

        def report(state: UploadState) -> None:
            if on_progress is None:
                return
            on_progress(
                UploadProgress(
                    bytes_transferred=written,
                    total_bytes=total,
                    percentage=_percentage(written, total),
                    state=state,
                )
            )

        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            with full_path.open("wb") as handle:
                while True:
                    if control.paused:
                        report(UploadState.PAUSED)
                        await control.wait_until_resumed()
                    if control.canceled:
                        raise UploadCanceledError(f"Upload canceled: {path}")
                    chunk = data[written:written + chunk_size]
                    handle.write(chunk)
                    written += len(chunk)
                    report(UploadState.RUNNING)
                    if written >= total:
                        break
                    await asyncio.sleep(0)
            self._write_meta(path, content_type, metadata)
        except UploadCanceledError:
            full_path.unlink(missing_ok=True)
            report(UploadState.CANCELED)
            logger.info("Upload canceled", extra={"path": path, "bytes": written})
            raise
        except OSError as exc:
            full_path.unlink(missing_ok=True)
            report(UploadState.ERROR)
            logger.error(f"Upload failed for {path}: {exc}")
            raise ObjectStoreError(f"Failed to store object: {exc}") from exc

        report(UploadState.SUCCESS)
        logger.info("Stored object", extra={"path": path, "bytes": total})
        return self.url_for(path)

    def delete(self, path: str) -> None:
        full_path = self._require(path)
        try:
            full_path.unlink()
            self._meta_path(path).unlink(missing_ok=True)
        except OSError as exc:
            logger.error(f"Failed to delete object {path}: {exc}")
            raise ObjectStoreError(f"Failed to delete object: {exc}") from exc
        logger.info("Deleted object", extra={"path": path})

    def update_metadata(self, path: str, metadata: Dict[str, str]) -> FileMetadata:
        """Replace the custom metadata of an existing object."""
        self._require(path)
        sidecar = self._read_meta(path)
        self._write_meta(path, sidecar.get("contentType"), metadata, sidecar.get("timeCreated"))
        return self.get_metadata(path)

    def _write_meta(
        self,
        path: str,
        content_type: Optional[str],
        metadata: Optional[Dict[str, str]],
        time_created: Optional[str] = None,
    ) -> None:
        resolved_type = content_type or mimetypes.guess_type(path)[0] or DEFAULT_CONTENT_TYPE
        payload = {
            "contentType": resolved_type,
            "customMetadata": {str(key): str(value) for key, value in (metadata or {}).items()},
            "timeCreated": time_created or datetime.now(timezone.utc).isoformat(),
        }
        meta_path = self._meta_path(path)
        meta_path.parent.mkdir(parents=True, exist_ok=True)
        meta_path.write_text(json.dumps(payload), encoding="utf-8")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_url(self, path: str) -> str:
        self._require(path)
        return self.url_for(path)

    def read(self, path: str) -> Tuple[bytes, str]:
        """Return ``(data, content_type)`` for an object."""
        full_path = self._require(path)
        try:
            data = full_path.read_bytes()
        except OSError as exc:
            raise ObjectStoreError(f"Failed to read object: {exc}") from exc
        content_type = self._read_meta(path).get("contentType") or DEFAULT_CONTENT_TYPE
        return data, content_type

    def read_url(self, url: str) -> Tuple[bytes, str]:
        path = self.path_from_url(url)
        if path is None:
            raise ObjectStoreError(f"Not a storage URL: {url}")
        return self.read(path)

    def get_metadata(self, path: str) -> FileMetadata:
        full_path = self._require(path)
        sidecar = self._read_meta(path)
        stat = full_path.stat()
        updated = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        time_created = sidecar.get("timeCreated")
        return FileMetadata(
            name=full_path.name,
            full_path=path,
            size=stat.st_size,
            content_type=sidecar.get("contentType"),
            download_url=self.url_for(path),
            time_created=time_created or updated,
            updated=updated,
            custom_metadata=sidecar.get("customMetadata") or {},
        )

    def list(self, prefix: str) -> List[FileMetadata]:
        """Return the files directly under ``prefix`` (not recursive)."""
        prefix = prefix.strip("/")
        directory = self.resolve_path(prefix) if prefix else self.root
        if not directory.is_dir():
            return []

        files: List[FileMetadata] = []
        for child in sorted(directory.iterdir()):
            if not child.is_file():
                continue
            relative = child.relative_to(self.root).as_posix()
            try:
                files.append(self.get_metadata(relative))
            except ObjectStoreError as exc:
                logger.warning(f"Skipping unreadable object {relative}: {exc}")
        return files

    def _read_meta(self, path: str) -> Dict[str, object]:
        meta_path = self._meta_path(path)
        if not meta_path.exists():
            return {}
        try:
            return json.loads(meta_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning(f"Ignoring unreadable metadata for {path}: {exc}")
            return {}

    # ------------------------------------------------------------------
    # Per-user helpers
    # ------------------------------------------------------------------

    def upload_profile_picture(self, user_id: str, data: bytes, extension: str) -> str:
        path = f"users/{user_id}/profile-picture.{extension.lstrip('.')}"
        return self.upload(data, path, {"userId": user_id, "type": "profile-picture"})

    def upload_user_file(
        self,
        user_id: str,
        data: bytes,
        filename: str,
        category: str = "documents",
        content_type: Optional[str] = None,
    ) -> str:
        path = f"users/{user_id}/{category}/{timestamp_ms()}-{filename}"
        metadata = {
            "userId": user_id,
            "category": category,
            "originalName": filename,
            "uploadedAt": datetime.now(timezone.utc).isoformat(),
        }
        return self.upload(data, path, metadata, content_type)

    def get_user_files(self, user_id: str, category: str = "documents") -> List[FileMetadata]:
        return self.list(f"users/{user_id}/{category}")

    def delete_user_file(self, user_id: str, filename: str, category: str = "documents") -> None:
        self.delete(f"users/{user_id}/{category}/{filename}")

    @staticmethod
    def generate_unique_file_path(user_id: str, filename: str, category: str = "uploads") -> str:
        extension = filename.rsplit(".", 1)[-1] if "." in filename else "bin"
        return f"users/{user_id}/{category}/{timestamp_ms()}-{random_suffix()}.{extension}"


__all__ = [
    "ObjectStore",
    "ObjectStoreError",
    "ObjectNotFoundError",
    "UploadCanceledError",
    "UploadControl",
    "validate_object_path",
    "DEFAULT_CHUNK_SIZE",
]
