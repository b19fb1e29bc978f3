"""Local filesystem blob backend.

This module stores each blob as a file under a data root and keeps
its content type in a JSON sidecar under a parallel metadata tree.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path

from core.constants import (
    KEY_SEPARATOR,
    LOCAL_BLOBS_DIR_NAME,
    LOCAL_METADATA_DIR_NAME,
    LOCAL_METADATA_SUFFIX,
)
from core.errors import BackendFailureError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class LocalBlobStore:
    """Filesystem blob store rooted at a data directory.

    Keys map onto relative paths by splitting on ``/``. Payloads live
    under ``blobs/`` and content types under ``metadata/``.
    """

    def __init__(self, data_root: Path) -> None:
        """Initialize backend directories.

        Args:
            data_root: Root directory owned by this backend.
        """
        self._blobs_root = data_root / LOCAL_BLOBS_DIR_NAME
        self._metadata_root = data_root / LOCAL_METADATA_DIR_NAME
        self._blobs_root.mkdir(parents=True, exist_ok=True)
        self._metadata_root.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        blob_path = self._blob_path(key)
        if not blob_path.is_file():
            return None
        try:
            return blob_path.read_bytes()
        except OSError as error:
            raise BackendFailureError(
                f"Failed to read blob '{key}' at {blob_path}: {error}. "
                "Check filesystem permissions for the data root."
            ) from error

    def get_metadata(self, key: str) -> str | None:
        metadata_path = self._metadata_path(key)
        if not metadata_path.is_file():
            return None
        try:
            payload = json.loads(metadata_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as error:
            raise BackendFailureError(
                f"Failed to read metadata for blob '{key}' at {metadata_path}: {error}. "
                "Remove the corrupt metadata file or rewrite the artifact."
            ) from error
        content_type = payload.get("content_type") if isinstance(payload, dict) else None
        return str(content_type) if content_type else None

    def put(self, key: str, payload: bytes, content_type: str) -> None:
        """Write payload and metadata files.

        Args:
            key: Blob key.
            payload: Raw bytes to store.
            content_type: MIME type to record.

        Raises:
            BackendFailureError: If either file cannot be written.
        """
        blob_path = self._blob_path(key)
        metadata_path = self._metadata_path(key)
        metadata_text = json.dumps({"content_type": content_type}, indent=2) + "\n"
        try:
            with self._lock:
                blob_path.parent.mkdir(parents=True, exist_ok=True)
                metadata_path.parent.mkdir(parents=True, exist_ok=True)
                blob_path.write_bytes(payload)
                metadata_path.write_text(metadata_text, encoding="utf-8")
        except OSError as error:
            raise BackendFailureError(
                f"Failed to write blob '{key}' under {self._blobs_root}: {error}. "
                "Check free disk space and permissions for the data root."
            ) from error

    def list_by_prefix(self, prefix: str) -> list[str]:
        """List keys whose relative blob path starts with prefix.

        The walk starts at the deepest directory the prefix fully names.

        Args:
            prefix: Key prefix.

        Returns:
            Sorted matching keys.

        Raises:
            BackendFailureError: If the directory walk fails.
        """
        scan_root = self._scan_root(prefix)
        keys: list[str] = []
        try:
            if not scan_root.is_dir():
                return []
            for blob_path in scan_root.rglob("*"):
                if not blob_path.is_file():
                    continue
                key = blob_path.relative_to(self._blobs_root).as_posix()
                if key.startswith(prefix):
                    keys.append(key)
        except OSError as error:
            raise BackendFailureError(
                f"Failed to list blobs under {scan_root} for prefix '{prefix}': {error}. "
                "Check filesystem permissions for the data root."
            ) from error
        return sorted(keys)

    def delete(self, key: str, ignore_absent: bool = True) -> None:
        """Remove payload and metadata files for a key.

        Args:
            key: Blob key.
            ignore_absent: Treat a missing key as success when True.

        Raises:
            BackendFailureError: If removal fails or key is missing and not ignored.
        """
        blob_path = self._blob_path(key)
        metadata_path = self._metadata_path(key)
        try:
            with self._lock:
                blob_path.unlink(missing_ok=ignore_absent)
                metadata_path.unlink(missing_ok=True)
                _prune_empty_parents(blob_path.parent, self._blobs_root)
                _prune_empty_parents(metadata_path.parent, self._metadata_root)
        except FileNotFoundError as error:
            raise BackendFailureError(
                f"Cannot delete blob '{key}': no file at {blob_path}. "
                "List keys before deleting or pass ignore_absent=True."
            ) from error
        except OSError as error:
            raise BackendFailureError(
                f"Failed to delete blob '{key}' at {blob_path}: {error}. "
                "Check filesystem permissions for the data root."
            ) from error
        _LOGGER.debug("local_blob_deleted", key=key)

    def _blob_path(self, key: str) -> Path:
        return self._blobs_root.joinpath(*_key_parts(key))

    def _metadata_path(self, key: str) -> Path:
        parts = _key_parts(key)
        parts[-1] = parts[-1] + LOCAL_METADATA_SUFFIX
        return self._metadata_root.joinpath(*parts)

    def _scan_root(self, prefix: str) -> Path:
        """Return the deepest directory named by the complete prefix segments."""
        segments = prefix.split(KEY_SEPARATOR)[:-1]
        if any(segment in ("", ".", "..") for segment in segments):
            return self._blobs_root
        return self._blobs_root.joinpath(*segments)


def _prune_empty_parents(directory: Path, root: Path) -> None:
    """Remove empty directories from directory up to, not including, root.

    Args:
        directory: Deepest directory to consider.
        root: Backend root that is never removed.
    """
    while directory != root and root in directory.parents:
        if not directory.is_dir() or any(directory.iterdir()):
            return
        directory.rmdir()
        directory = directory.parent


def _key_parts(key: str) -> list[str]:
    """Split a key into path segments confined to the backend root.

    Args:
        key: Blob key.

    Returns:
        Relative path segments.

    Raises:
        BackendFailureError: If a segment is empty or a relative path marker.
    """
    parts = key.split(KEY_SEPARATOR)
    for part in parts:
        if part in ("", ".", ".."):
            raise BackendFailureError(
                f"Blob key '{key}' cannot be mapped to a local path: "
                f"invalid segment '{part}'. Use non-empty app, user, and session ids."
            )
    return parts
