"""In-memory blob backend.

This module keeps blobs in a process-local dictionary. It backs
tests and short-lived sessions that need no persistence.
"""

from __future__ import annotations

import threading

from core.errors import BackendFailureError


class MemoryBlobStore:
    """Dictionary-backed blob store safe for concurrent calls."""

    def __init__(self) -> None:
        self._blobs: dict[str, tuple[bytes, str]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            entry = self._blobs.get(key)
        return entry[0] if entry else None

    def get_metadata(self, key: str) -> str | None:
        with self._lock:
            entry = self._blobs.get(key)
        return entry[1] if entry else None

    def put(self, key: str, payload: bytes, content_type: str) -> None:
        with self._lock:
            self._blobs[key] = (bytes(payload), content_type)

    def list_by_prefix(self, prefix: str) -> list[str]:
        with self._lock:
            return sorted(key for key in self._blobs if key.startswith(prefix))

    def delete(self, key: str, ignore_absent: bool = True) -> None:
        """Remove a blob.

        Args:
            key: Blob key.
            ignore_absent: Treat a missing key as success when True.

        Raises:
            BackendFailureError: If the key is missing and not ignored.
        """
        with self._lock:
            removed = self._blobs.pop(key, None)
        if removed is None and not ignore_absent:
            raise BackendFailureError(
                f"Cannot delete blob '{key}': key does not exist. "
                "List keys before deleting or pass ignore_absent=True."
            )
