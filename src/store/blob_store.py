"""Blob backend capability interface.

Artifact storage depends only on this protocol. Memory, local
filesystem, and S3 backends each implement it independently.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class BlobStore(Protocol):
    """Key-addressed object storage used by the artifact store.

    Implementations raise ``BackendFailureError`` for transport, auth,
    or quota failures. Absence is reported as ``None``, never raised.
    """

    def get(self, key: str) -> bytes | None:
        """Return blob bytes, or None when the key is absent."""
        ...

    def get_metadata(self, key: str) -> str | None:
        """Return the stored content type, or None when unknown."""
        ...

    def put(self, key: str, payload: bytes, content_type: str) -> None:
        """Write payload bytes and content type at key."""
        ...

    def list_by_prefix(self, prefix: str) -> list[str]:
        """Return every stored key starting with prefix."""
        ...

    def delete(self, key: str, ignore_absent: bool = True) -> None:
        """Remove the blob at key."""
        ...
