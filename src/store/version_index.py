"""Version discovery by backend prefix scan.

This module lists existing versions of one artifact by scanning its
key prefix and parsing the trailing numeric segment of each key.
"""

from __future__ import annotations

from core.constants import KEY_SEPARATOR
from core.types import Coordinate
from store.artifact_namespace import build_prefix
from store.blob_store import BlobStore


class VersionIndex:
    """Read-only view of artifact versions stored in a blob backend."""

    def __init__(self, blob_store: BlobStore) -> None:
        self._blob_store = blob_store

    def list_versions(self, coordinate: Coordinate, filename: str) -> set[int]:
        """List stored version numbers for one artifact.

        Args:
            coordinate: Owning app/user/session scope.
            filename: Artifact filename.

        Returns:
            Set of version numbers; empty when none exist.

        Raises:
            BackendFailureError: If the prefix scan fails.
        """
        prefix = build_prefix(coordinate, filename)
        versions: set[int] = set()
        for key in self._blob_store.list_by_prefix(prefix):
            version = parse_version_segment(key, prefix)
            if version is not None:
                versions.add(version)
        return versions


def parse_version_segment(key: str, prefix: str) -> int | None:
    """Parse the version number that follows a scan prefix.

    Args:
        key: Full blob key returned by the scan.
        prefix: Version-agnostic prefix the key was matched against.

    Returns:
        Parsed version, or None for unrelated or malformed keys.
    """
    if not key.startswith(prefix):
        return None
    segment = key[len(prefix):]
    if not segment or KEY_SEPARATOR in segment:
        return None
    if not segment.isascii() or not segment.isdigit():
        return None
    return int(segment, 10)
