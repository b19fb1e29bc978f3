"""Versioned artifact store.

This module saves, loads, enumerates, and deletes artifact versions
addressed by an app/user/session coordinate plus a filename. All state
lives in the blob backend; the store itself only holds configuration.

Saves are not linearizable: two concurrent saves of the same artifact
may compute the same next version and the later write wins. Callers
that need strict ordering must serialize saves per artifact themselves.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from core.config import VaultConfig
from core.constants import KEY_SEPARATOR
from core.errors import BackendFailureError, InvalidPayloadError
from core.logging_config import get_logger
from core.types import Artifact, Coordinate
from store.artifact_namespace import (
    build_key,
    classify,
    filename_from_key,
    session_prefix,
    shared_prefix,
)
from store.blob_store import BlobStore
from store.version_index import VersionIndex

_LOGGER = get_logger(__name__)


class ArtifactStore:
    """Public façade over a blob backend.

    ``save`` and the listing operations surface backend failures.
    ``load`` and ``delete_artifact`` are lenient and report failures
    as missing artifacts or skipped deletes.
    """

    def __init__(self, blob_store: BlobStore, config: VaultConfig | None = None) -> None:
        """Initialize the store.

        Args:
            blob_store: Backend implementing the blob protocol.
            config: Runtime configuration; defaults apply when omitted.
        """
        self._blob_store = blob_store
        self._config = config or VaultConfig()
        self._version_index = VersionIndex(blob_store)

    def save(
        self,
        coordinate: Coordinate,
        filename: str,
        payload: bytes,
        content_type: str | None = None,
    ) -> int:
        """Store payload as the next version of an artifact.

        Args:
            coordinate: Owning app/user/session scope.
            filename: Artifact filename; ``user:`` names are user-shared.
            payload: Non-empty artifact bytes.
            content_type: Optional MIME type.

        Returns:
            Version number assigned to the payload.

        Raises:
            InvalidPayloadError: If payload or filename is unusable.
            BackendFailureError: If listing or writing fails.
        """
        payload_bytes = _validate_payload(payload)
        _validate_filename(filename)
        versions = self._version_index.list_versions(coordinate, filename)
        version = max(versions) + 1 if versions else 0
        key = build_key(coordinate, filename, version)
        resolved_content_type = content_type or self._config.default_content_type
        self._blob_store.put(key, payload_bytes, resolved_content_type)
        _LOGGER.info(
            "artifact_saved",
            key=key,
            namespace=classify(filename),
            version=version,
            size_bytes=len(payload_bytes),
            content_type=resolved_content_type,
        )
        return version

    def load(
        self,
        coordinate: Coordinate,
        filename: str,
        version: int | None = None,
    ) -> Artifact | None:
        """Load one artifact version.

        Args:
            coordinate: Owning app/user/session scope.
            filename: Artifact filename.
            version: Version to load; latest when omitted.

        Returns:
            Loaded artifact, or None when it cannot be retrieved.

        Raises:
            BackendFailureError: If resolving the latest version fails.
        """
        if version is None:
            versions = self._version_index.list_versions(coordinate, filename)
            if not versions:
                return None
            version = max(versions)
        key = build_key(coordinate, filename, version)
        try:
            payload = self._blob_store.get(key)
            if not payload:
                return None
            content_type = self._blob_store.get_metadata(key)
        except BackendFailureError as error:
            # Outages and misses both read as absent.
            _LOGGER.warning("artifact_load_failed", key=key, error=str(error))
            return None
        return Artifact(
            payload=payload,
            content_type=content_type or self._config.default_content_type,
            version=version,
        )

    def list_artifact_keys(self, app_name: str, user_id: str, session_id: str) -> list[str]:
        """List filenames visible to one session.

        Args:
            app_name: Application identifier.
            user_id: User identifier.
            session_id: Session identifier.

        Returns:
            Sorted unique filenames from session and user-shared scopes.

        Raises:
            BackendFailureError: If either prefix scan fails.
        """
        prefixes = (
            session_prefix(app_name, user_id, session_id),
            shared_prefix(app_name, user_id),
        )
        with ThreadPoolExecutor(max_workers=len(prefixes)) as executor:
            scans = [executor.submit(self._blob_store.list_by_prefix, prefix) for prefix in prefixes]
            scanned_keys = [scan.result() for scan in scans]
        filenames: set[str] = set()
        for prefix, keys in zip(prefixes, scanned_keys):
            for key in keys:
                filename = _scoped_filename(key, prefix)
                if filename is not None:
                    filenames.add(filename)
        return sorted(filenames)

    def delete_artifact(self, coordinate: Coordinate, filename: str) -> None:
        """Delete every version of an artifact, best effort.

        Args:
            coordinate: Owning app/user/session scope.
            filename: Artifact filename.
        """
        try:
            versions = self._version_index.list_versions(coordinate, filename)
        except BackendFailureError as error:
            _LOGGER.warning(
                "artifact_delete_skipped",
                filename=filename,
                session_id=coordinate.session_id,
                error=str(error),
            )
            return
        if not versions:
            return
        keys = [build_key(coordinate, filename, version) for version in sorted(versions)]
        workers = min(len(keys), self._config.delete_workers)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            deleted = list(executor.map(self._delete_version, keys))
        _LOGGER.info(
            "artifact_deleted",
            filename=filename,
            namespace=classify(filename),
            requested=len(keys),
            deleted=sum(deleted),
        )

    def list_versions(self, coordinate: Coordinate, filename: str) -> list[int]:
        """List stored versions of an artifact in ascending order.

        Args:
            coordinate: Owning app/user/session scope.
            filename: Artifact filename.

        Returns:
            Ascending version numbers; empty when none exist.

        Raises:
            BackendFailureError: If the prefix scan fails.
        """
        return sorted(self._version_index.list_versions(coordinate, filename))

    def _delete_version(self, key: str) -> bool:
        try:
            self._blob_store.delete(key, ignore_absent=True)
        except BackendFailureError as error:
            _LOGGER.warning("artifact_version_delete_failed", key=key, error=str(error))
            return False
        return True


def _validate_payload(payload: object) -> bytes:
    """Coerce a payload to bytes and reject empty values.

    Args:
        payload: Candidate artifact payload.

    Returns:
        Immutable payload bytes.

    Raises:
        InvalidPayloadError: If payload is not binary or is empty.
    """
    if not isinstance(payload, (bytes, bytearray, memoryview)):
        raise InvalidPayloadError(
            f"Artifact payload must be bytes, got {type(payload).__name__}. "
            "Decode text or base64 payloads with store.payload_adapter before saving."
        )
    payload_bytes = bytes(payload)
    if not payload_bytes:
        raise InvalidPayloadError(
            "Artifact payload is empty. Provide at least one byte of content."
        )
    return payload_bytes


def _validate_filename(filename: str) -> None:
    """Reject filenames that cannot round-trip through the key layout.

    Args:
        filename: Artifact filename.

    Raises:
        InvalidPayloadError: If filename is empty or contains a separator.
    """
    if not filename or KEY_SEPARATOR in filename:
        raise InvalidPayloadError(
            f"Invalid artifact filename '{filename}': "
            f"must be non-empty and must not contain '{KEY_SEPARATOR}'. "
            "Rename the artifact before saving."
        )


def _scoped_filename(key: str, prefix: str) -> str | None:
    """Return the filename of a key matched by a scope scan.

    Keys not shaped ``{prefix}{filename}/{version}`` are skipped.
    """
    remainder = key[len(prefix):] if key.startswith(prefix) else ""
    if remainder.count(KEY_SEPARATOR) != 1:
        return None
    return filename_from_key(key)
