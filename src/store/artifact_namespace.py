"""Artifact namespace and blob key construction.

This module maps a coordinate and filename onto the physical key
layout shared by every blob backend. It performs no I/O.
"""

from __future__ import annotations

from core.constants import KEY_SEPARATOR, SHARED_SCOPE_SEGMENT, USER_NAMESPACE_PREFIX
from core.types import Coordinate, Namespace


def classify(filename: str) -> Namespace:
    """Return the namespace a filename belongs to.

    Args:
        filename: Artifact filename.

    Returns:
        ``"shared"`` for ``user:``-prefixed names, otherwise ``"session"``.
    """
    if filename.startswith(USER_NAMESPACE_PREFIX):
        return "shared"
    return "session"


def build_key(coordinate: Coordinate, filename: str, version: int | str) -> str:
    """Build the blob key for one artifact version.

    Args:
        coordinate: Owning app/user/session scope.
        filename: Artifact filename.
        version: Version number, or ``""`` to form a scan prefix.

    Returns:
        Blob key in ``{app}/{user}/{scope}/{filename}/{version}`` layout.
    """
    if classify(filename) == "shared":
        scope = shared_prefix(coordinate.app_name, coordinate.user_id)
    else:
        scope = session_prefix(
            coordinate.app_name, coordinate.user_id, coordinate.session_id
        )
    return f"{scope}{filename}{KEY_SEPARATOR}{version}"


def build_prefix(coordinate: Coordinate, filename: str) -> str:
    """Build the version-agnostic scan prefix for a filename."""
    return build_key(coordinate, filename, "")


def session_prefix(app_name: str, user_id: str, session_id: str) -> str:
    """Return the scan prefix covering one session's private artifacts."""
    return KEY_SEPARATOR.join((app_name, user_id, session_id)) + KEY_SEPARATOR


def shared_prefix(app_name: str, user_id: str) -> str:
    """Return the scan prefix covering a user's shared artifacts."""
    return KEY_SEPARATOR.join((app_name, user_id, SHARED_SCOPE_SEGMENT)) + KEY_SEPARATOR


def filename_from_key(key: str) -> str | None:
    """Extract the filename segment from a full blob key.

    Args:
        key: Blob key returned by a prefix scan.

    Returns:
        Segment preceding the version, or None if the key has none.
    """
    parts = key.split(KEY_SEPARATOR)
    if len(parts) < 2:
        return None
    return parts[-2] or None
