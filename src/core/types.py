"""Shared typed models.

This module defines immutable data models used by the namespace
resolver, version index, artifact store, and payload adapters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Namespace = Literal["session", "shared"]


@dataclass(frozen=True)
class Coordinate:
    """Owning scope of a session-private artifact.

    Attributes:
        app_name: Application identifier.
        user_id: User identifier within the application.
        session_id: Conversation session identifier.
    """

    app_name: str
    user_id: str
    session_id: str


@dataclass(frozen=True)
class Artifact:
    """One immutable artifact revision.

    Attributes:
        payload: Raw artifact bytes.
        content_type: MIME type reported by the backend.
        version: Version number the payload was stored under.
    """

    payload: bytes
    content_type: str
    version: int
