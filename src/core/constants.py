"""Core constants used across artifact vault modules.

This module centralizes key layout and backend defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".vault")
DEFAULT_BACKEND = "local"
SUPPORTED_BACKENDS = ("memory", "local", "s3")
DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_DELETE_WORKERS = 8
KEY_SEPARATOR = "/"
USER_NAMESPACE_PREFIX = "user:"
SHARED_SCOPE_SEGMENT = "user"
LOCAL_BLOBS_DIR_NAME = "blobs"
LOCAL_METADATA_DIR_NAME = "metadata"
LOCAL_METADATA_SUFFIX = ".json"
