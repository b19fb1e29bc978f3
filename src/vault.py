"""Public SDK surface for the artifact vault.

This module provides a stable import path for library users.
It re-exports the artifact store, backends, and typed models.
"""

from __future__ import annotations

from core.config import VaultConfig
from core.errors import (
    BackendFailureError,
    InvalidPayloadError,
    VaultConfigError,
    VaultDependencyError,
    VaultError,
)
from core.types import Artifact, Coordinate, Namespace
from store.artifact_store import ArtifactStore
from store.blob_store import BlobStore
from store.blob_store_factory import create_artifact_store, create_blob_store
from store.local_blob_store import LocalBlobStore
from store.memory_blob_store import MemoryBlobStore
from store.payload_adapter import (
    artifact_to_inline_data,
    payload_from_base64,
    payload_from_inline_data,
    payload_from_text,
)
from store.s3_blob_store import S3BlobStore

__all__ = [
    "Artifact",
    "ArtifactStore",
    "BackendFailureError",
    "BlobStore",
    "Coordinate",
    "InvalidPayloadError",
    "LocalBlobStore",
    "MemoryBlobStore",
    "Namespace",
    "S3BlobStore",
    "VaultConfig",
    "VaultConfigError",
    "VaultDependencyError",
    "VaultError",
    "artifact_to_inline_data",
    "create_artifact_store",
    "create_blob_store",
    "payload_from_base64",
    "payload_from_inline_data",
    "payload_from_text",
]
