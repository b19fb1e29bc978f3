"""Blob backend selection.

This module turns a runtime config into a concrete blob backend and
wires it into an artifact store.
"""

from __future__ import annotations

from core.config import VaultConfig
from core.errors import VaultConfigError
from core.logging_config import get_logger
from store.artifact_store import ArtifactStore
from store.blob_store import BlobStore
from store.local_blob_store import LocalBlobStore
from store.memory_blob_store import MemoryBlobStore
from store.s3_blob_store import S3BlobStore

_LOGGER = get_logger(__name__)


def create_blob_store(config: VaultConfig) -> BlobStore:
    """Create the blob backend named by config.

    Args:
        config: Runtime configuration.

    Returns:
        Backend implementing the blob protocol.

    Raises:
        VaultConfigError: If backend settings are invalid.
        VaultDependencyError: If the backend's dependency is missing.
    """
    if config.backend == "memory":
        return MemoryBlobStore()
    if config.backend == "local":
        return LocalBlobStore(config.data_root)
    if config.backend == "s3":
        return S3BlobStore.from_config(config)
    raise VaultConfigError(
        f"Unsupported backend '{config.backend}'. "
        "Set VAULT_BACKEND to memory, local, or s3."
    )


def create_artifact_store(config: VaultConfig | None = None) -> ArtifactStore:
    """Create an artifact store over the configured backend.

    Args:
        config: Runtime configuration; read from environment when omitted.

    Returns:
        Ready-to-use artifact store.
    """
    resolved_config = config or VaultConfig.from_env()
    blob_store = create_blob_store(resolved_config)
    _LOGGER.info("artifact_store_created", backend=resolved_config.backend)
    return ArtifactStore(blob_store, resolved_config)
