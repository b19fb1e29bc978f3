"""Unit tests for blob backend selection."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.config import VaultConfig
from core.errors import VaultConfigError
from core.types import Coordinate
from store.blob_store_factory import create_artifact_store, create_blob_store
from store.local_blob_store import LocalBlobStore
from store.memory_blob_store import MemoryBlobStore


def test_create_blob_store_builds_memory_backend() -> None:
    """Memory backend name should yield an in-memory store."""
    blob_store = create_blob_store(VaultConfig(backend="memory"))

    assert isinstance(blob_store, MemoryBlobStore)


def test_create_blob_store_builds_local_backend(tmp_path: Path) -> None:
    """Local backend name should yield a filesystem store under data root."""
    blob_store = create_blob_store(VaultConfig(backend="local", data_root=tmp_path))

    assert isinstance(blob_store, LocalBlobStore)
    assert (tmp_path / "blobs").is_dir()


def test_create_blob_store_requires_s3_bucket() -> None:
    """S3 backend without a bucket should fail configuration."""
    with pytest.raises(VaultConfigError):
        create_blob_store(VaultConfig(backend="s3"))


def test_create_artifact_store_reads_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Store factory should fall back to environment configuration."""
    monkeypatch.setenv("VAULT_BACKEND", "local")
    monkeypatch.setenv("VAULT_DATA_ROOT", str(tmp_path))

    store = create_artifact_store()
    store.save(Coordinate("app1", "u1", "s1"), "notes.txt", b"hello")

    assert (tmp_path / "blobs" / "app1" / "u1" / "s1" / "notes.txt" / "0").exists()
