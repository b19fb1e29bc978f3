"""Runtime configuration model for the artifact vault.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Literal, cast

from core.constants import (
    DEFAULT_BACKEND,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_DATA_ROOT,
    DEFAULT_DELETE_WORKERS,
    SUPPORTED_BACKENDS,
)
from core.errors import VaultConfigError

BackendName = Literal["memory", "local", "s3"]


@dataclass(frozen=True)
class VaultConfig:
    """Validated runtime configuration.

    Attributes:
        backend: Blob backend used to persist artifacts.
        data_root: Local root directory for the filesystem backend.
        s3_bucket: Bucket holding artifacts for the S3 backend.
        s3_prefix: Optional key prefix inside the S3 bucket.
        s3_region: Optional default AWS region for S3 operations.
        s3_profile: Optional AWS profile for boto3 session initialization.
        delete_workers: Upper bound on concurrent version deletes.
        default_content_type: Content type reported when a blob has none.
    """

    backend: BackendName = cast(BackendName, DEFAULT_BACKEND)
    data_root: Path = DEFAULT_DATA_ROOT
    s3_bucket: str | None = None
    s3_prefix: str | None = None
    s3_region: str | None = None
    s3_profile: str | None = None
    delete_workers: int = DEFAULT_DELETE_WORKERS
    default_content_type: str = DEFAULT_CONTENT_TYPE

    def __post_init__(self) -> None:
        """Validate fields for configs built without ``from_env``.

        Raises:
            VaultConfigError: If delete_workers is below one.
        """
        _validate_delete_workers(self.delete_workers)

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            VaultConfigError: If environment values are invalid.
        """
        backend = _parse_backend(os.getenv("VAULT_BACKEND", DEFAULT_BACKEND))
        data_root_value = os.getenv("VAULT_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        delete_workers = _parse_delete_workers(
            os.getenv("VAULT_DELETE_WORKERS", str(DEFAULT_DELETE_WORKERS))
        )
        return cls(
            backend=backend,
            data_root=Path(data_root_value).expanduser().resolve(),
            s3_bucket=os.getenv("VAULT_S3_BUCKET"),
            s3_prefix=os.getenv("VAULT_S3_PREFIX"),
            s3_region=os.getenv("VAULT_S3_REGION"),
            s3_profile=os.getenv("VAULT_S3_PROFILE"),
            delete_workers=delete_workers,
            default_content_type=os.getenv(
                "VAULT_DEFAULT_CONTENT_TYPE", DEFAULT_CONTENT_TYPE
            ),
        )


def _parse_backend(raw_value: str) -> BackendName:
    """Parse the backend environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Normalized backend name.

    Raises:
        VaultConfigError: If backend is not supported.
    """
    normalized = raw_value.strip().lower()
    if normalized not in SUPPORTED_BACKENDS:
        raise VaultConfigError(
            f"Invalid VAULT_BACKEND value '{raw_value}': "
            f"expected one of {', '.join(SUPPORTED_BACKENDS)}. "
            "Set VAULT_BACKEND to a supported backend name."
        )
    return cast(BackendName, normalized)


def _parse_delete_workers(raw_value: str) -> int:
    """Parse the delete worker count environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed positive worker count.

    Raises:
        VaultConfigError: If value is not a positive integer.
    """
    try:
        workers = int(raw_value)
    except ValueError as error:
        raise VaultConfigError(
            "Invalid VAULT_DELETE_WORKERS value: "
            f"expected integer, got '{raw_value}'. "
            "Set VAULT_DELETE_WORKERS to a positive number."
        ) from error
    return _validate_delete_workers(workers)


def _validate_delete_workers(workers: int) -> int:
    """Reject delete worker counts below one.

    Args:
        workers: Candidate worker count.

    Returns:
        The validated worker count.

    Raises:
        VaultConfigError: If workers is below one.
    """
    if workers < 1:
        raise VaultConfigError(
            f"Invalid VAULT_DELETE_WORKERS value {workers}: must be >= 1. "
            "Set VAULT_DELETE_WORKERS to a positive number."
        )
    return workers
