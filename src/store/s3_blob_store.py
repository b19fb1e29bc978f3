"""S3 blob backend.

This module encapsulates boto3 client creation and maps the blob
protocol onto S3 object operations inside one bucket.
"""

from __future__ import annotations

from typing import Any

from core.config import VaultConfig
from core.constants import KEY_SEPARATOR
from core.errors import BackendFailureError, VaultConfigError, VaultDependencyError

_MISSING_OBJECT_CODES = ("404", "NoSuchKey", "NotFound")


class S3BlobStore:
    """Blob store backed by objects in a single S3 bucket.

    An optional key prefix is prepended on writes and stripped from
    listings, so callers always see the canonical artifact layout.
    """

    def __init__(self, s3_client: Any, bucket: str, key_prefix: str | None = None) -> None:
        """Initialize backend state.

        Args:
            s3_client: Boto3 S3 client.
            bucket: Destination bucket.
            key_prefix: Optional prefix nesting all keys in the bucket.
        """
        self._s3_client = s3_client
        self._bucket = bucket
        self._key_prefix = _normalize_key_prefix(key_prefix)

    @classmethod
    def from_config(cls, config: VaultConfig) -> "S3BlobStore":
        """Build an S3 backend from runtime config.

        Args:
            config: Runtime config with bucket and session settings.

        Returns:
            Configured S3 blob store.

        Raises:
            VaultConfigError: If no bucket is configured.
            VaultDependencyError: If boto3 is missing.
        """
        if not config.s3_bucket:
            raise VaultConfigError(
                "S3 backend requires a bucket, but VAULT_S3_BUCKET is not set. "
                "Set VAULT_S3_BUCKET or choose another VAULT_BACKEND."
            )
        return cls(create_s3_client(config), config.s3_bucket, config.s3_prefix)

    def get(self, key: str) -> bytes | None:
        object_key = self._object_key(key)
        try:
            response = self._s3_client.get_object(Bucket=self._bucket, Key=object_key)
            return response["Body"].read()
        except Exception as error:
            if _is_missing_object(error):
                return None
            raise _backend_error("download", self._bucket, object_key, error) from error

    def get_metadata(self, key: str) -> str | None:
        object_key = self._object_key(key)
        try:
            response = self._s3_client.head_object(Bucket=self._bucket, Key=object_key)
        except Exception as error:
            if _is_missing_object(error):
                return None
            raise _backend_error("inspect", self._bucket, object_key, error) from error
        return response.get("ContentType") or None

    def put(self, key: str, payload: bytes, content_type: str) -> None:
        object_key = self._object_key(key)
        try:
            self._s3_client.put_object(
                Bucket=self._bucket,
                Key=object_key,
                Body=payload,
                ContentType=content_type,
            )
        except Exception as error:
            raise _backend_error("upload", self._bucket, object_key, error) from error

    def list_by_prefix(self, prefix: str) -> list[str]:
        """List object keys under a prefix.

        Args:
            prefix: Canonical key prefix.

        Returns:
            Sorted canonical keys with the bucket key prefix removed.

        Raises:
            BackendFailureError: If listing fails.
        """
        object_prefix = self._object_key(prefix)
        keys: list[str] = []
        try:
            paginator = self._s3_client.get_paginator("list_objects_v2")
            pages = paginator.paginate(Bucket=self._bucket, Prefix=object_prefix)
            for page in pages:
                for obj in page.get("Contents", []):
                    keys.append(obj["Key"][len(self._key_prefix):])
        except Exception as error:
            raise _backend_error("list", self._bucket, object_prefix, error) from error
        return sorted(keys)

    def delete(self, key: str, ignore_absent: bool = True) -> None:
        """Delete one object.

        Args:
            key: Canonical blob key.
            ignore_absent: Treat a missing object as success when True.

        Raises:
            BackendFailureError: If deletion fails or the object is missing
                and not ignored.
        """
        object_key = self._object_key(key)
        if not ignore_absent and not self._exists(object_key):
            raise BackendFailureError(
                f"Cannot delete s3://{self._bucket}/{object_key}: object does not exist. "
                "List keys before deleting or pass ignore_absent=True."
            )
        try:
            self._s3_client.delete_object(Bucket=self._bucket, Key=object_key)
        except Exception as error:
            if ignore_absent and _is_missing_object(error):
                return
            raise _backend_error("delete", self._bucket, object_key, error) from error

    def _exists(self, object_key: str) -> bool:
        try:
            self._s3_client.head_object(Bucket=self._bucket, Key=object_key)
        except Exception as error:
            if _is_missing_object(error):
                return False
            raise _backend_error("inspect", self._bucket, object_key, error) from error
        return True

    def _object_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"


def create_s3_client(config: VaultConfig) -> Any:
    """Create a boto3 S3 client.

    Args:
        config: Runtime config containing optional profile/region.

    Returns:
        Boto3 S3 client.

    Raises:
        VaultDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise VaultDependencyError(
            "S3 backend requires boto3, but it is not installed. "
            "Install boto3 to store artifacts in S3."
        ) from error
    session_kwargs = _build_boto3_session_kwargs(config)
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")


def _build_boto3_session_kwargs(config: VaultConfig) -> dict[str, str]:
    """Build boto3 Session kwargs from config.

    Args:
        config: Runtime config.

    Returns:
        Session keyword arguments.
    """
    kwargs: dict[str, str] = {}
    if config.s3_profile:
        kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        kwargs["region_name"] = config.s3_region
    return kwargs


def _normalize_key_prefix(key_prefix: str | None) -> str:
    if not key_prefix:
        return ""
    stripped = key_prefix.strip(KEY_SEPARATOR)
    return f"{stripped}{KEY_SEPARATOR}" if stripped else ""


def _is_missing_object(error: Exception) -> bool:
    """Return whether an S3 client error reports a missing object.

    Args:
        error: Exception raised by the S3 client.

    Returns:
        True for 404-style client errors.
    """
    response = getattr(error, "response", None)
    if not isinstance(response, dict):
        return False
    code = str(response.get("Error", {}).get("Code", ""))
    return code in _MISSING_OBJECT_CODES


def _backend_error(action: str, bucket: str, object_key: str, error: Exception) -> BackendFailureError:
    return BackendFailureError(
        f"Failed to {action} s3://{bucket}/{object_key}: {error}. "
        "Check AWS credentials, bucket permissions, and retry."
    )
