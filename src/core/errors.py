"""Artifact vault exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class VaultError(Exception):
    """Base exception for all artifact vault failures."""


class VaultConfigError(VaultError):
    """Raised for invalid runtime configuration."""


class VaultDependencyError(VaultError):
    """Raised when an optional runtime dependency is missing."""


class InvalidPayloadError(VaultError):
    """Raised when a save request carries an unusable payload or filename."""


class BackendFailureError(VaultError):
    """Raised for transport, auth, or quota failures from a blob backend."""
