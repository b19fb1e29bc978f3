"""Artifact storage and versioning layer.

This package maps app/user/session coordinates onto blob keys and
persists immutable artifact versions through pluggable backends.
"""
