"""Edge adapters between textual payloads and artifact bytes.

The artifact store accepts bytes only. These helpers convert text,
base64 strings, and inline-data style payloads at the system edge.
"""

from __future__ import annotations

import base64
import binascii
from typing import Mapping

from core.constants import DEFAULT_CONTENT_TYPE
from core.errors import InvalidPayloadError
from core.types import Artifact


def payload_from_text(text: str, encoding: str = "utf-8") -> bytes:
    """Encode text into artifact bytes.

    Args:
        text: Text payload.
        encoding: Target character encoding.

    Returns:
        Encoded payload bytes.

    Raises:
        InvalidPayloadError: If text cannot be encoded.
    """
    try:
        return text.encode(encoding)
    except (LookupError, UnicodeEncodeError) as error:
        raise InvalidPayloadError(
            f"Failed to encode text payload as {encoding}: {error}. "
            "Choose an encoding that covers every character."
        ) from error


def payload_from_base64(data: str) -> bytes:
    """Decode a base64 string into artifact bytes.

    Args:
        data: Base64 text.

    Returns:
        Decoded payload bytes.

    Raises:
        InvalidPayloadError: If data is not valid base64.
    """
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as error:
        raise InvalidPayloadError(
            f"Failed to decode base64 payload: {error}. "
            "Send standard base64 text or raw bytes."
        ) from error


def payload_from_inline_data(
    data: str | bytes | bytearray | memoryview,
    mime_type: str | None = None,
) -> tuple[bytes, str]:
    """Normalize an inline-data payload into bytes and content type.

    Strings are treated as base64; binary buffers are copied as-is.

    Args:
        data: Base64 text or binary buffer.
        mime_type: Optional MIME type.

    Returns:
        Pair of payload bytes and content type.

    Raises:
        InvalidPayloadError: If data has an unsupported type or bad base64.
    """
    if isinstance(data, str):
        payload = payload_from_base64(data)
    elif isinstance(data, (bytes, bytearray, memoryview)):
        payload = bytes(data)
    else:
        raise InvalidPayloadError(
            f"Unsupported inline data type {type(data).__name__}. "
            "Send base64 text or a bytes-like buffer."
        )
    return payload, mime_type or DEFAULT_CONTENT_TYPE


def artifact_to_inline_data(artifact: Artifact) -> Mapping[str, str]:
    """Render an artifact as base64 inline data.

    Args:
        artifact: Loaded artifact.

    Returns:
        Mapping with ``data`` and ``mime_type`` keys.
    """
    return {
        "data": base64.b64encode(artifact.payload).decode("ascii"),
        "mime_type": artifact.content_type,
    }
