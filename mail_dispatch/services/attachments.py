"""Attachment decoding.

Turns the JSON shapes callers use for binary content into bytes:

- an array of byte values: ``[37, 80, 68, 70, ...]``
- a serialized Node Buffer: ``{"type": "Buffer", "data": [...]}``
- a serialized typed array: ``{"0": 37, "1": 80, ...}``
- a string, utf-8, base64, hex or latin-1 (generic attachments only)

Every decoding failure raises AttachmentError; callers drop the attachment
and keep sending.

Version: 1.0.0
"""

from __future__ import annotations

import base64
import binascii
import mimetypes
from typing import Any

from mail_dispatch.core.exceptions import AttachmentError
from mail_dispatch.models.email import PDF_CONTENT_TYPE, Attachment
from mail_dispatch.models.requests import AttachmentPayload

# PDF readers accept the header anywhere in the first 1024 bytes
_PDF_HEADER = b"%PDF"
_PDF_HEADER_WINDOW = 1024

# Node Buffer names for single-byte strings
_LATIN1_ALIASES = {"binary", "latin1", "latin-1"}


def decode_byte_array(value: Any) -> bytes:
    """Decode a JSON byte array (or Buffer/typed-array object) into bytes.

    Args:
        value: Decoded JSON value.

    Returns:
        Raw bytes.

    Raises:
        AttachmentError: If the value is not a sequence of values 0-255.
    """
    if isinstance(value, dict):
        if "data" in value:
            value = value["data"]
        elif value and all(str(k).isdigit() for k in value):
            value = [value[k] for k in sorted(value, key=int)]
        else:
            raise AttachmentError("Unsupported byte array object")

    if not isinstance(value, list):
        raise AttachmentError(
            f"Expected an array of byte values, got {type(value).__name__}"
        )

    if any(isinstance(b, bool) or not isinstance(b, int) for b in value):
        raise AttachmentError("Byte array contains non-integer values")

    try:
        return bytes(value)
    except ValueError as e:
        raise AttachmentError(f"Invalid byte array: {e}") from e


def is_empty_buffer(value: Any) -> bool:
    """Whether a pdfBuffer value means "no attachment"."""
    if value is None:
        return True
    if isinstance(value, (list, str)) and len(value) == 0:
        return True
    if isinstance(value, dict) and not value.get("data", value):
        return True
    return False


def pdf_attachment(value: Any, filename: str) -> Attachment:
    """Build the PDF attachment for a template-backed email.

    Args:
        value: The request's pdfBuffer.
        filename: Deterministic filename for the attachment.

    Returns:
        Attachment with content type application/pdf.

    Raises:
        AttachmentError: If the buffer is undecodable or not a PDF.
    """
    try:
        content = decode_byte_array(value)
    except AttachmentError as e:
        e.filename = filename
        raise

    if _PDF_HEADER not in content[:_PDF_HEADER_WINDOW]:
        raise AttachmentError("Content is not a PDF document", filename=filename)

    return Attachment(filename=filename, content=content, content_type=PDF_CONTENT_TYPE)


def payload_attachment(payload: AttachmentPayload, index: int) -> Attachment:
    """Build an attachment from a generic-send attachment payload.

    Args:
        payload: Caller-supplied attachment.
        index: Position in the attachments list (used for default names).

    Returns:
        Decoded attachment.

    Raises:
        AttachmentError: If the content is missing or undecodable.
    """
    filename = (payload.filename or "").strip() or f"attachment-{index + 1}"
    content = payload.content

    if content is None:
        raise AttachmentError("Attachment has no content", filename=filename)

    if isinstance(content, str):
        data = _decode_string(content, payload.encoding, filename)
    else:
        try:
            data = decode_byte_array(content)
        except AttachmentError as e:
            e.filename = filename
            raise

    content_type = (
        payload.content_type
        or mimetypes.guess_type(filename)[0]
        or "application/octet-stream"
    )
    return Attachment(filename=filename, content=data, content_type=content_type)


def _decode_string(content: str, encoding: str | None, filename: str) -> bytes:
    """Decode string content using a nodemailer-style encoding name."""
    encoding = (encoding or "utf-8").lower()

    try:
        if encoding == "base64":
            return base64.b64decode(content, validate=True)
        if encoding == "hex":
            return bytes.fromhex(content)
        if encoding in _LATIN1_ALIASES:
            return content.encode("latin-1")
        return content.encode(encoding)
    except (binascii.Error, ValueError, LookupError) as e:
        raise AttachmentError(
            f"Cannot decode {encoding} content: {e}", filename=filename
        ) from e
