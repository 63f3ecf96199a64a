"""Inline attachment encoding: uploads become ``data:<mime>;base64,<payload>``."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import mimetypes

from memoledger.errors import AttachmentError
from memoledger.models import EncodedFile, Upload

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_content_type(upload: Upload) -> str:
    if upload.content_type:
        return upload.content_type
    guessed, _ = mimetypes.guess_type(upload.name)
    return guessed or DEFAULT_CONTENT_TYPE


def to_data_uri(content: bytes, content_type: str) -> str:
    payload = base64.b64encode(content).decode("ascii")
    return f"data:{content_type};base64,{payload}"


async def _read(upload: Upload) -> bytes:
    if upload.content is not None:
        if isinstance(upload.content, str):
            raise AttachmentError(f"upload {upload.name!r} content must be bytes, not str")
        try:
            return bytes(upload.content)
        except (TypeError, ValueError) as e:
            raise AttachmentError(f"cannot read content of {upload.name!r}: {e}") from e
    if upload.path is None:
        raise AttachmentError(f"upload {upload.name!r} has neither content nor path")
    try:
        return await asyncio.to_thread(upload.path.read_bytes)
    except OSError as e:
        raise AttachmentError(f"cannot read {upload.path}: {e}") from e


async def encode_upload(upload: Upload) -> EncodedFile:
    """Read and encode an upload. Any failure raises AttachmentError."""
    content = await _read(upload)
    content_type = guess_content_type(upload)
    try:
        data_uri = to_data_uri(content, content_type)
    except (TypeError, ValueError, binascii.Error) as e:
        raise AttachmentError(f"cannot encode {upload.name!r}: {e}") from e
    logger.debug("Encoded %s (%s, %d bytes)", upload.name, content_type, len(content))
    return EncodedFile(data_uri=data_uri, name=upload.name, content_type=content_type)


def decode_data_uri(data_uri: str) -> tuple[str, bytes]:
    """Split a base64 data URI into (mime type, raw bytes)."""
    if not data_uri.startswith("data:") or "," not in data_uri:
        raise AttachmentError("not a data URI")
    header, payload = data_uri[5:].split(",", 1)
    if not header.endswith(";base64"):
        raise AttachmentError("only base64 data URIs are supported")
    content_type = header[: -len(";base64")] or DEFAULT_CONTENT_TYPE
    try:
        return content_type, base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AttachmentError(f"corrupt data URI payload: {e}") from e
