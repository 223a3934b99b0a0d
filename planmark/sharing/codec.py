"""
Share token codec for planmark.

A plan and its annotations are packed into a single URL-fragment-safe token:

    compact projection -> JSON (UTF-8) -> raw DEFLATE -> URL-safe base64, unpadded

Decoding reverses every stage. Any failure raises CorruptPayload; callers that
only want "restore if possible" use try_decode, which returns None instead.
"""

import base64
import binascii
import json
import logging
import re
import zlib
from typing import Optional, Sequence
from urllib.parse import urlsplit

from ..config import config
from ..errors import CorruptPayload
from ..models import Annotation
from .compact import SharePayload


TOKEN_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')
# Raw DEFLATE stream, no zlib header or checksum
DEFLATE_WBITS = -15
MAX_DECODED_BYTES = 10 * 1024 * 1024


def encode_payload(payload: SharePayload) -> str:
    """Encode an already-compacted payload into a share token."""
    data = json.dumps(payload.to_wire(), ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    compressor = zlib.compressobj(9, zlib.DEFLATED, DEFLATE_WBITS)
    compressed = compressor.compress(data) + compressor.flush()

    token = base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")

    budget = config.share_token_budget
    if len(token) > budget:
        logging.warning(f"Share token is {len(token)} characters, over the {budget} character budget")
    return token


def encode(document: str, annotations: Sequence[Annotation]) -> str:
    """
    Encode a plan and its annotations into a share token.

    Args:
        document: Plan text
        annotations: Annotations to share; ids, timestamps and positions are dropped

    Returns:
        A token using only URL-safe base64 characters
    """
    return encode_payload(SharePayload.from_annotations(document, annotations))


def decode(token: str) -> SharePayload:
    """
    Decode a share token.

    Args:
        token: Token produced by encode (surrounding whitespace and '=' padding are tolerated)

    Returns:
        The shared SharePayload

    Raises:
        CorruptPayload: If any stage of decoding fails
    """
    cleaned = (token or "").strip().rstrip("=")
    if not cleaned or not TOKEN_PATTERN.match(cleaned):
        raise CorruptPayload("alphabet", "token is empty or contains characters outside URL-safe base64")

    try:
        compressed = base64.urlsafe_b64decode(cleaned + "=" * (-len(cleaned) % 4))
    except (binascii.Error, ValueError) as e:
        raise CorruptPayload("alphabet", str(e)) from e

    decompressor = zlib.decompressobj(DEFLATE_WBITS)
    try:
        data = decompressor.decompress(compressed, MAX_DECODED_BYTES)
    except zlib.error as e:
        raise CorruptPayload("decompression", str(e)) from e
    if decompressor.unconsumed_tail:
        raise CorruptPayload("decompression", f"payload expands beyond {MAX_DECODED_BYTES} bytes")
    if not decompressor.eof:
        raise CorruptPayload("decompression", "truncated stream")

    try:
        wire = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        raise CorruptPayload("json", str(e)) from e

    return SharePayload.from_wire(wire)


def try_decode(token: str) -> Optional[SharePayload]:
    """Decode a share token, returning None (nothing to restore) when it is corrupt."""
    try:
        return decode(token)
    except CorruptPayload as e:
        logging.warning(f"Ignoring share token: {e}")
        return None


def build_share_url(token: str, base_url: Optional[str] = None) -> str:
    """Attach a token to the share base URL as its fragment."""
    base = base_url if base_url is not None else config.share_base_url
    return f"{base.split('#', 1)[0]}#{token}"


def extract_token(value: str) -> str:
    """
    Get the token out of a share URL.

    Returns the URL fragment when the value is a URL with one, otherwise the
    value itself (already a bare token).
    """
    value = value.strip()
    if "#" in value:
        return urlsplit(value).fragment
    return value
