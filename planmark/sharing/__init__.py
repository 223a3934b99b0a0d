"""Compact share tokens for plans and their annotations."""

from .compact import (
    SharePayload,
    CompactAnnotation,
    DeletionEntry,
    InsertionEntry,
    ReplacementEntry,
    CommentEntry,
    GlobalCommentEntry,
    compact_annotation,
    expand_entry,
)
from .codec import encode, encode_payload, decode, try_decode, build_share_url, extract_token

__all__ = [
    "SharePayload",
    "CompactAnnotation",
    "DeletionEntry",
    "InsertionEntry",
    "ReplacementEntry",
    "CommentEntry",
    "GlobalCommentEntry",
    "compact_annotation",
    "expand_entry",
    "encode",
    "encode_payload",
    "decode",
    "try_decode",
    "build_share_url",
    "extract_token"
]
