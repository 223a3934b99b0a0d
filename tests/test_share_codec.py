"""
Tests for share token encoding and decoding.
"""

import base64
import re
import zlib

import pytest

from planmark.errors import CorruptPayload
from planmark.models import Annotation, AnnotationPosition, AnnotationType
from planmark.parser import parse
from planmark.sharing import (
    CommentEntry,
    DeletionEntry,
    GlobalCommentEntry,
    InsertionEntry,
    ReplacementEntry,
    SharePayload,
    build_share_url,
    compact_annotation,
    decode,
    encode,
    extract_token,
    try_decode,
)
from planmark.sharing.compact import entry_from_tuple


PLAN = "# Add Auth\n\nUse sessions for login.\n\n- Store tokens in redis\n- Add logout endpoint\n"


def raw_token(data: bytes) -> str:
    """Build a token from arbitrary bytes, bypassing the payload encoder."""
    compressor = zlib.compressobj(9, zlib.DEFLATED, -15)
    compressed = compressor.compress(data) + compressor.flush()
    return base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")


def make(annotation_type, target_text="", note=None, author=None, index=0):
    return Annotation(
        id=f"a{index}",
        type=annotation_type,
        target_text=target_text,
        note=note,
        author=author,
        created_at=1000.0 + index
    )


def shared_fields(annotation):
    return (annotation.type, annotation.target_text, annotation.note, annotation.author)


ANNOTATIONS = [
    make(AnnotationType.DELETION, "Store tokens in redis", index=1),
    make(AnnotationType.DELETION, "sessions", note="not needed", author="kim", index=2),
    make(AnnotationType.INSERTION, "Add logout endpoint", note="Add refresh endpoint", index=3),
    make(AnnotationType.REPLACEMENT, "sessions", note="JWTs", author="kim", index=4),
    make(AnnotationType.COMMENT, "login", note="Which provider?", index=5),
    make(AnnotationType.GLOBAL_COMMENT, note="Looks good overall", author="lee", index=6),
]


def test_round_trip_preserves_shared_fields():
    payload = decode(encode(PLAN, ANNOTATIONS))
    restored = payload.to_annotations()

    assert payload.document == PLAN
    assert [shared_fields(a) for a in restored] == [shared_fields(a) for a in ANNOTATIONS]


def test_round_trip_drops_positions_and_ids():
    located = make(AnnotationType.COMMENT, "login", note="?").model_copy(
        update={"position": AnnotationPosition(block_id="block-1", start_offset=0, end_offset=5)}
    )

    restored = decode(encode(PLAN, [located])).to_annotations()[0]

    assert restored.position is None
    assert restored.id != located.id


def test_token_is_url_safe():
    token = encode("??>>~~ ünïcode ✓ " * 20, ANNOTATIONS)

    assert re.fullmatch(r"[A-Za-z0-9_-]+", token)
    assert not token.endswith("=")


def test_unicode_survives():
    annotation = make(AnnotationType.COMMENT, "naïve", note="日本語のコメント", author="Zoë")
    payload = decode(encode("# Plän\n\nnaïve approach", [annotation]))

    assert payload.document == "# Plän\n\nnaïve approach"
    assert shared_fields(payload.to_annotations()[0]) == shared_fields(annotation)


def test_empty_annotation_list():
    payload = decode(encode(PLAN, []))

    assert payload.document == PLAN
    assert payload.annotations == []


def test_typical_plan_fits_in_a_url():
    document = "\n".join(f"{i}. Implement step {i} of the migration and verify it." for i in range(1, 41))
    annotations = [
        make(AnnotationType.COMMENT, f"step {i}", note=f"Check the rollback path for step {i}", index=i)
        for i in range(1, 31)
    ]

    assert len(encode(document, annotations)) < 4096


def test_decode_tolerates_whitespace_and_padding():
    token = encode(PLAN, [])

    assert decode(f"  {token}==\n").document == PLAN


@pytest.mark.parametrize("token, stage", [
    ("", "alphabet"),
    ("not a token!", "alphabet"),
    ("abc+/def", "alphabet"),
    ("A", "alphabet"),
])
def test_bad_alphabet(token, stage):
    with pytest.raises(CorruptPayload) as excinfo:
        decode(token)
    assert excinfo.value.stage == stage


def test_truncated_stream():
    compressor = zlib.compressobj(9, zlib.DEFLATED, -15)
    compressed = compressor.compress(b'{"p": "' + b"plan text " * 200 + b'", "a": []}') + compressor.flush()
    token = base64.urlsafe_b64encode(compressed[:len(compressed) // 2]).decode("ascii").rstrip("=")

    with pytest.raises(CorruptPayload) as excinfo:
        decode(token)
    assert excinfo.value.stage == "decompression"


def test_invalid_json():
    with pytest.raises(CorruptPayload) as excinfo:
        decode(raw_token(b"not json at all"))
    assert excinfo.value.stage == "json"


def test_deeply_nested_json():
    token = raw_token(b"[" * 200000)

    with pytest.raises(CorruptPayload) as excinfo:
        decode(token)
    assert excinfo.value.stage == "json"
    assert try_decode(token) is None


@pytest.mark.parametrize("data", [
    b'["p", "a"]',
    b'{"p": 1, "a": []}',
    b'{"p": "plan", "a": {}}',
    b'{"p": "plan", "a": [["Z", "x"]]}',
    b'{"p": "plan", "a": [["C", "x"]]}',
    b'{"p": "plan", "a": [["G", 3]]}',
    b'{"p": "plan", "a": [[]]}',
])
def test_bad_structure(data):
    with pytest.raises(CorruptPayload) as excinfo:
        decode(raw_token(data))
    assert excinfo.value.stage == "structure"


def test_missing_annotation_list_is_empty():
    assert decode(raw_token(b'{"p": "plan"}')).annotations == []


def test_try_decode_returns_none_for_garbage():
    assert try_decode("%%%") is None
    assert try_decode(raw_token(b"{}")) is None
    assert try_decode(encode(PLAN, [])).document == PLAN


class TestCompactEntries:
    """Tuple shapes of each compact variant."""

    def test_tuple_shapes(self):
        assert DeletionEntry("gone").to_tuple() == ["D", "gone"]
        assert DeletionEntry("gone", author="kim").to_tuple() == ["D", "gone", "kim"]
        assert DeletionEntry("gone", note="why").to_tuple() == ["D", "gone", None, "why"]
        assert InsertionEntry("after", "new").to_tuple() == ["I", "after", "new"]
        assert ReplacementEntry("old", "new", "kim").to_tuple() == ["R", "old", "new", "kim"]
        assert CommentEntry("text", "note").to_tuple() == ["C", "text", "note"]
        assert GlobalCommentEntry("overall", "lee").to_tuple() == ["G", "overall", "lee"]

    def test_entries_read_back(self):
        assert entry_from_tuple(["D", "gone", None, "why"]) == DeletionEntry("gone", note="why")
        assert entry_from_tuple(["R", "old", "new", "kim"]) == ReplacementEntry("old", "new", "kim")
        assert entry_from_tuple(["G", "overall"]) == GlobalCommentEntry("overall")

    def test_compact_annotation_picks_variant(self):
        assert compact_annotation(ANNOTATIONS[0]) == DeletionEntry("Store tokens in redis")
        assert isinstance(compact_annotation(ANNOTATIONS[5]), GlobalCommentEntry)

    def test_wire_form(self):
        payload = SharePayload.from_annotations("doc", [ANNOTATIONS[4]])

        assert payload.to_wire() == {"p": "doc", "a": [["C", "login", "Which provider?"]]}


class TestRestoredAnnotations:
    """Rebuilding annotations from a payload."""

    def test_order_and_timestamps(self):
        restored = decode(encode(PLAN, ANNOTATIONS)).to_annotations(base_time=50.0)

        assert [a.created_at for a in restored] == pytest.approx([50.0, 50.001, 50.002, 50.003, 50.004, 50.005])
        assert len({a.id for a in restored}) == len(restored)

    def test_relocation_against_blocks(self):
        edited = "# Add Auth\n\nUse JWTs for login.\n\n- Add logout endpoint\n"
        restored = decode(encode(PLAN, ANNOTATIONS)).to_annotations(parse(edited))

        by_target = {(a.type, a.target_text): a for a in restored}
        insertion = by_target[(AnnotationType.INSERTION, "Add logout endpoint")]
        assert insertion.position.block_id == "block-2"
        assert not insertion.orphaned
        assert by_target[(AnnotationType.DELETION, "Store tokens in redis")].orphaned
        assert by_target[(AnnotationType.REPLACEMENT, "sessions")].orphaned
        assert by_target[(AnnotationType.COMMENT, "login")].position.block_id == "block-1"

        global_comment = by_target[(AnnotationType.GLOBAL_COMMENT, "")]
        assert global_comment.position is None
        assert not global_comment.orphaned


def test_share_url_helpers():
    url = build_share_url("abc_-123", "https://example.test/s/")

    assert url == "https://example.test/s/#abc_-123"
    assert extract_token(url) == "abc_-123"
    assert extract_token("  abc_-123 ") == "abc_-123"
    assert build_share_url("tok", "https://example.test/#old") == "https://example.test/#tok"
