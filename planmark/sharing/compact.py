"""
Compact annotation forms used in share payloads.

Each annotation type has exactly one compact variant, written on the wire as
a JSON array whose first element is a one-character tag:

    D  deletion        ["D", target]  /  ["D", target, author]  /  ["D", target, author|null, note]
    I  insertion       ["I", target, text, author?]
    R  replacement     ["R", target, text, author?]
    C  comment         ["C", target, note, author?]
    G  global comment  ["G", note, author?]

Positions are never transmitted; they are recomputed against the document on
load.
"""

import time
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Type, Union
import uuid

from ..annotations import relocate
from ..errors import CorruptPayload
from ..models import Annotation, AnnotationType, Block


def _with_author(values: List[Any], author: Optional[str]) -> List[Any]:
    if author is not None:
        values.append(author)
    return values


def _unpack(values: Sequence[Any], required: int, optional: int = 1) -> List[Any]:
    """Split a tuple body into `required` strings followed by up to `optional` optional values."""
    body = list(values[1:])
    if not required <= len(body) <= required + optional:
        raise CorruptPayload("structure", f"'{values[0]}' entry has {len(body)} fields")
    if not all(isinstance(v, str) for v in body[:required]):
        raise CorruptPayload("structure", f"'{values[0]}' entry has non-text fields")
    if not all(v is None or isinstance(v, str) for v in body[required:]):
        raise CorruptPayload("structure", f"'{values[0]}' entry has non-text fields")
    return body + [None] * (required + optional - len(body))


@dataclass(frozen=True)
class DeletionEntry:
    """A deletion: the target text, plus author and note only when present."""

    TAG: ClassVar[str] = "D"
    target_text: str
    author: Optional[str] = None
    note: Optional[str] = None

    def to_tuple(self) -> List[Any]:
        if self.note is not None:
            return [self.TAG, self.target_text, self.author, self.note]
        return _with_author([self.TAG, self.target_text], self.author)

    @classmethod
    def from_tuple(cls, values: Sequence[Any]) -> "DeletionEntry":
        target_text, author, note = _unpack(values, 1, 2)
        return cls(target_text=target_text, author=author, note=note)


@dataclass(frozen=True)
class InsertionEntry:
    """An insertion: the anchoring target text and the text to add."""

    TAG: ClassVar[str] = "I"
    target_text: str
    note: str
    author: Optional[str] = None

    def to_tuple(self) -> List[Any]:
        return _with_author([self.TAG, self.target_text, self.note], self.author)

    @classmethod
    def from_tuple(cls, values: Sequence[Any]) -> "InsertionEntry":
        target_text, note, author = _unpack(values, 2)
        return cls(target_text=target_text, note=note, author=author)


@dataclass(frozen=True)
class ReplacementEntry:
    """A replacement: the old text and its replacement."""

    TAG: ClassVar[str] = "R"
    target_text: str
    note: str
    author: Optional[str] = None

    def to_tuple(self) -> List[Any]:
        return _with_author([self.TAG, self.target_text, self.note], self.author)

    @classmethod
    def from_tuple(cls, values: Sequence[Any]) -> "ReplacementEntry":
        target_text, note, author = _unpack(values, 2)
        return cls(target_text=target_text, note=note, author=author)


@dataclass(frozen=True)
class CommentEntry:
    """A comment on a piece of text."""

    TAG: ClassVar[str] = "C"
    target_text: str
    note: str
    author: Optional[str] = None

    def to_tuple(self) -> List[Any]:
        return _with_author([self.TAG, self.target_text, self.note], self.author)

    @classmethod
    def from_tuple(cls, values: Sequence[Any]) -> "CommentEntry":
        target_text, note, author = _unpack(values, 2)
        return cls(target_text=target_text, note=note, author=author)


@dataclass(frozen=True)
class GlobalCommentEntry:
    """A comment on the plan as a whole."""

    TAG: ClassVar[str] = "G"
    note: str
    author: Optional[str] = None

    def to_tuple(self) -> List[Any]:
        return _with_author([self.TAG, self.note], self.author)

    @classmethod
    def from_tuple(cls, values: Sequence[Any]) -> "GlobalCommentEntry":
        note, author = _unpack(values, 1)
        return cls(note=note, author=author)


CompactAnnotation = Union[DeletionEntry, InsertionEntry, ReplacementEntry, CommentEntry, GlobalCommentEntry]

ENTRY_TYPES: Dict[str, Type[Any]] = {
    DeletionEntry.TAG: DeletionEntry,
    InsertionEntry.TAG: InsertionEntry,
    ReplacementEntry.TAG: ReplacementEntry,
    CommentEntry.TAG: CommentEntry,
    GlobalCommentEntry.TAG: GlobalCommentEntry,
}

ANNOTATION_TYPES: Dict[Type[Any], AnnotationType] = {
    DeletionEntry: AnnotationType.DELETION,
    InsertionEntry: AnnotationType.INSERTION,
    ReplacementEntry: AnnotationType.REPLACEMENT,
    CommentEntry: AnnotationType.COMMENT,
    GlobalCommentEntry: AnnotationType.GLOBAL_COMMENT,
}


def compact_annotation(annotation: Annotation) -> CompactAnnotation:
    """Project an annotation onto its compact variant, dropping id, timestamp and position."""
    kind = annotation.type
    note = annotation.note or ""

    if kind is AnnotationType.DELETION:
        return DeletionEntry(target_text=annotation.target_text, author=annotation.author, note=annotation.note)
    if kind is AnnotationType.INSERTION:
        return InsertionEntry(target_text=annotation.target_text, note=note, author=annotation.author)
    if kind is AnnotationType.REPLACEMENT:
        return ReplacementEntry(target_text=annotation.target_text, note=note, author=annotation.author)
    if kind is AnnotationType.COMMENT:
        return CommentEntry(target_text=annotation.target_text, note=note, author=annotation.author)
    return GlobalCommentEntry(note=note, author=annotation.author)


def entry_from_tuple(values: Any) -> CompactAnnotation:
    """
    Read one compact entry from its decoded JSON form.

    Raises:
        CorruptPayload: If the value is not a known, well-formed tagged array
    """
    if not isinstance(values, list) or not values:
        raise CorruptPayload("structure", "annotation entry is not a non-empty array")
    entry_type = ENTRY_TYPES.get(values[0]) if isinstance(values[0], str) else None
    if entry_type is None:
        raise CorruptPayload("structure", f"unknown annotation tag {values[0]!r}")
    return entry_type.from_tuple(values)


def expand_entry(entry: CompactAnnotation, annotation_id: Optional[str] = None, created_at: float = 0.0) -> Annotation:
    """Rebuild a positionless Annotation from a compact entry."""
    return Annotation(
        id=annotation_id or str(uuid.uuid4()),
        type=ANNOTATION_TYPES[type(entry)],
        target_text=getattr(entry, "target_text", ""),
        note=getattr(entry, "note", None) or None,
        author=entry.author,
        created_at=created_at
    )


@dataclass
class SharePayload:
    """
    The minimal (document, annotations) projection carried by a share token.
    """

    document: str
    annotations: List[CompactAnnotation] = field(default_factory=list)

    @classmethod
    def from_annotations(cls, document: str, annotations: Sequence[Annotation]) -> "SharePayload":
        return cls(document=document, annotations=[compact_annotation(a) for a in annotations])

    def to_wire(self) -> Dict[str, Any]:
        """The JSON-ready form: {"p": document, "a": [tagged arrays]}."""
        return {"p": self.document, "a": [entry.to_tuple() for entry in self.annotations]}

    @classmethod
    def from_wire(cls, data: Any) -> "SharePayload":
        """
        Read a payload from its decoded JSON form.

        Raises:
            CorruptPayload: If the structure is not a payload object
        """
        if not isinstance(data, dict):
            raise CorruptPayload("structure", "payload is not an object")
        document = data.get("p")
        entries = data.get("a", [])
        if not isinstance(document, str) or not isinstance(entries, list):
            raise CorruptPayload("structure", "payload lacks document text or annotation list")
        return cls(document=document, annotations=[entry_from_tuple(values) for values in entries])

    def to_annotations(self, blocks: Optional[Sequence[Block]] = None, base_time: Optional[float] = None) -> List[Annotation]:
        """
        Rebuild annotations with fresh ids, keeping the shared order.

        Args:
            blocks: Blocks of the loaded document; when given, each annotation
                is relocated against them (unfound targets come back orphaned)
            base_time: created_at of the first annotation (defaults to now);
                later ones follow in millisecond steps

        Returns:
            The rebuilt annotations
        """
        if base_time is None:
            base_time = time.time()

        annotations = []
        for index, entry in enumerate(self.annotations):
            annotation = expand_entry(entry, created_at=base_time + index * 0.001)
            if blocks is not None:
                annotation = relocate(annotation, blocks)
            annotations.append(annotation)
        return annotations
