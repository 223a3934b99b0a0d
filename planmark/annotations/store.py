"""
In-memory annotation store for planmark.

Annotations are kept per document key (a file path, slug or any caller-chosen
string). Each store instance is independent, so separate review sessions and
tests never share state.
"""

import logging
from typing import Dict, List, Optional, Sequence

from ..models import Annotation, Block
from .reconciler import reconcile, sort_for_display


class AnnotationStore:
    """
    Holds the annotations of one or more documents.
    """

    def __init__(self):
        """Initialize an empty store."""
        self._annotations: Dict[str, List[Annotation]] = {}

    def add(self, document_key: str, annotation: Annotation) -> None:
        """
        Add an annotation to a document, replacing any with the same id.

        Args:
            document_key: Key of the document being annotated
            annotation: The annotation to store
        """
        items = self._annotations.setdefault(document_key, [])
        for index, existing in enumerate(items):
            if existing.id == annotation.id:
                items[index] = annotation
                return
        items.append(annotation)

    def get(self, document_key: str) -> List[Annotation]:
        """Return a document's annotations in display order."""
        return sort_for_display(self._annotations.get(document_key, []))

    def find(self, document_key: str, annotation_id: str) -> Optional[Annotation]:
        """Return one annotation by id, or None."""
        for annotation in self._annotations.get(document_key, []):
            if annotation.id == annotation_id:
                return annotation
        return None

    def remove(self, document_key: str, annotation_id: str) -> bool:
        """
        Remove an annotation.

        Returns:
            True if an annotation was removed, False if none had that id
        """
        items = self._annotations.get(document_key, [])
        remaining = [a for a in items if a.id != annotation_id]
        if len(remaining) == len(items):
            return False
        self._annotations[document_key] = remaining
        return True

    def replace_all(self, document_key: str, annotations: Sequence[Annotation]) -> None:
        """Replace every annotation of a document."""
        self._annotations[document_key] = list(annotations)

    def clear(self, document_key: Optional[str] = None) -> None:
        """Forget one document's annotations, or all of them."""
        if document_key is None:
            self._annotations.clear()
        else:
            self._annotations.pop(document_key, None)

    def documents(self) -> List[str]:
        """Keys of documents that currently hold annotations."""
        return [key for key, items in self._annotations.items() if items]

    def reconcile(self, document_key: str, blocks: Sequence[Block]) -> List[Annotation]:
        """
        Re-anchor a document's annotations after it was reparsed.

        Args:
            document_key: Key of the reloaded document
            blocks: The document's new blocks

        Returns:
            The reconciled annotations in display order
        """
        items = self._annotations.get(document_key, [])
        if not items:
            return []
        logging.info(f"Reconciling annotations for {document_key}")
        self._annotations[document_key] = reconcile(items, blocks)
        return self.get(document_key)
