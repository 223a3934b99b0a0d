"""
Base parser interface for planmark.

This module defines the abstract interface that all document parsers must implement.
"""

from abc import ABC, abstractmethod
from typing import List

from ..models import Block


class BaseParser(ABC):
    """
    Abstract base class for all document parsers.

    Each parser converts the text of a plan in some markup into the ordered
    Block sequence that annotations and outlines are anchored to.
    """

    @abstractmethod
    def parse(self, text: str) -> List[Block]:
        """
        Split a document into blocks.

        Implementations must be pure and must never raise: input they do not
        understand degrades to paragraph blocks.

        Args:
            text: Raw document text

        Returns:
            List of Block objects in document order
        """
        pass
