"""Exceptions raised by planmark operations."""


class PlanmarkError(Exception):
    """Base class for all planmark errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class InvalidAnnotation(PlanmarkError):
    """
    Raised when an annotation cannot be built from the given input.

    Covers missing notes on annotation types that need one. Callers surface
    this to the user; it is never retried.
    """


class InvalidSelection(InvalidAnnotation):
    """Raised when a selection is empty or whitespace-only for a type that targets text."""

    def __init__(self, annotation_type: str) -> None:
        self.annotation_type = annotation_type
        super().__init__(f"A non-empty text selection is required for {annotation_type} annotations")


class CorruptPayload(PlanmarkError):
    """
    Raised when a share token cannot be decoded.

    The stage that failed (alphabet, decompression, JSON, structure) is kept
    so callers can log it before treating the token as nothing to restore.
    """

    def __init__(self, stage: str, detail: str) -> None:
        self.stage = stage
        self.detail = detail
        super().__init__(f"Corrupt share payload ({stage}): {detail}")


class InvalidIdentity(PlanmarkError):
    """Raised when a project or slug cannot be used as a storage path segment."""

    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field}: {value!r}")
