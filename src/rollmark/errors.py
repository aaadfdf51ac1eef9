"""Exceptions raised by rollmark.

Every message is meant to be shown to the user as-is.
"""


class RollmarkError(Exception):
    """Base class for user-correctable rollmark errors."""

    pass


class EmptyInputError(RollmarkError):
    """Raised when an identifier or grade list holds no valid entries."""

    pass


class MissingGradeError(RollmarkError):
    """Raised when a grade line has a valid id but no grade text."""

    def __init__(self, student_id: str):
        self.student_id = student_id
        super().__init__(f"Missing grade for ID '{student_id}'")


class InvalidTaskError(RollmarkError):
    """Raised when a task kind is outside the supported set."""

    pass


class ColumnNotFoundError(RollmarkError):
    """Raised when a selected column key or header cannot be resolved."""

    pass


class InvalidGridError(RollmarkError):
    """Raised when a grid has no sheets or the requested scope is empty."""

    pass


class PreviewRowNotFoundError(RollmarkError):
    """Raised when a preview row sequence number does not exist."""

    pass


class ApplyRefusedError(RollmarkError):
    """Raised when an apply request is not allowed to write."""

    pass
