from typing import List, Optional


class StandardsError(Exception):
    """Base class for errors raised by standards_app."""


class StandardsValidationError(StandardsError, ValueError):
    """
    Raised when validation_mode='throw' and a call produced diagnostics.

    The message is every diagnostic joined with "; ". The individual
    messages are kept on `errors`.
    """

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class InvalidStandardReference(StandardsError):
    """A standard set refers to a level it has no cut for."""

    def __init__(self, message: str, set_id: Optional[str] = None):
        self.set_id = set_id
        super().__init__(message)
