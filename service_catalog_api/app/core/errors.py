"""
Error taxonomy for the service catalogue.

Client faults (``ValidationError``, ``NotFoundError``) are raised by
the catalogue service and mapped to 400/404 by the API layer.
Infrastructure faults (``StoreIOError``) wrap operating system errors
from the record store and are reported as a generic 500 without the
file path.  ``MalformedRowError`` never leaves the store: the loader
catches it, logs the row and skips it.
"""

from typing import Iterable, Optional


class CatalogError(Exception):
    """Base class for all catalogue errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CatalogError):
    """A required field is missing, empty or not storable."""

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None) -> None:
        super().__init__(message)
        self.fields = list(fields or [])


class NotFoundError(CatalogError):
    """The referenced service id does not exist in the current set."""

    def __init__(self, service_id: str) -> None:
        super().__init__("Service not found")
        self.service_id = service_id


class StoreIOError(CatalogError):
    """Reading or writing the backing file failed."""


class MalformedRowError(CatalogError):
    """A stored row does not fit the header it is read against."""

    def __init__(
        self, line_no: int, expected: int, actual: int, message: Optional[str] = None
    ) -> None:
        super().__init__(message or f"Line {line_no}: expected {expected} fields, got {actual}")
        self.line_no = line_no
        self.expected = expected
        self.actual = actual
