from __future__ import annotations
from dataclasses import dataclass
from typing import Any


SAVE_BUFF_SIZE = 8 * 1024   # upper bound of a single write


class StreamError(IOError):
    """Base class for failures surfaced by flow() and save()."""
    action = "I/O on"

    def __init__(self, path: Any, cause: BaseException | None = None):
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{self.action} {path!s} failed{detail}")


class OpenFailure(StreamError):
    """Raised when the provider cannot open the file in the requested mode."""
    action = "Opening"


class ReadFailure(StreamError):
    """Raised when the provider fails while streaming blocks."""
    action = "Reading"


class WriteFailure(StreamError):
    """Raised when the provider fails to acknowledge a block write or close."""
    action = "Writing"


class SourceFailure(StreamError):
    """Raised when the byte sequence handed to save() itself fails."""
    action = "Consuming input for"


@dataclass(slots=True)
class Completion:
    success: bool
    error: str | None
    bytes_read: int             # bytes pulled from the source; not a count of durable bytes
    path: str | None = None
