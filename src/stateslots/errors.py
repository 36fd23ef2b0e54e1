from __future__ import annotations

from pathlib import Path
from typing import List, Tuple


class SaveError(Exception):
    """Base exception for save/load errors."""


class SaveIOError(SaveError):
    """Raised when a slot file cannot be read or written (missing file, permissions, disk full)."""


class EncodeError(SaveError):
    """Raised when a StateDocument cannot be encoded to JSON."""


class DecodeError(SaveError):
    """Raised when file content is malformed or does not match the document layout."""


class PartialEnumerationFailure(SaveError):
    """Raised by a strict bulk load when one or more slot files could not be decoded.

    ``failures`` holds ``(path, reason)`` pairs for every file that was skipped.
    """

    def __init__(self, failures: List[Tuple[Path, str]]) -> None:
        self.failures = list(failures)
        names = ", ".join(p.name for p, _ in self.failures)
        super().__init__(f"{len(self.failures)} slot file(s) could not be loaded: {names}")


class SlotNotFoundError(SaveIOError):
    """Raised when the requested slot or file does not exist."""
