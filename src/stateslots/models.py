from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from .sanitize import DEFAULT_SLOT_ID, SanitizationNotice


@dataclass
class StateDocument:
    """Full persistable snapshot of application state.

    The engine stamps ``slot_id``, ``application_version`` and ``saved_at`` on
    save. ``payload`` belongs to the host application and must stay JSON-native
    (dicts, lists, strings, numbers, booleans, None) to survive a round-trip.
    """

    slot_id: str = DEFAULT_SLOT_ID
    application_version: str = ""
    saved_at: Optional[datetime] = None
    payload: Dict[str, Any] = field(default_factory=dict)


# Result codes
OK = "OK"
IO_ERROR = "IO_ERROR"
ENCODE_ERROR = "ENCODE_ERROR"
DECODE_ERROR = "DECODE_ERROR"
NOT_FOUND = "NOT_FOUND"


@dataclass
class SaveResult:
    success: bool
    path: Optional[Path]
    slot_id: Optional[str] = None
    code: str = OK  # OK | IO_ERROR | ENCODE_ERROR
    message: str = ""
    notice: Optional[SanitizationNotice] = None


@dataclass
class LoadResult:
    success: bool
    path: Optional[Path]
    slot_id: Optional[str] = None
    code: str = OK  # OK | NOT_FOUND | IO_ERROR | DECODE_ERROR
    message: str = ""
    notice: Optional[SanitizationNotice] = None
    document: Optional[StateDocument] = None
