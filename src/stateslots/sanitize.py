from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_SLOT_ID = "default"

_INVALID_CHARS = re.compile(r"[^a-zA-Z0-9_ ]+")
_WHITESPACE = re.compile(r"\s+")
_VALID_SLOT_ID = re.compile(r"^[A-Za-z0-9_]+$")


@dataclass(frozen=True)
class SanitizationNotice:
    """Non-fatal notice emitted when a raw slot id had to be rewritten."""

    raw: str
    sanitized: str


def is_valid_slot_id(token: str) -> bool:
    """Return True if ``token`` is already a usable slot id (letters, digits, underscores)."""
    return bool(token) and _VALID_SLOT_ID.match(token) is not None


def sanitize_with_notice(raw: Optional[str]) -> Tuple[str, Optional[SanitizationNotice]]:
    """Normalize ``raw`` into a slot id and report whether it was rewritten.

    Rules, in order:
    - empty input maps to ``DEFAULT_SLOT_ID`` without a notice
    - strip everything but ASCII letters, digits, underscores and spaces
    - collapse whitespace runs to one space and trim the edges
    - replace spaces with underscores
    - a result stripped down to nothing also maps to ``DEFAULT_SLOT_ID``
    """
    if not raw:
        return DEFAULT_SLOT_ID, None

    slot_id = _INVALID_CHARS.sub("", raw)
    slot_id = _WHITESPACE.sub(" ", slot_id).strip()
    slot_id = slot_id.replace(" ", "_")
    if not slot_id:
        slot_id = DEFAULT_SLOT_ID

    if slot_id == raw:
        return slot_id, None
    logger.warning("Invalid slot id converted: %r -> %r", raw, slot_id)
    return slot_id, SanitizationNotice(raw=raw, sanitized=slot_id)


def sanitize_slot_id(raw: Optional[str]) -> str:
    """Return a safe slot id for ``raw``, logging a warning if it had to change."""
    slot_id, _ = sanitize_with_notice(raw)
    return slot_id
