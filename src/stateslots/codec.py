from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, Optional, Union

from .errors import DecodeError, EncodeError
from .models import StateDocument
from .sanitize import DEFAULT_SLOT_ID

KEY_SAVE_ID = "SaveId"
KEY_APPLICATION_VERSION = "ApplicationVersion"
KEY_SAVE_DATE_TIME = "SaveDateTime"
HEADER_KEYS = (KEY_SAVE_ID, KEY_APPLICATION_VERSION, KEY_SAVE_DATE_TIME)


def to_dict(doc: StateDocument) -> Dict[str, Any]:
    """Flatten a document into the on-disk JSON layout.

    Header fields come first in a fixed order, payload fields follow sorted
    by key, so repeated saves of the same state produce identical bytes.
    """
    bad_keys = [k for k in doc.payload if not isinstance(k, str)]
    if bad_keys:
        raise EncodeError(f"Payload keys must be strings, got {bad_keys!r}")
    clashes = [k for k in doc.payload if k in HEADER_KEYS]
    if clashes:
        raise EncodeError(f"Payload uses reserved keys: {', '.join(sorted(clashes))}")
    data: Dict[str, Any] = {
        KEY_SAVE_ID: doc.slot_id,
        KEY_APPLICATION_VERSION: doc.application_version,
        KEY_SAVE_DATE_TIME: doc.saved_at.isoformat() if doc.saved_at is not None else None,
    }
    for key in sorted(doc.payload):
        data[key] = doc.payload[key]
    return data


def encode(doc: StateDocument) -> bytes:
    """Encode a StateDocument to pretty-printed UTF-8 JSON."""
    data = to_dict(doc)
    try:
        text = json.dumps(data, ensure_ascii=False, indent=2, allow_nan=False)
        return (text + "\n").encode("utf-8")
    except (TypeError, ValueError) as e:
        # UnicodeEncodeError (lone surrogates) is a ValueError too
        raise EncodeError(f"Payload is not JSON serializable: {e}") from e


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise DecodeError(f"{KEY_SAVE_DATE_TIME} must be a string, got {type(value).__name__}")
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise DecodeError(f"Unparseable {KEY_SAVE_DATE_TIME}: {value!r}") from e


def _string_field(data: Dict[str, Any], key: str, default: str) -> str:
    value = data.get(key, default)
    if value is None:
        return default
    if not isinstance(value, str):
        raise DecodeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def from_dict(data: Dict[str, Any]) -> StateDocument:
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object, got {type(data).__name__}")
    return StateDocument(
        slot_id=_string_field(data, KEY_SAVE_ID, DEFAULT_SLOT_ID),
        application_version=_string_field(data, KEY_APPLICATION_VERSION, ""),
        saved_at=_parse_timestamp(data.get(KEY_SAVE_DATE_TIME)),
        payload={k: v for k, v in data.items() if k not in HEADER_KEYS},
    )


def decode(data: Union[bytes, str]) -> StateDocument:
    """Decode JSON bytes (or text) into a StateDocument."""
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Invalid UTF-8: {e}") from e
    else:
        text = data
    if not text.strip():
        raise DecodeError("Empty save file")
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON: {e}") from e
    return from_dict(raw)
