"""Save-slot persistence for a single application state document.

This package provides:
- Slot id sanitization and save-root/slot path resolution
- A stable JSON codec for StateDocument
- SlotStore, which saves/loads slots and files with atomic writes, lifecycle
  hooks and contained I/O failures
- BulkCatalog for slot enumeration and eager loading
"""
from importlib.metadata import PackageNotFoundError, version

from .catalog import BulkCatalog
from .errors import (
    DecodeError,
    EncodeError,
    PartialEnumerationFailure,
    SaveError,
    SaveIOError,
    SlotNotFoundError,
)
from .hooks import HookPoint, LifecycleEvent, LifecycleHooks
from .models import LoadResult, SaveResult, StateDocument
from .paths import PathResolver
from .sanitize import DEFAULT_SLOT_ID, SanitizationNotice, sanitize_slot_id
from .settings import EngineSettings, load_settings
from .store import SlotStore

try:
    __version__ = version("stateslots")
except PackageNotFoundError:  # pragma: no cover - during tests without packaging
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "DEFAULT_SLOT_ID",
    "BulkCatalog",
    "DecodeError",
    "EncodeError",
    "EngineSettings",
    "HookPoint",
    "LifecycleEvent",
    "LifecycleHooks",
    "LoadResult",
    "PartialEnumerationFailure",
    "PathResolver",
    "SanitizationNotice",
    "SaveError",
    "SaveIOError",
    "SaveResult",
    "SlotNotFoundError",
    "SlotStore",
    "StateDocument",
    "load_settings",
    "sanitize_slot_id",
]
