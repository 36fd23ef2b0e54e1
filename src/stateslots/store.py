from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Set, Tuple, Union

from . import codec
from .catalog import BulkCatalog
from .errors import DecodeError, EncodeError, SaveIOError, SlotNotFoundError
from .fs import atomic_write_bytes, read_bytes
from .hooks import HookPoint, LifecycleEvent, LifecycleHooks
from .models import (
    DECODE_ERROR,
    ENCODE_ERROR,
    IO_ERROR,
    NOT_FOUND,
    LoadResult,
    SaveResult,
    StateDocument,
)
from .paths import PathResolver
from .sanitize import DEFAULT_SLOT_ID, sanitize_with_notice
from .settings import EngineSettings

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class _PathLock:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class SlotStore:
    """Save and load the live StateDocument to named slots on disk.

    Every operation is a coroutine; file access is handed to
    ``asyncio.to_thread`` so the caller's event loop stays responsive. Storage
    failures never propagate: they are logged and reported through the
    returned SaveResult/LoadResult. Exceptions raised by lifecycle handlers do
    propagate.

    Hook order:
    - save: before-save, write, after-save (after-save fires even on failure)
    - load: before-load, read, replace live document, after-load (success only)

    With ``serialize_slot_writes`` (the default) operations on the same file
    are serialized by a per-file lock. Without it, concurrent saves to one slot
    race and the last ``os.replace`` wins.
    """

    def __init__(
        self,
        paths: Optional[PathResolver] = None,
        *,
        application_version: str = "0.0.0",
        clock: Optional[Callable[[], datetime]] = None,
        document: Optional[StateDocument] = None,
        hooks: Optional[LifecycleHooks] = None,
        serialize_slot_writes: bool = True,
    ) -> None:
        self.paths = paths or PathResolver()
        self.application_version = application_version
        self.clock = clock or _utc_now
        self.document = document if document is not None else StateDocument()
        self.hooks = hooks or LifecycleHooks()
        self.catalog = BulkCatalog(self.paths)
        self.serialize_slot_writes = serialize_slot_writes
        self._locks: Dict[Tuple[asyncio.AbstractEventLoop, str], _PathLock] = {}
        self._background: Set["asyncio.Task[Any]"] = set()

    @classmethod
    def from_settings(cls, settings: EngineSettings, **kwargs: Any) -> "SlotStore":
        """Build a store from an EngineSettings instance."""
        paths = PathResolver(base_dir=settings.data_dir, app_name=settings.app_name)
        return cls(
            paths,
            application_version=settings.application_version,
            serialize_slot_writes=settings.serialize_slot_writes,
            **kwargs,
        )

    # Slot operations

    async def save_to_slot(self, slot_id: Optional[str] = DEFAULT_SLOT_ID, document: Optional[StateDocument] = None) -> SaveResult:
        """Stamp and write ``document`` (the live document by default) to a slot."""
        slot, notice = sanitize_with_notice(slot_id)
        doc = document if document is not None else self.document
        doc.slot_id = slot
        doc.application_version = self.application_version
        doc.saved_at = self.clock()

        result = await self._save(doc, slot, lambda: self.paths.slot_path(slot, create=False))
        result.notice = notice
        return result

    async def load_from_slot(self, slot_id: Optional[str] = DEFAULT_SLOT_ID) -> LoadResult:
        """Read a slot and make it the live document.

        Loading a slot that was never saved resolves with code NOT_FOUND and
        leaves the live document untouched.
        """
        slot, notice = sanitize_with_notice(slot_id)
        result = await self._load(slot, lambda: self.paths.slot_path(slot, create=False))
        result.notice = notice
        return result

    async def quick_save(self) -> SaveResult:
        return await self.save_to_slot(DEFAULT_SLOT_ID)

    async def quick_load(self) -> LoadResult:
        return await self.load_from_slot(DEFAULT_SLOT_ID)

    # File operations

    async def save_to_file(self, path: PathLike, document: Optional[StateDocument] = None) -> SaveResult:
        """Write a document as-is to an arbitrary path (export).

        Unlike save_to_slot, no fields are stamped.
        """
        doc = document if document is not None else self.document
        target = Path(path)
        return await self._save(doc, None, lambda: target)

    async def load_from_file(self, path: PathLike) -> LoadResult:
        """Read a document from an arbitrary path (import) and make it live."""
        target = Path(path)
        return await self._load(None, lambda: target)

    def load_document(self, document: StateDocument) -> None:
        """Replace the live document directly and fire after-load."""
        self.document = document
        self.hooks.fire(LifecycleEvent(HookPoint.AFTER_LOAD, slot_id=document.slot_id))

    # Catalog

    def list_slot_ids(self) -> Set[str]:
        return self.catalog.list_slot_ids()

    async def load_all_documents(self, strict: bool = False) -> List[StateDocument]:
        return await self.catalog.load_all_documents(strict=strict)

    # Detached calls

    def spawn(self, operation: Awaitable[Any], label: Optional[str] = None) -> "asyncio.Task[Any]":
        """Run ``operation`` as a background task on the running loop.

        The task is returned so callers may still await it. An exception that
        escapes it (typically from a lifecycle handler) is logged.
        """
        task = asyncio.ensure_future(operation)
        name = label or repr(operation)
        self._background.add(task)

        def _done(t: "asyncio.Task[Any]") -> None:
            self._background.discard(t)
            if t.cancelled():
                return
            exc = t.exception()
            if exc is not None:
                logger.error("Background state operation %s failed: %s", name, exc, exc_info=exc)

        task.add_done_callback(_done)
        return task

    # Internals

    @contextlib.asynccontextmanager
    async def _guard(self, path: Path) -> AsyncIterator[None]:
        """Serialize access to ``path`` among coroutines on the running loop.

        Locks are keyed by loop and absolute path, and dropped once no
        coroutine holds or waits on them.
        """
        if not self.serialize_slot_writes:
            yield
            return
        key = (asyncio.get_running_loop(), os.path.abspath(path))
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = _PathLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0 and self._locks.get(key) is entry:
                del self._locks[key]

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        try:
            atomic_write_bytes(path, data)
        except OSError as e:
            raise SaveIOError(f"Cannot write {path}: {e}") from e

    @staticmethod
    def _read(path: Path) -> bytes:
        try:
            return read_bytes(path)
        except FileNotFoundError as e:
            raise SlotNotFoundError(f"Save file not found: {path}") from e
        except OSError as e:
            raise SaveIOError(f"Cannot read {path}: {e}") from e

    async def _save(self, doc: StateDocument, slot_id: Optional[str], resolve: Callable[[], Path]) -> SaveResult:
        self.hooks.fire(LifecycleEvent(HookPoint.BEFORE_SAVE, slot_id=slot_id))
        path: Optional[Path] = None
        try:
            path = await asyncio.to_thread(resolve)
            data = codec.encode(doc)
            async with self._guard(path):
                await asyncio.to_thread(self._write, path, data)
        except EncodeError as exc:
            logger.error("Error encoding state for %s: %s", path or slot_id, exc)
            result = SaveResult(False, path, slot_id, code=ENCODE_ERROR, message=str(exc))
        except (SaveIOError, OSError) as exc:
            logger.error("Error saving to file %s: %s", path or slot_id, exc)
            result = SaveResult(False, path, slot_id, code=IO_ERROR, message=str(exc))
        else:
            logger.info("Saved state to %s", path)
            result = SaveResult(True, path, slot_id)

        self.hooks.fire(LifecycleEvent(HookPoint.AFTER_SAVE, slot_id=slot_id, path=path, success=result.success))
        return result

    async def _load(self, slot_id: Optional[str], resolve: Callable[[], Path]) -> LoadResult:
        self.hooks.fire(LifecycleEvent(HookPoint.BEFORE_LOAD, slot_id=slot_id))
        path: Optional[Path] = None
        try:
            path = await asyncio.to_thread(resolve)
            async with self._guard(path):
                data = await asyncio.to_thread(self._read, path)
            doc = codec.decode(data)
        except SlotNotFoundError as exc:
            logger.warning("No save to load at %s", path or slot_id)
            return LoadResult(False, path, slot_id, code=NOT_FOUND, message=str(exc))
        except DecodeError as exc:
            logger.error("Error loading save file %s: %s", path, exc)
            return LoadResult(False, path, slot_id, code=DECODE_ERROR, message=str(exc))
        except (SaveIOError, OSError) as exc:
            logger.error("Error loading save file %s: %s", path or slot_id, exc)
            return LoadResult(False, path, slot_id, code=IO_ERROR, message=str(exc))

        if slot_id is not None:
            doc.slot_id = slot_id
        self.document = doc
        logger.info("Loaded state from %s", path)
        self.hooks.fire(LifecycleEvent(HookPoint.AFTER_LOAD, slot_id=slot_id, path=path))
        return LoadResult(True, path, slot_id, document=doc)
