from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Set, Tuple

from . import codec
from .errors import DecodeError, PartialEnumerationFailure
from .fs import read_bytes
from .models import StateDocument
from .paths import PathResolver

logger = logging.getLogger(__name__)


class BulkCatalog:
    """Enumerate slots in the save root and optionally load them all.

    ``load_all_documents`` decodes every slot file, so its cost grows with
    slot count times document size. Call it once (e.g. at startup) and cache
    the result rather than calling it on a hot path.
    """

    def __init__(self, paths: PathResolver) -> None:
        self.paths = paths
        self.last_failures: List[Tuple[Path, str]] = []

    def list_slot_ids(self) -> Set[str]:
        """Return the ids of every slot file, derived from file names only."""
        ids: Set[str] = set()
        for path in self.paths.iter_slot_files():
            slot_id = self.paths.slot_id_from_path(path)
            if slot_id is not None:
                ids.add(slot_id)
        return ids

    async def load_all_documents(self, strict: bool = False) -> List[StateDocument]:
        """Decode every slot file, sorted by slot id.

        Files that cannot be read or decoded are skipped, logged and recorded in
        ``last_failures``. Zero-length placeholder files are skipped without an
        error. With ``strict`` set, a PartialEnumerationFailure is raised after
        the scan if anything failed.
        """
        documents: List[StateDocument] = []
        failures: List[Tuple[Path, str]] = []
        slot_files = await asyncio.to_thread(lambda: list(self.paths.iter_slot_files()))
        for path in slot_files:
            slot_id = self.paths.slot_id_from_path(path)
            try:
                data = await asyncio.to_thread(read_bytes, path)
                if not data.strip():
                    logger.debug("Skipping empty slot placeholder %s", path)
                    continue
                doc = codec.decode(data)
            except (OSError, DecodeError) as exc:
                logger.error("Failed to load slot file %s: %s", path, exc)
                failures.append((path, str(exc)))
                continue
            doc.slot_id = slot_id or doc.slot_id
            documents.append(doc)

        self.last_failures = failures
        if failures:
            logger.warning("Loaded %d slot(s); skipped %d unreadable file(s)", len(documents), len(failures))
            if strict:
                raise PartialEnumerationFailure(failures)
        return documents
