from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, Optional, Union

from platformdirs import PlatformDirs

from .fs import ensure_dir, ensure_file
from .sanitize import is_valid_slot_id

logger = logging.getLogger(__name__)

APP_NAME = "StateSlots"
SAVES_DIR_NAME = "saves"
SLOT_EXTENSION = "json"

# Environment override for the data directory (useful for tests and portable installs)
ENV_DATA_DIR = "STATESLOTS_DATA_DIR"


class PathResolver:
    """Resolve the save root and per-slot file paths.

    Layout: ``<data dir>/saves/<slot_id>.json``. The data dir is, in order of
    precedence, the explicit ``base_dir``, ``$STATESLOTS_DATA_DIR``, or the
    platform user data directory from platformdirs.
    """

    def __init__(
        self,
        base_dir: Optional[Union[str, Path]] = None,
        app_name: str = APP_NAME,
        extension: str = SLOT_EXTENSION,
    ) -> None:
        self.app_name = app_name
        self.extension = extension.lstrip(".")
        self._root = self._compute_base(base_dir) / SAVES_DIR_NAME

    def _compute_base(self, base_dir: Optional[Union[str, Path]]) -> Path:
        if base_dir is not None:
            return Path(base_dir).expanduser().resolve()
        override = os.getenv(ENV_DATA_DIR)
        if override:
            return Path(override).expanduser().resolve()
        dirs = PlatformDirs(appname=self.app_name, appauthor=False)
        return Path(dirs.user_data_dir).expanduser().resolve()

    @property
    def suffix(self) -> str:
        return f".{self.extension}"

    def root_path(self) -> Path:
        """Return the save root, creating it on first use."""
        if not self._root.is_dir():
            logger.debug("Creating save root %s", self._root)
            ensure_dir(self._root)
        return self._root

    def slot_path(self, slot_id: str, create: bool = True) -> Path:
        """Return ``root/<slot_id>.json``.

        With ``create`` set, an empty placeholder file is created when the slot
        has no file yet, so the returned path is always openable.
        """
        path = self.root_path() / f"{slot_id}{self.suffix}"
        if create and not path.exists():
            ensure_file(path)
        return path

    def slot_id_from_path(self, path: Union[str, Path]) -> Optional[str]:
        """Reverse the naming rule. Returns None for files that are not slot files."""
        name = Path(path).name
        if not name.endswith(self.suffix):
            return None
        stem = name[: -len(self.suffix)]
        return stem if is_valid_slot_id(stem) else None

    def iter_slot_files(self) -> Iterator[Path]:
        """Yield every slot file in the root, sorted by name."""
        for path in sorted(self.root_path().glob(f"*{self.suffix}")):
            if not path.is_file():
                continue
            if self.slot_id_from_path(path) is None:
                logger.debug("Ignoring non-slot file in save root: %s", path.name)
                continue
            yield path
