import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from stateslots.paths import PathResolver  # noqa: E402
from stateslots.store import SlotStore  # noqa: E402

FIXED_NOW = datetime(2024, 5, 17, 14, 30, 5, 123456, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("STATESLOTS_DATA_DIR", "STATESLOTS_APP_VERSION", "STATESLOTS_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture()
def paths(tmp_path: Path) -> PathResolver:
    return PathResolver(base_dir=tmp_path / "data")


@pytest.fixture()
def store(paths: PathResolver) -> SlotStore:
    return SlotStore(paths, application_version="1.2.3", clock=lambda: FIXED_NOW)
