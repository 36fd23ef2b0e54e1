import json
import logging

import pytest

from stateslots import codec
from stateslots.cli import main
from stateslots.models import StateDocument


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture()
def data_dir(tmp_path):
    d = tmp_path / "data"
    saves = d / "saves"
    saves.mkdir(parents=True)
    (saves / "alpha.json").write_bytes(
        codec.encode(StateDocument(slot_id="alpha", application_version="1.0", payload={"gold": 5}))
    )
    (saves / "beta.json").write_bytes(codec.encode(StateDocument(slot_id="beta")))
    return d


def test_path_command(data_dir, capsys):
    assert main(["--data-dir", str(data_dir), "path"]) == 0
    assert capsys.readouterr().out.strip() == str((data_dir / "saves").resolve())


def test_list_command(data_dir, capsys):
    assert main(["--data-dir", str(data_dir), "list"]) == 0
    assert capsys.readouterr().out.split() == ["alpha", "beta"]


def test_show_command(data_dir, capsys):
    assert main(["--data-dir", str(data_dir), "show", "alpha"]) == 0
    shown = json.loads(capsys.readouterr().out)
    assert shown["SaveId"] == "alpha"
    assert shown["gold"] == 5


def test_show_missing_slot_fails(data_dir, capsys):
    assert main(["--data-dir", str(data_dir), "show", "ghost"]) == 1
    assert "error" in capsys.readouterr().err


def test_export_then_import(data_dir, tmp_path, capsys):
    dest = tmp_path / "out" / "alpha_copy.json"
    assert main(["--data-dir", str(data_dir), "export", "alpha", str(dest)]) == 0
    assert codec.decode(dest.read_bytes()).payload == {"gold": 5}

    assert main(["--data-dir", str(data_dir), "import", str(dest), "Copy of Alpha"]) == 0
    assert capsys.readouterr().out.strip().endswith("Copy_of_Alpha")

    imported = codec.decode((data_dir / "saves" / "Copy_of_Alpha.json").read_bytes())
    assert imported.slot_id == "Copy_of_Alpha"
    assert imported.payload == {"gold": 5}


def test_import_bad_file_fails(data_dir, tmp_path):
    src = tmp_path / "bad.json"
    src.write_text("nope", encoding="utf-8")
    assert main(["--data-dir", str(data_dir), "import", str(src), "x"]) == 1
    assert not (data_dir / "saves" / "x.json").exists()
