from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import codec
from .logging_config import configure_logging
from .settings import load_settings
from .store import SlotStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stateslots", description="Inspect and transfer save slots")
    parser.add_argument("--data-dir", type=Path, default=None, help="Data directory (saves live in <data-dir>/saves)")
    parser.add_argument("--config", type=Path, default=None, help="YAML settings file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("path", help="Print the save folder")
    sub.add_parser("list", help="List slot ids")

    show = sub.add_parser("show", help="Print a slot's stored document")
    show.add_argument("slot")

    export = sub.add_parser("export", help="Copy a slot to an arbitrary file")
    export.add_argument("slot")
    export.add_argument("dest", type=Path)

    imp = sub.add_parser("import", help="Load a file and save it into a slot")
    imp.add_argument("src", type=Path)
    imp.add_argument("slot")
    return parser


async def _run(store: SlotStore, args: argparse.Namespace) -> int:
    if args.command == "path":
        print(store.paths.root_path())
        return 0

    if args.command == "list":
        for slot_id in sorted(store.list_slot_ids()):
            print(slot_id)
        return 0

    if args.command == "show":
        loaded = await store.load_from_slot(args.slot)
        if not loaded.success:
            print(f"error: {loaded.message}", file=sys.stderr)
            return 1
        sys.stdout.write(codec.encode(store.document).decode("utf-8"))
        return 0

    if args.command == "export":
        loaded = await store.load_from_slot(args.slot)
        if not loaded.success:
            print(f"error: {loaded.message}", file=sys.stderr)
            return 1
        saved = await store.save_to_file(args.dest)
        if not saved.success:
            print(f"error: {saved.message}", file=sys.stderr)
            return 1
        print(saved.path)
        return 0

    if args.command == "import":
        loaded = await store.load_from_file(args.src)
        if not loaded.success:
            print(f"error: {loaded.message}", file=sys.stderr)
            return 1
        saved = await store.save_to_slot(args.slot)
        if not saved.success:
            print(f"error: {saved.message}", file=sys.stderr)
            return 1
        print(saved.slot_id)
        return 0

    return 1  # pragma: no cover - argparse enforces the choices


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config)
    configure_logging(logging.DEBUG if args.debug else settings.log_level)
    if args.data_dir is not None:
        settings = settings.model_copy(update={"data_dir": args.data_dir})
    store = SlotStore.from_settings(settings)
    return asyncio.run(_run(store, args))


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
