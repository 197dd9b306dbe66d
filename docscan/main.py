import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from typing import Any

from docscan.analysis.exceptions import AnalysisFailureError
from docscan.config.settings import Settings
from docscan.logging.logger import Log
from docscan.normalization.exceptions import MalformedPayloadError
from docscan.processor.processor import DocumentProcessor, build_processor
from docscan.records.models import DocumentRecord
from docscan.storage.exceptions import StorageFailureError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="docscan", description="Scan and manage documents.")
    commands = parser.add_subparsers(dest="command", required=True)

    scan = commands.add_parser("scan", help="analyze an image and save the result")
    scan.add_argument("image", help="path or file:// URI of the image")

    commands.add_parser("list", help="list all records, newest first")

    show = commands.add_parser("show", help="show one record")
    show.add_argument("id")

    search = commands.add_parser("search", help="full-text search over records")
    search.add_argument("query")

    filter_cmd = commands.add_parser("filter", help="list records by document type")
    filter_cmd.add_argument("tag", help='document type substring, or "All"')

    edit = commands.add_parser("edit", help="edit fields of a record's data")
    edit.add_argument("id")
    edit.add_argument("edits", nargs="+", metavar="FIELD=VALUE")

    reanalyze = commands.add_parser("reanalyze", help="re-run analysis on a record's image")
    reanalyze.add_argument("id")

    delete = commands.add_parser("delete", help="delete a record")
    delete.add_argument("id")

    return parser


def parse_edits(pairs: Sequence[str]) -> dict[str, str]:
    """Parse FIELD=VALUE arguments into a dict of scalar edits."""
    edits: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise ValueError(f"Edit must look like FIELD=VALUE, got {pair!r}")
        edits[name] = value
    return edits


async def run_command(processor: DocumentProcessor, args: argparse.Namespace) -> Any:
    """Execute one command; return a JSON-serializable result or None for not-found."""
    store = processor.store
    if args.command == "scan":
        return _dump(await processor.scan(args.image))
    if args.command == "list":
        return [_dump(r) for r in reversed(await store.get_all())]
    if args.command == "show":
        return _dump(await store.get_by_id(args.id))
    if args.command == "search":
        return [_dump(r) for r in await store.search(args.query)]
    if args.command == "filter":
        return [_dump(r) for r in await store.filter_by_type(args.tag)]
    if args.command == "edit":
        return _dump(await processor.edit(args.id, parse_edits(args.edits)))
    if args.command == "reanalyze":
        return _dump(await processor.reanalyze(args.id))
    if args.command == "delete":
        return {"deleted": await store.delete(args.id)}
    raise ValueError(f"Unknown command {args.command!r}")


async def _run(settings: Settings, args: argparse.Namespace) -> int:
    processor = build_processor(settings)
    async with processor:
        result = await run_command(processor, args)
    if result is None:
        Log.error("Record not found")
        return 1
    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


def _dump(record: DocumentRecord | None) -> dict[str, Any] | None:
    return record.to_dict() if record is not None else None


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: parse args -> build dependencies -> run one command."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    try:
        return asyncio.run(_run(settings, args))
    except (AnalysisFailureError, MalformedPayloadError, StorageFailureError, ValueError) as exc:
        Log.error(f"{args.command} failed: {exc}")
        return 1
    except FileNotFoundError as exc:
        Log.error(str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
