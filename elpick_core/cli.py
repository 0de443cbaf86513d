#!/usr/bin/env python3
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from .config import config
from .dom import HostDocument
from .exceptions import DocumentError, ElpickError
from .filter_rules import generate_filters
from .panels import default_panels
from .preferences import JSONFileBackend, PreferenceStore
from .selector_path import css_path
from .toolkit import Toolkit

logger = logging.getLogger(__name__)


def read_html(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    try:
        return Path(source).read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentError(f"Cannot read {source}: {e}") from e


def load_target(args: argparse.Namespace):
    doc = HostDocument.from_html(read_html(args.source), url=args.url or "")
    return doc, doc.query(args.selector)


def emit(payload: Any, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    elif isinstance(payload, str):
        print(payload)


def cmd_path(args: argparse.Namespace) -> int:
    _, element = load_target(args)
    path = css_path(element)
    emit({"path": path} if args.json else path, args.json)
    return 0


def cmd_filters(args: argparse.Namespace) -> int:
    doc, element = load_target(args)
    domain = args.domain or doc.hostname
    filters = generate_filters(element, domain)
    if args.json:
        emit({"domain": domain, "filters": [f.to_dict() for f in filters]}, True)
    else:
        for f in filters:
            print(f"{f.rule}\t# {f.description}")
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    doc, element = load_target(args)
    if args.domain:
        doc.url = f"https://{args.domain}/"
    toolkit = Toolkit(doc)
    toolkit.pick(element, panel_id="inspector")
    result = toolkit.panel("inspector").render()["result"] or {}
    candidates = toolkit.panel("filters").render()["candidates"]
    if args.json:
        emit({"domain": toolkit.domain, "inspector": result, "filters": candidates}, True)
        return 0
    print(result.get("summary", ""))
    print(f"CSS Path: {result.get('css_path', '')}")
    print("Filters:")
    for c in candidates:
        print(f"  {c['rule']}\t# {c['description']}")
    print("Outer HTML:")
    print(result.get("outer_html", ""))
    return 0


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw


async def _run_prefs(args: argparse.Namespace) -> int:
    component_ids = [panel.id for panel in default_panels()]
    backend = JSONFileBackend(Path(args.file) if args.file else None)
    store = PreferenceStore(backend, component_ids=component_ids)
    await store.load()

    if args.action == "show":
        emit(store.prefs, True)
    elif args.action == "get":
        if not args.key:
            raise ElpickError("prefs get needs a KEY")
        emit(store.get(args.key), True)
    elif args.action == "set":
        if not args.key or args.value is None:
            raise ElpickError("prefs set needs KEY and VALUE")
        store.set(args.key, _parse_value(args.value))
        emit(store.get(args.key), True)
    elif args.action == "reset":
        store.reset()
        emit(store.prefs, True)

    await store.flush()
    return 0


def cmd_prefs(args: argparse.Namespace) -> int:
    return asyncio.run(_run_prefs(args))


def _add_target_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("source", help="HTML file, or - for stdin")
    p.add_argument("-s", "--selector", required=True, help="CSS selector of the element to pick")
    p.add_argument("--url", default="", help="Page URL (its hostname scopes the filters)")
    p.add_argument("--json", action="store_true", help="JSON output")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="elpick", description="Selector paths and cosmetic filters for HTML elements")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("path", help="Canonical selector path of an element")
    _add_target_args(p)
    p.set_defaults(func=cmd_path)

    p = sub.add_parser("filters", help="Cosmetic filter candidates for an element")
    _add_target_args(p)
    p.add_argument("--domain", default="", help="Domain for the rules (overrides --url)")
    p.set_defaults(func=cmd_filters)

    p = sub.add_parser("inspect", help="Summary, path, filters and markup of an element")
    _add_target_args(p)
    p.add_argument("--domain", default="", help="Domain for the rules (overrides --url)")
    p.set_defaults(func=cmd_inspect)

    p = sub.add_parser("prefs", help="Show or edit stored preferences")
    p.add_argument("action", choices=["show", "get", "set", "reset"])
    p.add_argument("key", nargs="?")
    p.add_argument("value", nargs="?", help="JSON value (plain strings allowed)")
    p.add_argument("--file", default=None, help=f"Preferences file (default {config.prefs_path})")
    p.set_defaults(func=cmd_prefs)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if (args.debug or config.enable_debug) else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    try:
        return args.func(args)
    except ElpickError as e:
        print(f"elpick: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
