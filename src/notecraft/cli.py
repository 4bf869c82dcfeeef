"""CLI for notecraft - wiki-linked markdown notes with AI patches."""

import argparse
import asyncio
import difflib
import json
import platform
import sys
from pathlib import Path
from typing import Any

import structlog

from . import __version__
from .config import ConfigError
from .core.model import Note, PatchAction, PatchRequest
from .links.completion import get_wiki_link_typing_state
from .links.graph import find_broken_links, find_note_by_title, get_backlinks
from .links.mentions import find_unlinked_mentions
from .links.parser import parse_wiki_links
from .links.rename import propagate_rename
from .logging_config import setup_logging
from .patch.analyzer import analyze_content
from .patch.lifecycle import apply_patch, create_patch
from .patch.pipeline import generate_patch, generate_stitch
from .runtime import Runtime, build_runtime

logger = structlog.get_logger()


def _note_or_fail(rt: Runtime, note_id: str) -> Note:
    note = rt.store.get(note_id)
    if note is None:
        raise LookupError(f"Note not found: {note_id}")
    return note


def _emit(data: Any) -> None:
    print(json.dumps(data, indent=2))


def cmd_links(args: argparse.Namespace, rt: Runtime) -> int:
    """List outgoing wiki-links of a note, resolved against the vault."""
    note = _note_or_fail(rt, args.id)
    notes = rt.store.all_notes()
    links = parse_wiki_links(note.content)

    if args.json:
        output = []
        for link in links:
            target = find_note_by_title(link.target_title, notes)
            item = link.to_dict()
            item["resolved"] = target.id if target else None
            output.append(item)
        _emit(output)
        return 0

    for link in links:
        target = find_note_by_title(link.target_title, notes)
        arrow = target.id if target else "(unresolved)"
        print(f"{link.start}-{link.end}\t{link.target_title}\t-> {arrow}")
    return 0


def cmd_backlinks(args: argparse.Namespace, rt: Runtime) -> int:
    """Show incoming links with context."""
    note = _note_or_fail(rt, args.id)
    backlinks = get_backlinks(note.id, note.title, rt.store.all_notes())

    if args.json:
        _emit([b.to_dict() for b in backlinks])
        return 0

    for b in backlinks:
        if not args.quiet:
            print(f"\n{b.source_note_id} ({b.source_title}):")
        print(f"  {b.context}")
    return 0


def cmd_broken(args: argparse.Namespace, rt: Runtime) -> int:
    """Report wiki-links that resolve to no note. Exits 1 when any are found."""
    notes = rt.store.all_notes()
    sources = [_note_or_fail(rt, args.id)] if args.id else notes

    found: list[tuple[str, Any]] = []
    for note in sources:
        for link in find_broken_links(note.content, notes):
            found.append((note.id, link))

    if args.json:
        _emit([{"noteId": nid, **link.to_dict()} for nid, link in found])
    else:
        for nid, link in found:
            print(f"{nid}:{link.start}\t{link.full_match}")
        if not args.quiet:
            print(f"\n{len(found)} broken link(s)")

    return 1 if found else 0


def cmd_rename(args: argparse.Namespace, rt: Runtime) -> int:
    """Retitle a note and rewrite every wiki-link that pointed at the old title."""
    note = _note_or_fail(rt, args.id)
    old_title = note.title
    notes = rt.store.all_notes()
    changed = propagate_rename(note.id, old_title, args.title, notes)
    by_id = {n.id: n for n in notes}

    if args.dry_run:
        for nid, new_content in changed.items():
            diff = difflib.unified_diff(
                by_id[nid].content.splitlines(keepends=True),
                new_content.splitlines(keepends=True),
                fromfile=f"a/{nid}.md",
                tofile=f"b/{nid}.md",
            )
            sys.stdout.writelines(line if line.endswith("\n") else line + "\n" for line in diff)
        if not args.quiet:
            print(f"\n{len(changed)} note(s) would change")
        return 0

    note.title = args.title
    rt.store.put(note)
    for nid, new_content in changed.items():
        target = by_id[nid]
        target.content = new_content
        rt.store.put(target)

    if args.json:
        _emit({"renamed": note.id, "title": args.title, "updated": sorted(changed)})
    elif not args.quiet:
        print(f"Renamed {note.id}: {old_title!r} -> {args.title!r}")
        print(f"Updated links in {len(changed)} note(s)")
    return 0


def cmd_patch(args: argparse.Namespace, rt: Runtime) -> int:
    """Generate a patch for a note and optionally apply it."""
    note = _note_or_fail(rt, args.id)
    request = PatchRequest(
        note_id=note.id,
        content=note.content,
        action=PatchAction(args.action),
        custom_prompt=args.prompt,
        target_language=args.lang,
    )
    response = asyncio.run(generate_patch(request, ai=rt.ai))
    patch = create_patch(note.id, request.action, response)

    if args.apply and patch.ops:
        note.content, patch = apply_patch(note.content, patch)
        rt.store.put(note)

    if args.json:
        _emit(patch.to_dict())
        return 0

    print(patch.rationale)
    if not args.quiet:
        for op in patch.ops:
            print(f"  {json.dumps(op.to_dict())}")
        if args.apply and patch.ops:
            print(f"Applied {len(patch.ops)} op(s) to {note.id}")
    return 0


def cmd_analyze(args: argparse.Namespace, rt: Runtime) -> int:
    """Run idle analysis on a note and print the suggestions."""
    note = _note_or_fail(rt, args.id)
    result = asyncio.run(
        analyze_content(note.content, ai=rt.ai, min_length=rt.config.analysis.min_length)
    )

    if args.json:
        _emit(result.to_dict())
        return 0

    if not result.suggestions and not args.quiet:
        print("No suggestions.")
    for s in result.suggestions:
        print(f"[{s.priority.value}] {s.action.value}: {s.rationale}")
    return 0


def cmd_suggest_links(args: argparse.Namespace, rt: Runtime) -> int:
    """List plain-text mentions of other notes' titles that could become wiki-links."""
    note = _note_or_fail(rt, args.id)
    others = [n for n in rt.store.all_notes() if n.id != note.id]
    suggestions = find_unlinked_mentions(note.content, others)

    if args.json:
        _emit([s.to_dict() for s in suggestions])
        return 0

    for s in suggestions:
        print(f"{s.position}\t{s.term}\t-> [[{s.note_title}]]")
    return 0


def cmd_complete(args: argparse.Namespace, rt: Runtime) -> int:
    """Print the wiki-link typing state at a caret offset."""
    note = _note_or_fail(rt, args.id)
    state = get_wiki_link_typing_state(note.content, args.caret)

    if args.json:
        _emit(state.to_dict() if state else None)
        return 0

    if state is None:
        if not args.quiet:
            print("Not inside an unclosed [[")
        return 0
    print(f"query={state.query!r} start={state.start_position}")
    return 0


def cmd_stitch(args: argparse.Namespace, rt: Runtime) -> int:
    """Combine several notes into a single document."""
    notes = [_note_or_fail(rt, nid) for nid in args.ids]
    result = asyncio.run(generate_stitch(notes, ai=rt.ai))

    if args.json:
        _emit(result.to_dict())
    else:
        if not args.quiet:
            print(result.rationale, file=sys.stderr)
        print(result.content)
    return 0


def cmd_watch(args: argparse.Namespace, rt: Runtime) -> int:
    """Watch vault for changes and analyze edited notes."""
    from .watch import watch_vault

    return watch_vault(
        rt,
        debounce_ms=args.debounce_ms or rt.config.analysis.idle_ms,
        quiet=args.quiet,
        json_output=args.json,
    )


def cmd_serve(args: argparse.Namespace, rt: Runtime) -> int:
    """Start local JSON API server."""
    import uvicorn

    from .api.app import create_app, generate_token

    token_arg = args.token
    if token_arg == "auto":
        token = generate_token()
        print(f"Generated bearer token: {token}")
        print(f"Use in requests: Authorization: Bearer {token}")
    elif token_arg == "none":
        print("Warning: Running without authentication. Only use in trusted environments.")
        token = None
    else:
        token = token_arg

    app = create_app(rt, token=token, enable_cors=args.cors)

    print(f"Starting server on http://{args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level=rt.config.logging.level.lower())
    return 0


def _version_string() -> str:
    return f"notecraft {__version__} (python {platform.python_version()}, {platform.platform()})"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="notecraft", description="Notecraft CLI")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/notecraft.toml, vault/notecraft.toml)",
    )
    parser.add_argument(
        "--vault",
        type=Path,
        default=None,
        help="Path to vault directory (overrides config)",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Minimize output")
    parser.add_argument("--json", action="store_true", help="Machine-readable output")
    parser.add_argument("--version", action="version", version=_version_string())

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    parser_links = subparsers.add_parser("links", help="List outgoing wiki-links")
    parser_links.add_argument("id", help="Note ID")

    parser_backlinks = subparsers.add_parser("backlinks", help="Show incoming links with context")
    parser_backlinks.add_argument("id", help="Note ID")

    parser_broken = subparsers.add_parser("broken", help="Find unresolved wiki-links")
    parser_broken.add_argument("id", nargs="?", default=None, help="Note ID (default: whole vault)")

    parser_rename = subparsers.add_parser("rename", help="Retitle a note and update links")
    parser_rename.add_argument("id", help="Note ID")
    parser_rename.add_argument("title", help="New title")
    parser_rename.add_argument(
        "--dry-run", action="store_true", help="Print a unified diff instead of writing"
    )

    parser_patch = subparsers.add_parser("patch", help="Generate a patch for a note")
    parser_patch.add_argument("id", help="Note ID")
    parser_patch.add_argument("action", choices=[a.value for a in PatchAction])
    parser_patch.add_argument("--prompt", default=None, help="Question for ask-ai")
    parser_patch.add_argument("--lang", default=None, help="Target language for translate")
    parser_patch.add_argument("--apply", action="store_true", help="Write the result to the note")

    parser_analyze = subparsers.add_parser("analyze", help="Suggest improvements for a note")
    parser_analyze.add_argument("id", help="Note ID")

    parser_suggest = subparsers.add_parser(
        "suggest-links", help="Find plain mentions of other note titles"
    )
    parser_suggest.add_argument("id", help="Note ID")

    parser_complete = subparsers.add_parser(
        "complete", help="Show the wiki-link typing state at a caret offset"
    )
    parser_complete.add_argument("id", help="Note ID")
    parser_complete.add_argument("caret", type=int, help="Caret offset")

    parser_stitch = subparsers.add_parser("stitch", help="Combine notes into one document")
    parser_stitch.add_argument("ids", nargs="+", help="Note IDs in order")

    parser_watch = subparsers.add_parser("watch", help="Watch vault and analyze edited notes")
    parser_watch.add_argument(
        "--debounce-ms",
        type=int,
        default=None,
        help="Debounce window in milliseconds (default: analysis.idle_ms)",
    )

    parser_serve = subparsers.add_parser("serve", help="Start local JSON API server")
    parser_serve.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    parser_serve.add_argument("--port", type=int, default=8765, help="Port to bind to (default: 8765)")
    parser_serve.add_argument(
        "--token", default="auto", help="Bearer token (auto|<string>|none, default: auto)"
    )
    parser_serve.add_argument("--cors", action="store_true", help="Enable CORS (default: false)")

    return parser


HANDLERS = {
    "links": cmd_links,
    "backlinks": cmd_backlinks,
    "broken": cmd_broken,
    "rename": cmd_rename,
    "patch": cmd_patch,
    "analyze": cmd_analyze,
    "suggest-links": cmd_suggest_links,
    "complete": cmd_complete,
    "stitch": cmd_stitch,
    "watch": cmd_watch,
    "serve": cmd_serve,
}


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        rt = build_runtime(vault_path=args.vault, config_path=args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(
        json_mode=rt.config.logging.json or (args.cmd in ("serve", "watch") and args.json),
        level="ERROR" if args.quiet else rt.config.logging.level,
    )

    handler = HANDLERS[args.cmd]
    try:
        exit_code = handler(args, rt)
    except Exception as e:
        logger.debug("command_failed", cmd=args.cmd, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
