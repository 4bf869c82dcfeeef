"""Watch mode for notecraft - file watcher with debounced idle analysis."""

import asyncio
import json
import signal
import sys
import time
from pathlib import Path
from typing import Any, Callable

import structlog
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .core.model import AnalysisResult
from .patch.analyzer import analyze_content

logger = structlog.get_logger()


class DebounceHandler(FileSystemEventHandler):
    """File system event handler with debouncing."""

    def __init__(
        self,
        vault_path: Path,
        on_batch: Callable[[set[str], set[str]], None] | None,
        debounce_ms: int = 3000,
    ):
        super().__init__()
        self.vault_path = vault_path
        self.on_batch = on_batch
        self.debounce_ms = debounce_ms

        # Pending changes by note id
        self.changed: set[str] = set()
        self.deleted: set[str] = set()
        self.last_event_time = 0.0

    def _should_skip(self, path: Path) -> bool:
        name = path.name
        if name.startswith("."):
            return True
        # Editor temp/swap files
        if name.endswith("~") or name.endswith(".swp"):
            return True
        return not name.endswith(".md")

    def _extract_id(self, event: FileSystemEvent) -> str | None:
        if event.is_directory:
            return None
        path = Path(str(event.src_path))
        if self._should_skip(path):
            return None
        return path.stem

    def on_created(self, event: FileSystemEvent) -> None:
        self.on_modified(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        note_id = self._extract_id(event)
        if note_id:
            self.changed.add(note_id)
            self.deleted.discard(note_id)
            self.last_event_time = time.time()

    def on_deleted(self, event: FileSystemEvent) -> None:
        note_id = self._extract_id(event)
        if note_id:
            self.deleted.add(note_id)
            self.changed.discard(note_id)
            self.last_event_time = time.time()

    def on_moved(self, event: FileSystemEvent) -> None:
        self.on_deleted(event)
        dest = getattr(event, "dest_path", None)
        if dest and not self._should_skip(Path(str(dest))):
            self.changed.add(Path(str(dest)).stem)
            self.last_event_time = time.time()

    def check_and_flush(self) -> None:
        """Flush once no event has arrived for the debounce window."""
        if not (self.changed or self.deleted):
            return
        elapsed = (time.time() - self.last_event_time) * 1000
        if elapsed >= self.debounce_ms:
            self.flush()

    def flush(self) -> None:
        if not (self.changed or self.deleted):
            return

        changed = set(self.changed)
        deleted = set(self.deleted)
        self.changed.clear()
        self.deleted.clear()

        if self.on_batch:
            self.on_batch(changed, deleted)


class IdleAnalyzer:
    """
    Runs idle analysis over changed notes.

    Keeps the last content hash per note so that saving a file without
    changing it does not produce a fresh round of suggestions.
    """

    def __init__(self, runtime: Any):
        self.runtime = runtime
        self.hashes: dict[str, str] = {}

    async def analyze(self, note_ids: set[str]) -> dict[str, AnalysisResult]:
        results = {}
        for note_id in sorted(note_ids):
            note = self.runtime.store.get(note_id)
            if note is None:
                continue
            result = await analyze_content(
                note.content,
                previous_hash=self.hashes.get(note_id),
                ai=self.runtime.ai,
                min_length=self.runtime.config.analysis.min_length,
            )
            if result is None:
                continue
            self.hashes[note_id] = result.content_hash
            results[note_id] = result
        return results

    def forget(self, note_ids: set[str]) -> None:
        for note_id in note_ids:
            self.hashes.pop(note_id, None)


def watch_vault(
    runtime: Any,
    debounce_ms: int = 3000,
    quiet: bool = False,
    json_output: bool = False,
) -> int:
    """
    Watch the vault directory and analyze notes once editing pauses.

    Args:
        runtime: Runtime with store, AI generator and config
        debounce_ms: Idle window in milliseconds before a batch is analyzed
        quiet: Suppress output
        json_output: Output JSON events instead of human-readable

    Returns:
        Exit code
    """
    vault_path = runtime.config.vault.root
    if not vault_path.exists():
        print(f"Error: Vault not found: {vault_path}", file=sys.stderr)
        return 1

    analyzer = IdleAnalyzer(runtime)
    running = True

    def handle_batch(changed: set[str], deleted: set[str]) -> None:
        start_time = time.time()
        analyzer.forget(deleted)
        try:
            results = asyncio.run(analyzer.analyze(changed))
        except Exception as e:
            logger.error("watch_batch_failed", error=str(e))
            if json_output:
                print(json.dumps({"type": "error", "message": str(e)}), flush=True)
            return

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "watch_batch",
            changed=len(changed),
            deleted=len(deleted),
            analyzed=len(results),
            duration_ms=duration_ms,
        )
        if json_output:
            for note_id, result in results.items():
                print(
                    json.dumps({"type": "analysis", "noteId": note_id, **result.to_dict()}),
                    flush=True,
                )
            return
        if quiet:
            return
        for note_id, result in results.items():
            for s in result.suggestions:
                print(f"{note_id}: [{s.priority.value}] {s.action.value}: {s.rationale}", flush=True)
        print(
            f"Analyzed {len(results)} note(s), {len(deleted)} removed ({duration_ms}ms)",
            flush=True,
        )

    def signal_handler(signum: int, frame: Any) -> None:
        nonlocal running
        running = False
        if not quiet and not json_output:
            print("\nShutting down...", flush=True)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    handler = DebounceHandler(vault_path, handle_batch, debounce_ms)
    observer = Observer()
    observer.schedule(handler, str(vault_path), recursive=False)

    if not quiet and not json_output:
        print(f"Watching {vault_path} (idle: {debounce_ms}ms)", flush=True)
        print("Press Ctrl+C to stop", flush=True)

    observer.start()
    try:
        while running:
            time.sleep(0.1)
            handler.check_and_flush()
    finally:
        handler.flush()
        observer.stop()
        observer.join()

    if not quiet and not json_output:
        print("Watch stopped", flush=True)
    return 0
