import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from ..core.model import Note, NoteId
from ..core.ports import FrontmatterCodec, NoteStore

_HEADING = re.compile(r"^#\s+(.+)$", re.MULTILINE)


class FsNoteStore(NoteStore):
    """
    Flat store: one directory, files named <id>.md.

    The title lives in the ``title`` frontmatter key; without one, the first
    ``# heading`` or else the id stands in. Other frontmatter keys are kept
    on write.
    """

    def __init__(self, root: Path, codec: FrontmatterCodec):
        self.root = root
        self.codec = codec

    def _path(self, id: NoteId) -> Path:
        return self.root / f"{id}.md"

    def _read(self, id: NoteId) -> tuple[dict[str, Any], str] | None:
        p = self._path(id)
        if not p.exists():
            return None
        return self.codec.decode(p.read_text(encoding="utf-8"))

    def get(self, id: NoteId) -> Note | None:
        decoded = self._read(id)
        if decoded is None:
            return None
        meta, body = decoded
        title = meta.get("title")
        if not isinstance(title, str) or not title.strip():
            m = _HEADING.search(body)
            title = m.group(1).strip() if m else id
        mtime = self._path(id).stat().st_mtime
        return Note(
            id=id,
            title=title,
            content=body,
            updated_at=datetime.fromtimestamp(mtime, tz=timezone.utc),
        )

    def put(self, note: Note) -> None:
        decoded = self._read(note.id)
        meta = dict(decoded[0]) if decoded else {}
        meta["title"] = note.title
        self.root.mkdir(parents=True, exist_ok=True)
        self._path(note.id).write_text(self.codec.encode(meta) + note.content, encoding="utf-8")

    def delete(self, id: NoteId) -> None:
        p = self._path(id)
        if p.exists():
            p.unlink()

    def list_ids(self) -> Iterable[NoteId]:
        if not self.root.exists():
            return []
        return sorted(p.stem for p in self.root.glob("*.md"))

    def all_notes(self) -> list[Note]:
        notes = []
        for nid in self.list_ids():
            note = self.get(nid)
            if note is not None:
                notes.append(note)
        return notes
