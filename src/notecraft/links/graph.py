"""Title resolution, backlinks and broken-link detection over a note corpus.

Nothing here is cached: every call re-parses the corpus it is handed, which
is fine for the hundreds-of-notes scale these vaults live at.
"""

from collections.abc import Sequence

from ..core.model import Backlink, Note, NoteId, ParsedWikiLink
from .parser import parse_wiki_links

CONTEXT_CHARS = 50


def _norm(title: str) -> str:
    return title.lower().strip()


def find_note_by_title(title: str, notes: Sequence[Note]) -> Note | None:
    """
    Resolve a link title to a note.

    Precedence is exact (case-insensitive) > starts-with > contains, and the
    first note in ``notes`` order wins within each tier. Several titles that
    share a prefix can therefore resolve to whichever comes first.
    """
    wanted = _norm(title)

    for note in notes:
        if _norm(note.title) == wanted:
            return note
    for note in notes:
        if _norm(note.title).startswith(wanted):
            return note
    for note in notes:
        if wanted in _norm(note.title):
            return note
    return None


def _context(content: str, start: int, end: int) -> str:
    ctx_start = max(0, start - CONTEXT_CHARS)
    ctx_end = min(len(content), end + CONTEXT_CHARS)
    snippet = content[ctx_start:ctx_end]
    if ctx_start > 0:
        snippet = "..." + snippet
    if ctx_end < len(content):
        snippet = snippet + "..."
    return snippet


def get_backlinks(note_id: NoteId, note_title: str, all_notes: Sequence[Note]) -> list[Backlink]:
    """
    Find every link in other notes whose target equals ``note_title``.

    Matching is exact and case-insensitive; the note itself is skipped.
    Each hit carries a window of up to 50 characters either side of the link,
    with ``...`` marking a truncated side.
    """
    wanted = _norm(note_title)
    backlinks: list[Backlink] = []

    for note in all_notes:
        if note.id == note_id:
            continue
        for link in parse_wiki_links(note.content):
            if _norm(link.target_title) != wanted:
                continue
            backlinks.append(
                Backlink(
                    source_note_id=note.id,
                    source_title=note.title,
                    context=_context(note.content, link.start, link.end),
                    position=link.start,
                )
            )

    return backlinks


def find_broken_links(content: str, all_notes: Sequence[Note]) -> list[ParsedWikiLink]:
    """Links in ``content`` that no note title resolves."""
    return [
        link
        for link in parse_wiki_links(content)
        if find_note_by_title(link.target_title, all_notes) is None
    ]


def search_notes_by_title(query: str, notes: Sequence[Note], limit: int = 10) -> list[Note]:
    """
    Rank notes for link autocomplete.

    An empty query returns the most recently updated notes. Otherwise exact
    title matches score 100, prefixes 80, substrings 60, and anything else
    scores by the share of query words found inside title words (max 40).
    """
    q = _norm(query)

    if not q:
        return sorted(
            notes,
            key=lambda n: n.updated_at.timestamp() if n.updated_at else float("-inf"),
            reverse=True,
        )[:limit]

    scored: list[tuple[float, Note]] = []
    for note in notes:
        title = note.title.lower()
        if title == q:
            score = 100.0
        elif title.startswith(q):
            score = 80.0
        elif q in title:
            score = 60.0
        else:
            query_words = q.split()
            title_words = title.split()
            matched = [qw for qw in query_words if any(qw in tw for tw in title_words)]
            score = len(matched) / len(query_words) * 40
        if score > 0:
            scored.append((score, note))

    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [note for _score, note in scored[:limit]]
