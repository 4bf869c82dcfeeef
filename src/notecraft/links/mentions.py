"""Suggest links for note titles mentioned in plain text."""

from collections.abc import Iterable, Sequence

from ..core.model import LinkSuggestion, Note, ParsedWikiLink
from .parser import parse_wiki_links

_BOUNDARY = set(" \t\n\r.,;:!?()[]{}'\"<>-")
MIN_TITLE_LENGTH = 2


def _term_positions(content: str, term: str, links: Sequence[ParsedWikiLink]) -> list[int]:
    """Whole-word, case-insensitive occurrences of ``term`` outside ``[[...]]``."""
    positions: list[int] = []
    haystack = content.lower()
    needle = term.lower()

    idx = haystack.find(needle)
    while idx != -1:
        inside = any(link.start <= idx < link.end for link in links)
        if not inside:
            before = content[idx - 1] if idx > 0 else " "
            after_idx = idx + len(term)
            after = content[after_idx] if after_idx < len(content) else " "
            if before in _BOUNDARY and after in _BOUNDARY:
                positions.append(idx)
        idx = haystack.find(needle, idx + 1)

    return positions


def find_unlinked_mentions(
    content: str,
    notes: Sequence[Note],
    dismissed: Iterable[str] = (),
) -> list[LinkSuggestion]:
    """
    Find note titles mentioned in ``content`` but not yet linked.

    Only the first occurrence of each title is reported. Titles already
    linked anywhere in the content, or listed in ``dismissed``, are skipped.
    """
    links = parse_wiki_links(content)
    linked = {link.target_title.lower() for link in links}
    skip = {d.lower() for d in dismissed}
    seen: set[str] = set()

    suggestions: list[LinkSuggestion] = []
    for note in notes:
        title = note.title.strip()
        if len(title) < MIN_TITLE_LENGTH:
            continue
        key = title.lower()
        if key in linked or key in skip or key in seen:
            continue

        positions = _term_positions(content, title, links)
        if positions:
            seen.add(key)
            suggestions.append(
                LinkSuggestion(
                    term=title,
                    note_id=note.id,
                    note_title=note.title,
                    position=positions[0],
                )
            )

    suggestions.sort(key=lambda s: s.position)
    return suggestions
