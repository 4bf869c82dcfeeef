"""Rewrite wiki links when a note is renamed."""

from collections.abc import Sequence

import structlog

from ..core.model import Note, NoteId, PatchOp
from ..core.ops import apply_ops
from .parser import generate_wiki_link, parse_wiki_links

logger = structlog.get_logger()


def rename_ops(old_title: str, new_title: str, content: str) -> list[PatchOp]:
    """
    Replace ops for every link in ``content`` that targets ``old_title``.

    Display text is kept verbatim: ``[[Old|x]]`` becomes ``[[New|x]]`` and
    ``[[Old]]`` becomes ``[[New]]``.
    """
    wanted = old_title.strip().lower()
    ops: list[PatchOp] = []
    for link in parse_wiki_links(content):
        if link.target_title.lower() != wanted:
            continue
        if link.display_text:
            new_link = f"[[{new_title}|{link.display_text}]]"
        else:
            new_link = generate_wiki_link(new_title)
        ops.append(PatchOp.replace(link.start, link.end, new_link))
    return ops


def update_links_on_rename(old_title: str, new_title: str, content: str) -> str:
    """
    Rename every link to ``old_title`` in ``content``.

    Rewrites run from the last link to the first, so no pending offset moves.
    Unrelated links are left untouched.
    """
    return apply_ops(content, rename_ops(old_title, new_title, content))


def propagate_rename(
    note_id: NoteId,
    old_title: str,
    new_title: str,
    notes: Sequence[Note],
) -> dict[NoteId, str]:
    """
    Apply a rename across the corpus.

    The renamed note itself is skipped; it goes through the normal save path.

    Returns:
        Mapping of note id to new content, only for notes that changed
    """
    changed: dict[NoteId, str] = {}
    for note in notes:
        if note.id == note_id:
            continue
        updated = update_links_on_rename(old_title, new_title, note.content)
        if updated != note.content:
            changed[note.id] = updated

    logger.info(
        "rename_propagated",
        old_title=old_title,
        new_title=new_title,
        scanned=len(notes),
        changed=len(changed),
    )
    return changed
