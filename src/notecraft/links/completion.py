"""Detect an in-progress ``[[`` at the caret and complete it."""

from ..core.model import Completion, TypingState


def get_wiki_link_typing_state(content: str, caret_pos: int) -> TypingState | None:
    """
    Check whether the caret sits inside an unterminated ``[[``.

    Returns ``None`` when there is no ``[[`` before the caret, when a ``]]``
    or a newline lies between it and the caret. The query is the text
    typed after ``[[``; anything up to and including a ``|`` is dropped so
    a partial display segment does not pollute the search.
    """
    start = content.rfind("[[", 0, caret_pos)
    if start == -1:
        return None

    between = content[start:caret_pos]
    if "]]" in between or "\n" in between:
        return None

    query = content[start + 2 : caret_pos]
    pipe = query.find("|")
    if pipe >= 0:
        query = query[pipe + 1 :]

    return TypingState(query=query, start_position=start)


def complete_wiki_link(
    content: str,
    start_position: int,
    caret_pos: int,
    selected_title: str,
) -> Completion:
    """Replace ``content[start_position:caret_pos]`` with ``[[selected_title]]``."""
    new_link = f"[[{selected_title}]]"
    return Completion(
        content=content[:start_position] + new_link + content[caret_pos:],
        cursor_position=start_position + len(new_link),
    )
