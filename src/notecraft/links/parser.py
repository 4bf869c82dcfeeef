import re

from ..core.model import ParsedWikiLink

# [[Note Title]] or [[Note Title|display text]]
WIKI_LINK_RE = re.compile(r"\[\[([^\]|]+)(?:\|([^\]]+))?\]\]")


def parse_wiki_links(content: str) -> list[ParsedWikiLink]:
    """
    Parse all wiki links from content, ordered by ascending start offset.

    The title part may not contain ``]`` or ``|``; display text may contain
    anything except ``]``. Both parts are trimmed. Anything that does not
    match (unterminated or nested brackets) is simply not a link.
    """
    links: list[ParsedWikiLink] = []
    for m in WIKI_LINK_RE.finditer(content):
        display = m.group(2)
        links.append(
            ParsedWikiLink(
                start=m.start(),
                end=m.end(),
                target_title=m.group(1).strip(),
                display_text=display.strip() if display is not None else None,
                full_match=m.group(0),
            )
        )
    return links


def get_wiki_link_at_position(content: str, position: int) -> ParsedWikiLink | None:
    """Return the link whose span contains ``position`` (both ends inclusive)."""
    for link in parse_wiki_links(content):
        if link.start <= position <= link.end:
            return link
    return None


def generate_wiki_link(note_title: str, display_text: str | None = None) -> str:
    if display_text and display_text != note_title:
        return f"[[{note_title}|{display_text}]]"
    return f"[[{note_title}]]"


def link_display_text(link: ParsedWikiLink) -> str:
    return link.display_text or link.target_title
