"""Wiki-link parsing, link graph and rename propagation."""

from .completion import complete_wiki_link, get_wiki_link_typing_state
from .graph import find_broken_links, find_note_by_title, get_backlinks, search_notes_by_title
from .mentions import find_unlinked_mentions
from .parser import generate_wiki_link, get_wiki_link_at_position, parse_wiki_links
from .rename import propagate_rename, update_links_on_rename

__all__ = [
    "complete_wiki_link",
    "find_broken_links",
    "find_note_by_title",
    "find_unlinked_mentions",
    "generate_wiki_link",
    "get_backlinks",
    "get_wiki_link_at_position",
    "get_wiki_link_typing_state",
    "parse_wiki_links",
    "propagate_rename",
    "search_notes_by_title",
    "update_links_on_rename",
]
