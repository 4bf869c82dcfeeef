"""Notecraft: wiki-linked markdown notes with offset-based AI patches."""

from .core.ops import apply_ops
from .links import (
    complete_wiki_link,
    find_broken_links,
    get_backlinks,
    get_wiki_link_typing_state,
    parse_wiki_links,
    update_links_on_rename,
)
from .patch import analyze_content, generate_patch

__version__ = "0.3.0"

__all__ = [
    "__version__",
    "analyze_content",
    "apply_ops",
    "complete_wiki_link",
    "find_broken_links",
    "generate_patch",
    "get_backlinks",
    "get_wiki_link_typing_state",
    "parse_wiki_links",
    "update_links_on_rename",
]
