"""Tests for version information."""

import notecraft
from notecraft.cli import _version_string


def test_version_module():
    """Test that version is accessible from module."""
    assert notecraft.__version__
    parts = notecraft.__version__.split(".")
    assert len(parts) >= 2


def test_version_string():
    text = _version_string()
    assert text.startswith(f"notecraft {notecraft.__version__} (python ")


def test_public_surface():
    for name in (
        "generate_patch",
        "analyze_content",
        "apply_ops",
        "parse_wiki_links",
        "get_backlinks",
        "find_broken_links",
        "update_links_on_rename",
        "get_wiki_link_typing_state",
        "complete_wiki_link",
    ):
        assert callable(getattr(notecraft, name))
