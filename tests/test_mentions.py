"""Tests for unlinked-mention suggestions."""

from notecraft.core.model import Note
from notecraft.links.mentions import find_unlinked_mentions

NOTES = [
    Note(id="py", title="Python", content=""),
    Note(id="rs", title="Rust", content=""),
    Note(id="x", title="X", content=""),
]


def test_finds_whole_word_mention():
    (suggestion,) = find_unlinked_mentions("I read about Python today", NOTES)
    assert suggestion.term == "Python"
    assert suggestion.note_id == "py"
    assert suggestion.position == 13


def test_case_insensitive_and_punctuation_boundaries():
    suggestions = find_unlinked_mentions("(python), and rust!", NOTES)
    assert [s.note_id for s in suggestions] == ["py", "rs"]
    assert suggestions[0].position == 1


def test_already_linked_title_is_skipped():
    assert find_unlinked_mentions("[[Python]] and Python again", NOTES) == []


def test_mention_inside_other_link_is_skipped():
    suggestions = find_unlinked_mentions("[[Learning Python]] is fun", NOTES)
    assert suggestions == []


def test_partial_word_is_not_a_mention():
    assert find_unlinked_mentions("Pythonic code is Rusty", NOTES) == []


def test_short_titles_and_dismissed_are_ignored():
    assert find_unlinked_mentions("X marks the spot", NOTES) == []
    assert find_unlinked_mentions("Python and Rust", NOTES, dismissed=["python"])[0].note_id == "rs"


def test_results_sorted_by_position():
    suggestions = find_unlinked_mentions("Rust first, Python second", NOTES)
    assert [s.term for s in suggestions] == ["Rust", "Python"]
