"""Tests for title resolution, backlinks and broken links."""

from datetime import datetime, timedelta, timezone

from notecraft.core.model import Note
from notecraft.links.graph import (
    find_broken_links,
    find_note_by_title,
    get_backlinks,
    search_notes_by_title,
)

NOTES = [
    Note(id="1", title="Project Plan", content="Overview. See [[Budget]] and [[budget|money]]."),
    Note(id="2", title="Budget", content="Numbers for the [[Project Plan]]."),
    Note(id="3", title="Budget Review", content="Links back to [[Budget]] itself."),
    Note(id="4", title="Old Budget Draft", content="Nothing linked here."),
]


def test_find_note_exact_match_wins():
    assert find_note_by_title("budget", NOTES).id == "2"


def test_find_note_prefix_then_contains():
    assert find_note_by_title("Project", NOTES).id == "1"
    assert find_note_by_title("draft", NOTES).id == "4"
    assert find_note_by_title("Nonexistent", NOTES) is None


def test_find_note_first_in_order_wins_within_tier():
    """Test that ambiguous prefixes resolve by array order."""
    notes = [Note(id="a", title="Budget Review", content=""), Note(id="b", title="Budget Q2", content="")]
    assert find_note_by_title("Budget", notes).id == "a"
    assert find_note_by_title("Budget", list(reversed(notes))).id == "b"


def test_backlinks_find_all_referrers_and_skip_self():
    backlinks = get_backlinks("2", "Budget", NOTES)
    sources = [b.source_note_id for b in backlinks]
    assert sources == ["1", "1", "3"]
    assert all(b.source_note_id != "2" for b in backlinks)
    assert backlinks[0].source_title == "Project Plan"
    assert backlinks[0].position == NOTES[0].content.index("[[Budget]]")


def test_backlinks_skip_self_reference():
    notes = [Note(id="x", title="Loop", content="I link to [[Loop]]")]
    assert get_backlinks("x", "Loop", notes) == []


def test_backlink_context_is_truncated_with_ellipses():
    content = "x" * 60 + "[[Target]]" + "y" * 60
    notes = [Note(id="src", title="Source", content=content)]
    (backlink,) = get_backlinks("t", "Target", notes)
    assert backlink.context == "..." + "x" * 50 + "[[Target]]" + "y" * 50 + "..."


def test_backlink_context_short_content_untruncated():
    notes = [Note(id="src", title="Source", content="see [[Target]] now")]
    (backlink,) = get_backlinks("t", "target", notes)
    assert backlink.context == "see [[Target]] now"


def test_broken_links():
    broken = find_broken_links("[[Budget]] [[Ghost]] [[review]] [[Nowhere|x]]", NOTES)
    assert [link.target_title for link in broken] == ["Ghost", "Nowhere"]


def test_search_scores_exact_prefix_substring():
    results = search_notes_by_title("budget", NOTES)
    assert [n.id for n in results] == ["2", "3", "4"]


def test_search_word_share():
    results = search_notes_by_title("plan review", NOTES)
    assert {n.id for n in results} == {"1", "3"}


def test_search_empty_query_returns_recent_first():
    now = datetime.now(timezone.utc)
    notes = [
        Note(id="old", title="Old", content="", updated_at=now - timedelta(days=2)),
        Note(id="undated", title="Undated", content=""),
        Note(id="new", title="New", content="", updated_at=now),
    ]
    assert [n.id for n in search_notes_by_title("", notes)] == ["new", "old", "undated"]
    assert len(search_notes_by_title("", notes, limit=1)) == 1
