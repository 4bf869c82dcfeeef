"""Tests for wiki-link typing state and completion."""

from notecraft.links.completion import complete_wiki_link, get_wiki_link_typing_state


def test_partial_query():
    content = "See [[partial"
    state = get_wiki_link_typing_state(content, len(content))
    assert state is not None
    assert state.query == "partial"
    assert state.start_position == 4


def test_empty_query_right_after_brackets():
    state = get_wiki_link_typing_state("[[", 2)
    assert state.query == ""
    assert state.start_position == 0


def test_closed_link_returns_none():
    content = "See [[Done]] and more"
    assert get_wiki_link_typing_state(content, len(content)) is None


def test_no_brackets_returns_none():
    assert get_wiki_link_typing_state("plain text", 5) is None


def test_newline_breaks_link():
    content = "[[start\nnext line"
    assert get_wiki_link_typing_state(content, len(content)) is None


def test_caret_before_brackets_closed():
    content = "[[Done]] then [[open"
    assert get_wiki_link_typing_state(content, 10) is None
    assert get_wiki_link_typing_state(content, len(content)).query == "open"


def test_pipe_strips_title_part():
    content = "[[Target|disp"
    state = get_wiki_link_typing_state(content, len(content))
    assert state.query == "disp"
    assert state.start_position == 0


def test_complete_wiki_link():
    content = "See [[par and more"
    completion = complete_wiki_link(content, 4, 9, "Partial Note")
    assert completion.content == "See [[Partial Note]] and more"
    assert completion.cursor_position == 20
    assert completion.content[completion.cursor_position - 2 : completion.cursor_position] == "]]"
