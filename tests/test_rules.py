"""Tests for the rule-based patch generators."""

import pytest

from notecraft.core.model import PatchAction, PatchOp
from notecraft.core.ops import apply_ops
from notecraft.patch.rules import (
    AI_ONLY_ACTIONS,
    AI_REQUIRED_RATIONALE,
    RULES,
    extract_tasks_patch,
    fallback_patch,
    rewrite_patch,
    summarize_patch,
    title_tags_patch,
)


def test_every_action_is_rule_backed_or_ai_only():
    for action in PatchAction:
        assert (action in RULES) != (action in AI_ONLY_ACTIONS), action


def test_summarize_brief_note():
    content = "One line\nTwo lines"
    response = summarize_patch(content)
    assert response.rationale == "Adding a summary section at the end of the note (2 lines analyzed)."
    assert apply_ops(content, response.ops) == content + "\n\n## Summary\nBrief note."


def test_summarize_descriptive_note_cites_line_count():
    content = "a\nb\n\nc\nd"
    response = summarize_patch(content)
    assert "4 lines" in response.rationale
    assert apply_ops(content, response.ops).endswith(
        "## Summary\nThis note contains 4 lines covering the main topics discussed above."
    )


def test_extract_tasks_found():
    content = "TODO: buy milk\nremember this\nneed to call Bob"
    response = extract_tasks_patch(content)
    assert response.rationale == "Extracted 2 task(s) from the note content."
    assert response.ops == [
        PatchOp.insert(len(content), "\n\n## Tasks\n- [ ] buy milk\n- [ ] call Bob\n")
    ]


def test_extract_tasks_placeholder():
    response = extract_tasks_patch("Just some words")
    assert "placeholder" in response.rationale
    assert response.ops[0].text == "\n\n## Tasks\n- [ ] Review this note\n- [ ] Add action items\n"


def test_rewrite_cleans_whitespace():
    content = "  Title   \n\n\n\nBody line  \n"
    response = rewrite_patch(content)
    assert "Cleaned up whitespace" in response.rationale
    assert apply_ops(content, response.ops) == "Title\n\nBody line"


def test_rewrite_well_formatted_is_noop():
    response = rewrite_patch("Title\n\nBody line\n")
    assert response.ops == []
    assert "well-formatted" in response.rationale


def test_title_tags_heading_and_tags():
    content = "meeting notes\nproject budget project budget project timeline"
    response = title_tags_patch(content)
    assert response.rationale == (
        "Converted first line to heading. Added 3 suggested tags based on content."
    )
    result = apply_ops(content, response.ops)
    assert result.startswith("# meeting notes\n")
    assert result.endswith("\n\n---\nTags: #project #budget #meeting")


def test_title_tags_existing_heading_only_tags():
    response = title_tags_patch("# Already\nsmall words here")
    assert len(response.ops) == 1
    assert response.rationale.startswith("Added ")


def test_title_tags_stop_words_excluded():
    response = title_tags_patch("# T\nthis that with from have")
    assert response.ops == []
    assert response.rationale == "No changes needed."


def test_fix_grammar_falls_back_to_rewrite():
    content = "text   \n\n\n\nmore"
    assert fallback_patch(PatchAction.FIX_GRAMMAR, content) == rewrite_patch(content)


@pytest.mark.parametrize("action", sorted(AI_ONLY_ACTIONS, key=lambda a: a.value))
def test_ai_only_actions_without_ai(action):
    response = fallback_patch(action, "Some content here")
    assert response.ops == []
    assert response.rationale == AI_REQUIRED_RATIONALE
