"""Deterministic rule-based patch generators.

Every generator is a pure function of the content it is given, and every op
it emits is addressed against that same content.
"""

import re
from collections import Counter
from collections.abc import Callable

from ..core.model import PatchAction, PatchOp, PatchResponse

TASK_RE = re.compile(r"(?:todo|task|need to|should|must|will)[\s:]+.+", re.IGNORECASE)
TASK_PREFIX_RE = re.compile(r"^(?:todo|task|need to|should|must|will)[\s:]*", re.IGNORECASE)
BLANK_RUN_RE = re.compile(r"\n{3,}")
TAG_WORD_RE = re.compile(r"\b\w{4,}\b")

STOP_WORDS = frozenset(
    {"that", "this", "with", "from", "have", "will", "been", "were", "they", "their"}
)
PLACEHOLDER_TASKS = ("Review this note", "Add action items")
AI_REQUIRED_RATIONALE = "AI is required for this action. Please configure an API key."


def non_blank_lines(content: str) -> list[str]:
    return [line for line in content.split("\n") if line.strip()]


def find_tasks(content: str) -> list[str]:
    """Task texts with their trigger phrase stripped, in document order."""
    return [TASK_PREFIX_RE.sub("", m.group(0)).strip() for m in TASK_RE.finditer(content)]


def clean_whitespace(content: str) -> str:
    """Trim trailing whitespace per line, collapse 3+ newlines to 2, trim the whole."""
    joined = "\n".join(line.rstrip() for line in content.split("\n"))
    return BLANK_RUN_RE.sub("\n\n", joined).strip()


def heading_op(content: str) -> PatchOp | None:
    """Op turning the first line into a heading, or None if it is empty or already one."""
    first = content.split("\n", 1)[0].rstrip("\r")
    title = first.strip()
    if not title or title.startswith("#"):
        return None
    return PatchOp.replace(0, len(first), f"# {title}")


def top_words(content: str, count: int = 3) -> list[str]:
    """Most frequent words of 4+ characters, ties kept in first-seen order."""
    freq = Counter(TAG_WORD_RE.findall(content.lower()))
    return [word for word, _n in freq.most_common() if word not in STOP_WORDS][:count]


def summarize_patch(content: str) -> PatchResponse:
    lines = non_blank_lines(content)
    if len(lines) > 3:
        body = f"This note contains {len(lines)} lines covering the main topics discussed above."
    else:
        body = "Brief note."
    return PatchResponse(
        rationale=f"Adding a summary section at the end of the note ({len(lines)} lines analyzed).",
        ops=[PatchOp.insert(len(content), f"\n\n## Summary\n{body}")],
    )


def extract_tasks_patch(content: str) -> PatchResponse:
    tasks = find_tasks(content)
    items = tasks or list(PLACEHOLDER_TASKS)
    section = "\n\n## Tasks\n" + "".join(f"- [ ] {item}\n" for item in items)

    if tasks:
        rationale = f"Extracted {len(tasks)} task(s) from the note content."
    else:
        rationale = "No explicit tasks found. Added placeholder task section."
    return PatchResponse(rationale=rationale, ops=[PatchOp.insert(len(content), section)])


def rewrite_patch(content: str) -> PatchResponse:
    cleaned = clean_whitespace(content)
    if cleaned == content.strip():
        return PatchResponse(rationale="Content is already well-formatted. No changes needed.")
    return PatchResponse(
        rationale="Cleaned up whitespace and normalized line breaks.",
        ops=[PatchOp.replace(0, len(content), cleaned)],
    )


def title_tags_patch(content: str) -> PatchResponse:
    ops: list[PatchOp] = []
    rationale = ""

    op = heading_op(content)
    if op is not None:
        ops.append(op)
        rationale = "Converted first line to heading. "

    words = top_words(content)
    if words:
        tags = " ".join(f"#{w}" for w in words)
        ops.append(PatchOp.insert(len(content), f"\n\n---\nTags: {tags}"))
        rationale += f"Added {len(words)} suggested tags based on content."

    return PatchResponse(rationale=rationale.strip() or "No changes needed.", ops=ops)


RULES: dict[PatchAction, Callable[[str], PatchResponse]] = {
    PatchAction.SUMMARIZE: summarize_patch,
    PatchAction.EXTRACT_TASKS: extract_tasks_patch,
    PatchAction.REWRITE: rewrite_patch,
    PatchAction.TITLE_TAGS: title_tags_patch,
    PatchAction.FIX_GRAMMAR: rewrite_patch,
}

AI_ONLY_ACTIONS = frozenset(
    {
        PatchAction.CONTINUE,
        PatchAction.EXPAND,
        PatchAction.SIMPLIFY,
        PatchAction.TRANSLATE,
        PatchAction.ASK_AI,
        PatchAction.EXPLAIN,
        PatchAction.OUTLINE,
    }
)


def fallback_patch(action: PatchAction, content: str) -> PatchResponse:
    """Rule-based answer for ``action``; AI-only actions get empty ops."""
    rule = RULES.get(action)
    if rule is not None:
        return rule(content)
    if action in AI_ONLY_ACTIONS:
        return PatchResponse(rationale=AI_REQUIRED_RATIONALE)
    raise ValueError(f"Unknown action: {action}")
