"""Idle analysis: scan a note for several improvement opportunities at once."""

import re
import uuid
from dataclasses import replace
from datetime import datetime, timezone

import structlog

from ..core.model import AnalysisResult, PatchAction, PatchOp, Priority, Suggestion
from ..core.ports import AIGenerator
from ..core.utils import content_hash
from .pipeline import ai_ready
from .rules import find_tasks, heading_op, non_blank_lines, rewrite_patch

logger = structlog.get_logger()

MIN_CONTENT_LENGTH = 10
MAX_TITLE_LENGTH = 100
SUMMARY_MIN_LINES = 5
SUMMARY_MIN_WORDS = 50

_WORD_RE = re.compile(r"\b\w+\b")


def _suggestion(action: PatchAction, rationale: str, ops: list[PatchOp], priority: Priority) -> Suggestion:
    return Suggestion(
        id=str(uuid.uuid4()),
        action=action,
        rationale=rationale,
        ops=ops,
        priority=priority,
    )


def _title_suggestion(content: str) -> Suggestion | None:
    op = heading_op(content)
    if op is None or len(content.split("\n", 1)[0].strip()) >= MAX_TITLE_LENGTH:
        return None
    return _suggestion(
        PatchAction.TITLE_TAGS, "Add markdown heading to first line", [op], Priority.HIGH
    )


def _tasks_suggestion(content: str) -> Suggestion | None:
    tasks = find_tasks(content)
    if not tasks:
        return None
    section = "\n\n## Tasks\n" + "\n".join(f"- [ ] {t}" for t in tasks) + "\n"
    plural = "s" if len(tasks) > 1 else ""
    return _suggestion(
        PatchAction.EXTRACT_TASKS,
        f"Found {len(tasks)} task{plural} to extract",
        [PatchOp.insert(len(content), section)],
        Priority.HIGH,
    )


def _whitespace_suggestion(content: str) -> Suggestion | None:
    response = rewrite_patch(content)
    if not response.ops:
        return None
    return _suggestion(PatchAction.REWRITE, "Clean up extra whitespace", response.ops, Priority.LOW)


def _summary_suggestion(content: str) -> Suggestion | None:
    lines = len(non_blank_lines(content))
    words = len(_WORD_RE.findall(content))
    if lines <= SUMMARY_MIN_LINES or words <= SUMMARY_MIN_WORDS:
        return None
    return _suggestion(
        PatchAction.SUMMARIZE,
        f"Add summary for {words} word note",
        [
            PatchOp.insert(
                len(content),
                f"\n\n## Summary\nThis note contains {lines} lines and {words} words.",
            )
        ],
        Priority.MEDIUM,
    )


DETECTORS = (
    _title_suggestion,
    _tasks_suggestion,
    _whitespace_suggestion,
    _summary_suggestion,
)


def rule_suggestions(content: str) -> list[Suggestion]:
    """Run every rule detector independently and keep the ones that fire."""
    found = []
    for detect in DETECTORS:
        suggestion = detect(content)
        if suggestion is not None:
            found.append(suggestion)
    return found


async def analyze_content(
    content: str,
    previous_hash: str | None = None,
    ai: AIGenerator | None = None,
    min_length: int = MIN_CONTENT_LENGTH,
) -> AnalysisResult | None:
    """
    Analyze ``content`` for suggestions.

    Returns ``None`` when ``previous_hash`` matches the content's hash, so
    callers keep the last hash they saw and pass it back in. Content shorter
    than ``min_length`` (after trimming) yields a result with no suggestions.
    """
    digest = content_hash(content)
    if previous_hash and previous_hash == digest:
        return None

    now = datetime.now(timezone.utc)
    if len(content.strip()) < min_length:
        return AnalysisResult(suggestions=[], analyzed_at=now, content_hash=digest)

    if ai_ready(ai):
        try:
            result = await ai.analyze_with_ai(content)
            if result is not None:
                return replace(result, content_hash=digest)
        except Exception as e:
            logger.warning("ai_analysis_failed", error=str(e))

    return AnalysisResult(
        suggestions=rule_suggestions(content),
        analyzed_at=now,
        content_hash=digest,
    )
