"""Action pipeline: AI generator first, deterministic rules as fallback."""

import re
from collections.abc import Sequence

import structlog

from ..core.model import Note, PatchRequest, PatchResponse, StitchResponse
from ..core.ops import diff_ops
from ..core.ports import AIGenerator
from .rules import fallback_patch

logger = structlog.get_logger()

_WORD_RE = re.compile(r"\b\w+\b")


def ai_ready(ai: AIGenerator | None) -> bool:
    """True when an AI generator is configured and reports itself reachable."""
    if ai is None:
        return False
    try:
        return bool(ai.is_available())
    except Exception as e:
        logger.warning("ai_availability_check_failed", error=str(e))
        return False


async def generate_patch(request: PatchRequest, ai: AIGenerator | None = None) -> PatchResponse:
    """
    Produce a rationale and ops for ``request``.

    The AI generator is tried first when available; any failure or empty
    answer falls back to the rule for ``request.action``. Actions that only
    AI can perform come back with empty ops and an explanatory rationale.
    Ops are always addressed against ``request.content``.
    """
    if ai_ready(ai):
        try:
            result = await ai.generate_patch_with_ai(request)
            if result is not None:
                return PatchResponse(
                    rationale=result.rationale,
                    ops=diff_ops(request.content, result.new_content),
                )
        except Exception as e:
            logger.warning(
                "ai_patch_failed",
                action=request.action.value,
                note_id=request.note_id,
                error=str(e),
            )

    return fallback_patch(request.action, request.content)


def compile_notes(notes: Sequence[Note]) -> StitchResponse:
    """Rule-based stitch: one compiled markdown document with a table of contents."""
    parts = [
        "# Compiled Document\n\n",
        f"> Compiled from {len(notes)} notes\n\n",
        "---\n\n",
        "## Table of Contents\n\n",
    ]
    for i, note in enumerate(notes, start=1):
        parts.append(f"{i}. [{note.title}](#section-{i})\n")
    parts.append("\n---\n\n")

    for i, note in enumerate(notes, start=1):
        parts.append(f"## Section {i}: {note.title}\n\n")
        parts.append(note.content.strip() or "_Empty note_")
        parts.append("\n\n")
        if i < len(notes):
            parts.append("---\n\n")

    total_words = sum(len(_WORD_RE.findall(note.content)) for note in notes)
    parts.append("\n---\n\n")
    parts.append("## Summary\n\n")
    parts.append(
        f"This document combines {len(notes)} notes with approximately {total_words} words total.\n"
    )

    return StitchResponse(
        rationale=(
            f"Created a compiled document with table of contents, {len(notes)} sections, "
            f"and a summary. Total word count: {total_words}."
        ),
        content="".join(parts),
    )


async def generate_stitch(notes: Sequence[Note], ai: AIGenerator | None = None) -> StitchResponse:
    """Combine several notes into one document, AI first."""
    if ai_ready(ai):
        try:
            result = await ai.stitch_with_ai(notes)
            if result is not None:
                return result
        except Exception as e:
            logger.warning("ai_stitch_failed", notes=len(notes), error=str(e))

    return compile_notes(notes)
