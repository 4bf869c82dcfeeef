"""Patch status lifecycle: pending -> applied | rejected."""

import uuid
from dataclasses import replace
from datetime import datetime, timezone

from ..core.model import NoteId, Patch, PatchAction, PatchResponse, PatchStatus, Suggestion
from ..core.ops import apply_ops


class PatchStateError(ValueError):
    """Raised on a status change out of a terminal state."""


_ALLOWED = {
    PatchStatus.PENDING: {PatchStatus.APPLIED, PatchStatus.REJECTED},
    PatchStatus.APPLIED: set(),
    PatchStatus.REJECTED: set(),
}


def create_patch(note_id: NoteId, action: PatchAction, response: PatchResponse) -> Patch:
    return Patch(
        id=str(uuid.uuid4()),
        note_id=note_id,
        action=action,
        rationale=response.rationale,
        ops=list(response.ops),
        status=PatchStatus.PENDING,
        created_at=datetime.now(timezone.utc),
    )


def accept_suggestion(note_id: NoteId, suggestion: Suggestion) -> Patch:
    """Persist an ephemeral suggestion as a pending patch."""
    return create_patch(
        note_id,
        suggestion.action,
        PatchResponse(rationale=suggestion.rationale, ops=list(suggestion.ops)),
    )


def transition(patch: Patch, status: PatchStatus) -> Patch:
    if status not in _ALLOWED[patch.status]:
        raise PatchStateError(
            f"Patch {patch.id} cannot move from {patch.status.value} to {status.value}"
        )
    return replace(patch, status=status)


def apply_patch(content: str, patch: Patch) -> tuple[str, Patch]:
    """
    Apply a pending patch to the snapshot it was generated against.

    The caller is responsible for checking the content has not changed since
    the patch was generated; stale offsets are not detected here.
    """
    applied = transition(patch, PatchStatus.APPLIED)
    return apply_ops(content, patch.ops), applied


def reject_patch(patch: Patch) -> Patch:
    return transition(patch, PatchStatus.REJECTED)
