"""Patch generation, idle analysis and the patch lifecycle."""

from .analyzer import analyze_content
from .lifecycle import (
    PatchStateError,
    accept_suggestion,
    apply_patch,
    create_patch,
    reject_patch,
    transition,
)
from .pipeline import generate_patch, generate_stitch

__all__ = [
    "PatchStateError",
    "accept_suggestion",
    "analyze_content",
    "apply_patch",
    "create_patch",
    "generate_patch",
    "generate_stitch",
    "reject_patch",
    "transition",
]
