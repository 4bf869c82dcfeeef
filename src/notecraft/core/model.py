from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

NoteId = str


class OpType(str, Enum):
    INSERT = "insert"
    DELETE = "delete"
    REPLACE = "replace"


class PatchAction(str, Enum):
    SUMMARIZE = "summarize"
    EXTRACT_TASKS = "extract-tasks"
    REWRITE = "rewrite"
    TITLE_TAGS = "title-tags"
    CONTINUE = "continue"
    EXPAND = "expand"
    SIMPLIFY = "simplify"
    FIX_GRAMMAR = "fix-grammar"
    TRANSLATE = "translate"
    ASK_AI = "ask-ai"
    EXPLAIN = "explain"
    OUTLINE = "outline"


class PatchStatus(str, Enum):
    PENDING = "pending"
    APPLIED = "applied"
    REJECTED = "rejected"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class PatchOp:
    """One position-addressed edit.

    Offsets always refer to the snapshot the op was computed against,
    never to a partially patched string.
    """

    type: OpType
    start: int
    end: int | None = None  # exclusive; delete/replace
    text: str | None = None  # insert/replace

    @classmethod
    def insert(cls, start: int, text: str) -> PatchOp:
        return cls(OpType.INSERT, start, text=text)

    @classmethod
    def delete(cls, start: int, end: int) -> PatchOp:
        return cls(OpType.DELETE, start, end=end)

    @classmethod
    def replace(cls, start: int, end: int, text: str) -> PatchOp:
        return cls(OpType.REPLACE, start, end=end, text=text)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type.value, "start": self.start}
        if self.end is not None:
            out["end"] = self.end
        if self.text is not None:
            out["text"] = self.text
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PatchOp:
        try:
            op_type = OpType(data.get("type"))
        except ValueError:
            raise ValueError(f"Unknown op type: {data.get('type')!r}") from None
        start = data.get("start")
        end = data.get("end")
        if not isinstance(start, int) or isinstance(start, bool):
            raise ValueError(f"Op start must be an integer, got {start!r}")
        if end is not None and (not isinstance(end, int) or isinstance(end, bool)):
            raise ValueError(f"Op end must be an integer, got {end!r}")
        text = data.get("text")
        if text is not None and not isinstance(text, str):
            raise ValueError(f"Op text must be a string, got {text!r}")
        return cls(op_type, start, end=end, text=text)


@dataclass(frozen=True)
class Selection:
    start: int
    end: int
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"from": self.start, "to": self.end, "text": self.text}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Selection:
        start = data.get("from", data.get("start"))
        end = data.get("to", data.get("end"))
        if not isinstance(start, int) or not isinstance(end, int):
            raise ValueError("Selection needs integer 'from' and 'to'")
        return cls(start=start, end=end, text=str(data.get("text", "")))


@dataclass(frozen=True)
class PatchRequest:
    note_id: NoteId
    content: str
    action: PatchAction
    selection: Selection | None = None
    custom_prompt: str | None = None
    target_language: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PatchRequest:
        try:
            action = PatchAction(data.get("action"))
        except ValueError:
            raise ValueError(f"Unknown action: {data.get('action')!r}") from None
        content = data.get("content")
        if not isinstance(content, str):
            raise ValueError("Request content must be a string")
        selection = data.get("selection")
        return cls(
            note_id=str(data.get("noteId", data.get("note_id", ""))),
            content=content,
            action=action,
            selection=Selection.from_dict(selection) if selection else None,
            custom_prompt=data.get("customPrompt", data.get("custom_prompt")),
            target_language=data.get("targetLanguage", data.get("target_language")),
        )


@dataclass(frozen=True)
class PatchResponse:
    rationale: str
    ops: list[PatchOp] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rationale": self.rationale,
            "ops": [op.to_dict() for op in self.ops],
        }


@dataclass(frozen=True)
class Patch:
    id: str
    note_id: NoteId
    action: PatchAction
    rationale: str
    ops: list[PatchOp]
    status: PatchStatus
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "noteId": self.note_id,
            "action": self.action.value,
            "rationale": self.rationale,
            "ops": [op.to_dict() for op in self.ops],
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class Suggestion:
    id: str
    action: PatchAction
    rationale: str
    ops: list[PatchOp]
    priority: Priority

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "action": self.action.value,
            "rationale": self.rationale,
            "ops": [op.to_dict() for op in self.ops],
            "priority": self.priority.value,
        }


@dataclass(frozen=True)
class AnalysisResult:
    suggestions: list[Suggestion]
    analyzed_at: datetime
    content_hash: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "suggestions": [s.to_dict() for s in self.suggestions],
            "analyzedAt": self.analyzed_at.isoformat(),
            "contentHash": self.content_hash,
        }


@dataclass(frozen=True)
class StitchResponse:
    rationale: str
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {"rationale": self.rationale, "content": self.content}


@dataclass(frozen=True)
class ParsedWikiLink:
    start: int  # offset of the opening "[["
    end: int  # offset just past the closing "]]"
    target_title: str
    display_text: str | None
    full_match: str

    @property
    def id(self) -> str:
        return f"link-{self.start}-{self.target_title}"

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "from": self.start,
            "to": self.end,
            "targetTitle": self.target_title,
            "fullMatch": self.full_match,
        }
        if self.display_text is not None:
            out["displayText"] = self.display_text
        return out


@dataclass(frozen=True)
class Backlink:
    source_note_id: NoteId
    source_title: str
    context: str
    position: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "sourceNoteId": self.source_note_id,
            "sourceTitle": self.source_title,
            "context": self.context,
            "position": self.position,
        }


@dataclass(frozen=True)
class TypingState:
    query: str
    start_position: int

    def to_dict(self) -> dict[str, Any]:
        return {"query": self.query, "startPosition": self.start_position}


@dataclass(frozen=True)
class Completion:
    content: str
    cursor_position: int

    def to_dict(self) -> dict[str, Any]:
        return {"content": self.content, "cursorPosition": self.cursor_position}


@dataclass(frozen=True)
class LinkSuggestion:
    term: str
    note_id: NoteId
    note_title: str
    position: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "term": self.term,
            "noteId": self.note_id,
            "noteTitle": self.note_title,
            "position": self.position,
        }


@dataclass
class Note:
    """A note as read from the corpus. The core never mutates one."""

    id: NoteId
    title: str
    content: str
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
