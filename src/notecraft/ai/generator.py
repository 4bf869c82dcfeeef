"""AI-backed generator: turns provider replies into new note content."""

import json
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from ..core.model import (
    AnalysisResult,
    Note,
    PatchAction,
    PatchRequest,
    Priority,
    StitchResponse,
    Suggestion,
)
from ..core.ports import AIPatchResult
from ..core.utils import content_hash
from . import prompts
from .providers import ChatProvider

# Actions whose answer is inserted after a selection instead of replacing it
_ANSWER_ACTIONS = frozenset({PatchAction.EXPLAIN, PatchAction.ASK_AI})
_WHOLE_REPLACE = frozenset({PatchAction.REWRITE, PatchAction.SIMPLIFY, PatchAction.FIX_GRAMMAR})


def _strip_code_fence(text: str) -> str:
    """Drop a surrounding ```json ... ``` fence if the model added one."""
    stripped = text.strip()
    if stripped.startswith("```") and stripped.endswith("```"):
        body = stripped[3:-3]
        first_newline = body.find("\n")
        if first_newline != -1 and body[:first_newline].strip().isalpha():
            body = body[first_newline + 1 :]
        return body.strip()
    return stripped


def _quote(text: str) -> str:
    return "\n> ".join(text.split("\n"))


def _label(action: PatchAction) -> str:
    return action.value.replace("-", " ", 1)


class ProviderGenerator:
    """AIGenerator backed by a chat-completion provider."""

    def __init__(self, provider: ChatProvider | None):
        self.provider = provider

    def is_available(self) -> bool:
        return self.provider is not None

    @property
    def provider_name(self) -> str:
        return self.provider.provider_name if self.provider else "mock"

    async def generate_patch_with_ai(self, request: PatchRequest) -> AIPatchResult | None:
        if self.provider is None:
            return None

        action = request.action
        text = request.selection.text if request.selection else request.content
        reply = await self.provider.complete(
            [
                {
                    "role": "system",
                    "content": prompts.system_prompt(
                        action, request.custom_prompt, request.target_language
                    ),
                },
                {"role": "user", "content": text},
            ],
            max_tokens=2048,
            temperature=0.1 if action is PatchAction.FIX_GRAMMAR else 0.5,
        )
        reply = reply.strip()

        if request.selection is not None:
            return self._compose_selection(request, reply)
        return self._compose_whole(request, reply)

    def _compose_selection(self, request: PatchRequest, reply: str) -> AIPatchResult:
        content = request.content
        sel = request.selection
        if request.action in _ANSWER_ACTIONS:
            new_content = (
                content[: sel.end]
                + f"\n\n> **AI Response:**\n> {_quote(reply)}"
                + content[sel.end :]
            )
            rationale = (
                "Added AI explanation" if request.action is PatchAction.EXPLAIN else "Added AI response"
            )
        else:
            new_content = content[: sel.start] + reply + content[sel.end :]
            rationale = f"Applied {_label(request.action)} to selection"
        return AIPatchResult(rationale=rationale, new_content=new_content)

    def _compose_whole(self, request: PatchRequest, reply: str) -> AIPatchResult:
        content = request.content
        action = request.action

        if action is PatchAction.SUMMARIZE:
            return AIPatchResult("Added AI-generated summary", f"{content}\n\n## Summary\n{reply}")
        if action is PatchAction.EXTRACT_TASKS:
            return AIPatchResult("Extracted tasks using AI", f"{content}\n\n## Tasks\n{reply}")
        if action is PatchAction.OUTLINE:
            return AIPatchResult("Reorganized content into structured outline", reply)
        if action is PatchAction.EXPAND:
            return AIPatchResult("AI expanded the content", reply)
        if action in _WHOLE_REPLACE:
            return AIPatchResult(f"Improved note with AI ({_label(action)})", reply)
        if action is PatchAction.TITLE_TAGS:
            return self._compose_title_tags(content, reply)
        if action is PatchAction.CONTINUE:
            return AIPatchResult("AI continued writing", f"{content} {reply}")
        if action is PatchAction.TRANSLATE:
            language = request.target_language or prompts.DEFAULT_LANGUAGE
            return AIPatchResult(
                f"Translated to {language}",
                f"{content}\n\n---\n**Translation ({language}):**\n{reply}",
            )
        if action is PatchAction.ASK_AI:
            return AIPatchResult("Added AI response", f"{content}\n\n---\n**AI Response:**\n{reply}")
        if action is PatchAction.EXPLAIN:
            return AIPatchResult("Added AI explanation", f"{content}\n\n---\n**Explanation:**\n{reply}")
        raise ValueError(f"Unknown action: {action}")

    def _compose_title_tags(self, content: str, reply: str) -> AIPatchResult:
        try:
            parsed = json.loads(_strip_code_fence(reply))
        except ValueError:
            return AIPatchResult("Could not parse AI response for title/tags", content)
        if not isinstance(parsed, dict):
            return AIPatchResult("Could not parse AI response for title/tags", content)

        new_content = content
        first_line = content.split("\n", 1)[0].strip()
        title = parsed.get("title")
        if title and not first_line.startswith("#"):
            new_content = f"# {title}\n\n{content}"
        tags = [str(t).lstrip("#") for t in parsed.get("tags") or []]
        if tags:
            new_content += "\n\n---\nTags: " + " ".join(f"#{t}" for t in tags)
        return AIPatchResult("Added title and tags using AI", new_content)

    async def analyze_with_ai(self, content: str) -> AnalysisResult | None:
        if self.provider is None:
            return None

        reply = await self.provider.complete(
            [
                {"role": "system", "content": prompts.ANALYZE},
                {"role": "user", "content": content},
            ],
            max_tokens=512,
            temperature=0.3,
        )
        parsed: Any = json.loads(_strip_code_fence(reply))
        if not isinstance(parsed, dict):
            raise ValueError("AI analysis reply is not a JSON object")

        suggestions = []
        for item in parsed.get("suggestions") or []:
            try:
                action = PatchAction(item.get("action"))
                priority = Priority(item.get("priority", "medium"))
            except (ValueError, AttributeError):
                continue
            # AI suggestions carry no ops; accepting one triggers a full generation
            suggestions.append(
                Suggestion(
                    id=str(uuid.uuid4()),
                    action=action,
                    rationale=str(item.get("rationale", "")),
                    ops=[],
                    priority=priority,
                )
            )

        return AnalysisResult(
            suggestions=suggestions,
            analyzed_at=datetime.now(timezone.utc),
            content_hash=content_hash(content),
        )

    async def stitch_with_ai(self, notes: Sequence[Note]) -> StitchResponse | None:
        if self.provider is None:
            return None

        notes_text = "\n\n".join(
            f"--- Note {i}: {n.title} ---\n{n.content}" for i, n in enumerate(notes, start=1)
        )
        reply = await self.provider.complete(
            [
                {"role": "system", "content": prompts.STITCH},
                {"role": "user", "content": notes_text},
            ],
            max_tokens=4096,
            temperature=0.5,
        )
        return StitchResponse(
            rationale=f"AI compiled {len(notes)} notes into a structured document",
            content=reply.strip(),
        )

