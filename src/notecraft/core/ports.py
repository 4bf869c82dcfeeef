from dataclasses import dataclass
from typing import Any, Iterable, Protocol, Sequence

from .model import AnalysisResult, Note, NoteId, PatchRequest, StitchResponse


@dataclass(frozen=True)
class AIPatchResult:
    rationale: str
    new_content: str


class AIGenerator(Protocol):
    """
    External AI generation collaborator. Any method may raise; callers treat
    a raise or a ``None`` return as "unavailable".
    """

    def is_available(self) -> bool:
        pass

    async def generate_patch_with_ai(self, request: PatchRequest) -> AIPatchResult | None:
        pass

    async def analyze_with_ai(self, content: str) -> AnalysisResult | None:
        pass

    async def stitch_with_ai(self, notes: Sequence[Note]) -> StitchResponse | None:
        pass


class NoteStore(Protocol):
    """
    Note corpus collaborator: supplies ``{id, title, content}`` records and
    accepts rewritten content. Schema and versioning live outside the core.
    """

    def get(self, id: NoteId) -> Note | None:
        pass

    def put(self, note: Note) -> None:
        pass

    def list_ids(self) -> Iterable[NoteId]:
        pass

    def all_notes(self) -> list[Note]:
        pass


class FrontmatterCodec(Protocol):
    """
    Round-trip optional frontmatter without enforcing schema.
    """

    def decode(self, text: str) -> tuple[dict[str, Any], str]:
        pass

    def encode(self, meta: dict[str, Any]) -> str:
        pass
