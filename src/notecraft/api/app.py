"""FastAPI application for the notecraft local JSON API."""

import secrets
from typing import Any

import structlog
from fastapi import Body, Depends, FastAPI, HTTPException, Query, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .. import __version__
from ..core.model import Note, PatchOp, PatchRequest
from ..core.ops import apply_ops
from ..links.completion import complete_wiki_link, get_wiki_link_typing_state
from ..links.graph import find_broken_links, find_note_by_title, get_backlinks, search_notes_by_title
from ..links.mentions import find_unlinked_mentions
from ..links.parser import parse_wiki_links
from ..links.rename import propagate_rename
from ..patch.analyzer import analyze_content
from ..patch.pipeline import generate_patch, generate_stitch

logger = structlog.get_logger()


def _int_field(body: dict[str, Any], *names: str) -> int:
    for name in names:
        value = body.get(name)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    raise HTTPException(status_code=400, detail=f"'{names[0]}' must be an integer")


def _str_field(body: dict[str, Any], name: str) -> str:
    value = body.get(name)
    if not isinstance(value, str):
        raise HTTPException(status_code=400, detail=f"'{name}' must be a string")
    return value


def create_app(runtime: Any, token: str | None = None, enable_cors: bool = False) -> FastAPI:
    """
    Create FastAPI application with runtime injected.

    Args:
        runtime: Runtime instance with store, AI generator and config
        token: Bearer token for authentication (None to disable auth)
        enable_cors: Enable CORS middleware

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Notecraft API",
        description="Local JSON API for a notecraft vault",
        version=__version__,
        docs_url="/docs" if token is None else None,
        redoc_url="/redoc" if token is None else None,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if token:
        security_scheme = HTTPBearer(auto_error=False)

        async def verify_token(
            credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
        ) -> None:
            """Verify bearer token."""
            if credentials is None or credentials.credentials != token:
                raise HTTPException(status_code=401, detail="Invalid or missing token")
    else:

        async def verify_token() -> None:
            """No-op when auth is disabled."""
            return None

    def load_note(note_id: str) -> Note:
        note = runtime.store.get(note_id)
        if note is None:
            raise HTTPException(status_code=404, detail=f"Note {note_id} not found")
        return note

    @app.get("/health")
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Health check endpoint."""
        return {
            "status": "ok",
            "version": __version__,
            "ai": runtime.ai.provider_name if runtime.ai.is_available() else None,
        }

    @app.get("/notes/{note_id}/links")
    async def note_links(note_id: str, auth: None = Depends(verify_token)) -> list[dict[str, Any]]:
        """Outgoing wiki-links with the id each resolves to."""
        note = load_note(note_id)
        notes = runtime.store.all_notes()
        output = []
        for link in parse_wiki_links(note.content):
            target = find_note_by_title(link.target_title, notes)
            item = link.to_dict()
            item["resolved"] = target.id if target else None
            output.append(item)
        return output

    @app.get("/notes/{note_id}/backlinks")
    async def note_backlinks(note_id: str, auth: None = Depends(verify_token)) -> list[dict[str, Any]]:
        """Incoming links with surrounding context."""
        note = load_note(note_id)
        return [b.to_dict() for b in get_backlinks(note.id, note.title, runtime.store.all_notes())]

    @app.get("/notes/{note_id}/broken-links")
    async def note_broken_links(
        note_id: str, auth: None = Depends(verify_token)
    ) -> list[dict[str, Any]]:
        note = load_note(note_id)
        return [link.to_dict() for link in find_broken_links(note.content, runtime.store.all_notes())]

    @app.get("/notes/{note_id}/suggest-links")
    async def note_suggest_links(
        note_id: str, auth: None = Depends(verify_token)
    ) -> list[dict[str, Any]]:
        """Plain-text mentions of other notes' titles."""
        note = load_note(note_id)
        others = [n for n in runtime.store.all_notes() if n.id != note.id]
        return [s.to_dict() for s in find_unlinked_mentions(note.content, others)]

    @app.get("/search")
    async def search(
        q: str = Query("", description="Title query; empty returns recently updated notes"),
        limit: int = Query(10, description="Maximum results", ge=1, le=100),
        auth: None = Depends(verify_token),
    ) -> list[dict[str, Any]]:
        """Autocomplete search over note titles."""
        results = search_notes_by_title(q, runtime.store.all_notes(), limit=limit)
        return [{"id": n.id, "title": n.title} for n in results]

    @app.post("/patch")
    async def patch(
        body: dict[str, Any] = Body(...),  # noqa: B008
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Generate a patch. ``content`` defaults to the stored note when ``noteId`` is given."""
        if "content" not in body and body.get("noteId"):
            body = {**body, "content": load_note(str(body["noteId"])).content}
        try:
            request = PatchRequest.from_dict(body)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        response = await generate_patch(request, ai=runtime.ai)
        return response.to_dict()

    @app.post("/analyze")
    async def analyze(
        body: dict[str, Any] = Body(...),  # noqa: B008
        auth: None = Depends(verify_token),
    ) -> dict[str, Any] | None:
        """Idle analysis; ``null`` when ``previousHash`` matches the content."""
        content = _str_field(body, "content")
        result = await analyze_content(
            content,
            previous_hash=body.get("previousHash"),
            ai=runtime.ai,
            min_length=runtime.config.analysis.min_length,
        )
        return result.to_dict() if result else None

    @app.post("/apply")
    async def apply(
        body: dict[str, Any] = Body(...),  # noqa: B008
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Apply ops to ``content``; with ``noteId`` and ``save`` the result is written back."""
        content = _str_field(body, "content")
        raw_ops = body.get("ops")
        if not isinstance(raw_ops, list):
            raise HTTPException(status_code=400, detail="'ops' must be a list")
        try:
            ops = [PatchOp.from_dict(op) for op in raw_ops]
        except (ValueError, AttributeError) as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        new_content = apply_ops(content, ops)
        if body.get("save") and body.get("noteId"):
            note = load_note(str(body["noteId"]))
            note.content = new_content
            runtime.store.put(note)
            logger.info("patch_saved", note_id=note.id, ops=len(ops))
        return {"content": new_content}

    @app.post("/typing-state")
    async def typing_state(
        body: dict[str, Any] = Body(...),  # noqa: B008
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        content = _str_field(body, "content")
        state = get_wiki_link_typing_state(content, _int_field(body, "caret", "caretPos"))
        if state is None:
            return {"state": None, "candidates": []}
        candidates = search_notes_by_title(state.query, runtime.store.all_notes())
        return {
            "state": state.to_dict(),
            "candidates": [{"id": n.id, "title": n.title} for n in candidates],
        }

    @app.post("/complete")
    async def complete(
        body: dict[str, Any] = Body(...),  # noqa: B008
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        completion = complete_wiki_link(
            _str_field(body, "content"),
            _int_field(body, "startPosition"),
            _int_field(body, "caret", "caretPos"),
            _str_field(body, "title"),
        )
        return completion.to_dict()

    @app.post("/rename")
    async def rename(
        body: dict[str, Any] = Body(...),  # noqa: B008
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Retitle a note and rewrite links to it across the vault."""
        note = load_note(_str_field(body, "noteId"))
        new_title = _str_field(body, "title")
        notes = runtime.store.all_notes()
        changed = propagate_rename(note.id, note.title, new_title, notes)

        if not body.get("dryRun"):
            note.title = new_title
            runtime.store.put(note)
            by_id = {n.id: n for n in notes}
            for nid, new_content in changed.items():
                by_id[nid].content = new_content
                runtime.store.put(by_id[nid])

        return {"noteId": note.id, "title": new_title, "updated": changed}

    @app.post("/stitch")
    async def stitch(
        body: dict[str, Any] = Body(...),  # noqa: B008
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        ids = body.get("noteIds")
        if not isinstance(ids, list) or not ids:
            raise HTTPException(status_code=400, detail="'noteIds' must be a non-empty list")
        notes = [load_note(str(nid)) for nid in ids]
        result = await generate_stitch(notes, ai=runtime.ai)
        return result.to_dict()

    return app


def generate_token() -> str:
    """Generate a random bearer token."""
    return secrets.token_urlsafe(32)
