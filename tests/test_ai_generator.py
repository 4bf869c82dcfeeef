"""Tests for the SDK-backed providers and the provider-backed generator."""

import asyncio
import json

import httpx
import pytest

from notecraft.ai.generator import ProviderGenerator
from notecraft.ai.providers import (
    AnthropicProvider,
    OpenAIProvider,
    ProviderError,
    create_provider,
)
from notecraft.core.model import Note, PatchAction, PatchRequest, Priority, Selection
from notecraft.patch.analyzer import analyze_content


def _chat_completion(reply):
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 0,
        "model": "gpt-4o-mini",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": reply},
            }
        ],
    }


def _anthropic_message(reply):
    return {
        "id": "msg_1",
        "type": "message",
        "role": "assistant",
        "model": "claude-3-haiku-20240307",
        "content": [{"type": "text", "text": reply}],
        "stop_reason": "end_turn",
        "stop_sequence": None,
        "usage": {"input_tokens": 1, "output_tokens": 1},
    }


def _openai(reply, captured=None, status=200):
    def handler(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append(request)
        if status != 200:
            return httpx.Response(status, json={"error": {"message": "upstream failure"}})
        return httpx.Response(200, json=_chat_completion(reply))

    return OpenAIProvider(api_key="sk-test", max_retries=0, transport=httpx.MockTransport(handler))


def _generator(reply):
    return ProviderGenerator(_openai(reply))


@pytest.mark.asyncio
async def test_openai_request_shape():
    captured = []
    provider = _openai("hi", captured)
    reply = await provider.complete([{"role": "user", "content": "hello"}], max_tokens=10)
    assert reply == "hi"
    (request,) = captured
    assert request.url.path == "/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-test"
    body = json.loads(request.content)
    assert body["model"] == "gpt-4o-mini"
    assert body["max_tokens"] == 10
    assert body["messages"] == [{"role": "user", "content": "hello"}]


@pytest.mark.asyncio
async def test_anthropic_lifts_system_prompt():
    captured = []

    def handler(request):
        captured.append(request)
        return httpx.Response(200, json=_anthropic_message("ok"))

    provider = AnthropicProvider(api_key="key", max_retries=0, transport=httpx.MockTransport(handler))
    reply = await provider.complete(
        [{"role": "system", "content": "be brief"}, {"role": "user", "content": "hi"}]
    )
    assert reply == "ok"
    (request,) = captured
    assert request.url.path == "/v1/messages"
    assert request.headers["x-api-key"] == "key"
    assert request.headers["anthropic-version"] == "2023-06-01"
    body = json.loads(request.content)
    assert body["system"] == "be brief"
    assert body["messages"] == [{"role": "user", "content": "hi"}]


@pytest.mark.asyncio
async def test_http_error_becomes_provider_error():
    provider = _openai("", status=500)
    with pytest.raises(ProviderError, match="500"):
        await provider.complete([{"role": "user", "content": "x"}])


@pytest.mark.asyncio
async def test_anthropic_http_error_becomes_provider_error():
    def handler(request):
        body = {"type": "error", "error": {"type": "authentication_error", "message": "bad key"}}
        return httpx.Response(401, json=body)

    provider = AnthropicProvider(api_key="key", max_retries=0, transport=httpx.MockTransport(handler))
    with pytest.raises(ProviderError, match="401"):
        await provider.complete([{"role": "user", "content": "x"}])


@pytest.mark.asyncio
async def test_connection_failure_becomes_provider_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    provider = OpenAIProvider(api_key="k", max_retries=0, transport=httpx.MockTransport(handler))
    with pytest.raises(ProviderError):
        await provider.complete([{"role": "user", "content": "x"}])


@pytest.mark.asyncio
async def test_unexpected_shape_becomes_provider_error():
    def handler(request):
        return httpx.Response(200, json={"unexpected": True})

    provider = OpenAIProvider(api_key="k", max_retries=0, transport=httpx.MockTransport(handler))
    with pytest.raises(ProviderError):
        await provider.complete([{"role": "user", "content": "x"}])


def test_generator_keeps_working_across_event_loops():
    """Test that each asyncio.run gets a working client, as the watcher and CLI do."""
    loops = []
    reply = json.dumps(
        {"suggestions": [{"action": "summarize", "rationale": "from-ai", "priority": "low"}]}
    )

    def handler(request):
        loops.append(asyncio.get_running_loop())
        return httpx.Response(200, json=_chat_completion(reply))

    provider = OpenAIProvider(api_key="k", max_retries=0, transport=httpx.MockTransport(handler))
    generator = ProviderGenerator(provider)
    content = "shopping list\nTODO: buy milk"

    for _ in range(2):
        result = asyncio.run(analyze_content(content, ai=generator))
        assert [s.rationale for s in result.suggestions] == ["from-ai"]

    assert len(loops) == 2
    assert loops[0] is not loops[1]


def test_create_provider(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    assert create_provider("mock") is None
    assert create_provider("openai") is None
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    provider = create_provider("openai", model="gpt-4o", timeout=5.0)
    assert isinstance(provider, OpenAIProvider)
    assert provider.api_key == "sk-env"
    assert provider.model == "gpt-4o"
    assert provider.timeout == 5.0
    with pytest.raises(ProviderError):
        create_provider("llama")


def test_create_provider_custom_key_env(monkeypatch):
    monkeypatch.setenv("MY_CLAUDE_KEY", "abc")
    provider = create_provider("anthropic", api_key_env="MY_CLAUDE_KEY")
    assert isinstance(provider, AnthropicProvider)
    assert provider.api_key == "abc"
    assert provider.model == "claude-3-haiku-20240307"


def test_generator_availability():
    assert ProviderGenerator(None).is_available() is False
    assert _generator("x").is_available() is True


@pytest.mark.asyncio
async def test_generator_without_provider_returns_none():
    request = PatchRequest(note_id="n", content="text", action=PatchAction.SUMMARIZE)
    generator = ProviderGenerator(None)
    assert await generator.generate_patch_with_ai(request) is None
    assert await generator.analyze_with_ai("text") is None
    assert await generator.stitch_with_ai([]) is None


@pytest.mark.asyncio
async def test_summarize_appends_section():
    request = PatchRequest(note_id="n", content="Body", action=PatchAction.SUMMARIZE)
    result = await _generator("  Short summary.  ").generate_patch_with_ai(request)
    assert result.new_content == "Body\n\n## Summary\nShort summary."
    assert result.rationale == "Added AI-generated summary"


@pytest.mark.asyncio
async def test_rewrite_replaces_whole_text():
    request = PatchRequest(note_id="n", content="bad txt", action=PatchAction.FIX_GRAMMAR)
    result = await _generator("Bad text.").generate_patch_with_ai(request)
    assert result.new_content == "Bad text."
    assert result.rationale == "Improved note with AI (fix grammar)"


@pytest.mark.asyncio
async def test_translate_uses_default_language():
    request = PatchRequest(note_id="n", content="Hello", action=PatchAction.TRANSLATE)
    result = await _generator("Hola").generate_patch_with_ai(request)
    assert result.new_content == "Hello\n\n---\n**Translation (Spanish):**\nHola"


@pytest.mark.asyncio
async def test_selection_is_replaced():
    request = PatchRequest(
        note_id="n",
        content="Hello world",
        action=PatchAction.SIMPLIFY,
        selection=Selection(0, 5, "Hello"),
    )
    result = await _generator("Hi").generate_patch_with_ai(request)
    assert result.new_content == "Hi world"


@pytest.mark.asyncio
async def test_explain_selection_inserts_blockquote():
    request = PatchRequest(
        note_id="n",
        content="Entropy rises.",
        action=PatchAction.EXPLAIN,
        selection=Selection(0, 7, "Entropy"),
    )
    result = await _generator("Disorder.\nAlways.").generate_patch_with_ai(request)
    assert result.new_content == "Entropy\n\n> **AI Response:**\n> Disorder.\n> Always. rises."
    assert result.rationale == "Added AI explanation"


@pytest.mark.asyncio
async def test_title_tags_json_reply():
    request = PatchRequest(note_id="n", content="body text", action=PatchAction.TITLE_TAGS)
    reply = '```json\n{"title": "My Title", "tags": ["one", "#two"]}\n```'
    result = await _generator(reply).generate_patch_with_ai(request)
    assert result.new_content == "# My Title\n\nbody text\n\n---\nTags: #one #two"


@pytest.mark.asyncio
async def test_title_tags_bad_json_keeps_content():
    request = PatchRequest(note_id="n", content="body text", action=PatchAction.TITLE_TAGS)
    result = await _generator("not json at all").generate_patch_with_ai(request)
    assert result.new_content == "body text"
    assert result.rationale == "Could not parse AI response for title/tags"


@pytest.mark.asyncio
async def test_analyze_with_ai_parses_suggestions():
    reply = json.dumps(
        {
            "suggestions": [
                {"action": "summarize", "rationale": "Long note", "priority": "medium"},
                {"action": "dance", "rationale": "unknown action is dropped"},
            ]
        }
    )
    result = await _generator(reply).analyze_with_ai("some content")
    (suggestion,) = result.suggestions
    assert suggestion.action is PatchAction.SUMMARIZE
    assert suggestion.priority is Priority.MEDIUM
    assert suggestion.ops == []


@pytest.mark.asyncio
async def test_analyze_with_ai_rejects_non_object():
    with pytest.raises(ValueError):
        await _generator("[1, 2]").analyze_with_ai("content")


@pytest.mark.asyncio
async def test_stitch_with_ai():
    notes = [Note(id="a", title="A", content="one"), Note(id="b", title="B", content="two")]
    result = await _generator("# Combined").stitch_with_ai(notes)
    assert result.content == "# Combined"
    assert "2 notes" in result.rationale
