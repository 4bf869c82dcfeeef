"""Chat-completion providers backed by the OpenAI and Anthropic SDKs."""

import os

import anthropic
import httpx
import openai
import structlog

logger = structlog.get_logger()


class ProviderError(Exception):
    """Any failure talking to an AI provider."""


class ChatProvider:
    """
    Base chat-completion provider.

    An SDK client is opened and closed around every request. Pooled
    connections belong to the event loop that opened them, and the CLI and
    watcher run each request batch on a fresh loop.
    """

    provider_name = "base"
    default_model = ""

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 2,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.model = model or self.default_model
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.transport = transport

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    def _status_error(self, status: int, message: str) -> ProviderError:
        logger.warning("provider_http_error", provider=self.provider_name, status=status)
        return ProviderError(f"{self.provider_name} API error {status}: {message[:200]}")

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> str:
        raise NotImplementedError


class OpenAIProvider(ChatProvider):
    provider_name = "openai"
    default_model = "gpt-4o-mini"

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> str:
        try:
            async with openai.AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                max_retries=self.max_retries,
                http_client=self._http_client(),
            ) as client:
                response = await client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    max_tokens=max_tokens,
                    temperature=temperature,
                )
        except openai.APIStatusError as e:
            raise self._status_error(e.status_code, e.message) from e
        except openai.APIError as e:
            raise ProviderError(f"openai request failed: {e}") from e

        try:
            return response.choices[0].message.content or ""
        except (AttributeError, IndexError, TypeError) as e:
            raise ProviderError(f"Unexpected OpenAI response shape: {e}") from e


class AnthropicProvider(ChatProvider):
    provider_name = "anthropic"
    default_model = "claude-3-haiku-20240307"

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> str:
        # System prompt travels outside the message list
        system = next((m["content"] for m in messages if m["role"] == "system"), "")
        chat = [
            {"role": "assistant" if m["role"] == "assistant" else "user", "content": m["content"]}
            for m in messages
            if m["role"] != "system"
        ]
        try:
            async with anthropic.AsyncAnthropic(
                api_key=self.api_key,
                base_url=self.base_url,
                max_retries=self.max_retries,
                http_client=self._http_client(),
            ) as client:
                response = await client.messages.create(
                    model=self.model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    system=system,
                    messages=chat,
                )
        except anthropic.APIStatusError as e:
            raise self._status_error(e.status_code, e.message) from e
        except anthropic.APIError as e:
            raise ProviderError(f"anthropic request failed: {e}") from e

        try:
            return response.content[0].text or ""
        except (AttributeError, IndexError, TypeError) as e:
            raise ProviderError(f"Unexpected Anthropic response shape: {e}") from e


_PROVIDERS: dict[str, type[ChatProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
}

_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


def create_provider(
    provider: str,
    model: str | None = None,
    api_key: str | None = None,
    api_key_env: str | None = None,
    base_url: str | None = None,
    timeout: float = 30.0,
    max_retries: int = 2,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ChatProvider | None:
    """
    Build the configured provider.

    Returns None for ``mock`` or when no API key can be found; that is the
    "AI not configured" state, not an error.
    """
    if provider == "mock":
        return None
    cls = _PROVIDERS.get(provider)
    if cls is None:
        raise ProviderError(f"Unknown provider: {provider}. Use: mock, openai, anthropic")

    key = api_key or os.getenv(api_key_env or _KEY_ENV[provider], "")
    if not key:
        logger.info("ai_provider_unconfigured", provider=provider)
        return None

    return cls(
        api_key=key,
        model=model or None,
        base_url=base_url or None,
        timeout=timeout,
        max_retries=max_retries,
        transport=transport,
    )
