"""AI collaborator: chat providers and the patch/analysis generator."""

from .generator import ProviderGenerator
from .providers import AnthropicProvider, ChatProvider, OpenAIProvider, ProviderError, create_provider

__all__ = [
    "AnthropicProvider",
    "ChatProvider",
    "OpenAIProvider",
    "ProviderError",
    "ProviderGenerator",
    "create_provider",
]
