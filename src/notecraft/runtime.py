"""Runtime wiring helper for the CLI, API server and watcher."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.fs_storage import FsNoteStore
from .adapters.yaml_codec import YamlFrontmatter
from .ai.generator import ProviderGenerator
from .ai.providers import create_provider
from .config import NotecraftConfig, load_config


@dataclass
class Runtime:
    """Container for all wired components."""
    config: NotecraftConfig
    store: FsNoteStore
    ai: ProviderGenerator


def build_runtime(
    vault_path: Path | None = None,
    config_path: Path | None = None,
    config: NotecraftConfig | None = None,
) -> Runtime:
    """Build and wire all components for a vault."""
    if config is None:
        config = load_config(config_path=config_path, vault_path=vault_path)

    store = FsNoteStore(config.vault.root, YamlFrontmatter())
    provider = create_provider(
        config.ai.provider,
        model=config.ai.model,
        api_key_env=config.ai.api_key_env,
        base_url=config.ai.base_url,
        timeout=config.ai.timeout,
    )

    return Runtime(config=config, store=store, ai=ProviderGenerator(provider))
