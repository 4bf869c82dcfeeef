"""Configuration loader for notecraft.toml."""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

CONFIG_NAME = "notecraft.toml"
PROVIDERS = ("mock", "openai", "anthropic")


class ConfigError(ValueError):
    """Invalid configuration value."""


@dataclass
class VaultConfig:
    """Vault-specific configuration."""
    root: Path


@dataclass
class AIConfig:
    """AI provider configuration. API keys come from the environment only."""
    provider: str = "mock"
    model: str | None = None
    api_key_env: str | None = None
    base_url: str | None = None
    timeout: float = 30.0


@dataclass
class AnalysisConfig:
    """Idle analysis configuration."""
    min_length: int = 10
    idle_ms: int = 3000


@dataclass
class LoggingConfig:
    level: str = "INFO"
    json: bool = False


@dataclass
class NotecraftConfig:
    """Complete notecraft configuration."""
    vault: VaultConfig
    ai: AIConfig = field(default_factory=AIConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, dict):
        raise ConfigError(f"[{name}] must be a table")
    return value


def _number(section: dict[str, Any], table: str, key: str, default: Any, kind: type) -> Any:
    value = section.get(key, default)
    if isinstance(value, bool):
        raise ConfigError(f"[{table}] {key} must be a number, got {value!r}")
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"[{table}] {key} must be a number, got {value!r}") from e


def load_config(config_path: Path | None = None, vault_path: Path | None = None) -> NotecraftConfig:
    """
    Load configuration from notecraft.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/notecraft.toml
    3. vault_path/notecraft.toml

    Environment variables NOTECRAFT_AI_PROVIDER, NOTECRAFT_AI_MODEL and
    NOTECRAFT_LOG_LEVEL override the file.

    Args:
        config_path: Explicit path to config file
        vault_path: Vault root path for fallback search

    Returns:
        NotecraftConfig with resolved settings

    Raises:
        ConfigError: on an unknown provider, a malformed section
            or a non-numeric timeout, min_length or idle_ms
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_NAME)
    if vault_path:
        search_paths.append(vault_path / CONFIG_NAME)

    for path in search_paths:
        if path.exists():
            try:
                with open(path, "rb") as f:
                    toml_data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"Invalid TOML in {path}: {e}") from e
            break

    vault_data = _section(toml_data, "vault")
    # An explicit vault path wins over the file
    vault_config = VaultConfig(root=vault_path or Path(vault_data.get("root", "./vault")))

    ai_data = _section(toml_data, "ai")
    ai_config = AIConfig(
        provider=os.getenv("NOTECRAFT_AI_PROVIDER") or ai_data.get("provider", "mock"),
        model=os.getenv("NOTECRAFT_AI_MODEL") or ai_data.get("model"),
        api_key_env=ai_data.get("api_key_env"),
        base_url=ai_data.get("base_url"),
        timeout=_number(ai_data, "ai", "timeout", 30.0, float),
    )
    if ai_config.provider not in PROVIDERS:
        raise ConfigError(
            f"Unknown AI provider: {ai_config.provider}. Use one of: {', '.join(PROVIDERS)}"
        )

    analysis_data = _section(toml_data, "analysis")
    analysis_config = AnalysisConfig(
        min_length=_number(analysis_data, "analysis", "min_length", 10, int),
        idle_ms=_number(analysis_data, "analysis", "idle_ms", 3000, int),
    )

    logging_data = _section(toml_data, "logging")
    logging_config = LoggingConfig(
        level=os.getenv("NOTECRAFT_LOG_LEVEL") or logging_data.get("level", "INFO"),
        json=bool(logging_data.get("json", False)),
    )

    return NotecraftConfig(
        vault=vault_config,
        ai=ai_config,
        analysis=analysis_config,
        logging=logging_config,
    )
