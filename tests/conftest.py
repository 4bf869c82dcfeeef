"""Shared fixtures: a temporary vault wired into a Runtime."""

import tempfile
from pathlib import Path

import pytest

from notecraft.adapters.fs_storage import FsNoteStore
from notecraft.adapters.yaml_codec import YamlFrontmatter
from notecraft.ai.generator import ProviderGenerator
from notecraft.config import NotecraftConfig, VaultConfig
from notecraft.core.model import Note
from notecraft.runtime import Runtime


@pytest.fixture
def vault_path():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "vault"
        path.mkdir()
        yield path


@pytest.fixture
def runtime(vault_path):
    """Runtime over an empty vault with AI unconfigured."""
    config = NotecraftConfig(vault=VaultConfig(root=vault_path))
    store = FsNoteStore(vault_path, YamlFrontmatter())
    return Runtime(config=config, store=store, ai=ProviderGenerator(None))


@pytest.fixture
def sample_notes(runtime):
    """Three linked notes and one orphan link."""
    notes = [
        Note(id="alpha", title="Alpha", content="Alpha links to [[Beta]] and [[Missing]]."),
        Note(id="beta", title="Beta", content="# Beta\n\nBack to [[alpha|the first note]]."),
        Note(id="gamma", title="Gamma Notes", content="See [[Beta]] for details about Alpha."),
    ]
    for note in notes:
        runtime.store.put(note)
    return notes
