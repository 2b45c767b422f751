"""Pytest configuration and fixtures for the icon tooling tests."""

import json
from pathlib import Path

import pytest

from icongen.config import Settings

ENV_VARS = ("SD_API", "LIMIT", "OVERWRITE", "DRYRUN", "OPENAI_API_KEY")


class StubGenerator:
    """Records prompts and returns a fixed payload instead of calling a service."""

    name = "stub"

    def __init__(self, payload: bytes = b"\x89"):
        self.payload = payload
        self.calls = []

    def generate(self, prompt, size=(256, 256)):
        self.calls.append((prompt, size))
        return self.payload


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A module root with module.json and an empty packs/ directory."""
    (tmp_path / "module.json").write_text(json.dumps({"id": "dbae-test"}), encoding="utf-8")
    (tmp_path / "packs").mkdir()
    return tmp_path


@pytest.fixture
def settings(project: Path) -> Settings:
    return Settings(root=project)


@pytest.fixture
def stub_generator() -> StubGenerator:
    return StubGenerator()


def write_ndjson(path: Path, docs) -> None:
    path.write_text(
        "".join(json.dumps(d, separators=(",", ":"), ensure_ascii=False) + "\n" for d in docs),
        encoding="utf-8",
    )


def read_ndjson(path: Path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line]
