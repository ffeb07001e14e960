from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.manifests import DEV_SERVER, build_manifest, write_manifest
from vitetags.infrastructure.config import reset_settings


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A working directory holding build/manifest.json, without a hot file."""
    write_manifest(tmp_path, build_manifest())
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def hot_project(project: Path) -> Path:
    (project / "hot").write_text(DEV_SERVER + "\n", encoding="utf-8")
    return project


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()
