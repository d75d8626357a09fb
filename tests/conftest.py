"""Shared fixtures for modshake tests."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports when the package is not installed
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def project(tmp_path, monkeypatch):
    """Chdir into an empty project and return a writer for module files.

    Module ids in the built graphs are then the short relative paths, e.g.
    "entry.ts" and "lib/math.ts".
    """
    monkeypatch.chdir(tmp_path)

    def write(files: dict[str, str]) -> Path:
        for rel_path, content in files.items():
            path = tmp_path / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return write
