"""Shared fixtures for the react2shell-check tests."""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def write_manifest(directory: Path, react=None, dev_react=None, name="app") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    data = {"name": name, "version": "1.0.0"}
    if react is not None:
        data["dependencies"] = {"react": react, "react-dom": react}
    if dev_react is not None:
        data["devDependencies"] = {"react": dev_react}
    manifest = directory / "package.json"
    manifest.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return manifest


@pytest.fixture
def make_manifest():
    return write_manifest


@pytest.fixture
def project_tree(tmp_path: Path) -> Path:
    """One vulnerable and one patched project under a common root"""
    root = tmp_path / "projects"
    write_manifest(root / "vulnerable-app", react="^19.1.0")
    write_manifest(root / "patched-app", react="19.2.1")
    return root
