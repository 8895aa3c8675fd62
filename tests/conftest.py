"""Pytest configuration and fixtures for all tests."""

import base64
import json
from pathlib import Path

import pytest

from revdiff.core import config as config_module


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point the global config manager at a scratch home and project directory.

    Yields the fresh ``ConfigManager`` so tests can seed configuration.
    """
    home = tmp_path / "home"
    project = tmp_path / "project"
    home.mkdir()
    project.mkdir()

    manager = config_module.ConfigManager()
    manager.global_config_path = home / ".revdiff.json"
    monkeypatch.setattr(config_module, "config_manager", manager)
    monkeypatch.setattr("revdiff.cli.top_level_cli.config_manager", manager)
    monkeypatch.chdir(project)

    yield manager


def _write_unit(root: Path, space: str, unit: str, head: int, live: int, revisions: dict) -> Path:
    unit_dir = root / space / unit
    (unit_dir / "revisions").mkdir(parents=True)
    (unit_dir / "unit.json").write_text(
        json.dumps({"slug": unit, "head_revision_num": head, "live_revision_num": live})
    )
    for num, text in revisions.items():
        encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
        (unit_dir / "revisions" / f"{num}.json").write_text(
            json.dumps({"revision_num": num, "data": encoded})
        )
    return unit_dir


@pytest.fixture
def write_unit():
    """Write an exported unit with base64 encoded revisions under a store root."""
    return _write_unit
