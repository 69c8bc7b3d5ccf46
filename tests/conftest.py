from __future__ import annotations

import pytest

from kpx.config import Config


@pytest.fixture
def paths(tmp_path, monkeypatch):
    """Create a fake keepassxc-cli and database in a temp working directory."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "tool").write_text("")
    (tmp_path / "store.db").write_text("")
    return "tool", "store.db"


@pytest.fixture
def config(paths):
    tool, store = paths
    return Config(cli_path=tool, database_path=store, use_secret=True, secret="x")
