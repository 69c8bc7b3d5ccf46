"""Tests for the MCP tools: entry values never travel back to the agent."""

from __future__ import annotations

import json

import pyperclip
import pytest
from _fakes import FakeTool

pytest.importorskip("mcp")

import kpx  # noqa: E402
from kpx import _router, tool  # noqa: E402
from kpx.actions._handler import InputHandler  # noqa: E402
from kpx.actions.executor import ActionResult  # noqa: E402
from kpx.mcp import server  # noqa: E402

SECRET_VALUE = "hunter2-s3cret"


class _Typist(InputHandler):
    def __init__(self):
        self.typed: list[str] = []

    @property
    def platform_name(self):
        return "test"

    def type_text(self, text):
        self.typed.append(text)
        return ActionResult(success=True, message=f"Typed {len(text)} characters")


@pytest.fixture
def fake(monkeypatch):
    fake = FakeTool(
        {
            "search": ("Internet/Mail\nInternet/Forum\n", ""),
            "show": (SECRET_VALUE + "\n", ""),
        }
    )
    monkeypatch.setattr(tool.subprocess, "Popen", fake)
    return fake


@pytest.fixture
def clipboard(monkeypatch):
    copied: list[str] = []
    monkeypatch.setattr(pyperclip, "copy", copied.append)
    return copied


@pytest.fixture
def typist(monkeypatch):
    typist = _Typist()
    monkeypatch.setattr(_router, "get_input_handler", lambda platform=None: typist)
    return typist


@pytest.fixture(autouse=True)
def session(monkeypatch, config):
    session = kpx.Session(config)
    monkeypatch.setattr(server, "_session", session)
    return session


class TestSearch:
    def test_lists_entries(self, fake):
        assert server.search("mail") == "Internet/Mail\nInternet/Forum\n"
        assert fake.last.argv == ["search", "--quiet", "store.db", "mail"]

    def test_error_line(self, fake):
        fake.responses["search"] = ("", "Invalid credentials\n")
        assert server.search("mail").startswith("! Error in keepassxc-cli")


class TestDelivery:
    def test_copy_hides_value(self, fake, clipboard):
        reply = server.copy("Internet/Mail", "password")
        assert clipboard == [SECRET_VALUE]
        assert SECRET_VALUE not in reply
        assert json.loads(reply)["success"] is True

    def test_type_text_hides_value(self, fake, typist):
        reply = server.type_text("Internet/Mail", "username")
        assert typist.typed == [SECRET_VALUE]
        assert SECRET_VALUE not in reply
        assert json.loads(reply)["success"] is True
        assert fake.last.argv[4] == "username"

    def test_hotkey_hides_value(self, fake, clipboard):
        reply = server.hotkey("Internet/Mail", "ctrl+b")
        assert clipboard == [SECRET_VALUE]
        assert SECRET_VALUE not in reply
        assert fake.last.argv[4] == "username"

    def test_unknown_field_never_spawns(self, fake, clipboard):
        reply = json.loads(server.copy("Internet/Mail", "notes"))
        assert reply["success"] is False
        assert "notes" in reply["error"]
        assert fake.calls == []
        assert clipboard == []
