"""Tests for keepassxc-cli invocation."""

from __future__ import annotations

import subprocess

import pytest
from _fakes import FakeTool

from kpx import tool
from kpx.config import Config
from kpx.errors import (
    ProcessSpawnFailed,
    StoreNotFound,
    ToolError,
    ToolNotFound,
    ToolTimeout,
    UnknownField,
)
from kpx.tool import (
    run_tool,
    search_argv,
    search_entries,
    show_argv,
    show_field,
    unlock_argv,
    unlock_check,
)


@pytest.fixture
def fake(monkeypatch):
    fake = FakeTool()
    monkeypatch.setattr(tool.subprocess, "Popen", fake)
    return fake


# ---------------------------------------------------------------------------
# Argument vectors
# ---------------------------------------------------------------------------


class TestArgv:
    def test_search(self):
        assert search_argv("store.db", "mail") == ["search", "--quiet", "store.db", "mail"]

    def test_list_all_when_query_empty(self):
        assert search_argv("store.db", "") == ["ls", "--recursive", "store.db"]

    def test_query_kept_verbatim(self):
        q = 'a b "c" -d; $(rm) *'
        assert search_argv("store.db", q)[-1] == q

    def test_show_password(self):
        assert show_argv("store.db", "Internet/Mail", "password") == [
            "show", "-s", "-q", "-a", "password", "store.db", "Internet/Mail",
        ]

    def test_show_username(self):
        assert show_argv("store.db", "E", "username")[4] == "username"

    def test_show_totp(self):
        argv = show_argv("store.db", "E", "totp")
        assert "--totp" in argv
        assert "-a" not in argv
        assert argv[-2:] == ["store.db", "E"]

    def test_unknown_field(self):
        with pytest.raises(UnknownField):
            show_argv("store.db", "E", "notes")

    def test_unlock_is_quiet(self):
        assert unlock_argv("store.db") == ["ls", "--quiet", "--recursive", "store.db"]


# ---------------------------------------------------------------------------
# run_tool
# ---------------------------------------------------------------------------


class TestRunTool:
    def test_secret_written_to_stdin(self, fake, config):
        run_tool(config, ["ls", "--recursive", "store.db"])
        proc = fake.last
        assert proc.kwargs["stdin"] == subprocess.PIPE
        assert proc.stdin_data == b"x\n"

    def test_no_secret_means_devnull(self, fake, paths):
        tool_path, store = paths
        run_tool(Config(cli_path=tool_path, database_path=store), ["ls", "--recursive", store])
        proc = fake.last
        assert proc.kwargs["stdin"] == subprocess.DEVNULL
        assert proc.stdin_data is None

    def test_secret_never_in_argv(self, fake, config):
        run_tool(config, ["search", "--quiet", "store.db", "q"])
        assert "x" not in fake.last.cmd

    def test_streams_piped(self, fake, config):
        run_tool(config, ["ls", "--recursive", "store.db"])
        assert fake.last.kwargs["stdout"] == subprocess.PIPE
        assert fake.last.kwargs["stderr"] == subprocess.PIPE

    def test_timeout_passed(self, fake, config):
        run_tool(config.replace(timeout=2.5), ["ls", "--recursive", "store.db"])
        assert fake.last.timeout == 2.5

    def test_stdout_decoded(self, fake, config):
        fake.responses["ls"] = ("Café/Menü\n", "")
        inv = run_tool(config, ["ls", "--recursive", "store.db"])
        assert inv.stdout == "Café/Menü\n"
        assert inv.argv == ("ls", "--recursive", "store.db")
        assert inv.stdin_supplied is True
        assert inv.returncode == 0

    def test_stderr_is_failure(self, fake, config):
        fake.responses["ls"] = ("", "Error while reading the database: Invalid credentials\n")
        with pytest.raises(ToolError, match="Invalid credentials"):
            run_tool(config, ["ls", "--recursive", "store.db"])

    def test_spawn_failure(self, monkeypatch, config):
        monkeypatch.setattr(tool.subprocess, "Popen", FakeTool(spawn_error=PermissionError("denied")))
        with pytest.raises(ProcessSpawnFailed, match="denied"):
            run_tool(config, ["ls", "--recursive", "store.db"])

    def test_timeout_kills_child(self, monkeypatch, config):
        fake = FakeTool(hang=True)
        monkeypatch.setattr(tool.subprocess, "Popen", fake)
        with pytest.raises(ToolTimeout):
            run_tool(config.replace(timeout=0.1), ["ls", "--recursive", "store.db"])
        assert fake.last.killed

    def test_timeout_is_spawn_failure(self):
        assert issubclass(ToolTimeout, ProcessSpawnFailed)


# ---------------------------------------------------------------------------
# search_entries
# ---------------------------------------------------------------------------


class TestSearchEntries:
    def test_invalid_tool_never_spawns(self, fake, paths):
        _, store = paths
        for q in ("", "mail", "x y"):
            with pytest.raises(ToolNotFound):
                search_entries(Config(cli_path="missing", database_path=store), q)
        assert fake.calls == []

    def test_missing_store_never_spawns(self, fake, paths):
        tool_path, _ = paths
        with pytest.raises(StoreNotFound):
            search_entries(Config(cli_path=tool_path, database_path="gone.kdbx"), "mail")
        assert fake.calls == []

    def test_search_mode(self, fake, config):
        fake.responses["search"] = ("Internet/Mail\n", "")
        assert search_entries(config, "mail") == ["Internet/Mail"]
        assert fake.last.argv == ["search", "--quiet", "store.db", "mail"]

    def test_query_trimmed(self, fake, config):
        search_entries(config, "  mail ")
        assert fake.last.argv[-1] == "mail"

    def test_special_characters_single_argument(self, fake, config):
        q = "ma*il \"quoted\" & more"
        search_entries(config, q)
        assert fake.last.argv == ["search", "--quiet", "store.db", q]

    def test_list_all(self, fake, config):
        fake.responses["ls"] = ("B\nA\n", "")
        assert search_entries(config, "") == ["B", "A"]
        assert fake.last.argv == ["ls", "--recursive", "store.db"]

    def test_sort_policy_applied(self, fake, config):
        fake.responses["ls"] = ("b\nA\n", "")
        assert search_entries(config.replace(sort="name")) == ["A", "b"]

    def test_empty_result(self, fake, config):
        assert search_entries(config, "nothing") == []


# ---------------------------------------------------------------------------
# show_field
# ---------------------------------------------------------------------------


class TestShowField:
    def test_returns_trimmed_value(self, fake, config):
        fake.responses["show"] = ("secret123\n", "")
        assert show_field(config, "Internet/Mail", "password") == "secret123"
        assert fake.last.argv == ["show", "-s", "-q", "-a", "password", "store.db", "Internet/Mail"]
        assert fake.last.stdin_data == b"x\n"

    def test_whitespace_only_is_empty(self, fake, config):
        fake.responses["show"] = ("  \n", "")
        assert show_field(config, "E", "username") is None

    def test_totp(self, fake, config):
        fake.responses["show"] = ("123456\n", "")
        assert show_field(config, "E", "totp") == "123456"
        assert "--totp" in fake.last.argv

    def test_tool_error(self, fake, config):
        fake.responses["show"] = ("", "Could not find entry with path E.\n")
        with pytest.raises(ToolError, match="Could not find entry"):
            show_field(config, "E", "password")

    def test_unknown_field_never_spawns(self, fake, config):
        with pytest.raises(UnknownField):
            show_field(config, "E", "notes")
        assert fake.calls == []

    def test_invalid_config_never_spawns(self, fake, paths):
        with pytest.raises(ToolNotFound):
            show_field(Config(cli_path="", database_path=paths[1]), "E", "password")
        assert fake.calls == []


class TestUnlockCheck:
    def test_runs_listing(self, fake, config):
        unlock_check(config)
        assert fake.last.argv == ["ls", "--quiet", "--recursive", "store.db"]
        assert fake.last.stdin_data == b"x\n"

    def test_unlock_prompt_not_treated_as_error(self, monkeypatch, config):
        fake = FakeTool({"ls": ("Internet/\n", "")}, prompt=True)
        monkeypatch.setattr(tool.subprocess, "Popen", fake)
        unlock_check(config)

    def test_bad_secret(self, fake, config):
        fake.responses["ls"] = ("", "Invalid credentials were provided\n")
        with pytest.raises(ToolError):
            unlock_check(config)
