"""keepassxc-cli invocation: argument vectors, process orchestration, field lookup.

Every call spawns a fresh process.  The master secret, when configured, is
written to the child's stdin as a single line and stdin is closed straight
after; it never appears in an argument vector or a log record.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from dataclasses import dataclass
from typing import Literal

from kpx.config import Config, validate_config
from kpx.errors import ProcessSpawnFailed, ToolError, ToolTimeout, UnknownField
from kpx.search import parse_entries

logger = logging.getLogger(__name__)

Field = Literal["password", "username", "totp"]

VALID_FIELDS = frozenset({"password", "username", "totp"})

# Hide the console window keepassxc-cli would otherwise flash on Windows
_CREATIONFLAGS = getattr(subprocess, "CREATE_NO_WINDOW", 0) if sys.platform == "win32" else 0


@dataclass(frozen=True)
class ToolInvocation:
    """Record of one finished keepassxc-cli run."""

    executable: str
    argv: tuple[str, ...]
    stdin_supplied: bool
    stdout: str
    stderr: str
    returncode: int


# ---------------------------------------------------------------------------
# Argument vectors
# ---------------------------------------------------------------------------


def search_argv(database_path: str, query: str) -> list[str]:
    """Arguments for a search, or a recursive listing when ``query`` is empty.

    The query is passed through as one argument, untouched.
    """
    if query:
        return ["search", "--quiet", database_path, query]
    return ["ls", "--recursive", database_path]


def unlock_argv(database_path: str) -> list[str]:
    """Arguments for a quiet listing, used only to prove the secret opens the store."""
    return ["ls", "--quiet", "--recursive", database_path]


def show_argv(database_path: str, entry: str, field: str) -> list[str]:
    """Arguments that print a single field of ``entry``.

    ``totp`` asks for the live code rather than a stored attribute.
    """
    if field not in VALID_FIELDS:
        raise UnknownField(field)
    if field == "totp":
        return ["show", "-s", "-q", "--totp", database_path, entry]
    return ["show", "-s", "-q", "-a", field, database_path, entry]


# ---------------------------------------------------------------------------
# Process orchestration
# ---------------------------------------------------------------------------


def run_tool(config: Config, argv: list[str]) -> ToolInvocation:
    """Run keepassxc-cli with ``argv`` and wait for it to exit.

    Both output streams are decoded as UTF-8.  The call is bounded by
    ``config.timeout``; on expiry the child is killed.

    Raises:
        ProcessSpawnFailed: The executable could not be started.
        ToolTimeout: The child did not exit in time.
        ToolError: The child wrote anything to stderr (exit code is ignored,
            keepassxc-cli reports every problem there).
    """
    payload = config.secret_payload()
    cmd = [config.cli_path, *argv]
    logger.debug("Running %s", cmd)

    try:
        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.PIPE if payload is not None else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            creationflags=_CREATIONFLAGS,
        )
    except OSError as exc:
        raise ProcessSpawnFailed(f"Failed to start {config.cli_path!r}: {exc}") from exc

    try:
        out, err = proc.communicate(input=payload, timeout=config.timeout)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.communicate()
        logger.warning("keepassxc-cli timed out after %ss (%s)", config.timeout, argv[0])
        raise ToolTimeout(config.timeout) from None

    stdout = (out or b"").decode("utf-8", errors="replace")
    stderr = (err or b"").decode("utf-8", errors="replace")
    logger.debug(
        "keepassxc-cli %s exited %s (stdout %d chars, stderr %d chars)",
        argv[0],
        proc.returncode,
        len(stdout),
        len(stderr),
    )

    if stderr.strip():
        raise ToolError(stderr.strip())

    return ToolInvocation(
        executable=config.cli_path,
        argv=tuple(argv),
        stdin_supplied=payload is not None,
        stdout=stdout,
        stderr=stderr,
        returncode=proc.returncode,
    )


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def search_entries(config: Config, query: str = "") -> list[str]:
    """Return entry labels matching ``query`` (all entries when empty).

    An empty list means no entries were found; that is not an error.
    """
    validate_config(config)
    query = query.strip()
    invocation = run_tool(config, search_argv(config.database_path, query))
    entries = parse_entries(invocation.stdout, query, sort=config.sort)
    logger.info("Query %r returned %d entries", query, len(entries))
    return entries


def show_field(config: Config, entry: str, field: str) -> str | None:
    """Fetch one field of ``entry``.

    Returns the trimmed value, or None when the tool printed nothing
    (field not set on the entry).
    """
    argv = show_argv(config.database_path, entry, field)
    validate_config(config)
    invocation = run_tool(config, argv)
    value = invocation.stdout.strip()
    if not value:
        logger.info("Field %s is empty for %r", field, entry)
        return None
    return value


def unlock_check(config: Config) -> None:
    """Open the database once to prove the configured secret works."""
    validate_config(config)
    run_tool(config, unlock_argv(config.database_path))
    logger.info("Unlocked %s", config.database_path)
