"""kpx MCP Server — KeePassXC lookup tools for AI agents.

Lets an agent find entries and deliver their fields to the clipboard or the
focused window.  Field values are never returned to the agent; tools only
report whether delivery worked.
"""

from __future__ import annotations

import json

from mcp.server.fastmcp import FastMCP

import kpx
from kpx.actions import ActionResult
from kpx.tool import VALID_FIELDS

mcp = FastMCP(
    name="kpx",
    instructions=(
        "kpx searches the user's KeePassXC database through keepassxc-cli.\n\n"
        "WORKFLOW:\n"
        "1. search(query) to find entries (empty query lists everything)\n"
        "2. copy(entry, field) to put a field on the clipboard, or\n"
        "   type_text(entry, field) to type it into the focused window\n\n"
        "Fields: password, username, totp.\n"
        "Values are never shown to you; only delivery status is returned."
    ),
)

# ---------------------------------------------------------------------------
# Session state (one per MCP server process)
# ---------------------------------------------------------------------------

_session: kpx.Session | None = None


def _get_session() -> kpx.Session:
    global _session
    if _session is None:
        _session = kpx.Session()
    return _session


def _result_json(result: ActionResult) -> str:
    return json.dumps(
        {
            "success": result.success,
            "message": result.message,
            "error": result.error,
        }
    )


def _bad_field(field: str) -> str | None:
    if field in VALID_FIELDS:
        return None
    return json.dumps(
        {
            "success": False,
            "message": "",
            "error": f"Unknown field '{field}'. Valid: {sorted(VALID_FIELDS)}",
        }
    )


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@mcp.tool()
def search(query: str = "") -> str:
    """Search the KeePassXC database for entries.

    Returns one entry path per line (e.g. 'Internet/Mail').  Lines starting
    with '!' are errors, lines starting with '-' are informational
    (nothing found).

    Args:
        query: Search term.  Empty lists every entry.
    """
    items = _get_session().search(query)
    return kpx.serialize_results(items)


@mcp.tool()
def copy(entry: str, field: str = "password") -> str:
    """Copy a field of an entry to the system clipboard.

    Args:
        entry: Entry path exactly as returned by search.
        field: password, username or totp.
    """
    bad = _bad_field(field)
    if bad:
        return bad
    return _result_json(_get_session().copy(entry, field))


@mcp.tool()
def type_text(entry: str, field: str = "password") -> str:
    """Type a field of an entry into the focused window.

    Focus the target input first; the text goes wherever keyboard focus is.

    Args:
        entry: Entry path exactly as returned by search.
        field: password, username or totp.
    """
    bad = _bad_field(field)
    if bad:
        return bad
    return _result_json(_get_session().insert(entry, field))


@mcp.tool()
def hotkey(entry: str, keys: str) -> str:
    """Run the action a launcher binds to a key combo.

    Bindings: enter = copy password, ctrl+b = copy username,
    ctrl+t = copy TOTP, ctrl+enter = type password,
    ctrl+shift+b = type username.

    Args:
        entry: Entry path exactly as returned by search.
        keys: Key combo, e.g. "ctrl+b".
    """
    return _result_json(_get_session().hotkey(entry, keys))


if __name__ == "__main__":
    mcp.run()
