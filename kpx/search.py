"""Turn keepassxc-cli listing output into entry labels."""

from __future__ import annotations


def parse_entries(
    output: str,
    query: str = "",
    *,
    sort: str = "tool",
) -> list[str]:
    """Split tool output into entry labels.

    Lines are trimmed and blank lines dropped.  The tool has already applied
    ``query`` (``search`` filters on its side), so nothing is re-filtered
    here; ``query`` is accepted so callers can pass the whole request along.

    Args:
        output: Captured stdout of ``search`` or ``ls --recursive``.
        query: The search term the output was produced for.
        sort: ``"tool"`` keeps the tool's order, ``"name"`` sorts
              case-insensitively.  Duplicates are kept either way.

    Returns:
        Entry labels; empty when the tool listed nothing.
    """
    entries = [line.strip() for line in output.splitlines()]
    entries = [e for e in entries if e]
    if sort == "name":
        entries.sort(key=str.casefold)
    elif sort != "tool":
        raise ValueError(f"Unknown sort policy {sort!r}")
    return entries
