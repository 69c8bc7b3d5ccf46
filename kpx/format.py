"""
kpx result formatting: launcher result items, action menus, compact text.

A host asks for results, shows ``title``/``subtitle`` and runs one of the
``actions`` attached to the item the user picks.  Errors and "nothing
found" states are items too, so a host can render any outcome the same way.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Literal

from kpx.actions._keys import normalize_combo
from kpx.actions.executor import Action
from kpx.errors import (
    KpxError,
    ProcessSpawnFailed,
    StoreNotFound,
    ToolError,
    ToolNotFound,
    ToolTimeout,
)

ItemKind = Literal["entry", "info", "error"]

ENTRY_SUBTITLE = "KeePassXC Entry"

# (kind, field, accelerator): first one is the default action
DEFAULT_ACTIONS: tuple[tuple[str, str, str], ...] = (
    ("copy", "password", "enter"),
    ("copy", "username", "ctrl+b"),
    ("copy", "totp", "ctrl+t"),
    ("insert", "password", "ctrl+enter"),
    ("insert", "username", "ctrl+shift+b"),
)


@dataclass(frozen=True)
class ResultItem:
    """One row of a result list."""

    title: str
    subtitle: str
    entry: str | None = None
    actions: tuple[Action, ...] = field(default=())
    kind: ItemKind = "entry"

    @property
    def default_action(self) -> Action | None:
        return self.actions[0] if self.actions else None

    def as_tuple(self) -> tuple[str, str, str | None]:
        """(display label, subtitle, entry identifier)."""
        return (self.title, self.subtitle, self.entry)


# ---------------------------------------------------------------------------
# Building items
# ---------------------------------------------------------------------------


def entry_actions(entry: str) -> tuple[Action, ...]:
    """Return the action menu for ``entry``."""
    return tuple(
        Action(kind, field_name, entry, accelerator=normalize_combo(accel))
        for kind, field_name, accel in DEFAULT_ACTIONS
    )


def build_results(entries: Iterable[str], query: str = "") -> list[ResultItem]:
    """Turn entry labels into result items.

    An empty listing yields a single informational item instead.
    """
    items = [
        ResultItem(title=entry, subtitle=ENTRY_SUBTITLE, entry=entry, actions=entry_actions(entry))
        for entry in entries
    ]
    if items:
        return items
    return [no_entries_item(query)]


def no_entries_item(query: str = "") -> ResultItem:
    if query:
        return ResultItem(title="No matching entries", subtitle=f"for: {query}", kind="info")
    return ResultItem(
        title="No entries found",
        subtitle="keepassxc-cli returned empty result",
        kind="info",
    )


def error_item(exc: KpxError) -> ResultItem:
    """Describe a failed query as a single result item."""
    if isinstance(exc, ToolNotFound):
        title, subtitle = "keepassxc-cli not found", "Check the keepassxc-cli path in settings"
    elif isinstance(exc, StoreNotFound):
        title, subtitle = "KeePassXC database not found", "Check the database path in settings"
    elif isinstance(exc, ToolTimeout):
        title, subtitle = "keepassxc-cli timed out", str(exc)
    elif isinstance(exc, ToolError):
        title, subtitle = "Error in keepassxc-cli", exc.message
    elif isinstance(exc, ProcessSpawnFailed):
        title, subtitle = "Exception running keepassxc-cli", str(exc)
    else:
        title, subtitle = "kpx error", str(exc)
    return ResultItem(title=title, subtitle=subtitle, kind="error")


def find_action(actions: Iterable[Action], combo: str) -> Action | None:
    """Return the action bound to ``combo``, or None.

    Combos are compared after normalization, so "Shift+Ctrl+B" finds the
    action bound to "ctrl+shift+b".
    """
    wanted = normalize_combo(combo)
    for action in actions:
        if action.accelerator == wanted:
            return action
    return None


# ---------------------------------------------------------------------------
# Compact text
# ---------------------------------------------------------------------------


def _format_item(item: ResultItem) -> str:
    if item.kind == "error":
        return f"! {item.title}: {item.subtitle}"
    if item.kind == "info":
        return f"- {item.title} ({item.subtitle})"
    return item.title


def serialize_results(items: list[ResultItem], *, show_actions: bool = False) -> str:
    """Render items as plain text, one per line.

    With ``show_actions`` every entry is followed by its action menu::

        Internet/Mail
            [enter] Copy password
            [ctrl+b] Copy username
    """
    lines: list[str] = []
    for item in items:
        lines.append(_format_item(item))
        if show_actions:
            for action in item.actions:
                lines.append(f"    [{action.accelerator}] {action.label}")
    return "\n".join(lines) + "\n"
