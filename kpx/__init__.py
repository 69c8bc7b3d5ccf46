"""
kpx -- KeePassXC lookups for launchers.

Searches a KeePassXC database through ``keepassxc-cli`` and delivers entry
fields to the clipboard or straight into the focused window.

Quick start::

    import kpx

    # Session is the primary API: search + actions
    session = kpx.Session(kpx.Config.from_env())
    items = session.search("mail")              # list of ResultItem
    result = session.execute(items[0].default_action)   # copy password
    result = session.insert("Internet/Mail", "username")  # type username

    # Convenience functions (use a default session built from KPX_* env vars)
    items = kpx.search("mail")
    result = kpx.copy("Internet/Mail")
"""

from __future__ import annotations

import logging

from kpx._router import detect_platform, get_input_handler
from kpx.actions import Action, ActionExecutor, ActionResult
from kpx.config import Config, Secret, validate_config
from kpx.errors import KpxError
from kpx.format import (
    ResultItem,
    build_results,
    entry_actions,
    error_item,
    find_action,
    serialize_results,
)
from kpx.tool import search_entries, show_field, unlock_check

__all__ = [
    "search",
    "copy",
    "insert",
    "Session",
    "Config",
    "Secret",
    "Action",
    "ActionResult",
    "ResultItem",
    "KpxError",
    # Advanced / building blocks
    "validate_config",
    "search_entries",
    "show_field",
    "build_results",
    "serialize_results",
    "find_action",
    "detect_platform",
    "get_input_handler",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Session: search and field delivery against one config
# ---------------------------------------------------------------------------


class Session:
    """Searches a database and runs actions on its entries.

    The session holds a read-only ``Config``.  When settings change, call
    ``configure()`` with a fresh config; a query that is already running
    keeps the config it started with.

    Example::

        session = kpx.Session(config)
        items = session.search("bank")
        action = kpx.find_action(items[0].actions, "ctrl+b")
        result = session.execute(action)        # username on clipboard
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        platform: str | None = None,
    ) -> None:
        self._platform = platform
        self._config = config if config is not None else Config.from_env()
        self._executor = ActionExecutor(self._config, platform=platform)
        self._unlock_error: KpxError | None = None
        if self._config.auto_unlock:
            self.unlock()

    @property
    def config(self) -> Config:
        return self._config

    @property
    def unlock_error(self) -> KpxError | None:
        """Error from the last ``unlock()``, or None when it succeeded."""
        return self._unlock_error

    def configure(self, config: Config) -> None:
        """Switch to a new config."""
        self._config = config
        self._executor = self._executor.with_config(config)
        self._unlock_error = None
        if config.auto_unlock:
            self.unlock()

    def unlock(self) -> bool:
        """Open the database once to check paths and secret.

        Returns:
            True on success.  On failure the error is kept in
            ``unlock_error``.
        """
        try:
            unlock_check(self._config)
        except KpxError as exc:
            logger.warning("Unlock failed: %s", exc)
            self._unlock_error = exc
            return False
        self._unlock_error = None
        return True

    def search(self, query: str = "") -> list[ResultItem]:
        """Search the database.

        Args:
            query: Search term; empty lists every entry.

        Returns:
            Result items.  Failures come back as a single error item and
            an empty listing as a single informational item, so the list
            is never empty.
        """
        config = self._config
        query = (query or "").strip()
        try:
            entries = search_entries(config, query)
        except KpxError as exc:
            logger.info("Query %r failed: %s", query, type(exc).__name__)
            return [error_item(exc)]
        return build_results(entries, query)

    def execute(self, action: Action) -> ActionResult:
        """Run an action from a result item."""
        return self._executor.execute(action)

    def copy(self, entry: str, field: str = "password") -> ActionResult:
        """Copy a field of ``entry`` to the clipboard."""
        return self._run("copy", entry, field)

    def insert(self, entry: str, field: str = "password") -> ActionResult:
        """Type a field of ``entry`` into the focused window."""
        return self._run("insert", entry, field)

    def hotkey(self, entry: str, combo: str) -> ActionResult:
        """Run the action bound to ``combo`` for ``entry``."""
        action = find_action(entry_actions(entry), combo)
        if action is None:
            return ActionResult(success=False, message="", error=f"No action bound to '{combo}'")
        return self.execute(action)

    def _run(self, kind: str, entry: str, field: str) -> ActionResult:
        try:
            action = Action(kind, field, entry)
        except (KpxError, ValueError) as exc:
            return ActionResult(success=False, message="", error=str(exc))
        return self.execute(action)


# ---------------------------------------------------------------------------
# Default session, used by the convenience functions below
# ---------------------------------------------------------------------------

_default_session: Session | None = None


def _get_default_session() -> Session:
    global _default_session
    if _default_session is None:
        _default_session = Session()
    return _default_session


def search(query: str = "") -> list[ResultItem]:
    """Search the database configured by ``KPX_*`` environment variables."""
    return _get_default_session().search(query)


def copy(entry: str, field: str = "password") -> ActionResult:
    """Copy a field of ``entry`` to the clipboard."""
    return _get_default_session().copy(entry, field)


def insert(entry: str, field: str = "password") -> ActionResult:
    """Type a field of ``entry`` into the focused window."""
    return _get_default_session().insert(entry, field)
