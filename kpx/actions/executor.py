"""Action executor — fetches an entry field and delivers it."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from kpx.errors import KpxError, UnknownField
from kpx.tool import VALID_FIELDS, show_field

if TYPE_CHECKING:
    from kpx.actions._handler import InputHandler
    from kpx.config import Config

logger = logging.getLogger(__name__)

ActionKind = Literal["copy", "insert"]

VALID_ACTIONS = frozenset({"copy", "insert"})

_FIELD_LABELS = {"password": "password", "username": "username", "totp": "TOTP"}


@dataclass(frozen=True)
class Action:
    """What to do with one field of one entry.

    ``copy`` puts the value on the clipboard, ``insert`` types it into the
    focused control.  ``accelerator`` is the normalized key combo a host
    binds to the action, if any.
    """

    kind: ActionKind
    field: str
    entry: str
    accelerator: str | None = None

    def __post_init__(self) -> None:
        if self.kind not in VALID_ACTIONS:
            raise ValueError(f"Unknown action {self.kind!r}. Valid: {sorted(VALID_ACTIONS)}")
        if self.field not in VALID_FIELDS:
            raise UnknownField(self.field)

    @property
    def label(self) -> str:
        verb = "Copy" if self.kind == "copy" else "Type"
        return f"{verb} {_FIELD_LABELS[self.field]}"


@dataclass
class ActionResult:
    """Result of an action execution.

    ``success=False`` with ``error=None`` means nothing was retrieved (the
    field is not set on the entry); that is informational, not a fault.
    """

    success: bool
    message: str
    error: str | None = None


class ActionExecutor:
    """Runs ``Action`` values against a config.

    Usage::

        executor = ActionExecutor(config)
        result = executor.execute(Action("copy", "password", "Internet/Mail"))

    The input handler is only created the first time an ``insert`` runs, so
    clipboard-only use never loads platform input libraries.
    """

    def __init__(
        self,
        config: Config,
        handler: InputHandler | None = None,
        *,
        platform: str | None = None,
    ) -> None:
        self._config = config
        self._handler = handler
        self._platform = platform

    @property
    def config(self) -> Config:
        return self._config

    def with_config(self, config: Config) -> ActionExecutor:
        """Return an executor for ``config`` that reuses this one's input handler."""
        return ActionExecutor(config, self._handler, platform=self._platform)

    def _get_handler(self) -> InputHandler:
        if self._handler is None:
            from kpx._router import get_input_handler

            self._handler = get_input_handler(self._platform)
        return self._handler

    def execute(self, action: Action) -> ActionResult:
        """Retrieve ``action.field`` of ``action.entry`` and deliver it."""
        try:
            value = show_field(self._config, action.entry, action.field)
        except KpxError as exc:
            return ActionResult(success=False, message="", error=str(exc))

        if value is None:
            return ActionResult(
                success=False,
                message=f"Nothing retrieved: {_FIELD_LABELS[action.field]} is empty for {action.entry}",
            )

        try:
            if action.kind == "copy":
                return self.copy_value(value, what=_FIELD_LABELS[action.field])
            return self.type_value(value, what=_FIELD_LABELS[action.field])
        except KpxError as exc:
            return ActionResult(success=False, message="", error=str(exc))
        except Exception as exc:
            logger.exception("Delivering %s failed", action.label)
            return ActionResult(success=False, message="", error=str(exc))

    # -- delivery ----------------------------------------------------------

    def copy_value(self, value: str, *, what: str = "value") -> ActionResult:
        """Replace the clipboard text with ``value``."""
        from kpx.actions._clipboard import copy_text

        copy_text(value)
        logger.info("Copied %s to clipboard", what)
        return ActionResult(success=True, message=f"Copied {what} to clipboard")

    def type_value(self, value: str, *, what: str = "value") -> ActionResult:
        """Type ``value`` into the focused control."""
        handler = self._get_handler()
        if self._config.type_delay:
            time.sleep(self._config.type_delay)
        result = handler.type_text(value)
        if result.success:
            logger.info("Typed %s into focused window", what)
            return ActionResult(success=True, message=f"Typed {what}")
        return result
