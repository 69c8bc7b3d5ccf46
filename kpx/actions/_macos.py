"""macOS input handler — Quartz CGEvent Unicode typing."""

from __future__ import annotations

import time

from kpx.actions._handler import InputHandler
from kpx.actions.executor import ActionResult
from kpx.errors import InjectionFailed


def _type_string(text: str) -> int:
    """Type a string using CGEvents with Unicode support.

    Uses CGEventKeyboardSetUnicodeString so the active keyboard layout does
    not matter.  Returns the number of events posted.
    """
    from Quartz import (
        CGEventCreateKeyboardEvent,
        CGEventKeyboardSetUnicodeString,
        CGEventPost,
        kCGHIDEventTap,
    )

    posted = 0
    # One character per event pair; longer strings per event are dropped by
    # some applications
    for char in text:
        units = len(char.encode("utf-16-le")) // 2
        event_down = CGEventCreateKeyboardEvent(None, 0, True)
        event_up = CGEventCreateKeyboardEvent(None, 0, False)
        if event_down is None or event_up is None:
            raise InjectionFailed(
                f"CGEventCreateKeyboardEvent failed after {posted} events; "
                "grant Accessibility permission to this process"
            )
        CGEventKeyboardSetUnicodeString(event_down, units, char)
        CGEventPost(kCGHIDEventTap, event_down)

        CGEventKeyboardSetUnicodeString(event_up, units, char)
        CGEventPost(kCGHIDEventTap, event_up)
        posted += 2

    time.sleep(0.01)
    return posted


class MacosInputHandler(InputHandler):
    """Type text on macOS via Quartz event posting."""

    @property
    def platform_name(self) -> str:
        return "macos"

    def type_text(self, text: str) -> ActionResult:
        posted = _type_string(text)
        return ActionResult(success=True, message=f"Typed {len(text)} characters ({posted} events)")
