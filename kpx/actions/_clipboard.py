"""Clipboard delivery via pyperclip."""

from __future__ import annotations

import pyperclip

from kpx.errors import ClipboardError


def copy_text(text: str) -> None:
    """Replace the system clipboard's text with ``text``.

    Raises:
        ClipboardError: No clipboard mechanism is available or the write failed.
    """
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as exc:
        raise ClipboardError(f"Could not write to clipboard: {exc}") from exc
