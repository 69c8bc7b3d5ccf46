"""Windows input handler — SendInput with KEYEVENTF_UNICODE."""

from __future__ import annotations

import ctypes
import ctypes.wintypes

from kpx.actions._handler import InputHandler
from kpx.actions.executor import ActionResult
from kpx.errors import InjectionFailed

# ---------------------------------------------------------------------------
# Win32 SendInput structures
# ---------------------------------------------------------------------------

INPUT_KEYBOARD = 1
KEYEVENTF_KEYUP = 0x0002
KEYEVENTF_UNICODE = 0x0004

ULONG_PTR = ctypes.c_size_t


class MOUSEINPUT(ctypes.Structure):
    _fields_ = [
        ("dx", ctypes.c_long),
        ("dy", ctypes.c_long),
        ("mouseData", ctypes.wintypes.DWORD),
        ("dwFlags", ctypes.wintypes.DWORD),
        ("time", ctypes.wintypes.DWORD),
        ("dwExtraInfo", ULONG_PTR),
    ]


class KEYBDINPUT(ctypes.Structure):
    _fields_ = [
        ("wVk", ctypes.wintypes.WORD),
        ("wScan", ctypes.wintypes.WORD),
        ("dwFlags", ctypes.wintypes.DWORD),
        ("time", ctypes.wintypes.DWORD),
        ("dwExtraInfo", ULONG_PTR),
    ]


class HARDWAREINPUT(ctypes.Structure):
    _fields_ = [
        ("uMsg", ctypes.wintypes.DWORD),
        ("wParamL", ctypes.wintypes.WORD),
        ("wParamH", ctypes.wintypes.WORD),
    ]


# The union must include MOUSEINPUT so sizeof(INPUT) matches what
# SendInput expects, even though only keyboard events are sent.
class _INPUT_UNION(ctypes.Union):
    _fields_ = [
        ("mi", MOUSEINPUT),
        ("ki", KEYBDINPUT),
        ("hi", HARDWAREINPUT),
    ]


class INPUT(ctypes.Structure):
    _fields_ = [
        ("type", ctypes.wintypes.DWORD),
        ("_input", _INPUT_UNION),
    ]


# ---------------------------------------------------------------------------
# Event construction
# ---------------------------------------------------------------------------


def _utf16_units(text: str) -> list[int]:
    """Split ``text`` into UTF-16 code units.

    Characters outside the BMP become a surrogate pair; Windows expects one
    event pair per unit.
    """
    data = text.encode("utf-16-le")
    return [int.from_bytes(data[i : i + 2], "little") for i in range(0, len(data), 2)]


def _make_unicode_input(code: int, *, down: bool) -> INPUT:
    inp = INPUT()
    inp.type = INPUT_KEYBOARD
    inp._input.ki.wVk = 0
    inp._input.ki.wScan = code
    inp._input.ki.dwFlags = KEYEVENTF_UNICODE if down else KEYEVENTF_UNICODE | KEYEVENTF_KEYUP
    return inp


def build_unicode_inputs(text: str) -> list[INPUT]:
    """Return key-down/key-up INPUT records for every character, in order."""
    inputs = []
    for code in _utf16_units(text):
        inputs.append(_make_unicode_input(code, down=True))
        inputs.append(_make_unicode_input(code, down=False))
    return inputs


_user32 = None


def _get_user32():
    global _user32
    if _user32 is None:
        _user32 = ctypes.WinDLL("user32", use_last_error=True)
    return _user32


def _last_error() -> int:
    get_last_error = getattr(ctypes, "get_last_error", None)
    return get_last_error() if get_last_error else 0


def _submit_inputs(inputs: list[INPUT]) -> int:
    """Hand the whole batch to SendInput in one call; return events processed."""
    arr = (INPUT * len(inputs))(*inputs)
    return _get_user32().SendInput(len(inputs), arr, ctypes.sizeof(INPUT))


def send_unicode_string(text: str) -> int:
    """Type ``text`` via SendInput.

    Unlike virtual-key codes, KEYEVENTF_UNICODE sends each character as a
    code point, so symbols survive whatever layout is active.

    Returns:
        Number of events submitted.

    Raises:
        InjectionFailed: SendInput processed fewer events than submitted
            (typically UIPI blocking input to an elevated window).
    """
    inputs = build_unicode_inputs(text)
    if not inputs:
        return 0

    sent = _submit_inputs(inputs)
    if sent != len(inputs):
        err = _last_error()
        raise InjectionFailed(f"SendInput (unicode) failed, sent {sent}/{len(inputs)} events (error={err})")
    return sent


# ---------------------------------------------------------------------------


class WindowsInputHandler(InputHandler):
    """Type text on Windows via SendInput."""

    @property
    def platform_name(self) -> str:
        return "windows"

    def type_text(self, text: str) -> ActionResult:
        sent = send_unicode_string(text)
        return ActionResult(success=True, message=f"Typed {len(text)} characters ({sent} events)")
