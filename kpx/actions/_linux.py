"""Linux input handler — xdotool typing with an XTest fallback."""

from __future__ import annotations

import ctypes
import ctypes.util
import logging
import os
import subprocess
import time

from kpx.actions._handler import InputHandler
from kpx.actions.executor import ActionResult
from kpx.errors import InjectionFailed

logger = logging.getLogger(__name__)

XDOTOOL_TIMEOUT = 10

XK_SHIFT_L = 0xFFE1


# ---------------------------------------------------------------------------
# XTest keyboard input via ctypes
# ---------------------------------------------------------------------------


class _XTest:
    """Thin ctypes wrapper around Xlib + XTest for key event simulation."""

    def __init__(self):
        self._xlib = None
        self._xtst = None
        self._display = None

    def _ensure_open(self):
        if self._xlib is not None:
            return

        libx11_name = ctypes.util.find_library("X11")
        if not libx11_name:
            raise InjectionFailed("libX11 not found. Install libx11 or xdotool.")
        xlib = ctypes.cdll.LoadLibrary(libx11_name)

        libxtst_name = ctypes.util.find_library("Xtst")
        if not libxtst_name:
            raise InjectionFailed("libXtst not found. Install libxtst or xdotool.")
        xtst = ctypes.cdll.LoadLibrary(libxtst_name)

        xlib.XOpenDisplay.argtypes = [ctypes.c_char_p]
        xlib.XOpenDisplay.restype = ctypes.c_void_p
        display_name = os.environ.get("DISPLAY", ":0").encode()
        display = xlib.XOpenDisplay(display_name)
        if not display:
            raise InjectionFailed(
                f"Cannot open X11 display '{display_name.decode()}'. "
                "Ensure DISPLAY is set and X server is running."
            )

        xlib.XKeysymToKeycode.argtypes = [ctypes.c_void_p, ctypes.c_ulong]
        xlib.XKeysymToKeycode.restype = ctypes.c_ubyte
        xlib.XKeycodeToKeysym.argtypes = [ctypes.c_void_p, ctypes.c_ubyte, ctypes.c_int]
        xlib.XKeycodeToKeysym.restype = ctypes.c_ulong
        xlib.XFlush.argtypes = [ctypes.c_void_p]

        xtst.XTestFakeKeyEvent.argtypes = [
            ctypes.c_void_p, ctypes.c_uint, ctypes.c_int, ctypes.c_ulong,
        ]
        xtst.XTestFakeKeyEvent.restype = ctypes.c_int

        self._xlib, self._xtst, self._display = xlib, xtst, display

    def keysym_to_keycode(self, keysym: int) -> int:
        self._ensure_open()
        return self._xlib.XKeysymToKeycode(self._display, keysym)

    def keycode_to_keysym(self, keycode: int, index: int) -> int:
        self._ensure_open()
        return self._xlib.XKeycodeToKeysym(self._display, keycode, index)

    def fake_key_event(self, keycode: int, is_press: bool, delay: int = 0) -> bool:
        self._ensure_open()
        return bool(self._xtst.XTestFakeKeyEvent(self._display, keycode, int(is_press), delay))

    def flush(self):
        if self._xlib and self._display:
            self._xlib.XFlush(self._display)


# Singleton instance, lazily initialized
_xtest: _XTest | None = None


def _get_xtest() -> _XTest:
    global _xtest
    if _xtest is None:
        _xtest = _XTest()
    return _xtest


# ---------------------------------------------------------------------------
# Typing
# ---------------------------------------------------------------------------


def _type_with_xdotool(text: str) -> None:
    """Type via xdotool, feeding the text on stdin.

    Passing the text as an argument would expose it in the process list.

    Raises:
        FileNotFoundError: xdotool is not installed.
        InjectionFailed: xdotool ran but did not succeed.
    """
    try:
        proc = subprocess.run(
            ["xdotool", "type", "--clearmodifiers", "--file", "-"],
            input=text.encode("utf-8"),
            capture_output=True,
            timeout=XDOTOOL_TIMEOUT,
        )
    except subprocess.TimeoutExpired:
        raise InjectionFailed(f"xdotool did not finish within {XDOTOOL_TIMEOUT}s") from None
    if proc.returncode != 0:
        err = proc.stderr.decode("utf-8", errors="replace").strip()
        raise InjectionFailed(f"xdotool exited {proc.returncode}: {err}")


def _char_keysym(char: str) -> int:
    code = ord(char)
    # Latin-1 keysyms equal the codepoint; the rest use the Unicode range
    if code <= 0xFF:
        return code
    return 0x01000000 | code


def _plan_keys(xt: _XTest, text: str) -> list[tuple[int, bool]]:
    """Map each character to (keycode, needs_shift) using the live keymap."""
    plan = []
    for char in text:
        keysym = _char_keysym(char)
        kc = xt.keysym_to_keycode(keysym)
        if not kc:
            raise InjectionFailed(
                f"No keycode for character U+{ord(char):04X}; install xdotool for Unicode input"
            )
        if xt.keycode_to_keysym(kc, 0) == keysym:
            plan.append((kc, False))
        elif xt.keycode_to_keysym(kc, 1) == keysym:
            plan.append((kc, True))
        else:
            raise InjectionFailed(
                f"Character U+{ord(char):04X} needs a modifier XTest cannot send; install xdotool"
            )
    return plan


def _type_with_xtest(text: str) -> int:
    """Type via XTest fake key events.  Only characters on the first two
    levels of the current keymap (in practice, ASCII) can be sent."""
    xt = _get_xtest()
    plan = _plan_keys(xt, text)
    shift = 0
    if any(shifted for _, shifted in plan):
        shift = xt.keysym_to_keycode(XK_SHIFT_L)
        if not shift:
            raise InjectionFailed("No keycode for Shift_L in the current keymap")

    expected = 0
    sent = 0
    for kc, shifted in plan:
        if shifted:
            sent += xt.fake_key_event(shift, True)
            expected += 1
        sent += xt.fake_key_event(kc, True)
        sent += xt.fake_key_event(kc, False)
        expected += 2
        if shifted:
            sent += xt.fake_key_event(shift, False)
            expected += 1
    xt.flush()
    time.sleep(0.01)

    if sent != expected:
        raise InjectionFailed(f"XTest accepted {sent}/{expected} events")
    return sent


class LinuxInputHandler(InputHandler):
    """Type text on Linux (X11).

    Dependencies:
      - xdotool (preferred, handles any Unicode text)
      - libX11 + libXtst (fallback, ASCII only)
    """

    @property
    def platform_name(self) -> str:
        return "linux"

    def type_text(self, text: str) -> ActionResult:
        if not text:
            return ActionResult(success=True, message="Typed 0 characters")
        try:
            _type_with_xdotool(text)
            return ActionResult(success=True, message=f"Typed {len(text)} characters (xdotool)")
        except FileNotFoundError:
            logger.debug("xdotool not found, falling back to XTest")

        sent = _type_with_xtest(text)
        return ActionResult(success=True, message=f"Typed {len(text)} characters ({sent} events)")
