"""Accelerator key combo parsing and normalization."""

from __future__ import annotations

MODIFIER_ORDER = ("ctrl", "alt", "shift", "meta")

# Alias normalization
_ALIASES: dict[str, str] = {
    "control": "ctrl",
    "return": "enter",
    "esc": "escape",
    "option": "alt",
    "cmd": "meta",
    "super": "meta",
    "win": "meta",
}


def parse_combo(combo: str) -> tuple[list[str], list[str]]:
    """Parse a key combo string into (modifiers, keys).

    Examples::

        >>> parse_combo("ctrl+b")
        (['ctrl'], ['b'])
        >>> parse_combo("Ctrl+Shift+B")
        (['ctrl', 'shift'], ['b'])
        >>> parse_combo("return")
        ([], ['enter'])

    Args:
        combo: Key combination string, parts joined with "+".

    Returns:
        (modifiers, keys) where modifiers are normalized modifier names
        and keys are the non-modifier key names.
    """
    parts = [p.strip().lower() for p in combo.split("+") if p.strip()]
    modifiers: list[str] = []
    keys: list[str] = []

    for part in parts:
        normalized = _ALIASES.get(part, part)
        if normalized in MODIFIER_ORDER:
            if normalized not in modifiers:
                modifiers.append(normalized)
        else:
            keys.append(normalized)

    return modifiers, keys


def normalize_combo(combo: str) -> str:
    """Return a canonical spelling of ``combo`` for comparisons.

    Modifiers come first in a fixed order, so "shift+ctrl+B" and
    "Ctrl+Shift+b" both become "ctrl+shift+b".
    """
    modifiers, keys = parse_combo(combo)
    ordered = [m for m in MODIFIER_ORDER if m in modifiers]
    return "+".join(ordered + keys)
