"""
Minimal launcher loop on top of kpx.

Type a query, pick a result by number, then press a hotkey name
(enter, ctrl+b, ctrl+t, ctrl+enter, ctrl+shift+b) to run its action.

Usage:
    KPX_DATABASE=~/Passwords.kdbx KPX_SECRET=... python examples/launcher.py
"""

from __future__ import annotations

import kpx


def main() -> None:
    session = kpx.Session(kpx.Config.from_env().replace(type_delay=1.0))

    while True:
        try:
            query = input("\nsearch> ")
        except (EOFError, KeyboardInterrupt):
            print()
            return

        items = session.search(query)
        for n, item in enumerate(items, 1):
            print(f"{n:3d}. {item.title}  ({item.subtitle})")

        entries = [item for item in items if item.kind == "entry"]
        if not entries:
            continue

        pick = input("pick #> ").strip()
        if not pick.isdigit() or not 1 <= int(pick) <= len(items):
            continue
        item = items[int(pick) - 1]
        if item.kind != "entry":
            continue

        for action in item.actions:
            print(f"    [{action.accelerator}] {action.label}")
        combo = input("key> ").strip() or "enter"

        action = kpx.find_action(item.actions, combo)
        if action is None:
            print(f"No action bound to {combo!r}")
            continue
        if action.kind == "insert":
            print(f"Focus the target window, typing in {session.config.type_delay:g}s...")
        result = session.execute(action)
        print(result.message or result.error)


if __name__ == "__main__":
    main()
