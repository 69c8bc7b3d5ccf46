"""CLI for KeePassXC lookups: python -m kpx"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys

from kpx import Session
from kpx.config import SORT_POLICIES, Config, Secret
from kpx.format import serialize_results
from kpx.tool import VALID_FIELDS


def _build_config(args: argparse.Namespace) -> Config:
    config = Config.from_env()
    changes: dict = {}
    if args.cli:
        changes["cli_path"] = args.cli
    if args.database:
        changes["database_path"] = args.database
    if args.sort:
        changes["sort"] = args.sort
    if args.timeout is not None:
        changes["timeout"] = args.timeout
    if args.type_delay is not None:
        changes["type_delay"] = args.type_delay
    if args.ask_secret:
        changes["use_secret"] = True
        changes["secret"] = Secret(getpass.getpass("Database password: "))
    return config.replace(**changes) if changes else config


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="kpx",
        description="kpx: search a KeePassXC database and copy or type entry fields",
    )
    parser.add_argument("query", nargs="?", default="", help="Search term (empty lists all entries)")
    parser.add_argument("--copy", metavar="ENTRY", default=None, help="Copy a field of ENTRY to the clipboard")
    parser.add_argument("--type", metavar="ENTRY", default=None, help="Type a field of ENTRY into the focused window")
    parser.add_argument(
        "--field",
        type=str,
        default="password",
        choices=sorted(VALID_FIELDS),
        help="Field for --copy/--type (default: password)",
    )
    parser.add_argument(
        "--hotkey",
        metavar="COMBO",
        default=None,
        help="Run the action bound to COMBO (e.g. ctrl+b) for the entry given as query",
    )
    parser.add_argument("--actions", action="store_true", help="List each entry's actions and hotkeys")
    parser.add_argument("--cli", type=str, default=None, help="Path to keepassxc-cli (default: $KPX_CLI_PATH)")
    parser.add_argument("--database", type=str, default=None, help="Path to the .kdbx file (default: $KPX_DATABASE)")
    parser.add_argument("--sort", type=str, default=None, choices=SORT_POLICIES, help="Result order")
    parser.add_argument("--timeout", type=float, default=None, help="Seconds to wait for keepassxc-cli")
    parser.add_argument("--type-delay", type=float, default=None, help="Seconds to wait before typing")
    parser.add_argument("--ask-secret", action="store_true", help="Prompt for the database password")
    parser.add_argument("--verbose", action="store_true", help="Log diagnostics to stderr")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = _build_config(args)
    except ValueError as exc:
        parser.error(str(exc))

    session = Session(config)

    if args.copy or args.type or args.hotkey:
        if args.hotkey:
            if not args.query:
                parser.error("--hotkey needs the entry as the query argument")
            result = session.hotkey(args.query, args.hotkey)
        elif args.copy:
            result = session.copy(args.copy, args.field)
        else:
            result = session.insert(args.type, args.field)

        if config.secret is not None:
            config.secret.clear()
        if result.error:
            print(f"Error: {result.error}", file=sys.stderr)
            return 1
        print(result.message)
        return 0 if result.success else 1

    items = session.search(args.query)
    if config.secret is not None:
        config.secret.clear()
    print(serialize_results(items, show_actions=args.actions), end="")
    return 1 if any(item.kind == "error" for item in items) else 0


if __name__ == "__main__":
    sys.exit(main())
