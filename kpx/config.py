"""
Configuration for kpx.

A ``Config`` is an immutable value.  Hosts build one (usually with
``Config.from_env()``), hand it to a ``Session`` or to the functions in
``kpx.tool``, and build a fresh one with ``Config.replace()`` when settings
change.  Nothing in kpx mutates a config it was given.

Usage::

    from kpx.config import Config, validate_config
    cfg = Config.from_env()
    validate_config(cfg)           # raises ToolNotFound / StoreNotFound
    cfg = cfg.replace(sort="name")  # new value, old one untouched
"""

from __future__ import annotations

import dataclasses
import os
import shutil
import sys
from dataclasses import dataclass
from typing import Literal

from kpx.errors import StoreNotFound, ToolNotFound

SortPolicy = Literal["tool", "name"]

SORT_POLICIES = ("tool", "name")

DEFAULT_TIMEOUT = 10.0

_TRUTHY = frozenset({"1", "true", "yes", "on"})

# Install locations used when keepassxc-cli is not on PATH
_DEFAULT_CLI_PATHS = {
    "win32": r"C:\Program Files\KeePassXC\keepassxc-cli.exe",
    "darwin": "/Applications/KeePassXC.app/Contents/MacOS/keepassxc-cli",
}


class Secret:
    """A master passphrase held in a buffer the caller can wipe.

    The value never appears in ``repr()`` or ``str()``, so a config that
    ends up in a log line or a traceback does not leak it.
    """

    __slots__ = ("_buf",)

    def __init__(self, value: str | bytes | bytearray) -> None:
        if isinstance(value, str):
            value = value.encode("utf-8")
        self._buf = bytearray(value)

    def __repr__(self) -> str:
        return "Secret('**********')" if self._buf else "Secret('')"

    __str__ = __repr__

    def __bool__(self) -> bool:
        return bool(self._buf)

    def __len__(self) -> int:
        return len(self._buf)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Secret):
            return NotImplemented
        return self._buf == other._buf

    __hash__ = None  # type: ignore[assignment]

    def line(self) -> bytes:
        """Return the secret as one newline-terminated line for a child's stdin."""
        return bytes(self._buf) + b"\n"

    def clear(self) -> None:
        """Overwrite the buffer with zeros and empty it."""
        for i in range(len(self._buf)):
            self._buf[i] = 0
        del self._buf[:]


def _clean_path(value: str | None) -> str:
    """Strip whitespace and the quotes Explorer's "Copy as path" adds."""
    if not value:
        return ""
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        value = value[1:-1].strip()
    return os.path.expanduser(value) if value else ""


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def default_cli_path() -> str:
    """Locate keepassxc-cli: PATH first, then the platform's install location."""
    found = shutil.which("keepassxc-cli")
    if found:
        return found
    return _DEFAULT_CLI_PATHS.get(sys.platform, "")


@dataclass(frozen=True)
class Config:
    """Everything needed to talk to keepassxc-cli."""

    cli_path: str = ""
    database_path: str = ""
    use_secret: bool = False
    secret: Secret | None = None
    auto_unlock: bool = False
    sort: SortPolicy = "tool"
    timeout: float = DEFAULT_TIMEOUT
    type_delay: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "cli_path", _clean_path(self.cli_path))
        object.__setattr__(self, "database_path", _clean_path(self.database_path))
        if isinstance(self.secret, (str, bytes, bytearray)):
            object.__setattr__(self, "secret", Secret(self.secret))
        if self.sort not in SORT_POLICIES:
            raise ValueError(f"sort must be one of {SORT_POLICIES}, got {self.sort!r}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout!r}")
        if self.type_delay < 0:
            raise ValueError(f"type_delay must not be negative, got {self.type_delay!r}")

    @classmethod
    def from_env(cls) -> Config:
        """Build a config from ``KPX_*`` environment variables."""
        secret = os.environ.get("KPX_SECRET")
        return cls(
            cli_path=os.environ.get("KPX_CLI_PATH") or default_cli_path(),
            database_path=os.environ.get("KPX_DATABASE", ""),
            use_secret=_env_bool("KPX_USE_SECRET", default=bool(secret)),
            secret=Secret(secret) if secret else None,
            auto_unlock=_env_bool("KPX_AUTO_UNLOCK"),
            sort=os.environ.get("KPX_SORT", "tool").strip().lower() or "tool",
            timeout=_env_float("KPX_TIMEOUT", DEFAULT_TIMEOUT),
            type_delay=_env_float("KPX_TYPE_DELAY", 0.0),
        )

    def replace(self, **changes) -> Config:
        """Return a new config with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    def secret_payload(self) -> bytes | None:
        """Bytes to write to the tool's stdin, or None when no secret is sent."""
        if self.use_secret and self.secret:
            return self.secret.line()
        return None


def validate_config(config: Config) -> None:
    """Check that both configured paths exist.

    Raises:
        ToolNotFound: The keepassxc-cli path is empty or not a file.
        StoreNotFound: The database path is empty or not a file.
    """
    if not config.cli_path or not os.path.isfile(config.cli_path):
        raise ToolNotFound(config.cli_path)
    if not config.database_path or not os.path.isfile(config.database_path):
        raise StoreNotFound(config.database_path)
