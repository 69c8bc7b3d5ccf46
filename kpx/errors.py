"""Exception hierarchy for kpx.

Low-level helpers (``kpx.tool``, the input handlers) raise these.  The
façade layers (``ActionExecutor``, ``Session``) catch ``KpxError`` and turn
it into a result, so a caller of the public API only sees exceptions when
it uses the building blocks directly.
"""

from __future__ import annotations


class KpxError(Exception):
    """Base class for every error raised by kpx."""


# ---- configuration -------------------------------------------------------


class ConfigError(KpxError):
    """The configuration cannot be used."""


class ToolNotFound(ConfigError):
    def __init__(self, path: str) -> None:
        super().__init__(f"keepassxc-cli not found at {path!r}" if path else "keepassxc-cli path is empty")
        self.path = path


class StoreNotFound(ConfigError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Database not found at {path!r}" if path else "Database path is empty")
        self.path = path


# ---- subprocess ----------------------------------------------------------


class ProcessSpawnFailed(KpxError):
    """The external tool could not be started."""


class ToolTimeout(ProcessSpawnFailed):
    """The external tool did not exit before the deadline and was killed."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"keepassxc-cli did not exit within {timeout:g}s")
        self.timeout = timeout


class ToolError(KpxError):
    """The external tool wrote to its error stream."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnknownField(KpxError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Unknown field {field!r}")
        self.field = field


# ---- delivery ------------------------------------------------------------


class InjectionFailed(KpxError):
    """The OS did not accept every synthesized key event."""


class ClipboardError(KpxError):
    """The system clipboard could not be written."""
