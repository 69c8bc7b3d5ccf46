"""Abstract base for platform-specific input handlers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from kpx.actions.executor import ActionResult


class InputHandler(ABC):
    """Interface for typing text into whatever control has keyboard focus.

    Each platform implements this with its native synthetic-input API.
    The clipboard is never touched.
    """

    @property
    @abstractmethod
    def platform_name(self) -> str:
        """Return the platform identifier ('windows', 'macos', 'linux')."""
        ...

    @abstractmethod
    def type_text(self, text: str) -> ActionResult:
        """Type ``text`` into the focused control, character by character.

        Args:
            text: Text to type.  Every character is sent as a Unicode code
                  point, independent of the active keyboard layout.

        Returns:
            ActionResult with success status.  The message never contains
            the typed text.

        Raises:
            InjectionFailed: The OS did not accept every event.
        """
        ...
