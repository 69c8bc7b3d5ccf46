"""kpx delivery layer.

Fetches entry fields and puts them on the clipboard or types them into the
focused window.
"""

from kpx.actions.executor import Action, ActionExecutor, ActionResult

__all__ = ["Action", "ActionExecutor", "ActionResult"]
