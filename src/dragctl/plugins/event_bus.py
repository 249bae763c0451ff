"""Synchronous lifecycle event dispatch via pluggy.

The state machine handles one event at a time, so hooks run inline right
after each new snapshot is published. Nothing is queued or persisted.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from dragctl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class EventBus:
    """Dispatch lifecycle hooks and collect plugin failures as warnings.

    Parameters:
        plugin_manager: Loaded PluginManager for hook dispatch.
    """

    def __init__(self, plugin_manager: PluginManager) -> None:
        self._pm = plugin_manager
        self._warnings: list[str] = []

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> bool:
        """Call *hook_name* with *payload*. Returns False if a plugin raised."""
        hook_fn = getattr(self._pm.hook, hook_name, None)
        if hook_fn is None:
            return True
        try:
            hook_fn(**payload)
        except Exception as exc:
            logger.debug("Hook %s failed: %s", hook_name, exc, exc_info=True)
            self._warnings.append(f"Plugin hook {hook_name} failed: {exc}")
            return False
        return True

    def drain_warnings(self) -> list[str]:
        """Return and forget the warnings collected so far."""
        warnings, self._warnings = self._warnings, []
        return warnings
