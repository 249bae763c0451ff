"""BaseService — shared wiring for dragctl services.

Every service receives :class:`DragSettings` at construction time and
lazily builds the plugin manager and event bus from them. Plugin loading
is skipped when plugins are disabled in config or by ``--no-plugins``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from dragctl.domain.rules import RuleSet, default_rules
from dragctl.plugins.event_bus import EventBus
from dragctl.plugins.manager import PluginManager

if TYPE_CHECKING:
    from dragctl.config.settings import DragSettings

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class DragService(BaseService):
            def show(self) -> ServiceResult:
                machine = self.build_machine()
                ...
    """

    def __init__(
        self,
        settings: DragSettings,
        *,
        plugin_manager: PluginManager | None = None,
    ) -> None:
        self._settings = settings
        self._pm = plugin_manager
        self._event_bus: EventBus | None = None

    @property
    def settings(self) -> DragSettings:
        return self._settings

    @property
    def plugins_enabled(self) -> bool:
        return self._settings.plugins.enabled and not self._settings.no_plugins

    @property
    def plugin_manager(self) -> PluginManager | None:
        """The loaded plugin manager, or None when plugins are disabled."""
        if not self.plugins_enabled:
            return None
        if self._pm is None:
            self._pm = PluginManager()
        if not self._pm.is_loaded:
            names = self._pm.discover_and_load(local_dir=self._settings.plugin_dir)
            logger.debug("Loaded plugins: %s", names)
        return self._pm

    @property
    def event_bus(self) -> EventBus | None:
        pm = self.plugin_manager
        if pm is None:
            return None
        if self._event_bus is None:
            self._event_bus = EventBus(pm)
        return self._event_bus

    def rule_set(self) -> RuleSet:
        """Built-in rules from ``[rules]`` followed by plugin-contributed rules."""
        rules = default_rules(
            self._settings.rules.forbidden_pairs,
            parity=self._settings.rules.parity,
        )
        pm = self.plugin_manager
        if pm is not None:
            rules = rules.extend(pm.collect_validation_rules())
        return rules

    def _drain_warnings(self) -> list[str]:
        if self._event_bus is None:
            return []
        return self._event_bus.drain_warnings()
