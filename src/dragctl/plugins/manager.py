"""Plugin discovery and loading.

Plugins come from two places: distributions exposing the
``dragctl.plugins`` entry-point group, and single-file modules in the
project's local plugin directory (``.dragctl/plugins/`` by default).
A plugin may observe the drag lifecycle, contribute validation rules,
or both.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any

import pluggy

from dragctl.plugins.hookspecs import DragctlHookSpec

if TYPE_CHECKING:
    from dragctl.domain.rules import ValidationRule

PROJECT_NAME = "dragctl"
ENTRY_POINT_GROUP = "dragctl.plugins"
LOCAL_MODULE_PREFIX = "dragctl_local_plugin_"

# pluggy's HookimplMarker(PROJECT_NAME) tags decorated methods with this.
_IMPL_ATTR = f"{PROJECT_NAME}_impl"

logger = logging.getLogger(__name__)


def _import_plugin_file(path: Path) -> ModuleType | None:
    """Import *path* under a private module name, or None on failure."""
    module_name = f"{LOCAL_MODULE_PREFIX}{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        logger.warning("Could not create module spec for %s", path)
        return None
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        logger.warning("Failed to load local plugin %s", path, exc_info=True)
        sys.modules.pop(module_name, None)
        return None
    return module


class PluginManager:
    """Wraps a pluggy manager with dragctl's discovery rules."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(DragctlHookSpec)
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins, then *local_dir* plugins. Returns all names."""
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        if local_dir is not None:
            self._discover_local(local_dir)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        name = name or type(plugin).__name__
        self._pm.register(plugin, name=name)
        logger.debug("Registered plugin: %s", name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._name_of(p) for p in self._pm.get_plugins()]

    def collect_validation_rules(self) -> list[ValidationRule]:
        """Rules contributed through ``register_validation_rules``.

        Each plugin is asked separately, so one that raises or answers
        with the wrong shape costs only its own rules (with a warning).
        """
        rules: list[ValidationRule] = []
        for plugin in self._pm.get_plugins():
            contribute = getattr(plugin, "register_validation_rules", None)
            if contribute is None:
                continue
            name = self._name_of(plugin)
            try:
                contributed = contribute()
            except Exception:
                logger.warning(
                    "Failed to collect validation rules from plugin %s", name, exc_info=True
                )
                continue
            rules.extend(self._callable_rules(name, contributed))
        return rules

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _name_of(self, plugin: object) -> str:
        return self._pm.get_name(plugin) or getattr(plugin, "__name__", type(plugin).__name__)

    @staticmethod
    def _callable_rules(plugin_name: str, contributed: Any) -> Iterator[ValidationRule]:
        if contributed is None:
            return
        if not isinstance(contributed, (list, tuple)):
            logger.warning("Plugin %s returned non-list validation rules", plugin_name)
            return
        for rule in contributed:
            if callable(rule):
                yield rule
            else:
                logger.warning(
                    "Skipping non-callable validation rule %r from plugin %s", rule, plugin_name
                )

    def _discover_local(self, local_dir: Path) -> None:
        """Register hookimpl classes found in ``local_dir/*.py``.

        ``_``-prefixed files are helpers and are skipped. Load and
        instantiation failures are logged, never raised.
        """
        if not local_dir.is_dir():
            return
        for path in sorted(local_dir.glob("*.py")):
            if path.name.startswith("_"):
                continue
            module = _import_plugin_file(path)
            if module is None:
                continue
            for cls in self._plugin_classes(module):
                try:
                    instance = cls()
                except Exception:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        cls.__name__,
                        path,
                        exc_info=True,
                    )
                    continue
                self.register_plugin(instance, name=f"{module.__name__}.{cls.__name__}")

    def _plugin_classes(self, module: ModuleType) -> Iterator[type]:
        for _, cls in inspect.getmembers(module, inspect.isclass):
            if cls.__module__ == module.__name__ and self._has_hook_impls(cls):
                yield cls

    def _normalize_plugin_instances(self) -> None:
        """Swap classes registered from entry points for instances.

        Hooks dispatched against a bare class would run with ``self`` unbound.
        """
        for plugin in self.get_plugins():
            if not (inspect.isclass(plugin) and self._has_hook_impls(plugin)):
                continue
            name = self._name_of(plugin)
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Failed to instantiate entry-point plugin %s", name, exc_info=True)
                continue
            self._pm.register(instance, name=name)
            logger.debug("Instantiated entry-point plugin: %s", name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        return any(
            callable(member) and getattr(member, _IMPL_ATTR, None)
            for name, member in inspect.getmembers(cls)
            if not name.startswith("_")
        )
