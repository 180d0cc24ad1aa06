"""The ordered set of registered plugins."""

from typing import Iterator, List, Optional

import structlog

from .exceptions import PluginConflictError
from .plugin import Plugin

logger = structlog.get_logger("gauntlet.plugins")


class PluginRegistry:
    """Append-only, ordered list of plugins.

    Lookup returns the first plugin with a matching namespace, so a
    later plugin that reuses a namespace is unreachable. With
    ``strict_namespaces`` set, registering such a plugin raises
    PluginConflictError instead.

    Args:
        strict_namespaces: Reject duplicate namespaces on add().
    """

    def __init__(self, strict_namespaces: bool = False):
        self.strict_namespaces = strict_namespaces
        self._plugins: List[Plugin] = []

    def add(self, plugin: Plugin) -> None:
        """Append a plugin.

        Raises:
            PluginConflictError: The namespace is taken and the registry
                is strict.
        """
        existing = self.find(plugin.namespace)
        if existing is not None:
            if self.strict_namespaces:
                raise PluginConflictError(
                    "Plugin namespace already registered",
                    namespace=plugin.namespace,
                )
            logger.warning("plugin_namespace_shadowed", namespace=plugin.namespace)

        self._plugins.append(plugin)
        logger.info(
            "plugin_registered",
            namespace=plugin.namespace,
            commands=len(plugin.commands),
        )

    def find(self, namespace: Optional[str]) -> Optional[Plugin]:
        """Return the first plugin whose namespace equals ``namespace``.

        A missing namespace is treated as the empty string. Matching is
        exact and case-sensitive.
        """
        namespace = namespace or ""
        for plugin in self._plugins:
            if plugin.namespace == namespace:
                return plugin
        return None

    @property
    def plugins(self) -> List[Plugin]:
        return list(self._plugins)

    def __iter__(self) -> Iterator[Plugin]:
        return iter(list(self._plugins))

    def __len__(self) -> int:
        return len(self._plugins)
