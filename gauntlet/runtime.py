"""Plugin registration and command dispatch.

The Runtime owns a PluginRegistry and runs one dispatch per run() call:
find the plugin by namespace, find the command by argument prefix,
split the remaining arguments, then await the command's handler.

Key classes:
    Runtime: Registration, lookup, and dispatch.
    CommandListing: One row of list_commands().
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog

from .arguments import extract_sub_arguments, join_arguments
from .plugin import Command, Plugin
from .registry import PluginRegistry
from .run_context import RunContext

logger = structlog.get_logger("gauntlet.runtime")


@dataclass(frozen=True)
class CommandListing:
    """A command as it appears in a listing."""
    plugin: str
    command: str
    description: str


class Runtime:
    """Loads plugins and runs actions through the gauntlet.

    Register plugins before dispatching. Registration is not
    synchronized against concurrent run() calls.

    Args:
        registry: Registry to hold plugins. A fresh, non-strict
            registry is created when omitted.
    """

    def __init__(self, registry: Optional[PluginRegistry] = None):
        self.registry = registry if registry is not None else PluginRegistry()

    @property
    def plugins(self) -> List[Plugin]:
        return self.registry.plugins

    def add_plugin(self, plugin: Plugin) -> None:
        """Register a plugin."""
        self.registry.add(plugin)

    def add_plugin_from_directory(self, directory: Union[str, Path]) -> Plugin:
        """Load a plugin from a directory and register it.

        The plugin is only registered if loading succeeds.

        Raises:
            PluginLoadError: The directory could not be loaded.
        """
        plugin = Plugin()
        plugin.load_from_directory(directory)
        self.add_plugin(plugin)
        return plugin

    def list_commands(self) -> List[CommandListing]:
        """Return every command of every plugin, in registration order."""
        return [
            CommandListing(
                plugin=plugin.namespace,
                command=command.name,
                description=command.description,
            )
            for plugin in self.registry
            for command in plugin.commands
        ]

    def find_plugin(self, namespace: Optional[str]) -> Optional[Plugin]:
        """Find the plugin for this namespace, or None."""
        return self.registry.find(namespace)

    def find_command(
        self, plugin: Optional[Plugin], full_arguments: Optional[str]
    ) -> Optional[Command]:
        """Find the first command whose name prefixes the arguments.

        The prefix test is plain string-start, not word-aware: a command
        named "g" matches "generate foo".
        """
        if plugin is None or not full_arguments or not full_arguments.strip():
            return None
        if not plugin.commands:
            return None

        trimmed = full_arguments.strip()
        for command in plugin.commands:
            if trimmed.startswith(command.name):
                return command
        return None

    async def run(
        self,
        namespace: Optional[str],
        full_arguments: str = "",
        options: Optional[Dict[str, Any]] = None,
    ) -> RunContext:
        """Run a command.

        Always returns a RunContext. If the plugin or command cannot be
        found, the context comes back with the unresolved fields left as
        None. Exceptions raised by the command handler propagate.
        """
        context = RunContext(full_arguments=full_arguments, options=options)

        plugin = self.find_plugin(namespace)
        if plugin is None:
            logger.info("plugin_not_found", namespace=namespace)
            return context
        context.plugin = plugin

        command = self.find_command(plugin, full_arguments)
        if command is None:
            logger.info(
                "command_not_found",
                namespace=plugin.namespace,
                arguments=full_arguments,
            )
            return context
        context.command = command

        context.arguments = extract_sub_arguments(full_arguments, command.name.strip())
        context.string_arguments = join_arguments(context.arguments)

        logger.debug(
            "command_executing",
            namespace=plugin.namespace,
            command=command.name,
            arguments=context.arguments,
        )
        await context.run()
        return context
