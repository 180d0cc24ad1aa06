"""Per-invocation state for a single Runtime.run() call."""

import inspect
from enum import Enum
from typing import Any, Dict, List, Optional

import structlog

from .exceptions import CommandNotResolvedError
from .plugin import Command, Plugin

logger = structlog.get_logger("gauntlet.runtime")


class RunStage(str, Enum):
    """How far resolution got for a RunContext."""
    CREATED = "created"
    PLUGIN_RESOLVED = "plugin_resolved"
    COMMAND_RESOLVED = "command_resolved"
    EXECUTED = "executed"


class RunContext:
    """Inputs and outputs of one dispatch attempt.

    Fields are filled in order: plugin, then command, then arguments.
    A context without a plugin has no command, and a context without a
    command has no arguments. Callers tell "not found" apart from
    "found" by checking which fields are set, or by reading ``stage``.

    ``options`` is passed through untouched; its keys belong to the
    command handlers, not to the runtime.
    """

    def __init__(self, full_arguments: str = "", options: Optional[Dict[str, Any]] = None):
        self.full_arguments = full_arguments
        self.options: Dict[str, Any] = options if options is not None else {}
        self.plugin: Optional[Plugin] = None
        self.command: Optional[Command] = None
        self.arguments: Optional[List[str]] = None
        self.string_arguments: Optional[str] = None
        self._executed = False

    @property
    def stage(self) -> RunStage:
        if self._executed:
            return RunStage.EXECUTED
        if self.command is not None:
            return RunStage.COMMAND_RESOLVED
        if self.plugin is not None:
            return RunStage.PLUGIN_RESOLVED
        return RunStage.CREATED

    async def run(self) -> None:
        """Invoke the resolved command's handler with this context.

        Exceptions from the handler propagate unchanged and leave the
        context in the COMMAND_RESOLVED stage.

        Raises:
            CommandNotResolvedError: No command has been resolved.
        """
        if self.command is None:
            raise CommandNotResolvedError(
                "Cannot run a context without a resolved command",
                stage=self.stage.value,
            )

        handler = self.command.handler
        if handler is not None:
            result = handler(self)
            if inspect.isawaitable(result):
                await result
        else:
            logger.debug("command_has_no_handler", command=self.command.name)

        self._executed = True

    def __repr__(self) -> str:
        return (
            f"RunContext(stage={self.stage.value!r}, "
            f"full_arguments={self.full_arguments!r}, "
            f"arguments={self.arguments!r})"
        )
