"""Pluggable command dispatch: find the plugin, find the command, run it."""

from .arguments import extract_sub_arguments
from .exceptions import (
    CommandNotResolvedError,
    ConfigurationError,
    ErrorCategory,
    GauntletError,
    PluginConflictError,
    PluginLoadError,
)
from .plugin import Command, Plugin
from .registry import PluginRegistry
from .run_context import RunContext, RunStage
from .runtime import CommandListing, Runtime

__version__ = "0.1.0"

__all__ = [
    # Core
    "Runtime",
    "PluginRegistry",
    "RunContext",
    "RunStage",
    "CommandListing",
    "Plugin",
    "Command",
    "extract_sub_arguments",
    # Errors
    "GauntletError",
    "ErrorCategory",
    "PluginLoadError",
    "PluginConflictError",
    "CommandNotResolvedError",
    "ConfigurationError",
]
