"""Exception hierarchy for gauntlet.

Resolution misses (unknown namespace, no matching command) are not
errors and never raise; they show up as a partially populated
RunContext. The classes here cover the hard failures: loading a
plugin, registering a conflicting namespace, running an unresolved
context, and bad configuration.

Exceptions raised by command handlers are not part of this hierarchy.
They propagate out of Runtime.run untouched.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union


class ErrorCategory(str, Enum):
    """Classification of errors for retry decisions."""
    TRANSIENT = "transient"          # Worth retrying (filesystem hiccup)
    PERMANENT = "permanent"          # Bad manifest, bad input
    INFRASTRUCTURE = "infrastructure"  # Environment or configuration issues


class GauntletError(Exception):
    """Base exception for all gauntlet errors.

    Subclasses set ``default_module`` and ``default_category``; callers
    may override either per raise. Extra keyword arguments are kept in
    ``context`` and rendered into the message and into log_fields().

    Attributes:
        message: Human-readable error description.
        category: Error classification for retry decisions.
        module: Originating gauntlet module (e.g. "plugin").
        context: Structured details; None values are dropped.
    """

    default_module: Optional[str] = None
    default_category = ErrorCategory.PERMANENT

    def __init__(
        self,
        message: str = "",
        *,
        category: Optional[ErrorCategory] = None,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.message = message
        self.category = category or self.default_category
        self.module = module or self.default_module
        self.context = {k: v for k, v in context.items() if v is not None}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        return self.category is ErrorCategory.TRANSIENT

    def log_fields(self) -> Dict[str, Any]:
        """Key-value pairs for a structlog event describing this error."""
        return {
            "error": self.message or type(self).__name__,
            "error_type": type(self).__name__,
            "category": self.category.value,
            "module": self.module,
            **self.context,
        }

    def __str__(self) -> str:
        text = self.message or type(self).__name__
        details = [f"module={self.module}"] if self.module else []
        details.extend(f"{key}={value}" for key, value in self.context.items())
        if details:
            text = f"{text} ({', '.join(details)})"
        return text

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.message!r}, "
            f"category={self.category.value!r}, module={self.module!r})"
        )


class PluginLoadError(GauntletError):
    """A plugin directory could not be loaded.

    Raised for a missing directory, a missing or malformed manifest,
    or a command handler that cannot be imported.
    """

    default_module = "plugin"

    def __init__(
        self, message: str = "", *, directory: Optional[Union[str, Path]] = None, **kwargs: Any
    ) -> None:
        self.directory = str(directory) if directory is not None else None
        super().__init__(message, directory=self.directory, **kwargs)


class PluginConflictError(GauntletError):
    """A plugin namespace is already registered (strict registries only)."""

    default_module = "registry"

    def __init__(self, message: str = "", *, namespace: Optional[str] = None, **kwargs: Any) -> None:
        self.namespace = namespace
        super().__init__(message, namespace=namespace, **kwargs)


class CommandNotResolvedError(GauntletError):
    """RunContext.run() was called before a command was resolved."""

    default_module = "run_context"


class ConfigurationError(GauntletError):
    """Invalid configuration. Retrying will not help."""

    default_module = "config"
    default_category = ErrorCategory.INFRASTRUCTURE

    def __init__(self, message: str = "", *, setting_name: Optional[str] = None, **kwargs: Any) -> None:
        self.setting_name = setting_name
        super().__init__(message, setting_name=setting_name, **kwargs)
