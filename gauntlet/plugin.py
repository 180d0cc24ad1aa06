"""Plugin and Command types, and loading a plugin from a directory.

A plugin directory holds a ``plugin.yaml`` manifest::

    namespace: app
    description: Application scaffolding
    commands:
      - name: generate
        description: Generate a model
        handler: commands.py:generate

Each ``handler`` names a Python file relative to the plugin directory
and a callable inside it. The callable receives the RunContext and may
be a coroutine function or a plain function.
"""

import importlib.util
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional, Union

import structlog
import yaml
from pydantic import BaseModel, ValidationError, field_validator

from .exceptions import PluginLoadError

if TYPE_CHECKING:
    from .run_context import RunContext

logger = structlog.get_logger("gauntlet.plugins")

MANIFEST_FILENAME = "plugin.yaml"

# Handler signature: (context) -> None, sync or async
CommandHandler = Callable[["RunContext"], Union[Awaitable[None], None]]


@dataclass(frozen=True)
class Command:
    """A named, described, executable unit within a Plugin.

    Attributes:
        name: Display name, also matched as a prefix of the arguments.
        description: One-line description for listings.
        handler: Called with the RunContext when the command runs.
    """
    name: str
    description: str = ""
    handler: Optional[CommandHandler] = field(default=None, repr=False, compare=False)


@dataclass
class Plugin:
    """A namespace plus an ordered list of commands.

    Command order matters: the first command whose name prefixes the
    arguments wins, so longer names must come before shorter
    overlapping ones.
    """
    namespace: str = ""
    commands: List[Command] = field(default_factory=list)
    description: str = ""
    directory: Optional[Path] = None

    def load_from_directory(self, directory: Union[str, Path]) -> None:
        """Populate this plugin from a plugin directory.

        Everything is parsed and imported before any attribute is
        assigned, so a failed load leaves the plugin untouched.

        Raises:
            PluginLoadError: The directory is missing, the manifest is
                missing or invalid, or a handler cannot be imported.
        """
        path = Path(directory)
        if not path.is_dir():
            raise PluginLoadError("Plugin directory not found", directory=path)

        manifest = _read_manifest(path)
        modules: Dict[Path, Any] = {}
        try:
            commands = [
                Command(
                    name=entry.name,
                    description=entry.description,
                    handler=_import_handler(path, manifest.namespace, entry.handler, modules),
                )
                for entry in manifest.commands
            ]
        except PluginLoadError:
            # Drop modules imported before the failure
            for module in modules.values():
                sys.modules.pop(module.__name__, None)
            raise

        self.namespace = manifest.namespace
        self.description = manifest.description
        self.commands = commands
        self.directory = path

        logger.info(
            "plugin_loaded",
            namespace=self.namespace,
            directory=str(path),
            commands=[c.name for c in commands],
        )


class ManifestCommand(BaseModel):
    """A command entry in plugin.yaml."""

    name: str
    description: str = ""
    handler: str

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("command name must not be blank")
        return value

    @field_validator("handler")
    @classmethod
    def _handler_reference(cls, value: str) -> str:
        file_part, sep, attr = value.partition(":")
        if not sep or not file_part.endswith(".py") or not attr:
            raise ValueError("handler must look like '<file>.py:<callable>'")
        return value


class PluginManifest(BaseModel):
    """The parsed contents of plugin.yaml."""

    namespace: str
    description: str = ""
    commands: List[ManifestCommand] = []


def _read_manifest(path: Path) -> PluginManifest:
    """Load and validate the manifest in a plugin directory."""
    manifest_file = path / MANIFEST_FILENAME
    if not manifest_file.is_file():
        raise PluginLoadError(f"Missing {MANIFEST_FILENAME}", directory=path)

    try:
        with open(manifest_file, "r", encoding="utf-8") as f:
            raw: Any = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise PluginLoadError(
            f"Cannot read {MANIFEST_FILENAME}: {e}", directory=path
        ) from e

    if not isinstance(raw, dict):
        raise PluginLoadError(
            f"{MANIFEST_FILENAME} must be a mapping",
            directory=path,
            type=type(raw).__name__,
        )

    try:
        return PluginManifest.model_validate(raw)
    except ValidationError as e:
        raise PluginLoadError(
            f"Invalid {MANIFEST_FILENAME}: {e.error_count()} error(s)",
            directory=path,
            errors=[err["msg"] for err in e.errors()],
        ) from e


def _import_handler(
    path: Path, namespace: str, reference: str, modules: Dict[Path, Any]
) -> CommandHandler:
    """Resolve a '<file>.py:<callable>' reference inside a plugin directory.

    ``modules`` caches modules already imported during this load, so
    several commands can share one file.
    """
    file_part, _, attr = reference.partition(":")
    module_file = (path / file_part).resolve()
    if not module_file.is_file():
        raise PluginLoadError(
            "Handler module not found", directory=path, handler=reference
        )

    module = modules.get(module_file)
    if module is None:
        module_name = f"gauntlet_plugins.{namespace or path.name}.{module_file.stem}"
        spec = importlib.util.spec_from_file_location(module_name, module_file)
        if spec is None or spec.loader is None:
            raise PluginLoadError(
                "Cannot import handler module", directory=path, handler=reference
            )
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise PluginLoadError(
                f"Handler module failed to import: {e}",
                directory=path,
                handler=reference,
                error_type=type(e).__name__,
            ) from e
        modules[module_file] = module

    handler = getattr(module, attr, None)
    if not callable(handler):
        raise PluginLoadError(
            "Handler is not callable", directory=path, handler=reference
        )
    return handler
