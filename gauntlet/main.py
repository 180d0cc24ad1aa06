"""Console entry point for gauntlet.

Usage::

    gauntlet <namespace> [arguments...]

Sets up logging in two phases (defaults then config-driven), builds a
Runtime from the configured plugin directories, and dispatches the
command line to it.

Key functions:
    main: Async entry point. Returns the process exit code.
    run: Synchronous wrapper for the ``gauntlet`` console script.
"""

import asyncio
import sys
from typing import List, Optional

import structlog

from .arguments import join_arguments
from .exceptions import GauntletError
from .logging_config import setup_logging
from .run_context import RunStage

EXIT_OK = 0
EXIT_UNRESOLVED = 1
EXIT_USAGE = 2


async def main(argv: Optional[List[str]] = None) -> int:
    """Main async entry point."""
    if argv is None:
        argv = sys.argv[1:]

    setup_logging()
    logger = structlog.get_logger("gauntlet")

    if not argv:
        print("usage: gauntlet <namespace> [arguments...]", file=sys.stderr)
        return EXIT_USAGE

    # Import here to ensure logging is configured first
    from .config import build_runtime, get_config

    try:
        config = get_config()
        config.validate()
        setup_logging(config)
        runtime = build_runtime(config)
    except GauntletError as e:
        logger.error("runtime_build_failed", **e.log_fields())
        raise

    namespace, rest = argv[0], argv[1:]
    context = await runtime.run(namespace, join_arguments(rest))

    if context.stage is RunStage.CREATED:
        logger.warning("unknown_namespace", namespace=namespace)
        return EXIT_UNRESOLVED
    if context.stage is RunStage.PLUGIN_RESOLVED:
        logger.warning("unknown_command", namespace=namespace, arguments=rest)
        return EXIT_UNRESOLVED
    return EXIT_OK


def run():
    """Synchronous entry point for the ``gauntlet`` console script."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    run()
