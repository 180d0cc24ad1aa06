"""Logging configuration for gauntlet.

structlog is wired onto stdlib logging so plugin code using either
ends up in the same place.

Subsystem hierarchy (stdlib dotted names, structlog wraps them):
    root                → ConsoleHandler (stderr)
      └─ gauntlet       → RotatingFileHandler → gauntlet.log (if log_dir)
           ├─ gauntlet.runtime
           ├─ gauntlet.plugins
           └─ gauntlet.config
"""

import logging
import logging.handlers
import sys

import structlog

SUBSYSTEMS = ("runtime", "plugins", "config")

LOGGER_PREFIX = "gauntlet"


def setup_logging(config=None) -> None:
    """Configure structured logging.

    Args:
        config: Optional Config instance. The first call (before config
            loads) uses defaults and leaves logger caching off. The
            second call applies the configured levels and log file.
    """
    if config is not None:
        log_dir = config.log_dir
        root_level_name = str(config.logging_level).upper()
        subsystem_levels = config.logging_subsystem_levels
        max_bytes = config.logging_max_file_size_mb * 1024 * 1024
        backup_count = config.logging_backup_count
        cache_loggers = True
    else:
        log_dir = None
        root_level_name = "INFO"
        subsystem_levels = {}
        max_bytes = 10 * 1024 * 1024  # 10 MB
        backup_count = 5
        cache_loggers = False

    root_level = getattr(logging, root_level_name, logging.INFO)

    file_ok = False
    if log_dir is not None:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_ok = True
        except OSError as exc:
            print(
                f"WARNING: Cannot create log directory {log_dir}: {exc}. "
                "Falling back to console-only logging.",
                file=sys.stderr,
            )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Handlers filter by level
    root_logger.handlers.clear()

    # Commands own stdout; logs go to stderr
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(root_level)
    console_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
    root_logger.addHandler(console_handler)

    pkg_logger = logging.getLogger(LOGGER_PREFIX)
    pkg_logger.setLevel(logging.DEBUG)
    pkg_logger.handlers.clear()
    pkg_logger.propagate = True

    if file_ok:
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / "gauntlet.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processors=[
                    structlog.stdlib.add_logger_name,
                    structlog.stdlib.add_log_level,
                    structlog.processors.TimeStamper(fmt="iso"),
                    structlog.processors.format_exc_info,
                    structlog.dev.ConsoleRenderer(colors=False),
                ],
            )
        )
        pkg_logger.addHandler(file_handler)

    for subsystem in SUBSYSTEMS:
        sub_logger = logging.getLogger(f"{LOGGER_PREFIX}.{subsystem}")
        sub_level_name = str(subsystem_levels.get(subsystem, "")).upper()
        sub_level = getattr(logging, sub_level_name, root_level) if sub_level_name else root_level
        sub_logger.setLevel(sub_level)
        sub_logger.propagate = True

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=cache_loggers,
    )
