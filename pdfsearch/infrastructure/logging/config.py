"""Environment-aware logging setup.

- Development/local: coloured detailed console, DEBUG when verbose
- Staging: structured console output
- Production: JSON console output, third-party loggers quietened
- Tests: ``configure_testing_logging`` swaps everything for a null handler

File output is added in every environment when ``LOG_FILE_ENABLED`` is set,
using the ``LOG_FORMAT`` formatter.
"""

import logging
from typing import List

from ..config.settings import EnvironmentOption, Settings, get_settings
from .handlers import create_console_handler, create_file_handler, create_null_handler

NOISY_LOGGERS = {
    "asyncpg": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "openai": logging.WARNING,
    "sentence_transformers": logging.WARNING,
}


def setup_logging_configuration() -> None:
    """Configure the root logger from the application settings.

    Clears any handler installed earlier, so calling it twice does not
    duplicate output.
    """
    settings = get_settings()

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    for handler in _build_handlers(settings):
        root_logger.addHandler(handler)
    root_logger.setLevel(settings.LOG_LEVEL_INT)

    if settings.ENVIRONMENT == EnvironmentOption.PRODUCTION:
        _quiet_noisy_loggers()


def _build_handlers(settings: Settings) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []

    if settings.LOG_CONSOLE_ENABLED:
        if settings.ENVIRONMENT == EnvironmentOption.PRODUCTION:
            level = logging.WARNING if settings.LOG_PRODUCTION_OPTIMIZE else settings.LOG_LEVEL_INT
            handlers.append(create_console_handler(format_type="json", level=level, use_colors=False))
        elif settings.ENVIRONMENT == EnvironmentOption.STAGING:
            handlers.append(
                create_console_handler(format_type="structured", level=settings.LOG_LEVEL_INT, use_colors=False)
            )
        else:
            level = logging.DEBUG if settings.LOG_DEVELOPMENT_VERBOSE else settings.LOG_LEVEL_INT
            handlers.append(create_console_handler(format_type="detailed", level=level, use_colors=True))

    if settings.LOG_FILE_ENABLED:
        handlers.append(
            create_file_handler(
                filepath=settings.LOG_FILE_PATH,
                format_type=settings.LOG_FORMAT,
                level=logging.DEBUG,
                max_bytes=settings.LOG_FILE_MAX_SIZE,
                backup_count=settings.LOG_FILE_BACKUP_COUNT,
            )
        )

    return handlers


def _quiet_noisy_loggers() -> None:
    for logger_name, level in NOISY_LOGGERS.items():
        logging.getLogger(logger_name).setLevel(level)


def configure_testing_logging() -> None:
    """Silence logging for test runs, keeping only errors routed nowhere."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(create_null_handler())
    root_logger.setLevel(logging.ERROR)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.ERROR)


def reconfigure_logger_level(logger_name: str, level: int) -> None:
    """Change one logger's level at runtime, e.g. to debug a single component."""
    logging.getLogger(logger_name).setLevel(level)
    logging.getLogger(__name__).info(f"Logger level changed: {logger_name} -> {logging.getLevelName(level)}")
