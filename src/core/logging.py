"""
Where log records end up (loguru).

Every record carries a `component` extra: "service" unless bound otherwise (the GameLog binds "game"),
so the move list can be told apart from the bookkeeping around it.
"""

import sys

from loguru import logger

from src.core.config import Settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]: <7}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]: <7} | {name}:{function} | {message}"


def configure_logging(settings: Settings) -> list[int]:
    """
    Log to stderr, and to `settings.log_file` when one is set, at `settings.log_level`.
    ---

    Sinks added earlier are dropped first: configuring twice does not print every line twice.
    Returns the ids of the new sinks.
    """
    logger.remove()
    logger.configure(extra={"component": "service"})

    sink_ids = [logger.add(sys.stderr, level=settings.log_level, format=CONSOLE_FORMAT, colorize=True)]
    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        sink_ids.append(
            logger.add(
                settings.log_file,
                level=settings.log_level,
                format=FILE_FORMAT,
                rotation=settings.log_rotation,
                retention=settings.log_retention,
                encoding="utf-8",
            )
        )

    logger.debug(f"Logging at {settings.log_level} to {len(sink_ids)} sink(s)")
    return sink_ids
