"""Parse ``-L NAME=LEVEL`` options into a logger-name → level mapping.

Values may be repeated or given as one comma/space separated string (as
with ``CASEBOOK_LOGGER_LEVELS``). The quiet defaults for SQLAlchemy and
Alembic live in `casebook.logging.QUIET_LOGGERS`; this parser returns only
what the user asked for.
"""

import logging
import re

import click

_SEPARATORS = re.compile(r"[,\s]+")


def _split(value: str | list[str] | tuple[str, ...] | None) -> list[str]:
    if not value:
        return []
    chunks = [value] if isinstance(value, str) else list(value)
    return [item for chunk in chunks for item in _SEPARATORS.split(chunk) if item]


def parse_log_level(
    ctx: click.Context,  # pylint: disable=unused-argument
    param: click.Parameter | None,  # pylint: disable=unused-argument
    value: str | list[str] | tuple[str, ...] | None,
) -> dict[str, int]:
    """Click callback returning the requested level for each named logger.

    Raises:
        click.BadParameter: If an item is not NAME=LEVEL or LEVEL is unknown.
    """
    levels: dict[str, int] = {}
    for item in _split(value):
        name, sep, level_name = item.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(f"Expected NAME=LEVEL, got {item!r}")
        level = logging.getLevelName(level_name.strip().upper())
        if not isinstance(level, int):
            raise click.BadParameter(f"Invalid log level: {level_name}")
        levels[name.strip()] = level
    return levels
