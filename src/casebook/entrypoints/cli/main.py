"""Casebook CLI entry point.

Defines the top-level ``casebook`` command (via Click-Extra) and registers
subcommands exposed by the project.

Currently available groups
- ``casebook db`` — forward-only database management (upgrade/current/heads/history/status).
- ``casebook repo`` — folders, artifacts, version history, diffs and views.

Notes
- The CLI version is sourced from `casebook.__version__` and displayed
  automatically by Click-Extra (``--version``).
- Additional command groups should be registered here via ``casebook.add_command(...)``.

Examples
    $ casebook --version
    $ casebook db upgrade
    $ casebook repo tree PROJECT_ID
"""

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

import click
import click_extra as clickx
from platformdirs import user_log_dir

from casebook import __version__
from casebook.logging import (
    apply_logger_levels,
    config_console_handler,
    config_flight_recorder,
    log_startup,
)

from .db import db as db_group
from .helpers import hyperlink
from .helpers.log_level_parser import parse_log_level
from .repo import repo as repo_group

if TYPE_CHECKING:
    from logging import Handler

logger = logging.getLogger(__name__)


HELP = """CASEBOOK command-line interface.

    CASEBOOK is a versioned, hierarchical repository of test cases: folders,
    artifacts with immutable version history and field-level diffs, global
    tags, and grouped, filtered views over all of it.
    """


EPILOG = "\b\n" + "\n".join(
    [
        f"{click.style('See Also:', fg='blue', bold=True, underline=True)}",
        "  Schema: " + hyperlink("https://alembic.sqlalchemy.org/", "alembic"),
    ]
)


@clickx.extra_group(
    version=__version__,
    help=HELP,
    params=[
        clickx.ColorOption(show_envvar=True),
        clickx.TimerOption(show_envvar=True),
        clickx.ExtraVersionOption(),
    ],
    epilog=EPILOG,
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help=(
        "Increase the default WARNING verbosity by one level "
        "for each additional repetition of the option."
    ),
    default=0,
)
@click.option(
    "--quiet",
    "-q",
    "quiet_count",
    count=True,
    help=(
        "Decrease the default WARNING verbosity by one level "
        "for each additional repetition of the option."
    ),
    default=0,
)
@click.option(
    "--debug/--no-debug",
    is_flag=True,
    help="Enable debug mode (enables extra developer diagnostics beyond -vvv).",
    default=False,
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to log file (overrides default flight recorder path).",
    default=Path(user_log_dir("casebook", appauthor=False, ensure_exists=True))
    / "latest.log",
    envvar="CASEBOOK_LOG_PATH",
    show_default=True,
    show_envvar=True,
)
@click.option(
    "--flight-recorder-capacity",
    type=int,
    default=2000,
    hidden=True,
    envvar="CASEBOOK_FLIGHT_RECORDER_CAPACITY",
    show_envvar=True,
    help="Capacity of the flight recorder (in number of log records).",
)
@click.option(
    "--flight-recorder/--no-flight-recorder",
    "flight_recorder",
    is_flag=True,
    help=(
        "Enable the in-memory flight recorder. Keeps the last N log records "
        "(tunable via CASEBOOK_FLIGHT_RECORDER_CAPACITY) at DEBUG granularity "
        "(unaffected by -v/-q) and writes them to --log-path when a WARNING/ERROR "
        "occurs, or on clean exit if --force-flush is set. Console verbosity is "
        "unchanged. Use --no-flight-recorder to disable."
    ),
    default=True,
    show_envvar=True,
)
@click.option(
    "--force-flush/--no-force-flush",
    "force_flush_flight_recorder",
    is_flag=True,
    help=(
        "Force-flush the flight recorder buffer to --log-path on program exit. "
        "Normally the buffer only dumps on WARNING/ERROR; console output is "
        "unaffected. Use --no-force-flush to disable."
    ),
    default=False,
    show_default=True,
    show_envvar=True,
)
@click.option(
    "-L",
    "--logger-level",
    "logger_levels",
    multiple=True,  # repeatable option
    callback=parse_log_level,
    envvar="CASEBOOK_LOGGER_LEVELS",
    help=(
        "Set MINIMUM LEVEL for specific LOGGERS (NAME=LEVEL). This changes the "
        "logger's own level, so it applies to BOTH console and flight-recorder. "
        "Use to quiet verbose third-party libs. Repeatable (e.g. -L sqlalchemy=INFO "
        "-L alembic=WARNING) or via CASEBOOK_LOGGER_LEVELS (comma/space list). "
        "SQLAlchemy engine/pool and Alembic are kept at WARNING unless overridden."
    ),
    show_envvar=True,
)
@clickx.pass_context
def casebook(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    verbose_count: int,
    quiet_count: int,
    debug: bool,
    log_path: Path,
    flight_recorder_capacity: int,
    flight_recorder: bool,
    force_flush_flight_recorder: bool,
    logger_levels: dict[str, int],
) -> None:
    """CASEBOOK command-line interface."""

    # 0) compute effective verbosity
    level = logging.WARNING - (10 * verbose_count) + (10 * quiet_count)
    level = max(logging.DEBUG, min(logging.CRITICAL, level))

    handlers: list[Handler] = []

    # 1) configure console handler
    use_color = ctx.color is not False  # None or True => allow color
    handlers.append(
        config_console_handler(level=level, debug_mode=debug, color=use_color)
    )

    # 2) configure flight recorder
    if flight_recorder:
        handlers.append(
            config_flight_recorder(
                path=log_path,
                capacity=flight_recorder_capacity,
                flush_on_close=force_flush_flight_recorder,
            )
        )

    # 3) configure root logger with configured handlers
    logging.basicConfig(
        level=logging.DEBUG,  # capture all levels; handlers filter
        handlers=handlers,
        force=True,
    )

    # 4) quiet the database libraries, then apply -L overrides
    applied_levels = apply_logger_levels(logger_levels)

    # 5) log startup info
    log_startup(
        logger,
        app_version=__version__,
        db_url=os.environ.get("CASEBOOK_DB_URL"),
        level=level,
        handlers=handlers,
        log_path=log_path,
        flight_recorder=flight_recorder,
        flight_capacity=flight_recorder_capacity if flight_recorder else None,
        force_flush_fr=force_flush_flight_recorder,
        logger_levels=applied_levels,
    )

    # 6) ensure logging is cleanly shut down on program exit
    ctx.call_on_close(logging.shutdown)


casebook.add_command(db_group)
casebook.add_command(repo_group)
