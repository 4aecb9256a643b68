"""Entry point for running the MyStat CLI.

This module defines the top-level Click group. Executing
``python -m mystat.interfaces.cli`` (or the ``mystat`` console script) will
invoke this group and present the available commands.
"""

from __future__ import annotations

import logging

import click

from mystat.app.config import load_settings
from mystat.infrastructure.observability import configure_logging

from .context import CLIContext
from .portal import (
    activity,
    delete_homework,
    exams,
    get,
    homework,
    leaders,
    login,
    news,
    schedule,
    upload_homework,
)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--username",
    envvar="MYSTAT_USERNAME",
    required=True,
    help="MyStat login (env: MYSTAT_USERNAME).",
)
@click.option(
    "--password",
    envvar="MYSTAT_PASSWORD",
    default=None,
    help="MyStat password (env: MYSTAT_PASSWORD; prompted if omitted).",
)
@click.option("--language", default=None, help="Locale sent with every request.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=str),
    default=None,
    help="JSON configuration file.",
)
@click.option("--timeout", type=float, default=None, help="Per-request timeout in seconds.")
@click.option("-v", "--verbose", count=True, help="Increase log output (-v, -vv).")
@click.pass_context
def cli(
    ctx: click.Context,
    username: str,
    password: str | None,
    language: str | None,
    config_path: str | None,
    timeout: float | None,
    verbose: int,
) -> None:
    """MyStat student portal command-line interface."""
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    configure_logging(level=level)

    ctx.ensure_object(dict)
    settings = load_settings(config_path, language=language, timeout_seconds=timeout)
    cli_context = CLIContext(settings=settings, username=username, password=password)
    factory = ctx.obj.get("client_factory")
    if factory is not None:
        cli_context.client_factory = factory
    ctx.obj["cli_context"] = cli_context


cli.add_command(login)
cli.add_command(get)
cli.add_command(schedule)
cli.add_command(homework)
cli.add_command(upload_homework)
cli.add_command(delete_homework)
cli.add_command(news)
cli.add_command(exams)
cli.add_command(leaders)
cli.add_command(activity)


if __name__ == "__main__":
    cli()
