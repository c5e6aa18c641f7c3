"""Kudamono CLI -- interactive terminal frontend for the agent runtime.

This module is NEVER imported from kudamono/__init__.py.
It is only loaded via the ``kudamono`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging

try:
    import click
    from dotenv import load_dotenv
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install kudamono[cli]"
    ) from None

from kudamono.cli.formatting import format_error, get_console
from kudamono.config import Settings
from kudamono.exceptions import ConfigError


def _configure_logging(verbose: bool) -> None:
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(show_time=False, show_path=False)],
    )


@click.group(invoke_without_command=True)
@click.option("--model", default=None, help="Model identifier (overrides KUDAMONO_MODEL).")
@click.option(
    "--max-iterations",
    type=int,
    default=None,
    help="Maximum model calls per request (overrides KUDAMONO_MAX_ITERATIONS).",
)
@click.option(
    "--env-file",
    default=None,
    type=click.Path(dir_okay=False),
    help="Path to a .env file with credentials and settings.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    model: str | None,
    max_iterations: int | None,
    env_file: str | None,
    verbose: bool,
) -> None:
    """Kudamono: a tool-calling assistant in your terminal."""
    load_dotenv(env_file)
    _configure_logging(verbose)

    ctx.ensure_object(dict)
    try:
        ctx.obj["settings"] = Settings.from_env(
            model=model, max_iterations=max_iterations
        )
    except ConfigError as e:
        format_error(str(e), get_console())
        raise SystemExit(1) from None

    if ctx.invoked_subcommand is None:
        ctx.invoke(chat)


def main() -> None:
    cli(obj={})


# Register subcommands after cli group is defined
from kudamono.cli.commands.chat import chat  # noqa: E402
from kudamono.cli.commands.tools import tools  # noqa: E402

cli.add_command(chat)
cli.add_command(tools)
