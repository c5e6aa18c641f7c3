"""kudamono tools -- list the registered tools."""

from __future__ import annotations

import click

from kudamono.cli.formatting import format_tools, get_console


@click.command()
@click.pass_context
def tools(ctx: click.Context) -> None:
    """Show the tools the assistant can call."""
    from kudamono.cli.commands.chat import build_registry

    with build_registry(ctx.obj["settings"]) as registry:
        format_tools(registry, get_console())
