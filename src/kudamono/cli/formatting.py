"""Rich formatting helpers for the Kudamono CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from kudamono.agent.models import ToolStep
    from kudamono.conversation import ToolInvocationRequest
    from kudamono.toolkit.registry import ToolRegistry

ASSISTANT_LABEL = "[yellow]Kudamono[/yellow]"
USER_PROMPT = "[magenta]You:[/magenta] "

# command -> help text
CHAT_COMMANDS: dict[str, str] = {
    "help": "Show this list of commands.",
    "tools": "List the registered tools.",
    "clear": "Start a new conversation.",
    "exit": "Quit the program (also 'quit' or Ctrl+D).",
}


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def format_welcome(console: Console) -> None:
    console.print("\n\t\t[bold]Welcome to the Kudamono CLI![/bold]\n")
    console.print("Type a task and press enter to submit it.")
    console.print("Type 'help' to see a list of available commands.")
    console.print("Press Ctrl+C to abandon a pending request, Ctrl+D to exit.\n")


def format_help(console: Console) -> None:
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Command", style="cyan")
    table.add_column("Description")
    for name, text in CHAT_COMMANDS.items():
        table.add_row(name, text)
    console.print(table)


def format_tools(registry: ToolRegistry, console: Console) -> None:
    """Display the registered tools and their arguments."""
    if len(registry) == 0:
        console.print("[dim]No tools registered.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Tool", style="cyan")
    table.add_column("Arguments", style="green")
    table.add_column("Description")

    for entry in registry.manifest():
        properties = entry["input_schema"].get("properties", {})
        required = set(entry["input_schema"].get("required", []))
        args = ", ".join(
            name if name in required else f"{name}?" for name in properties
        )
        table.add_row(entry["name"], args, escape(entry.get("description") or ""))

    console.print(table)


def format_assistant_text(text: str, console: Console) -> None:
    console.print(f"{ASSISTANT_LABEL}: {escape(text)}\n")


def format_tool_call(request: ToolInvocationRequest, console: Console) -> None:
    args = json.dumps(request.arguments(), default=str)
    console.print(
        f"[dim]-> {escape(request.tool_name)}({escape(args)})[/dim]", highlight=False
    )


def format_tool_step(step: ToolStep, console: Console) -> None:
    if step.success:
        console.print(f"[dim]<- {escape(step.request.tool_name)}: ok[/dim]")
    else:
        first_line = step.result.payload.splitlines()[0] if step.result.payload else ""
        console.print(
            f"[red]<- {escape(step.request.tool_name)}: {escape(first_line)}[/red]",
            highlight=False,
        )


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
