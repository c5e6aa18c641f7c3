"""kudamono chat -- interactive conversation with the assistant."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from kudamono.agent import AgentConfig, TurnProcessor
from kudamono.cli.formatting import (
    USER_PROMPT,
    format_assistant_text,
    format_error,
    format_help,
    format_tool_call,
    format_tool_step,
    format_tools,
    format_welcome,
    get_console,
)
from kudamono.conversation import Conversation, ConversationTurn, ToolInvocationResult
from kudamono.llm import AnthropicClient
from kudamono.result import is_err
from kudamono.toolkit import ToolRegistry, register_builtin_tools

if TYPE_CHECKING:
    from rich.console import Console

    from kudamono.config import Settings
    from kudamono.llm.protocols import ModelClient

_EXIT_COMMANDS = {"exit", "quit"}


def build_client(settings: Settings) -> ModelClient:
    return AnthropicClient(settings)


def build_registry(settings: Settings) -> ToolRegistry:
    return register_builtin_tools(ToolRegistry(), settings)


def _close_dangling_request(conversation: Conversation) -> None:
    """Answer a tool request left without a result by an interrupt."""
    last = conversation.last
    if last is None or last.role != "assistant":
        return
    for record in last.tool_records:
        conversation.append(
            ConversationTurn.tool_result(
                ToolInvocationResult(
                    invocation_id=record.invocation_id,
                    payload="Interrupted by the user before the tool finished.",
                    is_error=True,
                )
            )
        )


def _submit(
    processor: TurnProcessor,
    conversation: Conversation,
    task: str,
    console: Console,
) -> None:
    conversation.append_user_text(task)
    console.print("[yellow]Kudamono[/yellow] is thinking...\n")
    try:
        outcome = processor.run(conversation)
    except KeyboardInterrupt:
        _close_dangling_request(conversation)
        format_error("Request abandoned.", console)
        return

    if is_err(outcome):
        format_error(outcome.error.message, console)
        return
    if outcome.value.truncated:
        format_error(
            f"Stopped after {outcome.value.iterations} model calls without a final answer.",
            console,
        )


@click.command()
@click.pass_context
def chat(ctx: click.Context) -> None:
    """Start an interactive session."""
    settings: Settings = ctx.obj["settings"]
    console = get_console()

    registry = build_registry(settings)
    client = build_client(settings)
    config = AgentConfig(
        max_iterations=settings.max_iterations,
        on_text=lambda text: format_assistant_text(text, console),
        on_tool_call=lambda request: format_tool_call(request, console),
        on_step=lambda step: format_tool_step(step, console),
    )
    processor = TurnProcessor(client, registry, config)
    conversation = Conversation()

    format_welcome(console)
    try:
        while True:
            try:
                task = console.input(USER_PROMPT).strip()
            except (EOFError, KeyboardInterrupt):
                break

            if not task:
                continue
            command = task.lower()
            if command in _EXIT_COMMANDS:
                break
            if command == "help":
                format_help(console)
                continue
            if command == "tools":
                format_tools(registry, console)
                continue
            if command == "clear":
                conversation = Conversation()
                console.clear()
                continue

            _submit(processor, conversation, task, console)
    finally:
        client.close()
        registry.close()
    console.print("Goodbye!")
