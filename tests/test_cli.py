"""CLI tests for Kudamono -- the chat and tools commands via Click's CliRunner.

The model client is replaced with a scripted fake so no network traffic
happens; stdin is supplied through the runner.
"""

from __future__ import annotations

import pytest
from click.testing import CliRunner
from pydantic import BaseModel

from kudamono import TransportFailure, err
from kudamono.cli import cli
from kudamono.cli.commands import chat as chat_module
from kudamono.llm import parse_response


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


class ScriptedClient:
    """Model client returning canned responses in order."""

    def __init__(self, responses):
        self._responses = list(responses)
        self.calls = 0
        self.closed = False
        self.messages: list[list[dict]] = []

    def complete(self, conversation, tool_manifest, system_prompt):
        self.calls += 1
        self.messages.append(conversation.to_messages())
        item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, TransportFailure):
            return err(item)
        return parse_response(item)

    def close(self):
        self.closed = True


def _text(text: str) -> dict:
    return {"content": [{"type": "text", "text": text}], "stop_reason": "end_turn"}


def _tool(name: str, arguments: dict, invocation_id: str = "toolu_1") -> dict:
    return {
        "content": [{"type": "tool_use", "id": invocation_id, "name": name, "input": arguments}],
        "stop_reason": "tool_use",
    }


@pytest.fixture
def runner():
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def clean_env(monkeypatch):
    # setenv first so monkeypatch restores the variable after dotenv writes it
    for var in ("KUDAMONO_MODEL", "KUDAMONO_MAX_ITERATIONS", "KUDAMONO_MAX_TOKENS"):
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)


@pytest.fixture
def use_client(monkeypatch, registry):
    """Install a scripted client and the test registry into the chat command."""

    def install(*responses) -> ScriptedClient:
        client = ScriptedClient(responses)
        monkeypatch.setattr(chat_module, "build_client", lambda settings: client)
        monkeypatch.setattr(chat_module, "build_registry", lambda settings: registry)
        return client

    return install


# ---------------------------------------------------------------------------
# chat
# ---------------------------------------------------------------------------


class TestChat:
    def test_exit_immediately(self, runner, clean_env, use_client):
        client = use_client()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["chat"], input="exit\n", obj={})
        assert result.exit_code == 0, result.output
        assert "Welcome to the Kudamono CLI" in result.output
        assert "Goodbye!" in result.output
        assert client.calls == 0
        assert client.closed

    def test_no_subcommand_starts_chat(self, runner, clean_env, use_client):
        use_client()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, [], input="quit\n", obj={})
        assert result.exit_code == 0, result.output
        assert "Welcome" in result.output

    def test_end_of_input_exits(self, runner, clean_env, use_client):
        use_client()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["chat"], input="", obj={})
        assert result.exit_code == 0
        assert "Goodbye!" in result.output

    def test_help_and_tools_commands(self, runner, clean_env, use_client):
        client = use_client()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["chat"], input="help\ntools\n\nexit\n", obj={})
        assert result.exit_code == 0, result.output
        assert "Start a new conversation." in result.output
        assert "Add two numbers" in result.output
        assert client.calls == 0

    def test_text_answer_is_printed(self, runner, clean_env, use_client):
        client = use_client(_text("Hello there!"))
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["chat"], input="hi\nexit\n", obj={})
        assert result.exit_code == 0, result.output
        assert "thinking" in result.output
        assert "Kudamono: Hello there!" in result.output
        assert client.calls == 1

    def test_tool_call_is_shown(self, runner, clean_env, use_client, add_calls):
        use_client(_tool("add", {"a": 2, "b": 3}), _text("The answer is 5"))
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["chat"], input="what is 2+3?\nexit\n", obj={})
        assert result.exit_code == 0, result.output
        assert "-> add(" in result.output
        assert "<- add: ok" in result.output
        assert "The answer is 5" in result.output
        assert len(add_calls) == 1

    def test_failed_tool_is_shown(self, runner, clean_env, use_client):
        use_client(_tool("nope", {}), _text("Sorry."))
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["chat"], input="go\nexit\n", obj={})
        assert result.exit_code == 0, result.output
        assert "<- nope: Unknown tool: nope" in result.output

    def test_transport_failure_keeps_session(self, runner, clean_env, use_client):
        client = use_client(
            TransportFailure(reason="Unauthorized", status_code=401, body="bad key"),
            _text("Recovered"),
        )
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["chat"], input="one\ntwo\nexit\n", obj={})
        assert result.exit_code == 0, result.output
        assert "Error: HTTP 401" in result.output
        assert "Recovered" in result.output
        assert client.calls == 2

    def test_iteration_cap_reported(self, runner, clean_env, use_client):
        use_client(_tool("add", {"a": 1, "b": 1}, "t1"), _tool("add", {"a": 1, "b": 1}, "t2"))
        with runner.isolated_filesystem():
            result = runner.invoke(
                cli, ["--max-iterations", "2", "chat"], input="loop\nexit\n", obj={}
            )
        assert result.exit_code == 0, result.output
        assert "Stopped after 2 model calls" in result.output

    def test_registry_is_closed_on_exit(self, runner, clean_env, use_client, registry):
        released: list[int] = []
        registry.on_close(lambda: released.append(1))
        use_client()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["chat"], input="exit\n", obj={})
        assert result.exit_code == 0, result.output
        assert released == [1]


# ---------------------------------------------------------------------------
# Ctrl+C while a request is pending
# ---------------------------------------------------------------------------


class StallArgs(BaseModel):
    seconds: int


class TestInterrupt:
    def test_interrupt_during_model_call_appends_nothing(
        self, runner, clean_env, use_client
    ):
        client = use_client(KeyboardInterrupt(), _text("Still here"))
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["chat"], input="first\nsecond\nexit\n", obj={})
        assert result.exit_code == 0, result.output
        assert "Request abandoned." in result.output
        assert "Still here" in result.output
        assert client.messages[1] == [
            {"role": "user", "content": "first"},
            {"role": "user", "content": "second"},
        ]

    def test_interrupt_during_tool_call_closes_the_request(
        self, runner, clean_env, use_client, registry
    ):
        def stall(args: StallArgs):
            raise KeyboardInterrupt

        registry.register("stall", schema=StallArgs, handler=stall)
        client = use_client(_tool("stall", {"seconds": 60}, "toolu_stall"), _text("Okay"))
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["chat"], input="wait\nnext\nexit\n", obj={})
        assert result.exit_code == 0, result.output
        assert "Request abandoned." in result.output

        history = client.messages[1]
        assert [m["role"] for m in history] == ["user", "assistant", "user", "user"]
        assert history[1]["content"][0]["id"] == "toolu_stall"
        tool_result = history[2]["content"][0]
        assert tool_result["type"] == "tool_result"
        assert tool_result["tool_use_id"] == "toolu_stall"
        assert tool_result["is_error"] is True
        assert history[3] == {"role": "user", "content": "next"}

    def test_session_continues_after_interrupt(self, runner, clean_env, use_client):
        client = use_client(KeyboardInterrupt())
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["chat"], input="first\nexit\n", obj={})
        assert result.exit_code == 0, result.output
        assert "Goodbye!" in result.output
        assert client.closed


# ---------------------------------------------------------------------------
# tools
# ---------------------------------------------------------------------------


class TestToolsCommand:
    def test_lists_builtin_tools(self, runner, clean_env):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["tools"], obj={})
        assert result.exit_code == 0, result.output
        for name in ("fetch_file", "list_files", "add_numbers", "search_files", "plan"):
            assert name in result.output

    def test_registry_is_closed(self, runner, clean_env, registry, monkeypatch):
        released: list[int] = []
        registry.on_close(lambda: released.append(1))
        monkeypatch.setattr(chat_module, "build_registry", lambda settings: registry)
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["tools"], obj={})
        assert result.exit_code == 0, result.output
        assert "add" in result.output
        assert released == [1]


# ---------------------------------------------------------------------------
# configuration
# ---------------------------------------------------------------------------


class TestConfiguration:
    def test_invalid_setting_exits_with_error(self, runner, clean_env):
        with runner.isolated_filesystem():
            result = runner.invoke(
                cli, ["tools"], obj={}, env={"KUDAMONO_MAX_TOKENS": "abc"}
            )
        assert result.exit_code == 1
        assert "Invalid settings" in result.output

    def test_env_file_is_loaded(self, runner, clean_env, use_client, monkeypatch):
        seen = {}

        def capture(settings):
            seen["model"] = settings.model
            return ScriptedClient([])

        monkeypatch.setattr(chat_module, "build_client", capture)
        with runner.isolated_filesystem():
            with open("custom.env", "w") as f:
                f.write("KUDAMONO_MODEL=claude-from-file\n")
            result = runner.invoke(
                cli,
                ["--env-file", "custom.env", "chat"],
                input="exit\n",
                obj={},
                env={"KUDAMONO_MODEL": None},
            )
        assert result.exit_code == 0, result.output
        assert seen["model"] == "claude-from-file"

    def test_model_flag_overrides_environment(self, runner, clean_env, use_client, monkeypatch):
        seen = {}

        def capture(settings):
            seen["model"] = settings.model
            return ScriptedClient([])

        monkeypatch.setattr(chat_module, "build_client", capture)
        with runner.isolated_filesystem():
            result = runner.invoke(
                cli,
                ["--model", "claude-flag", "chat"],
                input="exit\n",
                obj={},
                env={"KUDAMONO_MODEL": "claude-env"},
            )
        assert result.exit_code == 0, result.output
        assert seen["model"] == "claude-flag"
