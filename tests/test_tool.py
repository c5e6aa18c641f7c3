"""Tests for ToolDefinition.invoke(): validation and handler contract."""

from __future__ import annotations

from pydantic import BaseModel

from kudamono import HandlerFailure, ToolRegistry, ValidationFailure, err, is_err, ok


class TestInvokeValidation:
    def test_valid_arguments_call_handler_once(self, registry, add_calls):
        tool = registry.lookup("add").value
        res = tool.invoke({"a": 2, "b": 3})
        assert res == ok("5")
        assert len(add_calls) == 1
        assert add_calls[0].a == 2

    def test_invalid_arguments_never_call_handler(self, registry, add_calls):
        tool = registry.lookup("add").value
        res = tool.invoke({"a": "two", "b": 3})
        assert is_err(res)
        assert isinstance(res.error, ValidationFailure)
        assert add_calls == []

    def test_missing_argument_is_validation_failure(self, registry, add_calls):
        res = registry.lookup("add").value.invoke({"a": 1})
        assert isinstance(res.error, ValidationFailure)
        assert add_calls == []

    def test_non_dict_arguments_are_validation_failure(self, registry, add_calls):
        res = registry.lookup("add").value.invoke(None)
        assert isinstance(res.error, ValidationFailure)
        assert add_calls == []

    def test_validation_failure_carries_tool_and_arguments(self, registry):
        res = registry.lookup("add").value.invoke({"a": "x"})
        failure = res.error
        assert failure.tool_name == "add"
        assert failure.arguments == {"a": "x"}
        assert "Wrong arguments for tool (add)" in failure.message
        assert '"a": "x"' in failure.message


class TestInvokeHandler:
    def test_handler_failure_propagates(self):
        class Args(BaseModel):
            path: str

        reg = ToolRegistry()
        reg.register(
            "read",
            schema=Args,
            handler=lambda args: err(HandlerFailure(tool_name="read", reason="no such file")),
        )
        res = reg.lookup("read").value.invoke({"path": "/missing"})
        assert is_err(res)
        assert res.error.message == "Tool read failed: no such file"

    def test_escaping_exception_becomes_handler_failure(self):
        class Args(BaseModel):
            n: int

        def boom(args: Args):
            raise RuntimeError("kaput")

        reg = ToolRegistry()
        reg.register("boom", schema=Args, handler=boom)
        res = reg.lookup("boom").value.invoke({"n": 1})
        assert isinstance(res.error, HandlerFailure)
        assert "RuntimeError: kaput" in res.error.message

    def test_plain_return_value_is_treated_as_text(self):
        class Args(BaseModel):
            n: int

        reg = ToolRegistry()
        reg.register("square", schema=Args, handler=lambda args: args.n * args.n)
        assert reg.lookup("square").value.invoke({"n": 4}) == ok("16")
