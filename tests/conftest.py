"""Shared test fixtures for Kudamono.

Provides a registry with a simple arithmetic tool that records its calls.
"""

import pytest
from pydantic import BaseModel

from kudamono import ToolRegistry, ok


class AddArgs(BaseModel):
    a: float
    b: float


@pytest.fixture
def add_calls() -> list:
    """Records every validated argument object the add tool receives."""
    return []


@pytest.fixture
def registry(add_calls) -> ToolRegistry:
    """Registry with an ``add`` tool that records its calls."""
    reg = ToolRegistry()

    def add(args: AddArgs):
        add_calls.append(args)
        total = args.a + args.b
        return ok(str(int(total)) if total.is_integer() else str(total))

    reg.register("add", description="Add two numbers", schema=AddArgs, handler=add)
    return reg
