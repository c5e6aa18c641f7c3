"""Prompt templates for Kudamono."""

from kudamono.prompts.system import DEFAULT_ASSISTANT_NAME, build_system_prompt

__all__ = ["DEFAULT_ASSISTANT_NAME", "build_system_prompt"]
