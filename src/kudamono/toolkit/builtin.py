"""Built-in tools: filesystem access, ripgrep search, GitHub, planning.

Each handler takes its validated input model and returns
``Result[str, HandlerFailure]``; I/O exceptions are caught here and never
reach the turn processor.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from typing import TYPE_CHECKING, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from kudamono.config import GITHUB_TOKEN_ENV, Settings
from kudamono.failures import HandlerFailure
from kudamono.result import err, is_err, ok

if TYPE_CHECKING:
    from kudamono.llm.planner import PlannerClient
    from kudamono.result import Result
    from kudamono.toolkit.registry import ToolRegistry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Input models
# ---------------------------------------------------------------------------


class FetchFileArgs(BaseModel):
    file_path: str = Field(description="Path of the file to read.")


class ListFilesArgs(BaseModel):
    dir_path: str = Field(description="Directory whose entries to list.")


class CreateFileArgs(BaseModel):
    file_path: str = Field(description="Path of the file to write.")
    file_contents: str = Field(description="Full contents of the file.")


class ReplaceInFileArgs(BaseModel):
    file_path: str = Field(description="Path of the file to edit.")
    old_str: str = Field(description="Exact text to replace (first occurrence).")
    new_str: str = Field(description="Replacement text.")


class AddNumbersArgs(BaseModel):
    model_config = ConfigDict(strict=True)

    a: float
    b: float


class SearchFilesArgs(BaseModel):
    search_string: str = Field(description="Pattern to search for.")
    directory: Optional[str] = Field(
        default=None, description="Directory to search. Defaults to the working directory."
    )


class GithubArgs(BaseModel):
    owner: str = Field(description="Repository owner (user or organization).")
    repo: str = Field(description="Repository name.")


class PlanArgs(BaseModel):
    task: str = Field(description="The task to plan.")


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _handle_fetch_file(args: FetchFileArgs) -> Result[str, HandlerFailure]:
    try:
        with open(args.file_path, encoding="utf-8") as f:
            return ok(f.read())
    except (OSError, UnicodeDecodeError) as exc:
        return err(HandlerFailure.from_exception("fetch_file", exc))


def _handle_list_files(args: ListFilesArgs) -> Result[str, HandlerFailure]:
    try:
        entries = sorted(os.listdir(args.dir_path))
    except OSError as exc:
        return err(HandlerFailure.from_exception("list_files", exc))
    return ok("".join(f"{name}\n" for name in entries))


def _handle_create_file(args: CreateFileArgs) -> Result[str, HandlerFailure]:
    try:
        with open(args.file_path, "w", encoding="utf-8") as f:
            f.write(args.file_contents)
    except OSError as exc:
        return err(HandlerFailure.from_exception("create_file", exc))
    return ok(f"Created file {args.file_path} successfully")


def _handle_replace_in_file(args: ReplaceInFileArgs) -> Result[str, HandlerFailure]:
    try:
        with open(args.file_path, encoding="utf-8") as f:
            contents = f.read()
    except (OSError, UnicodeDecodeError) as exc:
        return err(HandlerFailure.from_exception("replace_in_file", exc))

    if args.old_str not in contents:
        return err(
            HandlerFailure(
                tool_name="replace_in_file",
                reason=f"Text to replace not found in {args.file_path}",
            )
        )

    try:
        with open(args.file_path, "w", encoding="utf-8") as f:
            f.write(contents.replace(args.old_str, args.new_str, 1))
    except OSError as exc:
        return err(HandlerFailure.from_exception("replace_in_file", exc))
    return ok(f"Replaced text in {args.file_path} successfully")


def _handle_add_numbers(args: AddNumbersArgs) -> Result[str, HandlerFailure]:
    total = args.a + args.b
    if total.is_integer():
        total = int(total)
    return ok(json.dumps(total))


def _handle_search_files(
    args: SearchFilesArgs, binary: str
) -> Result[str, HandlerFailure]:
    # -e and -- keep model-supplied values from being parsed as rg options
    command = [binary, "--files-with-matches", "-e", args.search_string, "--"]
    if args.directory:
        command.append(args.directory)
    logger.debug("Running search: %s", command)

    try:
        proc = subprocess.run(command, capture_output=True, text=True, check=False)
    except OSError as exc:
        return err(HandlerFailure.from_exception("search_files", exc))

    # ripgrep exits 1 when nothing matched
    if proc.returncode == 1 and not proc.stderr:
        return ok(f"No files contain '{args.search_string}'")
    if proc.returncode != 0:
        return err(
            HandlerFailure(
                tool_name="search_files",
                reason=f"{binary} exited with status {proc.returncode}: {proc.stderr.strip()}",
            )
        )
    return ok(proc.stdout)


def _handle_github(
    args: GithubArgs, client: httpx.Client, api_url: str
) -> Result[str, HandlerFailure]:
    headers = {"Accept": "application/vnd.github+json"}
    token = os.environ.get(GITHUB_TOKEN_ENV)
    if token:
        headers["Authorization"] = f"Bearer {token}"

    try:
        response = client.get(
            f"{api_url.rstrip('/')}/repos/{args.owner}/{args.repo}",
            headers=headers,
        )
    except httpx.HTTPError as exc:
        return err(HandlerFailure.from_exception("github", exc))

    if not response.is_success:
        return err(
            HandlerFailure(
                tool_name="github",
                reason=f"HTTP {response.status_code} - {response.text}",
            )
        )

    try:
        data = response.json()
    except ValueError as exc:
        return err(HandlerFailure.from_exception("github", exc))

    summary = {
        "full_name": data.get("full_name"),
        "description": data.get("description"),
        "stars": data.get("stargazers_count"),
        "default_branch": data.get("default_branch"),
        "url": data.get("html_url"),
    }
    return ok(json.dumps(summary))


def _handle_plan(args: PlanArgs, planner: PlannerClient) -> Result[str, HandlerFailure]:
    result = planner.plan(args.task)
    if is_err(result):
        return err(HandlerFailure(tool_name="plan", reason=result.error.message))
    return ok(result.value)


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def register_builtin_tools(
    registry: ToolRegistry,
    settings: Settings | None = None,
    *,
    planner: PlannerClient | None = None,
    http_client: httpx.Client | None = None,
) -> ToolRegistry:
    """Register all built-in tools on ``registry``.

    Handlers that need collaborators (search binary, HTTP client, planner)
    are bound here; nothing is stored at module level. Clients built here
    are released by ``registry.close()``; clients passed in stay owned by
    the caller.

    Args:
        registry: Registry to populate.
        settings: Runtime settings; defaults to ``Settings()``.
        planner: Planning client; one is built from ``settings`` if omitted.
        http_client: httpx client for the GitHub tool; one is built if omitted.

    Returns:
        The same registry, for chaining.
    """
    settings = settings or Settings()
    if planner is None:
        from kudamono.llm.planner import PlannerClient

        planner = PlannerClient(settings)
        registry.on_close(planner.close)
    github_client = http_client
    if github_client is None:
        github_client = httpx.Client(timeout=settings.timeout)
        registry.on_close(github_client.close)

    registry.register(
        "fetch_file",
        description="Fetch a file from the filesystem and return its contents.",
        schema=FetchFileArgs,
        handler=_handle_fetch_file,
    )
    registry.register(
        "list_files",
        description="List all files within a directory, one name per line.",
        schema=ListFilesArgs,
        handler=_handle_list_files,
    )
    registry.register(
        "create_file",
        description="Create (or overwrite) a file with the given contents.",
        schema=CreateFileArgs,
        handler=_handle_create_file,
    )
    registry.register(
        "replace_in_file",
        description=(
            "Replace the first occurrence of `old_str` with `new_str` in a file. "
            "Fails if `old_str` does not occur in the file."
        ),
        schema=ReplaceInFileArgs,
        handler=_handle_replace_in_file,
    )
    registry.register(
        "add_numbers",
        description="Add two numbers.",
        schema=AddNumbersArgs,
        handler=_handle_add_numbers,
    )
    registry.register(
        "search_files",
        description=(
            "Search for a string pattern within files. Returns the paths of "
            "the files which contain the pattern."
        ),
        schema=SearchFilesArgs,
        handler=lambda args: _handle_search_files(args, settings.search_binary),
    )
    registry.register(
        "github",
        description="Look up a GitHub repository and return a short JSON summary.",
        schema=GithubArgs,
        handler=lambda args: _handle_github(args, github_client, settings.github_api_url),
    )
    registry.register(
        "plan",
        description="Produce a numbered step-by-step plan for a task.",
        schema=PlanArgs,
        handler=lambda args: _handle_plan(args, planner),
    )
    return registry
