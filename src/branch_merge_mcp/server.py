from __future__ import annotations

import logging
import os
import sys

from mcp.server.fastmcp import FastMCP

from branch_merge_mcp.tools import (
    branch_exists,
    check_clean,
    local_branches,
    merge_into,
    repo_info,
)

mcp = FastMCP("branch-merge-mcp")


@mcp.tool()
async def repo_info_tool(root: str = ".") -> dict:
    return await repo_info(root=root)


@mcp.tool()
async def local_branches_tool(root: str = ".", max_entries: int = 200) -> dict:
    return await local_branches(root=root, max_entries=max_entries)


@mcp.tool()
async def check_clean_tool(root: str = ".") -> dict:
    return await check_clean(root=root)


@mcp.tool()
async def branch_exists_tool(branch: str, root: str = ".") -> dict:
    return await branch_exists(branch=branch, root=root)


@mcp.tool()
async def merge_into_tool(
    targets: list[str],
    root: str = ".",
    source: str | None = None,
    push: bool = True,
    return_to_source: bool = True,
) -> dict:
    return await merge_into(
        targets=targets,
        root=root,
        source=source,
        push=push,
        return_to_source=return_to_source,
    )


def configure_logging() -> None:
    # stdout carries the stdio protocol; git echo goes to stderr
    level = os.environ.get("BRANCH_MERGE_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    configure_logging()
    mcp.run()


if __name__ == "__main__":
    main()
