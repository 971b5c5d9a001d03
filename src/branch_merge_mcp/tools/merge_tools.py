from __future__ import annotations

from typing import Any

from .common import as_result, clip_output, make_operations, make_runner
from ..core.errors import GitCommandFailed
from ..core.operations import GitOperations
from ..core.parsers import parse_status_porcelain
from ..core.security import validate_branch_name
from ..core.workflow import MergeWorkflow


async def repo_info(root: str = ".") -> dict[str, Any]:
    """
    Is this a git work tree, and which branch is checked out.
    """
    runner = make_runner(root)
    ops = GitOperations(runner)
    root_path = runner.root.as_posix()
    if not await ops.is_repository():
        return {"root": root_path, "is_git": False}
    return {
        "root": root_path,
        "is_git": True,
        "branch": await ops.get_original_branch(),
    }


async def local_branches(root: str = ".", max_entries: int = 200) -> dict[str, Any]:
    """
    Local branches, most recently committed first.
    """
    ops = make_operations(root)
    branches = (await ops.get_local_branches())[: max(1, int(max_entries))]
    return {"branches": branches, "count": len(branches)}


async def check_clean(root: str = ".") -> dict[str, Any]:
    """
    Fails with `uncommitted-changes` when the working tree is dirty; the
    offending entries are parsed out of the full status output, before the
    error context is clipped.
    """
    ops = make_operations(root)
    entries: list[dict[str, Any]] = []

    async def body() -> dict[str, Any]:
        try:
            await ops.check_uncommitted()
        except GitCommandFailed as e:
            entries.extend(x.__dict__ for x in parse_status_porcelain((e.context or "").splitlines()))
            raise
        return {"clean": True}

    out = await as_result(body)
    if not out["ok"]:
        out["entries"] = entries
    return out


async def branch_exists(branch: str, root: str = ".") -> dict[str, Any]:
    ops = make_operations(root)

    async def body() -> dict[str, Any]:
        name = validate_branch_name(branch)
        await ops.check_branch_exists(name)
        return {"branch": name, "exists": True}

    return await as_result(body)


async def merge_into(
    targets: list[str],
    root: str = ".",
    source: str | None = None,
    push: bool = True,
    return_to_source: bool = True,
) -> dict[str, Any]:
    """
    Merge `source` (default: current branch) into each target branch, then push.
    Stops at the first failing step.
    """
    runner = make_runner(root)
    workflow = MergeWorkflow(GitOperations(runner))

    async def body() -> dict[str, Any]:
        report = await workflow.run(
            targets,
            source=source,
            push=push,
            return_to_source=return_to_source,
        )
        out = report.to_dict()
        limit = runner.config.max_output_chars
        for t in out["targets"]:
            t["steps"] = {k: clip_output(v, limit) for k, v in t["steps"].items()}
        return out

    return await as_result(body)
