from __future__ import annotations

from .errors import FailureKind, GitCommandFailed
from .git_runner import CommandRunner
from .parsers import parse_branch_list, parse_merge_conflicts


class GitOperations:
    """
    Named git operations on top of an injected runner.

    Each operation runs git, then decides between a success value and a
    GitCommandFailed. Exit codes are checked here, never inside the runner.
    """

    def __init__(self, runner: CommandRunner) -> None:
        self.runner = runner

    async def check_uncommitted(self) -> None:
        res = await self.runner.run(["status", "--porcelain"])
        if res.trimmed_stdout():
            raise GitCommandFailed(
                "There are uncommitted changes in the current branch.",
                FailureKind.UNCOMMITTED_CHANGES,
                context=res.combined_output(),
            )

    async def checkout(self, branch: str) -> str:
        res = await self.runner.run(["checkout", branch])
        return res.combined_output()

    async def fetch(self, branch: str) -> str:
        res = await self.runner.run(["fetch", "origin", branch])
        if res.is_failed():
            raise GitCommandFailed(
                f"Failed to fetch the '{branch}' branch.",
                FailureKind.FETCH_FAILED,
                context=res.combined_output(),
            )
        return res.combined_output()

    async def reset_hard(self, branch: str) -> str:
        res = await self.runner.run(["reset", "--hard", f"origin/{branch}"])
        if res.is_failed():
            raise GitCommandFailed(
                f"Failed to reset the '{branch}' branch.",
                FailureKind.RESET_FAILED,
                context=res.combined_output(),
            )
        return res.combined_output()

    async def merge(self, source_branch: str, target_branch: str) -> str:
        """
        Merge `source_branch` into the checked-out `target_branch`.

        On failure the half-done merge is aborted before raising, so the
        working tree is left clean. The abort's own result is ignored.
        """
        res = await self.runner.run(["merge", source_branch])
        if not res.is_failed():
            return res.combined_output()

        await self.runner.run(["merge", "--abort"])

        stdout = res.trimmed_stdout()
        if "CONFLICT" in stdout:
            raise GitCommandFailed(
                f"Merge conflict detected for branch '{target_branch}'.",
                FailureKind.MERGE_CONFLICT,
                context=res.combined_output(),
                conflicts=parse_merge_conflicts(stdout),
            )
        raise GitCommandFailed(
            f"Merge failed for branch '{target_branch}'.",
            FailureKind.MERGE_FAILED,
            context=res.combined_output(),
        )

    async def push(self, branch: str) -> str:
        res = await self.runner.run(["push", "origin", branch])
        if res.is_failed():
            raise GitCommandFailed(
                f"Failed to push the '{branch}' branch.",
                FailureKind.PUSH_FAILED,
                context=res.combined_output(),
            )
        return res.combined_output()

    async def get_original_branch(self) -> str:
        res = await self.runner.run(["branch", "--show-current"])
        return res.trimmed_stdout()

    async def get_local_branches(self) -> list[str]:
        """Local branch names, most recently committed first."""
        res = await self.runner.run(
            [
                "for-each-ref",
                "--sort=-committerdate",
                "--format=%(refname:short)",
                "refs/heads/",
            ]
        )
        return parse_branch_list(res.stdout)

    async def check_branch_exists(self, branch: str) -> None:
        res = await self.runner.run(["rev-parse", "--verify", branch])
        if res.is_failed():
            raise GitCommandFailed(
                f"The '{branch}' branch does not exist.",
                FailureKind.BRANCH_NOT_FOUND,
                context=res.combined_output(),
            )

    async def is_repository(self) -> bool:
        res = await self.runner.run(["rev-parse", "--is-inside-work-tree"])
        return not res.is_failed()

    async def ensure_repository(self) -> None:
        if not await self.is_repository():
            raise GitCommandFailed(
                "The current directory is not a git repository.",
                FailureKind.NOT_A_REPOSITORY,
            )
