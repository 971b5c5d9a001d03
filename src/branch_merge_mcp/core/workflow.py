from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from .errors import FailureKind, GitCommandFailed
from .operations import GitOperations
from .security import validate_branch_name

logger = logging.getLogger(__name__)


@dataclass
class TargetOutcome:
    branch: str
    steps: dict[str, str] = field(default_factory=dict)
    pushed: bool = False


@dataclass
class MergeReport:
    source: str
    targets: list[TargetOutcome] = field(default_factory=list)
    returned_to_source: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "targets": [
                {"branch": t.branch, "pushed": t.pushed, "steps": dict(t.steps)}
                for t in self.targets
            ],
            "returned_to_source": self.returned_to_source,
        }


class MergeWorkflow:
    """
    verify-clean -> checkout target -> fetch -> reset -> merge source -> push,
    once per target branch.

    The first failure propagates and nothing after it runs. The only cleanup
    is the abort done inside GitOperations.merge.
    """

    def __init__(self, operations: GitOperations) -> None:
        self.ops = operations

    async def _switch_to(self, branch: str) -> str:
        # checkout itself is never classified; verify HEAD before anything resets it
        output = await self.ops.checkout(branch)
        current = await self.ops.get_original_branch()
        if current != branch:
            raise GitCommandFailed(
                f"Failed to check out the '{branch}' branch (still on '{current}').",
                FailureKind.CHECKOUT_FAILED,
                context=output,
            )
        return output

    async def run(
        self,
        targets: Iterable[str],
        *,
        source: str | None = None,
        push: bool = True,
        return_to_source: bool = True,
    ) -> MergeReport:
        target_list = [validate_branch_name(t) for t in targets]
        if not target_list:
            raise ValueError("At least one target branch is required.")
        if source is not None:
            source = validate_branch_name(source)

        await self.ops.ensure_repository()
        await self.ops.check_uncommitted()

        if source is None:
            source = validate_branch_name(await self.ops.get_original_branch())
        if source in target_list:
            raise ValueError(f"Cannot merge '{source}' into itself.")

        for branch in (source, *target_list):
            await self.ops.check_branch_exists(branch)

        report = MergeReport(source=source)
        for target in target_list:
            logger.info("Merging '%s' into '%s'", source, target)
            outcome = TargetOutcome(branch=target)
            outcome.steps["checkout"] = await self._switch_to(target)
            outcome.steps["fetch"] = await self.ops.fetch(target)
            outcome.steps["reset"] = await self.ops.reset_hard(target)
            outcome.steps["merge"] = await self.ops.merge(source, target)
            if push:
                outcome.steps["push"] = await self.ops.push(target)
                outcome.pushed = True
            report.targets.append(outcome)

        if return_to_source:
            await self.ops.checkout(source)
            report.returned_to_source = True

        return report
