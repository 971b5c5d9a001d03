from __future__ import annotations

from enum import Enum
from typing import Any, Iterable


class BranchMergeError(Exception):
    """Base error for the project."""


class InvalidRootError(BranchMergeError):
    pass


class InvalidBranchNameError(BranchMergeError):
    pass


class GitExecutionError(BranchMergeError):
    """git could not be launched at all (missing binary, bad cwd, spawn failure)."""


class FailureKind(str, Enum):
    UNCOMMITTED_CHANGES = "uncommitted-changes"
    FETCH_FAILED = "fetch-failed"
    RESET_FAILED = "reset-failed"
    MERGE_CONFLICT = "merge-conflict"
    MERGE_FAILED = "merge-failed"
    PUSH_FAILED = "push-failed"
    CHECKOUT_FAILED = "checkout-failed"
    BRANCH_NOT_FOUND = "branch-not-found"
    NOT_A_REPOSITORY = "not-a-repository"


class GitCommandFailed(BranchMergeError):
    """
    A git operation ran but its outcome was classified as a failure.

    `context` holds the captured process output for diagnosis.
    """

    def __init__(
        self,
        message: str,
        kind: FailureKind,
        context: str | None = None,
        conflicts: Iterable[str] = (),
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.context = context
        self.conflicts = tuple(conflicts)

    def __str__(self) -> str:
        if self.context:
            return f"{self.message}\n{self.context}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "context": self.context,
            "conflicts": list(self.conflicts),
        }
