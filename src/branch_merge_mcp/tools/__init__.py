from .merge_tools import (
    repo_info,
    local_branches,
    check_clean,
    branch_exists,
    merge_into,
)

__all__ = [
    "repo_info",
    "local_branches",
    "check_clean",
    "branch_exists",
    "merge_into",
]
