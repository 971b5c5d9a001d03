from __future__ import annotations

from pathlib import Path

from .errors import InvalidBranchNameError, InvalidRootError


def resolve_root(root: str | Path) -> Path:
    """Resolve and validate root directory for local-repo operations."""
    p = Path(root).expanduser().resolve()

    if not p.exists():
        raise InvalidRootError(f"Root does not exist: {p}")
    if not p.is_dir():
        raise InvalidRootError(f"Root is not a directory: {p}")

    return p


def validate_branch_name(name: str | None) -> str:
    """
    Reject branch tokens that git would read as something else.
    Argv is never shell-joined, so this only guards against option injection
    ("-x", "--upload-pack=...") and names git would split or refuse anyway.
    """
    s = (name or "").strip()
    if not s:
        raise InvalidBranchNameError("Branch name must not be empty.")
    if s.startswith("-"):
        raise InvalidBranchNameError(f"Branch name must not start with '-': {s!r}")
    if any(ch.isspace() for ch in s):
        raise InvalidBranchNameError(f"Branch name must not contain whitespace: {s!r}")
    return s
