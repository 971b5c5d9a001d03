from __future__ import annotations

from typing import Any, Awaitable, Callable

from ..core.errors import GitCommandFailed, InvalidBranchNameError
from ..core.git_runner import GitRunner, GitRunnerConfig
from ..core.operations import GitOperations
from ..core.security import resolve_root


_DEFAULT_CFG = GitRunnerConfig(timeout_s=None, max_output_chars=200_000)


def make_runner(root: str = ".") -> GitRunner:
    return GitRunner(root=resolve_root(root), config=_DEFAULT_CFG)


def make_operations(root: str = ".") -> GitOperations:
    return GitOperations(make_runner(root))


def clip_output(text: str | None, max_chars: int = _DEFAULT_CFG.max_output_chars) -> str | None:
    """
    Output ceiling for tool payloads. Keeps the tail: git prints the
    outcome (errors, "Automatic merge failed", push summary) last.
    """
    if text is None:
        return None
    max_chars = max(1, int(max_chars))
    if len(text) <= max_chars:
        return text
    return "...[truncated]\n" + text[-max_chars:]


async def as_result(call: Callable[[], Awaitable[dict[str, Any]]]) -> dict[str, Any]:
    """
    Run a tool body and turn classified failures into an error payload.
    Launch failures and invalid roots still raise.
    """
    try:
        body = await call()
    except GitCommandFailed as e:
        error = e.to_dict()
        error["context"] = clip_output(error["context"])
        return {"ok": False, "error": error}
    except InvalidBranchNameError as e:
        return {"ok": False, "error": {"kind": "invalid-branch-name", "message": str(e)}}
    return {"ok": True, **body}
