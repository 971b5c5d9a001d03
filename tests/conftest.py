from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Iterable

import pytest

from branch_merge_mcp.core.models import ProcessResult


def _run(cmd: list[str], cwd: Path) -> str:
    out = subprocess.check_output(
        cmd,
        cwd=str(cwd),
        stderr=subprocess.STDOUT,
        text=True,
        encoding="utf-8",
        errors="replace",
    )
    return out.strip()


def _commit_file(repo: Path, relpath: str, content: str, msg: str) -> None:
    p = repo / relpath
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding="utf-8")
    _run(["git", "add", "-A"], repo)
    _run(["git", "commit", "-m", msg], repo)


class FakeRunner:
    """
    In-memory CommandRunner: returns scripted results keyed by argv tokens
    and records every call. Unscripted commands succeed with empty output,
    except that an unscripted checkout moves `branch` and an unscripted
    `branch --show-current` reports it.
    """

    def __init__(self, responses: dict[tuple[str, ...], ProcessResult] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[list[str]] = []
        self.branch = "main"

    def on(self, *args: str, exit_code: int = 0, stdout: str = "", stderr: str = "") -> "FakeRunner":
        self.responses[tuple(args)] = ProcessResult(exit_code=exit_code, stdout=stdout, stderr=stderr)
        return self

    async def run(self, args: Iterable[str | None]) -> ProcessResult:
        argv = [a for a in args if a]
        self.calls.append(argv)
        res = self.responses.get(tuple(argv))
        if res is None and argv[:1] == ["checkout"] and len(argv) == 2:
            self.branch = argv[1]
        if res is None and argv == ["branch", "--show-current"]:
            return ProcessResult(exit_code=0, stdout=self.branch + "\n", stderr="", argv=["git", *argv])
        if res is None:
            return ProcessResult(exit_code=0, stdout="", stderr="", argv=["git", *argv])
        return res

    def subcommands(self) -> list[str]:
        return [c[0] for c in self.calls if c]


@pytest.fixture()
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture()
def tmp_git_repo(tmp_path: Path) -> Path:
    """
    Creates a small deterministic git repo:
      - branch "main", 1 initial commit
      - known author identity
      - a couple of files + subdir
    """
    repo = tmp_path / "repo"
    repo.mkdir()

    _run(["git", "init"], repo)
    _run(["git", "symbolic-ref", "HEAD", "refs/heads/main"], repo)
    _run(["git", "config", "user.email", "ci@example.com"], repo)
    _run(["git", "config", "user.name", "CI"], repo)
    _run(["git", "config", "commit.gpgsign", "false"], repo)

    (repo / "README.md").write_text("# dummy\n", encoding="utf-8")
    (repo / "src").mkdir()
    (repo / "src" / "app.py").write_text("print('hi')\n", encoding="utf-8")

    _run(["git", "add", "-A"], repo)
    _run(["git", "commit", "-m", "initial"], repo)

    return repo


@pytest.fixture()
def repo_with_origin(tmp_path: Path, tmp_git_repo: Path) -> Path:
    """
    tmp_git_repo wired to a bare "origin" that already has "main" and
    "develop", plus a local "feature" branch (checked out) one commit ahead.
    """
    origin = tmp_path / "origin.git"
    origin.mkdir()
    _run(["git", "init", "--bare"], origin)

    repo = tmp_git_repo
    _run(["git", "remote", "add", "origin", str(origin)], repo)
    _run(["git", "branch", "develop"], repo)
    _run(["git", "push", "origin", "main", "develop"], repo)

    _run(["git", "checkout", "-b", "feature"], repo)
    _commit_file(repo, "feature.txt", "feature work\n", "add feature")
    return repo


@pytest.fixture()
def make_change(tmp_git_repo: Path):
    """
    Helper: make working tree dirty in a predictable way.
    """
    def _maker(relpath: str = "README.md", text: str = "changed\n") -> Path:
        p = tmp_git_repo / relpath
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
        return p
    return _maker
