from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class PorcelainEntry:
    xy: str
    path: str
    orig_path: str | None = None


def parse_status_porcelain(lines: Iterable[str]) -> list[PorcelainEntry]:
    """
    Parses `git status --porcelain` (v1) lines:
      XY <path>
      XY <path> -> <path2>   (rename)
    """
    out: list[PorcelainEntry] = []
    for raw in lines:
        line = raw.rstrip("\n")
        if not line:
            continue
        xy = line[:2]
        rest = line[3:] if len(line) >= 4 else ""
        if " -> " in rest:
            a, b = rest.split(" -> ", 1)
            out.append(PorcelainEntry(xy=xy, path=b, orig_path=a))
        else:
            out.append(PorcelainEntry(xy=xy, path=rest))
    return out


def parse_branch_list(stdout: str) -> list[str]:
    """
    Parses `git for-each-ref --format=%(refname:short)` output.
    Order is preserved; blank lines (trailing newline) are dropped.
    """
    out: list[str] = []
    for raw in stdout.split("\n"):
        name = raw.strip()
        if name:
            out.append(name)
    return out


# "CONFLICT (content): Merge conflict in src/app.py"
# "CONFLICT (modify/delete): src/app.py deleted in HEAD and modified in feature. ..."
_CONFLICT_IN = re.compile(r"^CONFLICT \([^)]*\): Merge conflict in (?P<path>.+)$")
_CONFLICT_OTHER = re.compile(r"^CONFLICT \([^)]*\): (?P<path>\S+)")


def parse_merge_conflicts(stdout: str) -> list[str]:
    """
    Extract conflicting paths from `git merge` output (LC_ALL=C wording).
    Unrecognised CONFLICT lines are skipped.
    """
    out: list[str] = []
    for raw in stdout.splitlines():
        line = raw.strip()
        if not line.startswith("CONFLICT"):
            continue
        m = _CONFLICT_IN.match(line) or _CONFLICT_OTHER.match(line)
        if m and m.group("path") not in out:
            out.append(m.group("path"))
    return out
