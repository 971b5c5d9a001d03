from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProcessResult:
    exit_code: int
    stdout: str
    stderr: str
    argv: list[str] = field(default_factory=list)
    duration_ms: int = 0
    timed_out: bool = False

    def is_failed(self) -> bool:
        return self.exit_code != 0

    def combined_output(self) -> str:
        if self.stderr:
            return self.stdout + self.stderr
        return self.stdout

    def trimmed_stdout(self) -> str:
        return self.stdout.strip()
