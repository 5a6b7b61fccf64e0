"""Issue records shared by compiler errors and CLI output."""

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class Issue:
    severity: str
    code: str
    message: str
    path: str = "/"


def to_lines(issues: Iterable[Issue]) -> List[str]:
    return [
        f"[{issue.severity.upper()}] {issue.code}: {issue.message} ({issue.path})"
        for issue in issues
    ]
