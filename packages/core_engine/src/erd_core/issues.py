from dataclasses import dataclass
from typing import Dict, Iterable, List


@dataclass(frozen=True)
class Issue:
    severity: str
    code: str
    message: str
    path: str = "/"

    def to_dict(self) -> Dict[str, str]:
        return {
            "severity": self.severity,
            "code": self.code,
            "message": self.message,
            "path": self.path,
        }


def has_errors(issues: Iterable[Issue]) -> bool:
    return any(issue.severity == "error" for issue in issues)


def errors_only(issues: Iterable[Issue]) -> List[Issue]:
    return [issue for issue in issues if issue.severity == "error"]


def to_lines(issues: List[Issue]) -> List[str]:
    lines = []
    for issue in issues:
        lines.append(
            f"[{issue.severity.upper()}] {issue.code} {issue.path}: {issue.message}"
        )
    return lines
