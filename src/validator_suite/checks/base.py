"""Check definitions shared by every rule catalog."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

from ..models import Finding, Severity

# A rule is (compiled pattern, rule type, severity).
Rule = tuple[re.Pattern, str, Severity]

# Message templates are format strings over count, items and metrics, or
# callables taking (findings, metrics).
Template = Union[str, Callable[[list[Finding], dict], Optional[str]]]


class CheckKind(str, Enum):
    HARD = "hard"          # any finding fails the check
    ADVISORY = "advisory"  # any finding warns
    GRADED = "graded"      # HIGH findings fail, anything else warns


@dataclass(frozen=True)
class Check:
    """One named, pure check.

    ``detect`` receives the subject (file content for file-level validators,
    a project snapshot for project-level ones) and the relative path, and
    returns findings. ``applies`` is the role predicate; a check whose
    predicate is false is left out of the results entirely.
    """

    name: str
    detect: Callable[[Any, str], list[Finding]]
    kind: CheckKind = CheckKind.ADVISORY
    recommendation: Optional[Template] = None
    passed_message: Template = "No issues found"
    issue_message: Template = "Found {count} issue(s)"
    applies: Optional[Callable[[Any, str], bool]] = None
    evidence: Optional[Callable[[Any, str], list[str]]] = None
    measure: Optional[Callable[[Any, str], dict[str, float]]] = None

    def applies_to(self, subject: Any, path: str) -> bool:
        return self.applies is None or self.applies(subject, path)


def line_of(content: str, offset: int) -> int:
    return content.count("\n", 0, offset) + 1


def line_text(content: str, offset: int) -> str:
    start = content.rfind("\n", 0, offset) + 1
    end = content.find("\n", offset)
    return content[start:end if end != -1 else len(content)].strip()


def is_comment_line(text: str) -> bool:
    stripped = text.lstrip()
    return stripped.startswith(("#", "//", "*", "/*", "<!--"))


def match_rules(
    content: str,
    rules: list[Rule],
    per_line: bool = False,
    skip_comments: bool = True,
    excerpt: Optional[Callable[[re.Match], str]] = None,
    limit: int = 120,
) -> list[Finding]:
    """Apply pattern rules to content.

    Findings are de-duplicated on (line, rule type), or on line alone when
    ``per_line`` is set so overlapping patterns for one check report once.
    """
    findings: list[Finding] = []
    seen: set = set()
    for pattern, rule_type, severity in rules:
        for match in pattern.finditer(content):
            line = line_of(content, match.start())
            if skip_comments and is_comment_line(line_text(content, match.start())):
                continue
            key = line if per_line else (line, rule_type)
            if key in seen:
                continue
            seen.add(key)
            text = excerpt(match) if excerpt else match.group(0)
            findings.append(Finding(
                rule_type=rule_type,
                excerpt=text.strip()[:limit],
                line=line,
                severity=severity,
            ))
    findings.sort(key=lambda f: f.line)
    return findings


def signals(content: str, patterns: list[tuple[re.Pattern, str]]) -> list[str]:
    """Names of the positive-signal patterns present in content."""
    return [label for pattern, label in patterns if pattern.search(content)]


def project_finding(rule_type: str, excerpt: str, severity: Severity = Severity.MEDIUM, line: int = 0) -> Finding:
    return Finding(rule_type=rule_type, excerpt=excerpt, line=line, severity=severity)
