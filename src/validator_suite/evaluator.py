"""Turn check findings into Validations and FileResults."""

import logging
from typing import Any, Callable, Optional, Union

from .checks import Check, CheckKind
from .models import FileResult, Finding, Severity, Status, Validation
from .scorer import dedupe, roll_up

logger = logging.getLogger(__name__)

FILE_ACCESS_CHECK = "File Access"
DIRECTORY_ACCESS_CHECK = "Directory Access"


def check_status(kind: CheckKind, findings: list[Finding]) -> Status:
    """Derive a check's status from its findings.

    No findings passes. Hard checks fail on any finding, advisory checks
    warn, and graded checks fail only when a HIGH finding is present.
    """
    if not findings:
        return Status.PASS
    if kind == CheckKind.HARD:
        return Status.FAIL
    if kind == CheckKind.GRADED and any(f.severity == Severity.HIGH for f in findings):
        return Status.FAIL
    return Status.WARNING


def _format(
    template: Union[str, Callable, None],
    findings: list[Finding],
    metrics: dict,
) -> Optional[str]:
    if template is None:
        return None
    if callable(template):
        return template(findings, metrics)
    items = ", ".join(dict.fromkeys(f.excerpt for f in findings))
    return template.format(count=len(findings), items=items, **metrics)


def run_check(check: Check, subject: Any, path: str) -> Validation:
    findings = check.detect(subject, path)
    metrics = check.measure(subject, path) if check.measure else {}
    status = check_status(check.kind, findings)
    message = _format(check.passed_message if status == Status.PASS else check.issue_message, findings, metrics) or ""
    return Validation(
        name=check.name,
        status=status,
        message=message,
        findings=findings,
        recommendation=None if status == Status.PASS else _format(check.recommendation, findings, metrics),
        evidence=check.evidence(subject, path) if check.evidence else [],
        metrics=metrics,
    )


def build_file_result(path: str, validations: list[Validation]) -> FileResult:
    return FileResult(
        path=path,
        status=roll_up(v.status for v in validations),
        validations=validations,
        recommendations=dedupe(v.recommendation for v in validations),
    )


def evaluate(checks: list[Check], subject: Any, path: str) -> FileResult:
    """Run every applicable check against one subject.

    Args:
        checks: Ordered catalog for the validator.
        subject: File content, or a project snapshot for project-level validators.
        path: Relative path reported on the FileResult.

    Returns:
        FileResult with one Validation per applicable check, in catalog order.
    """
    validations = [run_check(check, subject, path) for check in checks if check.applies_to(subject, path)]
    return build_file_result(path, validations)


def unreadable_result(path: str, reason: str, check_name: str = FILE_ACCESS_CHECK) -> FileResult:
    """FileResult for a file or directory that could not be analyzed."""
    logger.warning(f"Skipping {path}: {reason}")
    validation = Validation(
        name=check_name,
        status=Status.WARNING,
        message=f"Could not analyze {'directory' if check_name == DIRECTORY_ACCESS_CHECK else 'file'}: {reason}",
        recommendation=None,
    )
    return build_file_result(path, [validation])
