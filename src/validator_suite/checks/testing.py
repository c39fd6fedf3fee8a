"""Test completeness checks over a project snapshot."""

import os
import re
from dataclasses import dataclass, field
from typing import Optional

from ..models import Finding, Severity
from .base import project_finding

_JS_TEST_CASE_RE = re.compile(r"\b(?:describe|it|test)\s*\(")
_PY_TEST_CASE_RE = re.compile(r"^\s*(?:async\s+)?def\s+test_\w+|^\s*class\s+Test\w*", re.MULTILINE)
_JS_SETUP_RE = re.compile(r"\b(?:beforeEach|beforeAll|afterEach|afterAll)\s*\(")
_JS_DESCRIPTION_RE = re.compile(r"\b(?:it|test)\s*\(\s*['\"`]([^'\"`]*)['\"`]")
_PY_TEST_NAME_RE = re.compile(r"^\s*(?:async\s+)?def\s+(test_\w*)", re.MULTILINE)
_TEST_NAME_RE = re.compile(r"(?:\.(?:test|spec)\.\w+|^test_\w+\.py|_test\.(?:py|go|js|ts)|_spec\.rb)$")
_TEST_STEM_RE = re.compile(r"(?:^test_|_test$|\.test$|\.spec$|_spec$|^test-|-test$)")

JS_FRAMEWORKS = ("jest", "mocha", "vitest", "jasmine", "ava", "@playwright/test", "cypress", "tap", "uvu")
JS_RUNNER_CONFIGS = ("jest.config", "vitest.config", ".mocharc", "playwright.config", "cypress.config", "karma.conf")
PY_RUNNER_CONFIGS = ("pytest.ini", "tox.ini", "conftest.py", "setup.cfg", "noxfile.py")

_HELPER_TEST_FILES = {"conftest.py", "__init__.py", "setup.js", "setup.ts", "helpers.js", "helpers.ts", "utils.py"}


@dataclass(frozen=True)
class TestingSnapshot:
    __test__ = False

    source_files: list[str] = field(default_factory=list)
    test_files: dict[str, str] = field(default_factory=dict)
    manifest: Optional[str] = None
    package_json: Optional[dict] = None
    pyproject: Optional[dict] = None
    root_files: list[str] = field(default_factory=list)
    reported_coverage: Optional[float] = None
    tasks: dict[str, str] = field(default_factory=dict)


def _stem(path: str) -> str:
    name = os.path.basename(path)
    while True:
        name, ext = os.path.splitext(name)
        if not ext:
            break
    return name.lower()


def _test_subject(path: str) -> str:
    return _TEST_STEM_RE.sub("", _stem(path))


def untested_sources(snapshot: TestingSnapshot) -> list[str]:
    subjects = {_test_subject(p) for p in snapshot.test_files}
    return [p for p in snapshot.source_files if _stem(p) not in subjects and _stem(p) not in {"__init__", "index"}]


def coverage_metrics(snapshot: TestingSnapshot, path: str = ".") -> dict[str, float]:
    candidates = [p for p in snapshot.source_files if _stem(p) not in {"__init__", "index"}]
    total = len(candidates)
    covered = total - len(untested_sources(snapshot))
    if snapshot.reported_coverage is not None:
        percent = snapshot.reported_coverage
    else:
        percent = 100.0 * covered / total if total else 0.0
    return {
        "coverage_percent": round(percent, 1),
        "covered_files": float(covered),
        "total_files": float(total),
        "from_report": 1.0 if snapshot.reported_coverage is not None else 0.0,
        "test_files": float(len(snapshot.test_files)),
    }


def has_measurable_coverage(snapshot: TestingSnapshot, path: str) -> bool:
    return snapshot.reported_coverage is not None or bool(snapshot.source_files)


def make_coverage_check(pass_at: float = 80, warn_at: float = 60):
    def find_coverage_gaps(snapshot: TestingSnapshot, path: str) -> list[Finding]:
        percent = coverage_metrics(snapshot)["coverage_percent"]
        if percent >= pass_at:
            return []
        severity = Severity.MEDIUM if percent >= warn_at else Severity.HIGH
        if snapshot.reported_coverage is not None:
            return [project_finding("Low Coverage", f"reported coverage {percent}% is below {pass_at}%", severity)]
        return [project_finding("Untested File", rel, severity) for rel in untested_sources(snapshot)]

    return find_coverage_gaps


def coverage_message(findings: list[Finding], metrics: dict) -> str:
    if metrics.get("from_report"):
        return f"Test coverage: {metrics['coverage_percent']}% (from coverage report)"
    return (
        f"Test coverage: {metrics['coverage_percent']}% "
        f"({int(metrics['covered_files'])}/{int(metrics['total_files'])} files)"
    )


def has_tests(snapshot: TestingSnapshot, path: str) -> bool:
    return bool(snapshot.test_files)


def _is_helper(rel: str) -> bool:
    return os.path.basename(rel) in _HELPER_TEST_FILES


def find_structure_issues(snapshot: TestingSnapshot, path: str) -> list[Finding]:
    findings = []
    for rel, content in sorted(snapshot.test_files.items()):
        if _is_helper(rel):
            continue
        is_python = rel.endswith(".py")
        pattern = _PY_TEST_CASE_RE if is_python else _JS_TEST_CASE_RE
        if not pattern.search(content):
            findings.append(project_finding("No Test Cases", rel))
        elif not is_python and len(content) > 500 and not _JS_SETUP_RE.search(content):
            findings.append(project_finding("No Setup Blocks", rel, Severity.LOW))
    return findings


def has_tasks(snapshot: TestingSnapshot, path: str) -> bool:
    return bool(snapshot.tasks)


def find_tdd_gaps(snapshot: TestingSnapshot, path: str) -> list[Finding]:
    findings = []
    for name, tasks in sorted(snapshot.tasks.items()):
        if not re.search(r"\bwrite (?:\w+ )?tests?\b", tasks, re.IGNORECASE):
            findings.append(project_finding("Tests Not Written First", f"{name}/tasks.md has no 'write tests' step"))
        if not re.search(r"\bverify (?:all )?(?:\w+ )?tests? pass", tasks, re.IGNORECASE):
            findings.append(project_finding("Tests Not Verified", f"{name}/tasks.md has no 'verify tests pass' step", Severity.LOW))
    return findings


def classify_tests(snapshot: TestingSnapshot) -> dict[str, int]:
    counts = {"unit": 0, "integration": 0, "e2e": 0}
    for rel in snapshot.test_files:
        lower = rel.lower()
        if any(k in lower for k in ("e2e", "end-to-end", "cypress", "playwright")):
            counts["e2e"] += 1
        elif "integration" in lower:
            counts["integration"] += 1
        elif not _is_helper(rel):
            counts["unit"] += 1
    return counts


def has_many_tests(snapshot: TestingSnapshot, path: str) -> bool:
    return len(snapshot.test_files) > 5


def find_type_imbalance(snapshot: TestingSnapshot, path: str) -> list[Finding]:
    counts = classify_tests(snapshot)
    findings = []
    if counts["unit"] == 0:
        findings.append(project_finding("Missing Unit Tests", "no unit tests found"))
    if counts["integration"] == 0:
        findings.append(project_finding("Missing Integration Tests", "no integration tests found", Severity.LOW))
    return findings


def type_metrics(snapshot: TestingSnapshot, path: str) -> dict[str, float]:
    return {k: float(v) for k, v in classify_tests(snapshot).items()}


def find_naming_issues(snapshot: TestingSnapshot, path: str) -> list[Finding]:
    findings = []
    for rel, content in sorted(snapshot.test_files.items()):
        if _is_helper(rel):
            continue
        if not _TEST_NAME_RE.search(os.path.basename(rel)):
            findings.append(project_finding("Nonstandard Test File Name", rel, Severity.LOW))
        names = _PY_TEST_NAME_RE.findall(content) if rel.endswith(".py") else _JS_DESCRIPTION_RE.findall(content)
        for name in names:
            if len(name.strip()) < 10:
                findings.append(project_finding("Vague Test Name", f"{rel}: '{name}'", Severity.LOW))
    return findings


def _js_runner_issues(package: dict, root_files: list[str]) -> list[Finding]:
    findings = []
    script = (package.get("scripts") or {}).get("test", "")
    if not script or "no test specified" in script:
        findings.append(project_finding("Missing Test Script", "package.json has no usable 'test' script"))
    deps = {**(package.get("dependencies") or {}), **(package.get("devDependencies") or {})}
    if not any(fw in deps for fw in JS_FRAMEWORKS):
        findings.append(project_finding("Missing Test Framework", "no test framework in package.json dependencies"))
    has_config = "jest" in package or any(f.startswith(JS_RUNNER_CONFIGS) for f in root_files)
    if not has_config:
        findings.append(project_finding("Missing Runner Config", "no test runner configuration file", Severity.LOW))
    return findings


def _py_runner_issues(snapshot: TestingSnapshot) -> list[Finding]:
    pyproject = snapshot.pyproject or {}
    tool = pyproject.get("tool") or {}
    project = pyproject.get("project") or {}
    declared = " ".join(project.get("dependencies") or [])
    for extra in (project.get("optional-dependencies") or {}).values():
        declared += " " + " ".join(extra)
    has_framework = "pytest" in tool or "pytest" in declared or any(f in PY_RUNNER_CONFIGS for f in snapshot.root_files)
    if has_framework:
        return []
    return [project_finding("Missing Test Framework", "no pytest configuration or dependency found")]


def find_runner_issues(snapshot: TestingSnapshot, path: str) -> list[Finding]:
    if snapshot.manifest is None:
        return [project_finding("Missing Manifest", "no package manifest found")]
    if snapshot.package_json is not None:
        return _js_runner_issues(snapshot.package_json, snapshot.root_files)
    return _py_runner_issues(snapshot)


def runner_message(findings: list[Finding], metrics: dict) -> str:
    if any(f.rule_type == "Missing Manifest" for f in findings):
        return "No package manifest found - cannot validate test runner setup"
    return f"Test runner setup incomplete: {len(findings)} issue(s)"
