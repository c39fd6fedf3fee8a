import json
import logging
import os
import tomllib
from pathlib import Path
from typing import Optional

from ..checks import Check, CheckKind
from ..checks.testing import (
    TestingSnapshot,
    coverage_message,
    coverage_metrics,
    find_naming_issues,
    find_runner_issues,
    find_structure_issues,
    find_tdd_gaps,
    find_type_imbalance,
    has_many_tests,
    has_measurable_coverage,
    has_tasks,
    has_tests,
    make_coverage_check,
    runner_message,
    type_metrics,
)
from ..file_walker import CODE_EXTENSIONS, is_config_file, is_test_file, read_optional, relative_path
from ..models import AggregateResult, FileResult
from .. import scorer
from .base import ProjectValidator
from .specs import read_spec_dirs

logger = logging.getLogger(__name__)

COVERAGE_CHECK = "Test Coverage"

MANIFESTS = ("package.json", "pyproject.toml", "setup.py", "setup.cfg", "requirements.txt")

# Tooling entry points that are not expected to have their own tests.
NON_SOURCE_FILES = frozenset({"setup.py", "conftest.py", "noxfile.py", "manage.py"})


def read_coverage_report(root: Path, max_bytes: int) -> Optional[float]:
    """Line coverage from a coverage.py JSON or istanbul summary, if one exists."""
    sources = (
        (root / "coverage.json", lambda d: d["totals"]["percent_covered"]),
        (root / "coverage" / "coverage-summary.json", lambda d: d["total"]["lines"]["pct"]),
    )
    for path, extract in sources:
        raw = read_optional(path, max_bytes)
        if raw is None:
            continue
        try:
            return float(extract(json.loads(raw)))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable coverage report {path}: {e}")
    return None


class TestingCompletenessValidator(ProjectValidator):
    __test__ = False

    name = "testing"
    title = "Testing Completeness"
    tier = 2
    description = "Checks test coverage, structure, TDD workflow, test types, naming and runner setup"

    def build_checks(self) -> list[Check]:
        cfg = self.config
        return [
            Check(
                name=COVERAGE_CHECK,
                detect=make_coverage_check(cfg.coverage_pass, cfg.coverage_warning),
                kind=CheckKind.GRADED,
                recommendation=f"Add tests for uncovered files to reach {cfg.coverage_pass:g}% coverage target",
                passed_message=coverage_message,
                issue_message=coverage_message,
                applies=has_measurable_coverage,
                measure=coverage_metrics,
            ),
            Check(
                name="Test Structure",
                detect=find_structure_issues,
                recommendation="Organize tests with describe/it blocks or test functions and shared setup",
                passed_message="Test files are well structured",
                issue_message="Found {count} test structure issue(s)",
                applies=has_tests,
            ),
            Check(
                name="TDD Approach",
                detect=find_tdd_gaps,
                recommendation="Start each task with writing tests and end with verifying all tests pass",
                passed_message="Tasks follow a test-first workflow",
                issue_message="Found {count} TDD workflow gap(s)",
                applies=has_tasks,
            ),
            Check(
                name="Test Types",
                detect=find_type_imbalance,
                recommendation="Balance unit tests with integration tests",
                passed_message="Unit {unit:.0f}, integration {integration:.0f}, e2e {e2e:.0f}",
                issue_message="Unbalanced test types: {items}",
                applies=has_many_tests,
                measure=type_metrics,
            ),
            Check(
                name="Test Naming",
                detect=find_naming_issues,
                recommendation="Use descriptive test names and standard test file suffixes",
                passed_message="Tests follow naming conventions",
                issue_message="Found {count} test naming issue(s)",
                applies=has_tests,
            ),
            Check(
                name="Test Runner",
                detect=find_runner_issues,
                recommendation="Configure a test script and test framework in the project manifest",
                passed_message="Test runner is configured",
                issue_message=runner_message,
            ),
        ]

    def snapshot(self, root: Path) -> TestingSnapshot:
        max_bytes = self.config.max_file_bytes
        sources, tests = [], {}
        for path in self.project_files(root, CODE_EXTENSIONS):
            rel = relative_path(path, root)
            if is_test_file(rel):
                content = read_optional(path, max_bytes)
                if content is not None:
                    tests[rel] = content
            elif not is_config_file(rel) and os.path.basename(rel) not in NON_SOURCE_FILES:
                sources.append(rel)

        root_files = sorted(os.listdir(root))
        manifest = next((m for m in MANIFESTS if m in root_files), None)

        package_json = None
        raw = read_optional(root / "package.json", max_bytes)
        if raw is not None:
            try:
                package_json = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("package.json is not valid JSON")
                package_json = {}
            if not isinstance(package_json, dict):
                package_json = {}

        pyproject = None
        raw = read_optional(root / "pyproject.toml", max_bytes)
        if raw is not None:
            try:
                pyproject = tomllib.loads(raw)
            except tomllib.TOMLDecodeError:
                logger.warning("pyproject.toml is not valid TOML")
                pyproject = {}

        tasks = {
            name: docs["tasks.md"]
            for name, docs in read_spec_dirs(root, max_bytes).items()
            if docs["tasks.md"] is not None
        }

        return TestingSnapshot(
            source_files=sorted(sources),
            test_files=tests,
            manifest=manifest,
            package_json=package_json,
            pyproject=pyproject,
            root_files=root_files,
            reported_coverage=read_coverage_report(root, max_bytes),
            tasks=tasks,
        )

    def aggregate(self, files: list[FileResult], partial: bool = False) -> AggregateResult:
        coverage = None
        for file_result in files:
            for validation in file_result.validations:
                if validation.name == COVERAGE_CHECK and "coverage_percent" in validation.metrics:
                    coverage = scorer.grade_coverage(validation.metrics["coverage_percent"], self.config)
        return scorer.aggregate(self.name, files, self.config, partial=partial, coverage=coverage)
