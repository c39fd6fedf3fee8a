from pathlib import Path

from ..checks import Check, CheckKind
from ..checks.branch import (
    GitSnapshot,
    find_commit_issues,
    find_feature_branch_issues,
    find_naming_issues,
    find_protection_issues,
    find_spec_alignment_issues,
    find_structure_issues,
    has_feature_branches,
)
from ..checks.documentation import has_specs
from ..git_utils import read_git_snapshot
from .base import ProjectValidator
from .specs import read_spec_dirs


class BranchStrategyValidator(ProjectValidator):
    name = "branch-strategy"
    title = "Branch Strategy"
    tier = 2
    description = "Checks branch naming, branch hygiene, commit messages and spec/branch alignment"

    def build_checks(self) -> list[Check]:
        return [
            Check(
                name="Branch Naming",
                detect=find_naming_issues,
                recommendation="Rename branches to main, develop, feature/*, bugfix/*, hotfix/* or release/*",
                passed_message="All branches follow naming conventions",
                issue_message="Found {count} nonconforming branch name(s)",
            ),
            Check(
                name="Branch Structure",
                detect=find_structure_issues,
                recommendation="Push or delete untracked branches and clean up stale branches",
                passed_message="Branch structure is healthy",
                issue_message="Found {count} branch structure issue(s)",
            ),
            Check(
                name="Feature Branches",
                detect=find_feature_branch_issues,
                recommendation="Name feature branches after the spec they implement",
                passed_message="Feature branches map to specs",
                issue_message="Found {count} feature branch(es) without a matching spec",
                applies=has_feature_branches,
            ),
            Check(
                name="Commit History",
                detect=find_commit_issues,
                recommendation="Use conventional commit messages (type(scope): subject) under 72 characters",
                passed_message="Recent commits follow conventions",
                issue_message="Found {count} commit message issue(s)",
            ),
            Check(
                name="Main Branch Protection",
                detect=find_protection_issues,
                kind=CheckKind.GRADED,
                recommendation="Create a main branch and integrate changes through reviewed merges",
                passed_message="Main branch is only updated through merges",
                issue_message=lambda findings, metrics: (
                    "No main or master branch found"
                    if any(f.rule_type == "Missing Main Branch" for f in findings)
                    else f"Found {len(findings)} direct commit(s) to main"
                ),
            ),
            Check(
                name="Spec Branch Alignment",
                detect=find_spec_alignment_issues,
                recommendation="Create a feature branch for every active spec",
                passed_message="Active specs have branches",
                issue_message="Found {count} active spec(s) without a branch",
                applies=has_specs,
            ),
        ]

    def snapshot(self, root: Path) -> GitSnapshot:
        specs = {
            name: docs["spec.md"] or ""
            for name, docs in read_spec_dirs(root, self.config.max_file_bytes).items()
        }
        return read_git_snapshot(
            root,
            specs,
            stale_after_days=self.config.stale_branch_days,
            depth=self.config.commit_history_depth,
            max_subject_length=self.config.max_subject_length,
        )
