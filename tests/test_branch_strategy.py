"""Tests for branch strategy checks and the git-backed validator."""

import pytest
from git import Repo

from validator_suite.checks.branch import (
    CommitInfo,
    GitSnapshot,
    find_commit_issues,
    find_feature_branch_issues,
    find_protection_issues,
    find_spec_alignment_issues,
    find_structure_issues,
    is_valid_branch_name,
    suggest_branch_name,
)
from validator_suite.errors import PreconditionError
from validator_suite.models import Severity, Status
from validator_suite.orchestrator import Orchestrator
from validator_suite.validators import BranchStrategyValidator

from .conftest import commit_file, write_files


def _validation(result, name):
    return next((v for v in result.files[0].validations if v.name == name), None)


class TestBranchNames:
    """Test branch naming rules."""

    @pytest.mark.parametrize("name", ["main", "develop", "feature/user-login", "hotfix/crash-on-start", "release/1.2.0"])
    def test_valid_names(self, name):
        assert is_valid_branch_name(name)

    @pytest.mark.parametrize("name", ["MyBranch", "feature/User_Login", "wip", "feat/login"])
    def test_invalid_names(self, name):
        assert not is_valid_branch_name(name)

    def test_suggestion(self):
        assert suggest_branch_name("feat/User_Login") == "feature/user-login"
        assert suggest_branch_name("___") == "feature/work"


class TestSnapshotChecks:
    """Test checks over hand-built git snapshots."""

    def test_commit_messages(self):
        snapshot = GitSnapshot(
            current_branch="feature/login",
            recent_commits=[
                CommitInfo("aaa1111", "feat(auth): add login form"),
                CommitInfo("bbb2222", "fixed stuff"),
                CommitInfo("ccc3333", "Merge branch 'main' into feature/login", is_merge=True),
            ],
        )
        rule_types = [f.rule_type for f in find_commit_issues(snapshot, ".")]
        assert rule_types == ["Nonconventional Commit Message", "Merge Commit On Feature Branch"]

    def test_subject_length_limit(self):
        commits = [CommitInfo("aaa1111", "feat: " + "x" * 60)]
        default = GitSnapshot(current_branch="main", recent_commits=commits)
        strict = GitSnapshot(current_branch="main", recent_commits=commits, max_subject_length=50)

        assert find_commit_issues(default, ".") == []
        findings = find_commit_issues(strict, ".")
        assert [f.rule_type for f in findings] == ["Long Commit Subject"]
        assert findings[0].excerpt == "aaa1111 subject is 66 chars (max 50)"

    def test_direct_commits_after_merge_workflow(self):
        snapshot = GitSnapshot(
            current_branch="main",
            main_branch="main",
            main_commits=[
                CommitInfo("aaa1111", "fix: hotpatch"),
                CommitInfo("bbb2222", "Merge pull request #3", is_merge=True),
                CommitInfo("ccc3333", "feat: earlier"),
            ],
        )
        findings = find_protection_issues(snapshot, ".")
        assert [f.excerpt for f in findings] == ["aaa1111 fix: hotpatch"]
        assert findings[0].severity == Severity.MEDIUM

    def test_linear_history_is_not_flagged(self):
        snapshot = GitSnapshot(
            current_branch="main",
            main_branch="main",
            main_commits=[CommitInfo("aaa1111", "feat: one"), CommitInfo("bbb2222", "feat: two")],
        )
        assert find_protection_issues(snapshot, ".") == []

    def test_stale_and_untracked_branches(self):
        snapshot = GitSnapshot(
            current_branch="main",
            local_branches=["feature/old", "main"],
            remote_branches=["main"],
            branch_ages={"feature/old": 45, "main": 90},
        )
        rule_types = [f.rule_type for f in find_structure_issues(snapshot, ".")]
        assert rule_types == ["Untracked Branch", "Stale Branch"]

    def test_feature_branches_map_to_specs(self):
        snapshot = GitSnapshot(
            current_branch="main",
            local_branches=["feature/password-reset", "feature/dark-mode", "main"],
            specs={"2024-05-01-password-reset": "## Overview\n"},
        )
        findings = find_feature_branch_issues(snapshot, ".")
        assert [f.excerpt for f in findings] == ["feature/dark-mode"]

    def test_active_spec_without_branch(self):
        snapshot = GitSnapshot(
            current_branch="main",
            local_branches=["main"],
            specs={
                "2024-05-01-password-reset": "> Status: Active\n",
                "2024-01-01-old-thing": "> Status: Completed\n",
            },
        )
        findings = find_spec_alignment_issues(snapshot, ".")
        assert [f.excerpt for f in findings] == [
            "2024-05-01-password-reset (expected feature/password-reset)",
        ]


class TestBranchStrategyValidator:
    """Test the validator against real repositories."""

    def test_not_a_repository(self, temp_dir, config):
        write_files(temp_dir, {"app.py": "x = 1\n"})
        with pytest.raises(PreconditionError, match="Not a Git repository"):
            BranchStrategyValidator(config).run(str(temp_dir))

    def test_orchestrator_records_failed_validator(self, temp_dir, config):
        write_files(temp_dir, {"app.py": "x = 1\n"})
        orchestrator = Orchestrator([BranchStrategyValidator(config)], config)
        result = orchestrator.run_validator("branch-strategy", str(temp_dir))

        assert result.overall_status == Status.FAIL
        assert result.score == 0
        assert "Not a Git repository" in result.error

    def test_healthy_repository(self, git_repo, config):
        result = BranchStrategyValidator(config).run(git_repo.working_tree_dir)

        assert result.overall_status == Status.PASS
        assert result.score == 100
        assert [v.name for v in result.files[0].validations] == [
            "Branch Naming",
            "Branch Structure",
            "Commit History",
            "Main Branch Protection",
        ]

    def test_bad_branch_and_commit(self, git_repo, config):
        git_repo.create_head("MyBranch")
        commit_file(git_repo, "app.py", "x = 1\n", "fixed stuff")
        result = BranchStrategyValidator(config).run(git_repo.working_tree_dir)

        naming = _validation(result, "Branch Naming")
        assert naming.status == Status.WARNING
        assert naming.findings[0].excerpt == "MyBranch (suggest feature/mybranch)"
        assert _validation(result, "Commit History").status == Status.WARNING
        assert result.score == 80

    def test_missing_main_branch_fails(self, temp_dir, config):
        repo = Repo.init(temp_dir)
        with repo.config_writer() as writer:
            writer.set_value("user", "name", "Test User")
            writer.set_value("user", "email", "test@example.com")
        repo.git.symbolic_ref("HEAD", "refs/heads/trunk")
        commit_file(repo, "README.md", "# Project\n", "chore: initial commit")
        result = BranchStrategyValidator(config).run(str(temp_dir))
        repo.close()

        protection = _validation(result, "Main Branch Protection")
        assert protection.status == Status.FAIL
        assert protection.message == "No main or master branch found"
        assert result.overall_status == Status.FAIL
