"""Version-control hygiene checks over a git snapshot."""

import re
from dataclasses import dataclass, field
from typing import Optional

from ..models import Finding, Severity
from .base import project_finding

BRANCH_PATTERNS = [
    re.compile(r"^(?:main|master|develop)$"),
    re.compile(r"^feature/[a-z0-9-]+$"),
    re.compile(r"^hotfix/[a-z0-9-]+$"),
    re.compile(r"^bugfix/[a-z0-9-]+$"),
    re.compile(r"^release/[a-z0-9.-]+$"),
]

PROTECTED_BRANCHES = ("main", "master", "develop")

CONVENTIONAL_COMMIT_RE = re.compile(r"^(?:feat|fix|docs|style|refactor|test|chore|perf|build|ci|revert)(?:\([^)]+\))?!?: .+")

_DATED_SPEC_RE = re.compile(r"^\d{4}-\d{2}-\d{2}-(.+)$")
_ACTIVE_STATUS_RE = re.compile(r"^\W*status\W*:?\W*(?:active|in progress)\b", re.IGNORECASE | re.MULTILINE)

MAX_SUBJECT_LENGTH = 72


@dataclass(frozen=True)
class CommitInfo:
    sha: str
    subject: str
    is_merge: bool = False


@dataclass(frozen=True)
class GitSnapshot:
    current_branch: str
    local_branches: list[str] = field(default_factory=list)
    remote_branches: list[str] = field(default_factory=list)
    branch_ages: dict[str, int] = field(default_factory=dict)
    recent_commits: list[CommitInfo] = field(default_factory=list)
    main_branch: Optional[str] = None
    main_commits: list[CommitInfo] = field(default_factory=list)
    specs: dict[str, str] = field(default_factory=dict)
    stale_after_days: int = 30
    max_subject_length: int = MAX_SUBJECT_LENGTH


def is_valid_branch_name(name: str) -> bool:
    return any(p.match(name) for p in BRANCH_PATTERNS)


def suggest_branch_name(name: str) -> str:
    """Propose a conforming feature branch name."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.split("/")[-1].lower()).strip("-")
    return f"feature/{slug or 'work'}"


def spec_slug(spec_dir: str) -> str:
    match = _DATED_SPEC_RE.match(spec_dir)
    return match.group(1) if match else spec_dir


def find_naming_issues(snapshot: GitSnapshot, path: str) -> list[Finding]:
    return [
        project_finding("Nonconforming Branch Name", f"{name} (suggest {suggest_branch_name(name)})", Severity.LOW)
        for name in snapshot.local_branches
        if not is_valid_branch_name(name)
    ]


def find_structure_issues(snapshot: GitSnapshot, path: str) -> list[Finding]:
    findings = []
    if snapshot.remote_branches:
        for name in snapshot.local_branches:
            if name not in snapshot.remote_branches and name not in PROTECTED_BRANCHES:
                findings.append(project_finding("Untracked Branch", f"{name} has no remote counterpart", Severity.LOW))
    for name, age in sorted(snapshot.branch_ages.items()):
        if name not in PROTECTED_BRANCHES and age > snapshot.stale_after_days:
            findings.append(project_finding("Stale Branch", f"{name} last updated {age} days ago", Severity.LOW))
    return findings


def feature_branches(snapshot: GitSnapshot) -> list[str]:
    return [b for b in snapshot.local_branches if b.startswith("feature/")]


def has_feature_branches(snapshot: GitSnapshot, path: str) -> bool:
    return bool(feature_branches(snapshot))


def find_feature_branch_issues(snapshot: GitSnapshot, path: str) -> list[Finding]:
    if not snapshot.specs:
        return []
    slugs = [spec_slug(name) for name in snapshot.specs]
    findings = []
    for branch in feature_branches(snapshot):
        topic = branch.split("/", 1)[1]
        if not any(topic in slug or slug in topic for slug in slugs):
            findings.append(project_finding("Feature Branch Without Spec", branch, Severity.LOW))
    return findings


def find_commit_issues(snapshot: GitSnapshot, path: str) -> list[Finding]:
    findings = []
    on_feature = snapshot.current_branch.startswith("feature/")
    for commit in snapshot.recent_commits:
        if commit.is_merge:
            if on_feature:
                findings.append(project_finding("Merge Commit On Feature Branch", f"{commit.sha} {commit.subject}"[:120], Severity.LOW))
            continue
        if not CONVENTIONAL_COMMIT_RE.match(commit.subject):
            findings.append(project_finding("Nonconventional Commit Message", f"{commit.sha} {commit.subject}"[:120], Severity.LOW))
        if len(commit.subject) > snapshot.max_subject_length:
            findings.append(project_finding(
                "Long Commit Subject",
                f"{commit.sha} subject is {len(commit.subject)} chars (max {snapshot.max_subject_length})",
                Severity.LOW,
            ))
    return findings


def find_protection_issues(snapshot: GitSnapshot, path: str) -> list[Finding]:
    if snapshot.main_branch is None:
        return [project_finding("Missing Main Branch", "No main or master branch found", Severity.HIGH)]
    # Direct commits only count once the branch has adopted merge-based integration.
    direct = []
    for commit in snapshot.main_commits:
        if commit.is_merge:
            break
        direct.append(commit)
    if len(direct) == len(snapshot.main_commits):
        return []
    return [
        project_finding("Direct Commit To Main", f"{c.sha} {c.subject}"[:120], Severity.MEDIUM)
        for c in direct
    ]


def find_spec_alignment_issues(snapshot: GitSnapshot, path: str) -> list[Finding]:
    branches = snapshot.local_branches + snapshot.remote_branches
    findings = []
    for name, spec in sorted(snapshot.specs.items()):
        if not _ACTIVE_STATUS_RE.search(spec or ""):
            continue
        slug = spec_slug(name)
        if not any(slug in b for b in branches):
            findings.append(project_finding("Active Spec Without Branch", f"{name} (expected {suggest_branch_name(slug)})"))
    return findings
