"""Git access: repository snapshots for branch checks and remote clones."""

import logging
import shutil
import tempfile
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, Optional

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from .checks.branch import MAX_SUBJECT_LENGTH, CommitInfo, GitSnapshot
from .errors import PreconditionError

logger = logging.getLogger(__name__)


def open_repo(root: Path) -> Repo:
    """Open the repository rooted at ``root``.

    Raises:
        PreconditionError: If ``root`` has no git metadata.
    """
    try:
        return Repo(root)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise PreconditionError(f"Not a Git repository: {root}") from e


def _commit_info(commit) -> CommitInfo:
    return CommitInfo(
        sha=commit.hexsha[:7],
        subject=commit.summary if isinstance(commit.summary, str) else commit.summary.decode("utf-8", "replace"),
        is_merge=len(commit.parents) > 1,
    )


def _commits(repo: Repo, rev: Optional[str], depth: int, **kwargs) -> list[CommitInfo]:
    try:
        return [_commit_info(c) for c in repo.iter_commits(rev, max_count=depth, **kwargs)]
    except (GitCommandError, ValueError) as e:
        logger.warning(f"Could not read commits for {rev or 'HEAD'}: {e}")
        return []


def read_git_snapshot(
    root: Path,
    specs: dict[str, str],
    stale_after_days: int = 30,
    depth: int = 10,
    now: Optional[datetime] = None,
    max_subject_length: int = MAX_SUBJECT_LENGTH,
) -> GitSnapshot:
    """Collect branch and commit facts for the branch-strategy checks."""
    repo = open_repo(root)
    now = now or datetime.now(timezone.utc)

    try:
        current = repo.active_branch.name
    except TypeError:
        current = "HEAD"

    local = sorted(head.name for head in repo.heads)
    remote = sorted({
        ref.remote_head
        for r in repo.remotes
        for ref in r.refs
        if ref.remote_head != "HEAD"
    })

    ages = {}
    for head in repo.heads:
        try:
            ages[head.name] = (now - head.commit.committed_datetime).days
        except ValueError as e:
            logger.warning(f"Could not read last commit of {head.name}: {e}")

    main = next((name for name in ("main", "master") if name in local or name in remote), None)
    has_history = repo.head.is_valid()

    return GitSnapshot(
        current_branch=current,
        local_branches=local,
        remote_branches=remote,
        branch_ages=ages,
        recent_commits=_commits(repo, None, depth) if has_history else [],
        main_branch=main,
        main_commits=_commits(repo, main, depth, first_parent=True) if main in local else [],
        specs=specs,
        stale_after_days=stale_after_days,
        max_subject_length=max_subject_length,
    )


def clone_repo(repo_url: str) -> Path:
    """Clone a git repository to a temporary directory.

    Branch checks need every branch, so the clone is not shallow.
    """
    temp_path = Path(tempfile.mkdtemp(prefix="validator_suite_"))
    try:
        Repo.clone_from(repo_url, temp_path)
    except GitCommandError:
        cleanup_repo(temp_path)
        raise
    return temp_path


def cleanup_repo(repo_path: Path) -> None:
    if repo_path.exists():
        shutil.rmtree(repo_path, ignore_errors=True)


@contextmanager
def cloned_repo(repo_url: str) -> Generator[Path, None, None]:
    """Context manager for cloning and auto-cleanup of a repository.

    Args:
        repo_url: URL of the repository to clone.

    Yields:
        Path to the cloned repository.
    """
    repo_path = clone_repo(repo_url)
    try:
        yield repo_path
    finally:
        cleanup_repo(repo_path)
