"""Shared fixtures: temporary project trees and git repositories."""

import tempfile
from pathlib import Path

import pytest
from git import Repo

from validator_suite.config import EngineConfig


def write_files(root: Path, files: dict[str, str]) -> Path:
    """Create ``files`` (relative path -> content) under ``root``."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config():
    """Single-worker config so file order is deterministic."""
    return EngineConfig(max_workers=1)


def commit_file(repo: Repo, rel: str, content: str, message: str) -> None:
    path = Path(repo.working_tree_dir) / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    repo.index.add([rel])
    repo.index.commit(message)


@pytest.fixture
def git_repo(temp_dir):
    """Repository on ``main`` with one conventional commit."""
    repo = Repo.init(temp_dir)
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
    repo.git.symbolic_ref("HEAD", "refs/heads/main")
    commit_file(repo, "README.md", "# Project\n", "chore: initial commit")
    yield repo
    repo.close()
