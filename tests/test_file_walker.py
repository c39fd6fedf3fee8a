"""Tests for tree walking and bounded reads."""

import os

import pytest

from validator_suite.errors import UnreadableFileError
from validator_suite.file_walker import (
    FileTree,
    is_config_file,
    is_env_file,
    is_test_file,
    read_optional,
    read_text_bounded,
    relative_path,
)

from .conftest import write_files


class TestFileRoles:
    """Test path role predicates."""

    def test_test_file_indicators(self):
        assert is_test_file("tests/test_app.py")
        assert is_test_file("src/app.test.js")
        assert is_test_file("src/__tests__/button.jsx")
        assert is_test_file("pkg/server_test.go")
        assert not is_test_file("src/app.py")
        assert not is_test_file("src/contest.py")

    def test_env_and_config_files(self):
        assert is_env_file(".env")
        assert is_env_file("deploy/.env.production")
        assert not is_env_file("env.py")
        assert is_config_file("config/app.config.js")
        assert is_config_file("setup.cfg")
        assert is_config_file("settings.py")
        assert not is_config_file("src/app.py")


class TestFileTree:
    """Test candidate file listing."""

    def test_filters_by_extension_and_name(self, temp_dir):
        write_files(temp_dir, {
            "app.py": "",
            "notes.txt": "",
            ".env": "",
            "src/util.js": "",
        })
        tree = FileTree(temp_dir, {".py", ".js"}, {".env"})
        names = [relative_path(p, temp_dir) for p in tree]
        assert names == [".env", "app.py", "src/util.js"]

    def test_skips_excluded_directories(self, temp_dir):
        write_files(temp_dir, {
            "node_modules/lib/index.js": "",
            ".git/hooks/pre-commit.py": "",
            "validation-reports/all.py": "",
            "src/main.py": "",
        })
        names = [relative_path(p, temp_dir) for p in FileTree(temp_dir, {".py", ".js"})]
        assert names == ["src/main.py"]

    def test_restartable(self, temp_dir):
        write_files(temp_dir, {"a.py": "", "b.py": ""})
        tree = FileTree(temp_dir, {".py"})
        assert list(tree) == list(tree)

    def test_symlink_cycle_is_pruned(self, temp_dir):
        write_files(temp_dir, {"pkg/mod.py": ""})
        os.symlink(temp_dir / "pkg", temp_dir / "pkg" / "loop")
        names = [relative_path(p, temp_dir) for p in FileTree(temp_dir, {".py"})]
        assert names == ["pkg/mod.py"]

    @pytest.mark.skipif(hasattr(os, "geteuid") and os.geteuid() == 0, reason="root ignores permissions")
    def test_unreadable_directory_reported(self, temp_dir):
        write_files(temp_dir, {"ok.py": "", "locked/secret.py": ""})
        os.chmod(temp_dir / "locked", 0)
        errors = []
        try:
            names = [relative_path(p, temp_dir) for p in FileTree(temp_dir, {".py"}, on_error=lambda p, r: errors.append(p))]
        finally:
            os.chmod(temp_dir / "locked", 0o755)
        assert names == ["ok.py"]
        assert len(errors) == 1


class TestReadTextBounded:
    """Test bounded file reads."""

    def test_reads_utf8(self, temp_dir):
        path = temp_dir / "a.py"
        path.write_text("print('héllo')\n", encoding="utf-8")
        assert read_text_bounded(path, 1000) == "print('héllo')\n"

    def test_rejects_oversized(self, temp_dir):
        path = temp_dir / "big.py"
        path.write_text("x" * 100)
        with pytest.raises(UnreadableFileError, match="size limit"):
            read_text_bounded(path, 10)

    def test_rejects_binary(self, temp_dir):
        path = temp_dir / "blob.py"
        path.write_bytes(b"abc\x00def")
        with pytest.raises(UnreadableFileError, match="binary"):
            read_text_bounded(path, 1000)

    def test_rejects_invalid_utf8(self, temp_dir):
        path = temp_dir / "latin.py"
        path.write_bytes(b"caf\xe9\n")
        with pytest.raises(UnreadableFileError, match="UTF-8"):
            read_text_bounded(path, 1000)

    def test_read_optional_missing(self, temp_dir):
        assert read_optional(temp_dir / "nope.md", 1000) is None
