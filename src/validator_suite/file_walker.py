"""Project tree walking and bounded file reads."""

import os
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from .errors import UnreadableFileError

SKIP_DIRS = frozenset({
    "node_modules", ".git", "venv", ".venv", "env", "__pycache__",
    ".pytest_cache", ".mypy_cache", ".tox", "dist", "build", ".next",
    ".nuxt", "coverage", ".coverage", "htmlcov", "vendor", "target",
    ".terraform", "validation-reports",
})

CODE_EXTENSIONS = frozenset({
    ".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs", ".py", ".rb", ".php",
    ".java", ".cs", ".go",
})

CONFIG_EXTENSIONS = frozenset({".json", ".yaml", ".yml", ".toml", ".ini", ".cfg"})

DOC_EXTENSIONS = frozenset({".md", ".rst", ".txt"})

ENV_FILE_NAMES = frozenset({
    ".env", ".env.local", ".env.development", ".env.production",
    ".env.test", ".env.staging", ".env.example",
})

MANIFEST_NAMES = frozenset({
    "package.json", "requirements.txt", "requirements-dev.txt", "pyproject.toml",
})

TEST_INDICATORS = ("test_", "_test.", ".test.", ".spec.", "_spec.", "/tests/", "/test/", "/__tests__/")

# Bytes sniffed for NUL when deciding a file is binary.
BINARY_SNIFF_BYTES = 1024

ErrorCallback = Callable[[str, str], None]


def is_test_file(path: str) -> bool:
    lower = "/" + path.replace(os.sep, "/").lower()
    return any(ind in lower for ind in TEST_INDICATORS)


def is_env_file(path: str) -> bool:
    return os.path.basename(path).startswith(".env")


def is_manifest(path: str) -> bool:
    return os.path.basename(path) in MANIFEST_NAMES


def is_config_file(path: str) -> bool:
    name = os.path.basename(path).lower()
    return "config" in name or name.endswith((".ini", ".cfg")) or name in {"settings.py", "settings.json"}


def is_code_file(path: str) -> bool:
    return Path(path).suffix.lower() in CODE_EXTENSIONS


def is_doc_file(path: str) -> bool:
    return Path(path).suffix.lower() in DOC_EXTENSIONS


class FileTree:
    """Lazy, restartable listing of candidate files under a root.

    Each iteration walks the tree again. Symlinked directories are followed
    once; a directory whose real path was already visited is pruned.

    Args:
        root: Directory to walk.
        extensions: Allowed file suffixes (lowercase, with the dot).
        names: Exact basenames allowed regardless of suffix.
        extra_skip: Directory names skipped in addition to SKIP_DIRS.
        on_error: Called with (path, reason) for each unreadable directory.
    """

    def __init__(
        self,
        root: str,
        extensions: Iterable[str] = (),
        names: Iterable[str] = (),
        extra_skip: Iterable[str] = (),
        on_error: Optional[ErrorCallback] = None,
    ):
        self.root = Path(root)
        self.extensions = frozenset(e.lower() for e in extensions)
        self.names = frozenset(names)
        self.skip = SKIP_DIRS | frozenset(extra_skip)
        self.on_error = on_error

    def accepts(self, filename: str) -> bool:
        if filename in self.names:
            return True
        return Path(filename).suffix.lower() in self.extensions

    def __iter__(self) -> Iterator[Path]:
        visited: set[str] = set()

        def report(err: OSError) -> None:
            if self.on_error:
                self.on_error(err.filename or str(self.root), err.strerror or str(err))

        for dirpath, dirs, files in os.walk(self.root, onerror=report, followlinks=True):
            real = os.path.realpath(dirpath)
            if real in visited:
                dirs[:] = []
                continue
            visited.add(real)
            dirs[:] = sorted(
                d for d in dirs
                if d not in self.skip and os.path.realpath(os.path.join(dirpath, d)) not in visited
            )
            for filename in sorted(files):
                if self.accepts(filename):
                    yield Path(dirpath) / filename


def relative_path(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def read_text_bounded(path: Path, max_bytes: int) -> str:
    """Read a text file, refusing anything the checks cannot handle.

    Raises:
        UnreadableFileError: Oversized, binary, undecodable or inaccessible file.
    """
    try:
        size = path.stat().st_size
        if size > max_bytes:
            raise UnreadableFileError(str(path), f"file exceeds size limit ({size} > {max_bytes} bytes)")
        raw = path.read_bytes()
    except PermissionError:
        raise UnreadableFileError(str(path), "permission denied")
    except OSError as e:
        raise UnreadableFileError(str(path), f"read failed ({e.strerror or e})")

    if b"\x00" in raw[:BINARY_SNIFF_BYTES]:
        raise UnreadableFileError(str(path), "binary content")
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        raise UnreadableFileError(str(path), "not valid UTF-8 text")


def read_optional(path: Path, max_bytes: int) -> Optional[str]:
    """Read a project file if it exists and is readable text."""
    if not path.is_file():
        return None
    try:
        return read_text_bounded(path, max_bytes)
    except UnreadableFileError:
        return None
