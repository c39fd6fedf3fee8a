"""Common validator contract: scan, evaluate_file, aggregate."""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from ..checks import Check
from ..config import EngineConfig
from ..errors import PreconditionError, UnreadableFileError
from ..evaluator import DIRECTORY_ACCESS_CHECK, evaluate, unreadable_result
from ..file_walker import ErrorCallback, FileTree, read_text_bounded, relative_path
from ..models import AggregateResult, FileResult
from .. import scorer

logger = logging.getLogger(__name__)

StopCheck = Callable[[], bool]
ResultCallback = Callable[[FileResult], None]


class Validator(ABC):
    """One quality dimension.

    Subclasses set ``name`` (registry key), ``title``, ``tier`` and
    ``description`` and build their check catalog in ``build_checks``.
    """

    name: str = ""
    title: str = ""
    tier: int = 2
    description: str = ""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.checks: list[Check] = self.build_checks()

    @abstractmethod
    def build_checks(self) -> list[Check]:
        ...

    @abstractmethod
    def scan(self, root: Path, on_error: Optional[ErrorCallback] = None) -> Iterable[Path]:
        ...

    @abstractmethod
    def evaluate_file(self, path: Path, root: Path) -> FileResult:
        ...

    def aggregate(self, files: list[FileResult], partial: bool = False) -> AggregateResult:
        return scorer.aggregate(self.name, files, self.config, partial=partial)

    def _safe_evaluate(self, path: Path, root: Path) -> FileResult:
        try:
            return self.evaluate_file(path, root)
        except PreconditionError:
            raise
        except Exception as e:
            rel = relative_path(path, root)
            logger.error(f"{self.title}: analysis of {rel} failed: {e}")
            return unreadable_result(rel, f"analysis error ({e})")

    def run(
        self,
        root: str,
        should_stop: Optional[StopCheck] = None,
        on_result: Optional[ResultCallback] = None,
    ) -> AggregateResult:
        """Scan the tree, evaluate every file and aggregate.

        Args:
            root: Project directory.
            should_stop: Polled between files; a True result ends the run early
                and the result is flagged partial.
            on_result: Called with each FileResult as it completes.

        Raises:
            PreconditionError: The validator cannot run against this project.
        """
        root_path = Path(root).resolve()
        should_stop = should_stop or (lambda: False)
        unreadable_dirs: list[tuple[str, str]] = []
        results: list[FileResult] = []
        partial = False

        def record(result: FileResult) -> None:
            results.append(result)
            if on_result:
                on_result(result)

        def drain(futures) -> bool:
            """Record finished futures until a stop is requested; True if stopped."""
            for future in futures:
                if should_stop():
                    return True
                record(future.result())
            return False

        logger.info(f"Running {self.title} validator on {root_path}")
        paths = self.scan(root_path, on_error=lambda p, reason: unreadable_dirs.append((p, reason)))
        workers = self.config.worker_count()

        if workers <= 1:
            for path in paths:
                if should_stop():
                    partial = True
                    break
                record(self._safe_evaluate(path, root_path))
        else:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                pending = set()
                for path in paths:
                    if should_stop():
                        partial = True
                        break
                    pending.add(pool.submit(self._safe_evaluate, path, root_path))
                    if len(pending) >= workers:
                        done, pending = wait(pending, return_when=FIRST_COMPLETED)
                        if drain(done):
                            partial = True
                            break
                if not partial:
                    partial = drain(wait(pending).done)
                # Results still in flight after a stop are dropped.
                for future in pending:
                    future.cancel()

        if not partial:
            for dir_path, reason in unreadable_dirs:
                rel = relative_path(Path(dir_path), root_path)
                record(unreadable_result(rel, reason, DIRECTORY_ACCESS_CHECK))
        else:
            logger.warning(f"{self.title} validator cancelled after {len(results)} file(s)")

        result = self.aggregate(results, partial=partial)
        logger.info(f"{self.title} validator finished: {result.overall_status.value} ({len(results)} files)")
        return result


class FileValidator(Validator):
    """Validator that evaluates each candidate file independently."""

    extensions: frozenset = frozenset()
    names: frozenset = frozenset()

    def scan(self, root: Path, on_error: Optional[ErrorCallback] = None) -> Iterable[Path]:
        return FileTree(root, self.extensions, self.names, on_error=on_error)

    def evaluate_file(self, path: Path, root: Path) -> FileResult:
        rel = relative_path(path, root)
        try:
            content = read_text_bounded(path, self.config.max_file_bytes)
        except UnreadableFileError as e:
            return unreadable_result(rel, e.reason)
        return evaluate(self.checks, content, rel)


class ProjectValidator(Validator):
    """Validator whose checks look at the project as a whole.

    The project root is the only unit scanned; its FileResult has path ".".
    """

    def scan(self, root: Path, on_error: Optional[ErrorCallback] = None) -> Iterable[Path]:
        return [root]

    @abstractmethod
    def snapshot(self, root: Path) -> Any:
        """Collect everything the checks need, as an immutable value."""

    def evaluate_file(self, path: Path, root: Path) -> FileResult:
        return evaluate(self.checks, self.snapshot(root), ".")

    def project_files(self, root: Path, extensions: Iterable[str], names: Iterable[str] = ()) -> list[Path]:
        """Candidate files for snapshotting, unreadable directories skipped with a warning."""

        def warn(path: str, reason: str) -> None:
            logger.warning(f"{self.title}: skipping unreadable directory {path}: {reason}")

        return list(FileTree(root, extensions, names, on_error=warn))
