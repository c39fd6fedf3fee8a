from pathlib import Path
from typing import Optional

from ..checks import Check, CheckKind
from ..checks.spec_adherence import (
    SpecDocument,
    SpecSnapshot,
    find_missing_deliverables,
    find_missing_spec,
    find_scope_creep,
    find_unimplemented_requirements,
    find_unimplemented_stories,
    find_unmet_technical_requirements,
    has_deliverables,
    has_spec,
    has_technical_requirements,
    has_user_stories,
    missing_spec,
    parse_spec,
    spec_metrics,
)
from ..config import EngineConfig
from ..file_walker import CODE_EXTENSIONS, is_test_file, read_optional, relative_path
from .base import ProjectValidator
from .specs import SPECS_DIR, find_spec_path


class SpecAdherenceValidator(ProjectValidator):
    """Compares a spec's requirements, stories and deliverables with the code.

    ``spec_path`` may point at a spec folder or a spec.md file; without it the
    latest folder under .agent-os/specs is used.
    """

    name = "spec-adherence"
    title = "Spec Adherence"
    tier = 1
    description = "Checks that spec requirements, user stories and deliverables are implemented"

    def __init__(self, config: Optional[EngineConfig] = None, spec_path: Optional[str] = None):
        self.spec_path = spec_path
        super().__init__(config)

    def build_checks(self) -> list[Check]:
        return [
            Check(
                name="Specification",
                detect=find_missing_spec,
                recommendation=f"Create a spec under {SPECS_DIR} or pass --spec",
                issue_message="No specification found - spec adherence checks skipped",
                applies=missing_spec,
            ),
            Check(
                name="Spec Requirements",
                detect=find_unimplemented_requirements,
                kind=CheckKind.GRADED,
                recommendation="Implement the missing spec requirements",
                passed_message="All {requirements:.0f} spec requirements have evidence in code",
                issue_message="{implemented:.0f}/{requirements:.0f} spec requirements have evidence in code",
                applies=has_spec,
                measure=spec_metrics,
            ),
            Check(
                name="User Stories",
                detect=find_unimplemented_stories,
                kind=CheckKind.GRADED,
                recommendation="Implement the acceptance criteria of the listed user stories",
                passed_message="User stories have evidence in code",
                issue_message="Found {count} unimplemented user stor(ies)",
                applies=has_user_stories,
            ),
            Check(
                name="Scope Compliance",
                detect=find_scope_creep,
                recommendation="Remove work that the spec lists as out of scope",
                passed_message="No out-of-scope work detected",
                issue_message="Found {count} possible out-of-scope item(s)",
                applies=has_spec,
            ),
            Check(
                name="Expected Deliverables",
                detect=find_missing_deliverables,
                kind=CheckKind.GRADED,
                recommendation="Complete the missing deliverables",
                passed_message="All expected deliverables are present",
                issue_message="Missing deliverables: {items}",
                applies=has_deliverables,
            ),
            Check(
                name="Technical Requirements",
                detect=find_unmet_technical_requirements,
                kind=CheckKind.GRADED,
                recommendation="Address the unmet technical requirements",
                passed_message="Technical requirements have evidence in code",
                issue_message="Found {count} unmet technical requirement(s)",
                applies=has_technical_requirements,
            ),
        ]

    def _resolve_spec(self, root: Path) -> Optional[Path]:
        if self.spec_path:
            path = Path(self.spec_path)
            if not path.is_absolute():
                path = root / path
            return path.parent if path.is_file() else path
        return find_spec_path(root)

    def snapshot(self, root: Path) -> SpecSnapshot:
        max_bytes = self.config.max_file_bytes
        spec_dir = self._resolve_spec(root)
        spec: Optional[SpecDocument] = None
        if spec_dir is not None:
            spec_md = read_optional(spec_dir / "spec.md", max_bytes)
            if spec_md is not None:
                spec = parse_spec(
                    spec_md,
                    path=relative_path(spec_dir / "spec.md", root),
                    tasks_md=read_optional(spec_dir / "tasks.md", max_bytes),
                    technical_md=read_optional(spec_dir / "sub-specs" / "technical-spec.md", max_bytes),
                )

        corpus, tests = [], []
        for path in self.project_files(root, CODE_EXTENSIONS):
            rel = relative_path(path, root)
            if is_test_file(rel):
                tests.append(rel)
                continue
            content = read_optional(path, max_bytes)
            if content is not None:
                corpus.append(rel.lower())
                corpus.append(content.lower())

        return SpecSnapshot(
            spec=spec,
            corpus="\n".join(corpus),
            test_files=sorted(tests),
            match_ratio=self.config.keyword_match_ratio,
        )
