import json
import os
from pathlib import Path

from ..checks import Check, CheckKind
from ..checks.documentation import (
    DocsSnapshot,
    comment_score,
    find_setup_gaps,
    find_spec_doc_gaps,
    find_structure_issues,
    find_undocumented_endpoints,
    has_api_files,
    has_code,
    has_readme,
    has_specs,
    make_code_comment_check,
    make_readme_check,
    readme_completeness,
    readme_recommendation,
)
from ..file_walker import CODE_EXTENSIONS, is_test_file, read_optional, relative_path
from .base import ProjectValidator
from .specs import SPECS_DIR, read_spec_dirs


class DocumentationValidator(ProjectValidator):
    name = "documentation"
    title = "Documentation"
    tier = 2
    description = "Checks README completeness, API and code comments, setup instructions and doc structure"

    def build_checks(self) -> list[Check]:
        return [
            Check(
                name="README Completeness",
                detect=make_readme_check(self.config.readme_pass, self.config.readme_warning),
                kind=CheckKind.GRADED,
                recommendation=readme_recommendation,
                passed_message="README completeness: {readme_completeness:.0f}%",
                issue_message=lambda findings, m: (
                    "README.md file not found"
                    if any(f.rule_type == "Missing README" for f in findings)
                    else f"README completeness: {m['readme_completeness']:.0f}%"
                ),
                measure=lambda snap, path: {"readme_completeness": readme_completeness(snap)},
            ),
            Check(
                name="API Documentation",
                detect=find_undocumented_endpoints,
                recommendation="Add comments describing each API endpoint",
                passed_message="API endpoints are documented",
                issue_message="Found {count} undocumented endpoint(s)",
                applies=has_api_files,
            ),
            Check(
                name="Code Comments",
                detect=make_code_comment_check(self.config.comments_pass, self.config.comments_warning),
                kind=CheckKind.GRADED,
                recommendation="Add comments and doc comments to poorly documented files",
                passed_message="Code comment score: {comment_score:.0f}%",
                issue_message="Code comment score: {comment_score:.0f}% ({count} file(s) need comments)",
                applies=has_code,
                measure=lambda snap, path: {"comment_score": comment_score(snap)},
            ),
            Check(
                name="Setup Instructions",
                detect=find_setup_gaps,
                recommendation="Document installation, prerequisites and available scripts in README.md",
                passed_message="Setup instructions are complete",
                issue_message="Setup instructions incomplete: {items}",
                applies=has_readme,
            ),
            Check(
                name="Spec Documentation",
                detect=find_spec_doc_gaps,
                recommendation="Complete spec.md and tasks.md for every spec",
                passed_message="Spec documents are complete",
                issue_message="Found {count} spec documentation gap(s)",
                applies=has_specs,
            ),
            Check(
                name="Documentation Structure",
                detect=find_structure_issues,
                recommendation="Organize documentation under docs/ and remove placeholder documents",
                passed_message="Documentation is well organized",
                issue_message="Found {count} documentation structure issue(s)",
            ),
        ]

    def snapshot(self, root: Path) -> DocsSnapshot:
        max_bytes = self.config.max_file_bytes
        readme = None
        for name in ("README.md", "readme.md", "Readme.md", "README.rst", "README"):
            readme = read_optional(root / name, max_bytes)
            if readme is not None:
                break

        doc_files = {}
        for path in self.project_files(root, (".md", ".rst")):
            rel = relative_path(path, root)
            if rel.startswith(SPECS_DIR):
                continue
            content = read_optional(path, max_bytes)
            if content is not None:
                doc_files[rel] = len(content.strip())

        code_files = {}
        for path in self.project_files(root, CODE_EXTENSIONS):
            rel = relative_path(path, root)
            if is_test_file(rel):
                continue
            content = read_optional(path, max_bytes)
            if content is not None:
                code_files[rel] = content

        scripts = {}
        package = read_optional(root / "package.json", max_bytes)
        if package:
            try:
                scripts = json.loads(package).get("scripts") or {}
            except (json.JSONDecodeError, AttributeError):
                scripts = {}

        return DocsSnapshot(
            readme=readme,
            doc_files=doc_files,
            has_docs_dir=os.path.isdir(root / "docs"),
            code_files=code_files,
            specs=read_spec_dirs(root, max_bytes),
            package_scripts=scripts,
            has_env_example=(root / ".env.example").is_file(),
        )
