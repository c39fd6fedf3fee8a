"""Documentation completeness checks over a project snapshot."""

import re
from dataclasses import dataclass, field
from typing import Optional

from ..models import Finding, Severity
from .access import has_routes
from .base import line_of, project_finding
from .code_quality import extract_functions

README_SECTIONS = {
    "title": re.compile(r"^#\s+\S", re.MULTILINE),
    "description": re.compile(r"^(?![#>\-*|`\s])[^\n]{20,}", re.MULTILINE),
    "installation": re.compile(r"^#+.*\b(?:install|installation|setup|getting started)\b", re.IGNORECASE | re.MULTILINE),
    "usage": re.compile(r"^#+.*\b(?:usage|how to use|examples?|quick ?start)\b", re.IGNORECASE | re.MULTILINE),
    "features": re.compile(r"^#+.*\b(?:features|capabilities|what it does)\b", re.IGNORECASE | re.MULTILINE),
}

SPEC_SECTIONS = ("Overview", "User Stories", "Spec Scope")

_INSTALL_CMD_RE = re.compile(r"\b(?:npm (?:install|i|ci)|yarn(?: install)?|pnpm install|pip install|poetry install|uv sync|make install|bundle install)\b")
_PREREQ_RE = re.compile(r"\b(?:prerequisites?|requirements|requires|node(?:\.js)?\s*v?\d|python\s*3|dependencies)\b", re.IGNORECASE)
_COMMENT_LINE_RE = re.compile(r"^\s*(?:#|//|/\*|\*)")
_ROUTE_LINE_RE = re.compile(r"\b(?:app|router|bp)\.(?:get|post|put|patch|delete|route)\s*\(|@\w+\.(?:get|post|put|patch|delete|route)\s*\(")
_DOC_COMMENT_NEAR_RE = re.compile(r"(?:/\*\*|\*/|//|#|\"\"\")")

# Docs that are expected at the project root.
_ROOT_DOC_ALLOWLIST = {"readme.md", "changelog.md", "license.md", "contributing.md", "code_of_conduct.md", "security.md"}


@dataclass(frozen=True)
class DocsSnapshot:
    readme: Optional[str]
    doc_files: dict[str, int] = field(default_factory=dict)
    has_docs_dir: bool = False
    code_files: dict[str, str] = field(default_factory=dict)
    specs: dict[str, dict[str, Optional[str]]] = field(default_factory=dict)
    package_scripts: dict[str, str] = field(default_factory=dict)
    has_env_example: bool = False


def readme_sections(readme: str) -> dict[str, bool]:
    return {name: bool(pattern.search(readme)) for name, pattern in README_SECTIONS.items()}


def readme_completeness(snapshot: DocsSnapshot) -> float:
    if snapshot.readme is None:
        return 0.0
    present = readme_sections(snapshot.readme)
    return round(100 * sum(present.values()) / len(present), 1)


def make_readme_check(pass_at: float = 80, warn_at: float = 60):
    def find_readme_gaps(snapshot: DocsSnapshot, path: str) -> list[Finding]:
        if snapshot.readme is None:
            return [project_finding("Missing README", "README.md file not found", Severity.HIGH)]
        completeness = readme_completeness(snapshot)
        if completeness >= pass_at:
            return []
        severity = Severity.MEDIUM if completeness >= warn_at else Severity.HIGH
        return [
            project_finding("Missing README Section", name, severity)
            for name, present in readme_sections(snapshot.readme).items()
            if not present
        ]

    return find_readme_gaps


def readme_recommendation(findings: list[Finding], metrics: dict) -> str:
    if any(f.rule_type == "Missing README" for f in findings):
        return "Create a comprehensive README.md file"
    return "Add missing sections: " + ", ".join(f.excerpt for f in findings)


def has_api_files(snapshot: DocsSnapshot, path: str) -> bool:
    return any(has_routes(content, rel) for rel, content in snapshot.code_files.items())


def find_undocumented_endpoints(snapshot: DocsSnapshot, path: str) -> list[Finding]:
    findings = []
    for rel, content in sorted(snapshot.code_files.items()):
        for match in _ROUTE_LINE_RE.finditer(content):
            preceding = content[max(0, match.start() - 200):match.start()]
            if _DOC_COMMENT_NEAR_RE.search(preceding):
                continue
            findings.append(project_finding(
                "Undocumented Endpoint",
                f"{rel}:{line_of(content, match.start())}",
                Severity.LOW,
            ))
    return findings


def comment_profile(content: str, path: str) -> tuple[float, float]:
    """Return (comment line ratio, documented function ratio) for a source file."""
    lines = [l for l in content.split("\n") if l.strip()]
    if not lines:
        return 0.0, 1.0
    comments = sum(1 for l in lines if _COMMENT_LINE_RE.match(l) or l.strip().startswith(('"""', "'''")))
    functions = extract_functions(content, path)
    documented = sum(1 for fn in functions if fn.documented) / len(functions) if functions else 1.0
    return comments / len(lines), documented


def _poorly_commented(snapshot: DocsSnapshot) -> list[str]:
    poor = []
    for rel, content in sorted(snapshot.code_files.items()):
        ratio, documented = comment_profile(content, rel)
        if ratio < 0.10 or documented < 0.5:
            poor.append(rel)
    return poor


def comment_score(snapshot: DocsSnapshot) -> float:
    if not snapshot.code_files:
        return 100.0
    poor = len(_poorly_commented(snapshot))
    return round(100 * (len(snapshot.code_files) - poor) / len(snapshot.code_files), 1)


def make_code_comment_check(pass_at: float = 70, warn_at: float = 50):
    def find_sparse_comments(snapshot: DocsSnapshot, path: str) -> list[Finding]:
        score = comment_score(snapshot)
        if score >= pass_at:
            return []
        severity = Severity.MEDIUM if score >= warn_at else Severity.HIGH
        return [project_finding("Sparse Comments", rel, severity) for rel in _poorly_commented(snapshot)]

    return find_sparse_comments


def has_code(snapshot: DocsSnapshot, path: str) -> bool:
    return bool(snapshot.code_files)


def has_readme(snapshot: DocsSnapshot, path: str) -> bool:
    return snapshot.readme is not None


def find_setup_gaps(snapshot: DocsSnapshot, path: str) -> list[Finding]:
    readme = snapshot.readme or ""
    findings = []
    if not _INSTALL_CMD_RE.search(readme):
        findings.append(project_finding("Missing Install Commands", "README has no installation commands"))
    if not _PREREQ_RE.search(readme):
        findings.append(project_finding("Missing Prerequisites", "README does not list prerequisites", Severity.LOW))
    if snapshot.has_env_example and not re.search(r"\.env", readme):
        findings.append(project_finding("Missing Environment Setup", ".env.example exists but README does not explain it", Severity.LOW))
    undocumented = [name for name in snapshot.package_scripts if name not in readme]
    if undocumented:
        findings.append(project_finding("Undocumented Scripts", ", ".join(sorted(undocumented)), Severity.LOW))
    return findings


def has_specs(snapshot, path: str) -> bool:
    return bool(snapshot.specs)


def find_spec_doc_gaps(snapshot: DocsSnapshot, path: str) -> list[Finding]:
    findings = []
    for name, docs in sorted(snapshot.specs.items()):
        for required in ("spec.md", "tasks.md"):
            if docs.get(required) is None:
                findings.append(project_finding("Missing Spec Document", f"{name}/{required}"))
        spec = docs.get("spec.md")
        if spec is None:
            continue
        for section in SPEC_SECTIONS:
            if not re.search(rf"^##\s+{section}\b", spec, re.MULTILINE | re.IGNORECASE):
                findings.append(project_finding("Missing Spec Section", f"{name}/spec.md: {section}", Severity.LOW))
    return findings


def find_structure_issues(snapshot: DocsSnapshot, path: str) -> list[Finding]:
    findings = []
    extra_docs = [p for p in snapshot.doc_files if p.lower() not in _ROOT_DOC_ALLOWLIST]
    if len(extra_docs) > 3 and not snapshot.has_docs_dir:
        findings.append(project_finding("Missing Docs Directory", f"{len(extra_docs)} documents but no docs/ directory", Severity.LOW))
    root_docs = [p for p in snapshot.doc_files if "/" not in p]
    if len(root_docs) > 5:
        findings.append(project_finding("Cluttered Root", f"{len(root_docs)} documents at project root", Severity.LOW))
    for rel, size in sorted(snapshot.doc_files.items()):
        if size < 100:
            findings.append(project_finding("Near-Empty Document", f"{rel} ({size} chars)", Severity.LOW))
    return findings
