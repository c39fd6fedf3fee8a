"""Spec document parsing and keyword-evidence adherence checks."""

import re
from dataclasses import dataclass, field
from typing import Optional

from ..models import Finding, Severity
from .base import project_finding

STOPWORDS = frozenset({
    "the", "and", "for", "with", "that", "this", "from", "into", "will", "should",
    "must", "can", "are", "was", "were", "has", "have", "had", "been", "being",
    "all", "any", "each", "when", "then", "than", "able", "user", "users", "want",
    "so", "as", "a", "an", "to", "of", "in", "on", "by", "or", "be", "is", "it",
    "its", "their", "they", "them", "who", "what", "which", "also", "only", "not",
    "via", "using", "use", "new", "add", "support", "allow", "allows", "ensure",
})

# Default share of a requirement's keywords that must appear in the code to count as implemented.
KEYWORD_MATCH_RATIO = 0.5

_SECTION_RE = re.compile(r"^##\s+(.+?)\s*$", re.MULTILINE)
_STORY_RE = re.compile(r"^###\s+(.+?)\s*$", re.MULTILINE)
_NUMBERED_RE = re.compile(r"^\s*\d+\.\s+(.+)$", re.MULTILINE)
_BULLET_RE = re.compile(r"^\s*[-*]\s+(?:\[[ xX]\]\s*)?(.+)$", re.MULTILINE)
_WORD_RE = re.compile(r"[a-z][a-z0-9]+")


@dataclass(frozen=True)
class UserStory:
    title: str
    criteria: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SpecDocument:
    path: str
    overview: str = ""
    user_stories: list[UserStory] = field(default_factory=list)
    scope: list[str] = field(default_factory=list)
    out_of_scope: list[str] = field(default_factory=list)
    deliverables: list[str] = field(default_factory=list)
    tasks: list[str] = field(default_factory=list)
    technical_requirements: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SpecSnapshot:
    spec: Optional[SpecDocument]
    corpus: str = ""
    test_files: list[str] = field(default_factory=list)
    match_ratio: float = KEYWORD_MATCH_RATIO


def _clean(item: str) -> str:
    return re.sub(r"\*\*|__|`", "", item).strip()


def split_sections(markdown: str) -> dict[str, str]:
    sections = {}
    matches = list(_SECTION_RE.finditer(markdown))
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(markdown)
        sections[match.group(1).strip().lower()] = markdown[match.end():end]
    return sections


def _items(body: str) -> list[str]:
    items = [_clean(m) for m in _NUMBERED_RE.findall(body)]
    if not items:
        items = [_clean(m) for m in _BULLET_RE.findall(body)]
    return [i for i in items if i]


def _parse_stories(body: str) -> list[UserStory]:
    matches = list(_STORY_RE.finditer(body))
    stories = []
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(body)
        chunk = body[match.end():end]
        criteria = [_clean(c) for c in _BULLET_RE.findall(chunk)]
        if not criteria:
            criteria = [line.strip() for line in chunk.splitlines() if line.strip()]
        stories.append(UserStory(title=_clean(match.group(1)), criteria=criteria))
    return stories


def parse_spec(
    spec_md: str,
    path: str = "spec.md",
    tasks_md: Optional[str] = None,
    technical_md: Optional[str] = None,
) -> SpecDocument:
    sections = split_sections(spec_md)
    technical = []
    if technical_md:
        tech_sections = split_sections(technical_md)
        technical = _items(tech_sections.get("technical requirements", ""))
    return SpecDocument(
        path=path,
        overview=sections.get("overview", "").strip(),
        user_stories=_parse_stories(sections.get("user stories", "")),
        scope=_items(sections.get("spec scope", "")),
        out_of_scope=_items(sections.get("out of scope", "")),
        deliverables=_items(sections.get("expected deliverable", sections.get("expected deliverables", ""))),
        tasks=[_clean(t) for t in _BULLET_RE.findall(tasks_md or "")],
        technical_requirements=technical,
    )


def keywords(text: str) -> list[str]:
    seen = []
    for word in _WORD_RE.findall(text.lower()):
        if len(word) > 2 and word not in STOPWORDS and word not in seen:
            seen.append(word)
    return seen


def evidence_ratio(text: str, corpus: str) -> float:
    words = keywords(text)
    if not words:
        return 1.0
    return sum(1 for w in words if w in corpus) / len(words)


def is_implemented(text: str, corpus: str, ratio: float = KEYWORD_MATCH_RATIO) -> bool:
    return evidence_ratio(text, corpus) >= ratio


def has_spec(snapshot: SpecSnapshot, path: str) -> bool:
    return snapshot.spec is not None


def missing_spec(snapshot: SpecSnapshot, path: str) -> bool:
    return snapshot.spec is None


def find_missing_spec(snapshot: SpecSnapshot, path: str) -> list[Finding]:
    return [project_finding("Missing Specification", "no spec.md found under .agent-os/specs")]


def find_unimplemented_requirements(snapshot: SpecSnapshot, path: str) -> list[Finding]:
    spec = snapshot.spec
    if not spec.scope:
        return [project_finding("Empty Scope", f"{spec.path} defines no Spec Scope items")]
    return [
        project_finding("Unimplemented Requirement", item[:120], Severity.HIGH)
        for item in spec.scope
        if not is_implemented(item, snapshot.corpus, snapshot.match_ratio)
    ]


def find_unimplemented_stories(snapshot: SpecSnapshot, path: str) -> list[Finding]:
    findings = []
    for story in snapshot.spec.user_stories:
        criteria = story.criteria or [story.title]
        met = sum(1 for c in criteria if is_implemented(c, snapshot.corpus, snapshot.match_ratio))
        if met / len(criteria) < snapshot.match_ratio:
            findings.append(project_finding(
                "Unimplemented User Story",
                f"{story.title} ({met}/{len(criteria)} criteria evidenced)"[:120],
                Severity.HIGH,
            ))
    return findings


def find_scope_creep(snapshot: SpecSnapshot, path: str) -> list[Finding]:
    findings = []
    for item in snapshot.spec.out_of_scope:
        words = keywords(item)
        if len(words) >= 2 and evidence_ratio(item, snapshot.corpus) == 1.0:
            findings.append(project_finding("Possible Out-Of-Scope Work", item[:120], Severity.LOW))
    return findings


def find_missing_deliverables(snapshot: SpecSnapshot, path: str) -> list[Finding]:
    findings = []
    for item in snapshot.spec.deliverables:
        if re.search(r"\btests?\b", item, re.IGNORECASE):
            if not snapshot.test_files:
                findings.append(project_finding("Missing Deliverable", f"{item} (no tests found)"[:120], Severity.HIGH))
        elif not is_implemented(item, snapshot.corpus, snapshot.match_ratio):
            findings.append(project_finding("Missing Deliverable", item[:120], Severity.HIGH))
    return findings


def has_user_stories(snapshot: SpecSnapshot, path: str) -> bool:
    return snapshot.spec is not None and bool(snapshot.spec.user_stories)


def has_deliverables(snapshot: SpecSnapshot, path: str) -> bool:
    return snapshot.spec is not None and bool(snapshot.spec.deliverables)


def has_technical_requirements(snapshot: SpecSnapshot, path: str) -> bool:
    return snapshot.spec is not None and bool(snapshot.spec.technical_requirements)


def find_unmet_technical_requirements(snapshot: SpecSnapshot, path: str) -> list[Finding]:
    return [
        project_finding("Unmet Technical Requirement", item[:120], Severity.HIGH)
        for item in snapshot.spec.technical_requirements
        if not is_implemented(item, snapshot.corpus, snapshot.match_ratio)
    ]


def spec_metrics(snapshot: SpecSnapshot, path: str) -> dict[str, float]:
    spec = snapshot.spec
    if not spec.scope:
        return {"requirements": 0.0, "implemented": 0.0}
    done = sum(1 for item in spec.scope if is_implemented(item, snapshot.corpus, snapshot.match_ratio))
    return {"requirements": float(len(spec.scope)), "implemented": float(done)}
