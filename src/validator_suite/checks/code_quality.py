"""Line-based code quality heuristics: size, complexity, duplication, naming, comments."""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from ..config import CodeQualityLimits
from ..file_walker import is_code_file, is_config_file, is_doc_file, is_test_file
from ..models import Finding, Severity

_PY_FUNC_RE = re.compile(r"^(\s*)(?:async\s+)?def\s+(\w+)\s*\(")
_JS_FUNC_RES = [
    re.compile(r"^\s*(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*(\w+)\s*\("),
    re.compile(r"^\s*(?:export\s+)?(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s*)?(?:function\b|\([^)]*\)\s*=>|\w+\s*=>)"),
    re.compile(r"^\s*(?:(?:public|private|protected|static|async)\s+)*(\w+)\s*\([^)]*\)\s*(?::\s*[\w<>\[\]| ]+)?\s*\{"),
]

_JS_NOT_METHODS = frozenset({
    'if', 'else', 'for', 'while', 'switch', 'catch', 'with', 'do', 'return',
    'throw', 'new', 'delete', 'typeof', 'void', 'in', 'of', 'function',
})

_PY_DECISIONS = re.compile(r"\b(?:if|elif|for|while|except|and|or|case)\b")
_JS_DECISIONS = re.compile(r"\b(?:if|for|while|case|catch)\b|&&|\|\||\s\?\s")

_SNAKE_RE = re.compile(r"^_{0,2}[a-z][a-z0-9_]*_{0,2}$")
_PASCAL_RE = re.compile(r"^_?[A-Z][A-Za-z0-9]*$")
_CAMEL_RE = re.compile(r"^[a-z$_][A-Za-z0-9$]*$")
_UPPER_SNAKE_RE = re.compile(r"^[A-Z][A-Z0-9_]*$")
_SHORT_NAME_OK = frozenset({"i", "j", "k", "x", "y", "z", "e", "_", "$"})

_JS_VAR_RE = re.compile(r"\b(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*=")
_CLASS_RE = re.compile(r"^\s*(?:export\s+)?(?:default\s+)?class\s+(\w+)", re.MULTILINE)


@dataclass(frozen=True)
class FunctionSpan:
    name: str
    start: int  # 0-based line index
    end: int
    documented: bool


def _is_python(path: str) -> bool:
    return Path(path).suffix.lower() == ".py"


def _is_comment(stripped: str) -> bool:
    return stripped.startswith(("#", "//", "/*", "*", '"""', "'''"))


def _find_python_function_end(lines: list[str], start_idx: int, func_indent: int) -> int:
    last_body_line = start_idx
    for j in range(start_idx + 1, len(lines)):
        stripped = lines[j].strip()
        if not stripped:
            continue
        leading = len(lines[j]) - len(lines[j].lstrip())
        if leading > func_indent or stripped.startswith(")"):
            last_body_line = j
        else:
            break
    return last_body_line


def _find_brace_end(lines: list[str], start_idx: int) -> int:
    """Index of the line where the braces opened on start_idx balance."""
    depth = 0
    found_open = False
    for j in range(start_idx, len(lines)):
        for ch in lines[j]:
            if ch == '{':
                depth += 1
                found_open = True
            elif ch == '}':
                depth -= 1
        if found_open and depth <= 0:
            return j
    return len(lines) - 1 if found_open else start_idx


def _previous_code_line(lines: list[str], idx: int) -> str:
    for j in range(idx - 1, -1, -1):
        stripped = lines[j].strip()
        if stripped and not stripped.startswith("@"):
            return stripped
    return ""


def extract_functions(content: str, path: str) -> list[FunctionSpan]:
    lines = content.split("\n")
    functions = []
    if _is_python(path):
        for i, line in enumerate(lines):
            match = _PY_FUNC_RE.match(line)
            if not match:
                continue
            end = _find_python_function_end(lines, i, len(match.group(1)))
            sig_end = next((k for k in range(i, end + 1) if lines[k].rstrip().endswith(":")), i)
            body = [l.strip() for l in lines[sig_end + 1:end + 1] if l.strip()]
            documented = (
                bool(body) and body[0].lstrip("rbu").startswith(('"""', "'''"))
                or _previous_code_line(lines, i).startswith("#")
            )
            functions.append(FunctionSpan(match.group(2), i, end, documented))
        return functions

    for i, line in enumerate(lines):
        for pattern in _JS_FUNC_RES:
            match = pattern.match(line)
            if match and match.group(1) not in _JS_NOT_METHODS:
                end = _find_brace_end(lines, i)
                prev = _previous_code_line(lines, i)
                documented = prev.endswith("*/") or prev.startswith(("//", "*", "/*"))
                functions.append(FunctionSpan(match.group(1), i, end, documented))
                break
    return functions


def cyclomatic_complexity(body: list[str], python: bool) -> int:
    pattern = _PY_DECISIONS if python else _JS_DECISIONS
    score = 1
    for line in body:
        stripped = line.strip()
        if not stripped or _is_comment(stripped):
            continue
        score += len(pattern.findall(stripped))
    return score


def _line_limit(path: str, limits: CodeQualityLimits) -> tuple[str, int]:
    if is_test_file(path):
        return "test", limits.test_max_lines
    if is_doc_file(path):
        return "documentation", limits.doc_max_lines
    if is_config_file(path) or not is_code_file(path):
        return "config", limits.config_max_lines
    return "code", limits.code_max_lines


def make_file_size_check(limits: CodeQualityLimits) -> Callable[[str, str], list[Finding]]:
    def find_oversized(content: str, path: str) -> list[Finding]:
        role, limit = _line_limit(path, limits)
        lines = content.split("\n")
        if role == "config":
            lines = [l for l in lines if l.strip() and not _is_comment(l.strip())]
        count = len(lines)
        if count <= limit:
            return []
        return [Finding(
            rule_type="Oversized File",
            excerpt=f"{count} lines in {role} file (limit {limit})",
            line=0,
            severity=Severity.HIGH,
        )]

    return find_oversized


def make_complexity_check(limits: CodeQualityLimits) -> Callable[[str, str], list[Finding]]:
    def find_complex_functions(content: str, path: str) -> list[Finding]:
        lines = content.split("\n")
        python = _is_python(path)
        findings = []
        for fn in extract_functions(content, path):
            score = cyclomatic_complexity(lines[fn.start + 1:fn.end + 1] if python else lines[fn.start:fn.end + 1], python)
            if score <= limits.complexity_warning:
                continue
            severity = Severity.HIGH if score > limits.complexity_failure else Severity.MEDIUM
            findings.append(Finding(
                rule_type="High Complexity",
                excerpt=f"{fn.name}() has cyclomatic complexity {score}",
                line=fn.start + 1,
                severity=severity,
            ))
        return findings

    return find_complex_functions


def _meaningful_lines(content: str) -> list[tuple[int, str]]:
    result = []
    for i, line in enumerate(content.split("\n"), 1):
        stripped = " ".join(line.split())
        if len(stripped) <= 3 or _is_comment(stripped) or stripped in {"else:", "} else {", "try:", "pass"}:
            continue
        result.append((i, stripped))
    return result


def make_duplication_check(limits: CodeQualityLimits) -> Callable[[str, str], list[Finding]]:
    window = limits.duplicate_window

    def find_duplicate_blocks(content: str, path: str) -> list[Finding]:
        lines = _meaningful_lines(content)
        first_seen: dict[tuple[str, ...], int] = {}
        findings = []
        covered_until = 0
        for idx in range(len(lines) - window + 1):
            block = tuple(text for _, text in lines[idx:idx + window])
            line_no = lines[idx][0]
            if block not in first_seen:
                first_seen[block] = line_no
                continue
            if line_no <= covered_until or first_seen[block] == line_no:
                continue
            covered_until = lines[idx + window - 1][0]
            findings.append(Finding(
                rule_type="Duplicated Block",
                excerpt=f"lines {line_no}-{covered_until} repeat line {first_seen[block]}",
                line=line_no,
                severity=Severity.LOW,
            ))
        return findings

    return find_duplicate_blocks


def _name_finding(kind: str, name: str, expected: str, line: int) -> Finding:
    return Finding(
        rule_type="Naming Convention",
        excerpt=f"{kind} '{name}' should be {expected}",
        line=line,
        severity=Severity.LOW,
    )


def find_naming_issues(content: str, path: str) -> list[Finding]:
    findings = []
    for match in _CLASS_RE.finditer(content):
        if not _PASCAL_RE.match(match.group(1)):
            findings.append(_name_finding("class", match.group(1), "PascalCase", content.count("\n", 0, match.start()) + 1))

    if _is_python(path):
        for fn in extract_functions(content, path):
            if not _SNAKE_RE.match(fn.name):
                findings.append(_name_finding("function", fn.name, "snake_case", fn.start + 1))
            elif len(fn.name) == 1:
                findings.append(_name_finding("function", fn.name, "descriptive", fn.start + 1))
        return sorted(findings, key=lambda f: f.line)

    for fn in extract_functions(content, path):
        if len(fn.name) == 1:
            findings.append(_name_finding("function", fn.name, "descriptive", fn.start + 1))
        elif not (_CAMEL_RE.match(fn.name) or _PASCAL_RE.match(fn.name)):
            findings.append(_name_finding("function", fn.name, "camelCase", fn.start + 1))
    for match in _JS_VAR_RE.finditer(content):
        name = match.group(1)
        line = content.count("\n", 0, match.start()) + 1
        if len(name) == 1 and name not in _SHORT_NAME_OK:
            findings.append(_name_finding("variable", name, "descriptive", line))
        elif not (_CAMEL_RE.match(name) or _PASCAL_RE.match(name) or _UPPER_SNAKE_RE.match(name)):
            findings.append(_name_finding("variable", name, "camelCase", line))
    return sorted(findings, key=lambda f: f.line)


def make_comment_check(limits: CodeQualityLimits) -> Callable[[str, str], list[Finding]]:
    def find_undocumented_functions(content: str, path: str) -> list[Finding]:
        functions = extract_functions(content, path)
        if len(functions) < 3:
            return []
        documented = sum(1 for fn in functions if fn.documented)
        if documented / len(functions) >= limits.min_documented_ratio:
            return []
        return [
            Finding(
                rule_type="Undocumented Function",
                excerpt=f"{fn.name}() has no doc comment",
                line=fn.start + 1,
                severity=Severity.LOW,
            )
            for fn in functions
            if not fn.documented
        ]

    return find_undocumented_functions


def is_source_file(content: str, path: str) -> bool:
    return is_code_file(path) and not is_test_file(path)
