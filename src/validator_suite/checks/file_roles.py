"""Checks that only run on configuration, manifest and environment files."""

import json
import os
import re
import tomllib
from typing import Callable, Iterable

from ..models import Finding, Severity
from .base import Rule, line_of, match_rules
from .secrets import find_hardcoded_secrets, redact_secret

PLACEHOLDER_INDICATORS = [
    "your_", "your-", "example", "placeholder", "changeme", "change_me", "xxx",
    "dummy", "sample", "replace", "<", "${", "todo",
]

_WILDCARD_VERSIONS = {"*", "x", "latest", ""}

_REQUIREMENT_RE = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)\s*(\[[^\]]*\])?\s*(.*)$")

_DEBUG_RULES: list[Rule] = [
    (re.compile(r"""(?i)["']?\bdebug["']?\s*[:=]\s*["']?(?:true|1|on|yes)\b"""), "Debug Mode Enabled", Severity.LOW),
]


def find_config_exposure(content: str, path: str) -> list[Finding]:
    findings = [
        f.model_copy(update={"rule_type": "Secret In Configuration", "severity": Severity.MEDIUM})
        for f in find_hardcoded_secrets(content, path)
    ]
    findings.extend(match_rules(content, _DEBUG_RULES))
    return sorted(findings, key=lambda f: f.line)


def is_placeholder(value: str) -> bool:
    lower = value.lower()
    if not lower or lower in {"true", "false", "yes", "no", "on", "off"} or lower.isdigit():
        return True
    return any(ind in lower for ind in PLACEHOLDER_INDICATORS)


def find_env_values(content: str, path: str) -> list[Finding]:
    findings = []
    for i, raw in enumerate(content.splitlines(), 1):
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.removeprefix("export ").strip()
        value = value.split(" #", 1)[0].strip().strip("\"'")
        if is_placeholder(value):
            continue
        findings.append(Finding(
            rule_type="Non-Placeholder Value",
            excerpt=f"{key}={redact_secret(value)}",
            line=i,
            severity=Severity.MEDIUM,
        ))
    return findings


def _locate(content: str, name: str) -> int:
    idx = content.find(f'"{name}"')
    if idx == -1:
        idx = content.find(name)
    return line_of(content, idx) if idx != -1 else 0


def _version_findings(content: str, deps: Iterable[tuple[str, str]], denylist: set[str]) -> list[Finding]:
    findings = []
    for name, version in deps:
        line = _locate(content, name)
        spec = version.strip().lower()
        if spec in _WILDCARD_VERSIONS or ".x" in spec or spec.endswith(".*") or spec == "==*":
            findings.append(Finding(
                rule_type="Wildcard Version",
                excerpt=f"{name}: {version or '(any)'}",
                line=line,
                severity=Severity.MEDIUM,
            ))
        if name.lower() in denylist:
            findings.append(Finding(
                rule_type="Problematic Package",
                excerpt=name,
                line=line,
                severity=Severity.MEDIUM,
            ))
    return findings


def _package_json_deps(content: str) -> list[tuple[str, str]]:
    data = json.loads(content)
    deps = []
    for section in ("dependencies", "devDependencies", "peerDependencies", "optionalDependencies"):
        for name, version in (data.get(section) or {}).items():
            deps.append((name, str(version)))
    return deps


def _requirement_deps(lines: Iterable[str]) -> list[tuple[str, str]]:
    deps = []
    for raw in lines:
        line = raw.split("#", 1)[0].strip()
        if not line or line.startswith(("-", "git+", "http")):
            continue
        match = _REQUIREMENT_RE.match(line.split(";", 1)[0])
        if match:
            deps.append((match.group(1), match.group(3).strip()))
    return deps


def _pyproject_deps(content: str) -> list[tuple[str, str]]:
    data = tomllib.loads(content)
    project = data.get("project") or {}
    deps = _requirement_deps(project.get("dependencies") or [])
    for extra in (project.get("optional-dependencies") or {}).values():
        deps.extend(_requirement_deps(extra))
    poetry = (data.get("tool") or {}).get("poetry", {}).get("dependencies") or {}
    for name, version in poetry.items():
        if name != "python":
            deps.append((name, version if isinstance(version, str) else str(version.get("version", ""))))
    return deps


def make_dependency_check(denylist: Iterable[str]) -> Callable[[str, str], list[Finding]]:
    """Build the manifest check for a given package denylist."""
    blocked = {name.lower() for name in denylist}

    def find_dependency_risks(content: str, path: str) -> list[Finding]:
        name = os.path.basename(path)
        try:
            if name == "package.json":
                deps = _package_json_deps(content)
            elif name == "pyproject.toml":
                deps = _pyproject_deps(content)
            else:
                deps = _requirement_deps(content.splitlines())
        except (json.JSONDecodeError, tomllib.TOMLDecodeError, AttributeError) as e:
            return [Finding(
                rule_type="Unparseable Manifest",
                excerpt=f"Could not parse package file: {e}"[:120],
                line=0,
                severity=Severity.MEDIUM,
            )]
        return _version_findings(content, deps, blocked)

    return find_dependency_risks
