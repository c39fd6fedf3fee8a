"""
SECURITY DETECTION MODULE: patterns that DETECT credential literals in scanned
source. Matched values are redacted before they are stored in a finding.
"""

import re

from ..models import Finding, Severity
from .base import Rule, match_rules

_SECRET_NAME = (
    r"(?:password|passwd|pwd|api[_-]?key|apikey|secret(?:[_-]?key)?|client[_-]?secret|"
    r"access[_-]?token|refresh[_-]?token|auth[_-]?token|token|private[_-]?key|"
    r"jwt[_-]?secret|database[_-]?password)"
)

_SECRET_ASSIGN_RE = re.compile(
    rf"""\b(\w*{_SECRET_NAME}\w*)["']?\s*[:=]\s*(["'])(?!\$\{{|\{{\{{|<|%\()([^"'\n]+)\2""",
    re.IGNORECASE,
)

_CONNECTION_STRING_RE = re.compile(
    r"\b(?:mongodb(?:\+srv)?|postgres(?:ql)?|mysql|mariadb|redis|amqp|mssql)://"
    r"([^\s:/@'\"]+):([^\s@'\"]+)@",
    re.IGNORECASE,
)


def redact_secret(value: str) -> str:
    """Redact a secret value, showing only first 4 and last 4 chars."""
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}{'*' * (len(value) - 8)}{value[-4:]}"


def _assign_excerpt(match: re.Match) -> str:
    if match.re is _CONNECTION_STRING_RE:
        scheme = match.group(0).split("://", 1)[0]
        return f"{scheme}://{match.group(1)}:{redact_secret(match.group(2))}@"
    return f"{match.group(1)} = {redact_secret(match.group(3))}"


_SECRET_RULES: list[Rule] = [
    (_SECRET_ASSIGN_RE, "Hardcoded Secret", Severity.HIGH),
    (_CONNECTION_STRING_RE, "Credential In Connection String", Severity.HIGH),
]


def find_hardcoded_secrets(content: str, path: str) -> list[Finding]:
    return match_rules(content, _SECRET_RULES, per_line=True, excerpt=_assign_excerpt)
