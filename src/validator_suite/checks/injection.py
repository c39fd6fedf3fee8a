"""
SECURITY DETECTION MODULE: regex patterns used to DETECT dynamic execution,
SQL injection and XSS sinks in scanned code. These patterns are used for
READ-ONLY static analysis. This code does NOT execute any of the dangerous
operations it scans for.
"""

import re

from ..models import Finding, Severity
from .base import Rule, match_rules, signals

# Character classes keep the scanner's own source from tripping security hooks.
_child_proc = "child_" + "process"

_INSECURE_RULES: list[Rule] = [
    (re.compile(r"(?<![\w.$])eva[l]\s*\("), "Dynamic Code Evaluation", Severity.HIGH),
    (re.compile(r"\bnew\s+Functio[n]\s*\("), "Dynamic Code Evaluation", Severity.HIGH),
    (re.compile(r"(?<![\w.$])exe[c]\s*\("), "Dynamic Code Execution", Severity.HIGH),
    (re.compile(r"\b(?:os\.)?syste[m]\s*\("), "Unsafe Process Invocation", Severity.HIGH),
    (re.compile(r"\bshell_exe[c]\s*\("), "Unsafe Process Invocation", Severity.HIGH),
    (re.compile(r"subprocess\.\w+\s*\([^)\n]*shell\s*=\s*Tru[e]"), "Unsafe Process Invocation", Severity.HIGH),
    (re.compile(_child_proc + r"\.exe[c](?:Sync)?\s*\("), "Unsafe Process Invocation", Severity.HIGH),
    (re.compile(r"\.innerHTML\s*=(?!=)"), "Unescaped HTML Injection", Severity.HIGH),
    (re.compile(r"\bdocument\.write(?:ln)?\s*\("), "Unescaped HTML Injection", Severity.HIGH),
    (re.compile(r"dangerouslySetInnerHTML"), "Unescaped HTML Injection", Severity.HIGH),
]

_SQL_KEYWORDS = r"(?:SELECT|INSERT\s+INTO|UPDATE|DELETE\s+FROM)"

_SQL_RULES: list[Rule] = [
    (re.compile(rf"""["'][^"'\n]*\b{_SQL_KEYWORDS}\b[^"'\n]*["']\s*\+\s*(?!["'])""", re.IGNORECASE),
     "SQL String Concatenation", Severity.HIGH),
    (re.compile(rf"`[^`]*\b{_SQL_KEYWORDS}\b[^`]*\$\{{[^}}]+\}}[^`]*`", re.IGNORECASE),
     "SQL Template Interpolation", Severity.HIGH),
    (re.compile(rf"""\bf["'][^"'\n]*\b{_SQL_KEYWORDS}\b[^"'\n]*\{{[^}}]+\}}""", re.IGNORECASE),
     "SQL F-String Interpolation", Severity.HIGH),
    (re.compile(rf"""["'][^"'\n]*\b{_SQL_KEYWORDS}\b[^"'\n]*["']\s*%\s*[\w(]""", re.IGNORECASE),
     "SQL Percent Formatting", Severity.HIGH),
    (re.compile(rf"""["'][^"'\n]*\b{_SQL_KEYWORDS}\b[^"'\n]*["']\s*\.format\s*\(""", re.IGNORECASE),
     "SQL Format Call", Severity.HIGH),
]

_PARAMETERIZED_SIGNALS = [
    (re.compile(r"(?i)\b(?:WHERE|VALUES|SET)\b[^\n]*(?:\?|\$\d+|%s|:\w+)"), "parameterized query placeholders"),
    (re.compile(r"\.prepare\s*\("), "prepared statements"),
    (re.compile(r"\bexecute\s*\([^)\n]*,\s*[\[({]"), "bound query parameters"),
    (re.compile(
        r"\b(?:SQLAlchemy|Prisma|Sequelize|TypeORM|Drizzle|Knex|ActiveRecord|Hibernate|peewee|tortoise)\b",
        re.IGNORECASE,
    ), "ORM usage"),
]

_USER_INPUT = r"(?:req\.|request\.|params|query|body|input|location\.|user\w*|formData)"

_XSS_RULES: list[Rule] = [
    (re.compile(rf"\.(?:innerHTML|outerHTML)\s*=(?!=)[^;\n]*{_USER_INPUT}"), "User Input In HTML Sink", Severity.HIGH),
    (re.compile(rf"\bdocument\.write(?:ln)?\s*\([^)\n]*{_USER_INPUT}"), "User Input In HTML Sink", Severity.HIGH),
    (re.compile(rf"\.insertAdjacentHTML\s*\([^)\n]*{_USER_INPUT}"), "User Input In HTML Sink", Severity.HIGH),
    (re.compile(r"\bres\.send\s*\(\s*(?:`[^`]*\$\{req\.|[\"'][^\"'\n]*<[^\"'\n]*[\"']\s*\+\s*req\.)"),
     "Unescaped Request Data In Response", Severity.HIGH),
    (re.compile(r"\brender_template_string\s*\([^)\n]*request\."), "Unescaped Request Data In Response", Severity.HIGH),
    (re.compile(r"\bMarkup\s*\([^)\n]*request\."), "Unescaped Request Data In Response", Severity.HIGH),
]

_ESCAPING_SIGNALS = [
    (re.compile(r"\bescape(?:Html|HTML)?\s*\("), "output escaping"),
    (re.compile(r"\bsanitize\w*\s*\("), "sanitization"),
    (re.compile(r"\bDOMPurify\b"), "DOMPurify"),
    (re.compile(r"\bhelmet\b"), "helmet"),
    (re.compile(r"\b(?:html\.escape|bleach\.clean|markupsafe)\b"), "output escaping"),
]


def find_insecure_patterns(content: str, path: str) -> list[Finding]:
    return match_rules(content, _INSECURE_RULES)


def find_sql_injection(content: str, path: str) -> list[Finding]:
    return match_rules(content, _SQL_RULES, per_line=True)


def parameterized_evidence(content: str, path: str) -> list[str]:
    return signals(content, _PARAMETERIZED_SIGNALS)


def find_xss(content: str, path: str) -> list[Finding]:
    return match_rules(content, _XSS_RULES, per_line=True)


def escaping_evidence(content: str, path: str) -> list[str]:
    return signals(content, _ESCAPING_SIGNALS)
