"""
SECURITY DETECTION MODULE: patterns that DETECT request handling without input
validation, routes without authentication, and plaintext HTTP endpoints.
READ-ONLY static analysis.
"""

import re

from ..models import Finding, Severity
from .base import Rule, match_rules, signals

_REQUEST_INPUT_RE = re.compile(
    r"\breq\.(?:body|query|params|headers)\b"
    r"|\brequest\.(?:json|form|args|values|get_json|data|GET|POST|query_params)\b"
    r"|\$_(?:GET|POST|REQUEST)\b"
)

_VALIDATION_SIGNALS = [
    (re.compile(r"\b(?:validator|joi|Joi|yup|zod|z)\.\w+"), "schema validation library"),
    (re.compile(r"express-validator|class-validator|marshmallow|cerberus|jsonschema|\bajv\b"), "validation library"),
    (re.compile(r"\b(?:pydantic|BaseModel|field_validator)\b"), "pydantic models"),
    (re.compile(r"\bvalidate\w*\s*\("), "validate() calls"),
    (re.compile(r"\bsanitize\w*\s*\("), "sanitize() calls"),
]

_ROUTE_RE = re.compile(
    r"\b(?:app|router|server|api|bp|blueprint)\.(?:get|post|put|patch|delete|route|all)\s*\("
    r"|@\w+\.(?:get|post|put|patch|delete|route)\s*\("
    r"|['\"`]/api/[\w/:{}-]*['\"`]"
)

_AUTH_SIGNALS = [
    (re.compile(r"\b(?:passport|bcrypt|jsonwebtoken|jwt)\b", re.IGNORECASE), "auth library"),
    (re.compile(r"\b(?:authenticate\w*|isAuthenticated|requireAuth|ensureAuth\w*|login_required|verify_token)\b"),
     "auth middleware"),
    (re.compile(r"\b(?:authorization|authorize|permission_required|Depends\s*\(\s*get_current_user)", re.IGNORECASE),
     "authorization"),
    (re.compile(r"\bauth(?:Middleware|Guard)?\s*[,)]"), "auth middleware"),
]

_PLAINTEXT_HTTP_RULES: list[Rule] = [
    (re.compile(
        r"http://(?!(?:localhost|127(?:\.\d{1,3}){3}|\[::1\]|0\.0\.0\.0|www\.w3\.org)(?![\w.-]))[^\s'\"`<>)]+"
    ), "Plaintext HTTP Endpoint", Severity.LOW),
]


def reads_request_input(content: str, path: str) -> bool:
    return bool(_REQUEST_INPUT_RE.search(content))


def has_routes(content: str, path: str) -> bool:
    return bool(_ROUTE_RE.search(content))


def validation_evidence(content: str, path: str) -> list[str]:
    return signals(content, _VALIDATION_SIGNALS)


def find_unvalidated_input(content: str, path: str) -> list[Finding]:
    if validation_evidence(content, path):
        return []
    return match_rules(content, [(_REQUEST_INPUT_RE, "Unvalidated Request Input", Severity.MEDIUM)], per_line=True)


def auth_evidence(content: str, path: str) -> list[str]:
    return signals(content, _AUTH_SIGNALS)


def find_unprotected_routes(content: str, path: str) -> list[Finding]:
    if auth_evidence(content, path):
        return []
    return match_rules(content, [(_ROUTE_RE, "Route Without Authentication", Severity.MEDIUM)], per_line=True)


def find_plaintext_http(content: str, path: str) -> list[Finding]:
    return match_rules(content, _PLAINTEXT_HTTP_RULES)
