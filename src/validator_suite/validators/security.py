from ..checks import Check, CheckKind
from ..checks.access import (
    auth_evidence,
    find_plaintext_http,
    find_unprotected_routes,
    find_unvalidated_input,
    has_routes,
    reads_request_input,
    validation_evidence,
)
from ..checks.file_roles import find_config_exposure, find_env_values, make_dependency_check
from ..checks.injection import (
    escaping_evidence,
    find_insecure_patterns,
    find_sql_injection,
    find_xss,
    parameterized_evidence,
)
from ..checks.secrets import find_hardcoded_secrets
from ..file_walker import ENV_FILE_NAMES, MANIFEST_NAMES, is_config_file, is_env_file, is_manifest
from .base import FileValidator

SECURITY_EXTENSIONS = frozenset({
    ".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs", ".py", ".rb", ".php", ".java",
    ".cs", ".go", ".json", ".yaml", ".yml", ".toml", ".ini", ".cfg",
})


def _is_config(content: str, path: str) -> bool:
    return is_config_file(path)


def _is_manifest(content: str, path: str) -> bool:
    return is_manifest(path)


def _is_env(content: str, path: str) -> bool:
    return is_env_file(path)


class SecurityValidator(FileValidator):
    name = "security"
    title = "Security"
    tier = 2
    description = "Detects hardcoded secrets, injection and XSS risks, and weak auth or transport posture"
    extensions = SECURITY_EXTENSIONS
    names = ENV_FILE_NAMES | MANIFEST_NAMES

    def build_checks(self) -> list[Check]:
        return [
            Check(
                name="Hardcoded Secrets",
                detect=find_hardcoded_secrets,
                kind=CheckKind.HARD,
                recommendation="Move secrets to environment variables or secure configuration",
                passed_message="No hardcoded secrets detected",
                issue_message="Found {count} potential hardcoded secret(s)",
            ),
            Check(
                name="Insecure Patterns",
                detect=find_insecure_patterns,
                kind=CheckKind.HARD,
                recommendation="Replace insecure patterns with safe alternatives",
                passed_message="No insecure patterns detected",
                issue_message="Found {count} insecure pattern(s)",
            ),
            Check(
                name="SQL Injection Prevention",
                detect=find_sql_injection,
                kind=CheckKind.HARD,
                recommendation="Use parameterized queries or prepared statements",
                passed_message="No SQL built from string concatenation or interpolation",
                issue_message="Found {count} potential SQL injection point(s)",
                evidence=parameterized_evidence,
            ),
            Check(
                name="XSS Prevention",
                detect=find_xss,
                kind=CheckKind.HARD,
                recommendation="Sanitize user input and use safe DOM manipulation methods",
                passed_message="No user input reaching HTML sinks",
                issue_message="Found {count} potential XSS sink(s)",
                evidence=escaping_evidence,
            ),
            Check(
                name="Input Validation",
                detect=find_unvalidated_input,
                recommendation="Add input validation for all user-provided data",
                passed_message="Request input is validated",
                issue_message="Request input read without validation in {count} place(s)",
                applies=reads_request_input,
                evidence=validation_evidence,
            ),
            Check(
                name="Authentication",
                detect=find_unprotected_routes,
                recommendation="Consider adding authentication for protected routes",
                passed_message="Authentication mechanisms detected",
                issue_message="Found {count} route(s) with no authentication mechanism",
                applies=has_routes,
                evidence=auth_evidence,
            ),
            Check(
                name="HTTPS/TLS",
                detect=find_plaintext_http,
                recommendation="Replace HTTP URLs with HTTPS for external services",
                passed_message="No plaintext HTTP endpoints",
                issue_message="Found {count} plaintext HTTP URL(s)",
            ),
            Check(
                name="Config Security",
                detect=find_config_exposure,
                recommendation="Move sensitive configuration to environment variables",
                passed_message="Configuration file holds no sensitive values",
                issue_message="Found {count} sensitive configuration value(s)",
                applies=_is_config,
            ),
            Check(
                name="Dependency Security",
                detect=make_dependency_check(self.config.dependency_denylist),
                recommendation="Review dependencies for security vulnerabilities and pin versions",
                passed_message="Dependencies are pinned and not on the denylist",
                issue_message="Found {count} dependency issue(s): {items}",
                applies=_is_manifest,
            ),
            Check(
                name="Environment Security",
                detect=find_env_values,
                recommendation="Replace actual values with example placeholders",
                passed_message="Environment file holds placeholders only",
                issue_message="Found {count} non-placeholder value(s)",
                applies=_is_env,
            ),
        ]
