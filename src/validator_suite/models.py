"""Data models for validation results."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Status(str, Enum):
    PASS = "PASS"
    WARNING = "WARNING"
    FAIL = "FAIL"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]


_STATUS_RANK = {Status.PASS: 0, Status.WARNING: 1, Status.FAIL: 2}


class Severity(str, Enum):
    INFO = "INFO"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class CoverageBand(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"


class TierRating(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    MODERATE = "MODERATE"
    NEEDS_WORK = "NEEDS-WORK"


class RunState(str, Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    DONE = "DONE"
    ABORTED = "ABORTED"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class Finding(_Record):
    """A single rule match at a specific location in a file."""

    rule_type: str = Field(description="Kind of match, e.g. 'Hardcoded Secret'")
    excerpt: str = Field(description="Matched text, redacted for secret values")
    line: int = Field(description="1-based line number, 0 for project-level findings")
    severity: Severity


class Validation(_Record):
    """Outcome of one named check on one file."""

    name: str
    status: Status
    message: str
    findings: list[Finding] = Field(default_factory=list)
    recommendation: Optional[str] = None
    evidence: list[str] = Field(
        default_factory=list,
        description="Positive signals seen by the check; never cancel a violation",
    )
    metrics: dict[str, float] = Field(default_factory=dict)


class FileResult(_Record):
    """All validations for one file under one validator."""

    path: str = Field(description="POSIX path relative to the scan root, '.' for project-level results")
    status: Status
    validations: list[Validation] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class Summary(_Record):
    total_files: int = 0
    passed_files: int = 0
    warning_files: int = 0
    failed_files: int = 0
    total_validations: int = 0
    passed_validations: int = 0
    warning_validations: int = 0
    failed_validations: int = 0


class CoverageGrade(_Record):
    percent: float
    band: CoverageBand
    points: int = Field(description="Score contribution of the band")
    recommendation: Optional[str] = None


class AggregateResult(_Record):
    """Roll-up of every FileResult produced by one validator."""

    validator: str
    files: list[FileResult] = Field(default_factory=list)
    overall_status: Status
    summary: Summary
    score: int = Field(ge=0, le=100)
    recommendations: list[str] = Field(default_factory=list)
    partial: bool = False
    error: Optional[str] = Field(default=None, description="Set when the validator could not run")
    coverage: Optional[CoverageGrade] = None


class ValidatorEntry(_Record):
    name: str
    result: Optional[AggregateResult] = Field(
        default=None, description="None when the validator was skipped by cancellation"
    )


class TierReport(_Record):
    tier: int = Field(ge=1, le=2)
    label: str
    validators: list[ValidatorEntry] = Field(default_factory=list)
    score: int
    status: TierRating
    overall_status: Status
    summary: Summary
    recommendations: list[str] = Field(default_factory=list)
    partial: bool = False


class CombinedReport(_Record):
    tiers: list[TierReport] = Field(default_factory=list)
    summary: Summary
    recommendations: list[str] = Field(default_factory=list)
    total_recommendations: int = 0
    overall_status: Status
    score: int
    status: TierRating
    state: RunState
    partial: bool = False
