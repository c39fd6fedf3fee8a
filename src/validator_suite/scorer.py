"""Status roll-ups, summaries, scores and recommendation lists."""

from typing import Iterable, Optional

from .config import EngineConfig
from .models import (
    AggregateResult,
    CoverageBand,
    CoverageGrade,
    FileResult,
    Status,
    Summary,
    TierRating,
)


def roll_up(statuses: Iterable[Status]) -> Status:
    """FAIL if anything failed, WARNING if anything warned, else PASS."""
    worst = Status.PASS
    for status in statuses:
        if status.rank > worst.rank:
            worst = status
    return worst


def dedupe(items: Iterable[Optional[str]]) -> list[str]:
    """Drop empties and repeats, keeping first-seen order."""
    return list(dict.fromkeys(item for item in items if item))


def build_summary(files: list[FileResult]) -> Summary:
    validations = [v for f in files for v in f.validations]
    return Summary(
        total_files=len(files),
        passed_files=sum(1 for f in files if f.status == Status.PASS),
        warning_files=sum(1 for f in files if f.status == Status.WARNING),
        failed_files=sum(1 for f in files if f.status == Status.FAIL),
        total_validations=len(validations),
        passed_validations=sum(1 for v in validations if v.status == Status.PASS),
        warning_validations=sum(1 for v in validations if v.status == Status.WARNING),
        failed_validations=sum(1 for v in validations if v.status == Status.FAIL),
    )


def merge_summaries(summaries: Iterable[Summary]) -> Summary:
    totals = dict.fromkeys(Summary.model_fields, 0)
    for summary in summaries:
        for key, value in summary.model_dump().items():
            totals[key] += value
    return Summary(**totals)


def violating_checks(files: list[FileResult]) -> list[str]:
    """Distinct check names with at least one non-PASS validation."""
    return list(dict.fromkeys(
        v.name for f in files for v in f.validations if v.status != Status.PASS
    ))


def compute_score(files: list[FileResult], config: EngineConfig) -> int:
    return max(0, config.base_score - config.per_violation * len(violating_checks(files)))


def grade_coverage(percent: float, config: EngineConfig) -> CoverageGrade:
    bands = config.coverage
    if percent >= bands.excellent:
        band, points = CoverageBand.EXCELLENT, bands.excellent_points
    elif percent >= bands.good:
        band, points = CoverageBand.GOOD, bands.good_points
    elif percent >= bands.fair:
        band, points = CoverageBand.FAIR, bands.fair_points
    else:
        band, points = CoverageBand.POOR, 0
    recommendation = None
    if band == CoverageBand.POOR:
        recommendation = f"Increase test coverage from {percent:g}% to at least {bands.floor:g}%"
    return CoverageGrade(percent=percent, band=band, points=points, recommendation=recommendation)


def aggregate(
    validator: str,
    files: list[FileResult],
    config: EngineConfig,
    partial: bool = False,
    coverage: Optional[CoverageGrade] = None,
) -> AggregateResult:
    """Reduce a validator's FileResults to one AggregateResult.

    Files are sorted by path so parallel evaluation yields the same record.
    Coverage-scored validators pass ``coverage``; their score is the rounded
    coverage percentage instead of the violation-count formula.
    """
    files = sorted(files, key=lambda f: f.path)
    score = round(coverage.percent) if coverage else compute_score(files, config)
    recommendations = [r for f in files for r in f.recommendations]
    if coverage and coverage.recommendation:
        recommendations.append(coverage.recommendation)
    return AggregateResult(
        validator=validator,
        files=files,
        overall_status=roll_up(f.status for f in files),
        summary=build_summary(files),
        score=max(0, min(100, score)),
        recommendations=dedupe(recommendations),
        partial=partial,
        coverage=coverage,
    )


def failed_result(validator: str, error: str) -> AggregateResult:
    """Result recorded for a validator that aborted."""
    return AggregateResult(
        validator=validator,
        overall_status=Status.FAIL,
        summary=Summary(),
        score=0,
        recommendations=[],
        error=error,
    )


def tier_score(scores: dict[str, int], config: EngineConfig) -> int:
    """Weighted mean of member scores, rounded to the nearest integer."""
    total_weight = sum(config.weight_for(name) for name in scores)
    if not total_weight:
        return 0
    weighted = sum(score * config.weight_for(name) for name, score in scores.items())
    return round(weighted / total_weight)


def rate_tier(score: int, config: EngineConfig) -> TierRating:
    thresholds = config.tier_thresholds
    if score >= thresholds.excellent:
        return TierRating.EXCELLENT
    if score >= thresholds.good:
        return TierRating.GOOD
    if score >= thresholds.moderate:
        return TierRating.MODERATE
    return TierRating.NEEDS_WORK
