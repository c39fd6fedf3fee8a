"""Structured and human-readable report rendering."""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from .config import EngineConfig
from .models import AggregateResult, CombinedReport, Status, Summary, TierRating, TierReport

Report = Union[AggregateResult, TierReport, CombinedReport]

_KINDS: dict[str, type] = {
    "validator": AggregateResult,
    "tier": TierReport,
    "combined": CombinedReport,
}

_MARKERS = {Status.PASS: "[PASS]", Status.WARNING: "[WARN]", Status.FAIL: "[FAIL]"}

RULE = "=" * 60

RATING_MESSAGES = {
    TierRating.EXCELLENT: "Excellent! The project meets high quality standards.",
    TierRating.GOOD: "Good quality with some room for improvement.",
    TierRating.MODERATE: "Moderate quality. Several issues need attention.",
    TierRating.NEEDS_WORK: "Significant improvements needed.",
}


@dataclass(frozen=True)
class RenderedReport:
    json: dict[str, Any]
    text: str


def _kind(report: Report) -> str:
    for kind, cls in _KINDS.items():
        if isinstance(report, cls):
            return kind
    raise TypeError(f"Cannot render {type(report).__name__}")


def to_record(report: Report, generated_at: Optional[datetime] = None) -> dict[str, Any]:
    """Structured record: the report payload plus its kind and a timestamp."""
    generated_at = generated_at or datetime.now(timezone.utc)
    return {
        "kind": _kind(report),
        "generated_at": generated_at.isoformat(),
        "report": report.model_dump(mode="json"),
    }


def load_report(record: dict[str, Any]) -> Report:
    """Rebuild the report model from a structured record."""
    cls = _KINDS.get(record.get("kind", ""))
    if cls is None:
        raise ValueError(f"Unknown report kind: {record.get('kind')!r}")
    return cls.model_validate(record["report"])


def _percent(part: int, total: int) -> str:
    return f"{round(100 * part / total)}%" if total else "n/a"


def _summary_lines(summary: Summary) -> list[str]:
    return [
        f"Files:  {summary.total_files} total, {summary.passed_files} passed, "
        f"{summary.warning_files} warnings, {summary.failed_files} failed "
        f"({_percent(summary.passed_files, summary.total_files)} passing)",
        f"Checks: {summary.total_validations} total, {summary.passed_validations} passed, "
        f"{summary.warning_validations} warnings, {summary.failed_validations} failed",
    ]


def _validator_lines(result: AggregateResult, examples: int) -> list[str]:
    lines = [f"{_MARKERS[result.overall_status]} {result.validator}  score {result.score}%"]
    if result.error:
        lines.append(f"  ERROR: {result.error}")
        return lines
    if result.partial:
        lines.append("  (partial: run cancelled before all files were analyzed)")
    if result.coverage:
        lines.append(f"  Coverage: {result.coverage.percent:g}% ({result.coverage.band.value}, +{result.coverage.points})")
    lines.extend("  " + line for line in _summary_lines(result.summary))
    for file_result in result.files:
        failing = [v for v in file_result.validations if v.status != Status.PASS]
        if not failing:
            continue
        lines.append(f"  {file_result.path}")
        for validation in failing:
            lines.append(f"    {_MARKERS[validation.status]} {validation.name}: {validation.message}")
            for finding in validation.findings[:examples]:
                location = f"line {finding.line}: " if finding.line else ""
                lines.append(f"        {location}{finding.excerpt}")
            hidden = len(validation.findings) - examples
            if hidden > 0:
                lines.append(f"        ... and {hidden} more")
    return lines


def _recommendation_lines(recommendations: list[str], total: Optional[int] = None) -> list[str]:
    if not recommendations:
        return []
    lines = ["", "Recommendations:"]
    lines.extend(f"  {i}. {rec}" for i, rec in enumerate(recommendations, 1))
    if total is not None and total > len(recommendations):
        lines.append(f"  ... and {total - len(recommendations)} more")
    return lines


def _tier_lines(report: TierReport, examples: int) -> list[str]:
    lines = [
        RULE,
        f"Tier {report.tier}: {report.label}",
        RULE,
        f"Tier score: {report.score}% ({report.status.value})  overall {report.overall_status.value}",
    ]
    if report.partial:
        lines.append("(partial: run cancelled)")
    for entry in report.validators:
        lines.append("")
        if entry.result is None:
            lines.append(f"[SKIP] {entry.name}  not run (cancelled)")
        else:
            lines.extend(_validator_lines(entry.result, examples))
    return lines


def render_text(report: Report, config: Optional[EngineConfig] = None) -> str:
    config = config or EngineConfig()
    examples = config.example_findings
    if isinstance(report, AggregateResult):
        lines = [RULE, f"{report.validator} validation report", RULE]
        lines.extend(_validator_lines(report, examples))
        lines.extend(_recommendation_lines(report.recommendations))
    elif isinstance(report, TierReport):
        lines = _tier_lines(report, examples)
        lines.extend(_recommendation_lines(report.recommendations[:config.top_recommendations], len(report.recommendations)))
    else:
        lines = []
        for tier in report.tiers:
            lines.extend(_tier_lines(tier, examples))
            lines.append("")
        lines.extend([
            RULE,
            "Combined Report",
            RULE,
            f"Quality score: {report.score}% ({report.status.value})",
            RATING_MESSAGES[report.status],
            f"Overall status: {report.overall_status.value}  state {report.state.value}",
        ])
        lines.extend(_summary_lines(report.summary))
        lines.extend(_recommendation_lines(report.recommendations, report.total_recommendations))
    return "\n".join(lines) + "\n"


def render(report: Report, config: Optional[EngineConfig] = None) -> RenderedReport:
    """Render a report as a structured record and as console text."""
    return RenderedReport(json=to_record(report), text=render_text(report, config))


def write_report(rendered: RenderedReport, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(rendered.json, indent=2) + "\n", encoding="utf-8")
    return path
