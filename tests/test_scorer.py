"""Tests for aggregation, scoring and coverage grading."""

from validator_suite import scorer
from validator_suite.config import EngineConfig
from validator_suite.models import CoverageBand, FileResult, Status, TierRating, Validation

CONFIG = EngineConfig()


def _file(path, *statuses, name_prefix="Check"):
    validations = [
        Validation(
            name=f"{name_prefix} {i}",
            status=status,
            message="",
            recommendation=None if status == Status.PASS else f"Fix {name_prefix} {i}",
        )
        for i, status in enumerate(statuses)
    ]
    return FileResult(
        path=path,
        status=scorer.roll_up(statuses),
        validations=validations,
        recommendations=[v.recommendation for v in validations if v.recommendation],
    )


class TestRollUp:
    """Test status precedence."""

    def test_precedence(self):
        assert scorer.roll_up([]) == Status.PASS
        assert scorer.roll_up([Status.PASS, Status.WARNING]) == Status.WARNING
        assert scorer.roll_up([Status.WARNING, Status.FAIL, Status.PASS]) == Status.FAIL

    def test_dedupe_keeps_first_seen_order(self):
        assert scorer.dedupe(["b", "a", None, "b", "", "c"]) == ["b", "a", "c"]


class TestAggregate:
    """Test validator-level aggregation."""

    def test_mixed_project(self):
        files = (
            [_file(f"ok_{i}.py", Status.PASS) for i in range(7)]
            + [_file(f"warn_{i}.py", Status.WARNING) for i in range(2)]
            + [_file("bad.py", Status.FAIL)]
        )
        result = scorer.aggregate("demo", files, CONFIG)

        assert result.overall_status == Status.FAIL
        summary = result.summary
        assert summary.total_files == 10
        assert summary.failed_files == 1
        assert summary.passed_files + summary.warning_files + summary.failed_files == summary.total_files
        assert (
            summary.passed_validations + summary.warning_validations + summary.failed_validations
            == summary.total_validations
        )

    def test_files_sorted_and_recommendations_deduped(self):
        files = [_file("b.py", Status.WARNING), _file("a.py", Status.WARNING)]
        result = scorer.aggregate("demo", files, CONFIG)
        assert [f.path for f in result.files] == ["a.py", "b.py"]
        assert result.recommendations == ["Fix Check 0"]

    def test_score_counts_distinct_check_names(self):
        files = [
            _file("a.py", Status.FAIL, Status.WARNING),
            _file("b.py", Status.FAIL, Status.PASS),
        ]
        assert scorer.compute_score(files, CONFIG) == 80

    def test_score_clamped_at_zero(self):
        files = [_file("a.py", *([Status.FAIL] * 12))]
        assert scorer.compute_score(files, CONFIG) == 0

    def test_score_uses_configured_constants(self):
        config = EngineConfig(base_score=50, per_violation=5)
        assert scorer.compute_score([_file("a.py", Status.WARNING)], config) == 45

    def test_failed_result(self):
        result = scorer.failed_result("branch-strategy", "Not a Git repository: /tmp/x")
        assert result.overall_status == Status.FAIL
        assert result.score == 0
        assert result.files == []
        assert result.error == "Not a Git repository: /tmp/x"


class TestCoverageGrade:
    """Test coverage banding."""

    def test_bands(self):
        excellent = scorer.grade_coverage(92, CONFIG)
        assert (excellent.band, excellent.points) == (CoverageBand.EXCELLENT, 30)
        assert scorer.grade_coverage(85, CONFIG).band == CoverageBand.GOOD
        assert scorer.grade_coverage(85, CONFIG).points == 20
        assert scorer.grade_coverage(70, CONFIG).band == CoverageBand.FAIR
        assert scorer.grade_coverage(70, CONFIG).points == 10

    def test_poor_has_recommendation(self):
        grade = scorer.grade_coverage(45.5, CONFIG)
        assert grade.band == CoverageBand.POOR
        assert grade.points == 0
        assert grade.recommendation == "Increase test coverage from 45.5% to at least 90%"


class TestTierScore:
    """Test weighted tier scores and ratings."""

    def test_weighted_mean(self):
        scores = {"code-quality": 100, "spec-adherence": 50}
        assert scorer.tier_score(scores, CONFIG) == 79

    def test_tier_two_weights(self):
        scores = {"security": 90, "branch-strategy": 100, "testing": 81, "documentation": 70}
        assert scorer.tier_score(scores, CONFIG) == 85

    def test_empty_tier(self):
        assert scorer.tier_score({}, CONFIG) == 0

    def test_ratings(self):
        assert scorer.rate_tier(90, CONFIG) == TierRating.EXCELLENT
        assert scorer.rate_tier(89, CONFIG) == TierRating.GOOD
        assert scorer.rate_tier(75, CONFIG) == TierRating.GOOD
        assert scorer.rate_tier(74, CONFIG) == TierRating.MODERATE
        assert scorer.rate_tier(60, CONFIG) == TierRating.MODERATE
        assert scorer.rate_tier(59, CONFIG) == TierRating.NEEDS_WORK
