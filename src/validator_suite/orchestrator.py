"""Tiered orchestration of validators into tier and combined reports."""

import logging
import threading
import time
from typing import Callable, Optional

from .config import EngineConfig
from .errors import PreconditionError, UnknownValidatorError
from .models import (
    AggregateResult,
    CombinedReport,
    RunState,
    TierReport,
    ValidatorEntry,
)
from . import scorer
from .validators import TIER_LABELS, Validator

logger = logging.getLogger(__name__)


class Orchestrator:
    """Runs validators one tier at a time.

    Each run builds and returns its own report value. Cancellation is
    cooperative: ``cancel`` (a threading.Event) and ``timeout`` (seconds) are
    checked between files and between validators, and whatever completed is
    returned flagged as partial.
    """

    def __init__(self, validators: list[Validator], config: Optional[EngineConfig] = None):
        self.validators = validators
        self.config = config or EngineConfig()
        self.state = RunState.IDLE
        self.current_tier: Optional[int] = None

    def _stop_check(self, cancel: Optional[threading.Event], timeout: Optional[float]) -> Callable[[], bool]:
        deadline = time.monotonic() + timeout if timeout is not None else None

        def should_stop() -> bool:
            if cancel is not None and cancel.is_set():
                return True
            return deadline is not None and time.monotonic() >= deadline

        return should_stop

    def _run_one(self, validator: Validator, root: str, should_stop: Callable[[], bool]) -> AggregateResult:
        try:
            return validator.run(root, should_stop=should_stop)
        except PreconditionError as e:
            logger.error(f"{validator.title} validator cannot run: {e}")
            return scorer.failed_result(validator.name, str(e))
        except Exception as e:
            logger.error(f"{validator.title} validator failed: {e}")
            return scorer.failed_result(validator.name, f"{type(e).__name__}: {e}")

    def _run_tier(self, tier: int, root: str, should_stop: Callable[[], bool]) -> TierReport:
        self.current_tier = tier
        logger.info(f"Running tier {tier} ({TIER_LABELS[tier]})")
        entries = []
        for validator in (v for v in self.validators if v.tier == tier):
            if should_stop():
                logger.warning(f"Skipping {validator.title} validator: run cancelled")
                entries.append(ValidatorEntry(name=validator.name, result=None))
                continue
            entries.append(ValidatorEntry(name=validator.name, result=self._run_one(validator, root, should_stop)))
        return build_tier_report(tier, entries, self.config)

    def _finish(self, partial: bool) -> RunState:
        self.state = RunState.ABORTED if partial else RunState.DONE
        self.current_tier = None
        return self.state

    def run_validator(
        self,
        name: str,
        root: str,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> AggregateResult:
        validator = next((v for v in self.validators if v.name == name), None)
        if validator is None:
            raise UnknownValidatorError(f"Unknown validator '{name}'")
        self.state = RunState.RUNNING
        result = self._run_one(validator, root, self._stop_check(cancel, timeout))
        self._finish(result.partial)
        return result

    def run_tier(
        self,
        tier: int,
        root: str,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> TierReport:
        self.state = RunState.RUNNING
        report = self._run_tier(tier, root, self._stop_check(cancel, timeout))
        self._finish(report.partial)
        return report

    def run_all(
        self,
        root: str,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> CombinedReport:
        self.state = RunState.RUNNING
        should_stop = self._stop_check(cancel, timeout)
        tiers = [self._run_tier(tier, root, should_stop) for tier in sorted({v.tier for v in self.validators})]
        partial = any(t.partial for t in tiers)
        state = self._finish(partial)
        return build_combined_report(tiers, state, self.config)


def build_tier_report(tier: int, entries: list[ValidatorEntry], config: EngineConfig) -> TierReport:
    results = [e.result for e in entries if e.result is not None]
    score = scorer.tier_score({r.validator: r.score for r in results}, config)
    partial = len(results) < len(entries) or any(r.partial for r in results)
    return TierReport(
        tier=tier,
        label=TIER_LABELS[tier],
        validators=entries,
        score=score,
        status=scorer.rate_tier(score, config),
        overall_status=scorer.roll_up(r.overall_status for r in results),
        summary=scorer.merge_summaries(r.summary for r in results),
        recommendations=scorer.dedupe(rec for r in results for rec in r.recommendations),
        partial=partial,
    )


def build_combined_report(tiers: list[TierReport], state: RunState, config: EngineConfig) -> CombinedReport:
    recommendations = scorer.dedupe(rec for t in tiers for rec in t.recommendations)
    score = round(sum(t.score for t in tiers) / len(tiers)) if tiers else 0
    return CombinedReport(
        tiers=tiers,
        summary=scorer.merge_summaries(t.summary for t in tiers),
        recommendations=recommendations[:config.top_recommendations],
        total_recommendations=len(recommendations),
        overall_status=scorer.roll_up(t.overall_status for t in tiers),
        score=score,
        status=scorer.rate_tier(score, config),
        state=state,
        partial=any(t.partial for t in tiers),
    )
