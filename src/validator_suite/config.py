"""Engine configuration.

Every scoring constant is a tunable threshold. Values come from the defaults
below, an optional JSON file and a couple of environment overrides.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "VALIDATOR_SUITE_CONFIG"
MAX_WORKERS_ENV_VAR = "VALIDATOR_SUITE_MAX_WORKERS"
MAX_FILE_BYTES_ENV_VAR = "VALIDATOR_SUITE_MAX_FILE_BYTES"

DEFAULT_TIER_WEIGHTS = {
    "code-quality": 40,
    "spec-adherence": 30,
    "security": 30,
    "testing": 40,
    "branch-strategy": 15,
    "documentation": 15,
}


class CoverageBands(BaseModel):
    excellent: float = 90
    good: float = 80
    fair: float = 70
    excellent_points: int = 30
    good_points: int = 20
    fair_points: int = 10
    floor: float = Field(default=90, description="Target used in the POOR recommendation")


class TierThresholds(BaseModel):
    excellent: int = 90
    good: int = 75
    moderate: int = 60


class CodeQualityLimits(BaseModel):
    code_max_lines: int = 300
    test_max_lines: int = 500
    doc_max_lines: int = 1000
    config_max_lines: int = 500
    complexity_warning: int = 10
    complexity_failure: int = 20
    duplicate_window: int = 4
    min_documented_ratio: float = 0.5


class EngineConfig(BaseModel):
    base_score: int = 100
    per_violation: int = 10
    coverage: CoverageBands = Field(default_factory=CoverageBands)
    coverage_pass: float = 80
    coverage_warning: float = 60
    readme_pass: float = 80
    readme_warning: float = 60
    comments_pass: float = 70
    comments_warning: float = 50
    keyword_match_ratio: float = Field(default=0.5, description="Share of a requirement's keywords that must appear in the code")
    max_subject_length: int = 72
    tier_weights: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_TIER_WEIGHTS),
        description="Relative weight of each validator inside its tier",
    )
    tier_thresholds: TierThresholds = Field(default_factory=TierThresholds)
    code_quality: CodeQualityLimits = Field(default_factory=CodeQualityLimits)
    max_file_bytes: int = 500_000
    max_workers: Optional[int] = Field(default=None, description="None means os.cpu_count()")
    top_recommendations: int = 5
    example_findings: int = 3
    stale_branch_days: int = 30
    commit_history_depth: int = 10
    dependency_denylist: list[str] = Field(
        default_factory=lambda: ["lodash", "moment", "request", "node-sass", "pycrypto"]
    )

    @field_validator("tier_weights", mode="before")
    @classmethod
    def _merge_tier_weights(cls, value):
        if isinstance(value, dict):
            return {**DEFAULT_TIER_WEIGHTS, **value}
        return value

    def worker_count(self) -> int:
        return self.max_workers or os.cpu_count() or 1

    def weight_for(self, validator: str) -> float:
        return self.tier_weights.get(validator, 1.0)


def load_config(path: Optional[str] = None) -> EngineConfig:
    """Build the engine configuration.

    Args:
        path: Optional JSON file. Falls back to $VALIDATOR_SUITE_CONFIG.

    Returns:
        EngineConfig with environment overrides applied.

    Raises:
        ConfigError: If the file cannot be read or holds invalid values.
    """
    path = path or os.getenv(CONFIG_ENV_VAR)
    data: dict = {}
    if path:
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not load config {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must hold a JSON object, not {type(data).__name__}")
        logger.debug(f"Loaded config from {path}")

    for env_var, key in ((MAX_WORKERS_ENV_VAR, "max_workers"), (MAX_FILE_BYTES_ENV_VAR, "max_file_bytes")):
        raw = os.getenv(env_var)
        if raw:
            data[key] = raw

    try:
        return EngineConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
