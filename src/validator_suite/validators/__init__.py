"""Validator registry."""

from typing import Optional

from ..config import EngineConfig
from ..errors import UnknownValidatorError
from .base import FileValidator, ProjectValidator, Validator
from .branch_strategy import BranchStrategyValidator
from .code_quality import CodeQualityValidator
from .documentation import DocumentationValidator
from .security import SecurityValidator
from .spec_adherence import SpecAdherenceValidator
from .testing import TestingCompletenessValidator

VALIDATORS: dict[str, type[Validator]] = {
    cls.name: cls
    for cls in (
        CodeQualityValidator,
        SpecAdherenceValidator,
        SecurityValidator,
        BranchStrategyValidator,
        TestingCompletenessValidator,
        DocumentationValidator,
    )
}

TIER_LABELS = {1: "Critical Quality", 2: "Development Workflow"}


def create_validator(
    name: str,
    config: Optional[EngineConfig] = None,
    spec_path: Optional[str] = None,
) -> Validator:
    """Instantiate a validator by registry name.

    Raises:
        UnknownValidatorError: If no validator has that name.
    """
    cls = VALIDATORS.get(name)
    if cls is None:
        raise UnknownValidatorError(
            f"Unknown validator '{name}'. Available: {', '.join(VALIDATORS)}"
        )
    if cls is SpecAdherenceValidator:
        return SpecAdherenceValidator(config, spec_path=spec_path)
    return cls(config)


def tier_validators(
    tier: int,
    config: Optional[EngineConfig] = None,
    spec_path: Optional[str] = None,
) -> list[Validator]:
    return [create_validator(name, config, spec_path) for name, cls in VALIDATORS.items() if cls.tier == tier]


__all__ = [
    "BranchStrategyValidator",
    "CodeQualityValidator",
    "DocumentationValidator",
    "FileValidator",
    "ProjectValidator",
    "SecurityValidator",
    "SpecAdherenceValidator",
    "TIER_LABELS",
    "TestingCompletenessValidator",
    "VALIDATORS",
    "Validator",
    "create_validator",
    "tier_validators",
]
