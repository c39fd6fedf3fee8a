"""Tiered static validators for code quality, security, testing and workflow."""

from .config import EngineConfig, load_config
from .orchestrator import Orchestrator
from .validators import VALIDATORS, create_validator, tier_validators

__version__ = "1.0.0"

__all__ = [
    "EngineConfig",
    "Orchestrator",
    "VALIDATORS",
    "create_validator",
    "load_config",
    "tier_validators",
]
