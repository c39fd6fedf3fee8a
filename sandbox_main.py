#!/usr/bin/env python3
"""
Sandbox entrypoint for validator-suite.
Reads run parameters from stdin JSON, runs the requested validators, outputs the report record as JSON to stdout.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

sys.path.insert(0, str(Path(__file__).parent / "src"))

from git.exc import GitCommandError

from validator_suite.config import load_config
from validator_suite.errors import ValidatorSuiteError
from validator_suite.git_utils import cloned_repo
from validator_suite.orchestrator import Orchestrator
from validator_suite.report import render
from validator_suite.validators import TIER_LABELS, VALIDATORS, create_validator, tier_validators

logging.basicConfig(level=logging.INFO, stream=sys.stderr)
logger = logging.getLogger(__name__)


def _run(
    root: Path,
    validators: Optional[list[str]] = None,
    tier: Optional[int] = None,
    spec_path: Optional[str] = None,
    timeout: Optional[float] = None,
) -> dict[str, Any]:
    if not root.is_dir():
        raise ValueError(f"Path is not a directory: {root}")
    config = load_config()

    if validators:
        selected = [create_validator(name, config, spec_path) for name in validators]
        orchestrator = Orchestrator(selected, config)
        if len(selected) == 1:
            report = orchestrator.run_validator(selected[0].name, str(root), timeout=timeout)
        else:
            report = orchestrator.run_all(str(root), timeout=timeout)
    elif tier is not None:
        orchestrator = Orchestrator(tier_validators(tier, config, spec_path), config)
        report = orchestrator.run_tier(tier, str(root), timeout=timeout)
    else:
        everything = [v for t in sorted(TIER_LABELS) for v in tier_validators(t, config, spec_path)]
        report = Orchestrator(everything, config).run_all(str(root), timeout=timeout)

    return render(report, config).json


def main() -> None:
    try:
        input_data = json.load(sys.stdin)
    except json.JSONDecodeError as e:
        print(json.dumps({"error": f"Invalid JSON input: {e}"}))
        sys.exit(1)

    repo_url = input_data.get("repo_url")
    local_path = input_data.get("path") or input_data.get("directory")

    if not repo_url and not local_path:
        print(
            json.dumps(
                {
                    "error": "Missing required input. Provide either 'repo_url' (git URL) or 'path'/'directory' (local path)",
                    "examples": {
                        "remote": {"repo_url": "https://github.com/user/repo"},
                        "local": {"path": ".", "tier": 1},
                    },
                }
            )
        )
        sys.exit(1)

    tier = input_data.get("tier")
    if tier is not None and tier not in TIER_LABELS:
        print(json.dumps({"error": f"Invalid tier '{tier}'", "valid_tiers": sorted(TIER_LABELS)}))
        sys.exit(1)

    validators = input_data.get("validators")
    unknown = [name for name in validators or [] if name not in VALIDATORS]
    if unknown:
        print(json.dumps({"error": f"Unknown validator(s): {', '.join(unknown)}", "valid_validators": list(VALIDATORS)}))
        sys.exit(1)

    options = {
        "validators": validators,
        "tier": tier,
        "spec_path": input_data.get("spec_path"),
        "timeout": input_data.get("timeout"),
    }

    try:
        if repo_url:
            try:
                with cloned_repo(repo_url) as repo_path:
                    record = _run(repo_path, **options)
            except GitCommandError as e:
                raise RuntimeError(f"Failed to clone repository: {e}") from e
        else:
            record = _run(Path(local_path).resolve(), **options)
        print(json.dumps(record))
    except (ValidatorSuiteError, ValueError, RuntimeError) as e:
        print(json.dumps({"error": str(e)}))
        sys.exit(1)


if __name__ == "__main__":
    main()
