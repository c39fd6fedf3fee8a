"""Command-line frontend: validate, validate-all, validate-tier1/2, validate-list."""

from __future__ import annotations

import argparse
import json
import logging
import os
import signal
import sys
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import EngineConfig, load_config
from .errors import ConfigError, InvalidRootError, UnknownValidatorError
from .models import Status
from .orchestrator import Orchestrator
from .report import render, write_report
from .validators import TIER_LABELS, VALIDATORS, create_validator, tier_validators

logger = logging.getLogger(__name__)

REPORTS_DIR = "validation-reports"


def _check_root(path: str) -> str:
    if not os.path.isdir(path):
        raise InvalidRootError(f"Not a directory: {path}")
    if not os.access(path, os.R_OK | os.X_OK):
        raise InvalidRootError(f"Cannot read directory: {path}")
    return os.path.abspath(path)


def _load(args: argparse.Namespace) -> EngineConfig:
    config = load_config(args.config)
    if args.workers is not None:
        config = config.model_copy(update={"max_workers": args.workers})
    return config


@contextmanager
def _cancel_on_interrupt() -> Iterator[threading.Event]:
    """Turn Ctrl-C into a cooperative cancel so partial results are still reported."""
    cancel = threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield cancel
        return
    previous = signal.signal(signal.SIGINT, lambda signum, frame: cancel.set())
    try:
        yield cancel
    finally:
        signal.signal(signal.SIGINT, previous)


def _emit(report, args: argparse.Namespace, config: EngineConfig, default_name: str) -> int:
    rendered = render(report, config)
    if args.json:
        print(json.dumps(rendered.json, indent=2))
    else:
        print(rendered.text, end="")
    if not args.no_save:
        output = Path(args.output) if args.output else Path(REPORTS_DIR) / f"{default_name}.json"
        write_report(rendered, output)
        logger.info(f"Report saved to {output}")
    return 1 if report.overall_status == Status.FAIL else 0


def _cmd_validate(args: argparse.Namespace) -> int:
    config = _load(args)
    validator = create_validator(args.validator, config, spec_path=args.spec)
    root = _check_root(args.path)
    orchestrator = Orchestrator([validator], config)
    with _cancel_on_interrupt() as cancel:
        result = orchestrator.run_validator(validator.name, root, cancel=cancel, timeout=args.timeout)
    return _emit(result, args, config, validator.name)


def _cmd_validate_all(args: argparse.Namespace) -> int:
    config = _load(args)
    root = _check_root(args.path)
    validators = [v for tier in sorted(TIER_LABELS) for v in tier_validators(tier, config, args.spec)]
    with _cancel_on_interrupt() as cancel:
        report = Orchestrator(validators, config).run_all(root, cancel=cancel, timeout=args.timeout)
    return _emit(report, args, config, "all")


def _tier_command(tier: int):
    def _cmd_tier(args: argparse.Namespace) -> int:
        config = _load(args)
        root = _check_root(args.path)
        with _cancel_on_interrupt() as cancel:
            report = Orchestrator(tier_validators(tier, config, args.spec), config).run_tier(
                tier, root, cancel=cancel, timeout=args.timeout
            )
        return _emit(report, args, config, f"tier{tier}")

    return _cmd_tier


def _cmd_list(args: argparse.Namespace) -> int:
    for tier, label in sorted(TIER_LABELS.items()):
        print(f"Tier {tier}: {label}")
        for name, cls in VALIDATORS.items():
            if cls.tier == tier:
                print(f"  {name:<16} {cls.description}")
    return 0


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", nargs="?", default=".", help="Project root (default: current directory)")
    parser.add_argument("--output", "-o", default="", help=f"Report JSON path (default: {REPORTS_DIR}/<command>.json)")
    parser.add_argument("--no-save", action="store_true", help="Do not write the JSON report")
    parser.add_argument("--json", action="store_true", help="Print the structured record instead of text")
    parser.add_argument("--spec", default=None, help="Spec folder or spec.md for spec adherence")
    parser.add_argument("--workers", type=int, default=None, help="Worker threads per validator")
    parser.add_argument("--timeout", type=float, default=None, help="Stop after this many seconds and report partial results")
    parser.add_argument("--config", default=None, help="JSON file overriding engine thresholds")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="validator-suite", description="Tiered project validators")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="Run one validator")
    validate.add_argument("validator", help=f"One of: {', '.join(VALIDATORS)}")
    _add_run_options(validate)
    validate.set_defaults(func=_cmd_validate)

    validate_all = subparsers.add_parser("validate-all", help="Run every tier")
    _add_run_options(validate_all)
    validate_all.set_defaults(func=_cmd_validate_all)

    for tier, label in sorted(TIER_LABELS.items()):
        tier_cmd = subparsers.add_parser(f"validate-tier{tier}", help=f"Run tier {tier} ({label})")
        _add_run_options(tier_cmd)
        tier_cmd.set_defaults(func=_tier_command(tier))

    list_cmd = subparsers.add_parser("validate-list", help="List available validators")
    list_cmd.set_defaults(func=_cmd_list)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return int(args.func(args) or 0)
    except (UnknownValidatorError, InvalidRootError, ConfigError) as exc:
        parser.exit(status=2, message=f"error: {exc}\n")


def _run_subcommand(command: str) -> int:
    return main([command, *sys.argv[1:]])


def validate_main() -> int:
    return _run_subcommand("validate")


def validate_all_main() -> int:
    return _run_subcommand("validate-all")


def validate_tier1_main() -> int:
    return _run_subcommand("validate-tier1")


def validate_tier2_main() -> int:
    return _run_subcommand("validate-tier2")


def validate_list_main() -> int:
    return _run_subcommand("validate-list")


if __name__ == "__main__":
    raise SystemExit(main())
