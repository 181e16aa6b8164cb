"""Command-line interface for quality-gates.

Provides subcommands for validating a changeset, running the iterative
correction loop, displaying saved reports and querying package information.
Each subcommand imports its dependencies lazily so that
``quality-gates info`` works even when optional dependencies are missing.

Entry point
-----------
The ``main()`` function is registered as a console script in
``pyproject.toml``::

    [project.scripts]
    quality-gates = "quality_gates.cli:main"

Usage examples::

    quality-gates validate --files src/Hero.tsx src/theme.css --audit-file audit.json
    quality-gates loop "Add a hero section" --files src/Hero.tsx --max-iterations 3
    quality-gates report --input validation-reports/validation-20260101T120000000000Z.json
    quality-gates info
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--files",
        nargs="*",
        default=None,
        help="Changed files to validate.  Defaults to recently modified sources.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON or YAML file with 'validation' and 'loop' sections.",
    )
    parser.add_argument(
        "--audit-file",
        type=str,
        default=None,
        help="Exported visual audit results (JSON).  Without it only static checks run.",
    )
    parser.add_argument(
        "--no-static-analysis",
        action="store_true",
        default=False,
        help="Skip the lint, type-check and bundle-size commands.",
    )
    parser.add_argument(
        "--format",
        type=str,
        default="table",
        choices=["table", "json", "summary"],
        help="Output format. (default: table)",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="quality-gates",
        description=(
            "Quality gates -- score a changeset across five quality categories "
            "and iterate corrections until it clears the thresholds."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        default=False,
        help="Show package version and exit.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level. (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available subcommands")

    # -- validate ----------------------------------------------------------
    validate_parser = subparsers.add_parser(
        "validate",
        help="Run the validation pipeline once.",
        description="Validate a changeset and print the report.",
    )
    _add_common_options(validate_parser)
    validate_parser.add_argument(
        "--reports-dir",
        type=str,
        default=None,
        help="Directory for persisted reports. (default: from config)",
    )

    # -- loop --------------------------------------------------------------
    loop_parser = subparsers.add_parser(
        "loop",
        help="Run the iterative correction loop.",
        description="Generate, validate and correct until thresholds are met or escalated.",
    )
    loop_parser.add_argument("request", type=str, help="Description of the change.")
    _add_common_options(loop_parser)
    loop_parser.add_argument(
        "--max-iterations",
        type=int,
        default=None,
        help="Maximum iterations. (default: from config, 3)",
    )
    loop_parser.add_argument(
        "--no-auto-fix",
        action="store_true",
        default=False,
        help="Plan corrections but never apply them.",
    )

    # -- report ------------------------------------------------------------
    report_parser = subparsers.add_parser(
        "report",
        help="Load and display a saved report or loop result.",
        description="Load a persisted validation report or loop result and display it.",
    )
    report_parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="Path to the JSON (or YAML) document.",
    )
    report_parser.add_argument(
        "--format",
        type=str,
        default="table",
        choices=["table", "json", "summary"],
        help="Display format. (default: table)",
    )

    # -- info --------------------------------------------------------------
    subparsers.add_parser(
        "info",
        help="Show package version, defaults and dependency status.",
        description="Display version, default thresholds and optional dependency status.",
    )

    return parser


# =========================================================================
# Helpers
# =========================================================================

def _load_configs(args: argparse.Namespace) -> tuple[Any, Any]:
    from quality_gates.infrastructure.config import (
        LoopConfiguration,
        ValidationConfig,
        load_config,
    )

    if args.config:
        validation, loop = load_config(args.config)
    else:
        validation, loop = ValidationConfig(), LoopConfiguration()
    if args.no_static_analysis:
        validation = replace(validation, run_static_analysis=False)
    if args.audit_file is None:
        validation = replace(validation, skip_screenshots=True)
    return validation, loop


def _make_auditor(args: argparse.Namespace) -> Any:
    from quality_gates.infrastructure.audit import JsonFileAuditor

    return JsonFileAuditor(args.audit_file) if args.audit_file else None


def _print_document(obj: Any, fmt: str) -> None:
    from quality_gates.domain.aggregates import LoopResult
    from quality_gates.infrastructure.serialization import to_json
    from quality_gates.presentation.console import ConsoleDashboard

    if fmt == "json":
        print(to_json(obj))
        return
    dashboard = ConsoleDashboard(use_rich=(fmt == "table"))
    if isinstance(obj, LoopResult):
        dashboard.print_loop_result(obj)
    else:
        dashboard.print_report(obj)


# =========================================================================
# Subcommand handlers
# =========================================================================

def _cmd_validate(args: argparse.Namespace) -> int:
    """Handle the ``validate`` subcommand."""
    from quality_gates.domain.enums import Status
    from quality_gates.services.pipeline import ValidationPipeline

    try:
        validation, _ = _load_configs(args)
    except (OSError, ValueError, RuntimeError) as exc:
        print(f"Error loading configuration: {exc}", file=sys.stderr)
        return 2
    if args.reports_dir:
        validation = replace(validation, reports_dir=args.reports_dir)

    pipeline = ValidationPipeline(validation, auditor=_make_auditor(args))
    report = asyncio.run(pipeline.run_complete_validation(args.files))
    _print_document(report, args.format)
    return 1 if report.overall.status == Status.FAIL else 0


def _cmd_loop(args: argparse.Namespace) -> int:
    """Handle the ``loop`` subcommand."""
    from quality_gates.services.loop import IterativeAgenticLoop

    try:
        validation, loop = _load_configs(args)
    except (OSError, ValueError, RuntimeError) as exc:
        print(f"Error loading configuration: {exc}", file=sys.stderr)
        return 2
    if args.max_iterations is not None:
        loop = replace(loop, max_iterations=args.max_iterations)
    if args.no_auto_fix:
        loop = replace(
            loop,
            correction_strategies=replace(loop.correction_strategies, auto_fix=False),
        )
    try:
        agent_loop = IterativeAgenticLoop(
            loop, validation_config=validation, auditor=_make_auditor(args)
        )
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    result = asyncio.run(agent_loop.execute_loop(args.request, args.files))
    _print_document(result, args.format)
    return 0 if result.success else 1


def _cmd_report(args: argparse.Namespace) -> int:
    """Handle the ``report`` subcommand."""
    from quality_gates.domain.aggregates import LoopResult, ValidationReport
    from quality_gates.infrastructure.serialization import deserialize, yaml_available

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        return 1

    try:
        text = input_path.read_text(encoding="utf-8")
        if input_path.suffix in (".yaml", ".yml"):
            if not yaml_available():
                raise RuntimeError("PyYAML is not installed. Install it with: pip install pyyaml")
            import yaml

            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
        target = LoopResult if "loop_id" in data else ValidationReport
        document = deserialize(data, target)
    except (OSError, ValueError, KeyError, TypeError, RuntimeError) as exc:
        print(f"Error reading {input_path}: {exc}", file=sys.stderr)
        return 1

    _print_document(document, args.format)
    return 0


def _cmd_info(args: argparse.Namespace) -> int:
    """Handle the ``info`` subcommand."""
    from quality_gates import __version__
    from quality_gates.domain.values import CATEGORY_WEIGHTS
    from quality_gates.infrastructure.config import CategoryThresholds

    print(f"quality-gates v{__version__}")
    print()

    deps = {
        "numpy": "Weighted score aggregation (required)",
        "pydantic": "Audit and lint report schemas (required)",
        "langgraph": "Correction loop graph (required)",
        "langchain_core": "LLM generator (required)",
        "rich": "Console tables (required)",
        "yaml": "YAML configuration and reports (optional)",
    }
    print("Dependencies:")
    for pkg, desc in deps.items():
        try:
            mod = __import__(pkg)
            version = getattr(mod, "__version__", "unknown")
            print(f"  [installed] {pkg} {version} -- {desc}")
        except ImportError:
            print(f"  [missing]   {pkg} -- {desc}")
    print()

    thresholds = CategoryThresholds()
    print("Categories (weight, default threshold):")
    for category, weight in CATEGORY_WEIGHTS.items():
        print(
            f"  {category.value:<22} {weight:.2f}  {thresholds.for_category(category):g}"
        )
    print(f"  {'overall':<22}       {thresholds.overall:g}")
    return 0


# =========================================================================
# Main entry point
# =========================================================================

def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parameters
    ----------
    argv:
        Command-line arguments.  Defaults to ``sys.argv[1:]``.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        from quality_gates import __version__
        print(f"quality-gates {__version__}")
        sys.exit(0)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    handlers: dict[str, Any] = {
        "validate": _cmd_validate,
        "loop": _cmd_loop,
        "report": _cmd_report,
        "info": _cmd_info,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    try:
        exit_code = handler(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        exit_code = 130
    except Exception as exc:
        logger.debug("command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
