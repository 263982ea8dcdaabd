"""Command line entry point.

Usage:
    context-toolkit generate
    context-toolkit build --config-file path/to/context.yaml --json
    context-toolkit compile --inline '{"documents": [...]}' --work-dir ./out
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import TYPE_CHECKING

from context_toolkit.compiler.pipeline import ContextGenerator
from context_toolkit.models.settings import load_settings
from context_toolkit.telemetry.logging_utils import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence

    from context_toolkit.compiler.report import GenerationReport

COMMANDS = ("generate", "build", "compile")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="context-toolkit",
        description="Compile context documents from a YAML or JSON configuration",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="generate",
        choices=COMMANDS,
        help="Command to run (all three are equivalent; default: generate)",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "-c",
        "--config-file",
        help="Configuration file or directory (default: context.yaml/.yml/.json in the work dir)",
    )
    source.add_argument("-i", "--inline", help="Inline JSON or YAML configuration")
    parser.add_argument(
        "-w", "--work-dir", help="Root directory for relative paths and output (default: cwd)"
    )
    parser.add_argument("-e", "--env", help="Env file supplying ${KEY} values for imports")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--jobs", type=int, help="Number of documents compiled in parallel")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def render_summary(report: GenerationReport) -> str:
    """Human readable report."""
    lines = [report.message]
    for result in report.results:
        lines.append(f"  {result.status.upper():<8} {result.output_path}")
        lines.extend(f"           {error}" for error in result.errors)
    if not report.results and report.errors.has_errors():
        lines.extend(f"  {error}" for error in report.errors.messages())
    for warning in report.warnings:
        lines.append(f"  WARN {warning}")
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
        configure_logging("DEBUG" if args.verbose else settings.log_level)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if args.jobs is not None and args.jobs < 1:
        print("Error: --jobs must be at least 1", file=sys.stderr)
        return 1

    generator = ContextGenerator(
        settings,
        work_dir=args.work_dir,
        env_file=args.env,
        max_workers=args.jobs,
    )
    try:
        report = generator.generate(config_file=args.config_file, inline=args.inline)
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130
    finally:
        generator.close()

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(render_summary(report))
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
