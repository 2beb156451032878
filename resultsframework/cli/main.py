"""
Results Framework CLI.

Reads a framework (or a whole project record holding one under
"resultsFramework") from a JSON file, always through the load gate.
Only `normalize --output` writes anything, and only to the path given.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

from ..domain import Indicator, ResultsFramework
from ..indicators import iter_indicators, summarize
from ..logging_config import LOG_LEVELS, configure_logging
from ..normalize import normalize, to_json
from ..targets import hidden_targets, labels_for, reconcile


# =============================================================================
# INPUT
# =============================================================================

def read_framework(path: Path) -> ResultsFramework:
    """
    Load a framework file.

    Raises:
        OSError: If the file cannot be read.
    """
    raw = path.read_bytes()
    try:
        data: Any = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        # Let the load gate report and default it
        return normalize(raw)

    if isinstance(data, dict) and "resultsFramework" in data:
        data = data["resultsFramework"]
    return normalize(data)


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def format_targets(indicator: Indicator, duration: int) -> str:
    cells = [
        f"{label}: {value or '-'}"
        for label, value in reconcile(indicator, labels_for(duration)).items()
    ]
    return " | ".join(cells)


def format_indicator(indicator: Indicator, duration: int, indent: str) -> list[str]:
    baseline = indicator.baseline or "-"
    if indicator.baseline_unit:
        baseline = f"{baseline} {indicator.baseline_unit}"

    lines = [
        f"{indent}Indicator: {indicator.description or '(no description)'}",
        f"{indent}  Baseline: {baseline}",
        f"{indent}  Targets: {format_targets(indicator, duration)}",
    ]
    hidden = hidden_targets(indicator, duration)
    if hidden:
        lines.append(f"{indent}  Hidden targets: {', '.join(sorted(hidden))}")
    collection = indicator.data_collection
    if collection.frequency or collection.source:
        lines.append(
            f"{indent}  Collection: {collection.frequency or '-'} from {collection.source or '-'}"
        )
    return lines


def format_outline(framework: ResultsFramework) -> str:
    duration = framework.project_duration
    summary = summarize(framework)

    lines = [
        f"Results Framework: {summary.objectives} objectives, "
        f"{summary.outcomes} outcomes, {summary.outputs} outputs, "
        f"{summary.indicators} indicators",
        f"Project duration: {duration} year{'s' if duration > 1 else ''}",
        "=" * 60,
    ]

    for i, objective in enumerate(framework.objectives, start=1):
        lines.append(f"Objective {i}: {objective.title or '(untitled)'} [{objective.id}]")
        for j, outcome in enumerate(objective.outcomes, start=1):
            lines.append(f"  Outcome {i}.{j}: {outcome.title or '(untitled)'} [{outcome.id}]")
            for indicator in outcome.indicators:
                lines.extend(format_indicator(indicator, duration, "    "))
            for k, output in enumerate(outcome.outputs, start=1):
                lines.append(
                    f"    Output {i}.{j}.{k}: {output.title or '(untitled)'} [{output.id}]"
                )
                for indicator in output.indicators:
                    lines.extend(format_indicator(indicator, duration, "      "))

    return "\n".join(lines)


# =============================================================================
# CLI COMMANDS
# =============================================================================

def cmd_show(args: argparse.Namespace) -> int:
    """Print the framework outline."""
    framework = read_framework(Path(args.file))
    print(format_outline(framework))
    return 0


def cmd_indicators(args: argparse.Namespace) -> int:
    """Print one row per indicator."""
    framework = read_framework(Path(args.file))
    records = list(iter_indicators(framework))

    if not records:
        print("No indicators found.")
        return 0

    for record in records:
        owner = record.output_id or record.outcome_id
        print(
            f"[{record.level.value.upper():7}] {record.indicator.description or '(no description)'}"
            f" | {owner} #{record.position}"
            f" | {format_targets(record.indicator, framework.project_duration)}"
        )
    print()
    print(f"Total: {len(records)} indicators")
    return 0


def cmd_normalize(args: argparse.Namespace) -> int:
    """Rewrite a framework through the load gate."""
    framework = read_framework(Path(args.file))
    text = to_json(framework, indent=2)

    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        print(f"Wrote {args.output}")
    else:
        print(text)
    return 0


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resultsframework",
        description="Results Framework Engine: inspect monitoring frameworks",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.lower,
        choices=LOG_LEVELS,
        help="Log level for diagnostics on stderr (default from environment)",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    show_parser = subparsers.add_parser("show", help="Show the framework outline")
    show_parser.add_argument("file", help="Framework or project JSON file")
    show_parser.set_defaults(func=cmd_show)

    indicators_parser = subparsers.add_parser("indicators", help="List all indicators")
    indicators_parser.add_argument("file", help="Framework or project JSON file")
    indicators_parser.set_defaults(func=cmd_indicators)

    normalize_parser = subparsers.add_parser(
        "normalize",
        help="Fill defaults and print (or write) the clean framework",
    )
    normalize_parser.add_argument("file", help="Framework or project JSON file")
    normalize_parser.add_argument("--output", "-o", default=None, help="Write to this path")
    normalize_parser.set_defaults(func=cmd_normalize)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(level=args.log_level)

    try:
        return args.func(args)
    except OSError as e:
        print(f"ERROR: cannot read {args.file}")
        print(f"Reason: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
