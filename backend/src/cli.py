"""
Command-line interface for PageLens.

Provides commands for analyzing HTML documents and listing recognition patterns.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import structlog

from pagelens import __version__
from pagelens.analyzer.models import DocumentAnalysis
from pagelens.analyzer.walker import TreeWalker
from pagelens.config import ConfigError, load_recognizer_config
from pagelens.dom import MalformedDocumentError
from pagelens.recognizer.models import ComponentType
from pagelens.recognizer.registry import default_registry

logger = structlog.get_logger(__name__)

EXIT_MALFORMED_DOCUMENT = 2


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(getattr(args, "verbose", False))

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130
    except Exception as e:
        logger.error("Command failed", error=str(e))
        if getattr(args, "verbose", False):
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _percentage(value: str) -> int:
    number = int(value)
    if not 0 <= number <= 100:
        raise argparse.ArgumentTypeError(f"must be between 0 and 100, got {number}")
    return number


def _positive_seconds(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="pagelens",
        description="PageLens - rule-based UI component recognition for HTML documents",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"pagelens {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_parser = subparsers.add_parser("analyze", help="Classify every element of an HTML file")
    analyze_parser.add_argument(
        "file",
        help="Path to the HTML document",
    )
    analyze_parser.add_argument(
        "--output", "-o",
        help="Write the JSON analysis to this file instead of stdout",
    )
    analyze_parser.add_argument(
        "--config", "-c",
        help="Path to a recognizer YAML config file",
    )
    analyze_parser.add_argument(
        "--min-confidence",
        type=_percentage,
        help="Omit elements below this confidence from the output",
    )
    analyze_parser.add_argument(
        "--timeout",
        type=_positive_seconds,
        help="Abort the analysis after this many seconds",
    )
    analyze_parser.add_argument(
        "--flat",
        action="store_true",
        help="Output a flat pre-order list instead of a tree",
    )
    analyze_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Enable verbose output",
    )
    analyze_parser.set_defaults(func=cmd_analyze)

    patterns_parser = subparsers.add_parser("patterns", help="List registered recognition patterns")
    patterns_parser.add_argument(
        "--type", "-t",
        dest="component_type",
        choices=[t.value for t in ComponentType if t is not ComponentType.UNKNOWN],
        help="Only list patterns for this component type",
    )
    patterns_parser.set_defaults(func=cmd_patterns)

    return parser


def configure_logging(verbose: bool) -> None:
    """Configure structured logging."""
    level = "DEBUG" if verbose else "INFO"
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer() if verbose else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    import logging

    logging.basicConfig(level=getattr(logging, level))


async def _run_analysis(walker: TreeWalker, html: str, timeout: float | None) -> DocumentAnalysis:
    if timeout is None:
        return await walker.analyze_document(html)
    return await asyncio.wait_for(walker.analyze_document(html), timeout=timeout)


def prune_tree(element: dict[str, Any], min_confidence: int) -> list[dict[str, Any]]:
    """
    Drop elements below a confidence threshold from a serialized tree.

    Children of a dropped element take its place in its parent.
    """
    children = [
        kept
        for child in element.get("children", [])
        for kept in prune_tree(child, min_confidence)
    ]
    if element["recognition"]["confidence"] >= min_confidence:
        return [{**element, "children": children}]
    return children


def format_analysis(analysis: DocumentAnalysis, flat: bool, min_confidence: int) -> dict[str, Any]:
    """Serialize an analysis, applying the confidence filter."""
    payload = analysis.to_dict(flat=flat)
    if min_confidence > 0:
        if flat:
            payload["elements"] = [
                e for e in payload["elements"]
                if e["recognition"]["confidence"] >= min_confidence
            ]
        else:
            payload["elements"] = [
                kept for root in payload["elements"] for kept in prune_tree(root, min_confidence)
            ]
    return payload


def print_summary(analysis: DocumentAnalysis, stream: Any = None) -> None:
    stream = stream or sys.stdout
    stats = analysis.stats()
    print(f"Elements:       {stats['total_elements']}", file=stream)
    print(f"Recognized:     {stats['recognized']}", file=stream)
    print(f"Unknown:        {stats['unknown']}", file=stream)
    print(f"Manual review:  {stats['manual_review']}", file=stream)
    print(f"Avg confidence: {stats['average_confidence']}%", file=stream)
    if stats["diagnostics"]:
        print(f"Diagnostics:    {stats['diagnostics']}", file=stream)
    top = list(stats["component_types"].items())[:10]
    if top:
        print("Top components:", file=stream)
        for name, count in top:
            print(f"  {name:<16} {count}", file=stream)


def cmd_analyze(args: argparse.Namespace) -> int:
    """Analyze an HTML document."""
    path = Path(args.file)
    if not path.is_file():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1
    if args.config and not Path(args.config).is_file():
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        return 1

    try:
        config = load_recognizer_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if args.min_confidence is not None:
        config = config.model_copy(update={"min_confidence": args.min_confidence})

    html = path.read_text(encoding="utf-8", errors="replace")
    walker = TreeWalker(config=config)

    try:
        analysis = asyncio.run(_run_analysis(walker, html, args.timeout))
    except MalformedDocumentError as e:
        print(f"Malformed document: {e}", file=sys.stderr)
        return EXIT_MALFORMED_DOCUMENT
    except TimeoutError:
        print(f"Error: Analysis timed out after {args.timeout}s", file=sys.stderr)
        return 1

    payload = format_analysis(analysis, args.flat, config.min_confidence)
    output = json.dumps(payload, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"Analysis written to: {args.output}")
        print_summary(analysis)
    else:
        print(output)
        print_summary(analysis, stream=sys.stderr)

    return 0


def cmd_patterns(args: argparse.Namespace) -> int:
    """List registered recognition patterns in priority order."""
    registry = default_registry()
    patterns = (
        registry.for_type(ComponentType(args.component_type))
        if args.component_type
        else list(registry)
    )

    print(f"{'PRIORITY':>8}  {'CONFIDENCE':>10}  PATTERN")
    for p in patterns:
        print(f"{p.priority:>8}  {p.base_confidence:>10}  {p.describe()}")
    print(f"\n{len(patterns)} pattern(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
