"""Command-line front end.

    python -m src.cli validate "c:red t:creature" [--result-count N]
    python -m src.cli build "cheap red creatures for modern" [--optimize-for budget] [--format modern]

Both commands print a JSON document on stdout. Logs go to stderr.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from typing import Any

from dotenv import load_dotenv

from src.app import App, create_app
from src.config.logging import configure_logging
from src.config.settings import load_settings
from src.nl.builder import BuildOptions, BuildResult, OptimizeFor, QueryBuilderError
from src.validation.schema import ValidationResult


def validation_to_dict(result: ValidationResult) -> dict[str, Any]:
    return {
        "is_valid": result.is_valid,
        "errors": [asdict(e) for e in result.errors],
        "warnings": [asdict(w) for w in result.warnings],
        "suggestions": [asdict(s) for s in result.suggestions],
        "confidence": round(result.confidence, 4),
        "query_complexity": result.query_complexity,
        "validation_time_ms": round(result.validation_time.total_seconds() * 1000, 3),
    }


def build_to_dict(result: BuildResult) -> dict[str, Any]:
    return {
        "query": result.query,
        "explanation": result.explanation,
        "confidence": round(result.confidence, 4),
        "alternatives": [asdict(a) for a in result.alternatives],
        "optimizations": [asdict(o) for o in result.optimizations],
        "mappings": [m.model_dump(mode="json", exclude={"source_concept"}) for m in result.mappings],
        "validation": validation_to_dict(result.validation),
    }


def run_validate(app: App, query: str, result_count: int | None) -> dict[str, Any]:
    return validation_to_dict(app.validator.validate(query, result_count))


def run_build(app: App, text: str, optimize_for: str, format_: str | None) -> dict[str, Any]:
    parsed = app.parser.parse(text)
    options = BuildOptions(optimize_for=OptimizeFor(optimize_for), format=format_)
    return build_to_dict(app.builder.build(parsed, options))


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Validate card search queries or build them from plain English.")
    commands = parser.add_subparsers(dest="command", required=True)

    validate = commands.add_parser("validate", help="Validate a DSL query.")
    validate.add_argument("query", help="DSL query text, e.g. 'c:red t:creature'.")
    validate.add_argument(
        "--result-count",
        type=int,
        default=None,
        help="Result count of a previous run; enables broaden/narrow suggestions.",
    )

    build = commands.add_parser("build", help="Build a DSL query from natural language.")
    build.add_argument("text", help="Natural-language description of the cards.")
    build.add_argument(
        "--optimize-for",
        choices=[s.value for s in OptimizeFor],
        default=OptimizeFor.precision.value,
        help="Optimization strategy.",
    )
    build.add_argument("--format", default=None, help="Force a play format (e.g. modern).")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""

    args = _parser().parse_args(argv)

    load_dotenv(".env")
    settings = load_settings()
    configure_logging(settings.log_level)
    app = create_app(settings)

    if args.command == "validate":
        payload = run_validate(app, args.query, args.result_count)
        exit_code = 0 if payload["is_valid"] else 1
    else:
        try:
            payload = run_build(app, args.text, args.optimize_for, args.format)
        except QueryBuilderError as exc:
            print(json.dumps({"error": str(exc)}), file=sys.stderr)
            return 2
        exit_code = 0

    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
