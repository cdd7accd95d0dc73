#!/usr/bin/env python3
"""
Command-line interface for boat similarity.

Usage:
    boat-similarity profiles                             # List preset profiles
    boat-similarity compare a.json b.json --profile legacy-a --explain
    boat-similarity top-k query.json pool.json --k 5 --threshold 0.5
    boat-similarity top-k query.json pool.json --profile-file weights.json

Boat files hold JSON records (camelCase or snake_case keys). A pool file
holds a JSON list of records.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import pydantic

from .core.config import get_settings
from .core.errors import SimilarityError, ValidationError
from .core.models import BoatRecord
from .similarity import PRESET_PROFILES, SimilarityCalculator, WeightProfile

logger = logging.getLogger("boat_similarity.cli")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _load_json(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise ValidationError(f"Cannot read {path}", str(e)) from e
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in {path}", str(e)) from e


def _load_record(path: str):
    data = _load_json(path)
    if not isinstance(data, dict):
        raise ValidationError(f"Expected a JSON object in {path}")
    try:
        return BoatRecord.model_validate(data).to_entity()
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid boat record in {path}", str(e)) from e


def _load_pool(path: str) -> list:
    data = _load_json(path)
    if not isinstance(data, list):
        raise ValidationError(f"Expected a JSON list in {path}")
    try:
        return [BoatRecord.model_validate(item).to_entity() for item in data]
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid boat record in {path}", str(e)) from e


def _resolve_profile(args: argparse.Namespace) -> Optional[WeightProfile | str]:
    if getattr(args, "profile_file", None):
        return WeightProfile.from_dict(_load_json(args.profile_file))
    return args.profile


def _print(data: Any) -> None:
    print(json.dumps(data, indent=2, sort_keys=False))


def cmd_profiles(args: argparse.Namespace) -> int:
    """List preset profiles with their field weights."""
    settings = get_settings()
    _print(
        {
            "default": settings.default_profile,
            "profiles": [PRESET_PROFILES[name].to_dict() for name in sorted(PRESET_PROFILES)],
        }
    )
    return 0


def cmd_compare(args: argparse.Namespace) -> int:
    """Compare two boats."""
    calculator = SimilarityCalculator()
    result = calculator.compare(
        _load_record(args.boat_a),
        _load_record(args.boat_b),
        profile=_resolve_profile(args),
    )

    output = result.to_dict()
    if args.explain:
        output["shared_traits"] = [f.to_dict() for f in calculator.shared_traits(result)]
        output["key_differences"] = [f.to_dict() for f in calculator.key_differences(result)]
    _print(output)
    return 0


def cmd_top_k(args: argparse.Namespace) -> int:
    """Rank a pool against a query boat."""
    calculator = SimilarityCalculator()
    query = _load_record(args.query)
    pool = _load_pool(args.pool)

    ranked = calculator.find_top_k(
        query,
        pool,
        profile=_resolve_profile(args),
        k=args.k,
        threshold=args.threshold,
        annotate=args.explain,
    )

    results = []
    for candidate in ranked:
        item = candidate.to_dict(include_breakdown=args.explain)
        if args.explain and candidate.result is not None:
            item["explanation"] = [
                f.to_dict() for f in calculator.explain_difference(candidate.result, limit=3)
            ]
        results.append(item)

    _print({"query": query.id, "pool_size": len(pool), "results": results})
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="boat-similarity",
        description="Boat similarity and ranking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # profiles command
    subparsers.add_parser("profiles", help="List preset weight profiles")

    # compare command
    compare_parser = subparsers.add_parser("compare", help="Compare two boats")
    compare_parser.add_argument("boat_a", help="JSON file with the first boat")
    compare_parser.add_argument("boat_b", help="JSON file with the second boat")

    # top-k command
    top_k_parser = subparsers.add_parser("top-k", help="Find the most similar boats in a pool")
    top_k_parser.add_argument("query", help="JSON file with the query boat")
    top_k_parser.add_argument("pool", help="JSON file with a list of candidate boats")
    top_k_parser.add_argument("--k", type=int, help="Number of results (default from settings)")
    top_k_parser.add_argument("--threshold", type=float, help="Minimum score in [0, 1]")

    for sub in (compare_parser, top_k_parser):
        group = sub.add_mutually_exclusive_group()
        group.add_argument("--profile", help=f"Preset name ({', '.join(sorted(PRESET_PROFILES))})")
        group.add_argument("--profile-file", help="JSON file with a custom weight profile")
        sub.add_argument("--explain", action="store_true", help="Include per-field explanation")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "profiles": cmd_profiles,
        "compare": cmd_compare,
        "top-k": cmd_top_k,
    }

    try:
        configure_logging(get_settings().log_level)
        return commands[args.command](args)
    except SimilarityError as e:
        logger.error("%s failed: %s", args.command, e)
        _print(e.to_dict())
        return 1
    except pydantic.ValidationError as e:
        # Invalid settings from the environment
        error = ValidationError("Invalid configuration", str(e))
        logger.error("%s failed: %s", args.command, error)
        _print(error.to_dict())
        return 1


if __name__ == "__main__":
    sys.exit(main())
