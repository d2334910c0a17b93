"""Command line entry point.

Usage:
    python -m eco_summaries batch plant records.json
    python -m eco_summaries one pest record.json
    python -m eco_summaries config --json
"""

import argparse
import asyncio
from collections.abc import Sequence
import json
import logging
from pathlib import Path
import sys
from typing import Any

from eco_summaries.config import (
    ResolvedConfig,
    check_environment,
    list_available_profiles,
    resolve_config,
)
from eco_summaries.core.categories import CATEGORIES
from eco_summaries.core.exceptions import (
    CacheIOError,
    ConfigurationError,
    InvalidRequest,
)
from eco_summaries.executor import create_executor

# ruff: noqa: T201

log = logging.getLogger("eco_summaries")


def _load_json(path: str) -> Any:
    if path == "-":
        return json.load(sys.stdin)
    with Path(path).open(encoding="utf-8") as f:
        return json.load(f)


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.model:
        overrides["models"] = args.model
    if args.cache_dir:
        overrides["cache_dir"] = args.cache_dir
    if args.transport:
        overrides["transport"] = args.transport
    return overrides


def _config_info(resolved: ResolvedConfig) -> dict[str, Any]:
    return {
        "config": {
            "has_api_key": resolved.api_key is not None,
            "models": list(resolved.models),
            "transport": resolved.transport,
            "request_timeout_s": resolved.request_timeout_s,
            "temperature": resolved.temperature,
            "cache_dir": str(resolved.cache_dir),
            "api_base_url": resolved.api_base_url,
            "prompt_styles": {
                name: {
                    "min_sentences": style.min_sentences,
                    "max_sentences": style.max_sentences,
                    "min_words": style.min_words,
                    "max_words": style.max_words,
                }
                for name, style in sorted(resolved.prompt_styles.items())
            },
        },
        "sources": dict(resolved.origin),
        "environment": check_environment(),
        "profiles": list_available_profiles(),
    }


async def _summarize(args: argparse.Namespace, resolved: ResolvedConfig) -> dict[str, Any]:
    payload = _load_json(args.file)
    async with create_executor(resolved) as executor:
        if args.command == "batch":
            if not isinstance(payload, list) or not all(isinstance(r, dict) for r in payload):
                raise ValueError("batch input must be a JSON array of records")
            result = await executor.summarize_batch(args.category, payload)
        else:
            if not isinstance(payload, dict):
                raise ValueError("one input must be a JSON object")
            result = await executor.summarize_one(args.category, payload)
    return result.to_response()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m eco_summaries",
        description="Generate and cache biome, plant and pest summaries",
    )
    parser.add_argument("--profile", help="Configuration profile to use")
    parser.add_argument(
        "--model",
        action="append",
        help="Candidate model id; repeat to try several in order",
    )
    parser.add_argument("--cache-dir", help="Directory holding the cache documents")
    parser.add_argument("--transport", choices=("sdk", "rest"))
    parser.add_argument("-v", "--verbose", action="count", default=0)

    sub = parser.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("batch", "Summarize a JSON array of records"),
        ("one", "Summarize a single JSON record"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("category", choices=sorted(CATEGORIES))
        cmd.add_argument("file", help="JSON file, or - for stdin")

    config_cmd = sub.add_parser("config", help="Show the resolved configuration")
    config_cmd.add_argument("--json", action="store_true", help="Output as JSON")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG if args.verbose > 1 else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )

    try:
        resolved = resolve_config(_overrides(args), profile=args.profile)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if args.command == "config":
        if args.json:
            print(json.dumps(_config_info(resolved), indent=2))
        else:
            print(resolved.audit())
        return 0

    try:
        response = asyncio.run(_summarize(args, resolved))
    except InvalidRequest as e:
        print(f"Invalid request: {e}", file=sys.stderr)
        return 2
    except (OSError, ValueError) as e:
        print(f"Cannot read input: {e}", file=sys.stderr)
        return 2
    except CacheIOError as e:
        log.error("Cache failure: %s", e)
        print(f"Cache error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(response, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
