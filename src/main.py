# src/main.py — v2
"""CLI entry point — similar, random, like, import commands.

Usage:
    quoterec similar <quote_id> [-n LIMIT]
    quoterec random [--exclude ID ...] [--min-likes N] [--uniform]
    quoterec like <quote_id>
    quoterec import <file.json>
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from quoterec.core.errors import QuoteServiceError
from quoterec.version import __version__

if TYPE_CHECKING:
    from quoterec.config.settings import Settings
    from quoterec.core.models import Quote
    from quoterec.service.recommendation_service import RecommendationService

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from quoterec.config.settings import ConfigurationError, load_settings

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1
    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(_run(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except QuoteServiceError as exc:
        logger.error("%s: %s", exc.code.value, exc.message)
        return 2
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="quoterec",
        description=f"quoterec v{__version__} - quote similarity and weighted selection",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- similar ---
    p_similar = subparsers.add_parser(
        "similar", help="List quotes similar to a quote",
    )
    p_similar.add_argument("quote_id", help="Target quote id")
    p_similar.add_argument(
        "-n", "--limit", type=int, default=None,
        help="Number of results (default: SIMILARITY_DEFAULT_LIMIT)",
    )
    p_similar.set_defaults(func=_cmd_similar)

    # --- random ---
    p_random = subparsers.add_parser(
        "random", help="Pick a random quote (weighted by likes)",
    )
    p_random.add_argument(
        "--exclude", nargs="*", default=[], metavar="ID",
        help="Quote ids to exclude",
    )
    p_random.add_argument(
        "--min-likes", type=int, default=0,
        help="Ignore quotes with fewer likes (weighted mode only)",
    )
    p_random.add_argument(
        "--uniform", action="store_true",
        help="Ignore likes and pick uniformly",
    )
    p_random.set_defaults(func=_cmd_random)

    # --- like ---
    p_like = subparsers.add_parser("like", help="Like a quote")
    p_like.add_argument("quote_id", help="Quote id")
    p_like.set_defaults(func=_cmd_like)

    # --- import ---
    p_import = subparsers.add_parser(
        "import", help="Load quotes from a JSON array file",
    )
    p_import.add_argument("file", type=Path, help="Path to JSON file")
    p_import.set_defaults(func=_cmd_import)

    return parser


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    """Build the service, dispatch the command, always close collaborators."""
    from quoterec.service.service_factory import create_recommendation_service

    service = create_recommendation_service(settings)
    try:
        return await args.func(args, service)
    finally:
        await service.close()


async def _cmd_similar(args: argparse.Namespace, service: RecommendationService) -> int:
    """Print the ranked neighbours of a quote."""
    result = await service.get_similar(args.quote_id, args.limit)
    if not result.scores:
        print(f"No similar quotes for {result.target_id}")
        return 0
    print(f"Similar to {result.target_id}:")
    for rank, item in enumerate(result.scores, start=1):
        print(f"  {rank:2d}. [{item.score:.3f}] {_preview(item.quote.text)} - {item.quote.author}")
    return 0


async def _cmd_random(args: argparse.Namespace, service: RecommendationService) -> int:
    """Print one randomly selected quote."""
    if args.uniform:
        quote = await service.get_uniform_random_quote(args.exclude)
    else:
        quote = await service.get_weighted_random_quote(args.exclude, args.min_likes)
    if quote is None:
        print("No quotes available")
        return 1
    _print_quote(quote)
    return 0


async def _cmd_like(args: argparse.Namespace, service: RecommendationService) -> int:
    """Like a quote and print its new like count."""
    quote = await service.like_quote(args.quote_id)
    print(f"{quote.id} now has {quote.likes} like(s)")
    return 0


async def _cmd_import(args: argparse.Namespace, service: RecommendationService) -> int:
    """Insert quotes from a JSON array of {text, author, tags?, source?, external_id?}."""
    file_path: Path = args.file
    if not file_path.exists():
        logger.error("File not found: %s", file_path)
        return 1

    records = json.loads(file_path.read_text(encoding="utf-8"))
    if not isinstance(records, list):
        logger.error("Expected a JSON array in %s", file_path)
        return 1

    store = service.pool_source
    imported = 0
    for record in records:
        quote = await store.add_quote(
            text=record["text"],
            author=record["author"],
            tags=record.get("tags"),
            source=record.get("source", "internal"),
            external_id=record.get("external_id"),
        )
        logger.debug("Imported %s", quote.id)
        imported += 1

    print(f"Imported {imported} quote(s); store now holds {await store.count()}")
    return 0


def _preview(text: str, width: int = 80) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def _print_quote(quote: Quote) -> None:
    """Print a human-readable quote."""
    print(f'"{quote.text}"')
    print(f"  - {quote.author}")
    print(f"  id={quote.id} likes={quote.likes} tags={','.join(quote.tags) or '-'}")


def _setup_logging(settings: Settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from quoterec.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format="text" if verbose else settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
