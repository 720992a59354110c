#!/usr/bin/env python3
"""Entry point: print a collection's play order from the configured database."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import logging.config
import sys
from pathlib import Path

from collection_player.domain.shared.exceptions import DomainError

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"
_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(log_level: str = "INFO") -> None:
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(_LOGGING_CONFIG_PATH) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        logging.basicConfig(
            level=resolved_level,
            format=_LOG_FORMAT,
            datefmt="%Y-%m-%d %H:%M:%S",
            stream=sys.stderr,
            force=True,
        )

    logging.getLogger().setLevel(resolved_level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="collection-player",
        description="Show the play order of an audio collection.",
    )
    parser.add_argument("collection_id", help="Collection to show")
    parser.add_argument(
        "--public",
        action="store_true",
        help="Only show the collection if it is public (embed view)",
    )
    return parser


async def show_collection(collection_id: str, *, public_only: bool = False) -> list[str]:
    """Return one display line per track, in play order."""
    from collection_player.config.container import create_container
    from collection_player.config.settings import get_settings
    from collection_player.domain.collection.ledger import PositionLedger
    from collection_player.domain.collection.services import CollectionDomainService

    settings = get_settings()
    container = create_container(settings)
    await container.initialize()
    try:
        tracks = await container.track_store.load_tracks(collection_id, public_only=public_only)
        ledger = PositionLedger(
            collection_id, strict=not settings.collection.heal_duplicate_positions
        )
        ordering = ledger.load(tracks)
    finally:
        await container.shutdown()

    lines = [
        f"{index + 1:>3}. {ref.display_title} [{ref.duration_formatted}]"
        for index, ref in enumerate(ordering)
    ]
    lines.append(
        f"{len(ordering)} tracks, {CollectionDomainService.format_total_duration(ordering)}"
    )
    return lines


def main(argv: list[str] | None = None) -> int:
    from collection_player.config.settings import get_settings

    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)

    try:
        lines = asyncio.run(show_collection(args.collection_id, public_only=args.public))
    except DomainError as e:
        logger.error("%s", e.message)
        return 1

    for line in lines:
        print(line)
    return 0


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
