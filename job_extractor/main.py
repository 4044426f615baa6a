"""CLI entry point for the job posting extractor."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from .config import Settings, load_settings
from .extraction import extract_job_from_url
from .fetcher import PageFetcher
from .models import ExtractionResult, JobExtractionError


def main(argv: Sequence[str] | None = None) -> int:
    """Execute the CLI."""

    settings = load_settings()
    args = _parse_args(argv, settings)
    _configure_logging(args.log_level)

    if args.no_relays:
        settings = dataclasses.replace(settings, enable_relays=False)

    try:
        result = asyncio.run(_run(args.url, settings))
    except JobExtractionError as exc:
        logging.error("Extraction failed: %s", exc)
        print(str(exc), file=sys.stderr)
        return 1

    payload = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
    if args.output:
        path = Path(args.output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(payload + "\n", encoding="utf-8")
        logging.info("Wrote extraction result to %s", path)
    else:
        print(payload)

    if result.degraded:
        logging.warning("Result did not pass full validation (source: %s)", result.source)
    return 0


async def _run(url: str, settings: Settings) -> ExtractionResult:
    async with PageFetcher(settings=settings) as fetcher:
        return await extract_job_from_url(url, fetcher, thresholds=settings.thresholds)


def _parse_args(argv: Sequence[str] | None, settings: Settings) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("url", help="Job posting URL")
    parser.add_argument(
        "--output",
        default=None,
        help="Write the JSON result to this file instead of stdout",
    )
    parser.add_argument(
        "--no-relays",
        action="store_true",
        help="Only try the direct and POST strategies, skipping public CORS relays",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level (e.g. INFO, DEBUG)",
    )
    return parser.parse_args(argv)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(levelname)s %(message)s",
    )


if __name__ == "__main__":
    sys.exit(main())
