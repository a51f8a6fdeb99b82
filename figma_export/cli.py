"""Command-line entry point for the Figma component exporter."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from typing import Sequence

from dotenv import load_dotenv

from .config import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CONCURRENCY,
    DEFAULT_TIMEOUT,
    ExportConfig,
    parse_overrides,
)
from .errors import ConfigurationError
from .exporter import export_components

logger = logging.getLogger("figma_export.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Export every component of a Figma file as rendered images plus a "
            "data.json manifest. Reads FIGMA_TOKEN and FIGMA_FILE_URL from the "
            "environment (or a .env file)."
        ),
    )
    parser.add_argument(
        "overrides",
        nargs="*",
        metavar="key=value",
        help="Override format (jpg), outputDir (./build/) or scale (1)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=DEFAULT_CONCURRENCY,
        help="Number of images downloaded at the same time",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=DEFAULT_CHUNK_SIZE,
        help="Maximum number of node ids per render request",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="HTTP timeout in seconds",
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Keep downloading after a failed image and report all failures at the end",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    argv = list(sys.argv[1:] if argv is None else argv)
    return parser.parse_intermixed_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
        stream=sys.stdout,
        force=True,
    )
    # HTTP connection chatter is noise even in verbose mode
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    load_dotenv()
    try:
        config = ExportConfig.from_env(
            os.environ,
            parse_overrides(args.overrides),
            chunk_size=args.chunk_size,
            concurrency=args.concurrency,
            timeout=args.timeout,
            fail_fast=not args.keep_going,
        )
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 1

    overall_start = time.perf_counter()
    result = export_components(config)
    total_elapsed = time.perf_counter() - overall_start

    if not result.ok:
        logger.error("Export failed during %s stage", result.failed_stage)
        return 1

    written = len(result.report.written) if result.report else 0
    logger.info(
        "Finished in %.2fs (%d components, %d images written to %s)",
        total_elapsed,
        len(result.components),
        written,
        config.image_dir,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
