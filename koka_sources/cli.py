"""Command line entry point for refreshing sources.json."""

import argparse
import asyncio
import logging
from pathlib import Path
from pydantic import ValidationError
from typing import List, Optional

from .config import UpdaterConfig
from .errors import KokaSourcesError
from .updater import SourcesUpdater
from .utils import setup_logging

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid count: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"count must be positive: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="koka-sources", description="Maintain sources.json for Koka releases")
    sub = parser.add_subparsers(dest="command", required=True)

    update = sub.add_parser("update", help="Rebuild sources.json from the GitHub releases")
    update.add_argument("-n", "--num-versions", type=_positive_int, default=None,
                        help="Maximum number of versions to include (default: 10)")
    update.add_argument("--sources", type=Path, default=None, help="Path of the sources file (default: sources.json)")
    update.add_argument("--repo", default=None, help="GitHub owner/repo (default: koka-lang/koka)")
    update.add_argument("--concurrency", type=_positive_int, default=None, help="Parallel asset probes/downloads")
    update.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")
    update.add_argument("--retries", type=int, default=None, help="Retries for failed requests (default: 0)")
    update.add_argument("-v", "--verbose", action="store_true", help="Verbose console output")
    return parser


async def run_update(config: UpdaterConfig) -> int:
    try:
        await SourcesUpdater(config).update()
    except KokaSourcesError as e:
        logger.error("Update failed! %s", e)
        if config.sources_path.exists():
            logger.info("Kept existing %s", config.sources_path)
        return 1
    logger.info("Update completed successfully!")
    logger.info("You can now run 'nix flake check' to validate the updated configuration")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = UpdaterConfig.from_env(
            sources_path=args.sources,
            num_versions=args.num_versions,
            repo=args.repo,
            concurrency=args.concurrency,
            timeout=args.timeout,
            retries=args.retries,
        )
    except ValidationError as e:
        parser.error(f"invalid configuration: {e}")

    setup_logging(verbose=args.verbose)
    logger.info("Starting sources.json update process...")
    try:
        return asyncio.run(run_update(config))
    except KeyboardInterrupt:
        logger.warning("Interrupted; %s left untouched", config.sources_path)
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
