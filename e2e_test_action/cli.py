"""CLI entry point for the end-to-end test submission action."""

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path

from e2e_test_action.capabilities import Capabilities
from e2e_test_action.config import DEFAULT_SERVER, DEFAULT_TIMEOUT, ActionConfig
from e2e_test_action.errors import ConfigError, PipelineError
from e2e_test_action.pipeline import Pipeline


async def run(config: ActionConfig) -> int:
    """Run the submission pipeline and return exit code."""
    log = logging.getLogger("e2e_test_action")

    log.info("Submitting %s to %s", config.tests_dir, config.server)

    async with Capabilities.open() as capabilities:
        pipeline = Pipeline.from_config(config, capabilities)
        try:
            return await pipeline.run()
        except PipelineError as exc:
            log.error("Pipeline aborted during %s: %s", exc.stage, exc.cause)
            return 1


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="Submit end-to-end tests to a remote test server"
    )
    parser.add_argument(
        "--app",
        action="store_true",
        help="The project is an application rather than a library",
    )
    parser.add_argument(
        "--server",
        default=DEFAULT_SERVER,
        help="Protocol, host and port of the test server",
    )
    parser.add_argument(
        "--initial-sleep",
        type=float,
        default=10,
        help="Seconds to wait before the first status check",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=3,
        help="Seconds between status checks",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="Seconds to keep polling before giving up (0 waits forever)",
    )
    parser.add_argument(
        "--work-dir",
        type=Path,
        default=Path.cwd(),
        help="Project root the test and build directories are relative to",
    )
    parser.add_argument(
        "extras",
        nargs="*",
        help="Extra files or directories to include in the bundle",
    )
    return parser


def load_config(
    args: argparse.Namespace, environ: Mapping[str, str]
) -> ActionConfig:
    """Combine parsed arguments with the environment."""
    return ActionConfig.from_environ(
        environ,
        work_dir=args.work_dir,
        server=args.server,
        is_app=args.app,
        initial_sleep=args.initial_sleep,
        poll_interval=args.poll_interval,
        timeout=args.timeout or None,
        extras=tuple(args.extras),
    )


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(args, os.environ)
    except ConfigError as exc:
        logging.getLogger("e2e_test_action").error("%s", exc)
        sys.exit(1)

    sys.exit(asyncio.run(run(config)))


if __name__ == "__main__":  # pragma: no cover
    main()
