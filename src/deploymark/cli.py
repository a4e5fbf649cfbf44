"""Command-line interface for deploymark.

Usage:
    deploymark check                                   # Compare HEAD to last-deploy
    deploymark check --tag last-deploy-prod            # Specific marker
    deploymark check --initial-as-changes false        # Missing marker means "no changes"
    deploymark check --format json                     # Print the report as JSON
    deploymark publish --expected-base-tag last-deploy # Move and push the marker
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from pydantic import ValidationError

from deploymark import __version__
from deploymark.checker import RollupChecker
from deploymark.config import Settings, get_settings
from deploymark.errors import DeploymarkError, InvalidTagError
from deploymark.git import GitRepository
from deploymark.logging import get_logger, setup_logging
from deploymark.models import PublishStatus, PublishStep
from deploymark.outputs import write_outputs
from deploymark.publisher import MarkerPublisher

# Exit statuses
EXIT_OK = 0
EXIT_BACKEND_FAILURE = 1
EXIT_USAGE = 2
EXIT_SAFETY_MISMATCH = 3
EXIT_LOCAL_MOVE_FAILED = 4
EXIT_PUSH_FAILED = 5

_TRUE_VALUES = frozenset({"true", "1", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"false", "0", "no", "n", "off"})


def parse_bool(value: str) -> bool | None:
    """Parse a pipeline-style boolean input.

    An empty value, as sent for an unset pipeline input, returns None so the
    configured default applies.
    """
    lowered = value.strip().lower()
    if not lowered:
        return None
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deploymark",
        description="Track the last deployed commit with a git tag.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--repo", help="Path of the git working tree (default: settings)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser(
        "check", parents=[common], help="Report commits made since the marker"
    )
    check.add_argument("--tag", help="Marker tag to compare against")
    check.add_argument(
        "--initial-as-changes",
        type=parse_bool,
        default=None,
        metavar="BOOL",
        help="Report changes when the marker does not exist yet (default: true)",
    )
    check.add_argument(
        "--format",
        choices=("outputs", "json"),
        default="outputs",
        help="Print key=value outputs or a JSON report",
    )

    publish = subparsers.add_parser(
        "publish", parents=[common], help="Move the marker to HEAD and push it"
    )
    publish.add_argument("--tag", help="Marker tag to move")
    publish.add_argument("--remote", help="Remote to push the marker to")
    publish.add_argument(
        "--expected-base-tag",
        default="",
        help="base_tag reported by the earlier check; must equal --tag when given",
    )
    return parser


def _make_repo(args: argparse.Namespace, settings: Settings) -> GitRepository:
    return GitRepository(
        path=args.repo or settings.repo_path,
        git_binary=settings.git_binary,
        timeout=settings.git_timeout,
    )


async def run_check(args: argparse.Namespace, settings: Settings) -> int:
    """Run the rollup check and emit its outputs."""
    log = get_logger("deploymark.cli")
    tag = args.tag if args.tag is not None else settings.deploymark_tag
    initial_as_changes = (
        args.initial_as_changes
        if args.initial_as_changes is not None
        else settings.initial_as_changes
    )

    checker = RollupChecker(
        _make_repo(args, settings),
        ref_name=settings.github_ref_name,
        max_distance=settings.suggestion_max_distance,
    )
    report = await checker.check(tag=tag, initial_as_changes=initial_as_changes)

    if args.format == "json":
        print(json.dumps(report.to_dict(), indent=2, sort_keys=True))
        if settings.github_output:
            write_outputs(report.to_outputs(), path=settings.github_output)
    else:
        write_outputs(report.to_outputs(), path=settings.github_output)

    log.info("check_complete", **report.to_outputs())
    return EXIT_OK


async def run_publish(args: argparse.Namespace, settings: Settings) -> int:
    """Run the marker publisher and map its result to an exit status."""
    log = get_logger("deploymark.cli")
    publisher = MarkerPublisher(_make_repo(args, settings))
    result = await publisher.publish(
        tag=args.tag if args.tag is not None else settings.deploymark_tag,
        remote=args.remote if args.remote is not None else settings.deploymark_remote,
        expected_base_tag=args.expected_base_tag,
    )

    if result.ok:
        return EXIT_OK

    log.error("publish_failed", **result.to_dict())
    if result.status is PublishStatus.ABORTED:
        return EXIT_SAFETY_MISMATCH
    if result.failed_step is PublishStep.LOCAL_MOVE:
        return EXIT_LOCAL_MOVE_FAILED
    return EXIT_PUSH_FAILED


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the selected command, and return its exit status."""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as exc:
        print(f"deploymark: invalid configuration: {exc}", file=sys.stderr)
        return EXIT_USAGE

    setup_logging()
    log = get_logger("deploymark.cli")

    runner = run_check if args.command == "check" else run_publish
    try:
        return asyncio.run(runner(args, settings))
    except InvalidTagError as exc:
        log.error("invalid_arguments", command=args.command, error=str(exc))
        return EXIT_USAGE
    except DeploymarkError as exc:
        log.error("command_failed", command=args.command, error=str(exc))
        return EXIT_BACKEND_FAILURE


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
