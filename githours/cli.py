"""
.. module:: cli
   :platform: Unix, Windows
   :synopsis: The git-hours command line

"""

import argparse
import logging
import sys

import pandas as pd

from githours.config import (
    DEFAULT_FIRST_COMMIT_ADD,
    DEFAULT_GIT_PATH,
    DEFAULT_MAX_COMMIT_DIFF,
    DEFAULT_MERGE_REQUEST,
    Config,
    MergeDetection,
    load_aliases,
    parse_aliases,
    parse_date_input,
)
from githours.errors import GitHoursError, ShallowClone
from githours.logging import add_stream_handler, get_logger, set_log_level
from githours.project import ProjectDirectory
from githours.repository import Repository

__author__ = "willmcginnis"

logger = get_logger("cli")

DATE_HELP = "[always|yesterday|today|lastweek|thisweek|yyyy-mm-dd]"


def build_parser():
    parser = argparse.ArgumentParser(
        prog="git-hours",
        description="Estimate the hours spent on a git repository from its commit timestamps.",
    )
    parser.add_argument(
        "--max-commit-diff",
        type=int,
        default=DEFAULT_MAX_COMMIT_DIFF,
        help="maximum difference in minutes between commits counted to one session (default: %(default)s)",
    )
    parser.add_argument(
        "--first-commit-add",
        type=int,
        default=DEFAULT_FIRST_COMMIT_ADD,
        help="how many minutes first commit of session should add to total (default: %(default)s)",
    )
    parser.add_argument("--since", default="always", help=f"analyze data since certain date {DATE_HELP}")
    parser.add_argument("--until", default="always", help=f"analyze data until certain date {DATE_HELP}")
    parser.add_argument(
        "--merge-request",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_MERGE_REQUEST,
        help="include merge requests into calculation (default: %(default)s)",
    )
    parser.add_argument(
        "--merge-detection",
        choices=[m.value for m in MergeDetection],
        default=MergeDetection.MESSAGE_PREFIX.value,
        help="how merge commits are recognised: message prefix 'Merge ' or two or more parents "
        "(default: %(default)s)",
    )
    parser.add_argument(
        "--path",
        action="append",
        help="git repository to analyze, repeat to merge several repositories (default: current directory)",
    )
    parser.add_argument("--branch", default="", help="analyze only data on the specified branch")
    parser.add_argument(
        "--alias",
        action="append",
        default=[],
        metavar="RAW=CANONICAL",
        help="count commits by RAW email as CANONICAL email, may be repeated",
    )
    parser.add_argument("--aliases-file", help="JSON file mapping raw author emails to canonical emails")
    parser.add_argument("--format", choices=["json", "table"], default="json", help="output format")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="log progress to stderr, -vv for debug")
    return parser


def config_from_args(args, now=None):
    """Builds the run configuration from parsed arguments.

    Raises:
        ConfigurationError: On a malformed date, alias or threshold
    """
    aliases = {}
    if args.aliases_file:
        aliases.update(load_aliases(args.aliases_file))
    aliases.update(parse_aliases(args.alias))

    paths = args.path or [DEFAULT_GIT_PATH]
    return Config(
        max_commit_diff_in_minutes=args.max_commit_diff,
        first_commit_addition_in_minutes=args.first_commit_add,
        since=parse_date_input(args.since, now=now),
        until=parse_date_input(args.until, now=now),
        merge_request=args.merge_request,
        merge_detection=MergeDetection(args.merge_detection),
        git_path=paths[0],
        branch=args.branch or None,
        email_aliases=aliases,
    )


def run(config, paths=None):
    """Runs the analysis for one or several repositories and returns the Result."""
    paths = paths or [config.git_path]
    if len(paths) == 1:
        return Repository(paths[0]).hours_estimate(config)
    return ProjectDirectory(working_dir=paths).hours_estimate(config)


def render(result, fmt="json"):
    if fmt == "table":
        with pd.option_context("display.max_rows", None, "display.width", 200):
            return result.to_frame().to_string()
    return result.to_json(indent=2)


def main(argv=None):
    """Entry point of the ``git-hours`` command. Returns the process exit status."""
    args = build_parser().parse_args(argv)

    if args.verbose:
        set_log_level(logging.DEBUG if args.verbose > 1 else logging.INFO)
        add_stream_handler(level=logging.DEBUG if args.verbose > 1 else logging.INFO)

    try:
        config = config_from_args(args)
        result = run(config, paths=args.path)
    except ShallowClone as e:
        print(e)
        return 1
    except GitHoursError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger.debug(f"Rendering {len(result)} entries as {args.format}")
    print(render(result, args.format))
    return 0


if __name__ == "__main__":
    sys.exit(main())
