"""CLI entry point for jobkeywords."""

from __future__ import annotations

import argparse
import sys


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jobkeywords",
        description="Extract weighted keywords from job posting pages",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # -- run -----------------------------------------------------------------
    run_p = sub.add_parser("run", help="Process configured posting URLs")
    run_p.add_argument(
        "--settings",
        type=str,
        default="config/settings.toml",
        help="Path to settings.toml (default: config/settings.toml)",
    )
    run_p.add_argument(
        "--url",
        action="append",
        default=None,
        help="Process this URL instead of [sources].urls (repeatable)",
    )
    run_p.add_argument(
        "--log-dir",
        type=str,
        default=None,
        metavar="DIR",
        help="Also write a timestamped log file under DIR",
    )
    run_p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug output on stderr",
    )

    # -- extractors ----------------------------------------------------------
    sub.add_parser("extractors", help="List registered extractors")

    # -- forget --------------------------------------------------------------
    forget_p = sub.add_parser("forget", help="Delete cached entries for URLs")
    forget_p.add_argument("urls", nargs="+", help="Posting URLs to forget")
    forget_p.add_argument("--cache-dir", type=str, default=".cache", help="Cache directory")

    # -- cache-key -----------------------------------------------------------
    key_p = sub.add_parser("cache-key", help="Print the cache filename for URLs")
    key_p.add_argument("urls", nargs="+", help="Posting URLs")

    return parser


def main(argv: list[str] | None = None) -> int:
    from jobkeywords import cli

    args = build_parser().parse_args(argv)

    if args.command == "run":
        return cli.handle_run(args)
    if args.command == "extractors":
        return cli.handle_extractors()
    if args.command == "forget":
        return cli.handle_forget(args)
    return cli.handle_cache_key(args)


if __name__ == "__main__":
    sys.exit(main())
