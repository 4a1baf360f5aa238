"""Tabby CLI — ``tabby dev`` and ``tabby build``.

Every option defaults to None so that anything not given on the command line
falls through to ``tabby.yaml`` and then to the TabbyConfig defaults.
"""

from __future__ import annotations

import argparse
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


def _site_options() -> argparse.ArgumentParser:
    """Options shared by every subcommand."""
    shared = argparse.ArgumentParser(add_help=False)
    shared.add_argument("root", nargs="?", default=".", help="Site root directory")
    shared.add_argument("--output", default=None, help="Output directory (default: dist)")
    shared.add_argument(
        "--base-url", default=None, help="Absolute site URL for sitemap and feed links",
    )
    shared.add_argument(
        "--no-drafts",
        dest="drafts",
        action="store_const",
        const=False,
        default=None,
        help="Leave out pages marked draft",
    )
    return shared


def _run_dev(args: argparse.Namespace) -> int:
    from tabby.app import dev

    return dev(
        root=args.root,
        output=args.output,
        base_url=args.base_url,
        drafts=args.drafts,
        fast_delay=args.fast_delay,
        slow_delay=args.slow_delay,
    )


def _run_build(args: argparse.Namespace) -> int:
    from tabby.app import build

    result = build(
        root=args.root,
        output=args.output,
        base_url=args.base_url,
        drafts=args.drafts,
    )
    return result.exit_code


def _build_parser() -> argparse.ArgumentParser:
    from tabby import __version__

    parser = argparse.ArgumentParser(
        prog="tabby",
        description="Incremental static-site builder for markdown content.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    shared = _site_options()

    dev = commands.add_parser(
        "dev", parents=[shared], help="Watch content and rebuild incrementally",
    )
    dev.add_argument(
        "--fast-delay", type=float, default=None, metavar="SECONDS",
        help="Quiet time before the single-page rebuild (default: 0.2)",
    )
    dev.add_argument(
        "--slow-delay", type=float, default=None, metavar="SECONDS",
        help="Quiet time before the full-site reconcile (default: 2.0)",
    )
    dev.set_defaults(handler=_run_dev)

    build = commands.add_parser(
        "build", parents=[shared], help="Render every page, the sitemap and the feed once",
    )
    build.set_defaults(handler=_run_build)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Console script entry point. Always exits via ``sys.exit``."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    handler: Callable[[argparse.Namespace], int] | None = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        sys.exit(0)

    from tabby._errors import ConfigError

    try:
        status = handler(args)
    except ConfigError as exc:
        print(f"  Config error: {exc}", file=sys.stderr)
        status = 2
    sys.exit(status)


if __name__ == "__main__":
    main()
