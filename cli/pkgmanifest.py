"""
pkgmanifest command-line entry point.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Optional

from cli.commands import manifest as manifest_cmd
from cli.context import CliContext


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pkgmanifest",
        description="Read and update project manifests (package.json, package.json5, package.yaml)",
    )
    parser.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress non-critical logs")
    parser.add_argument("--verbose", "-v", action="store_true", help="Increase logging verbosity")
    parser.add_argument("--no-color", action="store_true", help="Disable terminal colors")

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    manifest_cmd.add_parsers(subparsers)
    return parser


def configure_context(args: argparse.Namespace) -> CliContext:
    return CliContext(
        json_mode=getattr(args, "json", False),
        quiet=getattr(args, "quiet", False),
        verbose=getattr(args, "verbose", False),
        color=not getattr(args, "no_color", False),
    )


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    ctx = configure_context(args)

    if not args.command:
        parser.print_help()
        return 1

    result = manifest_cmd.handle(ctx, args)
    if ctx.json_mode:
        json.dump(result, sys.stdout, indent=2, default=str)
        sys.stdout.write("\n")
    return manifest_cmd.extract_exit_code(result)


if __name__ == "__main__":
    sys.exit(main())
