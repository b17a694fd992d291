# storyframe/cli/main.py
import argparse
import sys
from typing import List

from storyframe.errors import CLIError

from . import validate
from ._exit import USER_ERR
from ._io import eprint_once


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storyframe",
        description="storyframe operator CLI",
        allow_abbrev=False,
    )
    from storyframe import __version__ as _VER

    parser.add_argument(
        "--version",
        action="version",
        version=f"storyframe {_VER}",
    )
    subparsers = parser.add_subparsers(dest="command")

    validate.register(subparsers)

    return parser


def main(argv: List[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    ns = parser.parse_args(argv)
    if not hasattr(ns, "func"):
        parser.print_help(sys.stderr)
        return USER_ERR
    try:
        return int(ns.func(ns))
    except CLIError as e:
        eprint_once(f"error: {e}")
        return USER_ERR
