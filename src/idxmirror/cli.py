# cli.py
import argparse
import logging
import sys
from pathlib import Path

from . import operations
from .config import Config
from .errors import PackageIndexError
from .logger import set_level, setup_logger

_logger = setup_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="idxmirror", description="Local package index mirror")
    parser.add_argument("--config", "-c", type=Path, help="Path to idxmirror.conf")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug output")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # update / up
    p_update = subparsers.add_parser("update", aliases=["up"], help="Download or refresh the package index")
    p_update.set_defaults(func=operations.update)

    # versions / ver
    p_versions = subparsers.add_parser("versions", aliases=["ver"], help="List available versions of a package")
    p_versions.add_argument("package")
    p_versions.add_argument("--latest", "-l", action="store_true", help="Only print the newest version")
    p_versions.set_defaults(func=operations.versions)

    # status / st
    p_status = subparsers.add_parser("status", aliases=["st"], help="Show local index files")
    p_status.set_defaults(func=operations.status)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        set_level(logging.DEBUG)

    arg_dict = vars(args)
    func = arg_dict.pop("func", None)
    if func is None:
        parser.print_help()
        sys.exit(1)
    for key in ("command", "config", "verbose"):
        arg_dict.pop(key, None)

    try:
        # ------------------------
        # Initialize config + operations
        # ------------------------
        config = Config(args.config)
        operations.init(config)
        func(**arg_dict)
    except PackageIndexError as e:
        _logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
