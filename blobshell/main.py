"""
blobshell - command line access to containers and blobs of several
configured blob store providers.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from blobshell.commands import COMMANDS, CommandContext
from blobshell.config.manager import ConfigManager
from blobshell.logging_utils import initLogging
from blobshell.services.blobstore import BlobStoreRegistry, BlobStoreService
from blobshell.services.blobstore.exceptions import BlobStoreError

logger = logging.getLogger(__name__)


def buildParser() -> argparse.ArgumentParser:
    """Build command line parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="blobshell",
        description="blobshell - containers and blobs across multiple blob store providers, dood!",
    )
    parser.add_argument(
        "-c",
        "--config",
        default="config.toml",
        help="Path to configuration file (default: config.toml)",
    )
    parser.add_argument(
        "--config-dir",
        action="append",
        help="Directory to search for .toml config files recursively (can be specified multiple times)",
    )
    parser.add_argument(
        "--provider",
        default=None,
        help="Provider id to use, required when more than one provider is configured",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    subparsers.add_parser("providers", help="List configured providers")

    containerCreate = subparsers.add_parser("container-create", help="Create a container if it does not exist")
    containerCreate.add_argument("container")
    containerCreate.add_argument("--location", default=None, help="Backend specific location (region)")

    subparsers.add_parser("container-list", help="List containers")

    blobList = subparsers.add_parser("blob-list", help="List blobs in a container")
    blobList.add_argument("container")
    blobList.add_argument("--prefix", default="", help="Only list blobs starting with this prefix")
    blobList.add_argument("--limit", type=int, default=None, help="Maximum number of blobs to list")

    blobRead = subparsers.add_parser("blob-read", help="Read a blob")
    blobRead.add_argument("container")
    blobRead.add_argument("blob")
    blobRead.add_argument("--file", default=None, help="Save payload to this file instead of stdout")
    blobRead.add_argument("--object", action="store_true", help="Deserialize payload and print the object")

    blobWrite = subparsers.add_parser("blob-write", help="Write a blob")
    blobWrite.add_argument("container")
    blobWrite.add_argument("blob")
    source = blobWrite.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", default=None, help="Upload contents of this file")
    source.add_argument("--url", default=None, help="Upload contents fetched from this URL")
    source.add_argument("--string", default=None, help="Upload this string")
    blobWrite.add_argument("--object", action="store_true", help="Store --string as a serialized object")

    blobRemove = subparsers.add_parser("blob-remove", help="Remove a blob")
    blobRemove.add_argument("container")
    blobRemove.add_argument("blob")

    return parser


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = buildParser()
    args = parser.parse_args(argv)

    if args.command == "blob-write" and args.object and args.string is None:
        parser.error("--object can only be used together with --string")

    args.config = os.path.abspath(args.config)
    if args.config_dir:
        args.config_dir = [os.path.abspath(dir_path) for dir_path in args.config_dir]

    return args


def runCommand(ctx: CommandContext, args: argparse.Namespace) -> int:
    """
    Run one command, reporting failures on stderr.

    Returns:
        Process exit code
    """
    try:
        return COMMANDS[args.command](ctx, args)
    except BlobStoreError as e:
        logger.debug(f"Command {args.command} failed", exc_info=True)
        sys.stderr.write(f"Error: {e}\n")
        return 1
    except OSError as e:
        sys.stderr.write(f"Error: {e}\n")
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.WARNING)

    args = parse_arguments(argv)

    configManager = ConfigManager(args.config, args.config_dir)
    initLogging(configManager.getLoggingConfig())

    registry = BlobStoreRegistry()
    try:
        registry.injectConfig(configManager)
    except BlobStoreError as e:
        sys.stderr.write(f"Error: {e}\n")
        return 1

    try:
        ctx = CommandContext(service=BlobStoreService(registry), provider=args.provider)
        return runCommand(ctx, args)
    finally:
        registry.close()


if __name__ == "__main__":
    sys.exit(main())
