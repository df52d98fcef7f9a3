"""
Blob store shell commands

Each command takes a CommandContext and the parsed argparse namespace and
returns the process exit code. Blob store errors are left to the caller
(see main.runCommand) so every command reports failures the same way.
"""

import argparse
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Dict, List, Optional, TextIO, Tuple

from blobshell.services.blobstore import BlobStoreService
from blobshell.services.blobstore import transfer
from blobshell.services.blobstore.utils import closeQuietly
from blobshell.utils import formatSize

PROVIDER_FORMAT = "%-16s %s"


@dataclass
class CommandContext:
    """Everything a command needs besides its arguments."""

    service: BlobStoreService
    provider: Optional[str] = None
    out: TextIO = field(default_factory=lambda: sys.stdout)
    binaryOut: BinaryIO = field(default_factory=lambda: sys.stdout.buffer)


def printBlobStoreProviders(providers: List[Tuple[str, str]], indent: str, out: TextIO) -> None:
    """Print provider table: id and backend type."""
    out.write(indent + (PROVIDER_FORMAT % ("[id]", "[type]")) + "\n")
    for providerId, providerType in providers:
        out.write(indent + (PROVIDER_FORMAT % (providerId, providerType)) + "\n")


def cmdProviders(ctx: CommandContext, args: argparse.Namespace) -> int:
    printBlobStoreProviders(ctx.service.getProviders(ctx.provider), "", ctx.out)
    return 0


def cmdContainerCreate(ctx: CommandContext, args: argparse.Namespace) -> int:
    if ctx.service.createContainer(args.container, location=args.location, provider=ctx.provider):
        ctx.out.write(f"Created container {args.container}\n")
    else:
        ctx.out.write(f"Container {args.container} already exists\n")
    return 0


def cmdContainerList(ctx: CommandContext, args: argparse.Namespace) -> int:
    for name in ctx.service.listContainers(provider=ctx.provider):
        ctx.out.write(name + "\n")
    return 0


def cmdBlobList(ctx: CommandContext, args: argparse.Namespace) -> int:
    for name in ctx.service.listBlobs(args.container, prefix=args.prefix, limit=args.limit, provider=ctx.provider):
        ctx.out.write(name + "\n")
    return 0


def cmdBlobRead(ctx: CommandContext, args: argparse.Namespace) -> int:
    """Print a blob: deserialized (--object), into a file (--file) or raw to stdout."""
    if args.object:
        obj = ctx.service.read(args.container, args.blob, provider=ctx.provider)
        ctx.out.write(repr(obj) + "\n")
        return 0

    stream = ctx.service.getBlobInputStream(args.container, args.blob, provider=ctx.provider)

    if args.file:
        try:
            target = open(args.file, "wb")
        except Exception:
            closeQuietly(stream, f"blob '{args.blob}' payload")
            raise
        size = transfer.copy(stream, target)
        ctx.out.write(f"Saved {formatSize(size)} to {args.file}\n")
        return 0

    # Not transfer.copy(): stdout must stay open
    try:
        while True:
            chunk = stream.read(transfer.BUFFER_SIZE)
            if not chunk:
                break
            ctx.binaryOut.write(chunk)
        ctx.binaryOut.flush()
    finally:
        closeQuietly(stream, f"blob '{args.blob}' payload")
    return 0


def cmdBlobWrite(ctx: CommandContext, args: argparse.Namespace) -> int:
    """Upload a file, URL contents or a string to a blob."""
    ctx.service.createContainer(args.container, provider=ctx.provider)

    if args.file:
        ctx.service.writeStream(args.container, args.blob, open(args.file, "rb"), provider=ctx.provider)
    elif args.url:
        ctx.service.write(args.container, args.blob, transfer.readFromUrl(args.url), provider=ctx.provider)
    elif args.object:
        ctx.service.write(args.container, args.blob, args.string, provider=ctx.provider)
    else:
        ctx.service.write(args.container, args.blob, args.string.encode("utf-8"), provider=ctx.provider)

    ctx.out.write(f"Stored blob {args.blob} in container {args.container}\n")
    return 0


def cmdBlobRemove(ctx: CommandContext, args: argparse.Namespace) -> int:
    if ctx.service.remove(args.container, args.blob, provider=ctx.provider):
        ctx.out.write(f"Removed blob {args.blob} from container {args.container}\n")
        return 0
    ctx.out.write(f"Blob {args.blob} not found in container {args.container}\n")
    return 1


COMMANDS: Dict[str, Callable[[CommandContext, argparse.Namespace], int]] = {
    "providers": cmdProviders,
    "container-create": cmdContainerCreate,
    "container-list": cmdContainerList,
    "blob-list": cmdBlobList,
    "blob-read": cmdBlobRead,
    "blob-write": cmdBlobWrite,
    "blob-remove": cmdBlobRemove,
}
