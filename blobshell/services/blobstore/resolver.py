"""
Provider resolution

Turns an optional provider hint into exactly one provider handle. Resolution
is a pure function of its inputs and is meant to be re-evaluated on every
call, since the set of active providers may change between calls.
"""

from typing import List, Optional, Sequence

from .backends.abstract import BlobStoreHandle
from .exceptions import AmbiguousProviderError, NoProvidersAvailableError, ProviderNotFoundError


def resolveBlobStore(hint: Optional[str], handles: Sequence[BlobStoreHandle]) -> BlobStoreHandle:
    """
    Pick the provider handle a caller asked for.

    Args:
        hint: Provider id to look for, or None to use the only active provider
        handles: Active provider handles, in registry order

    Returns:
        The first handle whose providerId equals the hint, or the only
        active handle when no hint is given

    Raises:
        ProviderNotFoundError: A hint was given but no handle matches it
        NoProvidersAvailableError: No hint and no active handles
        AmbiguousProviderError: No hint and more than one active handle
    """
    if hint is not None:
        for handle in handles:
            if handle.providerId == hint:
                return handle
        raise ProviderNotFoundError(hint)

    if len(handles) == 0:
        raise NoProvidersAvailableError()
    if len(handles) > 1:
        raise AmbiguousProviderError([handle.providerId for handle in handles])
    return handles[0]


def resolveBlobStores(hint: Optional[str], handles: Sequence[BlobStoreHandle]) -> List[BlobStoreHandle]:
    """
    Get every active handle, or just the hinted one.

    Used by listing commands that may act on all providers at once.

    Raises:
        ProviderNotFoundError: A hint was given but no handle matches it
    """
    if hint is None:
        return list(handles)
    return [resolveBlobStore(hint, handles)]
