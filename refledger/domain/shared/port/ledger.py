"""LedgerPort - the key-value store every record and index bucket lives in."""

from abc import abstractmethod
from typing import Protocol


class LedgerPort(Protocol):
    """Atomic single-key access to the ledger.

    No multi-key transactions are assumed. Ordering and replication belong to
    the host platform, which must serialize invocations touching the same key.

    Implementations raise LedgerReadError / LedgerWriteError on failure.
    """

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Return the value stored at key, or None when the key was never written."""
        ...

    @abstractmethod
    async def put(self, key: str, value: bytes) -> None:
        """Store value at key, replacing anything already there."""
        ...
