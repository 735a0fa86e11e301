"""IndexService - maintains record-id membership of status and department buckets."""

import logging

from refledger.domain.index.model.bucket import BucketCodec, BucketKey, BucketLayout
from refledger.domain.shared.error import IndexWriteError, LedgerReadError, LedgerWriteError
from refledger.domain.shared.port.ledger import LedgerPort
from refledger.domain.shared.service import Service

logger = logging.getLogger(__name__)


class IndexService(Service):
    """Adds and removes record ids in index buckets.

    Every mutation is a read-modify-write of a single ledger key. Adds are
    de-duplicated and both operations skip the write when the bucket would not
    change, so retrying a failed call is always safe.

    The read-modify-write is not atomic: two writers updating the same bucket
    concurrently can lose an update. The host ledger is expected to serialize
    invocations.
    """

    ledger: LedgerPort
    layout: BucketLayout

    @property
    def codec(self) -> BucketCodec:
        return self.layout.codec()

    async def members(self, key: BucketKey) -> list[str] | None:
        """Decoded bucket contents, or None when the bucket was never written."""
        value = await self.ledger.get(str(key))
        if value is None:
            return None
        return self.codec.decode(value)

    async def add_to_bucket(self, key: BucketKey, record_id: str) -> bool:
        """Append record_id to the bucket unless it is already a member.

        Returns:
            True if the bucket was written, False if the id was already present.

        Raises:
            IndexWriteError: The ledger read or write failed.
        """
        self.codec.validate_id(record_id)
        try:
            ids = await self.members(key) or []
            if record_id in ids:
                logger.debug("Bucket %s already contains %s", key, record_id)
                return False
            ids.append(record_id)
            await self.ledger.put(str(key), self.codec.encode(ids))
        except (LedgerReadError, LedgerWriteError) as e:
            raise IndexWriteError(str(key), record_id, e) from e

        logger.debug("Added %s to %s bucket %s", record_id, key.kind.value, key)
        return True

    async def remove_from_bucket(self, key: BucketKey, record_id: str) -> bool:
        """Remove every occurrence of record_id from the bucket.

        Removing from a bucket that was never created, or that does not hold the
        id, is a no-op. A bucket emptied by removal is stored as an empty value.

        Returns:
            True if the bucket was written.

        Raises:
            IndexWriteError: The ledger read or write failed.
        """
        try:
            ids = await self.members(key)
            if ids is None:
                logger.debug("Bucket %s does not exist, nothing to remove", key)
                return False
            remaining = [i for i in ids if i != record_id]
            if len(remaining) == len(ids):
                return False
            await self.ledger.put(str(key), self.codec.encode(remaining))
        except (LedgerReadError, LedgerWriteError) as e:
            raise IndexWriteError(str(key), record_id, e) from e

        logger.debug("Removed %s from %s bucket %s", record_id, key.kind.value, key)
        return True

    async def index_status(self, record_id: str, status: str) -> bool:
        return await self.add_to_bucket(self.layout.status(status), record_id)

    async def unindex_status(self, record_id: str, status: str) -> bool:
        return await self.remove_from_bucket(self.layout.status(status), record_id)

    async def index_department(self, record_id: str, department: str) -> bool:
        return await self.add_to_bucket(self.layout.department(department), record_id)
