"""SearchService - resolves an index bucket to the records it references."""

import logging

from refledger.domain.index.model.bucket import BucketKey
from refledger.domain.index.service.index import IndexService
from refledger.domain.referral.service.record import RecordStore
from refledger.domain.shared.error import IndexNotFoundError
from refledger.domain.shared.service import Service

logger = logging.getLogger(__name__)


class SearchService(Service):
    """Bucket lookups with a sequential fan-out to the record store.

    Ledger read failures abort the whole search. An id whose record is missing
    is skipped rather than treated as an error.
    """

    index: IndexService
    records: RecordStore

    async def resolve(self, key: BucketKey) -> list[bytes]:
        """Raw record values referenced by a bucket, in bucket order.

        Raises:
            IndexNotFoundError: The bucket was never written.
        """
        ids = await self.index.members(key)
        if ids is None:
            raise IndexNotFoundError(f"No {key.kind.value} index named {key.name}", key=str(key))

        values: list[bytes] = []
        for record_id in ids:
            value = await self.records.fetch(record_id)
            if value is None:
                logger.warning("Bucket %s references missing record %s", key, record_id)
                continue
            values.append(value)

        logger.debug("Resolved %d of %d ids from %s", len(values), len(ids), key)
        return values

    async def search(self, key: BucketKey) -> bytes:
        """JSON array literal of every record in the bucket.

        Records are stored as JSON, so their raw bytes are joined directly.
        """
        return b"[" + b",".join(await self.resolve(key)) + b"]"

    async def by_status(self, status: str) -> bytes:
        return await self.search(self.index.layout.status(status))

    async def by_department(self, department: str) -> bytes:
        return await self.search(self.index.layout.department(department))
