"""RecordStore - reads and writes referral records at their own id key."""

import logging

from pydantic import ValidationError as PydanticValidationError

from refledger.domain.index.model.bucket import BucketCodec
from refledger.domain.referral.model.aggregate import Referral
from refledger.domain.shared.error import CorruptRecordError, InvalidArgumentError, NotFoundError
from refledger.domain.shared.port.ledger import LedgerPort
from refledger.domain.shared.service import Service

logger = logging.getLogger(__name__)


class RecordStore(Service):
    """Primary record storage. Never touches index buckets."""

    ledger: LedgerPort
    codec: BucketCodec

    def parse(self, record_id: str, payload: bytes) -> Referral:
        """Validate an incoming payload for record_id."""
        self.codec.validate_id(record_id)
        if not payload:
            raise InvalidArgumentError(f"Empty payload for {record_id}", field="payload")
        try:
            referral = Referral.from_bytes(payload)
        except PydanticValidationError as e:
            raise InvalidArgumentError(
                f"Payload for {record_id} is not a valid referral: {e.error_count()} error(s)",
                field="payload",
            ) from e
        if referral.referral_id and referral.referral_id != record_id:
            raise InvalidArgumentError(
                f"Payload referralId {referral.referral_id!r} does not match key {record_id!r}",
                field="referralId",
            )
        return referral

    async def create(self, record_id: str, payload: bytes) -> bytes:
        """Write payload at record_id, overwriting any existing record.

        Returns:
            The bytes written.
        """
        self.parse(record_id, payload)
        await self.ledger.put(record_id, payload)
        logger.debug("Record written: %s (%d bytes)", record_id, len(payload))
        return payload

    async def update(self, record_id: str, referral: Referral) -> bytes:
        payload = referral.to_bytes()
        await self.ledger.put(record_id, payload)
        logger.debug("Record updated: %s (status=%s)", record_id, referral.status)
        return payload

    async def fetch(self, record_id: str) -> bytes | None:
        """Raw lookup; None when the record was never written."""
        return await self.ledger.get(record_id)

    async def read(self, record_id: str) -> bytes:
        value = await self.ledger.get(record_id)
        if value is None:
            raise NotFoundError(f"Did not find entry for key: {record_id}", key=record_id)
        return value

    async def get(self, record_id: str) -> Referral:
        value = await self.read(record_id)
        try:
            return Referral.from_bytes(value)
        except PydanticValidationError as e:
            raise CorruptRecordError(f"Stored record {record_id} is not a valid referral") from e
