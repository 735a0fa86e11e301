"""StatusTransitionService - keeps a referral and its index memberships in step."""

import logging
from collections.abc import Sequence

from refledger.domain.index.service.index import IndexService
from refledger.domain.referral.model.aggregate import Referral
from refledger.domain.referral.model.value import RepairReport
from refledger.domain.referral.service.record import RecordStore
from refledger.domain.shared.error import (
    IndexWriteError,
    InvalidArgumentError,
    PartialUpdateError,
    StatusConflictError,
)
from refledger.domain.shared.service import Service

logger = logging.getLogger(__name__)

WRITE_RECORD = "write_record"
INDEX_STATUS = "index_status"
INDEX_DEPARTMENT = "index_department"
UNINDEX_STATUS = "unindex_status"


class StatusTransitionService(Service):
    """Coordinates record writes with bucket maintenance.

    Steps run in a fixed order and are never rolled back. When a step after the
    record write fails, PartialUpdateError reports what was already applied;
    ``repair`` brings the buckets back in line and can be re-run at will.

    Status updates add the id to the new bucket before removing it from the old
    one, so a concurrent reader may briefly see the record in both buckets but
    never in neither.
    """

    records: RecordStore
    index: IndexService

    async def create(
        self,
        record_id: str,
        payload: bytes,
        status: str | None = None,
        departments: Sequence[str] | None = None,
    ) -> bytes:
        """Store a new referral and index it by status and department.

        Explicit status/departments are merged into the payload before it is
        stored, so the record always agrees with the buckets it is listed in.

        Returns:
            The bytes written at record_id.
        """
        referral = self.records.parse(record_id, payload)
        if status is not None or departments is not None:
            update: dict = {}
            if status is not None:
                update["status"] = status
            if departments is not None:
                update["departments"] = list(departments)
            referral = referral.model_copy(update=update)
            payload = referral.to_bytes()

        if not referral.status:
            raise InvalidArgumentError(f"Referral {record_id} has no status", field="status")

        # Reject bad bucket names before anything is written
        status_key = self.index.layout.status(referral.status)
        department_keys = [self.index.layout.department(d) for d in dict.fromkeys(referral.departments)]

        written = await self.records.create(record_id, payload)
        applied = [WRITE_RECORD]

        try:
            await self.index.add_to_bucket(status_key, record_id)
        except IndexWriteError as e:
            raise PartialUpdateError(
                record_id,
                INDEX_STATUS,
                applied,
                detail=f"Could not index the referral by status from the value: {referral.status} on the ledger",
                cause=e,
            ) from e
        applied.append(INDEX_STATUS)

        for key in department_keys:
            try:
                await self.index.add_to_bucket(key, record_id)
            except IndexWriteError as e:
                raise PartialUpdateError(
                    record_id,
                    INDEX_DEPARTMENT,
                    applied,
                    detail=f"Could not index the referral by department from the value: {key.name} on the ledger",
                    cause=e,
                ) from e
            applied.append(f"{INDEX_DEPARTMENT}:{key.name}")

        logger.info(
            "Referral %s created with status %s in %d department(s)",
            record_id,
            referral.status,
            len(department_keys),
        )
        return written

    async def update_status(
        self,
        record_id: str,
        new_status: str,
        expected_old_status: str | None = None,
    ) -> Referral:
        """Move a referral to new_status.

        The old status is read from the stored record. A caller-supplied
        expected_old_status is only checked against it, never trusted.

        Raises:
            NotFoundError: No record at record_id.
            StatusConflictError: expected_old_status differs from the stored status.
            PartialUpdateError: The record was written but a bucket update failed.
        """
        new_key = self.index.layout.status(new_status)
        referral = await self.records.get(record_id)
        old_status = referral.status

        if expected_old_status is not None and expected_old_status != old_status:
            raise StatusConflictError(
                f"Referral {record_id} has status {old_status!r}, not {expected_old_status!r}"
            )

        updated = referral.with_status(new_status)
        await self.records.update(record_id, updated)
        applied = [WRITE_RECORD]

        try:
            await self.index.add_to_bucket(new_key, record_id)
        except IndexWriteError as e:
            raise PartialUpdateError(
                record_id,
                INDEX_STATUS,
                applied,
                detail=f"Could not index the referral by status from the value: {new_status} on the ledger",
                cause=e,
            ) from e
        applied.append(INDEX_STATUS)

        if old_status and old_status != new_status:
            try:
                await self.index.unindex_status(record_id, old_status)
            except IndexWriteError as e:
                raise PartialUpdateError(
                    record_id,
                    UNINDEX_STATUS,
                    applied,
                    detail=f"Could not remove the referral from status: {old_status} on the ledger",
                    cause=e,
                ) from e

        logger.info("Referral %s moved from %s to %s", record_id, old_status or "<none>", new_status)
        return updated

    async def repair(self, record_id: str, stale_statuses: Sequence[str] = ()) -> RepairReport:
        """Re-apply every index membership the stored record implies.

        Adds the id to its current status bucket and each department bucket,
        then removes it from any of ``stale_statuses`` other than the current
        status. Safe to run repeatedly, including after a partial failure.
        """
        referral = await self.records.get(record_id)
        if not referral.status:
            raise InvalidArgumentError(f"Referral {record_id} has no status", field="status")

        added: list[str] = []
        removed: list[str] = []

        status_key = self.index.layout.status(referral.status)
        if await self.index.add_to_bucket(status_key, record_id):
            added.append(str(status_key))

        for department in dict.fromkeys(referral.departments):
            key = self.index.layout.department(department)
            if await self.index.add_to_bucket(key, record_id):
                added.append(str(key))

        for stale in dict.fromkeys(stale_statuses):
            if not stale or stale == referral.status:
                continue
            key = self.index.layout.status(stale)
            if await self.index.remove_from_bucket(key, record_id):
                removed.append(str(key))

        if added or removed:
            logger.warning("Repaired indexes for %s: added=%s removed=%s", record_id, added, removed)
        return RepairReport(record_id=record_id, status=referral.status, added=added, removed=removed)
