"""ReadReferral query handler - raw record bytes by id."""

from refledger.domain.referral.service.record import RecordStore
from refledger.domain.shared.query import Query, QueryHandler, Result


class ReadReferral(Query):
    record_id: str


class ReferralRecord(Result):
    record_id: str
    payload: bytes


class ReadReferralHandler(QueryHandler[ReadReferral, ReferralRecord]):
    records: RecordStore

    async def run(self, cmd: ReadReferral) -> ReferralRecord:
        payload = await self.records.read(cmd.record_id)
        return ReferralRecord(record_id=cmd.record_id, payload=payload)
