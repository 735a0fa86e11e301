"""SearchReferrals query handler - every referral in a status or department bucket."""

from refledger.domain.index.model.bucket import BucketKind
from refledger.domain.index.service.search import SearchService
from refledger.domain.referral.model.aggregate import Referral, parse_referral_array
from refledger.domain.shared.query import Query, QueryHandler, Result


class SearchReferrals(Query):
    kind: BucketKind
    name: str


class SearchResults(Result):
    kind: BucketKind
    name: str
    payload: bytes

    def referrals(self) -> list[Referral]:
        return parse_referral_array(self.payload)


class SearchReferralsHandler(QueryHandler[SearchReferrals, SearchResults]):
    search: SearchService

    async def run(self, cmd: SearchReferrals) -> SearchResults:
        if cmd.kind is BucketKind.STATUS:
            payload = await self.search.by_status(cmd.name)
        else:
            payload = await self.search.by_department(cmd.name)
        return SearchResults(kind=cmd.kind, name=cmd.name, payload=payload)
