"""DI provider for referral services and handlers."""

from dishka import Provider, provide

from refledger.config import Config
from refledger.domain.index.model.bucket import BucketCodec, BucketLayout
from refledger.domain.index.service.index import IndexService
from refledger.domain.index.service.search import SearchService
from refledger.domain.referral.command.create_referral import CreateReferralHandler
from refledger.domain.referral.command.repair_referral import RepairReferralHandler
from refledger.domain.referral.command.update_status import UpdateReferralStatusHandler
from refledger.domain.referral.query.read_referral import ReadReferralHandler
from refledger.domain.referral.query.search_referrals import SearchReferralsHandler
from refledger.domain.referral.service.record import RecordStore
from refledger.domain.referral.service.transition import StatusTransitionService
from refledger.util.di.scope import Scope


class ReferralProvider(Provider):
    @provide(scope=Scope.APP)
    def get_layout(self, config: Config) -> BucketLayout:
        return config.index.layout()

    @provide(scope=Scope.APP)
    def get_codec(self, layout: BucketLayout) -> BucketCodec:
        return layout.codec()

    # Services
    index_service = provide(IndexService, scope=Scope.INVOCATION)
    record_store = provide(RecordStore, scope=Scope.INVOCATION)
    search_service = provide(SearchService, scope=Scope.INVOCATION)
    transition_service = provide(StatusTransitionService, scope=Scope.INVOCATION)

    # Command Handlers
    create_referral_handler = provide(CreateReferralHandler, scope=Scope.INVOCATION)
    update_status_handler = provide(UpdateReferralStatusHandler, scope=Scope.INVOCATION)
    repair_referral_handler = provide(RepairReferralHandler, scope=Scope.INVOCATION)

    # Query Handlers
    read_referral_handler = provide(ReadReferralHandler, scope=Scope.INVOCATION)
    search_referrals_handler = provide(SearchReferralsHandler, scope=Scope.INVOCATION)
