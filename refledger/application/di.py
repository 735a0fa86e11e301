from dishka import AsyncContainer, Provider, make_async_container, provide

from refledger.application.dispatch import Dispatcher, build_operations
from refledger.config import Config
from refledger.domain.referral.command.create_referral import CreateReferralHandler
from refledger.domain.referral.command.repair_referral import RepairReferralHandler
from refledger.domain.referral.command.update_status import UpdateReferralStatusHandler
from refledger.domain.referral.query.read_referral import ReadReferralHandler
from refledger.domain.referral.query.search_referrals import SearchReferralsHandler
from refledger.domain.referral.util.di.provider import ReferralProvider
from refledger.infrastructure.persistence.di import PersistenceProvider
from refledger.util.di.scope import Scope


class DispatchProvider(Provider):
    @provide(scope=Scope.INVOCATION)
    def get_dispatcher(
        self,
        create: CreateReferralHandler,
        update_status: UpdateReferralStatusHandler,
        repair: RepairReferralHandler,
        read: ReadReferralHandler,
        search: SearchReferralsHandler,
    ) -> Dispatcher:
        return Dispatcher(build_operations(create, update_status, repair, read, search))


def create_container(config: Config | None = None) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    return make_async_container(
        PersistenceProvider(),
        ReferralProvider(),
        DispatchProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
