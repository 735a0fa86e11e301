"""RepairReferral - re-synchronize a referral's index memberships after a partial failure."""

from refledger.domain.referral.model.value import RepairReport
from refledger.domain.referral.service.transition import StatusTransitionService
from refledger.domain.shared.command import Command, CommandHandler, Result


class RepairReferral(Command):
    record_id: str
    stale_statuses: list[str] = []


class ReferralRepaired(Result):
    report: RepairReport


class RepairReferralHandler(CommandHandler[RepairReferral, ReferralRepaired]):
    transitions: StatusTransitionService

    async def run(self, cmd: RepairReferral) -> ReferralRepaired:
        report = await self.transitions.repair(cmd.record_id, cmd.stale_statuses)
        return ReferralRepaired(report=report)
