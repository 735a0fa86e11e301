import logfire

from refledger.domain.referral.service.transition import StatusTransitionService
from refledger.domain.shared.command import Command, CommandHandler, Result


class UpdateReferralStatus(Command):
    record_id: str
    status: str
    expected_old_status: str | None = None


class ReferralStatusUpdated(Result):
    record_id: str
    status: str


class UpdateReferralStatusHandler(CommandHandler[UpdateReferralStatus, ReferralStatusUpdated]):
    transitions: StatusTransitionService

    async def run(self, cmd: UpdateReferralStatus) -> ReferralStatusUpdated:
        referral = await self.transitions.update_status(
            cmd.record_id,
            cmd.status,
            expected_old_status=cmd.expected_old_status,
        )
        logfire.info("Referral status updated", record_id=cmd.record_id, status=referral.status)
        return ReferralStatusUpdated(record_id=cmd.record_id, status=referral.status)
