import logfire

from refledger.domain.referral.service.transition import StatusTransitionService
from refledger.domain.shared.command import Command, CommandHandler, Result


class CreateReferral(Command):
    record_id: str
    payload: bytes
    status: str | None = None
    departments: list[str] | None = None


class ReferralCreated(Result):
    record_id: str
    payload: bytes


class CreateReferralHandler(CommandHandler[CreateReferral, ReferralCreated]):
    transitions: StatusTransitionService

    async def run(self, cmd: CreateReferral) -> ReferralCreated:
        written = await self.transitions.create(
            cmd.record_id,
            cmd.payload,
            status=cmd.status,
            departments=cmd.departments,
        )
        logfire.info("Referral created", record_id=cmd.record_id)
        return ReferralCreated(record_id=cmd.record_id, payload=written)
