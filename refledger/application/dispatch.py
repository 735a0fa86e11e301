"""Invocation dispatch - routes an external operation name and its positional
string arguments to the matching command or query handler.

The registry is a plain mapping validated when the Dispatcher is built, so a
misconfigured operation fails at startup rather than on first use.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum

import logfire

from refledger.domain.index.model.bucket import BucketKind
from refledger.domain.referral.command.create_referral import CreateReferral, CreateReferralHandler
from refledger.domain.referral.command.repair_referral import RepairReferral, RepairReferralHandler
from refledger.domain.referral.command.update_status import (
    UpdateReferralStatus,
    UpdateReferralStatusHandler,
)
from refledger.domain.referral.query.read_referral import ReadReferral, ReadReferralHandler
from refledger.domain.referral.query.search_referrals import SearchReferrals, SearchReferralsHandler
from refledger.domain.shared.error import (
    ConfigurationError,
    InvalidArgumentError,
    PartialUpdateError,
    RefLedgerError,
    UnknownOperationError,
)

logger = logging.getLogger(__name__)

OperationFunc = Callable[[Sequence[str]], Awaitable[bytes | None]]


class OperationKind(StrEnum):
    INVOKE = "invoke"  # may write to the ledger
    QUERY = "query"  # read-only


@dataclass(frozen=True)
class Operation:
    name: str
    kind: OperationKind
    func: OperationFunc
    min_args: int = 0
    max_args: int | None = None  # None = unbounded
    usage: str = ""

    def check_arity(self, args: Sequence[str]) -> None:
        count = len(args)
        if count < self.min_args or (self.max_args is not None and count > self.max_args):
            if self.max_args is None:
                expected = f"at least {self.min_args}"
            elif self.min_args == self.max_args:
                expected = str(self.min_args)
            else:
                expected = f"{self.min_args} to {self.max_args}"
            raise InvalidArgumentError(
                f"Incorrect number of arguments for {self.name}. Expecting {expected}: {self.usage}"
            )


@dataclass(frozen=True)
class InvocationResult:
    """Outcome of Dispatcher.call, shaped like a (payload, error) pair.

    For partial failures the payload carries the descriptive detail of the step
    that failed, alongside the error itself.
    """

    payload: bytes | None = None
    error: RefLedgerError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Dispatcher:
    """Operation registry keyed by invocation name."""

    def __init__(self, operations: Iterable[Operation]) -> None:
        registry: dict[str, Operation] = {}
        for op in operations:
            if not op.name:
                raise ConfigurationError("Operation registered without a name")
            if op.name in registry:
                raise ConfigurationError(f"Operation {op.name} registered twice")
            if not isinstance(op.kind, OperationKind):
                raise ConfigurationError(f"Operation {op.name} has invalid kind {op.kind!r}")
            if not callable(op.func):
                raise ConfigurationError(f"Operation {op.name} has no callable handler")
            if op.min_args < 0 or (op.max_args is not None and op.max_args < op.min_args):
                raise ConfigurationError(f"Operation {op.name} has invalid arity")
            registry[op.name] = op
        self._operations = registry

    def operations(self) -> list[Operation]:
        return list(self._operations.values())

    def lookup(self, name: str, kind: OperationKind | None = None) -> Operation:
        op = self._operations.get(name)
        if op is None or (kind is not None and op.kind is not kind):
            logger.warning("%s did not find func: %s", kind.value if kind else "dispatch", name)
            raise UnknownOperationError(name, kind.value if kind else None)
        return op

    async def invoke(self, name: str, args: Sequence[str]) -> bytes | None:
        return await self._run(self.lookup(name, OperationKind.INVOKE), args)

    async def query(self, name: str, args: Sequence[str]) -> bytes | None:
        return await self._run(self.lookup(name, OperationKind.QUERY), args)

    async def call(self, name: str, args: Sequence[str]) -> InvocationResult:
        """Dispatch regardless of kind, returning errors instead of raising them."""
        try:
            payload = await self._run(self.lookup(name), args)
        except PartialUpdateError as e:
            return InvocationResult(payload=e.detail, error=e)
        except RefLedgerError as e:
            return InvocationResult(error=e)
        return InvocationResult(payload=payload)

    async def _run(self, op: Operation, args: Sequence[str]) -> bytes | None:
        op.check_arity(args)
        logger.info("%s is running %s", op.kind.value, op.name)
        with logfire.span("{kind} {operation}", kind=op.kind.value, operation=op.name):
            return await op.func(args)


# =============================================================================
# Registry
# =============================================================================


def _split_departments(value: str) -> list[str]:
    return [d.strip() for d in value.split(",") if d.strip()]


def build_operations(
    create: CreateReferralHandler,
    update_status: UpdateReferralStatusHandler,
    repair: RepairReferralHandler,
    read: ReadReferralHandler,
    search: SearchReferralsHandler,
) -> list[Operation]:
    """Wire every external invocation name to its handler."""

    async def init(args: Sequence[str]) -> None:
        # There is no initialization to do
        return None

    async def create_referral(args: Sequence[str]) -> bytes:
        if len(args) == 3:
            raise InvalidArgumentError(
                "createReferral takes either a payload alone or a payload, status and departments"
            )
        explicit = len(args) == 4
        result = await create.run(
            CreateReferral(
                record_id=args[0],
                payload=args[1].encode("utf-8"),
                status=args[2] if explicit else None,
                departments=_split_departments(args[3]) if explicit else None,
            )
        )
        return result.payload

    async def update_referral_status(args: Sequence[str]) -> None:
        expected = args[2] if len(args) > 2 else None
        await update_status.run(
            UpdateReferralStatus(record_id=args[0], status=args[1], expected_old_status=expected)
        )
        return None

    async def repair_referral(args: Sequence[str]) -> bytes:
        result = await repair.run(RepairReferral(record_id=args[0], stale_statuses=list(args[1:])))
        return result.report.model_dump_json().encode("utf-8")

    async def read_referral(args: Sequence[str]) -> bytes:
        result = await read.run(ReadReferral(record_id=args[0]))
        return result.payload

    async def search_by_status(args: Sequence[str]) -> bytes:
        result = await search.run(SearchReferrals(kind=BucketKind.STATUS, name=args[0]))
        return result.payload

    async def search_by_department(args: Sequence[str]) -> bytes:
        result = await search.run(SearchReferrals(kind=BucketKind.DEPARTMENT, name=args[0]))
        return result.payload

    return [
        Operation("init", OperationKind.INVOKE, init, usage="[ignored...]"),
        Operation(
            "createReferral",
            OperationKind.INVOKE,
            create_referral,
            min_args=2,
            max_args=4,
            usage="id payload [status departments]",
        ),
        Operation(
            "updateReferralStatus",
            OperationKind.INVOKE,
            update_referral_status,
            min_args=2,
            max_args=3,
            usage="id new_status [expected_old_status]",
        ),
        Operation(
            "repairReferral",
            OperationKind.INVOKE,
            repair_referral,
            min_args=1,
            usage="id [stale_status...]",
        ),
        Operation("read", OperationKind.QUERY, read_referral, min_args=1, max_args=1, usage="id"),
        Operation(
            "searchByStatus",
            OperationKind.QUERY,
            search_by_status,
            min_args=1,
            max_args=1,
            usage="status",
        ),
        Operation(
            "searchByDepartment",
            OperationKind.QUERY,
            search_by_department,
            min_args=1,
            max_args=1,
            usage="department",
        ),
    ]
