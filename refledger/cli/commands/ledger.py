"""Ledger commands - run invocations and queries against the configured ledger."""

import asyncio
import sys
from collections.abc import Sequence

import logfire
from pydantic import ValidationError

from refledger.application.di import create_container
from refledger.application.dispatch import Dispatcher, OperationKind
from refledger.cli.console import get_console
from refledger.config import Config, LedgerConfig, configure_logging
from refledger.domain.referral.model.aggregate import parse_referral_array
from refledger.domain.shared.error import PartialUpdateError, RefLedgerError
from refledger.infrastructure.persistence.database import create_db_engine, create_schema

SEARCH_OPERATIONS = ("searchByStatus", "searchByDepartment")


async def _dispatch(config: Config, kind: OperationKind, name: str, args: Sequence[str]) -> bytes | None:
    container = create_container(config)
    try:
        async with container() as invocation:
            dispatcher = await invocation.get(Dispatcher)
            if kind is OperationKind.INVOKE:
                return await dispatcher.invoke(name, args)
            return await dispatcher.query(name, args)
    finally:
        await container.close()


def _run(kind: OperationKind, name: str, args: Sequence[str]) -> bytes | None:
    config = Config()
    configure_logging(config.logging)
    logfire.configure(send_to_logfire="if-token-present", console=False)
    console = get_console()

    try:
        return asyncio.run(_dispatch(config, kind, name, args))
    except PartialUpdateError as e:
        console.error(e.message, hint=e.detail.decode("utf-8"))
        console.info(f"Run 'refledger invoke repairReferral {e.record_id}' to re-sync its indexes")
        sys.exit(1)
    except RefLedgerError as e:
        console.error(e.message)
        sys.exit(1)


def invoke(name: str, /, *args: str) -> None:
    """Run a ledger-writing operation.

    Args:
        name: Operation name (e.g. createReferral, updateReferralStatus)
        args: Positional operation arguments
    """
    get_console().payload(_run(OperationKind.INVOKE, name, args))


def query(name: str, /, *args: str, table: bool = False) -> None:
    """Run a read-only operation.

    Args:
        name: Operation name (e.g. read, searchByStatus, searchByDepartment)
        args: Positional operation arguments
        table: Render search results as a table instead of raw JSON
    """
    payload = _run(OperationKind.QUERY, name, args)
    console = get_console()
    if table and name in SEARCH_OPERATIONS and payload is not None:
        try:
            referrals = parse_referral_array(payload)
        except ValidationError as e:
            console.error(
                f"{name} returned records that are not valid referrals",
                hint=f"{e.error_count()} validation error(s); run without --table to see the raw records",
            )
            sys.exit(1)
        console.referrals(referrals, title=f"{name} {' '.join(args)}")
        return
    console.payload(payload)


def operations() -> None:
    """List every operation the dispatcher accepts."""
    config = Config(ledger=LedgerConfig(backend="memory"))

    async def _list() -> Dispatcher:
        container = create_container(config)
        try:
            async with container() as invocation:
                return await invocation.get(Dispatcher)
        finally:
            await container.close()

    dispatcher = asyncio.run(_list())
    get_console().table(
        [{"name": op.name, "kind": op.kind.value, "usage": op.usage} for op in dispatcher.operations()],
        [("name", "Operation"), ("kind", "Kind"), ("usage", "Arguments")],
        title="Operations",
    )


def init_db() -> None:
    """Create the ledger table in the configured database."""
    config = Config()
    configure_logging(config.logging)
    console = get_console()

    if config.ledger.backend != "sql":
        console.warning("Ledger backend is 'memory'; nothing to create")
        return

    async def _create() -> None:
        engine = create_db_engine(config.ledger)
        try:
            await create_schema(engine)
        finally:
            await engine.dispose()

    asyncio.run(_create())
    console.success(f"Ledger schema ready at {config.ledger.url}")
