"""End-to-end referral flows through the DI container and dispatcher."""

import json
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from dishka import AsyncContainer

from refledger.application.di import create_container
from refledger.application.dispatch import Dispatcher
from refledger.config import Config, IndexConfig, LedgerConfig
from refledger.domain.shared.error import IndexNotFoundError
from refledger.domain.shared.port.ledger import LedgerPort
from refledger.infrastructure.ledger.memory import InMemoryLedger


@pytest_asyncio.fixture
async def container() -> AsyncIterator[AsyncContainer]:
    container = create_container(Config(ledger=LedgerConfig(backend="memory")))
    yield container
    await container.close()


async def _dispatcher(container: AsyncContainer) -> Dispatcher:
    async with container() as invocation:
        return await invocation.get(Dispatcher)


def _ids(payload: bytes | None) -> list[str]:
    assert payload is not None
    return [r["referralId"] for r in json.loads(payload)]


class TestContainer:
    @pytest.mark.asyncio
    async def test_memory_backend_ledger(self, container: AsyncContainer):
        ledger = await container.get(LedgerPort)
        assert isinstance(ledger, InMemoryLedger)

    @pytest.mark.asyncio
    async def test_ledger_shared_across_invocations(self, container: AsyncContainer):
        async with container() as first:
            ledger_a = await first.get(LedgerPort)
        async with container() as second:
            ledger_b = await second.get(LedgerPort)
        assert ledger_a is ledger_b


class TestReferralLifecycle:
    @pytest.mark.asyncio
    async def test_new_to_approved(self, container: AsyncContainer, make_payload):
        # Arrange
        dispatcher = await _dispatcher(container)
        payload = make_payload("R1", status="new", departments=["sales", "risk"])

        # Act
        await dispatcher.invoke("createReferral", ["R1", payload.decode()])
        before = await dispatcher.query("searchByStatus", ["new"])
        await dispatcher.invoke("updateReferralStatus", ["R1", "approved"])

        # Assert
        assert _ids(before) == ["R1"]
        assert await dispatcher.query("searchByStatus", ["new"]) == b"[]"
        approved = json.loads(await dispatcher.query("searchByStatus", ["approved"]))
        assert approved[0]["status"] == "approved"
        assert _ids(await dispatcher.query("searchByDepartment", ["sales"])) == ["R1"]
        assert _ids(await dispatcher.query("searchByDepartment", ["risk"])) == ["R1"]
        with pytest.raises(IndexNotFoundError):
            await dispatcher.query("searchByStatus", ["rejected"])

    @pytest.mark.asyncio
    async def test_buckets_keep_creation_order(self, container: AsyncContainer, make_payload):
        dispatcher = await _dispatcher(container)
        for record_id in ("R3", "R1", "R2"):
            await dispatcher.invoke("createReferral", [record_id, make_payload(record_id).decode()])

        await dispatcher.invoke("updateReferralStatus", ["R1", "approved"])

        assert _ids(await dispatcher.query("searchByStatus", ["new"])) == ["R3", "R2"]
        assert _ids(await dispatcher.query("searchByDepartment", ["sales"])) == ["R3", "R1", "R2"]

    @pytest.mark.asyncio
    async def test_search_reflects_latest_record(self, container: AsyncContainer, make_payload):
        """Departments hold ids, so a search always returns the current record."""
        dispatcher = await _dispatcher(container)
        await dispatcher.invoke("createReferral", ["R1", make_payload("R1").decode()])
        await dispatcher.invoke("updateReferralStatus", ["R1", "closed"])

        sales = json.loads(await dispatcher.query("searchByDepartment", ["sales"]))

        assert sales[0]["status"] == "closed"

    @pytest.mark.asyncio
    async def test_prefixed_layout(self, make_payload):
        config = Config(
            ledger=LedgerConfig(backend="memory"),
            index=IndexConfig(status_prefix="status:", department_prefix="department:"),
        )
        container = create_container(config)
        try:
            dispatcher = await _dispatcher(container)
            await dispatcher.invoke("createReferral", ["R1", make_payload("R1").decode()])
            ledger = await container.get(LedgerPort)

            assert isinstance(ledger, InMemoryLedger)
            assert set(ledger.snapshot()) == {"R1", "status:new", "department:sales", "department:risk"}
            assert _ids(await dispatcher.query("searchByStatus", ["new"])) == ["R1"]
        finally:
            await container.close()
