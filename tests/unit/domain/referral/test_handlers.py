"""Unit tests for referral command and query handlers."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from refledger.domain.index.model.bucket import BucketKind
from refledger.domain.index.service.search import SearchService
from refledger.domain.referral.command.create_referral import CreateReferral, CreateReferralHandler
from refledger.domain.referral.command.repair_referral import RepairReferral, RepairReferralHandler
from refledger.domain.referral.command.update_status import (
    UpdateReferralStatus,
    UpdateReferralStatusHandler,
)
from refledger.domain.referral.model.aggregate import Referral
from refledger.domain.referral.model.value import RepairReport
from refledger.domain.referral.query.read_referral import ReadReferral, ReadReferralHandler
from refledger.domain.referral.query.search_referrals import SearchReferrals, SearchReferralsHandler
from refledger.domain.referral.service.record import RecordStore
from refledger.domain.referral.service.transition import StatusTransitionService
from refledger.domain.shared.error import NotFoundError


def make_transitions() -> MagicMock:
    service = MagicMock(spec=StatusTransitionService)
    service.create = AsyncMock(return_value=b'{"referralId":"R1"}')
    service.update_status = AsyncMock(return_value=Referral(referral_id="R1", status="approved"))
    service.repair = AsyncMock(
        return_value=RepairReport(record_id="R1", status="approved", added=["approved"])
    )
    return service


class TestCreateReferralHandler:
    @pytest.mark.asyncio
    async def test_delegates_to_transitions(self):
        transitions = make_transitions()
        handler = CreateReferralHandler(transitions=transitions)

        result = await handler.run(
            CreateReferral(record_id="R1", payload=b'{"referralId":"R1"}', status="new", departments=["sales"])
        )

        transitions.create.assert_awaited_once_with(
            "R1", b'{"referralId":"R1"}', status="new", departments=["sales"]
        )
        assert result.record_id == "R1"
        assert result.payload == b'{"referralId":"R1"}'

    @pytest.mark.asyncio
    async def test_status_and_departments_optional(self):
        transitions = make_transitions()
        handler = CreateReferralHandler(transitions=transitions)

        await handler.run(CreateReferral(record_id="R1", payload=b"{}"))

        transitions.create.assert_awaited_once_with("R1", b"{}", status=None, departments=None)


class TestUpdateReferralStatusHandler:
    @pytest.mark.asyncio
    async def test_delegates_to_transitions(self):
        transitions = make_transitions()
        handler = UpdateReferralStatusHandler(transitions=transitions)

        result = await handler.run(
            UpdateReferralStatus(record_id="R1", status="approved", expected_old_status="new")
        )

        transitions.update_status.assert_awaited_once_with("R1", "approved", expected_old_status="new")
        assert result.status == "approved"


class TestRepairReferralHandler:
    @pytest.mark.asyncio
    async def test_returns_report(self):
        transitions = make_transitions()
        handler = RepairReferralHandler(transitions=transitions)

        result = await handler.run(RepairReferral(record_id="R1", stale_statuses=["new"]))

        transitions.repair.assert_awaited_once_with("R1", ["new"])
        assert result.report.added == ["approved"]


class TestReadReferralHandler:
    @pytest.mark.asyncio
    async def test_returns_stored_bytes(self):
        records = MagicMock(spec=RecordStore)
        records.read = AsyncMock(return_value=b'{"referralId":"R1"}')
        handler = ReadReferralHandler(records=records)

        result = await handler.run(ReadReferral(record_id="R1"))

        assert result.payload == b'{"referralId":"R1"}'

    @pytest.mark.asyncio
    async def test_not_found_propagates(self):
        records = MagicMock(spec=RecordStore)
        records.read = AsyncMock(side_effect=NotFoundError("Did not find entry for key: R1", key="R1"))
        handler = ReadReferralHandler(records=records)

        with pytest.raises(NotFoundError):
            await handler.run(ReadReferral(record_id="R1"))


class TestSearchReferralsHandler:
    @pytest.mark.asyncio
    async def test_status_search(self):
        search = MagicMock(spec=SearchService)
        search.by_status = AsyncMock(return_value=b'[{"referralId":"R1","status":"new"}]')
        search.by_department = AsyncMock()
        handler = SearchReferralsHandler(search=search)

        result = await handler.run(SearchReferrals(kind=BucketKind.STATUS, name="new"))

        search.by_status.assert_awaited_once_with("new")
        search.by_department.assert_not_awaited()
        assert [r.referral_id for r in result.referrals()] == ["R1"]

    @pytest.mark.asyncio
    async def test_department_search(self):
        search = MagicMock(spec=SearchService)
        search.by_status = AsyncMock()
        search.by_department = AsyncMock(return_value=b"[]")
        handler = SearchReferralsHandler(search=search)

        result = await handler.run(SearchReferrals(kind="department", name="sales"))

        search.by_department.assert_awaited_once_with("sales")
        assert result.payload == b"[]"
        assert result.referrals() == []
