"""Unit tests for RecordStore."""

import pytest

from refledger.domain.referral.model.aggregate import Referral
from refledger.domain.referral.service.record import RecordStore
from refledger.domain.shared.error import (
    CorruptRecordError,
    InvalidArgumentError,
    InvalidIdentifierError,
    NotFoundError,
)


class TestCreate:
    @pytest.mark.asyncio
    async def test_stores_payload_verbatim(self, record_store: RecordStore, ledger, make_payload):
        payload = make_payload("R1")

        written = await record_store.create("R1", payload)

        assert written == payload
        assert await ledger.get("R1") == payload

    @pytest.mark.asyncio
    async def test_overwrites_existing_record(self, record_store: RecordStore, ledger, make_payload):
        await record_store.create("R1", make_payload("R1", status="new"))

        await record_store.create("R1", make_payload("R1", status="approved"))

        assert (await record_store.get("R1")).status == "approved"

    @pytest.mark.asyncio
    async def test_empty_payload_rejected(self, record_store: RecordStore, ledger):
        with pytest.raises(InvalidArgumentError) as exc_info:
            await record_store.create("R1", b"")

        assert exc_info.value.field == "payload"
        assert ledger.puts == []

    @pytest.mark.asyncio
    async def test_malformed_payload_rejected(self, record_store: RecordStore, ledger):
        with pytest.raises(InvalidArgumentError) as exc_info:
            await record_store.create("R1", b"{not json")

        assert exc_info.value.field == "payload"
        assert ledger.puts == []

    @pytest.mark.asyncio
    async def test_mismatched_referral_id_rejected(self, record_store: RecordStore, make_payload):
        with pytest.raises(InvalidArgumentError) as exc_info:
            await record_store.create("R1", make_payload("R2"))

        assert exc_info.value.field == "referralId"

    @pytest.mark.asyncio
    async def test_payload_without_referral_id_accepted(self, record_store: RecordStore):
        await record_store.create("R1", b'{"status":"new"}')

        assert await record_store.read("R1") == b'{"status":"new"}'

    @pytest.mark.asyncio
    async def test_unindexable_id_rejected(self, record_store: RecordStore, make_payload):
        with pytest.raises(InvalidIdentifierError):
            await record_store.create("R1,R2", make_payload("R1,R2"))


class TestRead:
    @pytest.mark.asyncio
    async def test_missing_record_raises_not_found(self, record_store: RecordStore):
        with pytest.raises(NotFoundError) as exc_info:
            await record_store.read("R404")

        assert exc_info.value.message == "Did not find entry for key: R404"
        assert exc_info.value.key == "R404"

    @pytest.mark.asyncio
    async def test_returns_raw_bytes(self, record_store: RecordStore, ledger):
        await ledger.put("R1", b'{"referralId":"R1","extra":true}')

        assert await record_store.read("R1") == b'{"referralId":"R1","extra":true}'

    @pytest.mark.asyncio
    async def test_fetch_missing_is_none(self, record_store: RecordStore):
        assert await record_store.fetch("R404") is None


class TestGetAndUpdate:
    @pytest.mark.asyncio
    async def test_get_parses_record(self, record_store: RecordStore, make_payload):
        await record_store.create("R1", make_payload("R1", departments=["sales"]))

        referral = await record_store.get("R1")

        assert referral.referral_id == "R1"
        assert referral.status == "new"
        assert referral.departments == ["sales"]

    @pytest.mark.asyncio
    async def test_get_corrupt_record(self, record_store: RecordStore, ledger):
        await ledger.put("R1", b"\x00garbage")

        with pytest.raises(CorruptRecordError):
            await record_store.get("R1")

    @pytest.mark.asyncio
    async def test_update_keeps_unknown_fields(self, record_store: RecordStore, make_payload):
        await record_store.create("R1", make_payload("R1", branch="North"))
        referral = await record_store.get("R1")

        await record_store.update("R1", referral.with_status("approved"))

        stored = Referral.from_bytes(await record_store.read("R1"))
        assert stored.status == "approved"
        assert stored.model_extra == {"branch": "North"}
