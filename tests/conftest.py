"""Global test fixtures."""

import json
import os
from collections.abc import Callable

import pytest

from refledger.domain.index.model.bucket import BucketLayout
from refledger.domain.index.service.index import IndexService
from refledger.domain.index.service.search import SearchService
from refledger.domain.referral.service.record import RecordStore
from refledger.domain.referral.service.transition import StatusTransitionService
from refledger.domain.shared.error import LedgerReadError, LedgerWriteError
from refledger.infrastructure.ledger.memory import InMemoryLedger

# Keep tests off the user's data dir and any local config file
# This must happen at module load time, not in a fixture
os.environ.setdefault("REFLEDGER_LEDGER__BACKEND", "memory")
os.environ.pop("REFLEDGER_CONFIG_FILE", None)


class FlakyLedger(InMemoryLedger):
    """In-memory ledger that fails reads or writes for chosen keys."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        super().__init__(initial)
        self.fail_get: set[str] = set()
        self.fail_put: set[str] = set()
        self.puts: list[str] = []

    async def get(self, key: str) -> bytes | None:
        if key in self.fail_get:
            raise LedgerReadError(key, "injected failure")
        return await super().get(key)

    async def put(self, key: str, value: bytes) -> None:
        if key in self.fail_put:
            raise LedgerWriteError(key, "injected failure")
        self.puts.append(key)
        await super().put(key, value)


@pytest.fixture
def ledger() -> FlakyLedger:
    return FlakyLedger()


@pytest.fixture
def layout() -> BucketLayout:
    return BucketLayout()


@pytest.fixture
def index_service(ledger: FlakyLedger, layout: BucketLayout) -> IndexService:
    return IndexService(ledger=ledger, layout=layout)


@pytest.fixture
def record_store(ledger: FlakyLedger, layout: BucketLayout) -> RecordStore:
    return RecordStore(ledger=ledger, codec=layout.codec())


@pytest.fixture
def search_service(index_service: IndexService, record_store: RecordStore) -> SearchService:
    return SearchService(index=index_service, records=record_store)


@pytest.fixture
def transitions(record_store: RecordStore, index_service: IndexService) -> StatusTransitionService:
    return StatusTransitionService(records=record_store, index=index_service)


@pytest.fixture
def make_payload() -> Callable[..., bytes]:
    """Build a referral JSON payload the way a client would send it."""

    def _make(
        referral_id: str,
        status: str | None = "new",
        departments: list[str] | None = None,
        **extra: object,
    ) -> bytes:
        body: dict[str, object] = {
            "referralId": referral_id,
            "customerName": "Jane Doe",
            "contactNumber": "555-0100",
            "customerId": "C-1",
            "employeeId": "E-7",
            "departments": departments if departments is not None else ["sales", "risk"],
            "createDate": 1700000000,
        }
        if status is not None:
            body["status"] = status
        body.update(extra)
        return json.dumps(body).encode("utf-8")

    return _make
