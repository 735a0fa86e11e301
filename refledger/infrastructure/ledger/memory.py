import logging

from refledger.domain.shared.port.ledger import LedgerPort

logger = logging.getLogger(__name__)


class InMemoryLedger(LedgerPort):
    """Dict-backed ledger for local runs and tests. Not persisted."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._state: dict[str, bytes] = dict(initial or {})

    async def get(self, key: str) -> bytes | None:
        return self._state.get(key)

    async def put(self, key: str, value: bytes) -> None:
        self._state[key] = bytes(value)

    def snapshot(self) -> dict[str, bytes]:
        return dict(self._state)
