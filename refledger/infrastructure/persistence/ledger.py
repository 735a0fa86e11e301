"""SQL implementation of LedgerPort."""

from datetime import UTC, datetime

from sqlalchemy import insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from refledger.domain.shared.error import LedgerReadError, LedgerWriteError
from refledger.domain.shared.port.ledger import LedgerPort
from refledger.infrastructure.persistence.tables import ledger_state_table


class SqlLedger(LedgerPort):
    """Ledger stored as key/value rows.

    Each get and put runs in its own short transaction, which gives the
    per-key atomicity the domain relies on and nothing more.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> bytes | None:
        stmt = select(ledger_state_table.c.value).where(ledger_state_table.c.key == key)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise LedgerReadError(key, str(e)) from e

    async def put(self, key: str, value: bytes) -> None:
        now = datetime.now(UTC)
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(
                    update(ledger_state_table)
                    .where(ledger_state_table.c.key == key)
                    .values(value=value, updated_at=now)
                )
                if result.rowcount == 0:
                    await session.execute(
                        insert(ledger_state_table).values(key=key, value=value, updated_at=now)
                    )
        except SQLAlchemyError as e:
            raise LedgerWriteError(key, str(e)) from e
