import logging
from typing import AsyncIterable

from dishka import Provider, from_context, provide

from refledger.config import Config
from refledger.domain.shared.port.ledger import LedgerPort
from refledger.infrastructure.ledger.memory import InMemoryLedger
from refledger.infrastructure.persistence.database import (
    create_db_engine,
    create_schema,
    create_session_factory,
)
from refledger.infrastructure.persistence.ledger import SqlLedger
from refledger.util.di.scope import Scope

logger = logging.getLogger(__name__)


class PersistenceProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)

    @provide(scope=Scope.APP)
    async def get_ledger(self, config: Config) -> AsyncIterable[LedgerPort]:
        if config.ledger.backend == "memory":
            logger.info("Using in-memory ledger")
            yield InMemoryLedger()
            return

        engine = create_db_engine(config.ledger)
        if config.ledger.auto_create:
            await create_schema(engine)
        logger.info("Using SQL ledger at %s", engine.url.render_as_string(hide_password=True))
        try:
            yield SqlLedger(create_session_factory(engine))
        finally:
            await engine.dispose()
