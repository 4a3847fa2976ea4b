"""Integration-test fixtures: a fresh schema on a live PostgreSQL per test.

Set CT_INTEGRATION_DATABASE_URL (postgresql+asyncpg://...) to run them; the
database is wiped, so never point it at anything that matters.
"""

import os
from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

# Registers every table on Base.metadata
import src.ct_contract.infrastructure.db_models  # noqa: F401
import src.ct_dispute.infrastructure.db_models  # noqa: F401
import src.ct_notification.infrastructure.db_models  # noqa: F401
import src.ct_order.infrastructure.db_models  # noqa: F401
import src.ct_wallet.infrastructure.db_models  # noqa: F401
from src.ct_common.database import Base, build_session_factory
from src.ct_common.transaction import TransactionCoordinator
from src.ct_gateway.user.db_models import UserModel
from src.ct_hire.infrastructure.db_models import ServiceORM

DATABASE_URL = os.environ.get("CT_INTEGRATION_DATABASE_URL")


@pytest.fixture
async def coordinator() -> AsyncGenerator[TransactionCoordinator, None]:
    assert DATABASE_URL is not None
    engine = create_async_engine(DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    session_factory = build_session_factory(engine)
    async with session_factory() as session, session.begin():
        session.add_all(
            [
                UserModel(id="u-buyer", name="Bea", email="bea@example.com", role="BUYER"),
                UserModel(id="u-student", name="Sam", email="sam@example.com", role="STUDENT"),
                UserModel(id="u-admin", name="Ada", email="ada@example.com", role="ADMIN"),
            ]
        )
        await session.flush()
        session.add(
            ServiceORM(id="svc-1", owner_id="u-student", title="Logo design", price_cents=6500)
        )

    yield TransactionCoordinator(session_factory)
    await engine.dispose()
