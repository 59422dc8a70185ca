import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from authority.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from authority.app.services.password_authenticator import PasswordAuthenticator
from authority.app.services.rate_limiter import InMemoryRateLimiter
from authority.depends import (
    get_clock,
    get_mail_sender,
    get_password_authenticator,
    get_rate_limiter,
    get_unit_of_work,
)
from tests.utils.fixed_clock import FixedClock
from tests.utils.recording_mail_sender import RecordingMailSender


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def outbox():
    return RecordingMailSender()


@pytest.fixture
def rate_limiter():
    return InMemoryRateLimiter()


@pytest.fixture
def app(session_factory, clock, outbox, rate_limiter):
    from authority.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        # Fresh session per request, as in production
        async with session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    def override_get_password_authenticator():
        return PasswordAuthenticator(clock, rounds=4)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_password_authenticator] = override_get_password_authenticator
    app.dependency_overrides[get_mail_sender] = lambda: outbox
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    return app


@pytest_asyncio.fixture
async def client(app):
    from httpx import ASGITransport

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
