import os

# Settings are read once and cached, so the environment must be fixed before
# anything from wenlock is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./wenlock-unused.db"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["AUTH_COOKIE_SECURE"] = "false"
os.environ["SEED_ADMIN_PASSWORD"] = ""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.pool import NullPool

from wenlock.auth import create_token, hash_password
from wenlock.container import build_services
from wenlock.database import Base, make_engine, make_session_factory
from wenlock.enums import AuditAction, Role
from wenlock.main import create_app
from wenlock.models import AuditLog, User

PASSWORD = "s3cret-pass"
PASSWORD_HASH = hash_password(PASSWORD)


class RecordingBroadcaster:
    """Collects published events instead of pushing them to sockets."""

    def __init__(self):
        self.events = []

    async def publish(self, event, payload):
        self.events.append((event, payload))

    def of(self, event):
        return [payload for name, payload in self.events if name == event]


@pytest.fixture
async def engine(tmp_path):
    # A file database so separate sessions really are separate connections.
    engine = make_engine(
        f"sqlite+aiosqlite:///{(tmp_path / 'wenlock.db').as_posix()}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture
def services(session_factory, broadcaster):
    return build_services(session_factory, broadcaster)


@pytest.fixture
def app(session_factory, broadcaster):
    return create_app(session_factory=session_factory, broadcaster=broadcaster)


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
async def users(session_factory) -> dict:
    """One stored user per role, keyed by Role."""
    created = {}
    async with session_factory() as session:
        for role in Role:
            user = User(
                username=f"{role.value}_user",
                email=f"{role.value}@wenlock-hospital.org",
                password_hash=PASSWORD_HASH,
                role=role,
            )
            session.add(user)
            created[role] = user
        await session.commit()
    return created


@pytest.fixture
def auth(users) -> dict:
    """Bearer headers per role."""
    return {role: {"Authorization": f"Bearer {create_token(user)}"} for role, user in users.items()}


@pytest.fixture
def audit_entries(session_factory):
    async def _fetch(action_type: AuditAction = None) -> list:
        async with session_factory() as session:
            query = select(AuditLog).order_by(AuditLog.id)
            if action_type is not None:
                query = query.where(AuditLog.action_type == action_type)
            result = await session.execute(query)
            return list(result.scalars().all())

    return _fetch
