"""Test fixtures — in-memory SQLite database, fake gateway, FastAPI test client."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from workspace_sync.api.deps import create_access_token, sync_service, workspace_service
from workspace_sync.database import _apply_pragmas, get_db
from workspace_sync.main import create_app
from workspace_sync.models.base import Base
from workspace_sync.models.user import User
from workspace_sync.services.sync_service import SyncService
from workspace_sync.services.upload_gateway import UploadResult
from workspace_sync.services.workspace_service import WorkspaceService
from workspace_sync.utils.storage import WorkspaceStorage


class FakeGateway:
    """Records every upload; fails paths listed in ``fail``."""

    def __init__(self, fail: dict[str, str] | None = None):
        self.fail = fail or {}
        self.calls: list[tuple[str, bytes, str]] = []

    async def upload(self, path, content, env):
        self.calls.append((path, content, env))
        key = path.lstrip("/")
        if key in self.fail:
            return UploadResult(success=False, error=self.fail[key])
        return UploadResult(success=True)


@pytest_asyncio.fixture
async def db_session():
    """Provide an async in-memory SQLite session for tests."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    event.listen(engine.sync_engine, "connect", _apply_pragmas)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


async def seed_user(db: AsyncSession, username: str = "alice") -> User:
    user = User(username=username)
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def user(db_session: AsyncSession) -> User:
    return await seed_user(db_session, "alice")


@pytest.fixture
def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def storage(tmp_path) -> WorkspaceStorage:
    return WorkspaceStorage(tmp_path / "workspace-files")


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, storage: WorkspaceStorage, gateway: FakeGateway):
    """Provide an async test client with overridden DB and service dependencies."""
    app = create_app()

    async def _override_db():
        yield db_session

    ws = WorkspaceService(storage)
    sync = SyncService(gateway, storage, max_parallel=2)

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[workspace_service] = lambda: ws
    app.dependency_overrides[sync_service] = lambda: sync

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
