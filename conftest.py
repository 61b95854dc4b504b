"""
Shared fixtures: a throwaway SQLite database per test and a TestClient wired to it.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, update
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool
from sqlmodel import Session, SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import get_async_session
from app.dependencies import rate_limit
from app.main import app
from app.models import Coupon


@pytest.fixture
def sync_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_maker(sync_engine, tmp_path):
    # NullPool: TestClient runs requests on its own event loop
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def client(session_maker):
    async def override_get_async_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[rate_limit] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seed_coupon(sync_engine):
    """Insert a coupon directly, bypassing the create-time checks."""

    def _seed(null_counters: bool = False, **fields) -> Coupon:
        values = {"code": "SEEDED", "name": "Seeded", "amount": 1000, "discount": 25}
        values.update(fields)
        with Session(sync_engine) as db:
            coupon = Coupon(**values)
            db.add(coupon)
            db.commit()
            db.refresh(coupon)
            if null_counters:
                db.exec(
                    update(Coupon)
                    .where(Coupon.id == coupon.id)
                    .values(usage_count=None, total_discount=None)
                )
                db.commit()
                db.refresh(coupon)
            db.expunge(coupon)
        return coupon

    return _seed


@pytest.fixture
def fetch_coupon(sync_engine):
    def _fetch(coupon_id: str):
        with Session(sync_engine) as db:
            return db.get(Coupon, coupon_id)

    return _fetch
