import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ["CACHE_ENABLED"] = "false"

from datetime import date, timedelta
import uuid

import httpx
import pytest
from jose import jwt
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.database import get_db
from app.core.security import Principal
from app.main import app
from app.models import Base
from app.models.class_offering import ClassOffering
from app.models.enums import ClassType, Gender, TargetGender, UserRole
from app.models.user import User


@pytest.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(test_engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    async def _make_user(first_name="Ada", last_name="Student", role=UserRole.STUDENT, age=25,
                         gender=Gender.FEMALE, email=None):
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email or f"{uuid.uuid4().hex[:10]}@example.com",
            password_hash="not-a-real-hash",
            age=age,
            gender=gender,
            role=role,
        )
        db.add(user)
        await db.commit()
        return user
    return _make_user


@pytest.fixture
def make_class(db):
    async def _make_class(title="Self Defense Basics", capacity=10, city="Portland", age_min=16, age_max=None,
                          target_gender=TargetGender.ANY, cost=0.0, class_type=ClassType.ONGOING,
                          start_time="18:00"):
        class_obj = ClassOffering(
            title=title,
            description="Fundamentals of situational awareness and escapes",
            type=class_type,
            cost=cost,
            capacity=capacity,
            city=city,
            address="100 Main St",
            instructor_name="Jordan Lee",
            target_gender=target_gender,
            age_min=age_min,
            age_max=age_max,
            schedule=[{
                "date": (date.today() + timedelta(days=7)).isoformat(),
                "start_time": start_time,
                "end_time": "20:00",
            }],
        )
        db.add(class_obj)
        await db.commit()
        return class_obj
    return _make_class


def principal_for(user) -> Principal:
    return Principal(user_id=user.id, role=user.role)


def auth_headers(user_id, claim="sub") -> dict:
    token = jwt.encode({claim: str(user_id)}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return {"Authorization": f"Bearer {token}"}
