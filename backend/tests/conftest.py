"""
Test configuration and fixtures for the marketplace backend.

Every test gets its own file-backed SQLite database (aiosqlite) in a tmp
directory, built from Base.metadata. File-backed rather than :memory: so
that several sessions, as in the concurrency tests, see the same data.
"""
import os

# Settings are read at import time; tests never talk to the real DB.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.auth.hashing import display_prefix, generate_api_key
from app.auth.identity import Identity
from app.core.database import Base, get_db_session
from app.main import app
from app.models.api_key import APIKey, Role
from app.models.project import Project
from app.services import project_store
from app.services.directory import ContractorDirectory, get_directory

CONTRACTOR_ID = "C1"
OTHER_CONTRACTOR_ID = "C2"


def project_fields(**overrides) -> dict:
    """Minimal valid posting (Scenario A) plus overrides."""
    fields = {
        "title": "Site Engineer",
        "location": "Pune",
        "projectType": "Commercial",
        "employmentType": "Contract",
        "contractor": CONTRACTOR_ID,
    }
    fields.update(overrides)
    return fields


def profile(name: str = "Acme Builders", **overrides) -> dict:
    """Applicant snapshot as the worker dashboard sends it."""
    data = {
        "businessName": name,
        "businessType": "Electrical",
        "yearsOfExperience": 7,
        "licenseNumber": "LIC-42",
    }
    data.update(overrides)
    return data


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create a fresh database for one test."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    """Factory for extra, independent sessions (concurrency tests)."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def directory() -> ContractorDirectory:
    """Disabled directory: contractorDetails is always null."""
    return ContractorDirectory("")


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession, directory: ContractorDirectory,
) -> AsyncGenerator[AsyncClient, None]:
    """Test client with the database session and directory overridden."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db
    app.dependency_overrides[get_directory] = lambda: directory
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def contractor() -> Identity:
    return Identity.contractor(CONTRACTOR_ID)


@pytest.fixture
def other_contractor() -> Identity:
    return Identity.contractor(OTHER_CONTRACTOR_ID)


@pytest.fixture
def worker() -> Identity:
    return Identity.worker("W1")


@pytest_asyncio.fixture
async def project(db_session: AsyncSession) -> Project:
    """An active project owned by C1."""
    return await project_store.create_project(db_session, project_fields())


@pytest_asyncio.fixture
async def issue_key(
    db_session: AsyncSession,
) -> Callable[[str, Role], Awaitable[dict[str, str]]]:
    """Store an API key for a subject and return ready-made auth headers."""
    async def _issue(subject_id: str, role: Role) -> dict[str, str]:
        raw_key, key_hash = generate_api_key()
        db_session.add(
            APIKey(
                subject_id=subject_id,
                role=role.value,
                key_hash=key_hash,
                prefix=display_prefix(raw_key),
            )
        )
        await db_session.commit()
        return {"Authorization": f"Bearer {raw_key}"}

    return _issue


@pytest_asyncio.fixture
async def contractor_headers(issue_key) -> dict[str, str]:
    return await issue_key(CONTRACTOR_ID, Role.CONTRACTOR)


@pytest_asyncio.fixture
async def other_contractor_headers(issue_key) -> dict[str, str]:
    return await issue_key(OTHER_CONTRACTOR_ID, Role.CONTRACTOR)


@pytest_asyncio.fixture
async def worker_headers(issue_key) -> dict[str, str]:
    return await issue_key("W1", Role.WORKER)
