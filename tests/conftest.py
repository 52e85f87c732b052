"""Shared pytest configuration for the project test suite."""
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import AsyncGenerator

import httpx
import pytest_asyncio


# Ensure the repository root (which contains ``components`` and ``restapi``) is importable.
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are cached on first import; keep the app off MySQL during tests.
os.environ.setdefault("DB_URL", "sqlite+aiosqlite://")

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402

from components.core.database import DatabaseManager  # noqa: E402


@pytest_asyncio.fixture
async def db_manager(tmp_path: Path) -> AsyncGenerator[DatabaseManager, None]:
    """A DatabaseManager backed by a fresh SQLite file per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'spending.db'}")
    manager = DatabaseManager(engine=engine)
    await manager.create_tables()
    try:
        yield manager
    finally:
        await manager.dispose()


@pytest_asyncio.fixture
async def session(db_manager: DatabaseManager) -> AsyncGenerator[AsyncSession, None]:
    async with db_manager.get_db() as db_session:
        yield db_session


@pytest_asyncio.fixture
async def client(db_manager: DatabaseManager) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client talking to the app in-process, wired to the test database."""
    from components.core.init_db import get_db
    from restapi.router import create_app

    app = create_app()

    async def override_get_db():
        async with db_manager.get_db() as db_session:
            yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client
