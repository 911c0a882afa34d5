"""
Pokedex Backend — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own SQLite file (aiosqlite) and its own asset
       directory under pytest's tmp_path, so tests never share state.

Fixture Hierarchy:
    ├── assets_root: Temporary asset directory
    ├── database: Database with schema created on a temp SQLite file
    ├── db_session: AsyncSession on that database (rolled back after the test)
    ├── store: PokemonStore bound to db_session
    ├── app: Application wired to the temp database and asset directory
    ├── test_client: HTTPX AsyncClient running the app's lifespan
    └── make_record: Builder for PokemonRecord test data
"""

import os
from typing import Callable, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Settings are read at import time. Every test app gets its own database and
# asset directory; the module-level app in pokedex.main is never started.
os.environ["LOG_LEVEL"] = "WARNING"

from pokedex.config import settings  # noqa: E402
from pokedex.database import Database  # noqa: E402
from pokedex.main import create_app, lifespan  # noqa: E402
from pokedex.schemas.pokemon import BaseStats, PokemonName, PokemonRecord  # noqa: E402
from pokedex.store import PokemonStore  # noqa: E402

PUBLIC_BASE_URL = "http://localhost:3000"


def build_record(
    record_id: int,
    french: str = "Bulbizarre",
    english: Optional[str] = "Bulbasaur",
    types: Optional[List[str]] = None,
    **stats: int,
) -> PokemonRecord:
    """A complete record; stats default to 50 unless overridden by wire name."""
    base = {"HP": 50, "Attack": 50, "Defense": 50,
            "SpecialAttack": 50, "SpecialDefense": 50, "Speed": 50}
    base.update(stats)
    return PokemonRecord(
        id=record_id,
        name=PokemonName(english=english, french=french),
        type=types or ["Grass", "Poison"],
        base=BaseStats(**base),
        image=f"{PUBLIC_BASE_URL}/assets/pokemons/{record_id}.png",
    )


async def seed_records(database: Database, count: int, start: int = 1) -> None:
    """Insert `count` records with ids start..start+count-1 and commit."""
    async with database.session_factory() as session:
        store = PokemonStore(session)
        for record_id in range(start, start + count):
            await store.insert(
                build_record(record_id, french=f"Pokemon{record_id}", english=f"Mon{record_id}")
            )
        await session.commit()


@pytest.fixture(scope="session", autouse=True)
def default_assets_root(tmp_path_factory):
    """Point the settings fallback at a pytest-managed directory."""
    original = settings.assets_root
    settings.assets_root = str(tmp_path_factory.mktemp("default_assets"))
    yield settings.assets_root
    settings.assets_root = original


@pytest.fixture
def make_record() -> Callable[..., PokemonRecord]:
    return build_record


@pytest.fixture
def assets_root(tmp_path):
    root = tmp_path / "assets"
    root.mkdir()
    return root


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'pokedex.db'}"


@pytest_asyncio.fixture
async def database(database_url):
    db = Database(database_url, echo=False)
    await db.create_schema()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def store(db_session):
    return PokemonStore(db_session)


@pytest.fixture
def app(database_url, assets_root):
    return create_app(
        database_url=database_url,
        assets_root=str(assets_root),
        public_base_url=PUBLIC_BASE_URL,
    )


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient talking to the app in-process.

    ASGITransport does not emit lifespan events, so the lifespan context is
    entered here; that opens the database and creates the tables.
    """
    async with lifespan(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest.fixture
def seed(app):
    """Insert records straight into the app's database (test_client must be active)."""

    async def _seed(count: int, start: int = 1) -> None:
        await seed_records(app.state.database, count, start)

    return _seed
