"""Shared test fixtures.

The storage engine is a real in-memory DuckDB database seeded per test.
Tests never touch the on-disk database configured in settings.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from querygraph.core.engine import DuckDBEngine
from querygraph.main import app
from querygraph.services.connectors import ConnectorRegistry

SEED_SQL = [
    "CREATE TABLE users (id INTEGER, name VARCHAR, city VARCHAR, price INTEGER)",
    """
    INSERT INTO users VALUES
        (1, 'Taro', 'Tokyo', 1200),
        (2, 'Jiro', 'Osaka', 800),
        (3, 'Saburo', 'Tokyo', 400),
        (4, 'Hanako', 'Kyoto', 1500),
        (5, 'Yoko', 'Tokyo', 2000)
    """,
    "CREATE TABLE products (id INTEGER, category VARCHAR, price DOUBLE, listed DATE, active BOOLEAN)",
    """
    INSERT INTO products VALUES
        (1, 'books', 12.5, DATE '2024-01-02', true),
        (2, 'books', 30.0, DATE '2024-02-10', true),
        (3, 'games', 59.99, DATE '2024-03-15', false),
        (4, 'games', 150.0, NULL, true),
        (5, 'music', 9.99, DATE '2024-05-01', true)
    """,
]


@pytest.fixture
async def engine():
    """Provide a seeded in-memory DuckDB engine, closed after the test."""
    db = DuckDBEngine(":memory:")
    for statement in SEED_SQL:
        await db.run(statement)
    yield db
    db.close()


@pytest.fixture
def connectors() -> ConnectorRegistry:
    """Provide an empty connector registry; tests register fakes on it."""
    return ConnectorRegistry()


@pytest.fixture
async def client(engine, connectors) -> AsyncClient:
    """Provide an httpx AsyncClient wired to the FastAPI test app.

    ASGITransport does not run the lifespan, so the seeded engine and the
    connector registry are installed on app.state directly.
    """
    app.state.engine = engine
    app.state.connectors = connectors
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.state.engine = None
    app.state.connectors = None
