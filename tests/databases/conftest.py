"""Shared fixtures for the HANA database wrapper tests.

The ``hdbcli`` driver is replaced in ``tests/conftest.py``; these fixtures
build ``HanaVectorDB`` instances over the mock connection so every executed
statement can be inspected on ``mock_cursor``.

Fixtures:
    db: HanaVectorDB with the default table layout.
    promoted_db: HanaVectorDB with ``title`` promoted to a column.
    search_rows: Rows shaped like a similarity search result.
"""

import pytest

from hanavectordb.databases.hana import HanaVectorDB


@pytest.fixture
def db(mock_connection) -> HanaVectorDB:
    """Create a store over the mock connection."""
    return HanaVectorDB(connection=mock_connection)


@pytest.fixture
def promoted_db(mock_connection) -> HanaVectorDB:
    """Create a store with a promoted metadata column."""
    return HanaVectorDB(
        connection=mock_connection,
        table_name="DOCS",
        specific_metadata_columns=["title"],
    )


@pytest.fixture
def search_rows() -> list[tuple]:
    """Rows as returned by the similarity search statement."""
    return [
        ("HANA stores vectors", '{"topic": "db"}', "[1.0,0.0,0.0]", 1.0),
        ("Graphs and tables", '{"topic": "db"}', "[0.6,0.8,0.0]", 0.6),
    ]
