"""Pytest configuration for tests."""

import sys
from unittest.mock import MagicMock

import pytest


# Setup mocks for the HANA driver BEFORE any imports
def setup_hdbcli_mocks():
    """Replace the hdbcli driver so tests never open a network connection.

    A single parent mock is used so that ``from hdbcli import dbapi`` and
    ``sys.modules["hdbcli.dbapi"]`` resolve to the same object.
    """
    hdbcli_mock = MagicMock()
    sys.modules["hdbcli"] = hdbcli_mock
    sys.modules["hdbcli.dbapi"] = hdbcli_mock.dbapi


setup_hdbcli_mocks()


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "sql: Mark test as checking generated SQL text"
    )


@pytest.fixture
def mock_cursor() -> MagicMock:
    """Create a mock DB-API cursor with no result rows."""
    cursor = MagicMock()
    cursor.fetchall.return_value = []
    return cursor


@pytest.fixture
def mock_connection(mock_cursor) -> MagicMock:
    """Create a mock DB-API connection handing out ``mock_cursor``."""
    connection = MagicMock()
    connection.cursor.return_value = mock_cursor
    return connection
