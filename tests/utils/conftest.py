"""Shared fixtures for utility tests.

Fixtures:
    compiler: FilterCompiler over the default metadata column.
    promoted_compiler: FilterCompiler with ``a``, ``b``, ``c`` and ``title``
        promoted to columns.
    query_builder: QueryBuilder for the default table layout.
"""

import pytest

from hanavectordb.utils.filters import FilterCompiler
from hanavectordb.utils.query import QueryBuilder


@pytest.fixture
def compiler() -> FilterCompiler:
    """Create a compiler that reads every field from the JSON metadata."""
    return FilterCompiler("VEC_META")


@pytest.fixture
def promoted_compiler() -> FilterCompiler:
    """Create a compiler with promoted metadata columns."""
    return FilterCompiler("VEC_META", specific_metadata_columns=["a", "b", "c", "title"])


@pytest.fixture
def query_builder() -> QueryBuilder:
    """Create a query builder for the default table layout."""
    return QueryBuilder(
        table_name="EMBEDDINGS",
        content_column="VEC_TEXT",
        metadata_column="VEC_META",
        vector_column="VEC_VECTOR",
    )
