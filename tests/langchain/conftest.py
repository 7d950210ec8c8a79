"""Shared fixtures for LangChain tests.

Fixtures:
    sample_documents: LangChain Document objects for indexing.
    mock_embedder: Client-side embeddings mock returning fixed vectors.
    internal_embeddings: HanaInternalEmbeddings marker.
    hana_config: Pipeline configuration for HANA.
"""

from unittest.mock import MagicMock

import pytest
from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings

from hanavectordb.langchain.internal_embeddings import HanaInternalEmbeddings


INTERNAL_MODEL_ID = "SAP_NEB.20240715"


@pytest.fixture
def sample_documents() -> list[Document]:
    """Create sample LangChain documents for testing."""
    return [
        Document(
            page_content="SAP HANA Cloud stores vectors in REAL_VECTOR columns",
            metadata={"source": "docs", "title": "Vectors"},
        ),
        Document(
            page_content="HNSW indexes speed up nearest neighbour search",
            metadata={"source": "blog", "title": "HNSW"},
        ),
        Document(
            page_content="Metadata filters compile to SQL predicates",
            metadata={"source": "docs", "title": "Filters"},
        ),
    ]


@pytest.fixture
def mock_embedder() -> MagicMock:
    """Create client-side embeddings that return fixed vectors."""
    embedder = MagicMock(spec=Embeddings)
    embedder.embed_query.return_value = [1.0, 0.0, 0.0]
    embedder.embed_documents.side_effect = lambda texts: [
        [1.0, float(i), 0.0] for i, _ in enumerate(texts)
    ]
    return embedder


@pytest.fixture
def internal_embeddings() -> HanaInternalEmbeddings:
    """Create the in-database embeddings marker."""
    return HanaInternalEmbeddings(INTERNAL_MODEL_ID)


@pytest.fixture
def hana_config() -> dict:
    """Create a HANA pipeline configuration."""
    return {
        "hana": {
            "address": "hana.example.com",
            "port": 443,
            "user": "DBADMIN",
            "password": "secret",
            "table_name": "TEST_DOCS",
            "distance_strategy": "cosine",
        },
        "embeddings": {"model": "sentence-transformers/all-MiniLM-L6-v2"},
        "search": {"top_k": 3, "fetch_k": 10, "lambda_mult": 0.7},
        "logging": {"name": "hanavectordb.test", "level": "WARNING"},
    }
