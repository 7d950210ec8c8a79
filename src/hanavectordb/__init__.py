"""hanavectordb: SAP HANA Cloud vector store for LangChain.

This package stores documents, JSON metadata and embeddings in a HANA table
and searches them with HANA's native vector functions. Metadata filters are
compiled to parameterized SQL, and embeddings can be computed on the client
or inside the database.
"""

from hanavectordb.databases import HanaVectorDB
from hanavectordb.exceptions import (
    ConfigurationError,
    DecodeError,
    ExecutionError,
    HanaVectorDBError,
    InvalidArgumentError,
    UnsupportedOperatorError,
)
from hanavectordb.langchain import (
    HanaDB,
    HanaIndexingPipeline,
    HanaInternalEmbeddings,
    HanaSearchPipeline,
)


__all__ = [
    "ConfigurationError",
    "DecodeError",
    "ExecutionError",
    "HanaDB",
    "HanaIndexingPipeline",
    "HanaInternalEmbeddings",
    "HanaSearchPipeline",
    "HanaVectorDB",
    "HanaVectorDBError",
    "InvalidArgumentError",
    "UnsupportedOperatorError",
]
