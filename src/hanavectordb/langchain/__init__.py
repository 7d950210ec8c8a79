"""LangChain integration for SAP HANA Cloud vector tables.

Exposes the ``HanaDB`` vector store, the ``HanaInternalEmbeddings`` marker for
in-database embedding, and config-driven indexing and search pipelines.
"""

from hanavectordb.langchain.indexing.hana import HanaIndexingPipeline
from hanavectordb.langchain.internal_embeddings import HanaInternalEmbeddings
from hanavectordb.langchain.search.hana import HanaSearchPipeline
from hanavectordb.langchain.vectorstore import HanaDB


__all__ = [
    "HanaDB",
    "HanaIndexingPipeline",
    "HanaInternalEmbeddings",
    "HanaSearchPipeline",
]
