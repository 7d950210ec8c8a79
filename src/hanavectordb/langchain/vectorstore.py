"""LangChain ``VectorStore`` backed by a SAP HANA Cloud table.

``HanaDB`` plugs :class:`~hanavectordb.databases.hana.HanaVectorDB` into the
LangChain vector store interface, so it can be used with retrievers, chains
and ``add_documents``. The embeddings object given at construction decides
how text becomes vectors:

    - Any LangChain ``Embeddings`` (e.g. ``HuggingFaceEmbeddings``): texts and
      queries are embedded on the client and sent as vector literals.
    - ``HanaInternalEmbeddings(model_id)``: HANA embeds documents and queries
      itself with ``VECTOR_EMBEDDING``.

Example:
    >>> from langchain_huggingface import HuggingFaceEmbeddings
    >>> store = HanaDB(
    ...     connection=connection,
    ...     embedding=HuggingFaceEmbeddings(),
    ...     table_name="DOCS",
    ... )
    >>> store.initialize()
    >>> store.add_texts(["HANA stores vectors"], [{"topic": "db"}])
    >>> store.similarity_search("vector database", k=2, filter={"topic": "db"})
"""

import logging
from typing import Any, Iterable, Optional, Sequence

from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings
from langchain_core.vectorstores import VectorStore

from hanavectordb.databases.hana import HanaVectorDB
from hanavectordb.exceptions import ConfigurationError
from hanavectordb.langchain.utils.mmr import MMRHelper
from hanavectordb.utils.config import DEFAULT_SEARCH_PARAMS
from hanavectordb.utils.embedding import EmbeddingStrategy, select_embedding_strategy


logger = logging.getLogger(__name__)

DEFAULT_K = DEFAULT_SEARCH_PARAMS["top_k"]
DEFAULT_FETCH_K = DEFAULT_SEARCH_PARAMS["fetch_k"]
DEFAULT_LAMBDA_MULT = DEFAULT_SEARCH_PARAMS["lambda_mult"]


class HanaDB(VectorStore):
    """SAP HANA Cloud vector store.

    Args:
        embedding: Embeddings used for documents and queries.
        connection: Open ``hdbcli`` connection. Connection settings in
            ``kwargs`` are used to open one when omitted.
        **kwargs: Table layout and connection settings passed to
            :class:`HanaVectorDB` (``table_name``, ``distance_strategy``,
            ``specific_metadata_columns``, ``address``, ...).

    Raises:
        ConfigurationError: If the distance strategy is unsupported or the
            internal embeddings carry no model id.
    """

    def __init__(
        self,
        embedding: Embeddings,
        connection: Any = None,
        **kwargs: Any,
    ):
        self.db = HanaVectorDB(connection=connection, **kwargs)
        self.embedding = embedding
        self.embedding_strategy: EmbeddingStrategy = select_embedding_strategy(
            embedding
        )

    @property
    def embeddings(self) -> Embeddings:
        return self.embedding

    @property
    def internal_model_id(self) -> Optional[str]:
        return self.embedding_strategy.model_id

    def set_embeddings(self, embedding: Embeddings) -> None:
        """Replace the embeddings and re-select the embedding mode.

        Switching to internal embeddings re-runs the ``VECTOR_EMBEDDING``
        probe against the database.
        """
        strategy = select_embedding_strategy(embedding)
        strategy.validate(self.db)
        self.embedding = embedding
        self.embedding_strategy = strategy
        logger.info(
            "Using %s embeddings", "internal" if strategy.is_internal else "external"
        )

    def initialize(self) -> None:
        """Create and check the table, and probe internal embeddings if used."""
        self.db.initialize(internal_model_id=self.internal_model_id)

    def create_hnsw_index(
        self,
        m: Optional[int] = None,
        ef_construction: Optional[int] = None,
        ef_search: Optional[int] = None,
        index_name: Optional[str] = None,
    ) -> str:
        """Create an HNSW index on the vector column. See ``HanaVectorDB``."""
        return self.db.create_hnsw_index(
            m=m,
            ef_construction=ef_construction,
            ef_search=ef_search,
            index_name=index_name,
        )

    def add_texts(
        self,
        texts: Iterable[str],
        metadatas: Optional[list[dict]] = None,
        embeddings: Optional[list[list[float]]] = None,
        **kwargs: Any,
    ) -> list[str]:
        """Add texts with optional metadata to the table.

        Args:
            texts: Texts to add.
            metadatas: Metadata per text.
            embeddings: Precomputed embeddings. Ignored in internal mode.

        Returns:
            An empty list, rows in HANA have no document ids.
        """
        if kwargs.get("ids"):
            logger.warning("Document ids are not stored by HanaDB and are ignored")
        self.embedding_strategy.add_texts(self.db, list(texts), metadatas, embeddings)
        return []

    @classmethod
    def from_texts(
        cls,
        texts: list[str],
        embedding: Embeddings,
        metadatas: Optional[list[dict]] = None,
        connection: Any = None,
        **kwargs: Any,
    ) -> "HanaDB":
        """Create a store, initialize its table and add ``texts``."""
        instance = cls(embedding=embedding, connection=connection, **kwargs)
        instance.initialize()
        instance.add_texts(texts, metadatas)
        return instance

    def similarity_search_with_score_and_vector_by_vector(
        self,
        embedding: Sequence[float],
        k: int = DEFAULT_K,
        filter: Optional[dict] = None,
    ) -> list[tuple[Document, float, list[float]]]:
        """Return ``(document, score, vector)`` triples closest to ``embedding``."""
        return self.db.search_by_vector(embedding, k, filter)

    def similarity_search_with_score_and_vector_by_query(
        self,
        query: str,
        k: int = DEFAULT_K,
        filter: Optional[dict] = None,
    ) -> list[tuple[Document, float, list[float]]]:
        """Search with the query embedded inside HANA.

        Raises:
            ConfigurationError: If the store is not using internal embeddings.
        """
        if not self.embedding_strategy.is_internal:
            raise ConfigurationError(
                "Searching by query text requires internal embeddings"
            )
        return self.db.search(
            self.embedding_strategy.query_expression(query), k, filter
        )

    def _search_with_score_and_vector(
        self, query: str, k: int, filter: Optional[dict]
    ) -> list[tuple[Document, float, list[float]]]:
        return self.embedding_strategy.search(self.db, query, k, filter)

    def similarity_search_with_score_by_vector(
        self,
        embedding: list[float],
        k: int = DEFAULT_K,
        filter: Optional[dict] = None,
    ) -> list[tuple[Document, float]]:
        results = self.similarity_search_with_score_and_vector_by_vector(
            embedding, k, filter
        )
        return [(doc, score) for doc, score, _ in results]

    def similarity_search_by_vector(
        self,
        embedding: list[float],
        k: int = DEFAULT_K,
        filter: Optional[dict] = None,
        **kwargs: Any,
    ) -> list[Document]:
        results = self.similarity_search_with_score_by_vector(embedding, k, filter)
        return [doc for doc, _ in results]

    def similarity_search_with_score(
        self,
        query: str,
        k: int = DEFAULT_K,
        filter: Optional[dict] = None,
        **kwargs: Any,
    ) -> list[tuple[Document, float]]:
        """Return documents most similar to ``query`` with their scores.

        Scores are cosine similarities (higher is closer) or Euclidean
        distances (lower is closer), following the distance strategy.
        """
        results = self._search_with_score_and_vector(query, k, filter)
        return [(doc, score) for doc, score, _ in results]

    def similarity_search(
        self,
        query: str,
        k: int = DEFAULT_K,
        filter: Optional[dict] = None,
        **kwargs: Any,
    ) -> list[Document]:
        results = self.similarity_search_with_score(query, k, filter)
        return [doc for doc, _ in results]

    def max_marginal_relevance_search_by_vector(
        self,
        embedding: list[float],
        k: int = DEFAULT_K,
        fetch_k: int = DEFAULT_FETCH_K,
        lambda_mult: float = DEFAULT_LAMBDA_MULT,
        filter: Optional[dict] = None,
        **kwargs: Any,
    ) -> list[Document]:
        """Return documents selected by maximal marginal relevance.

        Args:
            embedding: Query embedding.
            k: Number of documents to return.
            fetch_k: Size of the candidate pool fetched from HANA.
            lambda_mult: Relevance/diversity trade-off in [0, 1], 1 is pure
                relevance.
            filter: Optional metadata filter applied to the pool.
        """
        candidates = self.similarity_search_with_score_and_vector_by_vector(
            embedding, fetch_k, filter
        )
        documents = [doc for doc, _, _ in candidates]
        vectors = [vector for _, _, vector in candidates]
        return MMRHelper.mmr_rerank_simple(
            documents, vectors, embedding, k=k, lambda_param=lambda_mult
        )

    def max_marginal_relevance_search(
        self,
        query: str,
        k: int = DEFAULT_K,
        fetch_k: int = DEFAULT_FETCH_K,
        lambda_mult: float = DEFAULT_LAMBDA_MULT,
        filter: Optional[dict] = None,
        **kwargs: Any,
    ) -> list[Document]:
        """Embed ``query`` and return documents selected by MMR."""
        embedding = self.embedding_strategy.query_vector(self.db, query)
        return self.max_marginal_relevance_search_by_vector(
            embedding, k=k, fetch_k=fetch_k, lambda_mult=lambda_mult, filter=filter
        )

    def delete(
        self,
        ids: Optional[list[str]] = None,
        filter: Optional[dict] = None,
        **kwargs: Any,
    ) -> Optional[bool]:
        """Delete rows matching ``filter``; ``{}`` deletes everything.

        Raises:
            InvalidArgumentError: If ``ids`` is given or ``filter`` is None.
        """
        self.db.delete(filter=filter, ids=ids)
        return True
