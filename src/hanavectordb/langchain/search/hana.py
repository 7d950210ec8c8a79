"""SAP HANA search pipeline (LangChain).

Pipeline Architecture:
    1. Query Embedding: On the client, or inside HANA with internal embeddings
    2. Candidate Retrieval: Top-k similarity search with metadata filters
    3. Optional MMR: Fetch ``fetch_k`` candidates with their vectors and
       select ``top_k`` diverse documents

Filters use the LangChain filter syntax, for example
``{"$and": [{"year": {"$gte": 2020}}, {"title": {"$contains": "HANA"}}]}``.

Example:
    >>> from hanavectordb.langchain.search import HanaSearchPipeline
    >>> pipeline = HanaSearchPipeline("config.yaml")
    >>> results = pipeline.search("What is a vector index?", top_k=5)
    >>> diverse = pipeline.search("vector index", mmr=True, lambda_mult=0.3)
"""

import logging
from pathlib import Path
from typing import Any, Optional

from hanavectordb.langchain.utils import EmbedderHelper
from hanavectordb.langchain.utils.store import StoreHelper
from hanavectordb.utils.config import get_search_params, setup_logger
from hanavectordb.utils.config_loader import ConfigLoader


logger = logging.getLogger(__name__)


class HanaSearchPipeline:
    """LangChain search pipeline for a HANA vector table.

    Attributes:
        config: Validated configuration dictionary.
        embedder: Embeddings used for queries.
        store: ``HanaDB`` vector store being searched.
        search_params: Defaults for ``top_k``, ``fetch_k`` and ``lambda_mult``.
    """

    def __init__(
        self,
        config_or_path: dict[str, Any] | str | Path,
        connection: Any = None,
    ) -> None:
        """Initialize the search pipeline.

        Args:
            config_or_path: Configuration dictionary or path to a YAML file.
            connection: Optional open HANA connection.

        Raises:
            ConfigurationError: If required settings are missing.
        """
        self.config = ConfigLoader.load(config_or_path)
        if connection is None:
            ConfigLoader.validate(self.config, "hana")
        setup_logger(self.config)

        self.embedder = EmbedderHelper.create_embedder(self.config)
        self.store = StoreHelper.create_store(
            self.config, self.embedder, connection=connection
        )
        self.search_params = get_search_params(self.config)

        logger.info(
            "Initialized HANA search pipeline for table '%s'",
            self.store.db.table_name,
        )

    def search(
        self,
        query: str,
        top_k: Optional[int] = None,
        filters: Optional[dict[str, Any]] = None,
        mmr: bool = False,
        fetch_k: Optional[int] = None,
        lambda_mult: Optional[float] = None,
    ) -> dict[str, Any]:
        """Search the table for ``query``.

        Args:
            query: Search query text.
            top_k: Number of documents to return.
            filters: Optional metadata filter.
            mmr: Rerank a larger candidate pool with maximal marginal
                relevance.
            fetch_k: Candidate pool size for MMR.
            lambda_mult: MMR relevance/diversity trade-off, 1.0 is pure
                relevance.

        Returns:
            Dictionary containing:
                - documents: Retrieved Document objects
                - scores: Similarity scores (plain search only)
                - query: Original query string
        """
        top_k = top_k if top_k is not None else self.search_params["top_k"]

        if mmr:
            documents = self.store.max_marginal_relevance_search(
                query,
                k=top_k,
                fetch_k=fetch_k if fetch_k is not None else self.search_params["fetch_k"],
                lambda_mult=(
                    lambda_mult
                    if lambda_mult is not None
                    else self.search_params["lambda_mult"]
                ),
                filter=filters,
            )
            logger.info("Selected %d documents with MMR", len(documents))
            return {"documents": documents, "query": query}

        results = self.store.similarity_search_with_score(
            query, k=top_k, filter=filters
        )
        logger.info("Retrieved %d documents from HANA", len(results))
        return {
            "documents": [doc for doc, _ in results],
            "scores": [score for _, score in results],
            "query": query,
        }
