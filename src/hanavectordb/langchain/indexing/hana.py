"""SAP HANA indexing pipeline (LangChain).

Pipeline Architecture:
    1. Configuration Loading: Validates the ``hana`` and ``embeddings`` sections
    2. Store Setup: Opens the connection, creates and checks the table
    3. Document Insert: Embeds documents (on the client or inside HANA) and
       inserts them in one batch
    4. Optional Index: Creates an HNSW index when ``hana.hnsw`` is configured

Example:
    >>> from hanavectordb.langchain.indexing import HanaIndexingPipeline
    >>> pipeline = HanaIndexingPipeline("config.yaml")
    >>> result = pipeline.run(documents)
    >>> print(f"Indexed {result['documents_indexed']} documents")
"""

import logging
from pathlib import Path
from typing import Any, Optional

from langchain_core.documents import Document

from hanavectordb.langchain.utils import EmbedderHelper
from hanavectordb.langchain.utils.store import StoreHelper
from hanavectordb.utils.config import setup_logger
from hanavectordb.utils.config_loader import ConfigLoader


logger = logging.getLogger(__name__)


class HanaIndexingPipeline:
    """LangChain indexing pipeline for a HANA vector table.

    Attributes:
        config: Validated configuration dictionary.
        embedder: Embeddings used to vectorize documents.
        store: ``HanaDB`` vector store the documents are written to.

    Example:
        >>> config = {
        ...     "hana": {"address": "host", "user": "DBADMIN", "password": "..."},
        ...     "embeddings": {"model": "sentence-transformers/all-MiniLM-L6-v2"},
        ... }
        >>> pipeline = HanaIndexingPipeline(config)
        >>> pipeline.run(documents)
    """

    def __init__(
        self,
        config_or_path: dict[str, Any] | str | Path,
        connection: Any = None,
    ) -> None:
        """Initialize the pipeline and prepare the table.

        Args:
            config_or_path: Configuration dictionary or path to a YAML file.
            connection: Optional open HANA connection used instead of the
                connection settings in the config.

        Raises:
            ConfigurationError: If required settings are missing, the table
                layout does not match, or internal embeddings fail the probe.
            FileNotFoundError: If the config file does not exist.
        """
        self.config = ConfigLoader.load(config_or_path)
        if connection is None:
            ConfigLoader.validate(self.config, "hana")
        setup_logger(self.config)

        self.embedder = EmbedderHelper.create_embedder(self.config)
        self.store = StoreHelper.create_store(
            self.config, self.embedder, connection=connection
        )
        self.store.initialize()

        logger.info(
            "Initialized HANA indexing pipeline for table '%s'",
            self.store.db.table_name,
        )

    def run(self, documents: list[Document]) -> dict[str, Any]:
        """Embed and insert ``documents``.

        Returns:
            Dictionary with operation statistics:
                - documents_indexed: Number of documents inserted (int)
                - index_name: Name of the created HNSW index, if any
        """
        if not documents:
            logger.warning("No documents to index")
            return {"documents_indexed": 0}

        texts = [doc.page_content for doc in documents]
        metadatas = [doc.metadata for doc in documents]

        if EmbedderHelper.is_internal(self.embedder):
            self.store.add_texts(texts, metadatas)
        else:
            docs, embeddings = EmbedderHelper.embed_documents(self.embedder, documents)
            logger.info("Generated embeddings for %d documents", len(docs))
            self.store.add_texts(texts, metadatas, embeddings=embeddings)
        logger.info("Indexed %d documents to HANA", len(documents))

        result: dict[str, Any] = {"documents_indexed": len(documents)}

        hnsw_params: Optional[dict[str, Any]] = StoreHelper.get_hnsw_params(
            self.config
        )
        if hnsw_params is not None:
            result["index_name"] = self.store.create_hnsw_index(**hnsw_params)

        return result
