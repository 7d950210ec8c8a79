"""Embedding model creation for HANA pipelines.

Pipelines embed on the client with HuggingFace sentence-transformers models,
or hand embedding over to HANA when an in-database model id is configured.

Configuration:
    .. code-block:: yaml

        embeddings:
          model: sentence-transformers/all-MiniLM-L6-v2
          device: cpu  # or cuda
          batch_size: 32

    or, to embed inside the database:

    .. code-block:: yaml

        embeddings:
          internal_model_id: SAP_NEB.20240715

Usage:
    >>> from hanavectordb.langchain.utils import EmbedderHelper
    >>> embedder = EmbedderHelper.create_embedder(config)
    >>> query_embedding = EmbedderHelper.embed_query(embedder, "machine learning")
"""

from typing import Any

from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings
from langchain_huggingface import HuggingFaceEmbeddings

from hanavectordb.langchain.internal_embeddings import HanaInternalEmbeddings
from hanavectordb.utils.config import DEFAULT_EMBEDDING_MODEL


class EmbedderHelper:
    """Creates embedding models from configuration and runs them."""

    @classmethod
    def create_embedder(cls, config: dict[str, Any]) -> Embeddings:
        """Create the embeddings object described by the ``embeddings`` section.

        Args:
            config: Configuration dictionary with an embeddings section.

        Returns:
            ``HanaInternalEmbeddings`` if ``internal_model_id`` is set,
            otherwise a ``HuggingFaceEmbeddings`` instance.
        """
        embeddings_config = config.get("embeddings", {}) or {}
        internal_model_id = embeddings_config.get("internal_model_id")
        if internal_model_id:
            return HanaInternalEmbeddings(internal_model_id)

        model = embeddings_config.get("model", DEFAULT_EMBEDDING_MODEL)
        device = embeddings_config.get("device", "cpu")
        batch_size = embeddings_config.get("batch_size", 32)

        return HuggingFaceEmbeddings(
            model_name=model,
            model_kwargs={"device": device},
            encode_kwargs={"batch_size": batch_size},
        )

    @classmethod
    def is_internal(cls, embedder: Embeddings) -> bool:
        return getattr(embedder, "is_hana_internal_embeddings", False) is True

    @classmethod
    def embed_documents(
        cls, embedder: Embeddings, documents: list[Document]
    ) -> tuple[list[Document], list[list[float]]]:
        """Embed documents and return them with their embeddings."""
        texts = [doc.page_content for doc in documents]
        embeddings = embedder.embed_documents(texts)
        return documents, embeddings

    @classmethod
    def embed_query(cls, embedder: Embeddings, query: str) -> list[float]:
        return embedder.embed_query(query)
