"""Helpers shared by the HANA LangChain pipelines.

Utility Classes:
    EmbedderHelper: Creates HuggingFace embedding models, or the in-database
        embedding marker, from the ``embeddings`` config section.

    MMRHelper: Maximal Marginal Relevance reranking over candidate pools
        fetched together with their vectors.
"""

from hanavectordb.langchain.utils.embeddings import EmbedderHelper
from hanavectordb.langchain.utils.mmr import MMRHelper


__all__ = [
    "EmbedderHelper",
    "MMRHelper",
]
