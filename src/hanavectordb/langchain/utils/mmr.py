"""Maximal Marginal Relevance (MMR) reranking for HANA search results.

MMR narrows a candidate pool fetched from HANA to a smaller, less redundant
result list. Each step picks the remaining candidate with the best score

    MMR(d) = λ × sim(d, query) - (1-λ) × max_sim(d, selected)

where both similarities are cosine similarities computed on the vectors HANA
returned alongside the documents.

Lambda Parameter Guidelines:
    - λ = 1.0: Pure relevance ranking (no diversity penalty)
    - λ = 0.5: Balanced relevance and diversity (default)
    - λ = 0.0: Pure diversity

Ties go to the candidate that came first in the pool, so with λ = 1 the result
is the pool's relevance order.

Usage:
    >>> from hanavectordb.langchain.utils import MMRHelper
    >>> reranked = MMRHelper.mmr_rerank(
    ...     documents, embeddings, query_embedding, lambda_param=0.5, k=4
    ... )
"""

from typing import Sequence

import numpy as np
from langchain_core.documents import Document

from hanavectordb.exceptions import InvalidArgumentError


class MMRHelper:
    """Helper for Maximal Marginal Relevance reranking.

    All methods are static so the class can be used without instantiation.
    """

    @staticmethod
    def cosine_similarity_matrix(
        rows: Sequence[Sequence[float]], columns: Sequence[Sequence[float]]
    ) -> np.ndarray:
        """Pairwise cosine similarity between two sets of vectors."""
        x = np.asarray(rows, dtype=np.float64)
        y = np.asarray(columns, dtype=np.float64)
        if x.ndim != 2 or y.ndim != 2 or x.shape[1] != y.shape[1]:
            raise InvalidArgumentError(
                f"Vectors must share one dimension, got shapes {x.shape} and {y.shape}"
            )

        x_norm = np.linalg.norm(x, axis=1)
        y_norm = np.linalg.norm(y, axis=1)
        denominator = np.outer(x_norm, y_norm)
        with np.errstate(divide="ignore", invalid="ignore"):
            similarity = np.dot(x, y.T) / denominator
        similarity[denominator == 0] = 0.0
        return similarity

    @staticmethod
    def select_indices(
        query_embedding: Sequence[float],
        embeddings: Sequence[Sequence[float]],
        lambda_param: float = 0.5,
        k: int = 4,
    ) -> list[tuple[int, float]]:
        """Greedy MMR selection over a candidate pool.

        Args:
            query_embedding: Embedding of the query.
            embeddings: Candidate embeddings in pool order.
            lambda_param: Relevance/diversity trade-off in [0, 1].
            k: Number of candidates to select, capped at the pool size.

        Returns:
            ``(pool index, MMR score)`` pairs in selection order.

        Raises:
            InvalidArgumentError: If ``lambda_param`` is outside [0, 1] or the
                vectors have mismatched dimensions.
        """
        if not 0.0 <= lambda_param <= 1.0:
            raise InvalidArgumentError(
                f"lambda_param must be in [0, 1], got {lambda_param}"
            )
        if k <= 0 or len(embeddings) == 0:
            return []

        k = min(k, len(embeddings))
        relevance = MMRHelper.cosine_similarity_matrix(
            [query_embedding], embeddings
        )[0]
        pairwise = MMRHelper.cosine_similarity_matrix(embeddings, embeddings)

        selected: list[tuple[int, float]] = []
        remaining = list(range(len(embeddings)))
        # redundancy[i] = max similarity of candidate i to anything selected
        redundancy = np.zeros(len(embeddings))

        while len(selected) < k and remaining:
            best_idx = -1
            best_score = -np.inf
            for idx in remaining:
                if selected:
                    score = (
                        lambda_param * relevance[idx]
                        - (1 - lambda_param) * redundancy[idx]
                    )
                else:
                    score = relevance[idx]
                if score > best_score:
                    best_idx, best_score = idx, score

            selected.append((best_idx, float(best_score)))
            remaining.remove(best_idx)
            redundancy = np.maximum(redundancy, pairwise[best_idx])

        return selected

    @staticmethod
    def mmr_rerank(
        documents: list[Document],
        embeddings: Sequence[Sequence[float]],
        query_embedding: Sequence[float],
        lambda_param: float = 0.5,
        k: int = 4,
    ) -> list[tuple[Document, float]]:
        """Apply MMR reranking.

        Args:
            documents: Candidate documents in pool order.
            embeddings: Embeddings for each document.
            query_embedding: Embedding of the query.
            lambda_param: Trade-off parameter between relevance and diversity
                (0-1). Higher values prioritize relevance.
            k: Number of documents to return.

        Returns:
            List of (Document, MMR score) tuples in selection order.
        """
        if len(documents) != len(embeddings):
            raise InvalidArgumentError(
                "Documents and embeddings must have the same length"
            )
        return [
            (documents[idx], score)
            for idx, score in MMRHelper.select_indices(
                query_embedding, embeddings, lambda_param=lambda_param, k=k
            )
        ]

    @staticmethod
    def mmr_rerank_simple(
        documents: list[Document],
        embeddings: Sequence[Sequence[float]],
        query_embedding: Sequence[float],
        k: int = 4,
        lambda_param: float = 0.5,
    ) -> list[Document]:
        """MMR reranking returning only documents."""
        mmr_results = MMRHelper.mmr_rerank(
            documents,
            embeddings,
            query_embedding,
            lambda_param=lambda_param,
            k=k,
        )
        return [doc for doc, _ in mmr_results]
