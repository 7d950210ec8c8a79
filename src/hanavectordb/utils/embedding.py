"""Query-time embedding strategies.

A store either embeds text on the client with a LangChain ``Embeddings`` model
(external mode) or lets HANA compute the vector with its ``VECTOR_EMBEDDING``
function (internal mode). The strategy is chosen once from the embeddings
object handed to the store and produces the SQL expression that stands for the
query vector, together with the parameters that expression binds.

External mode:
    The query vector is embedded client-side and inlined as a
    ``TO_REAL_VECTOR('[...]')`` literal. No parameters are bound.

Internal mode:
    The expression is ``VECTOR_EMBEDDING(?, 'QUERY', ?)`` bound to the raw query
    text and the model id. These parameters come first in the final statement.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from hanavectordb.exceptions import ConfigurationError
from hanavectordb.utils.sanitize import sanitize_list_float


QUERY_PURPOSE = "QUERY"
DOCUMENT_PURPOSE = "DOCUMENT"


@dataclass(frozen=True)
class EmbeddingExpression:
    """SQL expression producing a vector, with the parameters it binds."""

    sql: str
    params: tuple[Any, ...] = field(default_factory=tuple)


def vector_expression(embedding: Sequence[float]) -> EmbeddingExpression:
    """Build a literal ``TO_REAL_VECTOR`` expression for a client-side vector.

    Raises:
        InvalidArgumentError: If ``embedding`` is not a sequence of numbers.
    """
    values = sanitize_list_float(embedding)
    return EmbeddingExpression(
        sql=f"TO_REAL_VECTOR('[{','.join(str(v) for v in values)}]')"
    )


def vector_embedding_expression(
    text: str, model_id: str, purpose: str = QUERY_PURPOSE
) -> EmbeddingExpression:
    """Build a ``VECTOR_EMBEDDING`` call bound to ``text`` and ``model_id``."""
    return EmbeddingExpression(
        sql=f"VECTOR_EMBEDDING(?, '{purpose}', ?)", params=(text, model_id)
    )


class EmbeddingStrategy:
    """Base class for the two embedding modes.

    Each mode owns the store operations that differ between client-side and
    in-database embedding. ``db`` is a ``HanaVectorDB``.
    """

    is_internal: bool = False
    model_id: Optional[str] = None

    def query_expression(self, query: str) -> EmbeddingExpression:
        """Return the expression for the vector of a text query."""
        raise NotImplementedError

    def validate(self, db: Any) -> None:
        """Check that ``db`` can serve this mode."""

    def add_texts(
        self,
        db: Any,
        texts: list[str],
        metadatas: Optional[Sequence[dict]],
        embeddings: Optional[Sequence[Sequence[float]]] = None,
    ) -> int:
        """Insert ``texts``, returning the number of rows submitted."""
        raise NotImplementedError

    def search(
        self, db: Any, query: str, k: int, filter: Optional[dict]
    ) -> list[tuple[Any, float, list[float]]]:
        """Run a similarity search for a text query."""
        raise NotImplementedError

    def query_vector(self, db: Any, query: str) -> list[float]:
        """Return the query vector as numbers, as MMR needs it on the client."""
        raise NotImplementedError


class ExternalEmbeddingStrategy(EmbeddingStrategy):
    """Embeds queries on the client with a LangChain ``Embeddings`` instance."""

    is_internal = False

    def __init__(self, embeddings: Any) -> None:
        self.embeddings = embeddings

    def embed_query(self, query: str) -> list[float]:
        return self.embeddings.embed_query(query)

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return self.embeddings.embed_documents(texts)

    def query_expression(self, query: str) -> EmbeddingExpression:
        return vector_expression(self.embed_query(query))

    def add_texts(self, db, texts, metadatas, embeddings=None):
        if embeddings is None:
            embeddings = self.embed_documents(texts)
        return db.add_vectors(texts, metadatas, embeddings)

    def search(self, db, query, k, filter):
        return db.search_by_vector(self.embed_query(query), k, filter)

    def query_vector(self, db, query):
        return self.embed_query(query)


class InternalEmbeddingStrategy(EmbeddingStrategy):
    """Delegates embedding to HANA's ``VECTOR_EMBEDDING`` function.

    Args:
        model_id: Identifier of the in-database embedding model.

    Raises:
        ConfigurationError: If ``model_id`` is empty.
    """

    is_internal = True

    def __init__(self, model_id: str) -> None:
        if not model_id:
            raise ConfigurationError("Internal embedding model id is not set")
        self.model_id = model_id

    def query_expression(self, query: str) -> EmbeddingExpression:
        return vector_embedding_expression(query, self.model_id, QUERY_PURPOSE)

    def document_expression(self, text: str) -> EmbeddingExpression:
        return vector_embedding_expression(text, self.model_id, DOCUMENT_PURPOSE)

    def validate(self, db):
        db.validate_internal_embedding_function(self.model_id)

    def add_texts(self, db, texts, metadatas, embeddings=None):
        return db.add_texts_with_internal_embedding(texts, metadatas, self.model_id)

    def search(self, db, query, k, filter):
        return db.search(self.query_expression(query), k, filter)

    def query_vector(self, db, query):
        return db.embed_query_internal(query, self.model_id)


def select_embedding_strategy(embeddings: Any) -> EmbeddingStrategy:
    """Pick the strategy matching an embeddings object.

    Objects flagged with ``is_hana_internal_embeddings = True`` (see
    ``HanaInternalEmbeddings``) select internal mode; anything else is used
    for client-side embedding.

    Raises:
        ConfigurationError: If internal mode is selected without a model id.
    """
    if getattr(embeddings, "is_hana_internal_embeddings", False) is True:
        return InternalEmbeddingStrategy(embeddings.get_model_id())
    return ExternalEmbeddingStrategy(embeddings)
