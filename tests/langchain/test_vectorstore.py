"""Tests for the HanaDB LangChain vector store.

HanaDB is exercised in both embedding modes. Delegation tests replace the
store's ``db`` with a mock; end-to-end tests run the real HanaVectorDB over
the mock connection and check the statements and decoded results.
"""

from unittest.mock import MagicMock

import pytest
from langchain_core.documents import Document

from hanavectordb.exceptions import ConfigurationError, InvalidArgumentError
from hanavectordb.langchain.internal_embeddings import HanaInternalEmbeddings
from hanavectordb.langchain.vectorstore import HanaDB


INTERNAL_MODEL_ID = "SAP_NEB.20240715"


def _doc(text: str) -> Document:
    return Document(page_content=text, metadata={})


@pytest.fixture
def store(mock_connection, mock_embedder) -> HanaDB:
    """Create a store with client-side embeddings and a mocked db."""
    store = HanaDB(embedding=mock_embedder, connection=mock_connection)
    store.db = MagicMock()
    return store


@pytest.fixture
def internal_store(mock_connection, internal_embeddings) -> HanaDB:
    """Create a store with in-database embeddings and a mocked db."""
    store = HanaDB(embedding=internal_embeddings, connection=mock_connection)
    store.db = MagicMock()
    return store


class TestHanaDBConstruction:
    """Tests for HanaDB construction and configuration."""

    def test_external_mode(self, mock_connection, mock_embedder):
        """Test ordinary embeddings select client-side embedding."""
        store = HanaDB(embedding=mock_embedder, connection=mock_connection)

        assert store.embeddings is mock_embedder
        assert store.internal_model_id is None
        assert not store.embedding_strategy.is_internal

    def test_internal_mode(self, mock_connection, internal_embeddings):
        """Test the marker selects in-database embedding."""
        store = HanaDB(embedding=internal_embeddings, connection=mock_connection)

        assert store.internal_model_id == INTERNAL_MODEL_ID

    def test_internal_mode_requires_model(self, mock_connection):
        """Test internal embeddings without a model id are refused."""
        with pytest.raises(ConfigurationError):
            HanaDB(embedding=HanaInternalEmbeddings(""), connection=mock_connection)

    def test_layout_passed_to_db(self, mock_connection, mock_embedder):
        """Test table layout settings reach HanaVectorDB."""
        store = HanaDB(
            embedding=mock_embedder,
            connection=mock_connection,
            table_name="DOCS",
            distance_strategy="euclidean",
            specific_metadata_columns=["title"],
        )

        assert store.db.table_name == "DOCS"
        assert store.db.distance_strategy == "euclidean"
        assert store.db.specific_metadata_columns == ["title"]

    def test_initialize_external(self, store):
        """Test initialize runs without the embedding probe."""
        store.initialize()

        store.db.initialize.assert_called_once_with(internal_model_id=None)

    def test_initialize_internal(self, internal_store):
        """Test initialize probes the internal model."""
        internal_store.initialize()

        internal_store.db.initialize.assert_called_once_with(
            internal_model_id=INTERNAL_MODEL_ID
        )

    def test_set_embeddings_to_internal(self, store, internal_embeddings):
        """Test switching to internal embeddings validates the model."""
        store.set_embeddings(internal_embeddings)

        store.db.validate_internal_embedding_function.assert_called_once_with(
            INTERNAL_MODEL_ID
        )
        assert store.internal_model_id == INTERNAL_MODEL_ID
        assert store.embeddings is internal_embeddings

    def test_set_embeddings_failed_probe_keeps_mode(self, store, internal_embeddings):
        """Test a failed probe leaves the store unchanged."""
        store.db.validate_internal_embedding_function.side_effect = ConfigurationError(
            "unknown model"
        )

        with pytest.raises(ConfigurationError):
            store.set_embeddings(internal_embeddings)

        assert store.internal_model_id is None

    def test_create_hnsw_index(self, store):
        """Test index creation is delegated."""
        store.db.create_hnsw_index.return_value = "idx"

        assert store.create_hnsw_index(m=16, ef_search=50) == "idx"
        store.db.create_hnsw_index.assert_called_once_with(
            m=16, ef_construction=None, ef_search=50, index_name=None
        )


class TestHanaDBAddTexts:
    """Tests for add_texts and from_texts."""

    def test_external_embeds_documents(self, store, mock_embedder):
        """Test texts are embedded on the client."""
        result = store.add_texts(["a", "b"], [{"x": 1}, {"x": 2}])

        assert result == []
        mock_embedder.embed_documents.assert_called_once_with(["a", "b"])
        store.db.add_vectors.assert_called_once_with(
            ["a", "b"], [{"x": 1}, {"x": 2}], [[1.0, 0.0, 0.0], [1.0, 1.0, 0.0]]
        )

    def test_precomputed_embeddings(self, store, mock_embedder):
        """Test given embeddings are not recomputed."""
        store.add_texts(iter(["a"]), None, embeddings=[[0.3, 0.4]])

        mock_embedder.embed_documents.assert_not_called()
        store.db.add_vectors.assert_called_once_with(["a"], None, [[0.3, 0.4]])

    def test_internal_embeds_in_database(self, internal_store):
        """Test internal mode inserts with VECTOR_EMBEDDING."""
        internal_store.add_texts(["a"], [{"x": 1}])

        internal_store.db.add_texts_with_internal_embedding.assert_called_once_with(
            ["a"], [{"x": 1}], INTERNAL_MODEL_ID
        )
        internal_store.db.add_vectors.assert_not_called()

    def test_add_documents(self, store, sample_documents):
        """Test the base class add_documents goes through add_texts."""
        store.add_documents(sample_documents)

        texts, metadatas, _ = store.db.add_vectors.call_args.args
        assert texts == [doc.page_content for doc in sample_documents]
        assert metadatas == [doc.metadata for doc in sample_documents]

    def test_from_texts(self, mock_connection, mock_cursor, mock_embedder):
        """Test from_texts prepares the table and inserts."""
        mock_cursor.fetchall.side_effect = [
            [(1,)],
            [("NCLOB", -1)],
            [("NCLOB", -1)],
            [("REAL_VECTOR", -1)],
        ]

        store = HanaDB.from_texts(
            ["a"], mock_embedder, metadatas=[{"k": "v"}], connection=mock_connection
        )

        assert isinstance(store, HanaDB)
        assert mock_cursor.execute.call_count == 4
        mock_cursor.executemany.assert_called_once()


class TestHanaDBSearch:
    """Tests for similarity search entry points."""

    def test_similarity_search_external(self, store, mock_embedder):
        """Test the query is embedded and searched by vector."""
        store.db.search_by_vector.return_value = [(_doc("a"), 0.9, [1.0, 0.0, 0.0])]

        docs = store.similarity_search("query", k=2, filter={"source": "docs"})

        mock_embedder.embed_query.assert_called_once_with("query")
        store.db.search_by_vector.assert_called_once_with(
            [1.0, 0.0, 0.0], 2, {"source": "docs"}
        )
        assert docs == [_doc("a")]

    def test_similarity_search_internal(self, internal_store):
        """Test internal mode passes the query text to HANA."""
        internal_store.db.search.return_value = [(_doc("a"), 0.8, [0.1])]

        results = internal_store.similarity_search_with_score("what is hana", k=3)

        expression, k, filter = internal_store.db.search.call_args.args
        assert expression.sql == "VECTOR_EMBEDDING(?, 'QUERY', ?)"
        assert expression.params == ("what is hana", INTERNAL_MODEL_ID)
        assert (k, filter) == (3, None)
        assert results == [(_doc("a"), 0.8)]

    def test_search_by_query_requires_internal(self, store):
        """Test searching by query text needs internal embeddings."""
        with pytest.raises(ConfigurationError):
            store.similarity_search_with_score_and_vector_by_query("q")

    def test_search_by_vector_variants(self, store):
        """Test the by-vector entry points drop scores and vectors as named."""
        store.db.search_by_vector.return_value = [(_doc("a"), 0.5, [1.0])]

        assert store.similarity_search_with_score_and_vector_by_vector([1.0]) == [
            (_doc("a"), 0.5, [1.0])
        ]
        assert store.similarity_search_with_score_by_vector([1.0]) == [(_doc("a"), 0.5)]
        assert store.similarity_search_by_vector([1.0]) == [_doc("a")]
        store.db.search_by_vector.assert_called_with([1.0], 4, None)

    def test_exact_vector_ranks_first(self, mock_connection, mock_cursor, mock_embedder):
        """Test the stored row for the query vector is returned first."""
        mock_cursor.fetchall.return_value = [
            ("exact", '{"n": 1}', "[1.0,0.0,0.0]", 1.0),
            ("near", '{"n": 2}', "[0.8,0.6,0.0]", 0.8),
        ]
        store = HanaDB(embedding=mock_embedder, connection=mock_connection)

        results = store.similarity_search_with_score("anything", k=2)

        sql = mock_cursor.execute.call_args.args[0]
        assert "COSINE_SIMILARITY" in sql and sql.endswith("ORDER BY CS DESC")
        assert results[0][0].page_content == "exact"
        assert results[0][1] == max(score for _, score in results)


class TestHanaDBMaxMarginalRelevance:
    """Tests for MMR search."""

    def test_fetches_pool_and_reranks(self, store):
        """Test fetch_k candidates are fetched and k are selected."""
        store.db.search_by_vector.return_value = [
            (_doc("a"), 1.0, [1.0, 0.0]),
            (_doc("a-copy"), 0.99, [1.0, 0.01]),
            (_doc("b"), 0.7, [0.7, 0.7]),
        ]

        docs = store.max_marginal_relevance_search_by_vector(
            [1.0, 0.0], k=2, fetch_k=3, lambda_mult=0.3, filter={"x": 1}
        )

        store.db.search_by_vector.assert_called_once_with([1.0, 0.0], 3, {"x": 1})
        assert [doc.page_content for doc in docs] == ["a", "b"]

    def test_lambda_one_keeps_relevance_order(self, store):
        """Test lambda 1 returns the plain relevance ranking."""
        store.db.search_by_vector.return_value = [
            (_doc("a"), 1.0, [1.0, 0.0]),
            (_doc("a-copy"), 0.99, [1.0, 0.01]),
            (_doc("b"), 0.7, [0.7, 0.7]),
        ]

        docs = store.max_marginal_relevance_search_by_vector(
            [1.0, 0.0], k=2, lambda_mult=1.0
        )

        assert [doc.page_content for doc in docs] == ["a", "a-copy"]

    def test_fetch_k_smaller_than_k(self, store):
        """Test a pool smaller than k returns the whole pool."""
        store.db.search_by_vector.return_value = [
            (_doc("a"), 1.0, [1.0, 0.0]),
            (_doc("b"), 0.5, [0.0, 1.0]),
        ]

        docs = store.max_marginal_relevance_search_by_vector(
            [1.0, 0.0], k=4, fetch_k=2
        )

        assert len(docs) == 2

    def test_defaults(self, store, mock_embedder):
        """Test the query is embedded and the default pool size is 20."""
        store.db.search_by_vector.return_value = []

        assert store.max_marginal_relevance_search("query") == []

        mock_embedder.embed_query.assert_called_once_with("query")
        store.db.search_by_vector.assert_called_once_with([1.0, 0.0, 0.0], 20, None)

    def test_internal_query_vector(self, internal_store):
        """Test internal mode asks HANA for the query vector."""
        internal_store.db.embed_query_internal.return_value = [0.0, 1.0]
        internal_store.db.search_by_vector.return_value = [(_doc("a"), 1.0, [0.0, 1.0])]

        docs = internal_store.max_marginal_relevance_search("q", k=1)

        internal_store.db.embed_query_internal.assert_called_once_with(
            "q", INTERNAL_MODEL_ID
        )
        assert docs == [_doc("a")]


class TestHanaDBDelete:
    """Tests for delete."""

    def test_delegates(self, store):
        """Test the filter is passed to the db."""
        assert store.delete(filter={"source": "blog"}) is True

        store.db.delete.assert_called_once_with(filter={"source": "blog"}, ids=None)

    def test_ids_rejected(self, mock_connection, mock_embedder):
        """Test deletion by id is refused by the real db layer."""
        store = HanaDB(embedding=mock_embedder, connection=mock_connection)

        with pytest.raises(InvalidArgumentError):
            store.delete(ids=["1"])

        mock_connection.cursor.assert_not_called()
