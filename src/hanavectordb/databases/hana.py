"""SAP HANA Cloud vector store interface.

This module provides a high-level interface to a SAP HANA table used as a
vector store. Each row holds the document text, its metadata serialized as
JSON, and a ``REAL_VECTOR`` embedding. Similarity search uses HANA's native
vector functions, metadata filters compile to parameterized SQL predicates,
and ``$contains`` filters use HANA's full-text ``SCORE`` function.

Key Features:
    - Cosine similarity (``COSINE_SIMILARITY``) or Euclidean distance
      (``L2DISTANCE``) ranking
    - LangChain-style metadata filters compiled to bound parameters
    - Keyword search on content, promoted columns and projected JSON fields
    - Client-side embeddings (vector literals) or in-database embeddings via
      ``VECTOR_EMBEDDING``
    - Promoted metadata columns stored as physical columns
    - HNSW vector index creation

HANA Concepts:
    Identifiers cannot be bound as statement parameters, so every table,
    column and index name is sanitized before it is interpolated into SQL.
    Values (filter operands, document text, metadata, vectors on insert) are
    always bound with qmark placeholders.

    ``VECTOR_EMBEDDING(text, 'QUERY'|'DOCUMENT', model_id)`` computes an
    embedding inside the database. When the store is configured with an
    internal model id, query text is passed straight to the database and no
    client-side embedding model is needed.

Example:
    >>> from hdbcli import dbapi
    >>> connection = dbapi.connect(address="...", port=443, user="...", password="...")
    >>> db = HanaVectorDB(connection=connection, table_name="DOCS")
    >>> db.initialize()
    >>> db.add_vectors(["Hello"], [{"lang": "en"}], [[0.1, 0.2, 0.3]])
    >>> results = db.search_by_vector([0.1, 0.2, 0.3], k=4, filter={"lang": "en"})
"""

import datetime
import json
import logging
from typing import Any, Mapping, Optional, Sequence

from hdbcli import dbapi
from langchain_core.documents import Document

from hanavectordb.exceptions import (
    ConfigurationError,
    ExecutionError,
    InvalidArgumentError,
)
from hanavectordb.utils.config import (
    DEFAULT_CONTENT_COLUMN,
    DEFAULT_METADATA_COLUMN,
    DEFAULT_TABLE_NAME,
    DEFAULT_VECTOR_COLUMN,
    DEFAULT_VECTOR_COLUMN_LENGTH,
)
from hanavectordb.utils.embedding import (
    EmbeddingExpression,
    InternalEmbeddingStrategy,
    vector_expression,
)
from hanavectordb.utils.filters import stringify
from hanavectordb.utils.query import DEFAULT_DISTANCE_STRATEGY, QueryBuilder
from hanavectordb.utils.results import (
    map_search_rows,
    parse_float_array_from_string,
)
from hanavectordb.utils.sanitize import (
    sanitize_int,
    sanitize_list_float,
    sanitize_metadata_keys,
    sanitize_name,
    sanitize_specific_metadata_columns,
)


logger = logging.getLogger(__name__)

HNSW_M_RANGE = (4, 1000)
HNSW_EF_CONSTRUCTION_RANGE = (1, 100000)
HNSW_EF_SEARCH_RANGE = (1, 100000)


class HanaVectorDB:
    """Interface for a SAP HANA table used as a vector store.

    Args:
        connection: Open DB-API 2.0 connection (``hdbcli.dbapi``). If omitted, a
            connection is opened from ``address``, ``port``, ``user`` and
            ``password``.
        address: HANA host name.
        port: HANA SQL port.
        user: Database user.
        password: Database password.
        distance_strategy: ``"cosine"`` (higher is better) or ``"euclidean"``
            (lower is better).
        table_name: Table holding the documents.
        content_column: NCLOB column with the document text.
        metadata_column: NCLOB column with JSON metadata.
        vector_column: REAL_VECTOR column with the embedding.
        vector_column_length: Fixed vector length, or -1 for dynamic length.
        specific_metadata_columns: Metadata fields stored in their own columns.
        **kwargs: Additional arguments passed to ``dbapi.connect``.

    Raises:
        ConfigurationError: If the distance strategy is not supported.
        InvalidArgumentError: If the vector length or a column name is invalid.

    Example:
        >>> db = HanaVectorDB(
        ...     connection=connection,
        ...     distance_strategy="euclidean",
        ...     specific_metadata_columns=["title"],
        ... )
    """

    def __init__(
        self,
        connection: Any = None,
        address: Optional[str] = None,
        port: int = 443,
        user: Optional[str] = None,
        password: Optional[str] = None,
        distance_strategy: str = DEFAULT_DISTANCE_STRATEGY,
        table_name: str = DEFAULT_TABLE_NAME,
        content_column: str = DEFAULT_CONTENT_COLUMN,
        metadata_column: str = DEFAULT_METADATA_COLUMN,
        vector_column: str = DEFAULT_VECTOR_COLUMN,
        vector_column_length: int = DEFAULT_VECTOR_COLUMN_LENGTH,
        specific_metadata_columns: Optional[Sequence[str]] = None,
        **kwargs,
    ):
        self.table_name = sanitize_name(table_name)
        self.content_column = sanitize_name(content_column)
        self.metadata_column = sanitize_name(metadata_column)
        self.vector_column = sanitize_name(vector_column)
        self.vector_column_length = sanitize_int(vector_column_length, -1)
        self.specific_metadata_columns = sanitize_specific_metadata_columns(
            specific_metadata_columns
        )
        self.query_builder = QueryBuilder(
            table_name=self.table_name,
            content_column=self.content_column,
            metadata_column=self.metadata_column,
            vector_column=self.vector_column,
            distance_strategy=distance_strategy,
            specific_metadata_columns=self.specific_metadata_columns,
        )
        self.distance_strategy = self.query_builder.distance_strategy

        if connection is None:
            try:
                connection = dbapi.connect(
                    address=address, port=port, user=user, password=password, **kwargs
                )
            except Exception as e:
                logger.error(f"Failed to connect to HANA at {address}:{port}: {e}")
                raise
            logger.info(f"Connected to HANA at {address}:{port}")
        self.connection = connection

    def _execute(
        self,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        fetch: bool = False,
    ) -> list[Any]:
        """Execute one statement and optionally fetch all rows.

        Raises:
            ExecutionError: If the driver rejects the statement.
        """
        logger.debug("Executing: %s", sql)
        cursor = self.connection.cursor()
        try:
            if params:
                cursor.execute(sql, list(params))
            else:
                cursor.execute(sql)
            return list(cursor.fetchall()) if fetch else []
        except Exception as e:
            logger.error(f"Statement failed: {e}")
            raise ExecutionError(str(e)) from e
        finally:
            cursor.close()

    def _execute_many(self, sql: str, rows: list[list[Any]]) -> None:
        """Execute one statement for a batch of parameter rows.

        Raises:
            ExecutionError: If the driver rejects the batch.
        """
        logger.debug("Executing batch of %d: %s", len(rows), sql)
        cursor = self.connection.cursor()
        try:
            cursor.executemany(sql, rows)
        except Exception as e:
            logger.error(f"Batch statement failed: {e}")
            raise ExecutionError(str(e)) from e
        finally:
            cursor.close()

    def initialize(self, internal_model_id: Optional[str] = None) -> None:
        """Validate the embedding setup and prepare the table.

        Runs the in-database embedding probe when ``internal_model_id`` is
        given, creates the table if it does not exist, and checks the types of
        the content, metadata and vector columns.

        Args:
            internal_model_id: Model id used with ``VECTOR_EMBEDDING``, if the
                store embeds inside the database.

        Raises:
            ConfigurationError: If the probe fails or a column does not match.
        """
        if internal_model_id is not None:
            self.validate_internal_embedding_function(internal_model_id)
        self.create_table_if_not_exists()
        self.check_column(self.table_name, self.content_column, ["NCLOB", "NVARCHAR"])
        self.check_column(self.table_name, self.metadata_column, ["NCLOB", "NVARCHAR"])
        self.check_column(
            self.table_name,
            self.vector_column,
            ["REAL_VECTOR"],
            self.vector_column_length,
        )
        logger.info(f"Initialized HANA vector table '{self.table_name}'")

    def validate_internal_embedding_function(self, model_id: str) -> None:
        """Check that ``VECTOR_EMBEDDING`` works with ``model_id``.

        Raises:
            ConfigurationError: If no model id is given or the probe fails.
        """
        if not model_id:
            raise ConfigurationError("Internal embedding model id is not set")
        sql = (
            "SELECT TO_NVARCHAR(VECTOR_EMBEDDING('test', 'QUERY', ?)) AS TEST "
            "FROM sys.DUMMY"
        )
        try:
            self._execute(sql, [model_id], fetch=True)
        except ExecutionError as e:
            raise ConfigurationError(
                f"Internal embedding function failed for model '{model_id}': {e}"
            ) from e

    def table_exists(self, table_name: str) -> bool:
        """Return True if ``table_name`` exists in the current schema."""
        sql = (
            "SELECT COUNT(*) AS COUNT FROM SYS.TABLES "
            "WHERE SCHEMA_NAME = CURRENT_SCHEMA AND TABLE_NAME = ?"
        )
        rows = self._execute(sql, [table_name], fetch=True)
        return bool(rows) and rows[0][0] == 1

    def create_table_if_not_exists(self) -> None:
        """Create the document table unless it already exists."""
        if self.table_exists(self.table_name):
            return
        # 0 and -1 both mean dynamic length
        vector_type = "REAL_VECTOR"
        if self.vector_column_length not in (-1, 0):
            vector_type += f"({self.vector_column_length})"
        extra_columns = "".join(
            f', "{column}" NVARCHAR(5000)' for column in self.specific_metadata_columns
        )
        sql = (
            f'CREATE TABLE "{self.table_name}" ('
            f'"{self.content_column}" NCLOB, '
            f'"{self.metadata_column}" NCLOB, '
            f'"{self.vector_column}" {vector_type}{extra_columns})'
        )
        self._execute(sql)
        logger.info(f"Created table '{self.table_name}'")

    def check_column(
        self,
        table_name: str,
        column_name: str,
        column_type: str | Sequence[str],
        column_length: Optional[int] = None,
    ) -> None:
        """Check that a column exists with the expected type and length.

        Args:
            table_name: Table to inspect.
            column_name: Column to inspect.
            column_type: Accepted data type name(s).
            column_length: Expected length. A fixed stored length must equal it,
                so a dynamic store (-1) rejects fixed-length columns. Stored
                lengths of -1 or 0 (no length constraint) always pass.

        Raises:
            ConfigurationError: If the column is missing or does not match.
        """
        sql = (
            "SELECT DATA_TYPE_NAME, LENGTH FROM SYS.TABLE_COLUMNS "
            "WHERE SCHEMA_NAME = CURRENT_SCHEMA AND TABLE_NAME = ? AND COLUMN_NAME = ?"
        )
        rows = self._execute(sql, [table_name, column_name], fetch=True)
        if not rows:
            raise ConfigurationError(f"Column {column_name} does not exist")

        data_type, length = rows[0][0], rows[0][1]
        accepted = [column_type] if isinstance(column_type, str) else list(column_type)
        if data_type not in accepted:
            raise ConfigurationError(
                f"Column {column_name} has the wrong type: {data_type}"
            )
        # a stored length of -1 or 0 means the column has no length constraint
        if (
            column_length is not None
            and length is not None
            and length > 0
            and length != column_length
        ):
            raise ConfigurationError(
                f"Column {column_name} has the wrong length: {length}"
            )

    def create_hnsw_index(
        self,
        m: Optional[int] = None,
        ef_construction: Optional[int] = None,
        ef_search: Optional[int] = None,
        index_name: Optional[str] = None,
    ) -> str:
        """Create an HNSW vector index on the vector column.

        The similarity function follows the distance strategy and the index is
        always built ONLINE. Parameters left as None use the database defaults.

        Args:
            m: Maximum neighbours per graph node, in [4, 1000].
            ef_construction: Candidates considered while building, in [1, 100000].
            ef_search: Minimum candidates for top-k queries, in [1, 100000].
            index_name: Index name, defaults to ``<table>_<function>_idx``.

        Returns:
            The (sanitized) index name.

        Raises:
            InvalidArgumentError: If a parameter is outside its range.
        """
        distance_function = self.query_builder.distance_function
        index_name = sanitize_name(
            index_name or f"{self.table_name}_{distance_function}_idx"
        )

        build_config: dict[str, int] = {}
        search_config: dict[str, int] = {}
        if m is not None:
            build_config["M"] = _sanitize_range("M", m, HNSW_M_RANGE)
        if ef_construction is not None:
            build_config["efConstruction"] = _sanitize_range(
                "efConstruction", ef_construction, HNSW_EF_CONSTRUCTION_RANGE
            )
        if ef_search is not None:
            search_config["efSearch"] = _sanitize_range(
                "efSearch", ef_search, HNSW_EF_SEARCH_RANGE
            )

        sql = (
            f'CREATE HNSW VECTOR INDEX {index_name} ON "{self.table_name}" '
            f'("{self.vector_column}") SIMILARITY FUNCTION {distance_function} '
        )
        if build_config:
            sql += f"BUILD CONFIGURATION '{json.dumps(build_config)}' "
        if search_config:
            sql += f"SEARCH CONFIGURATION '{json.dumps(search_config)}' "
        sql += "ONLINE"

        self._execute(sql)
        logger.info(f"Created HNSW index '{index_name}' on '{self.table_name}'")
        return index_name

    def _split_off_specific_metadata(
        self, metadata: Optional[Mapping[str, Any]]
    ) -> tuple[dict[str, Any], list[Any]]:
        """Return the validated metadata and the values of promoted columns."""
        metadata = sanitize_metadata_keys(metadata)
        special = [metadata.get(column) for column in self.specific_metadata_columns]
        return metadata, special

    def _metadata_rows(
        self, texts: Sequence[str], metadatas: Optional[Sequence[Mapping[str, Any]]]
    ) -> list[tuple[str, str, list[Any]]]:
        if metadatas is not None and len(metadatas) != len(texts):
            raise InvalidArgumentError(
                "Texts and metadatas must have the same length"
            )
        rows = []
        for i, text in enumerate(texts):
            metadata = metadatas[i] if metadatas is not None else None
            metadata, special = self._split_off_specific_metadata(metadata)
            rows.append((text, _dump_metadata(metadata), special))
        return rows

    def add_vectors(
        self,
        texts: Sequence[str],
        metadatas: Optional[Sequence[Mapping[str, Any]]],
        vectors: Sequence[Sequence[float]],
    ) -> int:
        """Insert documents with client-side embeddings in one batch.

        Args:
            texts: Document contents.
            metadatas: Metadata per document, or None.
            vectors: Embedding per document.

        Returns:
            Number of rows submitted.

        Raises:
            InvalidArgumentError: On length mismatch, invalid metadata keys or
                non-numeric vectors. Checked before anything is sent.
            ExecutionError: If the database rejects the batch.
        """
        if len(vectors) != len(texts):
            raise InvalidArgumentError("Vectors and texts must have the same length")
        rows = []
        for (text, metadata_json, special), vector in zip(
            self._metadata_rows(texts, metadatas), vectors
        ):
            values = sanitize_list_float(vector)
            vector_str = f"[{', '.join(str(v) for v in values)}]"
            rows.append([text, metadata_json, vector_str, *special])
        if not rows:
            return 0

        sql = self.query_builder.build_insert("TO_REAL_VECTOR(?)")
        self._execute_many(sql, rows)
        logger.info(f"Inserted {len(rows)} documents into '{self.table_name}'")
        return len(rows)

    def add_texts_with_internal_embedding(
        self,
        texts: Sequence[str],
        metadatas: Optional[Sequence[Mapping[str, Any]]],
        model_id: str,
    ) -> int:
        """Insert documents and let HANA compute their embeddings.

        Returns:
            Number of rows submitted.

        Raises:
            ConfigurationError: If ``model_id`` is empty.
            InvalidArgumentError: On length mismatch or invalid metadata keys.
            ExecutionError: If the database rejects the batch.
        """
        strategy = InternalEmbeddingStrategy(model_id)
        rows = []
        for text, metadata_json, special in self._metadata_rows(texts, metadatas):
            expression = strategy.document_expression(text)
            rows.append([text, metadata_json, *expression.params, *special])
        if not rows:
            return 0

        # the expression SQL is the same for every row, only its params differ
        sql = self.query_builder.build_insert(expression.sql)
        self._execute_many(sql, rows)
        logger.info(
            f"Inserted {len(rows)} documents into '{self.table_name}' "
            f"with model '{model_id}'"
        )
        return len(rows)

    def delete(
        self,
        filter: Optional[Mapping[str, Any]] = None,
        ids: Optional[Sequence[str]] = None,
    ) -> None:
        """Delete all rows matching ``filter``.

        An empty filter ``{}`` deletes every row of the table.

        Raises:
            InvalidArgumentError: If ``ids`` is given (deletion by id is not
                supported) or ``filter`` is None.
        """
        if ids is not None:
            raise InvalidArgumentError("Deletion via IDs is not supported")
        if filter is None:
            raise InvalidArgumentError(
                "Parameter 'filter' is required when calling 'delete'"
            )
        sql, params = self.query_builder.build_delete(filter)
        self._execute(sql, params)
        logger.info(f"Deleted documents from '{self.table_name}'")

    def search(
        self,
        expression: EmbeddingExpression,
        k: int = 4,
        filter: Optional[Mapping[str, Any]] = None,
    ) -> list[tuple[Document, float, list[float]]]:
        """Run a top-k similarity search for an embedding expression.

        Args:
            expression: Vector literal or ``VECTOR_EMBEDDING`` call.
            k: Number of results.
            filter: Optional metadata filter.

        Returns:
            ``(document, score, vector)`` triples in ranking order.

        Raises:
            InvalidArgumentError: If ``k`` or the filter is invalid.
            UnsupportedOperatorError: If the filter uses an unknown operator.
            ExecutionError: If the database rejects the query.
            DecodeError: If a returned row cannot be decoded.
        """
        sql, params = self.query_builder.build_search(expression, k, filter)
        rows = self._execute(sql, params, fetch=True)
        return map_search_rows(rows)

    def search_by_vector(
        self,
        embedding: Sequence[float],
        k: int = 4,
        filter: Optional[Mapping[str, Any]] = None,
    ) -> list[tuple[Document, float, list[float]]]:
        """Run a similarity search for a client-side query vector."""
        return self.search(vector_expression(embedding), k, filter)

    def search_by_query(
        self,
        query: str,
        model_id: str,
        k: int = 4,
        filter: Optional[Mapping[str, Any]] = None,
    ) -> list[tuple[Document, float, list[float]]]:
        """Run a similarity search embedding ``query`` inside the database."""
        expression = InternalEmbeddingStrategy(model_id).query_expression(query)
        return self.search(expression, k, filter)

    def embed_query_internal(self, query: str, model_id: str) -> list[float]:
        """Compute the query embedding with ``VECTOR_EMBEDDING``.

        Raises:
            ExecutionError: If the database rejects the call.
            DecodeError: If the returned vector cannot be parsed.
        """
        expression = InternalEmbeddingStrategy(model_id).query_expression(query)
        sql = f"SELECT TO_NVARCHAR({expression.sql}) AS VECTOR FROM sys.DUMMY"
        rows = self._execute(sql, expression.params, fetch=True)
        if not rows:
            raise ExecutionError("VECTOR_EMBEDDING returned no rows")
        return parse_float_array_from_string(rows[0][0])

    def close(self) -> None:
        """Close the underlying connection."""
        self.connection.close()


def _sanitize_range(name: str, value: Any, bounds: tuple[int, int]) -> int:
    low, high = bounds
    sanitized = sanitize_int(value, low)
    if sanitized > high:
        raise InvalidArgumentError(f"{name} must be in the range [{low}, {high}]")
    return sanitized


def _json_default(value: Any) -> str:
    if isinstance(value, (datetime.date, datetime.datetime)):
        return stringify(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _dump_metadata(metadata: Mapping[str, Any]) -> str:
    """Serialize metadata for the JSON column, writing dates as ISO strings.

    Raises:
        InvalidArgumentError: If a value cannot be represented as JSON.
    """
    try:
        return json.dumps(metadata, default=_json_default)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"Metadata is not JSON serializable: {e}") from e
