"""Similarity search statement builder.

Assembles the full retrieval statement for one top-k nearest neighbour query:

    [WITH intermediate_result AS (SELECT *, JSON_VALUE(...) AS "f" FROM "T")]
    SELECT TOP <k> "<content>", "<metadata>", TO_NVARCHAR("<vector>") AS VECTOR,
           <distance function>("<vector>", <embedding expression>) AS CS
    FROM <source> [WHERE <predicate>] ORDER BY CS <direction>

Parameters are ordered as the placeholders appear: those of the embedding
expression first, then those of the predicate.
"""

import logging
from typing import Any, Mapping, Optional, Sequence

from hanavectordb.exceptions import ConfigurationError
from hanavectordb.utils.embedding import EmbeddingExpression
from hanavectordb.utils.filters import (
    FilterCompiler,
    keyword_search_columns,
    parse_filter,
)
from hanavectordb.utils.sanitize import sanitize_int
from hanavectordb.utils.statement import StatementBuilder


logger = logging.getLogger(__name__)

# distance strategy -> (HANA function, ORDER BY direction)
HANA_DISTANCE_FUNCTION: dict[str, tuple[str, str]] = {
    "cosine": ("COSINE_SIMILARITY", "DESC"),
    "euclidean": ("L2DISTANCE", "ASC"),
}

DEFAULT_DISTANCE_STRATEGY = "cosine"

INTERMEDIATE_TABLE_NAME = "intermediate_result"


def validate_distance_strategy(distance_strategy: str) -> str:
    """Return the normalized strategy name or raise ConfigurationError."""
    strategy = str(distance_strategy).lower()
    if strategy not in HANA_DISTANCE_FUNCTION:
        raise ConfigurationError(f"Unsupported distance_strategy: {distance_strategy}")
    return strategy


class QueryBuilder:
    """Builds parameterized similarity search statements for one table layout.

    Args:
        table_name: Sanitized table name.
        content_column: Sanitized content column name.
        metadata_column: Sanitized JSON metadata column name.
        vector_column: Sanitized REAL_VECTOR column name.
        distance_strategy: ``"cosine"`` or ``"euclidean"``.
        specific_metadata_columns: Promoted metadata columns.

    Raises:
        ConfigurationError: If the distance strategy is not supported.
    """

    def __init__(
        self,
        table_name: str,
        content_column: str,
        metadata_column: str,
        vector_column: str,
        distance_strategy: str = DEFAULT_DISTANCE_STRATEGY,
        specific_metadata_columns: Optional[Sequence[str]] = None,
    ) -> None:
        self.table_name = table_name
        self.content_column = content_column
        self.metadata_column = metadata_column
        self.vector_column = vector_column
        self.distance_strategy = validate_distance_strategy(distance_strategy)
        self.specific_metadata_columns = list(specific_metadata_columns or [])
        self.filter_compiler = FilterCompiler(
            metadata_column=self.metadata_column,
            specific_metadata_columns=self.specific_metadata_columns,
        )

    @property
    def distance_function(self) -> str:
        return HANA_DISTANCE_FUNCTION[self.distance_strategy][0]

    @property
    def order_direction(self) -> str:
        return HANA_DISTANCE_FUNCTION[self.distance_strategy][1]

    def create_where_clause(
        self, filter: Optional[Mapping[str, Any]]
    ) -> tuple[str, list[Any]]:
        """Compile ``filter`` into `` WHERE <predicate>`` or an empty string."""
        return self._where_from_clauses(parse_filter(filter))

    def _where_from_clauses(self, clauses) -> tuple[str, list[Any]]:
        predicate, params = self.filter_compiler.compile_clauses(clauses).build()
        if not predicate:
            return "", []
        return f" WHERE {predicate}", params

    def create_metadata_projection(self, projected_columns: Sequence[str]) -> str:
        """Build the WITH clause exposing JSON metadata fields as columns.

        Each field becomes `JSON_VALUE("<metadata>", '$.<field>') AS "<field>"`
        over the base table, so full-text probes can address it by name.
        """
        columns = ", ".join(
            f"{self.filter_compiler.accessor(column)} AS \"{column}\""
            for column in projected_columns
        )
        return (
            f"WITH {INTERMEDIATE_TABLE_NAME} AS ("
            f"SELECT *, {columns} "
            f'FROM "{self.table_name}")'
        )

    def build_search(
        self,
        expression: EmbeddingExpression,
        k: Any,
        filter: Optional[Mapping[str, Any]] = None,
    ) -> tuple[str, list[Any]]:
        """Build the top-k similarity statement.

        Args:
            expression: Embedding expression for the query vector.
            k: Number of rows to return, a non-negative integer.
            filter: Optional metadata filter.

        Returns:
            Tuple of (statement text, parameters).

        Raises:
            InvalidArgumentError: If ``k`` is invalid or the filter is malformed.
            UnsupportedOperatorError: If the filter uses an unknown operator.
        """
        top_k = sanitize_int(k)

        clauses = parse_filter(filter)
        projected = keyword_search_columns(
            clauses, self.content_column, self.specific_metadata_columns
        )
        statement = StatementBuilder()
        source = f'"{self.table_name}"'
        if projected:
            statement.append(self.create_metadata_projection(projected) + " ")
            source = INTERMEDIATE_TABLE_NAME

        statement.append(
            f'SELECT TOP {top_k} "{self.content_column}", "{self.metadata_column}", '
            f'TO_NVARCHAR("{self.vector_column}") AS VECTOR, '
            f'{self.distance_function}("{self.vector_column}", {expression.sql}) AS CS '
            f"FROM {source}",
            expression.params,
        )
        where_str, where_params = self._where_from_clauses(clauses)
        statement.append(where_str, where_params)
        statement.append(f" ORDER BY CS {self.order_direction}")

        sql, params = statement.build()
        logger.debug("Built similarity search: %s", sql)
        return sql, params

    def build_delete(self, filter: Mapping[str, Any]) -> tuple[str, list[Any]]:
        """Build a DELETE statement restricted by ``filter``."""
        where_str, params = self.create_where_clause(filter)
        return f'DELETE FROM "{self.table_name}"{where_str}', params

    def build_insert(self, vector_sql: str) -> str:
        """Build the INSERT statement for one row shape.

        Args:
            vector_sql: Expression for the vector column, e.g.
                ``TO_REAL_VECTOR(?)``.
        """
        extra_columns = "".join(f', "{c}"' for c in self.specific_metadata_columns)
        extra_placeholders = ", ?" * len(self.specific_metadata_columns)
        return (
            f'INSERT INTO "{self.table_name}" '
            f'("{self.content_column}", "{self.metadata_column}", '
            f'"{self.vector_column}"{extra_columns}) '
            f"VALUES (?, ?, {vector_sql}{extra_placeholders})"
        )
