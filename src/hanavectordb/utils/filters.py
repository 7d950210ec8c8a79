"""Metadata filter parsing and compilation to HANA SQL predicates.

Filters are JSON-shaped dictionaries in the LangChain style:

    - Property filter: ``{"field": literal}`` or ``{"field": {"$op": value}}``
    - Logical filter: ``{"$and": [filter, ...]}`` / ``{"$or": [filter, ...]}``

Sibling keys of one mapping are combined with AND. Comparators are
``$eq, $ne, $lt, $lte, $gt, $gte, $in, $nin, $between, $like, $contains``;
the same names without the ``$`` prefix are accepted as aliases.

A filter is parsed once into a small tagged union (:class:`LogicalNode`,
:class:`ComparatorNode`, :class:`LiteralNode`) and the compiler walks that tree,
producing a predicate with ``?`` placeholders and the matching parameter list.

Field Access:
    Fields listed as specific (promoted) metadata columns are addressed as
    quoted columns. All other fields are read from the JSON metadata column
    with ``JSON_VALUE("<metadata column>", '$.<field>')``.

Keyword Search:
    ``$contains`` compiles to a HANA full-text probe,
    ``SCORE(? IN ("<field>" EXACT SEARCH MODE 'text')) > 0``. The probe needs a
    real column, so fields that are neither the content column nor a promoted
    column must be projected out of the JSON first; see
    :func:`extract_keyword_search_columns`.

Example:
    >>> compiler = FilterCompiler("VEC_META", specific_metadata_columns=["a", "b"])
    >>> compiler.compile({"$and": [{"a": 1}, {"b": "x"}]})
    ('("a" = ?) AND ("b" = ?)', ['1', 'x'])
"""

import datetime
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional, Union

from hanavectordb.exceptions import InvalidArgumentError, UnsupportedOperatorError
from hanavectordb.utils.sanitize import is_valid_identifier
from hanavectordb.utils.statement import StatementBuilder


COMPARISONS_TO_SQL: dict[str, str] = {
    "$eq": "=",
    "$ne": "<>",
    "$lt": "<",
    "$lte": "<=",
    "$gt": ">",
    "$gte": ">=",
}

IN_OPERATORS_TO_SQL: dict[str, str] = {
    "$in": "IN",
    "$nin": "NOT IN",
}

BETWEEN_OPERATOR = "$between"
LIKE_OPERATOR = "$like"
CONTAINS_OPERATOR = "$contains"

LOGICAL_OPERATORS_TO_SQL: dict[str, str] = {
    "$and": "AND",
    "$or": "OR",
}

SUPPORTED_COMPARATORS = frozenset(
    [
        *COMPARISONS_TO_SQL,
        *IN_OPERATORS_TO_SQL,
        BETWEEN_OPERATOR,
        LIKE_OPERATOR,
        CONTAINS_OPERATOR,
    ]
)

FilterType = dict[str, Any]


@dataclass(frozen=True)
class LiteralNode:
    """Equality against a bare literal, e.g. ``{"year": 2024}``."""

    field: str
    value: Any


@dataclass(frozen=True)
class ComparatorNode:
    """A single comparator applied to a field, e.g. ``{"year": {"$gt": 2020}}``."""

    field: str
    operator: str
    value: Any


@dataclass(frozen=True)
class LogicalNode:
    """``$and`` / ``$or`` over operands; each operand is a conjunction of clauses."""

    operator: str
    operands: tuple[tuple["FilterNode", ...], ...]


FilterNode = Union[LiteralNode, ComparatorNode, LogicalNode]


def _normalize_operator(key: str) -> str:
    return key if key.startswith("$") else f"${key}"


def _is_logical_key(key: str) -> bool:
    return _normalize_operator(key) in LOGICAL_OPERATORS_TO_SQL


def _check_field(field: str) -> str:
    if not is_valid_identifier(field):
        raise InvalidArgumentError(f"Invalid filter field name {field!r}")
    return field


def parse_filter(filter: Optional[Mapping[str, Any]]) -> tuple[FilterNode, ...]:
    """Parse a filter mapping into a tuple of clauses combined with AND.

    Args:
        filter: Filter dictionary, or None.

    Returns:
        The parsed clauses in key order. Empty for None or ``{}``.

    Raises:
        InvalidArgumentError: If the filter is not well formed.
        UnsupportedOperatorError: If an unknown operator is used.
    """
    if filter is None:
        return ()
    if not isinstance(filter, Mapping):
        raise InvalidArgumentError(
            f"Expected filter to be a mapping, got {type(filter).__name__}"
        )

    clauses: list[FilterNode] = []
    for key, value in filter.items():
        if not isinstance(key, str):
            raise InvalidArgumentError(f"Filter keys must be strings, got {key!r}")
        if _is_logical_key(key):
            clauses.append(_parse_logical(_normalize_operator(key), value))
        elif key.startswith("$"):
            raise UnsupportedOperatorError(f"Unsupported logical operator: {key}")
        else:
            clauses.append(_parse_property(_check_field(key), value))
    return tuple(clauses)


def _parse_logical(operator: str, operands: Any) -> LogicalNode:
    if isinstance(operands, (str, bytes)) or not isinstance(operands, Sequence):
        raise InvalidArgumentError(f"Operator '{operator}' expects a list of filters")
    if len(operands) == 0:
        raise InvalidArgumentError(f"Operator '{operator}' expects at least one filter")
    return LogicalNode(
        operator=operator,
        operands=tuple(parse_filter(operand) for operand in operands),
    )


def _parse_property(field: str, value: Any) -> FilterNode:
    if isinstance(value, Mapping):
        if len(value) != 1:
            raise InvalidArgumentError(
                f"Filter on '{field}' must contain exactly one operator, "
                f"got {list(value)}"
            )
        operator, operand = next(iter(value.items()))
        operator = _normalize_operator(str(operator))
        if operator not in SUPPORTED_COMPARATORS:
            raise UnsupportedOperatorError(f"Unsupported operator: {operator}")
        return ComparatorNode(field=field, operator=operator, value=operand)
    return LiteralNode(field=field, value=value)


def stringify(value: Any) -> str:
    """Render a filter value the way the database driver expects it as a string.

    Raises:
        InvalidArgumentError: If ``value`` is None.
    """
    if value is None:
        raise InvalidArgumentError("Filter values must not be None")
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_date_value(value: Any) -> bool:
    return isinstance(value, Mapping) and value.get("type") == "date" and "date" in value


class FilterCompiler:
    """Compiles filter dictionaries into parameterized WHERE predicates.

    Args:
        metadata_column: Name of the JSON metadata column (already sanitized).
        specific_metadata_columns: Promoted metadata fields stored as columns.
    """

    def __init__(
        self,
        metadata_column: str,
        specific_metadata_columns: Optional[Sequence[str]] = None,
    ) -> None:
        self.metadata_column = metadata_column
        self.specific_metadata_columns = list(specific_metadata_columns or [])

    def compile(self, filter: Optional[Mapping[str, Any]]) -> tuple[str, list[Any]]:
        """Compile a filter into ``(predicate, params)``.

        Returns ``("", [])`` for None or an empty filter.
        """
        return self.compile_clauses(parse_filter(filter)).build()

    def compile_clauses(self, clauses: Sequence[FilterNode]) -> StatementBuilder:
        parts = []
        for node in clauses:
            part = self._compile_node(node)
            if part:
                parts.append((node, part))
        if len(parts) == 1:
            return parts[0][1]
        # a logical node next to siblings keeps its own precedence
        return StatementBuilder().join(
            " AND ",
            (
                StatementBuilder().join("", [part], wrap=True)
                if isinstance(node, LogicalNode)
                else part
                for node, part in parts
            ),
        )

    def accessor(self, field: str) -> str:
        """Return the SQL expression that reads ``field``."""
        if field in self.specific_metadata_columns:
            return f'"{field}"'
        return f"JSON_VALUE(\"{self.metadata_column}\", '$.{field}')"

    def _compile_node(self, node: FilterNode) -> StatementBuilder:
        if isinstance(node, LogicalNode):
            return StatementBuilder().join(
                f" {LOGICAL_OPERATORS_TO_SQL[node.operator]} ",
                (self.compile_clauses(operand) for operand in node.operands),
                wrap=True,
            )
        if isinstance(node, LiteralNode):
            return self._compile_literal(node)
        return self._compile_comparator(node)

    def _compile_literal(self, node: LiteralNode) -> StatementBuilder:
        value = node.value
        if isinstance(value, bool):
            param = stringify(value)
        elif isinstance(value, int):
            param = str(value)
        elif isinstance(value, float):
            # implicit float equality is not allowed
            if not value.is_integer():
                raise InvalidArgumentError(
                    f"Unsupported filter data-type: wrong number type for key {node.field}"
                )
            param = str(int(value))
        elif isinstance(value, str):
            param = value
        else:
            raise InvalidArgumentError(
                f"Unsupported filter data-type: {type(value).__name__} "
                f"for key {node.field}"
            )
        return StatementBuilder().append(f"{self.accessor(node.field)} = ?", [param])

    def _compile_comparator(self, node: ComparatorNode) -> StatementBuilder:
        operator, value = node.operator, node.value
        accessor = self.accessor(node.field)

        if operator in COMPARISONS_TO_SQL:
            sql_operator = COMPARISONS_TO_SQL[operator]
            if value is None:
                raise InvalidArgumentError(
                    f"Operator '{operator}' expects a non-undefined value."
                )
            if isinstance(value, bool):
                return StatementBuilder().append(
                    f"{accessor} {sql_operator} ?", [stringify(value)]
                )
            if isinstance(value, (int, float)):
                return StatementBuilder().append(
                    f"{accessor} {sql_operator} CAST(? as float)", [value]
                )
            if _is_date_value(value):
                date = value["date"]
                if isinstance(date, (datetime.date, datetime.datetime)):
                    date = date.isoformat()
                return StatementBuilder().append(
                    f"{accessor} {sql_operator} CAST(? as DATE)", [date]
                )
            return StatementBuilder().append(f"{accessor} {sql_operator} ?", [value])

        if operator == BETWEEN_OPERATOR:
            if (
                isinstance(value, (str, bytes))
                or not isinstance(value, Sequence)
                or len(value) != 2
            ):
                raise InvalidArgumentError(f"Operator '{operator}' expects two values.")
            low, high = value
            return StatementBuilder().append(
                f"{accessor} BETWEEN ? AND ?", [stringify(low), stringify(high)]
            )

        if operator == LIKE_OPERATOR:
            if value is None:
                raise InvalidArgumentError(
                    f"Operator '{operator}' expects a non-undefined value."
                )
            return StatementBuilder().append(f"{accessor} LIKE ?", [stringify(value)])

        if operator in IN_OPERATORS_TO_SQL:
            sql_operator = IN_OPERATORS_TO_SQL[operator]
            if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
                raise InvalidArgumentError(
                    f"Unsupported value for {sql_operator}: {value!r}"
                )
            if len(value) == 0:
                raise InvalidArgumentError(
                    f"Operator '{operator}' expects at least one value."
                )
            placeholders = ",".join("?" * len(value))
            return StatementBuilder().append(
                f"{accessor} {sql_operator} ({placeholders})",
                [stringify(entry) for entry in value],
            )

        # only $contains is left after parsing
        if value is None or isinstance(value, (Mapping, list, tuple, set)):
            raise InvalidArgumentError(
                f"Operator '{operator}' expects a single search term."
            )
        return StatementBuilder().append(
            f"SCORE(? IN (\"{node.field}\" EXACT SEARCH MODE 'text')) > 0",
            [stringify(value)],
        )


def _iter_comparators(clauses: Sequence[FilterNode]):
    for node in clauses:
        if isinstance(node, LogicalNode):
            for operand in node.operands:
                yield from _iter_comparators(operand)
        elif isinstance(node, ComparatorNode):
            yield node


def extract_keyword_search_columns(
    filter: Optional[Mapping[str, Any]],
    content_column: str,
    specific_metadata_columns: Optional[Sequence[str]] = None,
) -> list[str]:
    """Find metadata fields that need projecting for ``$contains`` searches.

    Args:
        filter: Filter dictionary, or None.
        content_column: Name of the document content column.
        specific_metadata_columns: Promoted metadata fields stored as columns.

    Returns:
        Distinct field names in first-seen order, excluding the content column
        and promoted columns.
    """
    return keyword_search_columns(
        parse_filter(filter), content_column, specific_metadata_columns
    )


def keyword_search_columns(
    clauses: Sequence[FilterNode],
    content_column: str,
    specific_metadata_columns: Optional[Sequence[str]] = None,
) -> list[str]:
    """Same as :func:`extract_keyword_search_columns` for parsed clauses."""
    promoted = set(specific_metadata_columns or [])
    columns: dict[str, None] = {}
    for node in _iter_comparators(clauses):
        if (
            node.operator == CONTAINS_OPERATOR
            and node.field != content_column
            and node.field not in promoted
        ):
            columns.setdefault(node.field)
    return list(columns)
